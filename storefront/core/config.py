import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings:
    ENV: str = os.getenv("ENV", "local")
    APP_NAME: str = os.getenv("APP_NAME", "Eterno Storefront")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SERVER_HOST: str = os.getenv("SERVER_HOST", "127.0.0.1")
    SERVER_PORT: int = int(os.getenv("SERVER_PORT", 8000))

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))
    DATABASE_AUTO_CREATE: bool = os.getenv("DATABASE_AUTO_CREATE", "True").lower() == "true"

    # Sessions / cookies
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "eterno_session")
    COOKIE_DOMAIN: Optional[str] = os.getenv("COOKIE_DOMAIN")
    SESSION_TTL_DAYS: int = int(os.getenv("SESSION_TTL_DAYS", 7))
    SESSION_REMEMBER_ME_TTL_DAYS: int = int(os.getenv("SESSION_REMEMBER_ME_TTL_DAYS", 30))
    SESSION_SLIDING_ENABLED: bool = os.getenv("SESSION_SLIDING_ENABLED", "True").lower() == "true"
    SESSION_ACTIVITY_TOUCH_SECONDS: int = int(os.getenv("SESSION_ACTIVITY_TOUCH_SECONDS", 60))
    SESSION_SWEEP_INTERVAL_SECONDS: int = int(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", 3600))

    # Password hashing (argon2)
    PASSWORD_HASH_ROUNDS: int = int(os.getenv("PASSWORD_HASH_ROUNDS", 3))
    PASSWORD_HASH_MEMORY_KIB: int = int(os.getenv("PASSWORD_HASH_MEMORY_KIB", 65536))

    # CORS
    BACKEND_CORS_ORIGINS: Optional[str] = os.getenv("BACKEND_CORS_ORIGINS")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_BACKEND: str = os.getenv("RATE_LIMIT_BACKEND", "memory")
    RATE_LIMIT_AUTH_REQUESTS: int = int(os.getenv("RATE_LIMIT_AUTH_REQUESTS", 5))
    RATE_LIMIT_AUTH_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_AUTH_PERIOD_SECONDS", 60))
    RATE_LIMIT_USER_REQUESTS: int = int(os.getenv("RATE_LIMIT_USER_REQUESTS", 100))
    RATE_LIMIT_USER_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_USER_PERIOD_SECONDS", 60))
    RATE_LIMIT_PUBLIC_REQUESTS: int = int(os.getenv("RATE_LIMIT_PUBLIC_REQUESTS", 300))
    RATE_LIMIT_PUBLIC_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PUBLIC_PERIOD_SECONDS", 60))
    RATE_LIMIT_CLEANUP_SECONDS: int = int(os.getenv("RATE_LIMIT_CLEANUP_SECONDS", 300))
    TRUST_PROXY_HEADERS: bool = os.getenv("TRUST_PROXY_HEADERS", "False").lower() == "true"

    # Redis / Celery
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", REDIS_URL)

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"



settings = Settings()
