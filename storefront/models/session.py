"""User session model backing cookie-based authentication."""
import uuid
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from storefront.core.database import Base
from storefront.utils.helpers import utcnow


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # SHA-256 of the bearer token; the raw token only lives in the client's cookie
    token_hash = Column(String(64), nullable=False, unique=True, index=True)

    # Device metadata
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)

    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_activity_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="sessions")

    def is_expired(self, now) -> bool:
        return self.expires_at < now

    def __repr__(self):
        return f"<UserSession {self.id} user={self.user_id}>"
