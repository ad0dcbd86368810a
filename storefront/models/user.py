from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship, validates
from storefront.core.constants import UserStatus
from storefront.core.database import Base
from storefront.models.base import IDMixin, TimestampMixin


class User(IDMixin, TimestampMixin, Base):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    password_hash = Column(String(255), nullable=False)

    # Verification
    email_verified = Column(Boolean, default=False, nullable=False)
    phone_verified = Column(Boolean, default=False, nullable=False)

    # Account status
    status = Column(String(20), default=UserStatus.ACTIVE.value, index=True, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    last_login = Column(DateTime, nullable=True)

    sessions = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    @validates("email")
    def normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("phone")
    def normalize_phone(self, key, value):
        return value or None
