from typing import Optional, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.password_policy import validate_password_strength
from storefront.core.security import (
    dummy_password_hash,
    hash_password,
    needs_rehash,
    verify_password,
)
from storefront.models.user import User
from storefront.schemas.auth import RegisterRequest, UserResponse
from storefront.services.session_service import IssuedSession, SessionService
from storefront.utils.errors import (
    AccountInactiveError,
    InvalidCredentialsError,
    InvalidCurrentPasswordError,
    InvalidEmailError,
    InvalidPhoneError,
    MissingFieldsError,
    UserAlreadyExistsError,
    WeakPasswordError,
)
from storefront.utils.helpers import utcnow
from storefront.utils.validators import find_missing, is_valid_email, is_valid_phone

logger = logging.getLogger(__name__)

REGISTER_FIELDS = ("email", "password", "firstName", "lastName", "phone")
SIGNIN_FIELDS = ("email", "password")


def serialize_user(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:

    @staticmethod
    def register(
        db: Session,
        payload: RegisterRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[User, IssuedSession]:
        """
        Create an account and sign it in
        - Required fields, then email shape, password policy, phone shape
        - Case-insensitive uniqueness
        - Session issued for the new user
        """
        missing = find_missing(payload.model_dump(by_alias=True), REGISTER_FIELDS)
        if missing:
            raise MissingFieldsError(missing)

        email = normalize_email(payload.email)
        if not is_valid_email(email):
            raise InvalidEmailError()

        result = validate_password_strength(payload.password)
        if not result.valid:
            raise WeakPasswordError(result.errors, result.strength.value)

        phone = payload.phone.strip()
        if not is_valid_phone(phone):
            raise InvalidPhoneError()

        if db.query(User.id).filter(User.email == email).first():
            raise UserAlreadyExistsError()

        user = User(
            email=email,
            phone=phone,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            password_hash=hash_password(payload.password),
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration for the same email
            db.rollback()
            raise UserAlreadyExistsError()
        db.refresh(user)

        issued = SessionService.create(
            db,
            user.id,
            user_agent=user_agent,
            ip_address=ip_address,
            ttl_days=settings.SESSION_TTL_DAYS,
        )
        logger.info(f"User registered: {user.id}")
        return user, issued

    @staticmethod
    def signin(
        db: Session,
        email: Optional[str],
        password: Optional[str],
        remember_me: bool = False,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[User, IssuedSession]:
        """
        Email/password sign-in
        - Unknown email and wrong password fail identically
        - Non-active accounts are refused even with correct credentials
        """
        missing = find_missing({"email": email, "password": password}, SIGNIN_FIELDS)
        if missing:
            raise MissingFieldsError(missing)

        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if user is None:
            # Burn the same hashing cost as a real mismatch
            verify_password(password, dummy_password_hash())
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountInactiveError(user.status)

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
            logger.info(f"Password hash upgraded for user {user.id}")

        ttl_days = settings.SESSION_REMEMBER_ME_TTL_DAYS if remember_me else settings.SESSION_TTL_DAYS
        issued = SessionService.create(
            db,
            user.id,
            user_agent=user_agent,
            ip_address=ip_address,
            ttl_days=ttl_days,
        )

        user.last_login = utcnow()
        db.commit()

        logger.info(f"User signed in: {user.id}")
        return user, issued

    @staticmethod
    def signout(db: Session, token: Optional[str]) -> bool:
        """Delete the session behind `token`, if any. Never fails on a missing session."""
        if not token:
            return False
        session = SessionService.fetch_by_token(db, token)
        if session is None:
            return False
        return SessionService.delete(db, session.id)

    @staticmethod
    def change_password(
        db: Session,
        user: User,
        current_password: Optional[str],
        new_password: Optional[str],
        keep_session_id: Optional[str] = None,
    ) -> int:
        """Swap the password and revoke every other session. Returns how many were revoked."""
        missing = find_missing(
            {"currentPassword": current_password, "newPassword": new_password},
            ("currentPassword", "newPassword"),
        )
        if missing:
            raise MissingFieldsError(missing)

        if not verify_password(current_password, user.password_hash):
            raise InvalidCurrentPasswordError()

        result = validate_password_strength(new_password)
        if not result.valid:
            raise WeakPasswordError(result.errors, result.strength.value)

        user.password_hash = hash_password(new_password)
        db.commit()

        revoked = SessionService.delete_all_for_user(db, user.id, keep_session_id=keep_session_id)
        logger.info(f"Password changed for user {user.id}, revoked {revoked} session(s)")
        return revoked

    @staticmethod
    def email_available(db: Session, email: Optional[str]) -> bool:
        if not email or not email.strip():
            raise MissingFieldsError(["email"])
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidEmailError()
        return db.query(User.id).filter(User.email == email).first() is None
