"""
Credential lifecycle: registration, email verification, login and password reset.

Verification state per user is Unverified -> Verified and never goes back.
Reset state is transient: forgot-password arms a hashed code with an absolute
expiry, and a successful reset (or a failed email send) disarms it.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import Settings
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.email_service import EmailService
from app.utils.errors import (
    ConflictError,
    DeliveryError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    UnverifiedError,
    ValidationError,
)
from app.utils.security import (
    PASSWORD_MAX_BYTES,
    create_access_token,
    generate_otp,
    hash_otp,
    hash_password,
    otp_matches,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, settings: Settings, mailer: EmailService):
        self.db = db
        self.settings = settings
        self.mailer = mailer

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def _check_password_length(self, password: str) -> None:
        if len(password) < self.settings.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.settings.password_min_length} characters"
            )
        if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def register(self, payload: UserCreate) -> str:
        """
        Create an unverified user and email them a verification code.

        The insert and the email send are two separate steps. If the send
        fails the user row is deleted again so the caller can simply retry;
        a crash between the two leaves an unverified row behind, which the
        maintenance scheduler purges later.
        """
        self._check_password_length(payload.password)

        if self._get_by_email(payload.email):
            raise ConflictError("User already exists")

        code = generate_otp()
        new_user = User(
            full_name=payload.full_name,
            email=payload.email,
            hashed_password=hash_password(payload.password),
            role=payload.profession,
            gender=payload.gender,
            age=payload.age,
            is_verified=False,
            verification_token=hash_otp(code),
        )
        self.db.add(new_user)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent registration for the same email won the unique constraint
            self.db.rollback()
            raise ConflictError("User already exists")
        self.db.refresh(new_user)
        logger.info(f"Registered user {new_user.id} ({new_user.email}), awaiting verification")

        try:
            self.mailer.send_verification_code(new_user.email, code)
        except DeliveryError:
            self._rollback_registration(new_user)
            raise

        return "User registered successfully. Please check your email for the verification code."

    def _rollback_registration(self, user: User) -> None:
        try:
            self.db.delete(user)
            self.db.commit()
            logger.warning(f"Verification email failed; removed user {user.email}")
        except Exception:
            self.db.rollback()
            logger.exception(f"Could not remove user {user.email} after failed verification email")

    def verify_email(self, email: str, otp: str) -> None:
        user = self._get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        if not otp_matches(otp, user.verification_token):
            raise InvalidTokenError("Invalid verification code")

        user.is_verified = True
        user.verification_token = None
        self.db.commit()
        logger.info(f"User {user.id} verified their email")

    def login(self, email: str, password: str) -> Tuple[str, User]:
        user = self._get_by_email(email)
        # Always run one bcrypt check so unknown emails cost the same as wrong passwords
        password_ok = verify_password(password, user.hashed_password if user else None)
        if not user or not password_ok:
            logger.info(f"Failed login for {email}")
            raise InvalidCredentialsError("Invalid email or password")

        if not user.is_verified:
            raise UnverifiedError("Please verify your email before logging in")

        token = create_access_token(user.id, self.settings)
        return token, user

    def forgot_password(self, email: str) -> None:
        user = self._get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        code = generate_otp()
        expires_minutes = self.settings.reset_token_expire_minutes
        user.reset_password_token = hash_otp(code)
        user.reset_password_expires = datetime.utcnow() + timedelta(minutes=expires_minutes)
        self.db.commit()

        try:
            self.mailer.send_password_reset_code(user.email, code, expires_minutes)
        except DeliveryError:
            self._clear_reset_token(user)
            raise

        logger.info(f"Password reset code issued for user {user.id}")

    def _clear_reset_token(self, user: User) -> None:
        try:
            user.reset_password_token = None
            user.reset_password_expires = None
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Could not clear reset code for {user.email} after failed email")

    def reset_password(self, email: str, otp: str, new_password: str) -> str:
        self._check_password_length(new_password)

        user = self.db.query(User).filter(
            User.email == email,
            User.reset_password_token == hash_otp(otp),
            User.reset_password_expires > datetime.utcnow(),
        ).first()
        if not user:
            raise InvalidTokenError("Invalid or expired reset code")

        user.hashed_password = hash_password(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        self.db.commit()
        logger.info(f"Password reset for user {user.id}")

        return create_access_token(user.id, self.settings)
