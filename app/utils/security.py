# app/utils/security.py
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from app.config.settings import Settings
from app.utils.errors import UnauthenticatedError

OTP_LENGTH = 6

# bcrypt only reads the first 72 bytes and newer releases reject anything longer
PASSWORD_MAX_BYTES = 72

# Compared against when the user does not exist so both login paths cost one bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt()).decode("utf-8")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against a bcrypt hash; a missing hash still costs one bcrypt round."""
    candidate = (hashed_password or _DUMMY_HASH).encode("utf-8")
    try:
        matched = bcrypt.checkpw(password.encode("utf-8"), candidate)
    except ValueError:
        # Malformed stored hash
        return False
    return matched and hashed_password is not None


def generate_otp() -> str:
    """Random numeric one-time code with no leading-zero loss (100000-999999)."""
    lower = 10 ** (OTP_LENGTH - 1)
    return str(lower + secrets.randbelow(9 * lower))


def hash_otp(code: str) -> str:
    return hashlib.sha256(code.strip().encode("utf-8")).hexdigest()


def otp_matches(code: str, stored_hash: Optional[str]) -> bool:
    if not stored_hash:
        return False
    return hmac.compare_digest(hash_otp(code), stored_hash)


def create_access_token(user_id: int, settings: Settings, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
    payload = {"sub": str(user_id), "iat": now, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """Validate signature and expiry and return the user id carried in the token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise UnauthenticatedError("Invalid or expired token") from exc

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise UnauthenticatedError("Invalid token subject") from exc
