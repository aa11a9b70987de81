from datetime import datetime, timedelta, timezone
from typing import Optional, Any, Tuple
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings


# Password hashing context with multi-algorithm support
# - argon2 is the default for new hashes
# - bcrypt hashes are still verified and flagged for rehash on login
pwd_context = CryptContext(
    schemes=["argon2", "bcrypt"],
    default="argon2",
    deprecated=["bcrypt"],
)


def get_password_hash(password: str) -> str:
    """Hash a password using the default (argon2) scheme."""
    return pwd_context.hash(password)


def verify_and_check_needs_rehash(plain_password: str, hashed_password: str) -> Tuple[bool, bool]:
    """
    Verify password and check if the hash needs to be upgraded.

    Returns:
        Tuple of (is_valid, needs_rehash)
        - is_valid: True if password matches
        - needs_rehash: True if password should be re-hashed (e.g., legacy bcrypt)
    """
    try:
        is_valid = pwd_context.verify(plain_password, hashed_password)
        if is_valid:
            return (True, pwd_context.needs_update(hashed_password))
        return (False, False)
    except (ValueError, TypeError):
        return (False, False)


def create_access_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (user ID)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include (role, email)

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
        "jti": str(uuid.uuid4()),
        "type": "access"
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded token payload or None if invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None


def verify_access_token(token: str) -> Optional[str]:
    """
    Verify an access token and return the subject (user ID).

    Returns:
        User ID string or None if invalid
    """
    payload = decode_token(token)
    if payload is None:
        return None

    if payload.get("type") != "access":
        return None

    return payload.get("sub")
