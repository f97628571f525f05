import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt, JOSEError, JWTError

from app.config import get_settings
from app.utils.exceptions import InternalFailureError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10
# bcrypt only uses the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

# Values a client may send when its cookie was serialised from an empty variable
PLACEHOLDER_TOKENS = {"null", "undefined"}


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_session_token(user_id: str, now: Optional[datetime] = None) -> str:
    """
    Create a signed session token for a user.

    The token carries only the user identifier plus issue and expiry times.

    Args:
        user_id: Identifier to embed
        now: Issue time, defaults to the current UTC time

    Returns:
        Encoded JWT string

    Raises:
        InternalFailureError: If the token cannot be signed
    """
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=settings.TOKEN_TTL_SECONDS),
    }
    try:
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    except JOSEError as e:
        logger.error(f"Failed to sign session token: {e}")
        raise InternalFailureError("Could not sign session token")


def decode_session_token(token: Optional[str]) -> Optional[str]:
    """
    Verify a session token and return the embedded user identifier.

    Returns None for empty, placeholder, malformed, tampered or expired
    tokens instead of raising.
    """
    if not token or token in PLACEHOLDER_TOKENS:
        return None

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Session token rejected: {e}")
        return None

    user_id = payload.get("userId")
    if not isinstance(user_id, str) or not user_id:
        logger.debug("Session token rejected: missing userId claim")
        return None

    return user_id
