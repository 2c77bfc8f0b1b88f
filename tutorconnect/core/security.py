"""
Security utilities for password hashing, access tokens and reset tokens.

Passwords are hashed with bcrypt through passlib. Access tokens are HS256 JWTs
signed with python-jose and carry ``userId`` and ``role`` claims. Password reset
tokens are random hex strings of which only the sha256 digest is persisted.
"""

import hashlib
import re
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from tutorconnect.core.logging_config import get_logger
from tutorconnect.server.core.config import settings

logger = get_logger(__name__)

PASSWORD_MIN_LENGTH = 8
RESET_TOKEN_BYTES = 32
RESET_TOKEN_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


class InvalidTokenError(Exception):
    """Raised when an access token cannot be decoded or has expired."""


@lru_cache(maxsize=1)
def get_password_context() -> CryptContext:
    """Password hashing context configured with the cost factor from settings."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.auth.bcrypt_rounds)


def hash_password(password: str) -> str:
    return get_password_context().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored hash; malformed hashes never match."""
    try:
        return get_password_context().verify(password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def validate_password_strength(password: str) -> str:
    """Validate the password policy.

    At least 8 characters with one lower-case letter, one upper-case letter and
    one digit.

    Raises:
        ValueError: With a human-readable reason when the policy is violated
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one number")
    return password


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: Account id stored in the ``userId`` claim
        role: Account role stored in the ``role`` claim
        expires_delta: Custom lifetime; defaults to ``JWT_EXPIRE_DAYS``

    Returns:
        str: Encoded JWT
    """
    auth = settings.auth
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(days=auth.jwt_expire_days))
    claims = {"userId": user_id, "role": role, "iat": now, "exp": expire}
    token = jwt.encode(claims, auth.jwt_secret, algorithm=auth.jwt_algorithm)
    logger.debug(f"Access token created for user: {user_id}")
    return token


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        InvalidTokenError: If the signature, expiry or claims are invalid
    """
    auth = settings.auth
    try:
        payload = jwt.decode(token, auth.jwt_secret, algorithms=[auth.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"JWT validation failed: {e}")
        raise InvalidTokenError(str(e)) from e
    if not payload.get("userId"):
        raise InvalidTokenError("Token missing userId claim")
    return payload


def generate_reset_token() -> str:
    """Random 64 character hex token sent to the user."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(token: str) -> str:
    """Digest persisted in place of the raw reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_reset_token_format(token: str) -> bool:
    return bool(RESET_TOKEN_PATTERN.match(token))
