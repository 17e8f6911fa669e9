"""
Security utilities for authentication: password hashing, password rules,
and session tokens.
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple
import bcrypt
from fastapi.security import HTTPBearer, APIKeyHeader
import secrets
import hashlib

import config

# Security schemes: token in "Authorization: Bearer" or "X-Session-Key"
security_optional = HTTPBearer(auto_error=False)
session_header = APIKeyHeader(name="X-Session-Key", auto_error=False)

MIN_PASSWORD_LENGTH = 6


# Password utilities
def validate_password(password: str) -> Tuple[bool, Optional[str]]:
    """
    Validate password strength.

    Requirements:
    - Minimum 6 characters
    - Maximum 72 bytes (bcrypt limit)

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, "Password is required"

    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"

    if len(password.encode('utf-8')) > 72:
        return False, "Password cannot be longer than 72 bytes. Please use a shorter password."

    return True, None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash. Malformed hashes never match."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Note: Password validation should be done before calling this function.
    Use validate_password() to check password requirements.
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        raise ValueError("Password cannot be longer than 72 bytes. Please use a shorter password.")

    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    # passlib-compatible format: $2b$12$...
    return bcrypt.hashpw(password_bytes, salt).decode('utf-8')


# Session utilities
def generate_session_key() -> Tuple[str, str]:
    """
    Generate a new session key.

    Returns:
        Tuple of (session_key, session_hash). Only the hash is persisted.
    """
    session_key = secrets.token_urlsafe(32)
    return session_key, hash_session_key(session_key)


def hash_session_key(key: str) -> str:
    """
    Hash a session key for storage/comparison.

    Args:
        key: Session key string

    Returns:
        Hashed key
    """
    return hashlib.sha256(key.encode()).hexdigest()


def session_expiry(issued_at: datetime) -> datetime:
    """Fixed expiry: issuance time plus SESSION_EXPIRE_HOURS, never extended."""
    return issued_at + timedelta(hours=config.SESSION_EXPIRE_HOURS)
