"""
Authentication utilities for the auction marketplace.

Password hashing with bcrypt and the session bookkeeping for logins.
The session is the only source of the acting identity; request parameters
never name the caller.
"""

import bcrypt
from flask import session

from marketplace.enums import UserRole
from marketplace.logger import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Example:
        >>> hashed = hash_password('correct horse')
        >>> verify_password('correct horse', hashed)
        True
    """
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash.

    Returns:
        True if the password matches, False otherwise (including malformed hashes).
    """
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except (ValueError, TypeError):
        return False


def login_user(profile) -> None:
    """Store the authenticated profile's identity in the session."""
    session.clear()
    session['user_id'] = profile.id
    session['email'] = profile.email
    session['role'] = profile.role
    session['is_admin'] = profile.role == UserRole.ADMIN.value
    session.permanent = True
    logger.info(f"User logged in: {profile.email}")


def logout_user() -> None:
    """Forget the session identity."""
    email = session.get('email')
    session.clear()
    if email:
        logger.info(f"User logged out: {email}")
