# Overview: Service-layer operations for auth; password hashing, login and user lookup.

"""
Authentication Service

Passwords are hashed with bcrypt. Accounts migrated from the previous
system may still carry an unsalted hex SHA-256 digest; those verify once
and are re-hashed with bcrypt on the successful login.

Login returns the user profile only, no session token is issued.
"""

import hashlib
import hmac
import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Branch, User
from ..validation import AuthenticationError, NotFoundError, ValidationError, to_int
from cafepos.time_utils import utcnow

_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")

MIN_PASSWORD_LENGTH = 8


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def hash_password(password: str) -> str:
    """Hash password using bcrypt (cost factor from BCRYPT_ROUNDS, default 12)."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")  # Store as string in database


def is_legacy_hash(password_hash: str) -> bool:
    return bool(_LEGACY_SHA256.match(password_hash or ""))


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against a stored hash.

    Returns True if password matches hash, False otherwise.
    """
    if not password_hash:
        return False

    if is_legacy_hash(password_hash):
        digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, password_hash)

    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def authenticate(username: str, password: str) -> User:
    """
    Check credentials and stamp last_login_at.

    Raises AuthenticationError with the same message for an unknown user,
    an inactive user or a wrong password.
    """
    if not username or not password:
        raise ValidationError("username and password are required")

    user = db.session.query(User).filter_by(username=username).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        current_app.logger.info("Failed login for username=%r", username)
        raise AuthenticationError("Invalid username or password")

    if is_legacy_hash(user.password_hash):
        user.password_hash = hash_password(password)
    user.last_login_at = utcnow()
    db.session.commit()
    return user


def create_user(username: str, password: str, branch_id: int | None, role: str = "admin") -> User:
    """
    Create a staff user.

    Raises ValidationError for a weak password or a taken username and
    NotFoundError for an unknown branch.
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")
    validate_password_strength(password)

    if db.session.query(User).filter_by(username=username).first():
        raise ValidationError(f"Username '{username}' already exists")
    if branch_id is not None and db.session.get(Branch, branch_id) is None:
        raise NotFoundError(f"Branch {branch_id} not found")

    user = User(username=username, password_hash=hash_password(password), role=role, branch_id=branch_id)
    db.session.add(user)
    db.session.commit()
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def resolve_user_branch(user_id) -> tuple[User, Branch]:
    """
    Resolve the acting user and the branch everything they write is booked to.

    There is no fallback branch: a missing user id is a ValidationError, an
    unknown user a NotFoundError, a user without a branch a ValidationError.
    """
    if user_id is None or user_id == "":
        raise ValidationError("userId is required")
    user_id = to_int(user_id, "userId", minimum=1)

    user = get_user(user_id)
    if user.branch is None:
        raise ValidationError(f"User {user.id} has no branch assigned")
    return user, user.branch


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.username.asc()).all()


def list_branches() -> list[Branch]:
    return db.session.query(Branch).order_by(Branch.name.asc()).all()
