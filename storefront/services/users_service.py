import logging
from typing import Optional

from sqlalchemy.orm import Session

from storefront.core import config
from storefront.core.errors import ConflictError, UnauthorizedError, ValidationError
from storefront.core.permissions import Role
from storefront.core.security import create_token, hash_password, verify_password
from storefront.core.validators import validate_email, validate_password, validate_username
from storefront.db.models import User
from storefront.db.session import unit_of_work

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def register_user(db: Session, username: str, email: str, password: str, role: Optional[Role] = None) -> User:
    checks = [validate_username(username), validate_email(email), validate_password(password)]
    errors = [c.message for c in checks if not c.valid]
    if errors:
        raise ValidationError(errors[0], errors)

    username = username.strip()
    email = email.strip().lower()
    if role is None:
        role = Role.ADMIN if email in config.ADMIN_EMAILS else Role.USER

    # pre-check for a friendly message; the unique index still decides races
    if db.query(User).filter(User.username == username).first():
        raise ConflictError("Username already exists")
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already exists")

    user = User(username=username, email=email, password=hash_password(password), role=role.value)
    with unit_of_work(db):
        db.add(user)
    db.refresh(user)
    logger.info("Registered user %s (id=%s, role=%s)", username, user.id, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email or "")
    if not user or not verify_password(password or "", user.password):
        logger.info("Failed login for %s", email)
        raise UnauthorizedError("Invalid credentials", ["Invalid email or password"])
    return user


def login(db: Session, email: str, password: str):
    """Returns (token, user) for valid credentials."""
    if not validate_email(email or "").valid:
        raise ValidationError("Invalid email format", ["Email must be a valid email address format"])
    user = authenticate(db, email, password)
    return create_token(user.id, user.role), user
