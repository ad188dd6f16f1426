from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from fieldreports.core.security import hash_password, verify_password
from fieldreports.models.region import Region
from fieldreports.models.user import Role, User

logger = logging.getLogger(__name__)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username.strip()))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def find_region(db: Session, name_or_code: str) -> Region | None:
    """Region by exact name or case-insensitive code."""
    value = name_or_code.strip()
    return db.scalar(
        select(Region).where(or_(Region.name == value, func.upper(Region.code) == value.upper()))
    )


def authenticate(db: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(db, username)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_user(
    db: Session,
    username: str,
    password: str,
    name: str,
    role: Role | str = Role.ENG,
    region: Region | None = None,
) -> User:
    user = User(
        username=username.strip(),
        name=name.strip(),
        password_hash=hash_password(password),
        role=role.value if isinstance(role, Role) else str(role),
        region_id=region.id if region else None,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.username, user.role)
    return user


def change_password(db: Session, user: User, new_password: str) -> User:
    """
    Stores the new hash and stamps password_changed_at one second in the
    past, so a token minted right after this call is still accepted.
    """
    user.password_hash = hash_password(new_password)
    user.password_changed_at = dt.datetime.utcnow() - dt.timedelta(seconds=1)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def deactivate_user(db: Session, user: User) -> User:
    user.is_active = False
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Deactivated user %s", user.username)
    return user


def ensure_admin(db: Session, username: str, password: str, name: str) -> tuple[User, bool]:
    """Returns (user, created). Existing accounts are left untouched."""
    existing = get_user_by_username(db, username)
    if existing:
        return existing, False
    return create_user(db, username=username, password=password, name=name, role=Role.VXR), True
