from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from contramind.models.enums import AccountStatus, UserRole
from contramind.models.user import User
from contramind.schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    """Claims carried by a verified access token."""

    open_id: str
    name: str | None = None
    email: str | None = None
    login_method: str | None = None


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_open_id(db: Session, open_id: str) -> User | None:
    return db.scalar(select(User).where(User.open_id == open_id))


def list_users(db: Session, *, limit: int = 50, offset: int = 0) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit)
    return list(db.scalars(stmt))


def upsert_user(
    db: Session,
    identity: Identity,
    *,
    owner_open_id: str = "",
    trial_days: int = 14,
) -> tuple[User, bool]:
    """
    Create the user on first sight, otherwise refresh their sign-in details.

    New users start a trial; the configured owner becomes an admin.
    Returns the user and whether it was created.
    """
    now = datetime.now(timezone.utc)
    user = get_user_by_open_id(db, identity.open_id)
    created = user is None
    if user is None:
        user = User(
            open_id=identity.open_id,
            subscription_status=AccountStatus.TRIAL,
            trial_ends_at=now + timedelta(days=trial_days),
        )
        db.add(user)
        logger.info("Provisioning new user %s", identity.open_id)

    for field in ("name", "email", "login_method"):
        value = getattr(identity, field)
        if value is not None:
            setattr(user, field, value)
    if owner_open_id and identity.open_id == owner_open_id:
        user.role = UserRole.ADMIN
    user.last_signed_in = now
    db.flush()
    return user, created


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)
    db.flush()
    return user
