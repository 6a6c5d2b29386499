# storefront/users.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .core import UserCreate, UserUpdate, changed_fields
from .errors import ConflictError, NotFoundError
from .models import Review, User

logger = logging.getLogger(__name__)


def list_users(session: Session) -> List[User]:
    return list(session.scalars(select(User).order_by(User.name)))


def list_with_review_counts(session: Session) -> List[Tuple[User, int]]:
    stmt = (
        select(User, func.count(Review.id))
        .outerjoin(Review, Review.user_id == User.id)
        .group_by(User.id)
        .order_by(User.name)
    )
    return [(user, int(count)) for user, count in session.execute(stmt).all()]


def get_user(session: Session, user_id: str) -> User:
    user = session.get(
        User,
        user_id,
        options=[selectinload(User.reviews).selectinload(Review.product)],
    )
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.scalar(select(User).where(func.lower(User.email) == email.lower()))


def _flush(session: Session, email: str) -> None:
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise ConflictError(f"A user with email {email} already exists")


def create_user(session: Session, data: UserCreate) -> User:
    if get_user_by_email(session, data.email) is not None:
        raise ConflictError(f"A user with email {data.email} already exists")
    user = User(name=data.name, email=data.email)
    session.add(user)
    _flush(session, data.email)
    logger.info("Created user %s", user.id)
    return user


def update_user(session: Session, user_id: str, data: UserUpdate) -> User:
    user = get_user(session, user_id)
    changes = changed_fields(data, required=("name", "email"))
    if "email" in changes:
        existing = get_user_by_email(session, changes["email"])
        if existing is not None and existing.id != user_id:
            raise ConflictError(f"A user with email {changes['email']} already exists")
    for field, value in changes.items():
        setattr(user, field, value)
    _flush(session, user.email)
    return user


def remove_user(session: Session, user_id: str) -> None:
    """Hard delete; the user's reviews go with them."""
    user = get_user(session, user_id)
    session.delete(user)
    session.flush()
    logger.info("Deleted user %s", user_id)
