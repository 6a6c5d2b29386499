# storefront/categories.py
import logging
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .core import CategoryCreate, CategoryUpdate, changed_fields
from .errors import ConflictError, NotFoundError
from .models import Category, Product

logger = logging.getLogger(__name__)


def list_categories(session: Session) -> List[Category]:
    return list(session.scalars(select(Category).order_by(Category.name)))


def list_with_product_counts(session: Session) -> List[Tuple[Category, int]]:
    """Categories paired with the number of their active products."""
    active_count = func.count(Product.id)
    stmt = (
        select(Category, active_count)
        .outerjoin(Product, (Product.category_id == Category.id) & Product.is_active.is_(True))
        .group_by(Category.id)
        .order_by(Category.name)
    )
    return [(category, int(count)) for category, count in session.execute(stmt).all()]


def get_category(session: Session, category_id: str) -> Category:
    category = session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def active_products(session: Session, category_id: str) -> List[Product]:
    stmt = (
        select(Product)
        .where(Product.category_id == category_id, Product.is_active.is_(True))
        .order_by(Product.created_at.desc())
    )
    return list(session.scalars(stmt))


def _ensure_unique_name(session: Session, name: str, exclude_id: str = None) -> None:
    stmt = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id:
        stmt = stmt.where(Category.id != exclude_id)
    if session.scalar(stmt) is not None:
        raise ConflictError(f"Category '{name}' already exists")


def _flush(session: Session, name: str) -> None:
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise ConflictError(f"Category '{name}' already exists")


def create_category(session: Session, data: CategoryCreate) -> Category:
    _ensure_unique_name(session, data.name)
    category = Category(name=data.name, description=data.description)
    session.add(category)
    _flush(session, data.name)
    logger.info("Created category %s (%s)", category.id, category.name)
    return category


def update_category(session: Session, category_id: str, data: CategoryUpdate) -> Category:
    category = get_category(session, category_id)
    changes = changed_fields(data, required=("name",))
    if "name" in changes:
        _ensure_unique_name(session, changes["name"], exclude_id=category_id)
    for field, value in changes.items():
        setattr(category, field, value)
    _flush(session, category.name)
    return category


def remove_category(session: Session, category_id: str) -> None:
    category = get_category(session, category_id)
    # inactive products still reference the category
    product_count = session.scalar(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    )
    if product_count:
        raise ConflictError("Cannot delete category with existing products")
    session.delete(category)
    session.flush()
    logger.info("Deleted category %s", category_id)
