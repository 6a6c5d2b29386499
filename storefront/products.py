# storefront/products.py
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from .core import ProductCreate, ProductFilters, ProductUpdate, changed_fields
from .errors import NotFoundError, ValidationError
from .models import Category, Product, Review

logger = logging.getLogger(__name__)

NOT_NULL_FIELDS = ("name", "price", "stock", "category_id", "is_active")


@dataclass
class ProductRow:
    """A product together with its review aggregate."""

    product: Product
    review_count: int = 0
    average_rating: Optional[float] = None


@dataclass
class Pagination:
    page: int
    page_size: int
    total_count: int
    total_pages: int


@dataclass
class ProductPage:
    items: List[ProductRow]
    pagination: Pagination


# ---------------------------
# Query helpers
# ---------------------------
def review_stats():
    return (
        select(
            Review.product_id.label("product_id"),
            func.count(Review.id).label("review_count"),
            func.avg(Review.rating).label("average_rating"),
        )
        .group_by(Review.product_id)
        .subquery("review_stats")
    )


def active_conditions(category: Optional[str] = None, search: Optional[str] = None) -> list:
    conditions = [Product.is_active.is_(True)]
    if category:
        # accept either a category id or its (case-insensitive) name
        matching = select(Category.id).where(
            or_(Category.id == category, func.lower(Category.name) == category.lower())
        )
        conditions.append(Product.category_id.in_(matching))
    if search:
        conditions.append(
            or_(
                Product.name.icontains(search, autoescape=True),
                Product.description.icontains(search, autoescape=True),
            )
        )
    return conditions


def annotated_products(
    session: Session,
    conditions: list,
    order_by: tuple = (Product.created_at.desc(), Product.id),
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[ProductRow]:
    stats = review_stats()
    stmt = (
        select(Product, func.coalesce(stats.c.review_count, 0), stats.c.average_rating)
        .outerjoin(stats, stats.c.product_id == Product.id)
        .where(*conditions)
        .order_by(*order_by)
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)

    rows = []
    for product, count, average in session.execute(stmt).all():
        rows.append(ProductRow(product, int(count), float(average) if average is not None else None))
    return rows


def _require_category(session: Session, category_id: str) -> None:
    if session.get(Category, category_id) is None:
        raise ValidationError("Category not found")


# ---------------------------
# Reads
# ---------------------------
def list_products(session: Session, filters: ProductFilters) -> ProductPage:
    """
    One page of active products, newest first.

    Pages past the end come back empty rather than failing.
    """
    conditions = active_conditions(filters.category, filters.search)
    total = session.scalar(select(func.count()).select_from(Product).where(*conditions)) or 0
    offset = (filters.page - 1) * filters.page_size
    # past the last row: no item query, so huge page numbers never reach the database
    items = [] if offset >= total else annotated_products(
        session,
        conditions,
        limit=filters.page_size,
        offset=offset,
    )
    pagination = Pagination(
        page=filters.page,
        page_size=filters.page_size,
        total_count=total,
        total_pages=math.ceil(total / filters.page_size),
    )
    return ProductPage(items=items, pagination=pagination)


def get_product(session: Session, product_id: str) -> Product:
    product = session.get(
        Product,
        product_id,
        options=[selectinload(Product.reviews).selectinload(Review.user)],
    )
    if product is None:
        raise NotFoundError("Product not found")
    return product


def search_products(session: Session, term: str) -> List[ProductRow]:
    return annotated_products(session, active_conditions(search=term))


def products_by_category(session: Session, category_id: str) -> List[ProductRow]:
    conditions = [Product.is_active.is_(True), Product.category_id == category_id]
    return annotated_products(session, conditions)


def low_stock_products(session: Session, threshold: int = 10) -> List[ProductRow]:
    conditions = active_conditions() + [Product.stock <= threshold]
    return annotated_products(session, conditions, order_by=(Product.stock.asc(), Product.created_at.desc()))


# ---------------------------
# Writes
# ---------------------------
def create_product(session: Session, data: ProductCreate) -> Product:
    _require_category(session, data.category_id)
    product = Product(**data.model_dump(), is_active=True)
    session.add(product)
    session.flush()
    session.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


def update_product(session: Session, product_id: str, data: ProductUpdate) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    changes = changed_fields(data, required=NOT_NULL_FIELDS)
    if "category_id" in changes:
        _require_category(session, changes["category_id"])
    for field, value in changes.items():
        setattr(product, field, value)
    session.flush()
    session.refresh(product)
    logger.info("Updated product %s: %s", product_id, ", ".join(sorted(changes)) or "no changes")
    return product


def update_stock(session: Session, product_id: str, stock: int) -> Product:
    if stock < 0:
        raise ValidationError("stock must be >= 0")
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    product.stock = stock
    session.flush()
    return product


def remove_product(session: Session, product_id: str) -> Product:
    """Soft delete: the row stays, flagged inactive."""
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    product.is_active = False
    session.flush()
    logger.info("Deactivated product %s", product_id)
    return product
