# storefront/reviews.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .core import ReviewCreate, ReviewUpdate, changed_fields
from .errors import NotFoundError
from .models import Product, Review, User
from .products import ProductRow, active_conditions, review_stats

logger = logging.getLogger(__name__)


def _reviews(session: Session, *conditions, limit: Optional[int] = None) -> List[Review]:
    stmt = (
        select(Review)
        .where(*conditions)
        .options(selectinload(Review.user), selectinload(Review.product))
        .order_by(Review.created_at.desc(), Review.id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(session.scalars(stmt))


def list_reviews(session: Session) -> List[Review]:
    return _reviews(session)


def recent_reviews(session: Session, limit: int = 10) -> List[Review]:
    return _reviews(session, limit=limit)


def reviews_for_product(session: Session, product_id: str) -> List[Review]:
    return _reviews(session, Review.product_id == product_id)


def reviews_by_user(session: Session, user_id: str) -> List[Review]:
    return _reviews(session, Review.user_id == user_id)


def get_review(session: Session, review_id: str) -> Review:
    review = session.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def create_review(session: Session, data: ReviewCreate) -> Review:
    if session.get(User, data.user_id) is None:
        raise NotFoundError("User not found")
    if session.get(Product, data.product_id) is None:
        raise NotFoundError("Product not found")
    review = Review(**data.model_dump())
    session.add(review)
    session.flush()
    logger.info("Created review %s for product %s", review.id, review.product_id)
    return review


def update_review(session: Session, review_id: str, data: ReviewUpdate) -> Review:
    review = get_review(session, review_id)
    for field, value in changed_fields(data, required=("rating",)).items():
        setattr(review, field, value)
    session.flush()
    return review


def remove_review(session: Session, review_id: str) -> None:
    review = get_review(session, review_id)
    session.delete(review)
    session.flush()
    logger.info("Deleted review %s", review_id)


# ---------------------------
# Aggregates
# ---------------------------
def average_rating(session: Session, product_id: str) -> Dict[str, Any]:
    average, total = session.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.product_id == product_id)
    ).one()
    return {
        "averageRating": round(float(average), 2) if average is not None else 0,
        "totalReviews": int(total),
    }


def top_rated_products(session: Session, limit: int = 10) -> List[ProductRow]:
    """Active products with at least one review, best average first, then most reviewed."""
    stats = review_stats()
    stmt = (
        select(Product, stats.c.review_count, stats.c.average_rating)
        .join(stats, stats.c.product_id == Product.id)
        .where(*active_conditions())
        .order_by(stats.c.average_rating.desc(), stats.c.review_count.desc(), Product.name)
        .limit(limit)
    )
    return [
        ProductRow(product, int(count), float(average))
        for product, count, average in session.execute(stmt).all()
    ]
