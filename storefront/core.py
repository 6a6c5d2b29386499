# storefront/core.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from .errors import ValidationError
from .models import Category, Product, Review, User

# Request schemas (one per operation) and the helpers that turn ORM rows
# into the camelCase dicts the API and templates consume.


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------
# Products
# ---------------------------
class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    category_id: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    condition: Optional[str] = Field(None, max_length=40)


class ProductUpdate(CamelModel):
    """Only the fields present in the payload are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    condition: Optional[str] = Field(None, max_length=40)
    is_active: Optional[bool] = None


class ProductFilters(BaseModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1)
    category: Optional[str] = None
    search: Optional[str] = None


class StockUpdate(CamelModel):
    stock: int = Field(..., ge=0)


# ---------------------------
# Categories
# ---------------------------
class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None


# ---------------------------
# Users
# ---------------------------
class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None


# ---------------------------
# Reviews
# ---------------------------
class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)


class ReviewUpdate(CamelModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None


def changed_fields(payload: BaseModel, required: tuple = ()) -> Dict[str, Any]:
    """
    Fields the caller actually sent, keyed by attribute name.

    Fields listed in `required` map to NOT NULL columns and may be omitted
    but never explicitly set to null.
    """
    changes = payload.model_dump(exclude_unset=True)
    for field in required:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{to_camel(field)} cannot be null")
    return changes


def coerce_int(raw: Optional[str], default: int, minimum: int = 1, maximum: Optional[int] = None) -> int:
    """Lenient query-string int: junk falls back to the default, then it's clamped."""
    try:
        value = int(raw) if raw not in (None, "") else default
    except (TypeError, ValueError):
        value = default
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


# ---------------------------
# Serializers
# ---------------------------
def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _price(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def category_dict(category: Category) -> Dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "createdAt": _ts(category.created_at),
        "updatedAt": _ts(category.updated_at),
    }


def user_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "createdAt": _ts(user.created_at),
        "updatedAt": _ts(user.updated_at),
    }


def product_dict(
    product: Product,
    review_count: Optional[int] = None,
    average_rating: Optional[float] = None,
    include_reviews: bool = False,
) -> Dict[str, Any]:
    out = {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": _price(product.price),
        "stock": product.stock,
        "imageUrl": product.image_url,
        "condition": product.condition,
        "isActive": product.is_active,
        "categoryId": product.category_id,
        "category": category_dict(product.category) if product.category else None,
        "createdAt": _ts(product.created_at),
        "updatedAt": _ts(product.updated_at),
    }
    if include_reviews:
        reviews = list(product.reviews)
        out["reviews"] = [review_dict(r) for r in reviews]
        if review_count is None:
            review_count = len(reviews)
            average_rating = (sum(r.rating for r in reviews) / len(reviews)) if reviews else None
    if review_count is not None:
        out["reviewCount"] = review_count
        out["averageRating"] = round(average_rating, 2) if average_rating is not None else None
    return out


def review_dict(review: Review, include_user: bool = True, include_product: bool = False) -> Dict[str, Any]:
    out = {
        "id": review.id,
        "rating": review.rating,
        "comment": review.comment,
        "userId": review.user_id,
        "productId": review.product_id,
        "createdAt": _ts(review.created_at),
        "updatedAt": _ts(review.updated_at),
    }
    if include_user:
        out["user"] = {"id": review.user.id, "name": review.user.name, "email": review.user.email}
    if include_product:
        out["product"] = {
            "id": review.product.id,
            "name": review.product.name,
            "imageUrl": review.product.image_url,
        }
    return out


def review_list(reviews: List[Review], include_product: bool = True) -> List[Dict[str, Any]]:
    return [review_dict(r, include_product=include_product) for r in reviews]
