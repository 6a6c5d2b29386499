# storefront/routes.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query

from . import categories, products, reviews, users
from .core import (
    CategoryCreate, CategoryUpdate, ProductCreate, ProductFilters, ProductUpdate,
    ReviewCreate, ReviewUpdate, StockUpdate, UserCreate, UserUpdate,
    category_dict, coerce_int, product_dict, review_dict, review_list, user_dict,
)
from .dependencies import SessionDep, SettingsDep
from .errors import NotFoundError

router = APIRouter()


# ---------------------------
# Helpers
# ---------------------------
def ok(data: Any = None, **extra) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def _product_rows(rows: List[products.ProductRow]) -> List[Dict[str, Any]]:
    return [product_dict(r.product, r.review_count, r.average_rating) for r in rows]


# ---------------------------
# Products
# ---------------------------
@router.get("/products")
def list_products(
    session: SessionDep,
    settings: SettingsDep,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
):
    filters = ProductFilters(
        page=coerce_int(page, 1),
        page_size=coerce_int(limit, settings.DEFAULT_PAGE_SIZE, maximum=settings.MAX_PAGE_SIZE),
        category=category or None,
        search=search or None,
    )
    result = products.list_products(session, filters)
    p = result.pagination
    return ok(
        _product_rows(result.items),
        pagination={"page": p.page, "limit": p.page_size, "total": p.total_count, "totalPages": p.total_pages},
    )


@router.get("/products/low-stock")
def low_stock(session: SessionDep, settings: SettingsDep, threshold: Optional[str] = None):
    limit = coerce_int(threshold, settings.LOW_STOCK_THRESHOLD, minimum=0)
    return ok(_product_rows(products.low_stock_products(session, limit)))


@router.get("/products/top-rated")
def top_rated(session: SessionDep, limit: Optional[str] = None):
    return ok(_product_rows(reviews.top_rated_products(session, coerce_int(limit, 10, maximum=100))))


@router.get("/products/{product_id}")
def get_product(product_id: str, session: SessionDep):
    product = products.get_product(session, product_id)
    return ok(product_dict(product, include_reviews=True))


@router.get("/products/{product_id}/rating")
def product_rating(product_id: str, session: SessionDep):
    products.get_product(session, product_id)
    return ok(reviews.average_rating(session, product_id))


@router.get("/products/{product_id}/reviews")
def product_reviews(product_id: str, session: SessionDep):
    products.get_product(session, product_id)
    return ok(review_list(reviews.reviews_for_product(session, product_id), include_product=False))


@router.post("/products", status_code=201)
def create_product(payload: ProductCreate, session: SessionDep):
    product = products.create_product(session, payload)
    session.commit()
    return ok(product_dict(product, include_reviews=True), message="Product created successfully")


@router.put("/products/{product_id}")
def update_product(product_id: str, payload: ProductUpdate, session: SessionDep):
    product = products.update_product(session, product_id, payload)
    session.commit()
    return ok(product_dict(product, include_reviews=True), message="Product updated successfully")


@router.put("/products/{product_id}/stock")
def update_stock(product_id: str, payload: StockUpdate, session: SessionDep):
    product = products.update_stock(session, product_id, payload.stock)
    session.commit()
    return ok(product_dict(product), message="Stock updated successfully")


@router.delete("/products/{product_id}")
def delete_product(product_id: str, session: SessionDep):
    products.remove_product(session, product_id)
    session.commit()
    return ok(message="Product deleted successfully")


# ---------------------------
# Categories
# ---------------------------
@router.get("/categories")
def list_categories(session: SessionDep, with_counts: bool = Query(False, alias="withCounts")):
    if with_counts:
        data = [
            {**category_dict(c), "productCount": count}
            for c, count in categories.list_with_product_counts(session)
        ]
    else:
        data = [category_dict(c) for c in categories.list_categories(session)]
    return ok(data)


@router.get("/categories/{category_id}")
def get_category(category_id: str, session: SessionDep):
    category = categories.get_category(session, category_id)
    items = categories.active_products(session, category_id)
    return ok({**category_dict(category), "products": [product_dict(p) for p in items]})


@router.post("/categories", status_code=201)
def create_category(payload: CategoryCreate, session: SessionDep):
    category = categories.create_category(session, payload)
    session.commit()
    return ok(category_dict(category), message="Category created successfully")


@router.put("/categories/{category_id}")
def update_category(category_id: str, payload: CategoryUpdate, session: SessionDep):
    category = categories.update_category(session, category_id, payload)
    session.commit()
    return ok(category_dict(category), message="Category updated successfully")


@router.delete("/categories/{category_id}")
def delete_category(category_id: str, session: SessionDep):
    categories.remove_category(session, category_id)
    session.commit()
    return ok(message="Category deleted successfully")


# ---------------------------
# Users
# ---------------------------
@router.get("/users")
def list_users(session: SessionDep, with_counts: bool = Query(False, alias="withCounts")):
    if with_counts:
        data = [{**user_dict(u), "reviewCount": count} for u, count in users.list_with_review_counts(session)]
    else:
        data = [user_dict(u) for u in users.list_users(session)]
    return ok(data)


@router.get("/users/by-email")
def user_by_email(session: SessionDep, email: str = Query(..., min_length=3)):
    user = users.get_user_by_email(session, email)
    if user is None:
        raise NotFoundError("User not found")
    return ok(user_dict(user))


@router.get("/users/{user_id}")
def get_user(user_id: str, session: SessionDep):
    user = users.get_user(session, user_id)
    return ok({**user_dict(user), "reviews": [review_dict(r, include_user=False, include_product=True) for r in user.reviews]})


@router.get("/users/{user_id}/reviews")
def user_reviews(user_id: str, session: SessionDep):
    users.get_user(session, user_id)
    return ok(review_list(reviews.reviews_by_user(session, user_id)))


@router.post("/users", status_code=201)
def create_user(payload: UserCreate, session: SessionDep):
    user = users.create_user(session, payload)
    session.commit()
    return ok(user_dict(user), message="User created successfully")


@router.put("/users/{user_id}")
def update_user(user_id: str, payload: UserUpdate, session: SessionDep):
    user = users.update_user(session, user_id, payload)
    session.commit()
    return ok(user_dict(user), message="User updated successfully")


@router.delete("/users/{user_id}")
def delete_user(user_id: str, session: SessionDep):
    users.remove_user(session, user_id)
    session.commit()
    return ok(message="User deleted successfully")


# ---------------------------
# Reviews
# ---------------------------
@router.get("/reviews")
def list_reviews(session: SessionDep, limit: Optional[str] = None):
    if limit:
        items = reviews.recent_reviews(session, coerce_int(limit, 10, maximum=100))
    else:
        items = reviews.list_reviews(session)
    return ok(review_list(items))


@router.get("/reviews/{review_id}")
def get_review(review_id: str, session: SessionDep):
    return ok(review_dict(reviews.get_review(session, review_id), include_product=True))


@router.post("/reviews", status_code=201)
def create_review(payload: ReviewCreate, session: SessionDep):
    review = reviews.create_review(session, payload)
    session.commit()
    return ok(review_dict(review, include_product=True), message="Review created successfully")


@router.put("/reviews/{review_id}")
def update_review(review_id: str, payload: ReviewUpdate, session: SessionDep):
    review = reviews.update_review(session, review_id, payload)
    session.commit()
    return ok(review_dict(review, include_product=True), message="Review updated successfully")


@router.delete("/reviews/{review_id}")
def delete_review(review_id: str, session: SessionDep):
    reviews.remove_review(session, review_id)
    session.commit()
    return ok(message="Review deleted successfully")
