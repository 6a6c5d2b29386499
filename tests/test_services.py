# tests/test_services.py
import math
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaError

from storefront import categories, products, reviews, users
from storefront.core import (
    CategoryCreate, ProductCreate, ProductFilters, ProductUpdate,
    ReviewCreate, UserCreate, coerce_int,
)
from storefront.errors import ConflictError, InternalError, NotFoundError, StoreError, ValidationError


@pytest.fixture
def phones(session):
    return categories.create_category(session, CategoryCreate(name="Phones"))


def _product(session, category, name="X1", price="199.99", **fields):
    return products.create_product(
        session, ProductCreate(name=name, price=Decimal(price), category_id=category.id, **fields)
    )


def test_page_invariants(session, phones):
    for i in range(5):
        _product(session, phones, name=f"P{i}")

    for size in (1, 2, 4, 5, 6):
        for page in (1, 2, 3):
            result = products.list_products(session, ProductFilters(page=page, page_size=size))
            assert result.pagination.total_count == 5
            assert result.pagination.total_pages == math.ceil(5 / size)
            assert len(result.items) <= size


def test_list_skips_inactive_and_carries_aggregates(session, phones):
    live = _product(session, phones, name="Live")
    dead = _product(session, phones, name="Dead")
    products.remove_product(session, dead.id)

    result = products.list_products(session, ProductFilters())
    assert [row.product.id for row in result.items] == [live.id]
    assert result.items[0].review_count == 0
    assert result.items[0].average_rating is None


def test_search_escapes_wildcards(session, phones):
    _product(session, phones, name="100% cotton case")
    _product(session, phones, name="1000 mAh battery")

    hits = products.search_products(session, "100%")
    assert [row.product.name for row in hits] == ["100% cotton case"]


def test_by_category_and_low_stock(session, phones):
    laptops = categories.create_category(session, CategoryCreate(name="Laptops"))
    _product(session, phones, name="X1", stock=2)
    _product(session, laptops, name="Book", stock=30)

    assert [r.product.name for r in products.products_by_category(session, laptops.id)] == ["Book"]
    assert [r.product.name for r in products.low_stock_products(session, threshold=10)] == ["X1"]


def test_update_only_touches_given_fields(session, phones):
    product = _product(session, phones, description="Phone", stock=4)
    products.update_product(session, product.id, ProductUpdate(price=Decimal("149.50")))

    fetched = products.get_product(session, product.id)
    assert fetched.price == Decimal("149.50")
    assert fetched.description == "Phone"
    assert fetched.stock == 4


def test_update_rejects_null_and_unknown_category(session, phones):
    product = _product(session, phones)
    with pytest.raises(ValidationError):
        products.update_product(session, product.id, ProductUpdate(price=None))
    with pytest.raises(ValidationError, match="Category not found"):
        products.update_product(session, product.id, ProductUpdate(category_id="missing"))


def test_update_stock(session, phones):
    product = _product(session, phones)
    assert products.update_stock(session, product.id, 7).stock == 7
    with pytest.raises(ValidationError):
        products.update_stock(session, product.id, -1)
    with pytest.raises(NotFoundError):
        products.update_stock(session, "missing", 1)


def test_missing_products_raise_not_found(session):
    with pytest.raises(NotFoundError, match="Product not found"):
        products.get_product(session, "missing")
    with pytest.raises(NotFoundError):
        products.update_product(session, "missing", ProductUpdate(name="Y"))
    with pytest.raises(NotFoundError):
        products.remove_product(session, "missing")


def test_create_schema_rejects_bad_input():
    with pytest.raises(SchemaError):
        ProductCreate(name="X", price=Decimal("0"), category_id="c")
    with pytest.raises(SchemaError):
        ProductCreate(price=Decimal("5"), category_id="c")


def test_remove_category_rules(session, phones):
    _product(session, phones)
    with pytest.raises(ConflictError):
        categories.remove_category(session, phones.id)

    empty = categories.create_category(session, CategoryCreate(name="Empty"))
    categories.remove_category(session, empty.id)
    with pytest.raises(NotFoundError):
        categories.get_category(session, empty.id)


def test_average_rating_and_top_rated(session, phones):
    x1 = _product(session, phones, name="X1")
    x2 = _product(session, phones, name="X2")
    assert reviews.average_rating(session, x1.id) == {"averageRating": 0, "totalReviews": 0}

    alice = users.create_user(session, UserCreate(name="Alice", email="alice@example.com"))
    reviews.create_review(session, ReviewCreate(rating=3, user_id=alice.id, product_id=x1.id))
    reviews.create_review(session, ReviewCreate(rating=4, user_id=alice.id, product_id=x2.id))
    reviews.create_review(session, ReviewCreate(rating=5, user_id=alice.id, product_id=x2.id))

    assert reviews.average_rating(session, x2.id) == {"averageRating": 4.5, "totalReviews": 2}
    top = reviews.top_rated_products(session, limit=5)
    assert [row.product.name for row in top] == ["X2", "X1"]
    assert top[0].review_count == 2


def test_user_email_lookup_and_conflict(session):
    alice = users.create_user(session, UserCreate(name="Alice", email="alice@example.com"))
    assert users.get_user_by_email(session, "ALICE@example.com").id == alice.id
    with pytest.raises(ConflictError):
        users.create_user(session, UserCreate(name="Again", email="alice@example.com"))


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 10), ("", 10), ("3", 3), ("0", 1), ("-2", 1), ("x", 10), ("500", 100)],
)
def test_coerce_int(raw, expected):
    assert coerce_int(raw, 10, maximum=100) == expected


def test_error_taxonomy():
    assert ValidationError("bad").status_code == 400
    assert NotFoundError("gone").status_code == 404
    assert ConflictError("taken").status_code == 409
    assert StoreError("teapot", status_code=418).status_code == 418
    assert InternalError().status_code == 500
    assert InternalError().to_dict() == {"success": False, "error": "Internal server error"}
