# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.database import Database
from storefront.main import create_app


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", STORE_NAME="Gadget Store")


@pytest.fixture
def db(settings):
    return Database(settings.DATABASE_URL)


@pytest.fixture
def client(settings, db):
    # entering the client runs the lifespan: connect on startup, close on shutdown
    with TestClient(create_app(settings, database=db)) as c:
        yield c


@pytest.fixture
def session(db):
    db.connect()
    with db.session() as s:
        yield s
    db.close()


@pytest.fixture
def make_category(client):
    def _make(name="Phones", description=None):
        r = client.post("/api/categories", json={"name": name, "description": description})
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture
def make_product(client):
    def _make(category_id, name="X1", price=199.99, **fields):
        payload = {"name": name, "price": price, "categoryId": category_id, **fields}
        r = client.post("/api/products", json=payload)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture
def make_user(client):
    def _make(name="Alice", email="alice@example.com"):
        r = client.post("/api/users", json={"name": name, "email": email})
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture
def make_review(client):
    def _make(user_id, product_id, rating=5, comment=None):
        r = client.post("/api/reviews", json={"userId": user_id, "productId": product_id, "rating": rating, "comment": comment})
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make
