# tests/test_reviews_users_api.py


def test_rating_without_reviews_is_zero(client, make_category, make_product):
    product = make_product(make_category()["id"])
    r = client.get(f"/api/products/{product['id']}/rating")
    assert r.json()["data"] == {"averageRating": 0, "totalReviews": 0}


def test_rating_averages_reviews(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"])
    alice = make_user("Alice", "alice@example.com")
    bob = make_user("Bob", "bob@example.com")
    make_review(alice["id"], product["id"], 4)
    make_review(bob["id"], product["id"], 5)

    assert client.get(f"/api/products/{product['id']}/rating").json()["data"] == {
        "averageRating": 4.5,
        "totalReviews": 2,
    }
    listed = client.get("/api/products").json()["data"][0]
    assert listed["reviewCount"] == 2
    assert listed["averageRating"] == 4.5


def test_rating_for_missing_product(client):
    assert client.get("/api/products/nope/rating").status_code == 404


def test_product_detail_reviews_newest_first(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"])
    alice = make_user()
    first = make_review(alice["id"], product["id"], 3, "ok")
    second = make_review(alice["id"], product["id"], 5, "grew on me")

    data = client.get(f"/api/products/{product['id']}").json()["data"]
    assert [r["id"] for r in data["reviews"]] == [second["id"], first["id"]]
    assert data["reviews"][0]["user"]["name"] == "Alice"


def test_top_rated_orders_by_average_then_count(client, make_category, make_product, make_user, make_review):
    cat = make_category()
    a = make_product(cat["id"], name="A")
    b = make_product(cat["id"], name="B")
    c = make_product(cat["id"], name="C")
    make_product(cat["id"], name="Unreviewed")
    inactive = make_product(cat["id"], name="Inactive")

    u1 = make_user("U1", "u1@example.com")
    u2 = make_user("U2", "u2@example.com")
    make_review(u1["id"], a["id"], 5)
    make_review(u1["id"], b["id"], 5)
    make_review(u2["id"], b["id"], 5)
    make_review(u1["id"], c["id"], 3)
    make_review(u1["id"], inactive["id"], 5)
    client.delete(f"/api/products/{inactive['id']}")

    data = client.get("/api/products/top-rated", params={"limit": 10}).json()["data"]
    assert [p["name"] for p in data] == ["B", "A", "C"]
    assert data[0]["reviewCount"] == 2

    assert len(client.get("/api/products/top-rated", params={"limit": 1}).json()["data"]) == 1


def test_review_validation(client, make_category, make_product, make_user):
    product = make_product(make_category()["id"])
    user = make_user()
    for rating in (0, 6):
        r = client.post("/api/reviews", json={"userId": user["id"], "productId": product["id"], "rating": rating})
        assert r.status_code == 400

    r = client.post("/api/reviews", json={"userId": user["id"], "productId": "missing", "rating": 4})
    assert r.status_code == 404
    assert r.json()["error"] == "Product not found"


def test_review_update_and_delete(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"])
    review = make_review(make_user()["id"], product["id"], 2, "meh")

    r = client.put(f"/api/reviews/{review['id']}", json={"rating": 4})
    assert r.json()["data"]["rating"] == 4
    assert r.json()["data"]["comment"] == "meh"

    assert client.delete(f"/api/reviews/{review['id']}").status_code == 200
    assert client.get(f"/api/reviews/{review['id']}").status_code == 404


def test_recent_reviews_limit(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"])
    user = make_user()
    for rating in (1, 2, 3):
        make_review(user["id"], product["id"], rating)

    data = client.get("/api/reviews", params={"limit": 2}).json()["data"]
    assert [r["rating"] for r in data] == [3, 2]
    assert data[0]["product"]["name"] == product["name"]


def test_user_crud_and_lookup(client, make_user):
    user = make_user("Alice", "alice@example.com")

    assert client.post("/api/users", json={"name": "Other", "email": "alice@example.com"}).status_code == 409
    assert client.post("/api/users", json={"name": "Bad", "email": "not-an-email"}).status_code == 400

    found = client.get("/api/users/by-email", params={"email": "alice@example.com"}).json()["data"]
    assert found["id"] == user["id"]
    assert client.get("/api/users/by-email", params={"email": "nobody@example.com"}).status_code == 404

    updated = client.put(f"/api/users/{user['id']}", json={"name": "Alicia"}).json()["data"]
    assert updated["name"] == "Alicia"
    assert updated["email"] == "alice@example.com"


def test_users_with_review_counts(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"])
    alice = make_user("Alice", "alice@example.com")
    make_user("Bob", "bob@example.com")
    make_review(alice["id"], product["id"], 5)

    data = client.get("/api/users", params={"withCounts": "true"}).json()["data"]
    assert {u["name"]: u["reviewCount"] for u in data} == {"Alice": 1, "Bob": 0}

    detail = client.get(f"/api/users/{alice['id']}").json()["data"]
    assert detail["reviews"][0]["product"]["id"] == product["id"]


def test_deleting_user_removes_their_reviews(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"])
    user = make_user()
    make_review(user["id"], product["id"], 5)

    assert client.delete(f"/api/users/{user['id']}").status_code == 200
    assert client.get(f"/api/products/{product['id']}/rating").json()["data"]["totalReviews"] == 0
    assert client.get(f"/api/users/{user['id']}").status_code == 404


def test_reviews_by_product_and_by_user(client, make_category, make_product, make_user, make_review):
    cat = make_category()
    x1 = make_product(cat["id"], name="X1")
    x2 = make_product(cat["id"], name="X2")
    alice = make_user("Alice", "alice@example.com")
    bob = make_user("Bob", "bob@example.com")
    make_review(alice["id"], x1["id"], 5)
    make_review(bob["id"], x1["id"], 3)
    make_review(alice["id"], x2["id"], 4)

    for_x1 = client.get(f"/api/products/{x1['id']}/reviews").json()["data"]
    assert sorted(r["rating"] for r in for_x1) == [3, 5]

    by_alice = client.get(f"/api/users/{alice['id']}/reviews").json()["data"]
    assert {r["product"]["name"] for r in by_alice} == {"X1", "X2"}

    assert client.get("/api/products/nope/reviews").status_code == 404
    assert client.get("/api/users/nope/reviews").status_code == 404
