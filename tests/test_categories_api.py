# tests/test_categories_api.py


def test_delete_populated_category_conflicts(client, make_category, make_product):
    cat = make_category("Phones")
    product = make_product(cat["id"])
    # an inactive product still pins the category
    client.delete(f"/api/products/{product['id']}")

    r = client.delete(f"/api/categories/{cat['id']}")
    assert r.status_code == 409
    assert r.json() == {"success": False, "error": "Cannot delete category with existing products"}


def test_delete_empty_category(client, make_category):
    cat = make_category("Empty")
    r = client.delete(f"/api/categories/{cat['id']}")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert client.get(f"/api/categories/{cat['id']}").status_code == 404


def test_counts_only_active_products(client, make_category, make_product):
    phones = make_category("Phones")
    make_category("Audio")
    make_product(phones["id"], name="A")
    gone = make_product(phones["id"], name="B")
    client.delete(f"/api/products/{gone['id']}")

    data = client.get("/api/categories", params={"withCounts": "true"}).json()["data"]
    counts = {c["name"]: c["productCount"] for c in data}
    assert counts == {"Audio": 0, "Phones": 1}
    # name ascending
    assert [c["name"] for c in data] == ["Audio", "Phones"]


def test_plain_listing_has_no_counts(client, make_category):
    make_category("Phones")
    data = client.get("/api/categories").json()["data"]
    assert "productCount" not in data[0]


def test_get_category_includes_active_products(client, make_category, make_product):
    cat = make_category("Phones")
    make_product(cat["id"], name="Visible")
    hidden = make_product(cat["id"], name="Hidden")
    client.delete(f"/api/products/{hidden['id']}")

    data = client.get(f"/api/categories/{cat['id']}").json()["data"]
    assert data["name"] == "Phones"
    assert [p["name"] for p in data["products"]] == ["Visible"]


def test_duplicate_name_conflicts(client, make_category):
    make_category("Phones")
    r = client.post("/api/categories", json={"name": "phones"})
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_partial_update(client, make_category):
    cat = make_category("Phones", "Handsets")
    r = client.put(f"/api/categories/{cat['id']}", json={"description": "Mobile phones"})
    data = r.json()["data"]
    assert data["name"] == "Phones"
    assert data["description"] == "Mobile phones"

    assert client.put("/api/categories/missing", json={"name": "X"}).status_code == 404


def test_create_requires_name(client):
    r = client.post("/api/categories", json={"description": "nameless"})
    assert r.status_code == 400
