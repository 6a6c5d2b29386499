# tests/test_pages.py


def test_home_page_renders(client, make_category, make_product):
    cat = make_category("Phones")
    make_product(cat["id"], name="X1")

    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Welcome to Gadget Store" in r.text
    assert "X1" in r.text
    assert "Phones (1)" in r.text


def test_products_page_empty_state(client):
    r = client.get("/products")
    assert r.status_code == 200
    assert "No products available" in r.text


def test_products_page_lists_and_filters(client, make_category, make_product):
    cat = make_category("Phones")
    make_product(cat["id"], name="X1", price=199.99, description="flagship")
    make_product(cat["id"], name="Charger", price=19)

    r = client.get("/products")
    assert "X1" in r.text and "Charger" in r.text
    assert "$199.99" in r.text

    r = client.get("/products", params={"search": "FLAGSHIP"})
    assert "X1" in r.text
    assert "Charger" not in r.text


def test_products_page_paginates(client, settings, make_category, make_product):
    cat = make_category()
    for i in range(settings.DEFAULT_PAGE_SIZE + 1):
        make_product(cat["id"], name=f"Item {i:02d}")

    first = client.get("/products").text
    assert "Page 1 of 2" in first
    assert "Next" in first

    second = client.get("/products", params={"page": 2}).text
    assert "Item 00" in second
    assert "Previous" in second


def test_product_detail_page(client, make_category, make_product, make_user, make_review):
    product = make_product(make_category()["id"], name="X1", condition="refurbished")
    make_review(make_user()["id"], product["id"], 4, "Solid")

    r = client.get(f"/products/{product['id']}")
    assert r.status_code == 200
    assert "refurbished" in r.text
    assert "Solid" in r.text

    missing = client.get("/products/nope")
    assert missing.status_code == 404
    assert "Product Not Found" in missing.text


def test_categories_page(client, make_category, make_product):
    assert "No categories available" in client.get("/categories").text

    cat = make_category("Audio", "Headphones and speakers")
    make_product(cat["id"], name="Buds")
    r = client.get("/categories")
    assert "Audio" in r.text
    assert "Headphones and speakers" in r.text
    assert "1 product" in r.text


def test_products_page_huge_page_number(client, make_category, make_product):
    make_product(make_category()["id"], name="X1")
    r = client.get("/products", params={"page": "99999999999999999999"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "No products available" in r.text
