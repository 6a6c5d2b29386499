#!/usr/bin/env python
import uuid
from sdk.storefront import StoreClient

def main():
    c = StoreClient(base_url="http://127.0.0.1:8085")
    suffix = uuid.uuid4().hex[:6]

    # -----------------------------
    # Health
    # -----------------------------
    print("Checking service health...")
    print(c.health())

    # -----------------------------
    # Create a category
    # -----------------------------
    print("\nCreating category...")
    phones = c.create_category(f"Phones {suffix}", "Smartphones and accessories")
    print(phones)

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    x1 = c.create_product("X1", 199.99, phones["id"], stock=5, description="Compact flagship phone")
    x2 = c.create_product("X2 Pro", 649.00, phones["id"], stock=2, condition="refurbished")
    print(x1)
    print(x2)

    # -----------------------------
    # List products (first page of the category)
    # -----------------------------
    print("\nListing products in category...")
    print(c.list_products(page=1, limit=10, category=phones["id"]))

    # -----------------------------
    # Search
    # -----------------------------
    print("\nSearching for 'flagship'...")
    print(c.search_products("flagship"))

    # -----------------------------
    # Review
    # -----------------------------
    user_email = f"alice+{suffix}@example.com"
    print(f"\nCreating user {user_email} and a review...")
    alice = c.create_user("Alice", user_email)
    print(c.create_review(alice["id"], x1["id"], 5, "Great little phone"))
    print(c.product_rating(x1["id"]))

    # -----------------------------
    # Partial update and soft delete
    # -----------------------------
    print("\nUpdating stock and deleting X2...")
    print(c.update_product(x1["id"], stock=3))
    print(c.delete_product(x2["id"]))

    # -----------------------------
    # Reports
    # -----------------------------
    print("\nLow stock report...")
    print(c.low_stock(threshold=5))
    print("\nTop rated...")
    print(c.top_rated())

if __name__ == "__main__":
    main()
