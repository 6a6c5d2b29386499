# sdk/storefront.py
import requests
import httpx
from typing import Any, Dict, List, Optional
from rich import print


class StoreError(Exception):
    """Raised when the API answers with {"success": false, ...}."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StoreClient:
    def __init__(self, base_url: str = "http://localhost:8085", timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api"
        self.session = requests.Session()
        self.timeout = timeout

    def _unwrap(self, r) -> Any:
        try:
            body = r.json()
        except ValueError:
            r.raise_for_status()
            raise StoreError(r.status_code, r.text)
        if r.status_code >= 400 or body.get("success") is False:
            raise StoreError(r.status_code, body.get("error", "request failed"))
        return body

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        r = self.session.get(f"{self.api_url}{path}", params=params or None, timeout=self.timeout)
        return self._unwrap(r)

    def _send(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        fn = getattr(self.session, method)
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if payload is not None:
            kwargs["json"] = payload
        return self._unwrap(fn(f"{self.api_url}{path}", **kwargs))

    # Service
    def health(self) -> Dict[str, Any]:
        r = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Products
    def list_products(self, page: int = 1, limit: int = 10, category: Optional[str] = None, search: Optional[str] = None):
        """Returns the whole envelope so callers get `pagination` too."""
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return self._get("/products", params)

    def search_products(self, term: str, limit: int = 10) -> List[Dict[str, Any]]:
        return self.list_products(limit=limit, search=term)["data"]

    def get_product(self, product_id: str) -> Dict[str, Any]:
        return self._get(f"/products/{product_id}")["data"]

    def create_product(
        self,
        name: str,
        price: float,
        category_id: str,
        stock: int = 0,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        condition: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": name, "price": price, "categoryId": category_id, "stock": stock}
        if description is not None:
            payload["description"] = description
        if image_url is not None:
            payload["imageUrl"] = image_url
        if condition is not None:
            payload["condition"] = condition
        return self._send("post", "/products", payload)["data"]

    def update_product(self, product_id: str, **changes) -> Dict[str, Any]:
        # keyword names are sent as-is, so use the API's camelCase (imageUrl, isActive)
        return self._send("put", f"/products/{product_id}", changes)["data"]

    def update_stock(self, product_id: str, stock: int) -> Dict[str, Any]:
        return self._send("put", f"/products/{product_id}/stock", {"stock": int(stock)})["data"]

    def delete_product(self, product_id: str) -> str:
        return self._send("delete", f"/products/{product_id}")["message"]

    def low_stock(self, threshold: int = 10) -> List[Dict[str, Any]]:
        return self._get("/products/low-stock", {"threshold": threshold})["data"]

    def top_rated(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self._get("/products/top-rated", {"limit": limit})["data"]

    def product_rating(self, product_id: str) -> Dict[str, Any]:
        return self._get(f"/products/{product_id}/rating")["data"]

    # Categories
    def list_categories(self, with_counts: bool = False) -> List[Dict[str, Any]]:
        params = {"withCounts": "true"} if with_counts else None
        return self._get("/categories", params)["data"]

    def create_category(self, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        return self._send("post", "/categories", {"name": name, "description": description})["data"]

    def delete_category(self, category_id: str) -> str:
        return self._send("delete", f"/categories/{category_id}")["message"]

    # Users
    def create_user(self, name: str, email: str) -> Dict[str, Any]:
        return self._send("post", "/users", {"name": name, "email": email})["data"]

    def find_user(self, email: str) -> Optional[Dict[str, Any]]:
        try:
            return self._get("/users/by-email", {"email": email})["data"]
        except StoreError as e:
            if e.status_code == 404:
                return None
            raise

    # Reviews
    def create_review(self, user_id: str, product_id: str, rating: int, comment: Optional[str] = None) -> Dict[str, Any]:
        payload = {"userId": user_id, "productId": product_id, "rating": int(rating), "comment": comment}
        return self._send("post", "/reviews", payload)["data"]

    def recent_reviews(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self._get("/reviews", {"limit": limit})["data"]

    # Async listing (example)
    async def list_products_async(self, page: int = 1, limit: int = 10, category: Optional[str] = None, search: Optional[str] = None):
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.get(f"{self.api_url}/products", params=params)
            return self._unwrap(r)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Gadget Store SDK")
    parser.add_argument("--base-url", default="http://127.0.0.1:8085")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Product commands
    # ---------------------------
    lp = subparsers.add_parser("list-products", help="List active products")
    lp.add_argument("--page", type=int, default=1)
    lp.add_argument("--limit", type=int, default=10)
    lp.add_argument("--category", help="Category id or name")
    lp.add_argument("--search", help="Match name or description")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True)

    cp = subparsers.add_parser("create-product", help="Create a product")
    cp.add_argument("--name", required=True)
    cp.add_argument("--price", type=float, required=True, help="Price in dollars")
    cp.add_argument("--category-id", required=True)
    cp.add_argument("--stock", type=int, default=0)
    cp.add_argument("--condition")

    dp = subparsers.add_parser("delete-product", help="Deactivate a product")
    dp.add_argument("--product-id", required=True)

    ls = subparsers.add_parser("low-stock", help="Products at or under a stock threshold")
    ls.add_argument("--threshold", type=int, default=10)

    subparsers.add_parser("top-rated", help="Best reviewed products")

    # ---------------------------
    # Category commands
    # ---------------------------
    subparsers.add_parser("list-categories", help="Categories with active product counts")
    cc = subparsers.add_parser("create-category")
    cc.add_argument("--name", required=True)
    cc.add_argument("--description")

    args = parser.parse_args()
    c = StoreClient(base_url=args.base_url)

    if args.command == "list-products":
        print(c.list_products(args.page, args.limit, args.category, args.search))
    elif args.command == "get-product":
        print(c.get_product(args.product_id))
    elif args.command == "create-product":
        print(c.create_product(args.name, args.price, args.category_id, args.stock, condition=args.condition))
    elif args.command == "delete-product":
        print(c.delete_product(args.product_id))
    elif args.command == "low-stock":
        print(c.low_stock(args.threshold))
    elif args.command == "top-rated":
        print(c.top_rated())
    elif args.command == "list-categories":
        print(c.list_categories(with_counts=True))
    elif args.command == "create-category":
        print(c.create_category(args.name, args.description))
