# storefront/pages.py
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError

from . import categories, products
from .core import ProductFilters, coerce_int, product_dict
from .dependencies import SessionDep, SettingsDep
from .errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(default_response_class=HTMLResponse, include_in_schema=False)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def format_currency(value) -> str:
    if value is None:
        return "-"
    return f"${float(value):,.2f}"


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


templates.env.filters["currency"] = format_currency
templates.env.filters["plural"] = plural


def _render(request: Request, name: str, status_code: int = 200, **context) -> HTMLResponse:
    context.setdefault("store_name", request.app.state.settings.STORE_NAME)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _failed(request: Request, title: str, message: str, status_code: int = 500) -> HTMLResponse:
    return _render(request, "error.html", status_code=status_code, title=title, message=message)


# ---------------------------
# Pages
# ---------------------------
@router.get("/")
def home(request: Request, session: SessionDep):
    try:
        newest = products.list_products(session, ProductFilters(page=1, page_size=6))
        category_counts = categories.list_with_product_counts(session)
    except SQLAlchemyError:
        logger.exception("Error loading home page")
        return _failed(request, "Error Loading Store", "Failed to load featured products")

    featured = [product_dict(r.product, r.review_count, r.average_rating) for r in newest.items]
    return _render(request, "index.html", featured=featured, categories=category_counts)


@router.get("/products")
def product_list(
    request: Request,
    session: SessionDep,
    settings: SettingsDep,
    page: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
):
    filters = ProductFilters(
        page=coerce_int(page, 1),
        page_size=settings.DEFAULT_PAGE_SIZE,
        category=category or None,
        search=search or None,
    )
    try:
        result = products.list_products(session, filters)
    except SQLAlchemyError:
        logger.exception("Error loading products")
        return _failed(request, "Error Loading Products", "Failed to load products")

    items = [product_dict(r.product, r.review_count, r.average_rating) for r in result.items]
    return _render(
        request,
        "products.html",
        products=items,
        pagination=result.pagination,
        category=category or "",
        search=search or "",
    )


@router.get("/products/{product_id}")
def product_detail(product_id: str, request: Request, session: SessionDep):
    try:
        product = products.get_product(session, product_id)
    except NotFoundError:
        return _failed(request, "Product Not Found", "That product does not exist.", status_code=404)
    except SQLAlchemyError:
        logger.exception("Error loading product %s", product_id)
        return _failed(request, "Error Loading Product", "Failed to load product")

    return _render(request, "product_detail.html", product=product_dict(product, include_reviews=True))


@router.get("/categories")
def category_list(request: Request, session: SessionDep):
    try:
        category_counts = categories.list_with_product_counts(session)
    except SQLAlchemyError:
        logger.exception("Error loading categories")
        return _failed(request, "Error Loading Categories", "Failed to load categories")

    return _render(request, "categories.html", categories=category_counts)
