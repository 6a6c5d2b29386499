# storefront/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import pages, routes
from .config import Settings, get_settings
from .database import Database
from .dependencies import DatabaseDep
from .errors import InternalError, StoreError

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    problems = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "invalid input"))
    return "Invalid request: " + "; ".join(problems) if problems else "Invalid request"


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s in %s mode", settings.STORE_NAME, settings.ENVIRONMENT)
        database.connect()
        try:
            yield
        finally:
            logger.info("Shutting down, closing storage")
            database.close()

    app = FastAPI(title=f"{settings.STORE_NAME} API", version=API_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------
    # Error shaping
    # ---------------------------
    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return _error(404, "Route not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=InternalError().to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=InternalError().to_dict())

    # ---------------------------
    # Service endpoints
    # ---------------------------
    @app.get("/health")
    def health(db: DatabaseDep):
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": db.health_check(),
        }

    @app.get("/api")
    def api_index():
        return {
            "message": f"{settings.STORE_NAME} API",
            "version": API_VERSION,
            "endpoints": {
                "health": "/health",
                "products": "/api/products",
                "categories": "/api/categories",
                "users": "/api/users",
                "reviews": "/api/reviews",
            },
        }

    app.include_router(routes.router, prefix="/api")
    app.include_router(pages.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("storefront.main:app", host=_settings.API_HOST, port=_settings.API_PORT)
