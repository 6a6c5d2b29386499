# storefront/database.py
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

# This file holds the storage handle: one engine (and its connection pool)
# per process, created at startup and disposed at shutdown.


def _engine_options(url: str, echo: bool) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        # an in-memory database only lives as long as its single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
    return options


class Database:
    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def connect(self, create_tables: bool = True) -> None:
        if self._engine is not None:
            return
        self._engine = create_engine(self.url, **_engine_options(self.url, self.echo))
        self._sessionmaker = sessionmaker(bind=self._engine, expire_on_commit=False)
        if create_tables:
            Base.metadata.create_all(self._engine)
        logger.info("Database connected (%s)", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database disconnected")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Transactional scope around one unit of work.

        Commits when the block exits cleanly, rolls back on any exception
        and always returns the connection to the pool.
        """
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected; call connect() first")
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> Dict[str, Any]:
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "healthy", "timestamp": timestamp}
        except (SQLAlchemyError, RuntimeError) as e:
            logger.warning("Database health check failed: %s", e)
            return {"status": "unhealthy", "error": str(e), "timestamp": timestamp}
