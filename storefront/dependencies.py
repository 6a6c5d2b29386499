# storefront/dependencies.py
from typing import Annotated, Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .config import Settings
from .database import Database


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_session(db: Annotated[Database, Depends(get_database)]) -> Iterator[Session]:
    """
    One session per request.

    Write handlers commit before building their response; the commit here
    only closes out read transactions.
    """
    with db.session() as session:
        yield session


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


DatabaseDep = Annotated[Database, Depends(get_database)]
SessionDep = Annotated[Session, Depends(get_session)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
