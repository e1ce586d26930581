"""Database session management."""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from sat_api.db.engine import Database


def get_database(request: Request) -> Database:
    """Dependency returning the application's Database."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency to get database session."""
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
