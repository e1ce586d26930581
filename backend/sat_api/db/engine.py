"""Database engine configuration."""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sat_api.core.config import Settings


def create_db_engine(settings: Settings) -> Engine:
    """Create SQLAlchemy engine."""
    if settings.is_sqlite:
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in settings.DATABASE_URL:
            # In-memory SQLite must share one connection across threads
            kwargs["poolclass"] = StaticPool
        return create_engine(settings.DATABASE_URL, **kwargs)
    return create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=False,
    )


class Database:
    """Engine plus session factory, built once per application.

    Constructed by the application factory and passed to request handlers
    through ``app.state`` instead of living as a module-level singleton.
    """

    def __init__(self, settings: Settings, engine: Engine | None = None):
        self.engine = engine or create_db_engine(settings)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,  # Prevent lazy loading issues
        )

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        """Create tables (dev/test only; production uses Alembic)."""
        from sat_api.db.base import Base
        import sat_api.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()
