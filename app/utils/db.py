from collections.abc import Generator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

# Import models so their metadata is registered before create_all
# ruff: noqa: F401
from app import db_models
from app.settings import settings


def build_engine(url: str, **overrides) -> Engine:
    is_sqlite = url.startswith("sqlite")

    engine_kwargs: dict = {
        "echo": settings.DEBUG,
        # Avoid stale connections in long-running apps (esp. behind load balancers)
        "pool_pre_ping": True,
    }

    if is_sqlite:
        # Needed for SQLite used within FastAPI (single-threaded writer)
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
        engine_kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW
        # Recycle connections periodically to avoid server-side timeouts (secs)
        engine_kwargs["pool_recycle"] = 1800  # 30 minutes

    engine_kwargs.update(overrides)
    new_engine = create_engine(url, **engine_kwargs)
    if is_sqlite:

        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
            # SQLite ignores ON DELETE CASCADE unless asked per connection
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine: Engine = build_engine(settings.DATABASE_URL)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency to provide a short-lived DB session per request."""
    with Session(engine) as session:
        yield session


def create_db_and_tables(bind: Engine | None = None) -> None:
    """Create any missing tables. Existing tables and data are kept."""
    SQLModel.metadata.create_all(bind or engine)
