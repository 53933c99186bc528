from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import Settings
# Use the same Base as models to ensure one metadata registry
from models.base import Base


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connection(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # SQLite's built-in lower() only folds ASCII; PostgreSQL folds all of Unicode
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def build_engine(settings: Settings) -> Engine:
    url = settings.SQLALCHEMY_DATABASE_URI
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # A single shared connection keeps the in-memory database alive
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, future=True, **kwargs)
        event.listen(engine, "connect", _configure_sqlite_connection)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
        future=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def create_tables(engine: Engine) -> None:
    # Import model modules so their tables register on Base.metadata
    from models import project, project_object, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
