# backend/pilgrim/core/db.py
from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from pilgrim.core.config import settings


class Base(DeclarativeBase):
    pass


def _sqlite_on_connect(dbapi_conn, _record) -> None:
    # SQLite ignores foreign keys unless asked per connection
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def make_engine(url: str, **kwargs: Any) -> Engine:
    """Engine for `url`.

    SQLite connections may be used from several threads and enforce foreign keys.
    """
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, **kwargs.pop("connect_args", {})}
        eng = create_engine(url, connect_args=connect_args, **kwargs)
        event.listen(eng, "connect", _sqlite_on_connect)
        return eng
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    """Yields a sync SQLAlchemy Session and closes it when the caller is done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Ensure model modules are imported so SQLAlchemy can resolve relationships
import pilgrim.models  # noqa: F401
