# comics_api/lib/db.py
from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from comics_api.config import config


class Base(DeclarativeBase):
    pass


def make_engine(url: str, **kwargs) -> Engine:
    """
    Build an engine for `url`. SQLite gets foreign keys switched on and is
    allowed to cross threads (FastAPI runs sync endpoints in a threadpool).
    """
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {"check_same_thread": False, "timeout": 30})
    else:
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_recycle", 3600)

    engine = create_engine(url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = make_engine(config.database_url)

# expire_on_commit off: rows stay readable after the pre-generation commit
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def init_db(bind: Engine = engine) -> None:
    # models must be imported so their tables are registered on Base.metadata
    from comics_api import models  # noqa: F401
    Base.metadata.create_all(bind=bind)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
