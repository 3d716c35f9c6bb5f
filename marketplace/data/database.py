# marketplace/data/database.py
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from marketplace.utils.settings import DATABASE_URL, DB_POOL_SIZE, DB_CONNECT_TIMEOUT


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    #sqlite ignores foreign keys without this pragma
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, **kwargs) -> Engine:
    """
    Build an engine for ``url``.

    Postgres gets a bounded pool with pre-ping and a short connect timeout;
    sqlite (tests, local dev) gets foreign keys switched on for every
    connection.
    """
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    kwargs.setdefault("pool_size", DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", 0)
    kwargs.setdefault("pool_pre_ping", True)
    kwargs.setdefault("pool_recycle", 30)
    kwargs.setdefault("connect_args", {"connect_timeout": DB_CONNECT_TIMEOUT})
    return create_engine(url, **kwargs)


engine = create_db_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


def get_db() -> Iterator[Session]:
    #one session per request, closed on every exit path
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
