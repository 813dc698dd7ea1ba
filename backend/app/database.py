from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import get_settings

settings = get_settings()

connect_args: dict = {}
if settings.is_sqlite():
    # Sync route handlers run in a threadpool; the SQLite driver must allow cross-thread use.
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.sqlalchemy_database_uri(),
    connect_args=connect_args,
    pool_pre_ping=True,
    future=True,
)

if settings.is_sqlite():

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
