# Filename: cloudnest/db.py
import sqlite3

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session
from .config import settings

DATABASE_URL = settings.database_url


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite leaves foreign keys unchecked unless asked, per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    # an in-memory database only exists on the connection that created it
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
engine = create_engine(DATABASE_URL, echo=False, **engine_kwargs)


def init_db() -> None:
    """Create DB tables"""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Yield a DB session (dependency)."""
    with Session(engine) as session:
        yield session
