from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from signage.settings import DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


if DATABASE_URL.startswith("sqlite"):

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
        # SQLite ignores ON DELETE CASCADE unless the pragma is on per connection.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    # Importing the model modules registers their tables on Base.metadata.
    from signage.models import (  # noqa: F401
        analytics,
        content,
        customer,
        layout,
        player,
        playlist,
        schedule,
        user,
        webhook,
    )

    Base.metadata.create_all(bind=engine)
