from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.core.config import DATABASE_URL, LOCK_TIMEOUT_SECONDS
from storefront.core.errors import from_db_error

Base = declarative_base()


def make_engine(url: str):
    connect_args = {}
    sqlite = url.startswith("sqlite")
    if sqlite:
        # busy timeout: how long a writer waits on another writer's lock
        connect_args = {"check_same_thread": False, "timeout": LOCK_TIMEOUT_SECONDS}
    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
    if sqlite:
        event.listen(engine, "connect", _enforce_foreign_keys)
    return engine


def _enforce_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def init_db(bind=None):
    from storefront.db import models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """Scoped transaction: commit on clean exit, roll back on any exception.

    SQLAlchemy failures are re-raised as the matching ``AppError``.
    """
    try:
        if db.get_bind().dialect.name == "postgresql":
            db.execute(text(f"SET LOCAL lock_timeout = {int(LOCK_TIMEOUT_SECONDS * 1000)}"))
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise from_db_error(exc) from exc
    except Exception:
        db.rollback()
        raise
