# backend/database.py
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_PRIORITIES = [("Low", 1), ("Medium", 2), ("High", 3)]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, pool_size: int = 10, pool_timeout: int = 30) -> Engine:
    """
    Build an engine for ``url``.

    SQLite connections are shared across threads (FastAPI runs sync routes in a
    threadpool) and enforce foreign keys; in-memory SQLite uses a single static
    connection so every session sees the same database. Server databases get a
    bounded connection pool.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=pool_size,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


settings = get_settings()
engine = make_engine(settings.database_url, settings.db_pool_size, settings.db_pool_timeout)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_priorities(db: Session) -> None:
    from models import Priority

    if db.query(Priority).count():
        return
    for name, level in DEFAULT_PRIORITIES:
        db.add(Priority(name=name, level=level))
    db.commit()
    logger.info("Seeded %d default priorities", len(DEFAULT_PRIORITIES))


def init_db(bind: Engine = engine) -> None:
    """Create missing tables and seed the global priority table."""
    import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind)
    db = Session(bind=bind)
    try:
        seed_priorities(db)
    finally:
        db.close()
