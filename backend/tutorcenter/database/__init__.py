"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from tutorcenter.core.config import settings

logger = logging.getLogger(__name__)

_POSTGRES_CONNECT_ARGS: dict[str, Any] = {
    "connect_timeout": 5,
    # Statement timeout caps runaway index scans so the API layer recovers quickly.
    "options": "-c statement_timeout=15000",
    "application_name": "tutorcenter_backend",
}


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Engine options per dialect; SQLite gets a single shared connection."""
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": 5,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
        "connect_args": dict(_POSTGRES_CONNECT_ARGS),
    }


db_url = settings.get_database_url()
engine: Engine = create_engine(db_url, echo=settings.sql_echo, **_build_engine_kwargs(db_url))


@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """
    Return the dialect name of the engine/connection a session is bound to.

    Falls back to ``default`` when the bind cannot be resolved (e.g. mocked sessions).
    """
    try:
        bind = session.get_bind()
    except Exception:
        bind = getattr(inspect(session, raiseerr=False), "bind", None)
    dialect = getattr(bind, "dialect", None)
    name = getattr(dialect, "name", None)
    return name if isinstance(name, str) and name else default
