"""Engine and session factory configuration."""

from __future__ import annotations

from collections.abc import Generator
import logging
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from app.db import models  # noqa: F401  (registers models on Base.metadata)
from app.db.base import Base

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict[str, Any]:
    """Pick pooling/connect arguments suited to the database backend."""
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        database = make_url(url).database
        if not database or database == ":memory:":
            # One shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
        return options

    # pool_pre_ping: Test connections before using (handles stale connections)
    # pool_recycle: Recycle connections after 30 minutes (prevents timeout)
    options = {
        "poolclass": QueuePool,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "pool_size": 5,
        "max_overflow": 10,
    }
    if backend == "postgresql":
        options["connect_args"] = {
            "connect_timeout": 10,
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        }
    return options


class Database:
    """Engine plus session factory, constructed once and handed to the app."""

    def __init__(self, url: str, echo: bool = False, engine: Engine | None = None):
        self.url = url
        self.engine = engine or create_engine(
            url, echo=echo, future=True, **engine_options(url)
        )
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
        )

    def session(self) -> Generator[Session, None, None]:
        """Yield a session for one request and always close it."""
        db = self.session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()

    def create_all(self) -> None:
        """Create missing tables for every registered model."""
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def connect_db(database: Database) -> bool:
    """Check connectivity and create the schema.

    A failure is logged and swallowed: the process keeps serving, and every
    request that touches the database will fail until it becomes reachable.
    ``/health/ready`` reports that state.
    """
    try:
        database.ping()
        database.create_all()
    except Exception as e:
        # Any startup failure, including unwrapped driver errors, is non-fatal
        logger.error(f"Unable to connect to the database: {e}", exc_info=True)
        return False
    logger.info("Connection has been established successfully.")
    return True
