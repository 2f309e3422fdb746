"""Database engine and session management."""
import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from yield_data_agg.db.models import (  # noqa: F401  # pylint: disable=unused-import
    Alert, AprHistoryPoint, AprSnapshot, Notification)
from yield_data_agg.errors import PersistenceUnavailable

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave on pysqlite."""

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # noqa: ANN001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create a synchronous engine; SQLite URLs get a thread-shareable setup."""
    if url.startswith("sqlite"):
        in_memory = url in ("sqlite://", "sqlite:///:memory:")
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if in_memory else None,
        )
        _enable_sqlite_savepoints(engine)
        return engine
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


class Database:
    """Owns the engine. With no URL configured every session raises PersistenceUnavailable."""

    def __init__(self, url: str | None, *, echo: bool = False) -> None:
        self._engine = create_db_engine(url, echo=echo) if url else None

    @property
    def available(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise PersistenceUnavailable("DATABASE_URL is not configured")
        return self._engine

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a database session; commits on success, rolls back on error."""
        session = Session(self.engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except OperationalError as exc:
            session.rollback()
            raise PersistenceUnavailable(str(exc.orig or exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        """Create all tables. Safe to call on startup (idempotent for existing tables)."""
        if self._engine is None:
            logger.warning("DATABASE_URL not set; snapshots, history and alerts are disabled")
            return
        SQLModel.metadata.create_all(self._engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
