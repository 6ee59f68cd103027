"""Database connection pool and session management."""
import logging
import os
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from recipebook.config import Settings, get_settings
from recipebook.exceptions import (
    ConflictError,
    ServiceUnavailableError,
    StoreError,
    TransactionError,
)

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Build database URL from environment variables.

    ``DATABASE_URL`` wins when set; otherwise a PostgreSQL URL is assembled
    from the individual ``DB_*`` settings.
    """
    if url := os.getenv("DATABASE_URL"):
        return url

    settings = get_settings()
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    user = settings.DB_USER
    password = settings.DB_PASSWORD
    host = settings.DB_HOST
    port = settings.DB_PORT
    database = settings.DB_NAME
    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ignores ON DELETE CASCADE/RESTRICT unless this pragma is set."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(
    database_url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Engine:
    """Create an engine over a bounded connection pool.

    Args:
        database_url: Optional database URL. If None, uses get_database_url().
        settings: Optional settings. If None, uses get_settings().

    Returns:
        Configured SQLAlchemy Engine
    """
    settings = settings or get_settings()
    database_url = database_url or get_database_url()

    if database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/") == "sqlite:"
    ):
        # In-memory SQLite: every connection must see the same database
        engine = create_engine(
            database_url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False, "timeout": 30}
        engine = create_engine(
            database_url,
            echo=settings.DB_ECHO,
            connect_args=connect_args,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


class ConnectionPool:
    """Handle on the bounded connection pool used by every store operation.

    ``session()`` is the read scope: no explicit transaction, connection
    always returned. ``transaction()`` is the write scope: one connection for
    the whole transaction, commit on success, rollback on any failure, and
    unconditional release.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def _checkout(self, session: Session) -> None:
        """Acquire the pooled connection up front so exhaustion surfaces early."""
        try:
            session.connection()
        except sa_exc.TimeoutError as e:
            logger.warning(f"Connection pool exhausted: {e}")
            raise ServiceUnavailableError(
                "No database connection available; try again later"
            ) from e

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Read-only scope over one pooled connection."""
        session = self._session_factory()
        try:
            self._checkout(session)
            yield session
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Transactional scope over one pooled connection.

        Store errors raised inside the block pass through after rollback.
        Integrity violations become ConflictError; anything else becomes
        TransactionError. Cancellation (KeyboardInterrupt, SystemExit) rolls
        back and propagates unchanged.
        """
        session = self._session_factory()
        try:
            self._checkout(session)
            yield session
            session.commit()
        except StoreError:
            session.rollback()
            raise
        except sa_exc.IntegrityError as e:
            session.rollback()
            logger.warning(f"Constraint violation, transaction rolled back: {e.orig}")
            raise ConflictError(f"Write conflicts with existing data: {e.orig}") from e
        except Exception as e:
            session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise TransactionError(f"Write failed and was rolled back: {e}", e) from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


@lru_cache
def get_engine() -> Engine:
    """Create SQLAlchemy engine (cached)."""
    return create_database_engine()


@lru_cache
def get_pool() -> ConnectionPool:
    """Process-wide connection pool handle (cached)."""
    return ConnectionPool(get_engine())
