"""Database engine and session management with SQLAlchemy 2.0.

Provides transactional sessions over a configurable engine. SQLite is
the default backend; in-memory SQLite shares one connection across
threads so tests and dry runs see a single database.
"""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cinecatalog.database.models import Base
from cinecatalog.settings import settings


class DatabaseConnection:
    """Manages the catalog engine and session factory.

    Example:
        ```python
        db = DatabaseConnection("sqlite:///:memory:")
        db.create_all()
        with db.session() as session:
            session.execute(text("SELECT 1"))
        ```
    """

    def __init__(self, url: str | None = None, echo: bool | None = None) -> None:
        """Create engine and session factory.

        Args:
            url: SQLAlchemy URL. Defaults to the configured database.
            echo: Log SQL statements. Defaults to DB_ECHO.
        """
        self._url = url or settings.database.sync_url
        if echo is None:
            echo = settings.database.echo
        self._engine = self._create_engine(self._url, echo)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        """Create the engine with backend-appropriate pooling.

        Args:
            url: SQLAlchemy URL.
            echo: Log SQL statements.

        Returns:
            Configured Engine.
        """
        if url.startswith("sqlite"):
            kwargs: dict = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool
            else:
                _ensure_sqlite_parent(url)
            return create_engine(url, echo=echo, **kwargs)

        return create_engine(
            url,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.pool_overflow,
            pool_timeout=settings.database.pool_timeout,
            pool_pre_ping=True,
            echo=echo,
        )

    @property
    def url(self) -> str:
        """Connection URL."""
        return self._url

    @property
    def engine(self) -> Engine:
        """Underlying engine."""
        return self._engine

    def create_all(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional session scope.

        Commits on success, rolls back on exception, and closes the
        session when done.

        Yields:
            SQLAlchemy Session instance.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        """Test database connectivity with a simple query.

        Returns:
            True if connection successful, False otherwise.
        """
        try:
            with self.session() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()


def _ensure_sqlite_parent(url: str) -> None:
    """Create the directory holding a SQLite database file."""
    path = url.split(":///", 1)[-1]
    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)


# =============================================================================
# MODULE-LEVEL CONVENIENCE FUNCTIONS
# =============================================================================

_db: DatabaseConnection | None = None


def get_database() -> DatabaseConnection:
    """Get the shared DatabaseConnection, creating tables on first use.

    Returns:
        DatabaseConnection for the configured URL.
    """
    global _db  # noqa: PLW0603
    if _db is None:
        _db = DatabaseConnection()
        _db.create_all()
    return _db


def close_database() -> None:
    """Dispose the shared connection."""
    global _db  # noqa: PLW0603
    if _db is not None:
        _db.dispose()
        _db = None
