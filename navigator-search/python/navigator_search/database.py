"""
Database connection and session management for stored domain versions
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, StaticPool

from .config import SearchSettings
from .models.base import Base

# Configure logging
logger = logging.getLogger(__name__)

class DatabaseManager:
    """Owns the engine and session factory for one database URL"""

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        self.database_url = database_url or SearchSettings.from_env().database_url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def _setup_database(self) -> None:
        """Initialize database connection"""
        url = make_url(self.database_url)

        if url.get_backend_name() == 'sqlite' and url.database in (None, '', ':memory:'):
            # In-memory SQLite lives inside one connection, so share it
            self._engine = create_engine(
                self.database_url,
                poolclass=StaticPool,
                echo=self.echo,
                connect_args={"check_same_thread": False}
            )
        else:
            self._engine = create_engine(
                self.database_url,
                poolclass=NullPool,
                echo=self.echo
            )

        self._session_factory = sessionmaker(
            bind=self._engine,
            autoflush=False,
            autocommit=False
        )
        logger.info(f"Database engine created for {url.render_as_string(hide_password=True)}")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._setup_database()
        return self._engine

    def create_tables(self) -> None:
        """Create any missing tables"""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session"""
        if self._session_factory is None:
            self._setup_database()
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

# Global database manager, created on first use
_db_manager: Optional[DatabaseManager] = None

def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager

def get_db_session() -> Session:
    """Get a database session - convenience function"""
    return get_db_manager().get_session()

@contextmanager
def db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions"""
    with get_db_manager().session_scope() as session:
        yield session
