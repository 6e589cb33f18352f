# Path: certverify/database/base.py
"""
Database Base

SQLAlchemy declarative base and a Database handle owning the engine
and session factory.

Architecture:
- Single declarative base for all tables
- Engine with connection pooling, one per Database instance
- Transactional session scope
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool

from ..constants import LOG_INPUT
from ..core.logger import get_input_logger
from ..exceptions import ConfigurationError

logger = get_input_logger('database')

# SQLAlchemy declarative base
Base = declarative_base()


class Database:
    """
    Engine and session factory for one database.

    Example:
        db = Database('sqlite:///certificates.db')
        db.create_all_tables()
        with db.session_scope() as session:
            session.add(row)
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        pool_max_overflow: int = 10,
        echo: bool = False,
    ):
        """
        Args:
            database_url: SQLAlchemy URL
            pool_size: Connection pool size
            pool_max_overflow: Connections allowed beyond pool_size
            echo: Log SQL statements
        """
        if not database_url:
            raise ConfigurationError("Database URL is not configured (CERTVERIFY_DATABASE_URL)")

        url = make_url(database_url)
        options = {'echo': echo}
        if url.get_backend_name() == 'sqlite':
            # Repository calls run in worker threads
            options['connect_args'] = {'check_same_thread': False}
        else:
            options.update(
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=pool_max_overflow,
                pool_pre_ping=True,
            )

        self.engine = create_engine(url, **options)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        logger.info(f"{LOG_INPUT} Database engine initialized ({url.get_backend_name()})")

    @classmethod
    def from_config(cls, config) -> 'Database':
        return cls(
            config.get('database_url'),
            pool_size=config.get('pool_size'),
            pool_max_overflow=config.get('pool_max_overflow'),
        )

    def get_session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide transactional scope for database operations.

        Yields:
            SQLAlchemy session (committed on success, rolled back on error)
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all_tables(self) -> None:
        """Create all tables (idempotent)."""
        Base.metadata.create_all(self.engine)
        logger.info(f"{LOG_INPUT} Database tables created")

    def drop_all_tables(self) -> None:
        """
        Drop all tables.

        WARNING: This will delete all data!
        """
        Base.metadata.drop_all(self.engine)
        logger.warning("All database tables dropped")

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ['Base', 'Database']
