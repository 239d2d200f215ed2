"""
Database engine and session management.

Every mutating repository call runs inside a caller supplied unit of work;
``session_scope`` is that unit of work for scripts and the CLI.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_config

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create an engine for the configured database.

    SQLite connections get foreign key enforcement switched on so reference
    constraints are reported by the store.

    Args:
        database_url: SQLAlchemy URL; the configured one by default
        echo: Log SQL statements; the configured flag by default

    Returns:
        SQLAlchemy engine
    """
    config = get_config()
    url = database_url or config.database_url
    engine = create_engine(url, echo=config.echo_sql if echo is None else echo)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to ``engine``."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all catalog tables that do not exist yet."""
    from .catalog.entities import Base

    Base.metadata.create_all(engine)
    logger.info("Catalog schema created")


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """
    Unit of work: commit on success, roll back on any exception.

    Usage:
        with session_scope(factory) as session:
            BookService(session).delete_book(42)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
