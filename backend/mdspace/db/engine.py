"""Database engine and session management for the markdown index.

Engines are created by their owner (``MarkdownIndex.init``) instead of at
import time, so tests can point each index at its own database.

Usage:
    engine = create_index_engine("sqlite:///workspaces.db")
    SessionLocal = create_session_factory(engine)

    with session_scope(SessionLocal) as db:
        db.execute(select(FileModel))
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mdspace.utils import get_logger

logger = get_logger(__name__)

# Seconds SQLite waits on a locked database before failing
SQLITE_BUSY_TIMEOUT = 30


def create_index_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the index database.

    Args:
        database_url: SQLAlchemy URL (SQLite in practice)
        echo: Log SQL statements

    Returns:
        Configured engine
    """
    engine_kwargs: dict = {"echo": echo}

    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT,
        }
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            # One shared connection, otherwise every checkout gets an empty database
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **engine_kwargs)

    if is_sqlite:

        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            """SQLite ignores ON DELETE CASCADE unless foreign keys are on."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info(f"Index database engine created: {database_url}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Transactional session: commit on success, rollback on error.

    Usage:
        with session_scope(SessionLocal) as db:
            db.add(obj)
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_connection(engine: Engine) -> bool:
    """Check if the database answers a trivial query.

    Returns:
        True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
