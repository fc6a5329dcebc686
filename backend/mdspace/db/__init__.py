"""Database module for the mdspace backend.

The only database is the markdown index (SQLite by default):
- models.py: File / FileTag ORM models
- engine.py: engine, session factory and transactional session helper
"""

from mdspace.db.engine import (
    check_connection,
    create_index_engine,
    create_session_factory,
    session_scope,
)
from mdspace.db.models import Base, FileModel, FileTagModel

__all__ = [
    # Connection
    "create_index_engine",
    "create_session_factory",
    "session_scope",
    "check_connection",
    # Models
    "Base",
    "FileModel",
    "FileTagModel",
]
