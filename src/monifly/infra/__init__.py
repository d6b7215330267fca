"""Infrastructure layer: database engine, repositories and unit of work."""

from .database import create_db_engine, init_database, session_scope
from .unit_of_work import UnitOfWork

__all__ = [
    "UnitOfWork",
    "create_db_engine",
    "init_database",
    "session_scope",
]
