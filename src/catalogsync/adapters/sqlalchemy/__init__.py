"""SQLAlchemy adapter package for the run log and the run lock."""

from __future__ import annotations

from .database import StartupError, configured_engine, session_factory, shutdown, startup
from .lock import SqlAlchemyRunLock
from .mappings import create_all_tables, mapper_registry, start_mappers
from .run_log import SqlAlchemyRunLogStore

__all__ = [
    "SqlAlchemyRunLock",
    "SqlAlchemyRunLogStore",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "mapper_registry",
    "session_factory",
    "shutdown",
    "start_mappers",
    "startup",
]
