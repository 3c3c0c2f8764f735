"""
Database module - SQL tables, sessions, and the repository interface.
"""
from app.db.postgres import get_engine, get_session_factory, check_database_connection
from app.db.repository import Repository, InMemoryRepository, In, Gte, OrderBy, GuardedWrite
from app.db.sql_repository import SqlRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "check_database_connection",
    "Repository",
    "InMemoryRepository",
    "SqlRepository",
    "In",
    "Gte",
    "OrderBy",
    "GuardedWrite",
]
