"""Database management for the problem bank."""

from .connection import DatabaseConfig, close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .memory import InMemoryStore
from .postgres import PostgresStore
from .store import ProblemBankStore

__all__ = [
    "DatabaseConfig",
    "InMemoryStore",
    "PostgresStore",
    "ProblemBankStore",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
