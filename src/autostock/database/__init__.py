"""Database layer for autostock application."""

from autostock.database.base import BackendError, RemoteBackend
from autostock.database.factories import create_backend, create_sqlite_backend
from autostock.database.sqlalchemy_db import SQLAlchemyBackend

__all__ = [
    "BackendError",
    "RemoteBackend",
    "SQLAlchemyBackend",
    "create_backend",
    "create_sqlite_backend",
]
