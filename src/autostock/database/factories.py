"""Backend factory functions for creating backend instances."""

import os
from pathlib import Path
from typing import Optional

from autostock.database.sqlalchemy_db import SQLAlchemyBackend


def default_database_url() -> str:
    """Return the default SQLite URL under ~/.autostock."""
    db_dir = Path.home() / ".autostock"
    db_dir.mkdir(exist_ok=True)
    return f"sqlite:///{db_dir / 'autostock.db'}"


def create_backend(database_url: Optional[str] = None) -> SQLAlchemyBackend:
    """Create a backend instance.

    Args:
        database_url: SQLAlchemy URL. If None, checks AUTOSTOCK_DB_URL
            environment variable, then defaults to ~/.autostock/autostock.db

    Returns:
        SQLAlchemyBackend instance
    """
    if database_url is None:
        database_url = os.environ.get("AUTOSTOCK_DB_URL")

    if database_url is None:
        database_url = default_database_url()

    return SQLAlchemyBackend(database_url)


def create_sqlite_backend(database_path: str) -> SQLAlchemyBackend:
    """Create a backend stored in the SQLite file at ``database_path``."""
    return SQLAlchemyBackend(f"sqlite:///{database_path}")
