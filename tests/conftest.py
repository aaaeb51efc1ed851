"""Shared pytest fixtures for autostock tests."""

from datetime import datetime, UTC
from decimal import Decimal

import pytest

from autostock.database.base import BackendError
from autostock.database.factories import create_sqlite_backend
from autostock.database.sqlalchemy_db import SQLAlchemyBackend
from autostock.domain.entities import (
    CategoryConfig,
    Folder,
    Product,
    Session,
    new_id,
)
from autostock.domain.store import InventoryStore

USER_ID = "user-1"


class FailingBackend(SQLAlchemyBackend):
    """Backend whose writes always fail; reads work normally."""

    def insert(self, table, rows):
        raise BackendError(f"insert into {table} refused")

    def update(self, table, values, match):
        raise BackendError(f"update of {table} refused")

    def delete(self, table, match):
        raise BackendError(f"delete from {table} refused")

    def upsert(self, table, rows, keys):
        raise BackendError(f"upsert into {table} refused")


def make_product(
    name: str = "Monitor 24",
    category: str = "Pantallas",
    price: str = "150.00",
    cost: str = "100.00",
    stock: int = 5,
    **kwargs,
) -> Product:
    """Build a product with sensible defaults."""
    values = {
        "id": new_id(),
        "name": name,
        "category": category,
        "sku": f"SKU-{name[:3].upper()}",
        "cost": Decimal(cost),
        "price": Decimal(price),
        "stock": stock,
        "image_url": "",
        "created_at": datetime(2024, 1, 1, tzinfo=UTC),
    }
    values.update(kwargs)
    return Product(**values)


def make_folder(name: str = "Bodega", parent_id=None, **kwargs) -> Folder:
    """Build a folder with sensible defaults."""
    return Folder(
        id=new_id(),
        name=name,
        parent_id=parent_id,
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
        **kwargs,
    )


def make_category(name: str = "Pantallas", prefix: str = "PAN", margin: str = "0.30", **kwargs):
    """Build a category with sensible defaults."""
    return CategoryConfig(id=new_id(), name=name, prefix=prefix, margin=Decimal(margin), **kwargs)


@pytest.fixture
def backend(tmp_path):
    """Create a temporary SQLite backend for testing."""
    db = create_sqlite_backend(str(tmp_path / "autostock.db"))
    db.connect()

    yield db

    db.disconnect()


@pytest.fixture
def store(backend):
    """Create a signed-in store backed by the temporary database."""
    store = InventoryStore(backend=backend)
    store.set_session(Session(user_id=USER_ID, email="owner@example.com"))
    return store


@pytest.fixture
def anonymous_store(backend):
    """Create a store with a configured backend but no session."""
    return InventoryStore(backend=backend)


@pytest.fixture
def demo_store():
    """Create a store in demo mode, without a backend."""
    return InventoryStore(demo_mode=True)


@pytest.fixture
def failing_backend(tmp_path):
    """Create a backend whose writes fail."""
    db = FailingBackend(f"sqlite:///{tmp_path / 'failing.db'}")

    yield db

    db.disconnect()


@pytest.fixture
def failing_store(failing_backend):
    """Create a signed-in store whose remote writes fail."""
    store = InventoryStore(backend=failing_backend)
    store.set_session(Session(user_id=USER_ID))
    return store


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
