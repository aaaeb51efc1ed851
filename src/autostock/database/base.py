"""Abstract remote backend interface.

The backend is a table store addressed by name. Rows are plain dicts keyed by
snake_case column names and every table is scoped by a ``user_id`` column.
Conversion between rows and domain entities lives in ``mappers``.
"""

from abc import ABC, abstractmethod
from typing import Any

PRODUCTS = "products"
FOLDERS = "folders"
CATEGORIES = "categories"
CLAIMED_OFFERS = "claimed_offers"
ORDERS = "orders"
SETTINGS = "settings"

TABLES = (PRODUCTS, FOLDERS, CATEGORIES, CLAIMED_OFFERS, ORDERS, SETTINGS)

# Columns identifying one settings row
SETTINGS_KEY_COLUMNS = ("user_id", "key")

Row = dict[str, Any]


class BackendError(Exception):
    """A remote read or write failed."""


class RemoteBackend(ABC):
    """Abstract table-level backend for autostock."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the backend."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the backend."""
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the backend points at a real store rather than a placeholder."""
        pass

    @abstractmethod
    def select(self, table: str, match: Row) -> list[Row]:
        """Return rows of ``table`` whose columns equal every value in ``match``."""
        pass

    @abstractmethod
    def insert(self, table: str, rows: list[Row]) -> None:
        """Insert rows into ``table``."""
        pass

    @abstractmethod
    def update(self, table: str, values: Row, match: Row) -> int:
        """Update matching rows. Returns the number of rows changed."""
        pass

    @abstractmethod
    def delete(self, table: str, match: Row) -> int:
        """Delete matching rows. Returns the number of rows removed."""
        pass

    @abstractmethod
    def upsert(self, table: str, rows: list[Row], keys: tuple[str, ...]) -> None:
        """Write rows in one transaction, updating any row that matches on ``keys``.

        Rows without a match are inserted. Either every row is written or none is.
        """
        pass
