"""Domain layer for autostock application."""

# Services are resolved lazily: the store imports the database mappers, which
# import the entities in this package.
_EXPORTS = {
    "InventoryStore": "autostock.domain.store",
    "CSVImportService": "autostock.domain.csv_import",
    "ReportService": "autostock.domain.reports",
    "StorefrontService": "autostock.domain.storefront",
    "ProductEntryService": "autostock.domain.product_entry",
}

__all__ = list(_EXPORTS)


def __getattr__(name):
    if name in _EXPORTS:
        import importlib

        return getattr(importlib.import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
