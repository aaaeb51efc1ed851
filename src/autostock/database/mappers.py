"""Mapper functions to convert between domain entities and backend rows.

Rows are the snake_case dicts exchanged with the backend. This layer owns
every conversion between the two shapes (user scoping, timestamps, decimal
amounts, tag lists, order item JSON, per-field settings) so it can be tested
without any I/O.
"""

from dataclasses import fields, replace
from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from dateutil import parser as date_parser

from autostock.database.base import Row
from autostock.domain import entities as domain
from autostock.domain.errors import ValidationError, unknown_fields

IMMUTABLE_FIELDS = {"id", "created_at"}
DATETIME_FIELDS = ("entry_date", "supplier_warranty")

PRODUCT_FIELDS = tuple(f.name for f in fields(domain.Product))
FOLDER_FIELDS = tuple(f.name for f in fields(domain.Folder))
CATEGORY_FIELDS = tuple(f.name for f in fields(domain.CategoryConfig))
SETTINGS_FIELDS = tuple(f.name for f in fields(domain.AppSettings))


def _to_datetime(value: Any) -> Optional[datetime]:
    """Normalize a backend timestamp to an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Express a timestamp in UTC; the columns store naive UTC values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_decimal(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    if value is None:
        return default
    return Decimal(str(value))


def _check_changes(entity: str, changes: dict[str, Any], allowed: tuple[str, ...]) -> None:
    unknown = set(changes) - (set(allowed) - IMMUTABLE_FIELDS)
    if unknown:
        raise ValidationError(unknown_fields(entity, unknown))


# Products


def product_to_row(product: domain.Product, user_id: str) -> Row:
    """Convert a domain Product to a backend row owned by ``user_id``."""
    return {
        "id": product.id,
        "user_id": user_id,
        "name": product.name,
        "category": product.category,
        "brand": product.brand,
        "description": product.description,
        "sku": product.sku,
        "cost": product.cost,
        "price": product.price,
        "stock": product.stock,
        "image_url": product.image_url,
        "supplier": product.supplier,
        "entry_date": _to_utc(product.entry_date),
        "supplier_warranty": _to_utc(product.supplier_warranty),
        "confidence": product.confidence,
        "folder_id": product.folder_id,
        "tags": list(product.tags),
        "abc_class": product.abc_class,
        "created_at": _to_utc(product.created_at),
    }


def product_from_row(row: Row) -> domain.Product:
    """Convert a backend row to a domain Product."""
    return domain.Product(
        id=row["id"],
        name=row["name"],
        category=row.get("category") or domain.DEFAULT_CATEGORY_NAME,
        sku=row.get("sku") or "",
        cost=_to_decimal(row.get("cost")),
        price=_to_decimal(row.get("price")),
        stock=max(0, int(row.get("stock") or 0)),
        image_url=domain.resolve_image_url(row.get("image_url")),
        created_at=_to_datetime(row.get("created_at")) or domain.utcnow(),
        folder_id=row.get("folder_id"),
        tags=tuple(row.get("tags") or ()),
        brand=row.get("brand"),
        description=row.get("description"),
        supplier=row.get("supplier"),
        confidence=row.get("confidence"),
        entry_date=_to_datetime(row.get("entry_date")),
        supplier_warranty=_to_datetime(row.get("supplier_warranty")),
        abc_class=row.get("abc_class"),
    )


def product_changes_to_row(changes: dict[str, Any]) -> Row:
    """Convert a partial Product update to backend column values.

    Raises:
        ValidationError: If a field is unknown or immutable
    """
    _check_changes("product", changes, PRODUCT_FIELDS)
    row = dict(changes)
    if "tags" in row:
        row["tags"] = list(row["tags"])
    for name in DATETIME_FIELDS:
        if isinstance(row.get(name), datetime):
            row[name] = _to_utc(row[name])
    return row


# Folders


def folder_to_row(folder: domain.Folder, user_id: str) -> Row:
    """Convert a domain Folder to a backend row owned by ``user_id``."""
    return {
        "id": folder.id,
        "user_id": user_id,
        "name": folder.name,
        "parent_id": folder.parent_id,
        "color": folder.color,
        "prefix": folder.prefix,
        "margin": folder.margin,
        "is_internal": folder.is_internal,
        "created_at": _to_utc(folder.created_at),
    }


def folder_from_row(row: Row) -> domain.Folder:
    """Convert a backend row to a domain Folder."""
    return domain.Folder(
        id=row["id"],
        name=row["name"],
        parent_id=row.get("parent_id"),
        created_at=_to_datetime(row.get("created_at")) or domain.utcnow(),
        color=row.get("color"),
        prefix=row.get("prefix"),
        margin=_to_decimal(row.get("margin"), default=None),
        is_internal=bool(row.get("is_internal")),
    )


def folder_changes_to_row(changes: dict[str, Any]) -> Row:
    """Convert a partial Folder update to backend column values."""
    _check_changes("folder", changes, FOLDER_FIELDS)
    return dict(changes)


# Categories


def category_to_row(category: domain.CategoryConfig, user_id: str) -> Row:
    """Convert a domain CategoryConfig to a backend row owned by ``user_id``."""
    return {
        "id": category.id,
        "user_id": user_id,
        "name": category.name,
        "prefix": category.prefix,
        "margin": category.margin,
        "color": category.color,
        "is_internal": category.is_internal,
    }


def category_from_row(row: Row) -> domain.CategoryConfig:
    """Convert a backend row to a domain CategoryConfig."""
    return domain.CategoryConfig(
        id=row["id"],
        name=row["name"],
        prefix=row.get("prefix") or "",
        margin=_to_decimal(row.get("margin")),
        color=row.get("color") or domain.DEFAULT_CATEGORY_COLOR,
        is_internal=bool(row.get("is_internal")),
    )


def category_changes_to_row(changes: dict[str, Any]) -> Row:
    """Convert a partial CategoryConfig update to backend column values."""
    _check_changes("category", changes, CATEGORY_FIELDS)
    return dict(changes)


# Orders


def order_to_row(order: domain.Order, user_id: str) -> Row:
    """Convert a domain Order to a backend row owned by ``user_id``."""
    return {
        "id": order.id,
        "user_id": user_id,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "items": [
            {
                "product_id": item.product_id,
                "name": item.name,
                "quantity": item.quantity,
                "price": str(item.price),
            }
            for item in order.items
        ],
        "total_amount": order.total_amount,
        "status": order.status.value,
        "created_at": _to_utc(order.created_at),
    }


def order_from_row(row: Row) -> domain.Order:
    """Convert a backend row to a domain Order."""
    items = tuple(
        domain.OrderItem(
            product_id=item["product_id"],
            name=item.get("name", ""),
            quantity=int(item.get("quantity", 0)),
            price=_to_decimal(item.get("price")),
        )
        for item in row.get("items") or ()
    )
    return domain.Order(
        id=row["id"],
        items=items,
        total_amount=_to_decimal(row.get("total_amount")),
        status=domain.OrderStatus(row.get("status") or domain.OrderStatus.PENDING.value),
        created_at=_to_datetime(row.get("created_at")) or domain.utcnow(),
        customer_name=row.get("customer_name"),
        customer_phone=row.get("customer_phone"),
    )


# Settings


def _settings_value_to_json(value: Any) -> Any:
    if isinstance(value, domain.PlanLevel):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value


def settings_to_rows(settings: domain.AppSettings, user_id: str) -> list[Row]:
    """Convert AppSettings to one backend row per field."""
    return [
        {"user_id": user_id, "key": name, "value": _settings_value_to_json(getattr(settings, name))}
        for name in SETTINGS_FIELDS
    ]


def settings_from_rows(rows: list[Row], base: domain.AppSettings) -> domain.AppSettings:
    """Apply persisted per-field rows on top of ``base``.

    Rows naming unknown fields are ignored so older stores keep loading.
    """
    values: dict[str, Any] = {}
    for row in rows:
        key = row.get("key")
        if key not in SETTINGS_FIELDS:
            continue
        value = row.get("value")
        if key == "plan" and value is not None:
            value = domain.PlanLevel(value)
        elif key == "tax_rate" and value is not None:
            value = Decimal(str(value))
        elif key == "stagnant_days_threshold" and value is not None:
            value = int(value)
        values[key] = value
    return replace(base, **values)


def claimed_offer_row(user_id: str, plan: domain.PlanLevel) -> Row:
    """Build the row recording a claimed offer."""
    return {
        "id": domain.new_id(),
        "user_id": user_id,
        "plan": plan.value,
        "claimed_at": _to_utc(domain.utcnow()),
    }
