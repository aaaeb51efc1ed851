"""Tests for database mappers."""

import pytest
from datetime import datetime, timedelta, timezone, UTC
from decimal import Decimal

from autostock.database import mappers
from autostock.domain.entities import (
    DEFAULT_PRODUCT_IMAGE,
    AppSettings,
    Order,
    OrderItem,
    OrderStatus,
    PlanLevel,
)
from autostock.domain.errors import ValidationError

from conftest import make_category, make_folder, make_product


class TestProductMapper:
    """Tests for Product mapper."""

    def test_product_to_row(self):
        """Rows are snake_case, user-scoped and carry tags as a list."""
        product = make_product(tags=("Oferta",), folder_id="f1")
        row = mappers.product_to_row(product, "u1")

        assert row["user_id"] == "u1"
        assert row["id"] == product.id
        assert row["image_url"] == product.image_url
        assert row["folder_id"] == "f1"
        assert row["tags"] == ["Oferta"]
        assert row["price"] == Decimal("150.00")

    def test_product_from_row(self):
        """Timestamps become aware, amounts Decimal, tags a tuple."""
        row = {
            "id": "p1",
            "name": "Monitor",
            "category": "Pantallas",
            "sku": "PAN-0001",
            "cost": 100.0,
            "price": "150.50",
            "stock": 4,
            "image_url": "https://example.com/m.jpg",
            "created_at": "2024-01-01T10:00:00",
            "entry_date": datetime(2024, 1, 2),
            "tags": ["Oferta"],
        }
        product = mappers.product_from_row(row)

        assert product.price == Decimal("150.50")
        assert product.cost == Decimal("100.0")
        assert product.created_at == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        assert product.entry_date.tzinfo is not None
        assert product.supplier_warranty is None
        assert product.tags == ("Oferta",)

    def test_product_from_row_normalizes(self):
        """Negative stock clamps to zero and a bad image falls back."""
        row = {"id": "p1", "name": "X", "stock": -3, "image_url": "", "created_at": None}
        product = mappers.product_from_row(row)

        assert product.stock == 0
        assert product.image_url == DEFAULT_PRODUCT_IMAGE
        assert product.category == "General"
        assert product.created_at.tzinfo is not None

    def test_offset_timestamps_written_as_utc(self):
        lima = timezone(timedelta(hours=-5))
        product = make_product(entry_date=datetime(2024, 1, 1, 10, 0, tzinfo=lima))

        row = mappers.product_to_row(product, "u1")
        changes = mappers.product_changes_to_row({"entry_date": product.entry_date})

        assert row["entry_date"] == datetime(2024, 1, 1, 15, 0, tzinfo=UTC)
        assert row["entry_date"].utcoffset() == timedelta(0)
        assert changes["entry_date"].utcoffset() == timedelta(0)

    def test_product_changes_to_row(self):
        row = mappers.product_changes_to_row({"stock": 3, "tags": ("A", "B")})
        assert row == {"stock": 3, "tags": ["A", "B"]}

    @pytest.mark.parametrize("changes", [{"colour": "red"}, {"id": "other"}, {"created_at": None}])
    def test_product_changes_rejects_unknown_and_immutable(self, changes):
        with pytest.raises(ValidationError):
            mappers.product_changes_to_row(changes)


class TestFolderMapper:
    def test_folder_round_trip_fields(self):
        folder = make_folder(margin=Decimal("0.25"), is_internal=True)
        row = mappers.folder_to_row(folder, "u1")
        assert row["user_id"] == "u1"
        assert row["parent_id"] is None

        restored = mappers.folder_from_row(row)
        assert restored == folder

    def test_folder_without_margin(self):
        row = {"id": "f1", "name": "Bodega", "created_at": "2024-01-01T00:00:00+00:00"}
        folder = mappers.folder_from_row(row)
        assert folder.margin is None
        assert folder.is_internal is False


class TestCategoryMapper:
    def test_category_to_row(self):
        category = make_category()
        row = mappers.category_to_row(category, "u1")
        assert row["prefix"] == "PAN"
        assert row["margin"] == Decimal("0.30")
        assert row["user_id"] == "u1"

    def test_category_from_row_defaults(self):
        category = mappers.category_from_row({"id": "c1", "name": "Hogar", "margin": 0.3})
        assert category.margin == Decimal("0.3")
        assert category.is_internal is False
        assert category.prefix == ""


class TestOrderMapper:
    def test_order_items_as_json(self):
        order = Order(
            id="o1",
            items=(OrderItem("p1", "Monitor", 2, Decimal("150.00")),),
            total_amount=Decimal("300.00"),
            status=OrderStatus.PENDING,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
            customer_name="Ana",
        )
        row = mappers.order_to_row(order, "u1")

        assert row["status"] == "pending"
        assert row["items"] == [
            {"product_id": "p1", "name": "Monitor", "quantity": 2, "price": "150.00"}
        ]
        assert mappers.order_from_row(row) == order


class TestSettingsMapper:
    def test_one_row_per_field(self):
        rows = mappers.settings_to_rows(AppSettings(plan=PlanLevel.GROWTH), "u1")
        values = {row["key"]: row["value"] for row in rows}

        assert all(row["user_id"] == "u1" for row in rows)
        assert values["plan"] == "growth"
        assert values["tax_rate"] == "0.16"
        assert values["company_name"] == "Mi Empresa"

    def test_settings_from_rows(self):
        rows = [
            {"key": "plan", "value": "business"},
            {"key": "tax_rate", "value": "0.18"},
            {"key": "stagnant_days_threshold", "value": "30"},
            {"key": "company_name", "value": "Ferretería Lima"},
            {"key": "retired_setting", "value": True},
        ]
        settings = mappers.settings_from_rows(rows, AppSettings())

        assert settings.plan == PlanLevel.BUSINESS
        assert settings.tax_rate == Decimal("0.18")
        assert settings.stagnant_days_threshold == 30
        assert settings.company_name == "Ferretería Lima"
        assert settings.currency == "USD"

    def test_claimed_offer_row(self):
        row = mappers.claimed_offer_row("u1", PlanLevel.GROWTH)
        assert row["plan"] == "growth"
        assert row["user_id"] == "u1"
        assert row["claimed_at"].tzinfo is not None
