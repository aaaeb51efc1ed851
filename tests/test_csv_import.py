"""Tests for CSV import."""

import pytest
from datetime import datetime, UTC
from decimal import Decimal
from urllib.parse import unquote

from autostock.domain.csv_import import (
    TEMPLATE_HEADER,
    CSVImportService,
    ParsedRow,
    SkippedRow,
    build_template,
    category_prefix,
    decompose_name,
    detect_category,
    generate_sku,
    infer_tags,
    split_lines,
    template_data_uri,
    tokenize_line,
)
from autostock.domain.entities import DEFAULT_PRODUCT_IMAGE, PlanLevel
from autostock.domain.errors import PlanLimitError
from autostock.domain.sync import SyncStatus

from conftest import USER_ID, make_category, make_product

HEADER = TEMPLATE_HEADER + "\n"
NOW = datetime(2024, 5, 1, tzinfo=UTC)


class TestTokenizer:
    def test_quoted_comma(self):
        """A comma inside quotes stays in the field."""
        line = '"Taladro, 20V",Truper,Herramientas,10,50.00,,Activo'
        assert tokenize_line(line) == [
            "Taladro, 20V",
            "Truper",
            "Herramientas",
            "10",
            "50.00",
            "",
            "Activo",
        ]

    def test_escaped_quote(self):
        assert tokenize_line('"Tubo 1/2"" PVC",Pavco') == ['Tubo 1/2" PVC', "Pavco"]

    def test_fields_trimmed(self):
        assert tokenize_line(" a , b ,c") == ["a", "b", "c"]

    def test_split_lines_tolerates_crlf(self):
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]


class TestNameDecomposition:
    def test_code_prefix(self):
        parts = decompose_name("OL002 - Olla")
        assert parts.extracted_id == "OL002"
        assert parts.name == "Olla"

    def test_no_separator(self):
        parts = decompose_name("Martillo Premium")
        assert parts.extracted_id is None
        assert parts.name == "Martillo Premium"

    @pytest.mark.parametrize("raw", ["N020_Monitor 24", "N020: Monitor 24", "N020-Monitor 24"])
    def test_other_separators(self, raw):
        parts = decompose_name(raw)
        assert parts.extracted_id == "N020"
        assert parts.name == "Monitor 24"

    def test_lowercase_code_not_extracted(self):
        assert decompose_name("abc - Olla").extracted_id is None


class TestHelpers:
    def test_generate_sku_with_prefix(self):
        assert generate_sku("Herramientas", "Taladro", 0, prefix="her") == "HER-0001"

    def test_generate_sku_without_prefix(self):
        assert generate_sku("Herramientas", "Taladro", 41) == "HER-TAL-0042"

    def test_category_prefix(self):
        assert category_prefix("Ropa") == "ROP"
        assert category_prefix("12") == "GEN"

    def test_infer_tags(self):
        assert infer_tags("EN OFERTA") == ("Oferta",)
        assert infer_tags("Descontinuado - oferta") == ("Descontinuado", "Oferta")
        assert infer_tags("Activo") == ()

    def test_detect_category(self):
        assert detect_category("iPhone 15") == "Celulares"
        assert detect_category("MacBook Air") == "Laptops"
        assert detect_category("Martillo") is None


class TestParse:
    """Tests for CSVImportService.parse."""

    def test_parse_full_row(self, store):
        text = HEADER + (
            '"Taladro, 20V",Truper,Herramientas,10,50.00,,Oferta,'
            "2024-01-15,2025-01-15,https://example.com/taladro.jpg"
        )
        result = CSVImportService(store).parse(text, now=NOW)

        assert len(result.products) == 1
        product = result.products[0]
        assert product.name == "Taladro, 20V"
        assert product.brand == "Truper"
        assert product.category == "Herramientas"
        assert product.stock == 10
        assert product.price == Decimal("50.00")
        assert product.cost == Decimal("35.00")
        assert product.tags == ("Oferta",)
        assert product.entry_date == datetime(2024, 1, 15, tzinfo=UTC)
        assert product.supplier_warranty == datetime(2025, 1, 15, tzinfo=UTC)
        assert product.image_url == "https://example.com/taladro.jpg"
        assert product.description == "Producto importado. Truper Taladro, 20V."
        assert product.confidence == 1.0
        assert isinstance(result.rows[0], ParsedRow)
        assert result.rows[0].line_number == 2

    def test_defaults_for_missing_cells(self, store):
        result = CSVImportService(store).parse(HEADER + "Olla,Record,Cocina", now=NOW)

        product = result.products[0]
        assert product.stock == 0
        assert product.price == Decimal("0")
        assert product.entry_date == NOW
        assert product.supplier_warranty == datetime(2024, 8, 1, tzinfo=UTC)
        assert product.image_url == DEFAULT_PRODUCT_IMAGE
        assert product.tags == ()

    def test_malformed_numbers_become_zero(self, store):
        result = CSVImportService(store).parse(HEADER + "Olla,Record,Cocina,muchas,-5", now=NOW)
        product = result.products[0]
        assert product.stock == 0
        assert product.price == Decimal("0")

    def test_extracted_id_used_as_sku(self, store):
        result = CSVImportService(store).parse(HEADER + "OL002 - Olla,Record,Cocina,3,20")
        assert result.products[0].sku == "OL002"
        assert result.products[0].name == "Olla"

    def test_explicit_sku_wins(self, store):
        result = CSVImportService(store).parse(HEADER + "OL002 - Olla,Record,Cocina,3,20,SKU-9")
        assert result.products[0].sku == "SKU-9"

    def test_sequential_skus_within_batch(self, store):
        """Rows without a SKU get distinct sequential SKUs."""
        text = HEADER + "\n".join(
            ["Martillo,Truper,Herramientas,1,10", "Alicate,Truper,Herramientas,1,12",
             "Serrucho,Truper,Herramientas,1,15"]
        )
        result = CSVImportService(store).parse(text)

        skus = [p.sku for p in result.products]
        assert skus == ["HER-0001", "HER-0002", "HER-0003"]

    def test_sku_sequence_continues_after_inventory(self, store):
        store.add_product(make_product())
        store.add_product(make_product())
        result = CSVImportService(store).parse(HEADER + "Martillo,Truper,Herramientas,1,10")
        assert result.products[0].sku == "HER-0003"

    def test_existing_category_prefix_used(self, store):
        store.add_category(make_category(name="Herramientas", prefix="TOOL"))
        result = CSVImportService(store).parse(HEADER + "Martillo,Truper,herramientas,1,10")

        assert result.products[0].category == "Herramientas"
        assert result.products[0].sku == "TOOL-0001"
        assert result.categories == ()

    def test_category_dedup_case_insensitive(self, store):
        """Case variants of one new category create a single category."""
        text = HEADER + "Polo,Nike,Ropa,5,30\nCasaca,Adidas,ropa,2,90\nGorra,Puma,ROPA,1,20"
        result = CSVImportService(store).parse(text)

        assert len(result.categories) == 1
        assert result.categories[0].name == "Ropa"
        assert result.categories[0].prefix == "ROP"
        assert {p.category for p in result.products} == {"Ropa"}

    def test_general_category_auto_detected(self, store):
        result = CSVImportService(store).parse(HEADER + "Samsung A54,Samsung,,4,300")

        assert result.products[0].category == "Celulares"

    def test_skipped_rows_are_reported(self, store):
        text = HEADER + "Solo,Nombre\n\n,Marca,Cat,1,2\nOlla,Record,Cocina"
        result = CSVImportService(store).parse(text)

        assert len(result.products) == 1
        assert result.skipped == (
            SkippedRow(2, "only 2 populated columns"),
            SkippedRow(4, "missing name"),
        )

    def test_without_header(self, store):
        result = CSVImportService(store).parse("Olla,Record,Cocina", has_header=False)
        assert len(result.products) == 1
        assert result.rows[0].line_number == 1

    def test_folder_assignment(self, store):
        result = CSVImportService(store).parse(HEADER + "Olla,Record,Cocina", folder_id="f1")
        assert result.products[0].folder_id == "f1"


class TestImport:
    """Tests for importing into the store."""

    def test_import_text_adds_products_and_categories(self, store, backend):
        text = HEADER + "Polo,Nike,Ropa,5,30\nMartillo,Truper,Herramientas,1,10\n,,,"
        result = CSVImportService(store).import_text(text)

        assert result["imported"] == 2
        assert result["categories_created"] == 2
        assert result["skipped"] == 1
        assert result["skipped_details"] == [{"line_number": 4, "reason": "only 0 populated columns"}]
        assert result["sync"].status == SyncStatus.SYNCED
        assert len(store.inventory) == 2
        assert {c.name for c in store.categories} == {"Ropa", "Herramientas"}
        assert len(backend.select("products", {"user_id": USER_ID})) == 2

    def test_plan_limit(self, store):
        store.bulk_add_products([make_product() for _ in range(49)])
        text = HEADER + "Polo,Nike,Ropa,5,30\nGorra,Puma,Ropa,1,20"

        with pytest.raises(PlanLimitError) as excinfo:
            CSVImportService(store).import_text(text)

        assert "Starter" in str(excinfo.value)
        assert len(store.inventory) == 49
        assert store.categories == []

    def test_plan_limit_depends_on_plan(self, store):
        store.update_settings(plan=PlanLevel.GROWTH)
        store.bulk_add_products([make_product() for _ in range(49)])

        result = CSVImportService(store).import_text(HEADER + "Polo,Nike,Ropa,5,30\nGorra,Puma,Ropa,1,20")

        assert result["imported"] == 2

    def test_import_denied_without_session(self, anonymous_store):
        result = CSVImportService(anonymous_store).import_text(HEADER + "Olla,Record,Cocina")

        assert result["imported"] == 0
        assert result["sync"].status == SyncStatus.DENIED
        assert anonymous_store.inventory == []
        assert anonymous_store.auth_prompt_open is True

    def test_import_file(self, store, tmp_path):
        csv_path = tmp_path / "productos.csv"
        csv_path.write_text("\ufeff" + build_template(), encoding="utf-8")

        result = CSVImportService(store).import_file(str(csv_path))

        assert result["imported"] == 2
        names = {p.name for p in store.inventory}
        assert names == {"Monitor 24", "iPhone 15 Pro Max, 256GB"}

    def test_import_missing_file(self, store):
        with pytest.raises(FileNotFoundError):
            CSVImportService(store).import_file("/nonexistent/productos.csv")


class TestTemplate:
    def test_template_content(self):
        lines = build_template().split("\n")
        assert lines[0] == TEMPLATE_HEADER
        assert len(lines) == 3
        assert tokenize_line(lines[2])[0] == "iPhone 15 Pro Max, 256GB"

    def test_template_parses_cleanly(self, demo_store):
        result = CSVImportService(demo_store).parse(build_template())
        assert len(result.products) == 2
        assert result.skipped == ()
        assert result.products[0].sku == "N020"
        assert result.products[1].tags == ("Oferta",)

    def test_data_uri(self):
        uri = template_data_uri()
        assert uri.startswith("data:text/csv;charset=utf-8,")
        assert unquote(uri.split(",", 1)[1]) == build_template()
