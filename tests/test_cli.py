"""CLI tests for autostock commands."""

import re

import pytest

from autostock.cli.main import cli
from autostock.domain.csv_import import TEMPLATE_HEADER, build_template


def extract_id(output: str) -> str:
    """Pull the ID out of output like "Created product 'X' (ID: ...)"."""
    match = re.search(r"\(ID: ([^)]+)\)", output)
    assert match is not None, output
    return match.group(1)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture
def invoke(cli_runner, db_url):
    """Run a command as a signed-in user against the temporary database."""

    def run(*args, user="u1"):
        base = ["--db-url", db_url]
        if user is not None:
            base += ["--user", user]
        return cli_runner.invoke(cli, base + list(args))

    return run


def test_help_does_not_open_store(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Inventory management" in result.output


def test_product_lifecycle(invoke):
    result = invoke("category", "create", "Ferretería", "--margin", "0.5")
    assert result.exit_code == 0, result.output
    assert "prefix FER" in result.output

    result = invoke("product", "add", "Martillo", "--category", "Ferretería", "--cost", "10", "--stock", "2")
    assert result.exit_code == 0, result.output
    assert "SKU FER-0001" in result.output
    product_id = extract_id(result.output)

    result = invoke("product", "list")
    assert result.exit_code == 0
    assert "Martillo" in result.output
    assert "15.00" in result.output

    result = invoke("product", "stock-out", product_id, "-n", "5")
    assert result.exit_code == 0
    assert "Stock of Martillo: 0" in result.output

    result = invoke("product", "stock-in", product_id)
    assert "Stock of Martillo: 1" in result.output

    result = invoke("product", "update", product_id, "--price", "S/ 18.50", "--tag", "Oferta")
    assert result.exit_code == 0, result.output

    result = invoke("product", "list", "--tag", "Oferta")
    assert "18.50" in result.output
    assert "[Oferta]" in result.output

    result = invoke("product", "delete", product_id, "--yes")
    assert result.exit_code == 0
    assert "No products found." in invoke("product", "list").output


def test_data_is_scoped_to_user(invoke):
    invoke("product", "add", "Martillo", "--price", "10")

    assert "Martillo" in invoke("product", "list").output
    assert "No products found." in invoke("product", "list", user="u2").output


def test_mutation_without_user_is_refused(invoke):
    result = invoke("product", "add", "Martillo", user=None)

    assert result.exit_code == 1
    assert "Sign in required" in result.output


def test_demo_mode_needs_no_user(cli_runner):
    result = cli_runner.invoke(cli, ["--demo", "product", "add", "Martillo", "--price", "10"])
    assert result.exit_code == 0, result.output
    assert "Created product 'Martillo'" in result.output


def test_unknown_product_reports_error(invoke):
    result = invoke("product", "update", "missing", "--name", "X")
    assert result.exit_code == 1
    assert "Error: Product missing not found" in result.output


def test_folders(invoke):
    parent_id = extract_id(invoke("folder", "create", "Bodega").output)
    child = invoke("folder", "create", "Estante 1", "--parent", parent_id)
    assert child.exit_code == 0, child.output
    child_id = extract_id(child.output)

    result = invoke("folder", "path", child_id)
    assert result.output.strip() == "Root > Bodega > Estante 1"

    product_id = extract_id(invoke("product", "add", "Olla", "--folder", child_id).output)
    assert "Olla" in invoke("product", "list", "--folder", child_id).output
    assert "No products found." in invoke("product", "list").output

    result = invoke("folder", "delete", child_id, "--yes")
    assert result.exit_code == 0
    assert "Olla" in invoke("product", "list").output
    assert product_id in invoke("product", "list").output


def test_import_and_template(invoke, tmp_path):
    template_path = tmp_path / "plantilla.csv"
    result = invoke("template", "-o", str(template_path))
    assert result.exit_code == 0
    assert template_path.read_text(encoding="utf-8").startswith(TEMPLATE_HEADER)

    csv_path = tmp_path / "productos.csv"
    csv_path.write_text(build_template() + "\nSolo,Nombre\n", encoding="utf-8")

    result = invoke("import", str(csv_path))

    assert result.exit_code == 0, result.output
    assert "Imported: 2 products" in result.output
    assert "Categories created: 2" in result.output
    assert "Skipped: 1 lines" in result.output
    assert "line 4: only 2 populated columns" in result.output

    listing = invoke("product", "list").output
    assert "Monitor 24" in listing
    assert "N020" in listing


def test_import_plan_limit(invoke, tmp_path):
    rows = "\n".join(f"Producto {i},Marca,General,1,10" for i in range(51))
    csv_path = tmp_path / "grande.csv"
    csv_path.write_text(TEMPLATE_HEADER + "\n" + rows, encoding="utf-8")

    result = invoke("import", str(csv_path))

    assert result.exit_code == 1
    assert "Please upgrade your plan" in result.output


def test_orders(invoke):
    product_id = extract_id(invoke("product", "add", "Martillo", "--price", "10", "--stock", "5").output)

    result = invoke("order", "create", "--item", f"{product_id}:2", "--customer", "Ana")
    assert result.exit_code == 0, result.output
    assert "20.00" in result.output
    order_id = extract_id(result.output)

    result = invoke("order", "complete", order_id)
    assert result.exit_code == 0
    assert "Stock" not in result.output

    assert "Martillo" in invoke("product", "list", "--max-stock", "3").output

    result = invoke("order", "cancel", order_id)
    assert result.exit_code == 1
    assert "already completed" in result.output

    assert "completed" in invoke("order", "list", "--status", "completed").output


def test_reports(invoke):
    invoke("product", "add", "Martillo", "--cost", "6", "--price", "10", "--stock", "10")

    result = invoke("report", "summary")
    assert result.exit_code == 0
    assert "Retail value:      100.00 USD" in result.output
    assert "Gross margin:      40.00%" in result.output

    result = invoke("report", "abc")
    assert result.output.startswith("A")

    assert "No warranties" in invoke("report", "warranty").output
    assert "No stagnant products" in invoke("report", "stagnant").output


def test_settings_and_offer(invoke):
    result = invoke("settings", "set", "--company-name", "Bodega Sur", "--whatsapp-number", "987654321")
    assert result.exit_code == 0, result.output

    result = invoke("settings", "show")
    assert "Bodega Sur" in result.output
    assert "Starter (up to 50 products)" in result.output

    result = invoke("settings", "claim-offer")
    assert result.exit_code == 0
    assert "Offer claimed!" in result.output

    assert "Growth" in invoke("settings", "show").output
    assert "already claimed" in invoke("settings", "claim-offer").output


def test_storefront_checkout(invoke):
    invoke("settings", "set", "--company-name", "Bodega Sur", "--whatsapp-number", "987654321")
    product_id = extract_id(invoke("product", "add", "Martillo", "--price", "15").output)
    invoke("category", "create", "Insumos", "--internal")
    invoke("product", "add", "Lija", "--category", "Insumos")

    result = invoke("storefront", "catalog")
    assert "Martillo" in result.output
    assert "Lija" not in result.output

    result = invoke("storefront", "checkout", "--item", f"{product_id}:2", "--customer", "Ana")
    assert result.exit_code == 0, result.output
    assert "Hola *Bodega Sur*" in result.output
    assert "https://wa.me/51987654321?text=" in result.output

    assert "pending" in invoke("order", "list").output


def test_analyze_without_key_falls_back(invoke, monkeypatch):
    monkeypatch.delenv("AUTOSTOCK_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    result = invoke("analyze", "name", "Paracetamol", "--add", "--cost", "2")

    assert result.exit_code == 0, result.output
    assert "Descripción manual requerida." in result.output
    assert "Created product 'Paracetamol' SKU GEN-0001" in result.output
