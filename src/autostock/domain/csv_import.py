"""CSV import domain service.

Turns an uploaded spreadsheet export into products and categories without
asking the user to clean it first. Columns are positional:

    Name, Brand, Category, Stock, Price, SKU, Status,
    Entry date, Warranty expiry, Image URL

Only the first three need to be populated. Every data line yields either a
``ParsedRow`` or a ``SkippedRow`` so dropped lines stay visible.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from dateutil.relativedelta import relativedelta

from autostock.domain.entities import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_MARGIN,
    DEFAULT_CATEGORY_NAME,
    CategoryConfig,
    Product,
    get_plan_limit,
    get_plan_name,
    new_id,
    resolve_image_url,
    utcnow,
)
from autostock.domain.errors import PlanLimitError, plan_limit_exceeded
from autostock.domain.store import InventoryStore
from autostock.utils.amount_parser import parse_amount, parse_quantity
from autostock.utils.date_parser import parse_timestamp_or

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = "plantilla_inteligente.csv"
TEMPLATE_HEADER = (
    "Nombre,Marca,Categoria,Stock,Precio,SKU,Estado,"
    "Fecha Ingreso,Vencimiento Garantía,URL Imagen (Opcional)"
)
TEMPLATE_ROWS = (
    "N020 - Monitor 24,Asus,Pantallas,50,150.00,,Activo,2024-01-01,2024-06-01,",
    '"iPhone 15 Pro Max, 256GB",Apple,Celulares,10,1200.00,,Oferta,2024-02-15,2025-02-15,'
    "https://example.com/img.jpg",
)

MIN_POPULATED_COLUMNS = 3
# Cost assumed when only a retail price is known (30% historical margin)
HISTORICAL_COST_RATIO = Decimal("0.7")
DEFAULT_WARRANTY = relativedelta(months=3)

NAME_PATTERN = re.compile(r"^([A-Z0-9-]+)\s*[-_:]\s*(.+)$")

STATUS_TAGS = (
    ("descontinuado", "Descontinuado"),
    ("oferta", "Oferta"),
)

CATEGORY_KEYWORDS = (
    ("Celulares", ("iphone", "samsung", "xiaomi", "celular")),
    ("Laptops", ("laptop", "macbook", "dell")),
)


@dataclass(frozen=True)
class NameParts:
    """Display name and the code found in front of it, if any."""

    name: str
    extracted_id: Optional[str]


@dataclass(frozen=True)
class ParsedRow:
    line_number: int
    product: Product


@dataclass(frozen=True)
class SkippedRow:
    line_number: int
    reason: str


RowOutcome = ParsedRow | SkippedRow


@dataclass(frozen=True)
class ImportResult:
    """Everything produced by parsing one file."""

    products: tuple[Product, ...]
    categories: tuple[CategoryConfig, ...]
    rows: tuple[RowOutcome, ...]

    @property
    def skipped(self) -> tuple[SkippedRow, ...]:
        return tuple(row for row in self.rows if isinstance(row, SkippedRow))


def split_lines(text: str) -> list[str]:
    """Split file content into lines, tolerating Windows line endings."""
    return re.split(r"\r?\n", text)


def tokenize_line(line: str) -> list[str]:
    """Split one CSV line on commas that are not inside double quotes.

    Doubled quotes inside a quoted field stand for a literal quote. Fields are
    trimmed.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    fields.append("".join(current).strip())
    return fields


def decompose_name(raw: str) -> NameParts:
    """Separate a leading code from a product name.

    "OL002 - Olla" -> NameParts("Olla", "OL002"). Without a code followed by
    one of ``-``, ``_`` or ``:`` the whole string is the name.
    """
    raw = raw.strip()
    match = NAME_PATTERN.match(raw)
    if match is None:
        return NameParts(name=raw, extracted_id=None)
    return NameParts(name=match.group(2).strip(), extracted_id=match.group(1))


def category_prefix(category_name: str) -> str:
    """First three letters of a category name, uppercased."""
    letters = "".join(ch for ch in category_name if ch.isalpha())
    return letters[:3].upper() or "GEN"


def generate_sku(category: str, name: str, count: int, prefix: Optional[str] = None) -> str:
    """Build a sequential SKU.

    With a category prefix the SKU is ``PREFIX-0001``; otherwise a code from
    the name is added: ``CAT-NAM-0001``. ``count`` is the number of products
    that precede this one.
    """
    sequence = f"{count + 1:04d}"
    if prefix:
        return f"{prefix.upper()}-{sequence}"
    name_code = re.sub(r"[^a-zA-Z]", "", name)[:3].upper() or "GEN"
    return f"{category_prefix(category)}-{name_code}-{sequence}"


def infer_tags(status: str) -> tuple[str, ...]:
    """Map a free-text status cell to known tags."""
    status = status.lower()
    return tuple(tag for keyword, tag in STATUS_TAGS if keyword in status)


def detect_category(name: str) -> Optional[str]:
    """Guess a category from well-known brand and device words in ``name``."""
    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def build_template() -> str:
    """Return the example import file: header plus two sample rows."""
    return "\n".join((TEMPLATE_HEADER,) + TEMPLATE_ROWS)


def template_data_uri() -> str:
    """Return the example import file as a downloadable data URI."""
    return "data:text/csv;charset=utf-8," + quote(build_template(), safe=",;/?:@&=+$-_.!~*'()#")


def _parse_stock(value: str) -> int:
    try:
        return max(0, parse_quantity(value))
    except ValueError:
        return 0


def _parse_price(value: str) -> Decimal:
    try:
        return max(Decimal("0"), parse_amount(value))
    except ValueError:
        return Decimal("0")


class CSVImportService:
    """Service for importing products from CSV text."""

    def __init__(self, store: InventoryStore):
        """Initialize CSV import service.

        Args:
            store: Store that receives the imported products and categories
        """
        self.store = store

    def parse(
        self,
        text: str,
        has_header: bool = True,
        folder_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ImportResult:
        """Parse CSV text into products and the categories they need.

        Args:
            text: File content
            has_header: Skip the first line
            folder_id: Folder the products are placed in (None for root)
            now: Reference time for created/entry/warranty defaults

        Returns:
            ImportResult with products, new categories and per-line outcomes
        """
        now = now or utcnow()
        lines = split_lines(text)
        first_line = 2 if has_header else 1
        if has_header:
            lines = lines[1:]

        products: list[Product] = []
        new_categories: dict[str, CategoryConfig] = {}
        rows: list[RowOutcome] = []

        for line_number, line in enumerate(lines, start=first_line):
            if not line.strip():
                continue

            fields = tokenize_line(line)
            populated = sum(1 for value in fields if value)
            if populated < MIN_POPULATED_COLUMNS:
                reason = f"only {populated} populated column{'s' if populated != 1 else ''}"
                logger.debug("Skipping line %d: %s", line_number, reason)
                rows.append(SkippedRow(line_number, reason))
                continue

            def cell(index: int) -> str:
                return fields[index] if index < len(fields) else ""

            parts = decompose_name(cell(0))
            if not parts.name:
                logger.debug("Skipping line %d: missing name", line_number)
                rows.append(SkippedRow(line_number, "missing name"))
                continue

            category, prefix = self._resolve_category(cell(2), parts.name, new_categories)

            sku = cell(5) or parts.extracted_id
            if not sku:
                sequence = len(self.store.inventory) + len(products)
                sku = generate_sku(category, parts.name, sequence, prefix)

            brand = cell(1)
            price = _parse_price(cell(4))
            product = Product(
                id=new_id(),
                name=parts.name,
                category=category,
                sku=sku,
                cost=(price * HISTORICAL_COST_RATIO).quantize(Decimal("0.01")),
                price=price,
                stock=_parse_stock(cell(3)),
                image_url=resolve_image_url(cell(9)),
                created_at=now,
                folder_id=folder_id,
                tags=infer_tags(cell(6)),
                brand=brand or None,
                description=f"Producto importado. {brand} {parts.name}.",
                confidence=1.0,
                entry_date=parse_timestamp_or(cell(7), now),
                supplier_warranty=parse_timestamp_or(cell(8), now + DEFAULT_WARRANTY),
            )
            products.append(product)
            rows.append(ParsedRow(line_number, product))

        return ImportResult(
            products=tuple(products),
            categories=tuple(new_categories.values()),
            rows=tuple(rows),
        )

    def _resolve_category(
        self, raw: str, product_name: str, new_categories: dict[str, CategoryConfig]
    ) -> tuple[str, str]:
        """Return the category name and SKU prefix for a row.

        Existing categories match case-insensitively. Unknown names create one
        category per batch, keyed by lowercased name.
        """
        name = raw or DEFAULT_CATEGORY_NAME
        if name == DEFAULT_CATEGORY_NAME:
            name = detect_category(product_name) or name

        existing = self.store.get_category_by_name(name)
        if existing is not None:
            return existing.name, existing.prefix

        key = name.lower()
        if key not in new_categories:
            new_categories[key] = CategoryConfig(
                id=new_id(),
                name=name,
                prefix=category_prefix(name),
                margin=DEFAULT_CATEGORY_MARGIN,
                color=DEFAULT_CATEGORY_COLOR,
                is_internal=False,
            )
        created = new_categories[key]
        return created.name, created.prefix

    def check_plan_limit(self, incoming: int) -> None:
        """Refuse an import that would exceed the plan's product limit.

        Raises:
            PlanLimitError: If the limit would be exceeded
        """
        plan = self.store.settings.plan
        limit = get_plan_limit(plan)
        current = len(self.store.inventory)
        if current + incoming > limit:
            raise PlanLimitError(plan_limit_exceeded(get_plan_name(plan), limit, current, incoming))

    def import_text(
        self, text: str, has_header: bool = True, folder_id: Optional[str] = None
    ) -> dict[str, Any]:
        """Parse CSV text and add the result to the store.

        Returns:
            Dict with import statistics:
            - imported: number of products added
            - skipped: number of lines dropped
            - skipped_details: list of {"line_number", "reason"} dicts
            - categories_created: number of categories added
            - sync: SyncResult of the product insert (None if nothing to add)

        Raises:
            PlanLimitError: If the import would exceed the plan limit
        """
        result = self.parse(text, has_header=has_header, folder_id=folder_id)
        self.check_plan_limit(len(result.products))

        categories_created = 0
        if result.categories:
            mutation = self.store.bulk_add_categories(result.categories)
            if not mutation.denied:
                categories_created = len(result.categories)

        imported = 0
        sync = None
        if result.products:
            mutation = self.store.bulk_add_products(result.products)
            sync = mutation.sync
            if not mutation.denied:
                imported = len(result.products)

        return {
            "imported": imported,
            "skipped": len(result.skipped),
            "skipped_details": [
                {"line_number": row.line_number, "reason": row.reason} for row in result.skipped
            ],
            "categories_created": categories_created,
            "sync": sync,
        }

    def import_file(
        self, csv_file_path: str, has_header: bool = True, folder_id: Optional[str] = None
    ) -> dict[str, Any]:
        """Import products from a CSV file. See ``import_text``.

        Raises:
            FileNotFoundError: If the CSV file doesn't exist
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")
        text = csv_path.read_text(encoding="utf-8-sig")
        return self.import_text(text, has_header=has_header, folder_id=folder_id)
