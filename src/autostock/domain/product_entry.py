"""AI-assisted product entry domain service."""

import logging
from decimal import Decimal
from typing import Any, Optional

from autostock.domain.csv_import import category_prefix, generate_sku
from autostock.domain.entities import (
    DEFAULT_CATEGORY_MARGIN,
    DEFAULT_CATEGORY_NAME,
    AIAnalysisResult,
    Product,
    new_id,
    resolve_image_url,
    utcnow,
)
from autostock.domain.errors import ValidationError
from autostock.domain.store import InventoryStore
from autostock.domain.sync import Mutation

logger = logging.getLogger(__name__)


class ProductEntryService:
    """Service that turns an AI analysis into a product ready to add."""

    def __init__(self, store: InventoryStore, analyzer: Optional[Any] = None):
        """Initialize product entry service.

        Args:
            store: Store receiving the products
            analyzer: Object with ``analyze_image`` and
                ``analyze_product_by_name`` (see ``autostock.ai``)
        """
        self.store = store
        self.analyzer = analyzer

    def suggest_price(self, cost: Decimal, category_name: Optional[str] = None) -> Decimal:
        """Mark ``cost`` up by the category's margin.

        Unknown categories use the default margin.
        """
        category = self.store.get_category_by_name(category_name) if category_name else None
        if category is not None:
            return category.suggested_price(cost)
        return (cost * (1 + DEFAULT_CATEGORY_MARGIN)).quantize(Decimal("0.01"))

    def suggest_sku(self, category_name: str, name: str) -> str:
        """Next sequential SKU for a product in ``category_name``."""
        category = self.store.get_category_by_name(category_name)
        prefix = category.prefix if category is not None else category_prefix(category_name)
        return generate_sku(category_name, name, len(self.store.inventory), prefix)

    def analyze(
        self,
        name: Optional[str] = None,
        base64_image: Optional[str] = None,
        mime_type: str = "image/jpeg",
    ) -> AIAnalysisResult:
        """Ask the analyzer about a photo, or about a name when there is no photo.

        Raises:
            ValidationError: If neither a name nor an image is given, or no
                analyzer is configured
        """
        if self.analyzer is None:
            raise ValidationError("AI analysis is not configured")
        if base64_image:
            return self.analyzer.analyze_image(base64_image, mime_type)
        if name:
            return self.analyzer.analyze_product_by_name(name)
        raise ValidationError("A product name or image is required")

    def draft_from_analysis(
        self,
        analysis: AIAnalysisResult,
        cost: Decimal = Decimal("0"),
        price: Optional[Decimal] = None,
        stock: int = 0,
        image_url: Optional[str] = None,
        folder_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Product:
        """Build a product from an analysis and the seller's own numbers.

        The price is, in order of preference: the explicit ``price``, the
        market price estimated by the model, or ``cost`` marked up by the
        category margin.

        Raises:
            ValidationError: If the product would have no name
        """
        product_name = (name or analysis.name).strip()
        if not product_name:
            raise ValidationError("Product name is required")
        category = analysis.category or DEFAULT_CATEGORY_NAME
        existing = self.store.get_category_by_name(category)
        if existing is not None:
            category = existing.name

        if price is None:
            price = analysis.estimated_market_price
        if price is None:
            price = self.suggest_price(cost, category)

        now = utcnow()
        return Product(
            id=new_id(),
            name=product_name,
            category=category,
            sku=self.suggest_sku(category, product_name),
            cost=cost,
            price=price,
            stock=stock,
            image_url=resolve_image_url(image_url),
            created_at=now,
            folder_id=folder_id,
            tags=tuple(analysis.suggested_tags),
            description=analysis.description or None,
            confidence=analysis.confidence,
            entry_date=now,
        )

    def add_from_analysis(self, analysis: AIAnalysisResult, **kwargs: Any) -> Mutation[Product]:
        """Draft a product (see ``draft_from_analysis``) and add it to the store."""
        product = self.draft_from_analysis(analysis, **kwargs)
        logger.info("Adding product '%s' (confidence %.2f)", product.name, analysis.confidence)
        return self.store.add_product(product)
