"""Public storefront: buyer-facing catalog, cart and WhatsApp checkout."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from autostock.domain.entities import (
    STORE_CONFIG_SENTINEL,
    AppSettings,
    Order,
    OrderItem,
    Product,
)
from autostock.domain.errors import NotFoundError, ValidationError, product_not_found
from autostock.domain.store import InventoryStore
from autostock.domain.sync import SyncResult, SyncStatus

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"
WHATSAPP_COUNTRY_CODE = "51"
MIN_PHONE_LENGTH = 5

DEFAULT_WHATSAPP_TEMPLATE = (
    "Hola *{{TIENDA}}*, me interesa:\n\n{{PEDIDO}}\n\n"
    "💰 Total: {{TOTAL}}\n👤 Mis datos: {{CLIENTE}}"
)


@dataclass
class CartLine:
    product: Product
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


class Cart:
    """Buyer cart keyed by product ID, in insertion order."""

    def __init__(self):
        self._lines: dict[str, CartLine] = {}

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def add(self, product: Product, quantity: int = 1) -> None:
        """Add ``quantity`` units of ``product``."""
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        line = self._lines.get(product.id)
        if line is None:
            self._lines[product.id] = CartLine(product, quantity)
        else:
            line.quantity += quantity

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if product_id not in self._lines:
            raise NotFoundError(product_not_found(product_id))
        if quantity <= 0:
            del self._lines[product_id]
        else:
            self._lines[product_id].quantity = quantity

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), Decimal("0"))

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def to_order_items(self) -> list[OrderItem]:
        return [
            OrderItem(
                product_id=line.product.id,
                name=line.product.name,
                quantity=line.quantity,
                price=line.product.price,
            )
            for line in self._lines.values()
        ]


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of a storefront checkout.

    ``whatsapp_url`` is None in demo mode, where the buyer is sent to sign up
    instead.
    """

    order: Optional[Order]
    message: str
    whatsapp_url: Optional[str]
    sync: SyncResult


def build_whatsapp_message(
    settings: AppSettings, cart: Cart, customer_name: Optional[str] = None
) -> str:
    """Render the order message from the store's WhatsApp template."""
    order_lines = "".join(
        f"▪️ {line.quantity}x {line.product.name} - ${line.subtotal:.2f}\n" for line in cart.lines
    )
    template = settings.whatsapp_template or DEFAULT_WHATSAPP_TEMPLATE
    return (
        template.replace("{{TIENDA}}", settings.company_name or "Tienda", 1)
        .replace("{{PEDIDO}}", order_lines, 1)
        .replace("{{TOTAL}}", f"${cart.total:.2f}", 1)
        .replace("{{CLIENTE}}", customer_name or "Cliente Web", 1)
    )


def whatsapp_url(phone: str, message: str) -> str:
    """Return the wa.me link that opens a chat with ``message`` prefilled."""
    return f"https://wa.me/{WHATSAPP_COUNTRY_CODE}{phone}?text={quote(message, safe='')}"


class StorefrontService:
    """Service exposing the store's public catalog to buyers."""

    def __init__(self, store: InventoryStore):
        """Initialize storefront service.

        Args:
            store: Seller's store
        """
        self.store = store

    def public_catalog(self, search: str = "", category: str = ALL_CATEGORIES) -> list[Product]:
        """Products a buyer may see.

        Products in internal categories or internal folders and the store
        configuration record are hidden.
        """
        internal_categories = {c.name for c in self.store.categories if c.is_internal}
        internal_folders = {f.id for f in self.store.folders if f.is_internal}
        search = search.lower()
        return [
            p
            for p in self.store.inventory
            if p.name != STORE_CONFIG_SENTINEL
            and p.category not in internal_categories
            and p.folder_id not in internal_folders
            and search in p.name.lower()
            and (category == ALL_CATEGORIES or p.category == category)
        ]

    def public_categories(self) -> list[str]:
        """Category names with at least one public product, sorted."""
        return sorted({p.category for p in self.public_catalog()})

    def checkout(self, cart: Cart, customer_name: Optional[str] = None) -> CheckoutResult:
        """Record the cart as a pending order and build the WhatsApp link.

        Raises:
            ValidationError: If the store has no valid WhatsApp number or the
                cart is empty
        """
        settings = self.store.settings
        phone = (settings.whatsapp_number or "").strip()
        if len(phone) < MIN_PHONE_LENGTH:
            raise ValidationError("This store has not configured a valid WhatsApp number")
        if not cart.lines:
            raise ValidationError("The cart is empty")

        message = build_whatsapp_message(settings, cart, customer_name)
        mutation = self.store.create_order(
            cart.to_order_items(), customer_name=customer_name, customer_phone="WhatsApp"
        )
        if mutation.sync.status == SyncStatus.FAILED:
            # The buyer can still send the order by WhatsApp
            logger.warning("Order was not saved remotely: %s", mutation.sync.error)

        if self.store.demo_mode:
            self.store.set_auth_prompt_open(True)
            return CheckoutResult(mutation.applied, message, None, mutation.sync)

        url = whatsapp_url(phone, message) if not mutation.denied else None
        if not mutation.denied:
            cart.clear()
        return CheckoutResult(mutation.applied, message, url, mutation.sync)
