"""Domain model entities for autostock.

These are pure data classes representing business concepts, independent of
the backing store schema. Entities are immutable; the store produces updated
copies with ``dataclasses.replace`` so a previous collection can always be
restored as-is.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, UTC
from decimal import Decimal
from enum import Enum
from typing import Optional

DEFAULT_PRODUCT_IMAGE = "LOGO_PLACEHOLDER"

STORE_CONFIG_SENTINEL = "__STORE_CONFIG__"

DEFAULT_CATEGORY_NAME = "General"
DEFAULT_CATEGORY_COLOR = "bg-[#222] text-gray-300 border-gray-600"
DEFAULT_CATEGORY_MARGIN = Decimal("0.30")

FREE_PLAN_LIMIT = 50
GROWTH_PLAN_LIMIT = 2000
BUSINESS_PLAN_LIMIT = 30000


class PlanLevel(str, Enum):
    """Subscription tier of the account."""

    STARTER = "starter"
    GROWTH = "growth"
    BUSINESS = "business"


class OrderStatus(str, Enum):
    """Order lifecycle state. Completed and cancelled are terminal."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


VIEW_TYPES = (
    "dashboard",
    "files",
    "all-items",
    "settings",
    "categories",
    "profile",
    "pricing",
    "financial-health",
    "orders",
)


def new_id() -> str:
    """Return a fresh client-generated entity ID."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


def get_plan_limit(plan: PlanLevel | str = PlanLevel.STARTER) -> int:
    """Return the maximum number of products allowed on a plan."""
    plan = PlanLevel(plan)
    if plan == PlanLevel.GROWTH:
        return GROWTH_PLAN_LIMIT
    if plan == PlanLevel.BUSINESS:
        return BUSINESS_PLAN_LIMIT
    return FREE_PLAN_LIMIT


def get_plan_name(plan: PlanLevel | str = PlanLevel.STARTER) -> str:
    """Return the display name of a plan."""
    return PlanLevel(plan).value.capitalize()


def resolve_image_url(url: Optional[str]) -> str:
    """Return ``url`` when it looks like a usable image reference.

    Anything blank, too short, or not an http(s)/data URL falls back to
    ``DEFAULT_PRODUCT_IMAGE``.
    """
    if url is None:
        return DEFAULT_PRODUCT_IMAGE
    url = url.strip()
    if len(url) > 8 and (url.startswith("http") or url.startswith("data:")):
        return url
    return DEFAULT_PRODUCT_IMAGE


@dataclass(frozen=True)
class Product:
    """Inventory product domain entity."""

    id: str
    name: str
    category: str
    sku: str
    cost: Decimal
    price: Decimal
    stock: int
    image_url: str
    created_at: datetime
    folder_id: Optional[str] = None
    tags: tuple[str, ...] = ()
    brand: Optional[str] = None
    description: Optional[str] = None
    supplier: Optional[str] = None
    confidence: Optional[float] = None
    entry_date: Optional[datetime] = None
    supplier_warranty: Optional[datetime] = None
    abc_class: Optional[str] = None


@dataclass(frozen=True)
class Folder:
    """Folder domain entity with hierarchical structure."""

    id: str
    name: str
    parent_id: Optional[str]
    created_at: datetime
    color: Optional[str] = None
    prefix: Optional[str] = None
    margin: Optional[Decimal] = None
    is_internal: bool = False


@dataclass(frozen=True)
class CategoryConfig:
    """Named pricing and classification policy.

    Products reference a category by ``name``, not by ``id``.
    """

    id: str
    name: str
    prefix: str
    margin: Decimal
    color: str = DEFAULT_CATEGORY_COLOR
    is_internal: bool = False

    def suggested_price(self, cost: Decimal) -> Decimal:
        """Return ``cost`` marked up by this category's margin."""
        return (cost * (1 + self.margin)).quantize(Decimal("0.01"))


@dataclass(frozen=True)
class OrderItem:
    """Line of an order."""

    product_id: str
    name: str
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Order:
    """Customer purchase request domain entity."""

    id: str
    items: tuple[OrderItem, ...]
    total_amount: Decimal
    status: OrderStatus
    created_at: datetime
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


@dataclass(frozen=True)
class AppSettings:
    """Account-wide settings."""

    company_name: str = "Mi Empresa"
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0.16")
    has_claimed_offer: bool = False
    plan: PlanLevel = PlanLevel.STARTER
    stagnant_days_threshold: int = 90
    whatsapp_enabled: bool = False
    whatsapp_number: Optional[str] = None
    store_slug: Optional[str] = None
    whatsapp_template: Optional[str] = None


@dataclass(frozen=True)
class FilterState:
    """Ephemeral inventory query.

    Price bounds are kept as typed by the user; blank or unparseable bounds
    impose no constraint.
    """

    categories: tuple[str, ...] = ()
    min_price: str = ""
    max_price: str = ""
    tags: tuple[str, ...] = ()
    max_stock: Optional[int] = None


@dataclass(frozen=True)
class Session:
    """Authenticated user session."""

    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class AIAnalysisResult:
    """Structured product metadata returned by the AI collaborator."""

    name: str
    category: str
    description: str
    confidence: float
    suggested_tags: tuple[str, ...] = field(default_factory=tuple)
    estimated_market_price: Optional[Decimal] = None
