"""Application store: the single owner of every entity collection.

Each mutating action runs in two phases:

1. Local: after the auth gate permits it, the in-memory collection is
   replaced with an updated copy immediately.
2. Remote: when a session exists and the backend is configured, the matching
   backend write is issued. A failure is handed to the ``SyncStrategy``; the
   default strategy keeps the local state as the source of truth.

Collections are always reassigned, never mutated in place, so the list held
before an action is a complete snapshot of that state.
"""

import logging
from dataclasses import fields, replace
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from autostock.database.base import (
    CATEGORIES,
    CLAIMED_OFFERS,
    FOLDERS,
    ORDERS,
    PRODUCTS,
    SETTINGS,
    SETTINGS_KEY_COLUMNS,
    BackendError,
    RemoteBackend,
    Row,
)
from autostock.database import mappers
from autostock.domain.auth import AuthGate
from autostock.domain.entities import (
    VIEW_TYPES,
    AppSettings,
    CategoryConfig,
    FilterState,
    Folder,
    Order,
    OrderItem,
    OrderStatus,
    PlanLevel,
    Product,
    Session,
    ViewMode,
    new_id,
    resolve_image_url,
    utcnow,
)
from autostock.domain.errors import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    category_not_found,
    folder_not_found,
    order_not_found,
    product_not_found,
    unknown_fields,
)
from autostock.domain.sync import (
    KeepLocalStrategy,
    Mutation,
    SyncResult,
    SyncStatus,
    SyncStrategy,
)
from autostock.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

T = TypeVar("T")

CLAIM_OFFER_NOTICE = "Offer claimed! Your account now has the Growth plan benefits."

SETTINGS_FIELDS = {f.name for f in fields(AppSettings)}
FILTER_FIELDS = {f.name for f in fields(FilterState)}


def _check_amounts(values: dict[str, Any]) -> None:
    for name in ("cost", "price"):
        if name in values and values[name] is not None and values[name] < 0:
            raise ValidationError(f"Product {name} cannot be negative")
    if "stock" in values and values["stock"] is not None and values["stock"] < 0:
        raise ValidationError("Product stock cannot be negative")


def _normalize_product(product: Product) -> Product:
    _check_amounts({"cost": product.cost, "price": product.price, "stock": product.stock})
    return replace(
        product,
        image_url=resolve_image_url(product.image_url),
        tags=tuple(product.tags),
    )


def _normalize_category(category: CategoryConfig) -> CategoryConfig:
    margin = Decimal("0") if category.is_internal else category.margin
    return replace(category, prefix=(category.prefix or "").upper(), margin=margin)


def _order_status(value: OrderStatus | str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as e:
        raise ValidationError(f"Unknown order status '{value}'") from e


def _parse_bound(value: str) -> Optional[Decimal]:
    if not value or not value.strip():
        return None
    try:
        return parse_amount(value)
    except ValueError:
        return None


class InventoryStore:
    """Single source of truth for products, folders, categories and orders."""

    def __init__(
        self,
        backend: Optional[RemoteBackend] = None,
        demo_mode: bool = False,
        sync_strategy: Optional[SyncStrategy] = None,
    ):
        """Initialize the store.

        Args:
            backend: Remote backend; None means no backend is configured
            demo_mode: Start in demo mode (in-memory only, never gated)
            sync_strategy: Policy for remote failures (default keeps local state)
        """
        self.backend = backend
        self.gate = AuthGate(
            backend_configured=backend is not None and backend.is_configured,
            demo_mode=demo_mode,
        )
        self.sync_strategy = sync_strategy or KeepLocalStrategy()

        self.session: Optional[Session] = None
        self.auth_prompt_open = False
        self.is_loading = False
        self.notices: list[str] = []

        self.inventory: list[Product] = []
        self.folders: list[Folder] = []
        self.categories: list[CategoryConfig] = []
        self.orders: list[Order] = []
        self.settings = AppSettings()

        self.current_folder_id: Optional[str] = None
        self.search_query = ""
        self.filters = FilterState()
        self.view_mode = ViewMode.GRID
        self.current_view = "dashboard"

    # Session and gate

    @property
    def demo_mode(self) -> bool:
        return self.gate.demo_mode

    def set_session(self, session: Optional[Session]) -> None:
        """Set the active session. Logging out clears every collection."""
        self.session = session
        if session is None:
            self._clear_collections()

    def set_auth_prompt_open(self, is_open: bool) -> None:
        self.auth_prompt_open = is_open

    def enter_demo_mode(self) -> None:
        """Switch to demo mode: mutations stay in memory and are never gated."""
        self.gate.demo_mode = True
        self.auth_prompt_open = False

    def check_auth(self) -> bool:
        """Consult the auth gate; a denial opens the auth prompt."""
        if self.gate.permits(self.session):
            return True
        logger.info("Action blocked: no active session")
        self.auth_prompt_open = True
        return False

    def _clear_collections(self) -> None:
        self.inventory = []
        self.folders = []
        self.categories = []
        self.orders = []

    # Two-phase execution

    def _mutate(
        self,
        action: str,
        touched: Sequence[str],
        apply_local: Callable[[], T],
        remote: Optional[Callable[[RemoteBackend, str], None]] = None,
    ) -> Mutation[T]:
        """Run ``apply_local`` then the optional ``remote`` write.

        Args:
            action: Action name used in logs and results
            touched: Names of the store attributes the local phase reassigns
            apply_local: Validates and applies the change, returning the entity
            remote: Called with the backend and user ID when remote sync applies

        Returns:
            Mutation with the local result and the remote outcome
        """
        if not self.check_auth():
            return Mutation(applied=None, sync=SyncResult(action, SyncStatus.DENIED))

        snapshot = {name: getattr(self, name) for name in touched}
        applied = apply_local()

        if remote is None or self.backend is None or not self.gate.allows_remote(self.session):
            return Mutation(applied=applied, sync=SyncResult(action, SyncStatus.SKIPPED))

        try:
            remote(self.backend, self.session.user_id)
        except BackendError as e:

            def undo() -> None:
                for name, value in snapshot.items():
                    setattr(self, name, value)

            self.sync_strategy.on_failure(action, e, undo)
            return Mutation(applied=applied, sync=SyncResult(action, SyncStatus.FAILED, str(e)))

        return Mutation(applied=applied, sync=SyncResult(action, SyncStatus.SYNCED))

    # Initial load

    def _fetch(self, table: str, user_id: str) -> list[Row]:
        try:
            return self.backend.select(table, {"user_id": user_id})
        except BackendError as e:
            logger.error("Failed to load %s: %s", table, e)
            return []

    def fetch_initial_data(self) -> None:
        """Load every collection for the current session from the backend.

        A table that yields no rows, for whatever reason, leaves the matching
        collection as it was. Without a session or backend the collections
        are cleared; demo mode leaves them untouched.
        """
        if self.demo_mode:
            return

        self.is_loading = True
        if self.backend is None or not self.gate.allows_remote(self.session):
            self._clear_collections()
            self.is_loading = False
            return

        user_id = self.session.user_id
        product_rows = self._fetch(PRODUCTS, user_id)
        folder_rows = self._fetch(FOLDERS, user_id)
        category_rows = self._fetch(CATEGORIES, user_id)
        claimed_rows = self._fetch(CLAIMED_OFFERS, user_id)
        order_rows = self._fetch(ORDERS, user_id)
        settings_rows = self._fetch(SETTINGS, user_id)

        if product_rows:
            products = [mappers.product_from_row(row) for row in product_rows]
            self.inventory = sorted(products, key=lambda p: p.created_at, reverse=True)
        if folder_rows:
            self.folders = [mappers.folder_from_row(row) for row in folder_rows]
        if category_rows:
            self.categories = [mappers.category_from_row(row) for row in category_rows]
        if order_rows:
            orders = [mappers.order_from_row(row) for row in order_rows]
            self.orders = sorted(orders, key=lambda o: o.created_at, reverse=True)
        if settings_rows:
            self.settings = mappers.settings_from_rows(settings_rows, self.settings)
        if claimed_rows:
            plan = self.settings.plan
            if plan == PlanLevel.STARTER:
                plan = PlanLevel.GROWTH
            self.settings = replace(self.settings, has_claimed_offer=True, plan=plan)

        logger.info(
            "Loaded %d products, %d folders, %d categories, %d orders",
            len(self.inventory),
            len(self.folders),
            len(self.categories),
            len(self.orders),
        )
        self.is_loading = False

    # Lookups

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.inventory if p.id == product_id), None)

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self.folders if f.id == folder_id), None)

    def get_category(self, category_id: str) -> Optional[CategoryConfig]:
        return next((c for c in self.categories if c.id == category_id), None)

    def get_category_by_name(self, name: str) -> Optional[CategoryConfig]:
        """Case-insensitive lookup of a category by name."""
        wanted = name.strip().lower()
        return next((c for c in self.categories if c.name.lower() == wanted), None)

    def get_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)

    def _require_product(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise NotFoundError(product_not_found(product_id))
        return product

    def _require_folder(self, folder_id: str) -> Folder:
        folder = self.get_folder(folder_id)
        if folder is None:
            raise NotFoundError(folder_not_found(folder_id))
        return folder

    def _require_category(self, category_id: str) -> CategoryConfig:
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def _require_order(self, order_id: str) -> Order:
        order = self.get_order(order_id)
        if order is None:
            raise NotFoundError(order_not_found(order_id))
        return order

    def _replace_product(self, updated: Product) -> None:
        self.inventory = [updated if p.id == updated.id else p for p in self.inventory]

    # Products

    def add_product(self, product: Product) -> Mutation[Product]:
        """Prepend a product to the inventory. A blank image falls back to the default."""
        normalized: list[Product] = []

        def apply() -> Product:
            normalized.append(_normalize_product(product))
            self.inventory = normalized + self.inventory
            return normalized[0]

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(PRODUCTS, [mappers.product_to_row(normalized[0], user_id)])

        return self._mutate("add_product", ("inventory",), apply, remote)

    def bulk_add_products(self, products: Sequence[Product]) -> Mutation[list[Product]]:
        """Prepend many products with a single remote insert."""
        normalized: list[Product] = []

        def apply() -> list[Product]:
            normalized.extend(_normalize_product(p) for p in products)
            self.inventory = normalized + self.inventory
            return list(normalized)

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(PRODUCTS, [mappers.product_to_row(p, user_id) for p in normalized])

        return self._mutate("bulk_add_products", ("inventory",), apply, remote)

    def update_product(self, product_id: str, **changes: Any) -> Mutation[Product]:
        """Merge ``changes`` into a product.

        Raises:
            NotFoundError: If the product does not exist
            ValidationError: If a field is unknown, immutable or negative
        """
        if "image_url" in changes:
            changes["image_url"] = resolve_image_url(changes["image_url"])
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"])

        def apply() -> Product:
            current = self._require_product(product_id)
            mappers.product_changes_to_row(changes)
            _check_amounts(changes)
            updated = replace(current, **changes)
            self._replace_product(updated)
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(
                PRODUCTS,
                mappers.product_changes_to_row(changes),
                {"id": product_id, "user_id": user_id},
            )

        return self._mutate("update_product", ("inventory",), apply, remote)

    def _change_stock(self, action: str, product_id: str, delta: int) -> Mutation[Product]:
        new_stock: list[int] = []

        def apply() -> Product:
            current = self._require_product(product_id)
            new_stock.append(max(0, current.stock + delta))
            updated = replace(current, stock=new_stock[0])
            self._replace_product(updated)
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(PRODUCTS, {"stock": new_stock[0]}, {"id": product_id, "user_id": user_id})

        return self._mutate(action, ("inventory",), apply, remote)

    def increment_stock(self, product_id: str) -> Mutation[Product]:
        """Add one unit of stock."""
        return self._change_stock("increment_stock", product_id, 1)

    def decrement_stock(self, product_id: str) -> Mutation[Product]:
        """Remove one unit of stock; stock never drops below zero."""
        return self._change_stock("decrement_stock", product_id, -1)

    def delete_product(self, product_id: str) -> Mutation[Product]:
        """Remove a product. Returns the removed product."""

        def apply() -> Product:
            current = self._require_product(product_id)
            self.inventory = [p for p in self.inventory if p.id != product_id]
            return current

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.delete(PRODUCTS, {"id": product_id, "user_id": user_id})

        return self._mutate("delete_product", ("inventory",), apply, remote)

    def move_product(self, product_id: str, target_folder_id: Optional[str]) -> Mutation[Product]:
        """Place a product in ``target_folder_id`` (None for root)."""

        def apply() -> Product:
            current = self._require_product(product_id)
            if target_folder_id is not None:
                self._require_folder(target_folder_id)
            updated = replace(current, folder_id=target_folder_id)
            self._replace_product(updated)
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(
                PRODUCTS, {"folder_id": target_folder_id}, {"id": product_id, "user_id": user_id}
            )

        return self._mutate("move_product", ("inventory",), apply, remote)

    # Folders

    def add_folder(self, folder: Folder) -> Mutation[Folder]:
        """Append a folder."""

        def apply() -> Folder:
            if not folder.name.strip():
                raise ValidationError("Folder name cannot be empty")
            self.folders = self.folders + [folder]
            return folder

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(FOLDERS, [mappers.folder_to_row(folder, user_id)])

        return self._mutate("add_folder", ("folders",), apply, remote)

    def update_folder(self, folder_id: str, **changes: Any) -> Mutation[Folder]:
        """Merge ``changes`` into a folder."""

        def apply() -> Folder:
            current = self._require_folder(folder_id)
            mappers.folder_changes_to_row(changes)
            updated = replace(current, **changes)
            self.folders = [updated if f.id == folder_id else f for f in self.folders]
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(
                FOLDERS, mappers.folder_changes_to_row(changes), {"id": folder_id, "user_id": user_id}
            )

        return self._mutate("update_folder", ("folders",), apply, remote)

    def delete_folder(self, folder_id: str) -> Mutation[Folder]:
        """Remove a folder; its products move to the root."""

        def apply() -> Folder:
            current = self._require_folder(folder_id)
            self.folders = [f for f in self.folders if f.id != folder_id]
            self.inventory = [
                replace(p, folder_id=None) if p.folder_id == folder_id else p for p in self.inventory
            ]
            return current

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(PRODUCTS, {"folder_id": None}, {"folder_id": folder_id, "user_id": user_id})
            backend.delete(FOLDERS, {"id": folder_id, "user_id": user_id})

        return self._mutate("delete_folder", ("folders", "inventory"), apply, remote)

    def move_folder(self, folder_id: str, target_folder_id: Optional[str]) -> Mutation[Folder]:
        """Re-parent a folder under ``target_folder_id`` (None for root).

        No cycle detection is performed; ``get_breadcrumbs`` stays bounded
        if a cycle is created.
        """

        def apply() -> Folder:
            current = self._require_folder(folder_id)
            if target_folder_id is not None:
                self._require_folder(target_folder_id)
            updated = replace(current, parent_id=target_folder_id)
            self.folders = [updated if f.id == folder_id else f for f in self.folders]
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(
                FOLDERS, {"parent_id": target_folder_id}, {"id": folder_id, "user_id": user_id}
            )

        return self._mutate("move_folder", ("folders",), apply, remote)

    # Categories

    def add_category(self, category: CategoryConfig) -> Mutation[CategoryConfig]:
        """Append a category. Internal categories carry no margin."""
        normalized = _normalize_category(category)

        def apply() -> CategoryConfig:
            if not normalized.name.strip():
                raise ValidationError("Category name cannot be empty")
            self.categories = self.categories + [normalized]
            return normalized

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(CATEGORIES, [mappers.category_to_row(normalized, user_id)])

        return self._mutate("add_category", ("categories",), apply, remote)

    def bulk_add_categories(
        self, categories: Sequence[CategoryConfig]
    ) -> Mutation[list[CategoryConfig]]:
        """Append many categories with a single remote insert."""
        normalized = [_normalize_category(c) for c in categories]

        def apply() -> list[CategoryConfig]:
            self.categories = self.categories + normalized
            return list(normalized)

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(CATEGORIES, [mappers.category_to_row(c, user_id) for c in normalized])

        return self._mutate("bulk_add_categories", ("categories",), apply, remote)

    def update_category(self, category_id: str, **changes: Any) -> Mutation[CategoryConfig]:
        """Merge ``changes`` into a category.

        Products keep referencing the category by its old name after a rename.
        """
        row: Row = {}

        def apply() -> CategoryConfig:
            current = self._require_category(category_id)
            row.update(mappers.category_changes_to_row(changes))
            updated = _normalize_category(replace(current, **changes))
            if "prefix" in row:
                row["prefix"] = updated.prefix
            if updated.is_internal:
                row["margin"] = updated.margin
            self.categories = [updated if c.id == category_id else c for c in self.categories]
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(CATEGORIES, row, {"id": category_id, "user_id": user_id})

        return self._mutate("update_category", ("categories",), apply, remote)

    def delete_category(self, category_id: str) -> Mutation[CategoryConfig]:
        """Remove a category. Products referencing it by name are left as-is."""

        def apply() -> CategoryConfig:
            current = self._require_category(category_id)
            self.categories = [c for c in self.categories if c.id != category_id]
            return current

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.delete(CATEGORIES, {"id": category_id, "user_id": user_id})

        return self._mutate("delete_category", ("categories",), apply, remote)

    # Orders

    def create_order(
        self,
        items: Iterable[OrderItem],
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
    ) -> Mutation[Order]:
        """Record a new pending order. Stock is untouched until completion."""
        lines = tuple(items)
        order = Order(
            id=new_id(),
            items=lines,
            total_amount=sum((item.subtotal for item in lines), Decimal("0")),
            status=OrderStatus.PENDING,
            created_at=utcnow(),
            customer_name=customer_name or None,
            customer_phone=customer_phone or None,
        )

        def apply() -> Order:
            if not lines:
                raise ValidationError("An order needs at least one item")
            if any(item.quantity <= 0 for item in lines):
                raise ValidationError("Order quantities must be positive")
            self.orders = [order] + self.orders
            return order

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(ORDERS, [mappers.order_to_row(order, user_id)])

        return self._mutate("create_order", ("orders",), apply, remote)

    def update_order_status(self, order_id: str, status: OrderStatus | str) -> Mutation[Order]:
        """Move a pending order to completed or cancelled.

        Completing an order removes each item's quantity from stock, clamped
        at zero. Items whose product no longer exists are ignored.

        Raises:
            ValidationError: If the status is not a known order status
            NotFoundError: If the order does not exist
            InvalidTransitionError: If the order is not pending or the
                target status is pending
        """
        resolved: dict[str, OrderStatus] = {}
        stock_updates: dict[str, int] = {}

        def apply() -> Order:
            target = _order_status(status)
            resolved["target"] = target
            current = self._require_order(order_id)
            if current.status != OrderStatus.PENDING:
                raise InvalidTransitionError(
                    f"Order {order_id} is already {current.status.value}"
                )
            if target == OrderStatus.PENDING:
                raise InvalidTransitionError(f"Order {order_id} is already pending")

            if target == OrderStatus.COMPLETED:
                for item in current.items:
                    product = self.get_product(item.product_id)
                    if product is None:
                        continue
                    new_stock = max(0, product.stock - item.quantity)
                    stock_updates[product.id] = new_stock
                    self._replace_product(replace(product, stock=new_stock))

            updated = replace(current, status=target)
            self.orders = [updated if o.id == order_id else o for o in self.orders]
            return updated

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.update(
                ORDERS, {"status": resolved["target"].value}, {"id": order_id, "user_id": user_id}
            )
            for product_id, stock in stock_updates.items():
                backend.update(PRODUCTS, {"stock": stock}, {"id": product_id, "user_id": user_id})

        return self._mutate("update_order_status", ("orders", "inventory"), apply, remote)

    # Settings

    def update_settings(self, **changes: Any) -> AppSettings:
        """Merge ``changes`` into the settings, locally only.

        Persisting is the job of ``save_settings``.
        """
        unknown = set(changes) - SETTINGS_FIELDS
        if unknown:
            raise ValidationError(unknown_fields("settings", unknown))
        if "plan" in changes:
            changes["plan"] = PlanLevel(changes["plan"])
        self.settings = replace(self.settings, **changes)
        return self.settings

    def save_settings(self) -> Mutation[AppSettings]:
        """Persist every settings field, replacing the stored values in place."""

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.upsert(SETTINGS, mappers.settings_to_rows(self.settings, user_id), SETTINGS_KEY_COLUMNS)

        return self._mutate("save_settings", (), lambda: self.settings, remote)

    def claim_offer(self) -> Mutation[AppSettings]:
        """Claim the promotional offer.

        The confirmation notice is always shown, whatever the remote outcome.
        """

        def apply() -> AppSettings:
            self.settings = replace(self.settings, has_claimed_offer=True, plan=PlanLevel.GROWTH)
            self.notices = self.notices + [CLAIM_OFFER_NOTICE]
            return self.settings

        def remote(backend: RemoteBackend, user_id: str) -> None:
            backend.insert(CLAIMED_OFFERS, [mappers.claimed_offer_row(user_id, PlanLevel.GROWTH)])

        return self._mutate("claim_offer", ("settings",), apply, remote)

    # View state

    def set_current_folder(self, folder_id: Optional[str]) -> None:
        self.current_folder_id = folder_id
        self.current_view = "files"

    def set_search_query(self, query: str) -> None:
        self.search_query = query

    def set_filters(self, **changes: Any) -> FilterState:
        """Merge ``changes`` into the current filters."""
        unknown = set(changes) - FILTER_FIELDS
        if unknown:
            raise ValidationError(unknown_fields("filter", unknown))
        for name in ("categories", "tags"):
            if name in changes:
                changes[name] = tuple(changes[name])
        self.filters = replace(self.filters, **changes)
        return self.filters

    def reset_filters(self) -> None:
        self.filters = FilterState()

    def set_view_mode(self, mode: ViewMode | str) -> None:
        self.view_mode = ViewMode(mode)

    def set_current_view(self, view: str) -> None:
        """Switch view; the current folder and the filters are reset."""
        if view not in VIEW_TYPES:
            raise ValidationError(f"Unknown view '{view}'")
        self.current_view = view
        self.current_folder_id = None
        self.filters = FilterState()

    # Queries

    def get_breadcrumbs(self) -> list[Folder]:
        """Return the folder path from the root to the current folder.

        The walk stops at a missing parent, and visits each folder at most
        once so a cyclic chain still terminates.
        """
        by_id = {f.id: f for f in self.folders}
        breadcrumbs: list[Folder] = []
        seen: set[str] = set()
        current_id = self.current_folder_id
        while current_id is not None and current_id not in seen:
            folder = by_id.get(current_id)
            if folder is None:
                break
            seen.add(current_id)
            breadcrumbs.append(folder)
            current_id = folder.parent_id
        breadcrumbs.reverse()
        return breadcrumbs

    def get_filtered_inventory(self) -> list[Product]:
        """Apply the search query and filters, AND-combined.

        Order: text search over name/SKU/brand, category membership, tag
        intersection, price range, stock ceiling.
        """
        query = self.search_query.lower()
        filters = self.filters
        min_price = _parse_bound(filters.min_price)
        max_price = _parse_bound(filters.max_price)

        results = []
        for item in self.inventory:
            if query and not (
                query in item.name.lower()
                or query in item.sku.lower()
                or (item.brand is not None and query in item.brand.lower())
            ):
                continue
            if filters.categories and item.category not in filters.categories:
                continue
            if filters.tags and not set(filters.tags) & set(item.tags):
                continue
            if min_price is not None and item.price < min_price:
                continue
            if max_price is not None and item.price > max_price:
                continue
            if filters.max_stock is not None and item.stock > filters.max_stock:
                continue
            results.append(item)
        return results

    def get_current_folders(self) -> list[Folder]:
        """Folders directly inside the current folder; none while searching."""
        if self.search_query:
            return []
        return [f for f in self.folders if f.parent_id == self.current_folder_id]

    def get_current_items(self) -> list[Product]:
        """Filtered products in the current folder, or everywhere while searching."""
        items = self.get_filtered_inventory()
        if self.search_query:
            return items
        return [p for p in items if p.folder_id == self.current_folder_id]
