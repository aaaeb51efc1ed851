"""Inventory and order reporting domain service."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from autostock.domain.entities import OrderStatus, Product, utcnow
from autostock.domain.store import InventoryStore
from autostock.utils.date_parser import days_between

WARRANTY_ALERT_DAYS = 60

# Cumulative share of stock value closing classes A and B
ABC_A_CUTOFF = Decimal("0.80")
ABC_B_CUTOFF = Decimal("0.95")


@dataclass(frozen=True)
class InventorySummary:
    """Financial snapshot of the whole inventory."""

    total_items: int
    total_stock: int
    retail_value: Decimal
    cost_value: Decimal
    potential_profit: Decimal
    gross_margin: Decimal  # percentage of retail value


@dataclass(frozen=True)
class OrderSummary:
    pending: int
    completed: int
    cancelled: int
    completed_revenue: Decimal


class ReportService:
    """Service for computing dashboard and financial reports."""

    def __init__(self, store: InventoryStore):
        """Initialize report service.

        Args:
            store: Store whose collections are reported on
        """
        self.store = store

    def inventory_summary(self) -> InventorySummary:
        """Compute stock totals and the value of the stock at price and cost."""
        inventory = self.store.inventory
        retail_value = sum((p.price * p.stock for p in inventory), Decimal("0"))
        cost_value = sum((p.cost * p.stock for p in inventory), Decimal("0"))
        profit = retail_value - cost_value
        margin = (profit / retail_value * 100) if retail_value > 0 else Decimal("0")
        return InventorySummary(
            total_items=len(inventory),
            total_stock=sum(p.stock for p in inventory),
            retail_value=retail_value,
            cost_value=cost_value,
            potential_profit=profit,
            gross_margin=margin.quantize(Decimal("0.01")),
        )

    def warranty_alerts(
        self, days: int = WARRANTY_ALERT_DAYS, now: Optional[datetime] = None
    ) -> list[Product]:
        """Stocked products whose supplier warranty ends within ``days``.

        Already-expired warranties are included. Earliest expiry first.
        """
        now = now or utcnow()
        alerts = [
            p
            for p in self.store.inventory
            if p.stock > 0
            and p.supplier_warranty is not None
            and days_between(now, p.supplier_warranty) < days
        ]
        return sorted(alerts, key=lambda p: p.supplier_warranty)

    def stagnant_items(
        self, threshold_days: Optional[int] = None, now: Optional[datetime] = None
    ) -> list[Product]:
        """Stocked products that entered inventory more than ``threshold_days`` ago.

        The threshold defaults to the ``stagnant_days_threshold`` setting.
        Oldest first.
        """
        now = now or utcnow()
        if threshold_days is None:
            threshold_days = self.store.settings.stagnant_days_threshold
        cutoff = now - timedelta(days=threshold_days)
        stagnant = [
            p
            for p in self.store.inventory
            if p.stock > 0 and p.entry_date is not None and p.entry_date < cutoff
        ]
        return sorted(stagnant, key=lambda p: p.entry_date)

    def abc_classification(self) -> list[Product]:
        """Return the inventory with ``abc_class`` set by stock value.

        Products are ranked by price x stock; those covering the first 80% of
        total value are class A, up to 95% class B, the rest class C. With no
        stock value every product is class C.
        """
        ranked = sorted(self.store.inventory, key=lambda p: p.price * p.stock, reverse=True)
        total = sum((p.price * p.stock for p in ranked), Decimal("0"))
        classified = []
        cumulative = Decimal("0")
        for product in ranked:
            value = product.price * product.stock
            if total <= 0 or value <= 0:
                abc_class = "C"
            else:
                share_before = cumulative / total
                cumulative += value
                if share_before < ABC_A_CUTOFF:
                    abc_class = "A"
                elif share_before < ABC_B_CUTOFF:
                    abc_class = "B"
                else:
                    abc_class = "C"
            classified.append(replace(product, abc_class=abc_class))
        return classified

    def order_summary(self) -> OrderSummary:
        """Count orders per status and total the revenue of completed ones."""
        orders = self.store.orders
        completed = [o for o in orders if o.status == OrderStatus.COMPLETED]
        return OrderSummary(
            pending=sum(1 for o in orders if o.status == OrderStatus.PENDING),
            completed=len(completed),
            cancelled=sum(1 for o in orders if o.status == OrderStatus.CANCELLED),
            completed_revenue=sum((o.total_amount for o in completed), Decimal("0")),
        )
