"""
Stock side effects of order status transitions.

Each order type has a ``StockPolicy``. The order's ``stock_applied`` flag
records whether its items are currently reflected in product stock, so a
transition between two stock-holding statuses (e.g. confirmed to completed)
never applies the items twice.
"""
import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS

from .services import adjust_product_stock

logger = logging.getLogger(__name__)


@dataclass
class StockMovement:
    product_id: int
    product_name: str
    delta: int


def _setting_flag(name, default):
    return lambda: bool(getattr(settings, name, default))


class StockPolicy:
    """
    Args:
        direction: -1 when holding stock removes it (sales), +1 when it adds it (purchases)
        applying: Statuses that apply the items when entered
        holding: Statuses in which applied stock stays applied
        releasing: Statuses that reverse applied stock when entered
        apply_on_create: Callable deciding whether an order created in an
            applying status applies its items immediately
    """

    def __init__(self, name, direction, applying, holding, releasing=('cancelled',), apply_on_create=None):
        self.name = name
        self.direction = direction
        self.applying = frozenset(applying)
        self.holding = frozenset(holding)
        self.releasing = frozenset(releasing)
        self.apply_on_create = apply_on_create or (lambda: True)

    def _move(self, order, items, sign, using):
        movements = []
        for item in items:
            delta = sign * self.direction * item.quantity
            adjust_product_stock(item.product_id, delta, using=using)
            movements.append(StockMovement(item.product_id, item.product_name, delta))
        logger.info(f"{self.name} {order.order_number}: {'applied' if sign > 0 else 'reversed'} stock for {len(movements)} item(s)")
        return movements

    def apply(self, order, items, using=DEFAULT_DB_ALIAS):
        movements = self._move(order, items, 1, using)
        order.stock_applied = True
        return movements

    def reverse(self, order, items, using=DEFAULT_DB_ALIAS):
        movements = self._move(order, items, -1, using)
        order.stock_applied = False
        return movements

    def on_create(self, order, items, using=DEFAULT_DB_ALIAS):
        """Stock effect of a freshly created order; updates ``order.stock_applied`` in memory"""
        if order.status in self.applying and self.apply_on_create():
            return self.apply(order, items, using)
        return []

    def on_update(self, order, old_status, old_items, new_items=None, using=DEFAULT_DB_ALIAS):
        """
        Stock effect of an update; ``order.status`` already holds the new status.

        Args:
            old_items: Items as stored before the update
            new_items: Replacement items, or ``None`` when items are unchanged
        """
        new_status = order.status
        items = new_items if new_items is not None else old_items

        if order.stock_applied:
            if new_status in self.releasing or new_status not in self.holding:
                return self.reverse(order, old_items, using)
            if new_items is not None:
                return self.reverse(order, old_items, using) + self.apply(order, new_items, using)
            return []

        if new_status != old_status and new_status in self.applying:
            return self.apply(order, items, using)
        return []

    def on_delete(self, order, items, using=DEFAULT_DB_ALIAS):
        """Compensate stock held by an order about to be deleted"""
        if order.stock_applied:
            return self.reverse(order, items, using)
        return []


SALES_STOCK_POLICY = StockPolicy(
    name='Sales order',
    direction=-1,
    applying=('confirmed', 'completed'),
    holding=('confirmed', 'processing', 'completed'),
    apply_on_create=_setting_flag('ORDERDESK_APPLY_STOCK_ON_SALES_CREATE', True),
)

PURCHASE_STOCK_POLICY = StockPolicy(
    name='Purchase order',
    direction=1,
    applying=('received',),
    holding=('received',),
)
