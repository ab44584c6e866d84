"""
In-memory snapshot of Products and Orders.

Only load*() and patch_order_status() change the snapshot. A failed fetch
leaves the previous snapshot untouched.
"""
import asyncio
import logging
from typing import List, Optional
from . import schemas

logger = logging.getLogger(__name__)


class EntityStore:
    """Last-fetched Products and Orders plus the selected Order."""

    def __init__(self):
        self._products: List[schemas.Product] = []
        self._orders: List[schemas.Order] = []
        self._selected_order_id: Optional[str] = None

    @property
    def products(self) -> List[schemas.Product]:
        return list(self._products)

    @property
    def orders(self) -> List[schemas.Order]:
        return list(self._orders)

    @property
    def selected_order(self) -> Optional[schemas.Order]:
        if self._selected_order_id is None:
            return None
        return self.get_order(self._selected_order_id)

    def get_product(self, product_id: int) -> Optional[schemas.Product]:
        return next((p for p in self._products if p.id == product_id), None)

    def get_order(self, order_id: str) -> Optional[schemas.Order]:
        return next((o for o in self._orders if o.id == order_id), None)

    async def load(self, remote) -> schemas.Snapshot:
        """
        Fetch both collections and replace the snapshot in one step.

        Args:
            remote: RemoteStore to read from

        Raises:
            StoreReadError: If either read fails; nothing is replaced
        """
        products, orders = await asyncio.gather(
            remote.fetch_products(), remote.fetch_orders(), return_exceptions=True
        )
        for result in (products, orders):
            if isinstance(result, BaseException):
                raise result
        self._products = products
        self._replace_orders(orders)
        return schemas.Snapshot(products=self.products, orders=self.orders)

    async def load_products(self, remote) -> List[schemas.Product]:
        self._products = await remote.fetch_products()
        return self.products

    async def load_orders(self, remote) -> List[schemas.Order]:
        self._replace_orders(await remote.fetch_orders())
        return self.orders

    def _replace_orders(self, orders: List[schemas.Order]) -> None:
        for order in orders:
            if order.items_missing:
                logger.warning(f"Order {order.id} has no items field")
        self._orders = orders
        if self._selected_order_id is not None and self.get_order(self._selected_order_id) is None:
            self._selected_order_id = None
        if self._selected_order_id is None and orders:
            self._selected_order_id = orders[0].id

    def select_order(self, order_id: str) -> Optional[schemas.Order]:
        """Select an order for detail view; unknown ids leave the selection unchanged."""
        order = self.get_order(order_id)
        if order is not None:
            self._selected_order_id = order.id
        return order

    def patch_order_status(self, order_id: str, status: str) -> bool:
        """
        Set one order's status, leaving every other field as it was.

        Returns:
            True if the order was in the snapshot, False otherwise (no-op)
        """
        for index, order in enumerate(self._orders):
            if order.id == order_id:
                self._orders[index] = order.model_copy(update={"status": status})
                return True
        return False
