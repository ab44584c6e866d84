"""
Top-level orchestration of loads and commands.

The controller owns the snapshot, the locks and the dispatcher, turns
command errors into CommandOutcome records and keeps the store-level
error until the next successful load.
"""
import logging
from typing import List, Optional, Union
from . import schemas, views
from .clients.actors_client import ActorClient
from .dispatcher import CommandDispatcher
from .errors import LockContention, NotFoundError, StoreReadError, TransportError, ValidationError
from .locks import OperationLock
from .remote import RemoteStore
from .store import EntityStore

logger = logging.getLogger(__name__)


class SyncController:
    """
    Loads the snapshot and runs commands against it.

    Attributes:
        store_error (str): Set when a load fails, cleared by the next successful load
        operation_error (str): Error text of the last failed command
        products_loading (bool): True while products are being fetched
        orders_loading (bool): True while orders are being fetched
        active_filter (ProductFilter): Current catalog filter
    """

    def __init__(
        self,
        remote: Optional[RemoteStore] = None,
        actors: Optional[ActorClient] = None,
        store: Optional[EntityStore] = None,
        lock: Optional[OperationLock] = None,
    ):
        self.remote = remote or RemoteStore()
        self.actors = actors or ActorClient()
        self.store = store or EntityStore()
        self.lock = lock or OperationLock()
        self.dispatcher = CommandDispatcher(
            self.store, self.lock, self.actors, self.remote, self.refresh_products
        )
        self.store_error: Optional[str] = None
        self.operation_error: Optional[str] = None
        self.products_loading = False
        self.orders_loading = False
        self.active_filter = schemas.ProductFilter.ALL

    # Loads

    async def activate(self) -> bool:
        """Initial load of both collections. Failures are not retried."""
        return await self.refresh()

    async def refresh(self) -> bool:
        """
        Reload Products and Orders together.

        Returns:
            True on success, False if the load failed (store_error is set)
        """
        self.products_loading = self.orders_loading = True
        try:
            await self.store.load(self.remote)
        except StoreReadError as e:
            self.store_error = str(e)
            return False
        finally:
            self.products_loading = self.orders_loading = False
        self.store_error = None
        return True

    async def refresh_products(self) -> bool:
        self.products_loading = True
        try:
            await self.store.load_products(self.remote)
        except StoreReadError as e:
            self.store_error = str(e)
            return False
        finally:
            self.products_loading = False
        self.store_error = None
        return True

    async def refresh_orders(self) -> bool:
        self.orders_loading = True
        try:
            await self.store.load_orders(self.remote)
        except StoreReadError as e:
            self.store_error = str(e)
            return False
        finally:
            self.orders_loading = False
        self.store_error = None
        return True

    async def diagnose(self) -> schemas.Diagnostics:
        return await self.remote.diagnose()

    # Views

    @property
    def products(self) -> List[schemas.Product]:
        return self.store.products

    @property
    def orders(self) -> List[schemas.Order]:
        return self.store.orders

    @property
    def stats(self) -> schemas.Stats:
        return views.compute_stats(self.store.products)

    @property
    def busy(self) -> schemas.BusyState:
        return self.lock.busy.state

    def set_filter(self, active_filter: Union[schemas.ProductFilter, str]) -> None:
        self.active_filter = schemas.ProductFilter(active_filter)

    def filtered_products(
        self, active_filter: Union[schemas.ProductFilter, str, None] = None
    ) -> List[schemas.Product]:
        if active_filter is None:
            active_filter = self.active_filter
        return views.filter_products(self.store.products, active_filter)

    def select_order(self, order_id: str) -> schemas.Order:
        order = self.store.select_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def state(self) -> schemas.DashboardState:
        selected = self.store.selected_order
        return schemas.DashboardState(
            stats=self.stats,
            busy=self.busy,
            store_error=self.store_error,
            operation_error=self.operation_error,
            products_loading=self.products_loading,
            orders_loading=self.orders_loading,
            active_filter=self.active_filter,
            selected_order_id=selected.id if selected else None,
            order_count=len(self.store.orders),
        )

    # Commands

    async def create_product(self, draft: schemas.ProductCreate) -> schemas.CommandOutcome:
        return await self._dispatch("create_product", None, self.dispatcher.create_product(draft))

    async def update_product_status(
        self, product_id: int, status: Union[schemas.ProductStatus, str]
    ) -> schemas.CommandOutcome:
        product = self._require_product(product_id)
        return await self._dispatch(
            "update_product_status", product_id,
            self.dispatcher.update_product_status(product, status),
        )

    async def toggle_product_status(self, product_id: int) -> schemas.CommandOutcome:
        product = self._require_product(product_id)
        return await self._dispatch(
            "update_product_status", product_id, self.dispatcher.toggle_product_status(product)
        )

    async def delete_product(self, product_id: int) -> schemas.CommandOutcome:
        product = self._require_product(product_id)
        return await self._dispatch("delete_product", product_id, self.dispatcher.delete_product(product))

    async def update_order_status(
        self, order_id: str, status: Union[schemas.OrderStatus, str]
    ) -> schemas.CommandOutcome:
        return await self._dispatch(
            "update_order_status", order_id, self.dispatcher.update_order_status(order_id, status)
        )

    def _require_product(self, product_id: int) -> schemas.Product:
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    async def _dispatch(self, command: str, entity_id, operation) -> schemas.CommandOutcome:
        try:
            outcome = await operation
        except LockContention as e:
            logger.debug(f"Ignored duplicate {command}: {e}")
            return schemas.CommandOutcome(
                command=command, entity_id=entity_id, state=schemas.CommandState.REFUSED
            )
        except (TransportError, ValidationError) as e:
            logger.error(f"{command} for {entity_id} failed: {e}")
            self.operation_error = str(e)
            return schemas.CommandOutcome(
                command=command,
                entity_id=entity_id,
                state=schemas.CommandState.FAILED,
                error=str(e),
                error_type=type(e).__name__,
            )
        self.operation_error = None
        return outcome
