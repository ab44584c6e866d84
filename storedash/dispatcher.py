"""
Command dispatcher for mutating operations.

Every command goes Locking -> InFlight -> Succeeded -> Reconciling, or
InFlight -> Failed. Locks and the busy signal are released on every path.
Product commands reconcile with a full product reload, order status
changes with a direct patch of the snapshot.
"""
import logging
from typing import Any, Awaitable, Callable, Union
from . import schemas, validators
from .errors import ValidationError
from .locks import OperationLock
from .store import EntityStore

logger = logging.getLogger(__name__)

PRODUCTS = "Products"
ORDERS = "Orders"


class CommandDispatcher:
    """
    Runs one mutating command at a time per entity.

    Args:
        store: Entity snapshot to reconcile
        lock: Per-entity lock and busy signal
        actors: ActorClient for product webhooks
        remote: RemoteStore for the order status write
        reload_products: Coroutine function reloading the product snapshot
    """

    def __init__(
        self,
        store: EntityStore,
        lock: OperationLock,
        actors,
        remote,
        reload_products: Callable[[], Awaitable[Any]],
    ):
        self.store = store
        self.lock = lock
        self.actors = actors
        self.remote = remote
        self.reload_products = reload_products

    async def create_product(self, draft: schemas.ProductCreate) -> schemas.CommandOutcome:
        """
        Create a product through the create webhook, then reload products.

        Raises:
            ValidationError: If the draft fails validation (nothing is sent)
            TransportError: If the webhook call fails
        """
        is_valid, error_msg = validators.validate_new_product(draft)
        if not is_valid:
            raise ValidationError(error_msg)
        product_id = validators.generate_product_id(p.id for p in self.store.products)
        product = draft.to_product(product_id)
        return await self._run(
            "create_product", PRODUCTS, product.id, "Deploying Asset...",
            lambda: self.actors.create_product(product),
            self.reload_products,
        )

    async def update_product_status(
        self, product: schemas.Product, status: Union[schemas.ProductStatus, str]
    ) -> schemas.CommandOutcome:
        """
        Send the full record with a new status, then reload products.

        Raises:
            ValidationError: If status is not a product status
            TransportError: If the webhook call fails
        """
        try:
            status = schemas.ProductStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown product status: {status}")
        updated = product.model_copy(update={"status": status.value})
        return await self._run(
            "update_product_status", PRODUCTS, product.id, "Shifting Status...",
            lambda: self.actors.update_product_status(updated),
            self.reload_products,
        )

    async def toggle_product_status(self, product: schemas.Product) -> schemas.CommandOutcome:
        """Flip Available and Not Available; a missing status becomes Available."""
        if product.is_available:
            new_status = schemas.ProductStatus.NOT_AVAILABLE
        else:
            new_status = schemas.ProductStatus.AVAILABLE
        return await self.update_product_status(product, new_status)

    async def delete_product(self, product: schemas.Product) -> schemas.CommandOutcome:
        return await self._run(
            "delete_product", PRODUCTS, product.id, "Decommissioning Asset...",
            lambda: self.actors.delete_product(product),
            self.reload_products,
        )

    async def update_order_status(
        self, order_id: str, status: Union[schemas.OrderStatus, str]
    ) -> schemas.CommandOutcome:
        """
        Write an order's status to the store and patch the snapshot.

        Any status may follow any other.

        Raises:
            ValidationError: If status is not an order status
            TransportError: If the store write fails
        """
        try:
            status = schemas.OrderStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {status}")

        async def reconcile():
            self.store.patch_order_status(order_id, status.value)

        return await self._run(
            "update_order_status", ORDERS, order_id, f"Updating status to {status.value}...",
            lambda: self.remote.update_order_status(order_id, status.value),
            reconcile,
        )

    async def _run(
        self,
        command: str,
        collection: str,
        entity_id: Any,
        message: str,
        call: Callable[[], Awaitable[Any]],
        reconcile: Callable[[], Awaitable[Any]],
    ) -> schemas.CommandOutcome:
        self._transition(command, entity_id, schemas.CommandState.LOCKING)
        self.lock.acquire(collection, entity_id)
        token = None
        try:
            token = self.lock.busy.activate(message)
            self._transition(command, entity_id, schemas.CommandState.IN_FLIGHT)
            try:
                await call()
            except Exception:
                self._transition(command, entity_id, schemas.CommandState.FAILED)
                raise
            self._transition(command, entity_id, schemas.CommandState.SUCCEEDED)
            self._transition(command, entity_id, schemas.CommandState.RECONCILING)
            await reconcile()
            logger.info(f"{command} for {collection} {entity_id} succeeded")
            return schemas.CommandOutcome(
                command=command, entity_id=entity_id, state=schemas.CommandState.SUCCEEDED
            )
        finally:
            if token is not None:
                self.lock.busy.release(token)
            self.lock.release(collection, entity_id)
            self._transition(command, entity_id, schemas.CommandState.IDLE)

    @staticmethod
    def _transition(command: str, entity_id: Any, state: schemas.CommandState) -> None:
        logger.debug(f"{command} {entity_id}: {state.value}")
