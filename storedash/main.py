"""
Store Dash API

This module exposes the dashboard core over HTTP for the presentation layer:
snapshots, derived stats, the filtered catalog, the busy signal, and the
mutating commands.

Endpoints:
    GET /healthz: Health check endpoint for orchestration systems
    GET /state: Stats, busy signal, error flags and selection
    GET /products: Catalog filtered by status
    PUT /filter: Select the active catalog filter
    POST /products: Create a product
    POST /products/{product_id}/toggle: Flip a product's availability
    PUT /products/{product_id}/status: Set a product's availability
    DELETE /products/{product_id}: Delete a product
    GET /orders: Order queue, most recent first
    PUT /orders/{order_id}/status: Change an order's status
    POST /refresh: Reload both collections

Attributes:
    app (FastAPI): The FastAPI application instance configured with the title "storedash"
"""
from contextlib import asynccontextmanager
from typing import Callable, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Request, status

from . import schemas
from .errors import NotFoundError
from .sync import SyncController


def get_controller(request: Request) -> SyncController:
    """Dependency returning the controller created at startup."""
    return request.app.state.controller


def _raise_for_outcome(outcome: schemas.CommandOutcome) -> schemas.CommandOutcome:
    if outcome.state == schemas.CommandState.FAILED:
        if outcome.error_type == "ValidationError":
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=outcome.error)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.error)
    return outcome


def create_app(controller_factory: Callable[[], SyncController] = SyncController) -> FastAPI:
    """
    Build the API around a controller.

    Args:
        controller_factory: Builds the SyncController at startup

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        controller = controller_factory()
        app.state.controller = controller
        # A failed initial load leaves store_error set; the app keeps serving
        await controller.activate()
        yield

    app = FastAPI(title="storedash", lifespan=lifespan)

    @app.get("/healthz", response_model=dict)
    def health():
        """
        Health check endpoint for the dashboard service.

        Returns:
            dict: {"status": "healthy"} when the service is operational.
        """
        return {"status": "healthy"}

    @app.get("/state", response_model=schemas.DashboardState)
    def get_state(controller: SyncController = Depends(get_controller)):
        return controller.state()

    @app.get("/stats", response_model=schemas.Stats)
    def get_stats(controller: SyncController = Depends(get_controller)):
        return controller.stats

    @app.get("/busy", response_model=schemas.BusyState)
    def get_busy(controller: SyncController = Depends(get_controller)):
        return controller.busy

    @app.get("/products", response_model=List[schemas.Product], response_model_by_alias=True)
    def list_products(
        status_filter: Optional[schemas.ProductFilter] = None,
        controller: SyncController = Depends(get_controller)
    ):
        """
        List the catalog, newest first.

        Args:
            status_filter: "All", "Available" or "Not Available" (default: the active filter)
            controller: Sync controller (injected)

        Returns:
            Matching products in store order
        """
        return controller.filtered_products(status_filter)

    @app.put("/filter", response_model=schemas.DashboardState)
    def set_filter(update: schemas.FilterUpdate, controller: SyncController = Depends(get_controller)):
        """Select the catalog filter shared by every client."""
        controller.set_filter(update.active_filter)
        return controller.state()

    @app.post("/products", response_model=schemas.CommandOutcome, status_code=status.HTTP_201_CREATED)
    async def create_product(
        draft: schemas.ProductCreate,
        controller: SyncController = Depends(get_controller)
    ):
        """
        Create a product through the create webhook and reload the catalog.

        Raises:
            HTTPException: 422 if the product is invalid, 502 if the webhook failed
        """
        return _raise_for_outcome(await controller.create_product(draft))

    @app.post("/products/{product_id}/toggle", response_model=schemas.CommandOutcome)
    async def toggle_product_status(product_id: int, controller: SyncController = Depends(get_controller)):
        try:
            outcome = await controller.toggle_product_status(product_id)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return _raise_for_outcome(outcome)

    @app.put("/products/{product_id}/status", response_model=schemas.CommandOutcome)
    async def update_product_status(
        product_id: int,
        update: schemas.ProductStatusUpdate,
        controller: SyncController = Depends(get_controller)
    ):
        try:
            outcome = await controller.update_product_status(product_id, update.status)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return _raise_for_outcome(outcome)

    @app.delete("/products/{product_id}", response_model=schemas.CommandOutcome)
    async def delete_product(product_id: int, controller: SyncController = Depends(get_controller)):
        """
        Delete a product through the delete webhook and reload the catalog.

        Raises:
            HTTPException: 404 if the product is not in the snapshot, 502 if the webhook failed
        """
        try:
            outcome = await controller.delete_product(product_id)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return _raise_for_outcome(outcome)

    @app.get("/orders", response_model=List[schemas.Order])
    def list_orders(controller: SyncController = Depends(get_controller)):
        return controller.orders

    @app.get("/orders/selected", response_model=schemas.Order)
    def get_selected_order(controller: SyncController = Depends(get_controller)):
        order = controller.store.selected_order
        if order is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No order selected")
        return order

    @app.put("/orders/selected/{order_id}", response_model=schemas.Order)
    def select_order(order_id: str, controller: SyncController = Depends(get_controller)):
        try:
            return controller.select_order(order_id)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.put("/orders/{order_id}/status", response_model=schemas.CommandOutcome)
    async def update_order_status(
        order_id: str,
        update: schemas.OrderStatusUpdate,
        controller: SyncController = Depends(get_controller)
    ):
        """
        Write an order's status to the store; the snapshot is patched in place.

        Raises:
            HTTPException: 502 if the store write failed
        """
        return _raise_for_outcome(await controller.update_order_status(order_id, update.status))

    @app.post("/refresh", response_model=schemas.DashboardState)
    async def refresh(controller: SyncController = Depends(get_controller)):
        """Reload Products and Orders. A failed load is reported in store_error."""
        await controller.refresh()
        return controller.state()

    @app.get("/diagnostics", response_model=schemas.Diagnostics)
    async def diagnostics(controller: SyncController = Depends(get_controller)):
        return await controller.diagnose()

    return app


app = create_app()
