"""
Async access to the hosted store.

Each query runs in a worker thread with its own session, so awaiting a
store call never blocks the event loop.
"""
import asyncio
import logging
from typing import Callable, List, Optional
from pydantic import ValidationError as SchemaError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from . import crud, schemas
from .errors import StoreReadError, TransportError

logger = logging.getLogger(__name__)


class RemoteStore:
    """
    Read contract and targeted order write against the store.

    Args:
        engine: SQLAlchemy engine; defaults to the one built from DATABASE_URL
    """

    def __init__(self, engine: Optional[Engine] = None):
        if engine is None:
            from .database import SessionLocal, engine as default_engine
            self.engine = default_engine
            self._session_factory = SessionLocal
        else:
            self.engine = engine
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @property
    def location(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)

    def _call(self, fn: Callable[[Session], object]):
        db = self._session_factory()
        try:
            return fn(db)
        finally:
            db.close()

    async def _read(self, collection: str, fn: Callable[[Session], object]):
        try:
            return await asyncio.to_thread(self._call, fn)
        except (SQLAlchemyError, SchemaError) as e:
            logger.error(f"Failed to load {collection}: {e}")
            raise StoreReadError(f"Failed to load {collection}: {e}") from e

    async def fetch_products(self) -> List[schemas.Product]:
        """
        Load every product, newest id first.

        Raises:
            StoreReadError: If the query fails or a row cannot be parsed
        """
        rows = await self._read(
            "Products",
            lambda db: [schemas.Product.model_validate(row) for row in crud.get_products(db)],
        )
        logger.info(f"Inventory sync: found {len(rows)} products")
        return rows

    async def fetch_orders(self) -> List[schemas.Order]:
        """
        Load every order, most recent first.

        Raises:
            StoreReadError: If the query fails or a row cannot be parsed
        """
        rows = await self._read(
            "Orders",
            lambda db: [schemas.Order.model_validate(row) for row in crud.get_orders(db)],
        )
        logger.info(f"Order sync: found {len(rows)} orders")
        return rows

    async def update_order_status(self, order_id: str, status: str) -> int:
        """
        Write a new status for one order.

        Returns:
            Number of rows matched

        Raises:
            TransportError: If the write fails
        """
        try:
            matched = await asyncio.to_thread(
                self._call, lambda db: crud.update_order_status(db, order_id, status)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to update status of order {order_id}: {e}")
            raise TransportError(f"Failed to update order status: {e}") from e
        if not matched:
            logger.warning(f"Status update for order {order_id} matched no rows")
        return matched

    async def diagnose(self) -> schemas.Diagnostics:
        """
        Check that the Products table can be counted and read.

        Problems are reported in the result, never raised.
        """
        report = schemas.Diagnostics(store=self.location)
        try:
            report.product_count = await asyncio.to_thread(self._call, crud.count_products)
        except SQLAlchemyError as e:
            report.errors.append(f"Table 'Products' not found or not countable: {e}")
        try:
            await asyncio.to_thread(self._call, crud.get_first_product)
            report.readable = True
        except SQLAlchemyError as e:
            report.errors.append(f"Reading 'Products' failed: {e}")
        return report
