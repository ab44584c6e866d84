"""
HTTP client for the product automation webhooks.

Each actor accepts the full product record as JSON and writes the change
to the store on its own. Success is a 2xx response.
"""
import logging
import os
from typing import Optional
import httpx
from .. import schemas
from ..errors import TransportError

logger = logging.getLogger(__name__)

CREATE_PRODUCT_WEBHOOK_URL = os.getenv("CREATE_PRODUCT_WEBHOOK_URL", "http://localhost:5678/webhook/create-product")
UPDATE_PRODUCT_WEBHOOK_URL = os.getenv("UPDATE_PRODUCT_WEBHOOK_URL", "http://localhost:5678/webhook/update-product-status")
DELETE_PRODUCT_WEBHOOK_URL = os.getenv("DELETE_PRODUCT_WEBHOOK_URL", "http://localhost:5678/webhook/delete-product")
TIMEOUT = float(os.getenv("ACTOR_TIMEOUT", "30"))  # seconds, 0 disables


class ActorClient:
    """
    Dispatches product commands to the webhook actors.

    Args:
        create_url: Create-product webhook
        update_status_url: Update-product-status webhook
        delete_url: Delete-product webhook
        timeout: Request timeout in seconds, 0 or None for no timeout
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        create_url: str = CREATE_PRODUCT_WEBHOOK_URL,
        update_status_url: str = UPDATE_PRODUCT_WEBHOOK_URL,
        delete_url: str = DELETE_PRODUCT_WEBHOOK_URL,
        timeout: Optional[float] = TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.create_url = create_url
        self.update_status_url = update_status_url
        self.delete_url = delete_url
        self.timeout = timeout or None
        self.transport = transport

    async def create_product(self, product: schemas.Product) -> None:
        await self._post(self.create_url, product, "create")

    async def update_product_status(self, product: schemas.Product) -> None:
        """Send the full record carrying the new status."""
        await self._post(self.update_status_url, product, "status update")

    async def delete_product(self, product: schemas.Product) -> None:
        await self._post(self.delete_url, product, "delete")

    async def _post(self, url: str, product: schemas.Product, action: str) -> None:
        """
        POST one product record to an actor.

        Raises:
            TransportError: On network failure, timeout or a non-2xx response
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    json=product.to_record(),
                    headers={"Content-Type": "application/json"}
                )
        except httpx.HTTPError as e:
            logger.error(f"Product {action} for {product.id} failed: {e}")
            raise TransportError(f"Product {action} failed: {e}") from e

        if not response.is_success:
            body = response.text
            logger.error(f"Product {action} for {product.id} rejected: HTTP {response.status_code} {body}")
            raise TransportError(
                f"Product {action} failed: {body or f'Error {response.status_code}'}",
                status_code=response.status_code,
                body=body or None,
            )
        logger.info(f"Product {action} for {product.id} accepted")
