"""
Pydantic schemas for the dashboard snapshots, commands and views.

Product fields carry aliases matching the store's column names so that the
same model validates ORM rows and serializes webhook payloads.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, Field


class ProductStatus(str, Enum):
    """Persisted product availability."""
    AVAILABLE = "Available"
    NOT_AVAILABLE = "Not Available"


class OrderStatus(str, Enum):
    """Order workflow status. Any status may follow any other."""
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"


class ProductFilter(str, Enum):
    """Catalog view filter."""
    ALL = "All"
    AVAILABLE = "Available"
    NOT_AVAILABLE = "Not Available"


class CommandState(str, Enum):
    """
    States of a single mutating command.

    IDLE -> LOCKING -> IN_FLIGHT -> SUCCEEDED -> RECONCILING -> IDLE, or
    IN_FLIGHT -> FAILED -> IDLE. REFUSED is reported when LOCKING finds the
    entity already busy; no external call is made in that case.
    """
    IDLE = "Idle"
    LOCKING = "Locking"
    IN_FLIGHT = "InFlight"
    SUCCEEDED = "Succeeded"
    RECONCILING = "Reconciling"
    FAILED = "Failed"
    REFUSED = "Refused"


class Product(BaseModel):
    """
    Product record as read from the store.

    Attributes:
        id (int): Product identifier (column Product_id)
        name (str): Display name (column product_name)
        price (Decimal): Price magnitude (column Price)
        currency (str): Currency tag
        image (str): Image URL or data URI (column image_URL)
        status (str): "Available" or "Not Available"; may be missing on malformed rows
    """
    id: int = Field(..., alias="Product_id")
    name: Optional[str] = Field(None, alias="product_name")
    price: Optional[Decimal] = Field(None, alias="Price")
    currency: Optional[str] = None
    image: Optional[str] = Field(None, alias="image_URL")
    status: Optional[str] = None

    class Config:
        from_attributes = True
        populate_by_name = True

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.AVAILABLE.value

    @property
    def status_label(self) -> str:
        return self.status or "Unknown"

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed Asset"

    def to_record(self) -> dict:
        """Serialize with the store's column names, as the webhooks expect."""
        return self.model_dump(mode="json", by_alias=True)


class ProductCreate(BaseModel):
    """Schema for a product submitted from the creation form."""
    name: str = Field(..., alias="product_name")
    price: Decimal = Field(..., alias="Price", ge=0)
    currency: Currency = Currency.USD
    image: Optional[str] = Field(None, alias="image_URL")
    status: ProductStatus = ProductStatus.AVAILABLE

    class Config:
        populate_by_name = True

    def to_product(self, product_id: int) -> Product:
        return Product(
            id=product_id,
            name=self.name,
            price=self.price,
            currency=self.currency.value,
            image=self.image,
            status=self.status.value,
        )


class OrderItem(BaseModel):
    """Line item copied into the order at purchase time."""
    product_name: str
    price: Decimal
    quantity: int = Field(..., gt=0)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """
    Customer order as read from the store.

    Attributes:
        id (str): Order identifier assigned by the store
        customer_name (str): Customer display name
        created_at (datetime): When the order was placed
        total_price (Decimal): Order total
        items (List[OrderItem]): Line items; None when the row has no items field
        status (str): Current workflow status
    """
    id: str
    customer_name: Optional[str] = None
    created_at: datetime
    total_price: Decimal
    items: Optional[List[OrderItem]] = None
    status: str

    class Config:
        from_attributes = True

    @property
    def items_missing(self) -> bool:
        return self.items is None


class FilterUpdate(BaseModel):
    active_filter: ProductFilter


class ProductStatusUpdate(BaseModel):
    status: ProductStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class Snapshot(BaseModel):
    """Products and Orders loaded together."""
    products: List[Product] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)


class Stats(BaseModel):
    total: int = 0
    available: int = 0
    unavailable: int = 0


class BusyState(BaseModel):
    """Global busy signal: whether some command is in flight, and what it is doing."""
    active: bool = False
    message: str = ""


class CommandOutcome(BaseModel):
    """
    Result of one mutating command.

    Attributes:
        command (str): Command name (e.g. "delete_product")
        entity_id (int | str): Target entity, None if validation failed before an id existed
        state (CommandState): Succeeded, Failed or Refused
        error (str): Error text for failed commands
        error_type (str): Error class name for failed commands
    """
    command: str
    entity_id: Optional[Union[int, str]] = None
    state: CommandState
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CommandState.SUCCEEDED


class DashboardState(BaseModel):
    """Everything the presentation layer needs besides the entity lists."""
    stats: Stats
    busy: BusyState
    store_error: Optional[str] = None
    operation_error: Optional[str] = None
    products_loading: bool = False
    orders_loading: bool = False
    active_filter: ProductFilter = ProductFilter.ALL
    selected_order_id: Optional[str] = None
    order_count: int = 0


class Diagnostics(BaseModel):
    """
    Store connectivity report.

    Attributes:
        store (str): Store location with credentials hidden
        product_count (int): Row count of the Products table, None if it could not be counted
        readable (bool): Whether a Products row could be read
        errors (List[str]): Problems found while checking
    """
    store: str
    product_count: Optional[int] = None
    readable: bool = False
    errors: List[str] = Field(default_factory=list)
