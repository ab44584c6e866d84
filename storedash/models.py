"""
SQLAlchemy ORM models for the hosted store.

Table and column names follow the store's existing schema, which is why
some of them are capitalized.
"""
from datetime import datetime
from sqlalchemy import BigInteger, Column, DateTime, JSON, Numeric, String, Text
from .database import Base


class Product(Base):
    """
    Product row in the catalog.

    Attributes:
        Product_id (int): Primary key, generated by the dashboard at creation time
        product_name (str): Display name
        Price (Decimal): Price magnitude, currency-agnostic
        currency (str): Currency tag (e.g. "USD")
        image_URL (str): Remote image URL or an inlined data URI
        status (str): "Available" or "Not Available"
    """
    __tablename__ = "Products"

    Product_id = Column(BigInteger, primary_key=True, autoincrement=False)
    product_name = Column(String, nullable=True)
    Price = Column(Numeric(12, 2), nullable=True)
    currency = Column(String, nullable=True, default="USD")
    image_URL = Column(Text, nullable=True)
    status = Column(String, nullable=True, default="Available")


class Order(Base):
    """
    Customer order, created outside the dashboard.

    Attributes:
        id (str): Primary key assigned by the store
        customer_name (str): Name of the customer
        created_at (datetime): Creation timestamp, used for ordering
        total_price (Decimal): Order total
        items (list): Line items with product_name, price and quantity (stored as JSON)
        status (str): Pending, Processing, Shipped, Delivered or Cancelled
    """
    __tablename__ = "Orders"

    id = Column(String, primary_key=True, index=True)
    customer_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    items = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default="Pending")
