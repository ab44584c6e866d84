"""
Store queries for the dashboard.

Reads always return whole collections. The only direct write is the
order status update; products change only through the webhook actors.
"""
from typing import Any, List, Optional
from sqlalchemy.orm import Session
from . import models

COLLECTIONS = {
    "Products": models.Product,
    "Orders": models.Order,
}


def list_rows(db: Session, collection: str, order_by: Optional[str] = None) -> List[Any]:
    """
    Retrieve every row of a collection.

    Args:
        db: Database session
        collection: Collection name ("Products" or "Orders")
        order_by: Optional column to order by, descending

    Returns:
        List of ORM rows

    Raises:
        KeyError: If the collection or the order column is unknown
    """
    model = COLLECTIONS[collection]
    query = db.query(model)
    if order_by is not None:
        column = model.__table__.columns[order_by]
        query = query.order_by(column.desc())
    return query.all()


def get_products(db: Session) -> List[models.Product]:
    """Products, newest id first."""
    return list_rows(db, "Products", order_by="Product_id")


def get_orders(db: Session) -> List[models.Order]:
    """Orders, most recent first."""
    return list_rows(db, "Orders", order_by="created_at")


def count_products(db: Session) -> int:
    return db.query(models.Product).count()


def get_first_product(db: Session) -> Optional[models.Product]:
    return db.query(models.Product).first()


def update_order_status(db: Session, order_id: str, status: str) -> int:
    """
    Set the status of the order matching order_id.

    Args:
        db: Database session
        order_id: ID of the order to update
        status: New status value

    Returns:
        Number of rows matched (0 when the order does not exist)
    """
    matched = (
        db.query(models.Order)
        .filter(models.Order.id == order_id)
        .update({models.Order.status: status}, synchronize_session=False)
    )
    db.commit()
    return matched
