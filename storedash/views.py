"""
Views derived from the product snapshot.

Both functions are pure and cheap, so callers recompute them from the
current snapshot instead of caching.
"""
from typing import List, Union
from . import schemas


def compute_stats(products: List[schemas.Product]) -> schemas.Stats:
    """
    Count products by availability.

    Anything that is not exactly "Available", including a missing status,
    counts as unavailable.
    """
    total = len(products)
    available = sum(1 for p in products if p.is_available)
    return schemas.Stats(total=total, available=available, unavailable=total - available)


def filter_products(
    products: List[schemas.Product],
    active_filter: Union[schemas.ProductFilter, str] = schemas.ProductFilter.ALL,
) -> List[schemas.Product]:
    """
    Select the products matching a catalog filter, keeping their order.

    Args:
        products: Product snapshot
        active_filter: "All", "Available" or "Not Available"

    Returns:
        The input itself for "All", otherwise the matching products

    Raises:
        ValueError: If active_filter is not a known filter
    """
    active_filter = schemas.ProductFilter(active_filter)
    if active_filter == schemas.ProductFilter.ALL:
        return products
    return [p for p in products if p.status == active_filter.value]
