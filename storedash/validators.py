"""
Checks run before a product command is dispatched.
"""
import secrets
from typing import Iterable, Tuple
from . import schemas

PRODUCT_ID_BITS = 63  # fits the store's BIGINT column


def validate_new_product(product: schemas.ProductCreate) -> Tuple[bool, str]:
    """
    Validate a product before creation.

    Args:
        product: Product submitted from the creation form

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not product.image:
        return False, "Product image is required"

    if not product.name.strip():
        return False, "Product name is required"

    return True, ""


def generate_product_id(existing_ids: Iterable[int]) -> int:
    """
    Draw a random positive 63-bit product id not present in existing_ids.

    Ids come from a CSPRNG, so a clash with a row outside the loaded
    snapshot is vanishingly unlikely.
    """
    taken = set(existing_ids)
    while True:
        candidate = secrets.randbits(PRODUCT_ID_BITS)
        if candidate and candidate not in taken:
            return candidate
