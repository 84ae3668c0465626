"""Stock availability check run before a sale is recorded."""
import logging
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from gasledger.core.exceptions import InsufficientStock, ProductNotFound
from gasledger.models.product import CYLINDER, GAS, Product
from gasledger.services.inventory import find_inventory_item, safe_get_or_create_inventory_item

logger = logging.getLogger(__name__)


def available_stock(db: Session, product: Product, cylinder_status: str | None) -> tuple[int, str]:
    """
    Quantity available for one line item and the label used in error messages.

    Cylinders read the full/empty counter matching the requested status; gas
    reads its InventoryItem (created on the fly when missing); everything else
    reads Product.current_stock.
    """
    if product.category == CYLINDER:
        inventory_item = find_inventory_item(db, product.id)
        if cylinder_status == "empty":
            return (inventory_item.available_empty if inventory_item else 0), "Empty Cylinders"
        if cylinder_status == "full":
            return (inventory_item.available_full if inventory_item else 0), "Full Cylinders"
        return product.current_stock or 0, "Cylinders"

    if product.category == GAS:
        inventory_item = safe_get_or_create_inventory_item(db, product)
        if inventory_item is None:
            return product.current_stock or 0, "Gas"
        return inventory_item.current_stock, "Gas"

    return product.current_stock or 0, "Stock"


def check_stock(db: Session, items: Iterable, products: Dict[int, Product]) -> None:
    """
    Reject the whole cart if any item asks for more than is available.

    Raises ProductNotFound or InsufficientStock; nothing is written except a
    lazily created gas InventoryItem.

    Lines are checked one at a time against current stock, not summed per
    product. Two lines of the same product can each pass and together
    exceed stock; the later decrements then clamp at zero.
    """
    for item in items:
        product = products.get(item.product)
        if product is None:
            raise ProductNotFound(item.product)

        available, stock_type = available_stock(db, product, item.cylinder_status)
        logger.info(
            f"Stock check: {product.name} ({product.category}, status={item.cylinder_status}) "
            f"available={available} required={item.quantity}"
        )
        if available < item.quantity:
            raise InsufficientStock(product.name, stock_type, available, item.quantity)
