"""
Inventory mutation after a committed sale.

Each counter change is a single UPDATE on one row with the new value computed
in SQL and clamped at zero. Nothing here spans rows in one transaction; a
failure part-way leaves earlier updates in place.
"""
import logging

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gasledger.models.inventory_item import InventoryItem
from gasledger.models.product import CYLINDER, GAS, Product
from gasledger.models.sale import SaleItem

logger = logging.getLogger(__name__)


def _clamped(column, delta: int):
    new_value = column + delta
    return case((new_value < 0, 0), else_=new_value)


def find_inventory_item(db: Session, product_id: int) -> InventoryItem | None:
    return db.query(InventoryItem).filter(InventoryItem.product_id == product_id).first()


def get_or_create_inventory_item(db: Session, product: Product) -> InventoryItem:
    """Return the product's InventoryItem, seeding a missing one from Product.current_stock."""
    item = find_inventory_item(db, product.id)
    if item:
        return item
    item = InventoryItem(
        product_id=product.id,
        category=product.category,
        current_stock=max(product.current_stock or 0, 0),
        cylinder_size=product.cylinder_size,
    )
    db.add(item)
    try:
        db.commit()
    except IntegrityError:
        # Created concurrently by another request
        db.rollback()
        return find_inventory_item(db, product.id)
    db.refresh(item)
    logger.info(
        f"Created inventory record for {product.name} seeded with stock {item.current_stock}"
    )
    return item


def adjust_inventory(
    db: Session,
    product_id: int,
    current_stock: int = 0,
    available_full: int = 0,
    available_empty: int = 0,
) -> bool:
    """Apply signed deltas to one InventoryItem. Returns False when the product has none."""
    values = {}
    for name, delta in (
        ("current_stock", current_stock),
        ("available_full", available_full),
        ("available_empty", available_empty),
    ):
        if delta:
            values[name] = _clamped(getattr(InventoryItem, name), delta)
    if not values:
        return True
    values["last_updated_at"] = func.now()

    result = db.execute(
        update(InventoryItem)
        .where(InventoryItem.product_id == product_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if not result.rowcount:
        logger.warning(f"No inventory record for product {product_id}, stock update skipped")
        return False
    return True


def adjust_product_stock(db: Session, product_id: int, delta: int) -> None:
    """Legacy Product.current_stock mirror, floored at zero."""
    db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(current_stock=_clamped(Product.current_stock, delta))
        .execution_options(synchronize_session=False)
    )
    db.commit()


def apply_sale_item(
    db: Session,
    item: SaleItem,
    product: Product,
    cylinder: Product | None = None,
    gas: Product | None = None,
) -> None:
    """
    Apply one line item's stock movement.

    `cylinder` is the resolved cylinder for a gas sale; `gas` is the resolved
    gas product for a full-cylinder sale.
    """
    qty = item.quantity

    if product.category == GAS:
        logger.info(f"GAS SALE: Processing {qty} units of {product.name}")
        adjust_inventory(db, product.id, current_stock=-qty)
        if cylinder is not None:
            # Customer leaves with the gas; the cylinder comes back empty
            if adjust_inventory(db, cylinder.id, available_full=-qty, available_empty=qty):
                logger.info(f"Cylinder conversion: {cylinder.name} - {qty} moved from Full to Empty")
        adjust_product_stock(db, product.id, -qty)

    elif product.category == CYLINDER:
        if item.cylinder_status == "empty":
            adjust_inventory(db, product.id, available_empty=-qty)
            logger.info(f"Empty cylinder sale: {product.name} decreased by {qty}")
        elif item.cylinder_status == "full":
            # Customer keeps the cylinder, so nothing returns to the empty side
            adjust_inventory(db, product.id, available_full=-qty)
            logger.info(f"Full cylinder sale: {product.name} decreased by {qty}")
            if gas is not None:
                adjust_inventory(db, gas.id, current_stock=-qty)
                adjust_product_stock(db, gas.id, -qty)
                logger.info(f"Gas in full cylinder: {gas.name} decreased by {qty}")
            else:
                logger.warning(f"No gas product linked to full cylinder sale of {product.name}")
        else:
            adjust_product_stock(db, product.id, -qty)

    else:
        adjust_product_stock(db, product.id, -qty)
        logger.info(f"Updated {product.name} stock by -{qty}")


def safe_get_or_create_inventory_item(db: Session, product: Product) -> InventoryItem | None:
    try:
        return get_or_create_inventory_item(db, product)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Could not create inventory record for {product.name}")
        return None
