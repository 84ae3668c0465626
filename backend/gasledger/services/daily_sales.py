"""Per-day, per-product sales rollup. Used by DSR and P&L reports."""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gasledger.models.daily_sales import DailySales
from gasledger.models.product import CYLINDER, GAS, Product
from gasledger.models.sale import SaleItem

logger = logging.getLogger(__name__)


def local_date_string(value: Optional[datetime] = None) -> str:
    """YYYY-MM-DD in server local time."""
    return (value or datetime.now()).date().isoformat()


def upsert_increment(
    db: Session,
    day: str,
    product: Product,
    increments: Dict[str, int | Decimal],
    fields: Optional[Dict[str, object]] = None,
) -> None:
    """
    Add `increments` to the (day, product) row, creating it when missing.

    Counters are incremented in SQL, so repeated calls accumulate and never
    overwrite. `fields` are plain values set on every call.
    """
    fields = dict(fields or {})
    fields.setdefault("product_name", product.name)
    fields.setdefault("category", product.category)

    def _update() -> int:
        values = {name: getattr(DailySales, name) + amount for name, amount in increments.items()}
        values.update(fields)
        result = db.execute(
            update(DailySales)
            .where(DailySales.date == day, DailySales.product_id == product.id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    if _update():
        db.commit()
        return

    db.add(DailySales(date=day, product_id=product.id, **fields, **increments))
    try:
        db.commit()
    except IntegrityError:
        # Row inserted concurrently; fall back to incrementing it
        db.rollback()
        _update()
        db.commit()


def record_sale_item(
    db: Session,
    day: str,
    item: SaleItem,
    product: Product,
    cylinder: Optional[Product] = None,
) -> None:
    """Add one line item to the daily rollup of its product."""
    qty = item.quantity
    amount = Decimal(str(item.total if item.total is not None else (item.price or 0) * qty))

    if product.category == GAS:
        upsert_increment(db, day, product, {"gas_sales_quantity": qty, "gas_sales_amount": amount})
        logger.info(f"Daily sales: gas sale tracked - {product.name}: {qty} units, {amount}")
        if cylinder is not None:
            # Full cylinder handed over with the gas. Not a cylinder sale, so
            # the combined cylinder counters and amounts stay untouched.
            upsert_increment(
                db, day, product,
                {"full_cylinder_sales_quantity": qty},
                {"cylinder_product_id": cylinder.id, "cylinder_name": cylinder.name},
            )
        return

    if product.category == CYLINDER:
        if item.cylinder_status == "full":
            increments = {
                "full_cylinder_sales_quantity": qty,
                "full_cylinder_sales_amount": amount,
                "cylinder_sales_quantity": qty,
                "cylinder_sales_amount": amount,
            }
            status = "full"
        else:
            increments = {
                "empty_cylinder_sales_quantity": qty,
                "empty_cylinder_sales_amount": amount,
                "cylinder_sales_quantity": qty,
                "cylinder_sales_amount": amount,
            }
            status = item.cylinder_status or "empty"
        upsert_increment(db, day, product, increments, {"cylinder_status": status})
        logger.info(f"Daily sales: {status} cylinder sale tracked - {product.name}: {qty} units, {amount}")
        return

    logger.debug(f"Daily sales: no counters for category '{product.category}' ({product.name})")


def list_daily_sales(db: Session, day: Optional[str] = None) -> List[DailySales]:
    q = db.query(DailySales)
    if day:
        q = q.filter(DailySales.date == day)
    return q.order_by(DailySales.date.desc(), DailySales.product_name).all()
