"""
Sale creation. Used by POST /api/sales.

Order of work:
1. Validate the request and load customer + products (nothing written)
2. Check stock for every item; one shortfall rejects the whole cart
3. Commit the Sale under a fresh invoice number, retrying on collision
4. Post-commit bookkeeping per item: linkage, inventory, daily rollup

Step 4 runs after the sale is committed. Each step has its own failure
boundary: errors are logged and audited, never raised, and never undo the
sale or skip the remaining steps.
"""
import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from gasledger.core.audit import AuditLog
from gasledger.core.config import settings
from gasledger.core.exceptions import (
    CustomerNotFound,
    InvoiceNumberExhausted,
    ProductNotFound,
    ValidationFailed,
)
from gasledger.models.customer import Customer
from gasledger.models.product import CYLINDER, GAS, Product
from gasledger.models.sale import CYLINDER_STATUSES, PAYMENT_METHODS, PAYMENT_STATUSES, Sale, SaleItem
from gasledger.schemas.sales import SaleCreate, SaleItemIn
from gasledger.services import daily_sales, inventory, invoice_numbers, linkage
from gasledger.services.stock import check_stock

logger = logging.getLogger(__name__)


def _sale_query(db: Session):
    return db.query(Sale).options(
        joinedload(Sale.customer),
        selectinload(Sale.items).joinedload(SaleItem.product),
    )


def list_sales(db: Session) -> List[Sale]:
    """All sales, newest first, with customer and products loaded."""
    return _sale_query(db).order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def get_sale(db: Session, sale_id: int) -> Optional[Sale]:
    return _sale_query(db).filter(Sale.id == sale_id).first()


def _validate(payload: SaleCreate) -> None:
    if not payload.customer or not payload.items or not payload.total_amount:
        raise ValidationFailed("Missing required fields")
    if payload.payment_method and payload.payment_method not in PAYMENT_METHODS:
        raise ValidationFailed(f"Invalid payment method: {payload.payment_method}")
    if payload.payment_status and payload.payment_status not in PAYMENT_STATUSES:
        raise ValidationFailed(f"Invalid payment status: {payload.payment_status}")
    for item in payload.items:
        if item.cylinder_status and item.cylinder_status not in CYLINDER_STATUSES:
            raise ValidationFailed(f"Invalid cylinder status: {item.cylinder_status}")
        if item.quantity < 1:
            raise ValidationFailed(f"Quantity must be at least 1 for product {item.product}")
        if item.price < 0:
            raise ValidationFailed(f"Price cannot be negative for product {item.product}")
        if item.total is not None and item.total < 0:
            raise ValidationFailed(f"Total cannot be negative for product {item.product}")


def _load_products(db: Session, items: List[SaleItemIn]) -> Dict[int, Product]:
    product_ids = {item.product for item in items}
    products = db.query(Product).filter(Product.id.in_(product_ids)).all()
    if len(products) != len(product_ids):
        missing = product_ids - {p.id for p in products}
        raise ProductNotFound(sorted(missing)[0])
    return {p.id: p for p in products}


def _known_partner_ids(db: Session, items: List[SaleItemIn]) -> Set[int]:
    """Caller-supplied cylinder/gas ids that name an existing product."""
    requested = {
        partner_id
        for item in items
        for partner_id in (item.cylinder_product_id, item.gas_product_id)
        if partner_id
    }
    if not requested:
        return set()
    known = {row[0] for row in db.query(Product.id).filter(Product.id.in_(requested))}
    for missing in sorted(requested - known):
        logger.warning(f"[Linkage] Ignoring unknown partner product {missing}, will match by name")
    return known


def _build_items(
    items: List[SaleItemIn],
    products: Dict[int, Product],
    known_partners: Set[int],
) -> List[SaleItem]:
    """
    Line items with category and cylinder size taken from the catalog.

    Partner ids not in `known_partners` are dropped so linkage falls back to
    name matching.
    """
    built = []
    for position, item in enumerate(items):
        product = products[item.product]
        category = product.category or item.category or GAS
        cylinder_size = (product.cylinder_size or item.cylinder_size) if category == CYLINDER else None
        price = Decimal(str(item.price or 0))
        total = Decimal(str(item.total)) if item.total is not None else price * item.quantity
        built.append(
            SaleItem(
                position=position,
                product_id=item.product,
                category=category,
                cylinder_size=cylinder_size,
                cylinder_status=item.cylinder_status,
                quantity=item.quantity,
                price=price,
                total=total,
                cylinder_product_id=item.cylinder_product_id if item.cylinder_product_id in known_partners else None,
                cylinder_name=item.cylinder_name,
                gas_product_id=item.gas_product_id if item.gas_product_id in known_partners else None,
            )
        )
    return built


def _is_invoice_collision(error: IntegrityError) -> bool:
    return "invoice_number" in str(error.orig)


def _persist(
    db: Session,
    payload: SaleCreate,
    products: Dict[int, Product],
    known_partners: Set[int],
) -> Sale:
    """Insert the sale, switching to a fallback invoice number after each collision."""
    max_attempts = settings.INVOICE_MAX_ATTEMPTS
    base_number = invoice_numbers.next_invoice_number(db)
    invoice_number = base_number
    last_error = None

    for attempt in range(1, max_attempts + 1):
        sale = Sale(
            invoice_number=invoice_number,
            customer_id=payload.customer,
            items=_build_items(payload.items, products, known_partners),
            total_amount=Decimal(str(payload.total_amount)),
            payment_method=payload.payment_method or "cash",
            payment_status=payload.payment_status or "cleared",
            received_amount=Decimal(str(payload.received_amount or 0)),
            notes=payload.notes or "",
            customer_signature=payload.customer_signature or "",
            delivery_charges=Decimal(str(payload.delivery_charges or 0)),
        )
        db.add(sale)
        try:
            db.commit()
            return sale
        except IntegrityError as e:
            db.rollback()
            if not _is_invoice_collision(e):
                raise
            last_error = e
            logger.warning(
                f"Duplicate invoice number {invoice_number}, generating new one (attempt {attempt})..."
            )
            invoice_number = invoice_numbers.fallback_invoice_number(base_number, attempt)

    raise InvoiceNumberExhausted(max_attempts, last_error)


def _guarded(step: str, sale: Sale, product_id: Optional[int], db: Session, fn: Callable, *args):
    """Run one bookkeeping step; log and audit failures instead of raising."""
    try:
        return fn(*args)
    except Exception as e:
        db.rollback()
        logger.exception(f"Post-sale {step} failed for sale {sale.invoice_number}, product {product_id}")
        AuditLog.log_side_effect_failure(step, sale.id, product_id, e)
        return None


def _resolve_linkage(db: Session, item: SaleItem, product: Product) -> tuple[Optional[Product], Optional[Product]]:
    """(cylinder, gas) partners for one item; stores the resolution on the item."""
    cylinder = gas = None
    if product.category == GAS:
        cylinder = linkage.resolve_cylinder_for_gas(db, product, item.cylinder_product_id)
        if cylinder is not None:
            item.cylinder_product_id = cylinder.id
            item.cylinder_name = item.cylinder_name or cylinder.name
    elif product.category == CYLINDER and item.cylinder_status == "full":
        gas = linkage.resolve_gas_for_cylinder(db, product, item.gas_product_id)
        if gas is not None:
            item.gas_product_id = gas.id
    db.commit()
    return cylinder, gas


def _after_commit(db: Session, sale: Sale, products: Dict[int, Product]) -> None:
    day = daily_sales.local_date_string()
    # Snapshot before the steps below commit and expire the session
    items = list(sale.items)

    for item in items:
        product = products[item.product_id]
        product_id = product.id

        partners = _guarded("linkage", sale, product_id, db, _resolve_linkage, db, item, product)
        cylinder, gas = partners if partners else (None, None)

        _guarded("inventory", sale, product_id, db, inventory.apply_sale_item, db, item, product, cylinder, gas)
        _guarded("daily_sales", sale, product_id, db, daily_sales.record_sale_item, db, day, item, product, cylinder)


def create_sale(db: Session, payload: SaleCreate) -> Sale:
    """
    Record a sale and apply its stock movements.

    Raises ValidationFailed, CustomerNotFound, ProductNotFound,
    InsufficientStock or InvoiceNumberExhausted before anything is committed.
    """
    _validate(payload)

    if db.get(Customer, payload.customer) is None:
        raise CustomerNotFound(payload.customer)

    products = _load_products(db, payload.items)
    check_stock(db, payload.items, products)

    known_partners = _known_partner_ids(db, payload.items)
    sale = _persist(db, payload, products, known_partners)
    logger.info(f"Sale {sale.invoice_number} recorded with {len(payload.items)} item(s)")
    AuditLog.log_action(
        "create", "sale", sale.id,
        changes={"invoice_number": sale.invoice_number, "total_amount": str(sale.total_amount)},
    )

    _after_commit(db, sale, products)
    return get_sale(db, sale.id)
