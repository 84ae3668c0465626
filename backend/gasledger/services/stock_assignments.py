"""Employee stock assignment transitions. Product stock moves on receipt only."""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session, joinedload

from gasledger.core.audit import AuditLog
from gasledger.core.exceptions import AssignmentNotFound, InsufficientStock, ProductNotFound
from gasledger.models.notification import Notification
from gasledger.models.stock_assignment import StockAssignment
from gasledger.services.inventory import adjust_product_stock

logger = logging.getLogger(__name__)


def _load(db: Session, assignment_id: int) -> StockAssignment:
    assignment = (
        db.query(StockAssignment)
        .options(
            joinedload(StockAssignment.employee),
            joinedload(StockAssignment.assigned_by),
            joinedload(StockAssignment.product),
        )
        .filter(StockAssignment.id == assignment_id)
        .first()
    )
    if assignment is None:
        raise AssignmentNotFound(assignment_id)
    return assignment


def _notify_assigner(db: Session, assignment: StockAssignment, kind: str, title: str, verb: str) -> None:
    """Best-effort notification to the admin who assigned the stock."""
    try:
        db.add(
            Notification(
                recipient_id=assignment.assigned_by_id,
                sender_id=assignment.employee_id,
                type=kind,
                title=title,
                message=f"{assignment.employee.name} has {verb} the assigned stock.",
                related_id=assignment.id,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Notification '{kind}' for assignment {assignment.id} failed")


def reject_assignment(db: Session, assignment_id: int) -> StockAssignment:
    """Mark an assignment rejected. Product stock is left untouched."""
    assignment = _load(db, assignment_id)

    assignment.status = "rejected"
    assignment.rejected_date = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"Stock assignment {assignment_id} rejected by employee {assignment.employee_id}")
    AuditLog.log_action("reject", "stock_assignment", assignment_id, user_id=assignment.employee_id)

    _notify_assigner(db, assignment, "stock_rejected", "Stock Assignment Rejected", "rejected")
    return _load(db, assignment_id)


def receive_assignment(db: Session, assignment_id: int) -> StockAssignment:
    """Mark an assignment received and deduct its quantity from Product.current_stock."""
    assignment = _load(db, assignment_id)
    product = assignment.product
    if product is None:
        raise ProductNotFound(assignment.product_id, "Product not found for assignment")

    qty = assignment.quantity or 0
    available = product.current_stock or 0
    if qty > available:
        raise InsufficientStock(product.name, "Stock", available, qty)

    adjust_product_stock(db, product.id, -qty)

    assignment = _load(db, assignment_id)
    assignment.status = "received"
    assignment.received_date = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"Stock assignment {assignment_id} received: {product.name} -{qty}")
    AuditLog.log_action(
        "receive", "stock_assignment", assignment_id,
        user_id=assignment.employee_id,
        changes={"product_id": product.id, "quantity": qty},
    )

    _notify_assigner(db, assignment, "stock_received", "Stock Received", "received")
    return _load(db, assignment_id)
