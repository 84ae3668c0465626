"""Employee stock assignment transitions."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gasledger.api.deps import get_db
from gasledger.core.exceptions import (
    AssignmentNotFound,
    BusinessError,
    InsufficientStock,
    ProductNotFound,
)
from gasledger.schemas.stock import StockAssignmentRead
from gasledger.services import stock_assignments

router = APIRouter()


@router.put("/{assignment_id}/reject")
def reject_assignment(assignment_id: int, db: Session = Depends(get_db)):
    """Employee declines the stock. Product stock is not touched."""
    try:
        assignment = stock_assignments.reject_assignment(db, assignment_id)
    except AssignmentNotFound:
        raise BusinessError.not_found("Assignment not found")
    except Exception as e:
        db.rollback()
        raise BusinessError.server_error("Failed to reject assignment", e)
    return StockAssignmentRead.model_validate(assignment).model_dump(mode="json")


@router.put("/{assignment_id}/receive")
def receive_assignment(assignment_id: int, db: Session = Depends(get_db)):
    """Employee accepts the stock; its quantity leaves Product.current_stock."""
    try:
        assignment = stock_assignments.receive_assignment(db, assignment_id)
    except AssignmentNotFound:
        raise BusinessError.not_found("Assignment not found")
    except ProductNotFound as e:
        raise BusinessError.not_found(str(e))
    except InsufficientStock as e:
        raise BusinessError.bad_request(f"Insufficient stock. Available: {e.available}, Requested: {e.required}")
    except Exception as e:
        db.rollback()
        raise BusinessError.server_error("Failed to update assignment", e)
    return StockAssignmentRead.model_validate(assignment).model_dump(mode="json")
