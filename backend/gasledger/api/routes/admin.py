"""Admin maintenance endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gasledger.api.deps import get_db
from gasledger.core.audit import AuditLog
from gasledger.core.exceptions import BusinessError
from gasledger.schemas.stock import CounterInit
from gasledger.services.invoice_numbers import initialize_invoice_counter

router = APIRouter()


@router.post("/initialize-counter")
def initialize_counter(body: Optional[CounterInit] = None, db: Session = Depends(get_db)):
    """Seed this year's invoice counter; optionally store a new starting number."""
    starting_number = body.starting_number if body else None
    try:
        next_number = initialize_invoice_counter(db, starting_number)
    except Exception as e:
        db.rollback()
        raise BusinessError.server_error("Failed to initialize invoice counter", e)
    AuditLog.log_action(
        "initialize", "invoice_counter", "unified_invoice_counter",
        changes={"starting_number": starting_number, "next": next_number},
    )
    return {"success": True, "counter": next_number}
