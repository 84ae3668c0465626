"""Daily sales rollup read by the DSR and P&L pages."""
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gasledger.api.deps import get_db
from gasledger.core.exceptions import BusinessError
from gasledger.schemas.stock import DailySalesRead
from gasledger.services.daily_sales import list_daily_sales

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_daily_sales(
    day: date | None = Query(None, alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    try:
        rows = list_daily_sales(db, day.isoformat() if day else None)
    except Exception as e:
        raise BusinessError.server_error("Failed to fetch daily sales", e)
    logger.info(f"[daily-sales] Found {len(rows)} records for date: {day or 'all'}")
    return {
        "success": True,
        "data": [DailySalesRead.model_validate(r).model_dump(mode="json") for r in rows],
    }
