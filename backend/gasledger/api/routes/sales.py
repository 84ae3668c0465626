"""Sales: list and create. Stock checks and bookkeeping live in services.sales."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gasledger.api.deps import get_db
from gasledger.core.exceptions import (
    BusinessError,
    CustomerNotFound,
    InsufficientStock,
    ProductNotFound,
    ValidationFailed,
)
from gasledger.schemas.sales import SaleCreate, SaleRead
from gasledger.services import sales as sales_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize(sale) -> dict:
    return SaleRead.model_validate(sale).model_dump(mode="json")


@router.get("")
def list_sales(db: Session = Depends(get_db)):
    """All sales, newest first, with customer and product fields."""
    try:
        sales = sales_service.list_sales(db)
    except Exception as e:
        raise BusinessError.server_error("Failed to fetch sales", e)
    return {"data": [_serialize(s) for s in sales]}


@router.get("/{sale_id}")
def get_sale(sale_id: int, db: Session = Depends(get_db)):
    sale = sales_service.get_sale(db, sale_id)
    if sale is None:
        raise BusinessError.not_found("Sale not found")
    return {"data": _serialize(sale)}


@router.post("")
def create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    """
    Create a sale.

    400: missing fields or insufficient stock (message names product and shortfall)
    404: unknown customer or product
    500: anything else, with `details`
    """
    try:
        sale = sales_service.create_sale(db, payload)
    except (ValidationFailed, InsufficientStock) as e:
        raise BusinessError.bad_request(str(e))
    except (CustomerNotFound, ProductNotFound) as e:
        raise BusinessError.not_found(str(e))
    except Exception as e:
        db.rollback()
        raise BusinessError.server_error("Failed to create sale", e)

    return {"data": _serialize(sale), "message": "Sale created successfully"}
