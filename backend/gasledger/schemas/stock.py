from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class UserBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class StockAssignmentRead(BaseModel):
    id: int
    employee: UserBrief
    assigned_by: UserBrief
    product_id: int
    quantity: int
    remaining_quantity: Optional[int] = None
    status: str
    assigned_date: Optional[datetime] = None
    received_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    notes: Optional[str] = None
    least_price: Decimal
    category: Optional[str] = None
    cylinder_status: Optional[str] = None
    display_category: Optional[str] = None

    class Config:
        from_attributes = True


class DailySalesRead(BaseModel):
    id: int
    date: str
    product_id: int
    product_name: str
    category: str
    cylinder_status: Optional[str] = None
    gas_sales_quantity: int
    gas_sales_amount: Decimal
    cylinder_sales_quantity: int
    cylinder_sales_amount: Decimal
    full_cylinder_sales_quantity: int
    full_cylinder_sales_amount: Decimal
    empty_cylinder_sales_quantity: int
    empty_cylinder_sales_amount: Decimal
    cylinder_refills_quantity: int
    transfer_quantity: int
    transfer_amount: Decimal
    received_back_quantity: int
    received_back_amount: Decimal
    cylinder_product_id: Optional[int] = None
    cylinder_name: Optional[str] = None

    class Config:
        from_attributes = True


class CounterInit(BaseModel):
    starting_number: Optional[int] = Field(None, alias="startingNumber", ge=1)

    class Config:
        populate_by_name = True
