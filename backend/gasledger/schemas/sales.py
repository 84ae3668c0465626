from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class SaleItemIn(BaseModel):
    """Cart line as sent by the checkout page (camelCase keys accepted)."""
    product: int
    quantity: int
    price: float = 0
    total: Optional[float] = None
    category: Optional[str] = None
    cylinder_size: Optional[str] = Field(None, alias="cylinderSize")
    cylinder_status: Optional[str] = Field(None, alias="cylinderStatus")
    cylinder_product_id: Optional[int] = Field(None, alias="cylinderProductId")
    cylinder_name: Optional[str] = Field(None, alias="cylinderName")
    gas_product_id: Optional[int] = Field(None, alias="gasProductId")

    class Config:
        populate_by_name = True


class SaleCreate(BaseModel):
    # Required fields are checked by the service so a missing one is a 400,
    # not a schema error.
    customer: Optional[int] = None
    items: Optional[List[SaleItemIn]] = None
    total_amount: Optional[float] = Field(None, alias="totalAmount")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    payment_status: Optional[str] = Field(None, alias="paymentStatus")
    received_amount: Optional[float] = Field(None, alias="receivedAmount")
    notes: Optional[str] = None
    customer_signature: Optional[str] = Field(None, alias="customerSignature")
    delivery_charges: Optional[float] = Field(None, alias="deliveryCharges")

    class Config:
        populate_by_name = True


class CustomerBrief(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    tr_number: Optional[str] = None

    class Config:
        from_attributes = True


class ProductBrief(BaseModel):
    id: int
    name: str
    category: str
    cylinder_size: Optional[str] = None
    cost_price: Decimal
    least_price: Decimal

    class Config:
        from_attributes = True


class SaleItemRead(BaseModel):
    id: int
    product: ProductBrief
    category: str
    cylinder_size: Optional[str] = None
    cylinder_status: Optional[str] = None
    quantity: int
    price: Decimal
    total: Decimal
    cylinder_product_id: Optional[int] = None
    cylinder_name: Optional[str] = None
    gas_product_id: Optional[int] = None

    class Config:
        from_attributes = True


class SaleRead(BaseModel):
    id: int
    invoice_number: str
    customer: CustomerBrief
    items: List[SaleItemRead]
    total_amount: Decimal
    payment_method: str
    payment_status: str
    received_amount: Decimal
    notes: str
    delivery_charges: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
