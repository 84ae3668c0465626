"""
Sale with its owned line items. Items have no lifecycle of their own and are
removed with the sale.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gasledger.db.base import Base

PAYMENT_METHODS = ("cash", "card", "bank_transfer", "credit", "debit", "delivery_note")
PAYMENT_STATUSES = ("cleared", "pending", "overdue")
CYLINDER_STATUSES = ("empty", "full", "full_to_empty")


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(32), unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(32), nullable=False, default="cash")
    payment_status = Column(String(32), nullable=False, default="cleared", index=True)
    received_amount = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")
    customer_signature = Column(Text, nullable=False, default="")
    rc_no = Column(String(32), nullable=False, default="")
    delivery_charges = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    customer = relationship("Customer", backref="sales")
    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.position",
    )


class SaleItem(Base):
    __tablename__ = "sale_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_sale_item_quantity"),
        CheckConstraint("price >= 0", name="ck_sale_item_price"),
        CheckConstraint("total >= 0", name="ck_sale_item_total"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    category = Column(String(32), nullable=False, default="gas")  # snapshot at sale time
    cylinder_size = Column(String(16), nullable=True)
    cylinder_status = Column(String(16), nullable=True)  # empty, full, full_to_empty
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    # Gas sales: the cylinder the gas went out in
    cylinder_product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    cylinder_name = Column(String(255), nullable=True)
    # Cylinder sales: the gas inside
    gas_product_id = Column(Integer, ForeignKey("products.id"), nullable=True)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product", foreign_keys=[product_id])
