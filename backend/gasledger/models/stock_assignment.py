"""
StockAssignment: admin hands stock to an employee.
Status flow: assigned -> received | rejected; received -> returned.
Product stock is deducted on receipt only, never on assignment or rejection.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gasledger.db.base import Base


class StockAssignment(Base):
    __tablename__ = "stock_assignments"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    remaining_quantity = Column(Integer, nullable=True)
    assigned_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(16), nullable=False, default="assigned")  # assigned | received | returned | rejected
    assigned_date = Column(DateTime(timezone=True), server_default=func.now())
    received_date = Column(DateTime(timezone=True), nullable=True)
    returned_date = Column(DateTime(timezone=True), nullable=True)
    rejected_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    least_price = Column(Numeric(12, 2), nullable=False, default=0)
    category = Column(String(32), nullable=True)
    cylinder_status = Column(String(16), nullable=True)
    display_category = Column(String(32), nullable=True)  # Gas, Full Cylinder, Empty Cylinder
    gas_product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    cylinder_product_id = Column(Integer, ForeignKey("products.id"), nullable=True)

    employee = relationship("User", foreign_keys=[employee_id])
    assigned_by = relationship("User", foreign_keys=[assigned_by_id])
    product = relationship("Product", foreign_keys=[product_id])
