from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gasledger.db.base import Base


class DailySales(Base):
    """Per-day, per-product rollup used by DSR and P&L reports. Not authoritative stock."""
    __tablename__ = "daily_sales"
    __table_args__ = (UniqueConstraint("date", "product_id", name="uq_daily_sales_date_product"),)

    id = Column(Integer, primary_key=True, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    category = Column(String(32), nullable=False)
    cylinder_status = Column(String(16), nullable=True)

    gas_sales_quantity = Column(Integer, nullable=False, default=0)
    gas_sales_amount = Column(Numeric(12, 2), nullable=False, default=0)
    cylinder_sales_quantity = Column(Integer, nullable=False, default=0)
    cylinder_sales_amount = Column(Numeric(12, 2), nullable=False, default=0)
    full_cylinder_sales_quantity = Column(Integer, nullable=False, default=0)
    full_cylinder_sales_amount = Column(Numeric(12, 2), nullable=False, default=0)
    empty_cylinder_sales_quantity = Column(Integer, nullable=False, default=0)
    empty_cylinder_sales_amount = Column(Numeric(12, 2), nullable=False, default=0)
    cylinder_refills_quantity = Column(Integer, nullable=False, default=0)
    transfer_quantity = Column(Integer, nullable=False, default=0)
    transfer_amount = Column(Numeric(12, 2), nullable=False, default=0)
    received_back_quantity = Column(Integer, nullable=False, default=0)
    received_back_amount = Column(Numeric(12, 2), nullable=False, default=0)

    # Gas rows: which cylinder the gas went out in
    cylinder_product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    cylinder_name = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", foreign_keys=[product_id])
