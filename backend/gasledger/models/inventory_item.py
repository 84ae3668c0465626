from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship, backref
from sqlalchemy.sql import func
from gasledger.db.base import Base


class InventoryItem(Base):
    """
    Authoritative stock record for gas and cylinder products, one per product.

    Gas uses `current_stock`; cylinders use `available_empty`/`available_full`.
    Counters are only ever changed through clamped updates and never go
    below zero.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_inventory_current_stock"),
        CheckConstraint("available_empty >= 0", name="ck_inventory_available_empty"),
        CheckConstraint("available_full >= 0", name="ck_inventory_available_full"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    category = Column(String(32), nullable=False, index=True)
    current_stock = Column(Integer, nullable=False, default=0)
    available_empty = Column(Integer, nullable=False, default=0)
    available_full = Column(Integer, nullable=False, default=0)
    cylinder_size = Column(String(16), nullable=True)
    gas_type = Column(String(64), nullable=True)
    last_updated_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", backref=backref("inventory_item", uselist=False))
