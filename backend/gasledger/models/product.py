from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func
from gasledger.db.base import Base

GAS = "gas"
CYLINDER = "cylinder"


class Product(Base):
    """
    Catalog entry.

    `current_stock` is the legacy scalar: authoritative for categories other
    than gas/cylinder, a mirror of InventoryItem for gas, and the fallback for
    cylinder sales that carry no full/empty status.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    product_code = Column(String(64), unique=True, nullable=True)
    category = Column(String(32), nullable=False)  # gas, cylinder, or any other
    cylinder_size = Column(String(16), nullable=True)  # large, small
    cost_price = Column(Numeric(12, 2), nullable=False, default=0)
    least_price = Column(Numeric(12, 2), nullable=False, default=0)
    current_stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
