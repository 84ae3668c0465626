from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func
from gasledger.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    serial_number = Column(String(32), unique=True, nullable=False, default="CU-0001")
    tr_number = Column(String(64), nullable=True)
    phone = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(512), nullable=True)
    total_debit = Column(Numeric(12, 2), default=0)
    total_credit = Column(Numeric(12, 2), default=0)
    balance = Column(Numeric(12, 2), default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
