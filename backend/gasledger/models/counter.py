from sqlalchemy import Column, Integer, String, UniqueConstraint
from gasledger.db.base import Base


class Counter(Base):
    """Named sequence per year. Rows: unified_invoice_counter, invoice_start."""
    __tablename__ = "counters"
    __table_args__ = (UniqueConstraint("key", "year", name="uq_counter_key_year"),)

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(64), nullable=False)
    year = Column(Integer, nullable=False)
    seq = Column(Integer, nullable=False, default=0)
