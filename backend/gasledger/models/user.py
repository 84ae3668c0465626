from sqlalchemy import Column, Integer, String
from gasledger.db.base import Base


class User(Base):
    """Admin or employee. Referenced by stock assignments and notifications."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(32), nullable=False, default="employee")  # admin | employee
