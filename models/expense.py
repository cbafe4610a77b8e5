# models/expense.py
from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, OwnedMixin, TimestampMixin


class Expense(OwnedMixin, TimestampMixin, Base):
     """Expense model - money spent on a property (repairs, insurance, taxes...)."""
     __tablename__ = "expenses"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
     amount = Column(Numeric(12, 2), nullable=False)
     date = Column(Date, nullable=False, index=True)
     category = Column(String(100), nullable=False)
     description = Column(String(500), nullable=True)

     # Relationships
     property = relationship("Property", back_populates="expenses")

     def __repr__(self):
          return f"<Expense(id={self.id}, amount={self.amount}, category='{self.category}')>"
