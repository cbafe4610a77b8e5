# models/receipt.py
import enum
from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Enum
from sqlalchemy.orm import relationship
from .base import Base, OwnedMixin, TimestampMixin


class ReceiptType(str, enum.Enum):
     RENT = "rent"
     DEPOSIT = "deposit"
     MAINTENANCE = "maintenance"
     OTHER = "other"


class ReceiptStatus(str, enum.Enum):
     PAID = "paid"
     PENDING = "pending"


class Receipt(OwnedMixin, TimestampMixin, Base):
     """
     Receipt model - money received from a tenant for a property.
     Paid receipts are the income side of the financial reports.
     """
     __tablename__ = "receipts"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id", ondelete="NO ACTION"), nullable=False, index=True)
     invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)

     amount = Column(Numeric(12, 2), nullable=False)
     date = Column(Date, nullable=False, index=True)
     type = Column(
          Enum(ReceiptType, name="receipt_type", create_constraint=True,
               values_callable=lambda e: [m.value for m in e]),
          default=ReceiptType.RENT,
          nullable=False,
     )
     status = Column(
          Enum(ReceiptStatus, name="receipt_status", create_constraint=True,
               values_callable=lambda e: [m.value for m in e]),
          default=ReceiptStatus.PAID,
          nullable=False,
     )
     description = Column(String(500), nullable=True)

     # Relationships
     tenant = relationship("Tenant")
     property = relationship("Property")

     def __repr__(self):
          return f"<Receipt(id={self.id}, amount={self.amount}, date={self.date}, type='{self.type.value}')>"
