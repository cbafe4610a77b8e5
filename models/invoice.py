# models/invoice.py
import enum
from datetime import date
from typing import Optional

from sqlalchemy import Column, Integer, String, Numeric, Date, Text, ForeignKey, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, OwnedMixin, TimestampMixin


class InvoiceStatus(str, enum.Enum):
     """Enumeration for invoice payment status."""
     PENDING = "pending"
     PAID = "paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


# Allowed status transitions; PAID and CANCELLED are terminal.
INVOICE_TRANSITIONS = {
     InvoiceStatus.PENDING: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED},
     InvoiceStatus.OVERDUE: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
     InvoiceStatus.PAID: set(),
     InvoiceStatus.CANCELLED: set(),
}


class Invoice(OwnedMixin, TimestampMixin, Base):
     """
     Invoice model - billing records for tenants.

     Line items are stored as a JSON list of
     {"description", "quantity", "unit_price", "total"} with amounts kept as
     strings so they round-trip as Decimal. `details` holds the remaining
     metadata (late fee, notes, payment method / reference).
     """
     __tablename__ = "invoices"
     __table_args__ = (
          UniqueConstraint("user_id", "number", name="uq_invoices_user_number"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     number = Column(String(30), nullable=False, index=True)

     # Foreign keys
     tenant_id = Column(
          Integer,
          ForeignKey("tenants.id", ondelete="SET NULL"),
          nullable=True,
          index=True
     )
     property_id = Column(
          Integer,
          ForeignKey("properties.id", ondelete="SET NULL"),
          nullable=True,
          index=True
     )

     # Invoice details
     amount = Column(Numeric(12, 2), nullable=False)
     issue_date = Column(Date, nullable=False, index=True)
     due_date = Column(Date, nullable=False, index=True)
     paid_date = Column(Date, nullable=True)
     status = Column(
          Enum(
               InvoiceStatus,
               name="invoice_status",
               create_constraint=True,
               values_callable=lambda e: [m.value for m in e],
          ),
          default=InvoiceStatus.PENDING,
          nullable=False,
          index=True
     )
     description = Column(Text, nullable=True)
     line_items = Column(JSON, nullable=False, default=list)
     details = Column("metadata", JSON, nullable=False, default=dict)

     # Relationships
     tenant = relationship("Tenant", back_populates="invoices")
     property = relationship("Property")

     def __repr__(self):
          return f"<Invoice(id={self.id}, number='{self.number}', amount={self.amount}, status='{self.status.value}')>"

     def can_transition_to(self, new_status: InvoiceStatus) -> bool:
          return new_status in INVOICE_TRANSITIONS[self.status]

     def mark_as_paid(self, paid_date: Optional[date] = None) -> None:
          """Mark the invoice as paid."""
          self.status = InvoiceStatus.PAID
          self.paid_date = paid_date or date.today()

     def mark_as_overdue(self) -> None:
          """Mark the invoice as overdue."""
          self.status = InvoiceStatus.OVERDUE

     def cancel(self) -> None:
          self.status = InvoiceStatus.CANCELLED
