# models/tenant.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, Date, Text, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from .base import Base, OwnedMixin, TimestampMixin


class PaymentStatus(str, enum.Enum):
     """Rent payment standing of a tenant."""
     PAID = "paid"
     PENDING = "pending"
     OVERDUE = "overdue"


class Tenant(OwnedMixin, TimestampMixin, Base):
     """
     Tenant model - a person renting a property, with the lease period inline.
     """
     __tablename__ = "tenants"
     __table_args__ = (
          CheckConstraint("lease_end >= lease_start", name="ck_tenants_lease_period"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(
          Integer,
          ForeignKey("properties.id", ondelete="SET NULL"),
          nullable=True,
          index=True
     )

     # Personal info
     name = Column(String(100), nullable=False)
     email = Column(String(255), nullable=False)
     phone = Column(String(20), nullable=True)
     tax_id = Column(String(20), nullable=True)  # NIF when known

     # Lease
     rent = Column(Numeric(12, 2), nullable=False)
     lease_start = Column(Date, nullable=False)
     lease_end = Column(Date, nullable=False)
     payment_status = Column(
          Enum(
               PaymentStatus,
               name="tenant_payment_status",
               create_constraint=True,
               values_callable=lambda e: [m.value for m in e],
          ),
          default=PaymentStatus.PENDING,
          nullable=False,
     )
     notes = Column(Text, nullable=True)

     # Relationships
     property = relationship("Property", back_populates="tenants")
     invoices = relationship("Invoice", back_populates="tenant")

     def __repr__(self):
          return f"<Tenant(id={self.id}, name='{self.name}')>"

     def lease_covers(self, day) -> bool:
          """True when the lease is active on the given date."""
          return self.lease_start <= day <= self.lease_end
