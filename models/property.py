# models/property.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, Text, Enum
from sqlalchemy.orm import relationship
from .base import Base, OwnedMixin, TimestampMixin


class PropertyStatus(str, enum.Enum):
     """Occupancy status of a property."""
     OCCUPIED = "occupied"
     VACANT = "vacant"
     MAINTENANCE = "maintenance"


class Property(OwnedMixin, TimestampMixin, Base):
     """
     Property model - a rentable unit (apartment, house, ...) owned by a user.
     """
     __tablename__ = "properties"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(100), nullable=False)
     address = Column(String(200), nullable=False)
     property_type = Column(String(50), default="apartment", nullable=False)
     rent = Column(Numeric(12, 2), nullable=False, default=0)
     status = Column(
          Enum(
               PropertyStatus,
               name="property_status",
               create_constraint=True,
               values_callable=lambda e: [m.value for m in e],
          ),
          default=PropertyStatus.VACANT,
          nullable=False,
     )
     description = Column(Text, nullable=True)

     # Relationships
     tenants = relationship("Tenant", back_populates="property")
     expenses = relationship("Expense", back_populates="property", cascade="all, delete-orphan")

     def __repr__(self):
          return f"<Property(id={self.id}, name='{self.name}', status='{self.status.value}')>"
