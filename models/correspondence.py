# models/correspondence.py
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from .base import Base, OwnedMixin, TimestampMixin


class CorrespondenceStatus(str, enum.Enum):
     DRAFT = "draft"
     SENT = "sent"


class CorrespondenceTemplate(OwnedMixin, TimestampMixin, Base):
     """
     Letter / email template with {{token}} placeholders.
     `variables` lists the tokens the template expects, for the UI.
     """
     __tablename__ = "correspondence_templates"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(100), nullable=False)
     type = Column(String(50), nullable=False, default="custom")
     subject = Column(String(200), nullable=False)
     content = Column(Text, nullable=False)
     variables = Column(JSON, nullable=False, default=list)

     correspondences = relationship("Correspondence", back_populates="template")

     def __repr__(self):
          return f"<CorrespondenceTemplate(id={self.id}, name='{self.name}')>"


class Correspondence(OwnedMixin, TimestampMixin, Base):
     """A document generated from a template for one tenant."""
     __tablename__ = "correspondences"

     id = Column(Integer, primary_key=True, autoincrement=True)
     template_id = Column(
          Integer,
          ForeignKey("correspondence_templates.id", ondelete="SET NULL"),
          nullable=True,
          index=True
     )
     tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
     subject = Column(String(200), nullable=False)
     content = Column(Text, nullable=False)
     status = Column(
          Enum(CorrespondenceStatus, name="correspondence_status", create_constraint=True,
               values_callable=lambda e: [m.value for m in e]),
          default=CorrespondenceStatus.DRAFT,
          nullable=False,
     )
     sent_at = Column(DateTime, nullable=True)

     # Relationships
     template = relationship("CorrespondenceTemplate", back_populates="correspondences")
     tenant = relationship("Tenant")

     def __repr__(self):
          return f"<Correspondence(id={self.id}, subject='{self.subject}', status='{self.status.value}')>"
