# models/base.py
import re

from sqlalchemy import Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: CorrespondenceTemplate -> correspondence_templates
          """
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'


class OwnedMixin:
     """Row belongs to exactly one user; every query is scoped by user_id."""

     @declared_attr
     def user_id(cls):
          return Column(
               Integer,
               ForeignKey("users.id", ondelete="CASCADE"),
               nullable=False,
               index=True,
          )


class TimestampMixin:
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
