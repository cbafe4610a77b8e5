# models/user.py
from sqlalchemy import Column, Integer, String, DateTime, func
from .base import Base


class User(Base):
     """
     User model - the landlord / property manager account.

     Every financial record is owned by exactly one user. Authentication is
     handled upstream; this table only anchors ownership.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     email = Column(String(255), unique=True, nullable=False, index=True)
     name = Column(String(200), nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}')>"
