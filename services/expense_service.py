# services/expense_service.py
"""Expense Service - money spent on properties."""
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from errors import NotFoundError, ValidationError
from models import Expense, Property
from schemas.expense import ExpenseCreate, ExpenseUpdate

logger = logging.getLogger(__name__)


class ExpenseService:
     """Service class for expense CRUD scoped by user."""

     @staticmethod
     def _check_property(db: Session, user_id: int, property_id: int) -> None:
          if not db.query(Property.id).filter(Property.id == property_id, Property.user_id == user_id).first():
               raise NotFoundError(f"Property with ID {property_id} not found")

     @staticmethod
     def get_expense(db: Session, user_id: int, expense_id: int) -> Expense:
          expense = db.query(Expense).filter(Expense.id == expense_id, Expense.user_id == user_id).first()
          if not expense:
               raise NotFoundError(f"Expense with ID {expense_id} not found")
          return expense

     @staticmethod
     def list_expenses(
          db: Session,
          user_id: int,
          start: Optional[date] = None,
          end: Optional[date] = None,
          property_id: Optional[int] = None,
          category: Optional[str] = None,
          page: int = 1,
          page_size: int = 50
     ) -> Tuple[List[Expense], int]:
          if start and end and start > end:
               raise ValidationError("Start date must be on or before end date", field="startDate")

          query = db.query(Expense).filter(Expense.user_id == user_id)
          if start:
               query = query.filter(Expense.date >= start)
          if end:
               query = query.filter(Expense.date <= end)
          if property_id:
               query = query.filter(Expense.property_id == property_id)
          if category:
               query = query.filter(Expense.category == category)

          total = query.count()
          expenses = (
               query.order_by(Expense.date.desc(), Expense.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
               .all()
          )
          return expenses, total

     @staticmethod
     def create_expense(db: Session, user_id: int, data: ExpenseCreate) -> Expense:
          ExpenseService._check_property(db, user_id, data.property_id)
          expense = Expense(user_id=user_id, **data.model_dump())
          db.add(expense)
          db.flush()
          logger.info("Recorded expense %s for user %s (%s, %s)", expense.id, user_id, expense.category, expense.amount)
          return expense

     @staticmethod
     def update_expense(db: Session, user_id: int, expense_id: int, data: ExpenseUpdate) -> Expense:
          expense = ExpenseService.get_expense(db, user_id, expense_id)
          changes = data.model_dump(exclude_unset=True, exclude_none=True)
          if "property_id" in changes:
               ExpenseService._check_property(db, user_id, changes["property_id"])
          for field, value in changes.items():
               setattr(expense, field, value)
          db.flush()
          return expense

     @staticmethod
     def delete_expense(db: Session, user_id: int, expense_id: int) -> None:
          expense = ExpenseService.get_expense(db, user_id, expense_id)
          db.delete(expense)
          db.flush()
