# routers/expenses.py
"""Expense API routes."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_user_id
from schemas.common import DataResponse, ListResponse, PageMeta
from schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from services.expense_service import ExpenseService

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.post("", response_model=DataResponse[ExpenseResponse], status_code=status.HTTP_201_CREATED)
def create_expense(
     expense_data: ExpenseCreate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     expense = ExpenseService.create_expense(db, user_id, expense_data)
     return DataResponse(data=ExpenseResponse.model_validate(expense))


@router.get("", response_model=ListResponse[ExpenseResponse])
def list_expenses(
     start_date: Optional[date] = Query(None, alias="startDate"),
     end_date: Optional[date] = Query(None, alias="endDate"),
     property_id: Optional[int] = Query(None),
     category: Optional[str] = Query(None, max_length=100),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     expenses, total = ExpenseService.list_expenses(
          db, user_id, start_date, end_date, property_id, category, page, page_size
     )
     return ListResponse(
          data=[ExpenseResponse.model_validate(e) for e in expenses],
          meta=PageMeta(total=total, page=page, page_size=page_size),
     )


@router.get("/{expense_id}", response_model=DataResponse[ExpenseResponse])
def get_expense(
     expense_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     expense = ExpenseService.get_expense(db, user_id, expense_id)
     return DataResponse(data=ExpenseResponse.model_validate(expense))


@router.put("/{expense_id}", response_model=DataResponse[ExpenseResponse])
def update_expense(
     expense_id: int,
     expense_data: ExpenseUpdate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     expense = ExpenseService.update_expense(db, user_id, expense_id, expense_data)
     return DataResponse(data=ExpenseResponse.model_validate(expense))


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
     expense_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     ExpenseService.delete_expense(db, user_id, expense_id)
     return None
