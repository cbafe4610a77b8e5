# routers/receipts.py
"""Receipt API routes: money received from tenants."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_user_id
from schemas.common import DataResponse, ListResponse, PageMeta
from schemas.receipt import ReceiptCreate, ReceiptResponse, ReceiptUpdate
from services.receipt_service import ReceiptService

router = APIRouter(prefix="/api/receipts", tags=["receipts"])


@router.post("", response_model=DataResponse[ReceiptResponse], status_code=status.HTTP_201_CREATED)
def create_receipt(
     receipt_data: ReceiptCreate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     receipt = ReceiptService.create_receipt(db, user_id, receipt_data)
     return DataResponse(data=ReceiptResponse.model_validate(receipt))


@router.get("", response_model=ListResponse[ReceiptResponse])
def list_receipts(
     start_date: Optional[date] = Query(None, alias="startDate"),
     end_date: Optional[date] = Query(None, alias="endDate"),
     property_id: Optional[int] = Query(None),
     tenant_id: Optional[int] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     receipts, total = ReceiptService.list_receipts(
          db, user_id, start_date, end_date, property_id, tenant_id, page, page_size
     )
     return ListResponse(
          data=[ReceiptResponse.model_validate(r) for r in receipts],
          meta=PageMeta(total=total, page=page, page_size=page_size),
     )


@router.get("/{receipt_id}", response_model=DataResponse[ReceiptResponse])
def get_receipt(
     receipt_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     receipt = ReceiptService.get_receipt(db, user_id, receipt_id)
     return DataResponse(data=ReceiptResponse.model_validate(receipt))


@router.put("/{receipt_id}", response_model=DataResponse[ReceiptResponse])
def update_receipt(
     receipt_id: int,
     receipt_data: ReceiptUpdate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     receipt = ReceiptService.update_receipt(db, user_id, receipt_id, receipt_data)
     return DataResponse(data=ReceiptResponse.model_validate(receipt))


@router.delete("/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_receipt(
     receipt_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     ReceiptService.delete_receipt(db, user_id, receipt_id)
     return None
