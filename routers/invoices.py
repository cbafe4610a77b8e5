# routers/invoices.py
"""
Invoice API routes.

CRUD plus status changes, monthly batch generation, late fees and turning
paid invoices into receipts. Every route is scoped to the authenticated user.
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config import get_settings
from database import get_session
from dependencies import get_current_user_id
from models import Invoice
from models.invoice import InvoiceStatus
from schemas.common import DataResponse, ListResponse, PageMeta
from schemas.invoice import (
     BatchFailure,
     BatchInvoiceRequest,
     BatchInvoiceResult,
     InvoiceCreate,
     InvoiceResponse,
     InvoiceStatusEnum,
     InvoiceUpdate,
     LateFeeRunResult,
     LineItemResponse,
     MarkPaidRequest,
     ReceiptBatchResult,
)
from services.data_source import line_items_from_json
from services.invoice_service import InvoiceService

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _build_invoice_response(invoice: Invoice) -> InvoiceResponse:
     """Build InvoiceResponse with related tenant/property data and metadata fields."""
     details = invoice.details or {}
     late_fee = details.get("late_fee_amount")
     original_amount = details.get("original_amount")

     return InvoiceResponse(
          id=invoice.id,
          number=invoice.number,
          tenant_id=invoice.tenant_id,
          property_id=invoice.property_id,
          amount=invoice.amount,
          issue_date=invoice.issue_date,
          due_date=invoice.due_date,
          paid_date=invoice.paid_date,
          status=InvoiceStatusEnum(invoice.status.value),
          description=invoice.description,
          line_items=[
               LineItemResponse(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
               )
               for item in line_items_from_json(invoice.line_items)
          ],
          late_fee=Decimal(late_fee) if late_fee is not None else None,
          original_amount=Decimal(original_amount) if original_amount is not None else None,
          notes=details.get("notes"),
          payment_method=details.get("payment_method"),
          reference_number=details.get("reference_number"),
          created_at=invoice.created_at,
          updated_at=invoice.updated_at,
          tenant_name=invoice.tenant.name if invoice.tenant else None,
          tenant_email=invoice.tenant.email if invoice.tenant else None,
          property_name=invoice.property.name if invoice.property else None,
     )


@router.post(
     "",
     response_model=DataResponse[InvoiceResponse],
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
def create_invoice(
     invoice_data: InvoiceCreate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """
     Create a pending invoice.

     - **tenantId** / **propertyId**: must belong to the caller
     - **amount**: defaults to the sum of **lineItems**
     - **issueDate**: defaults to today
     """
     invoice = InvoiceService.create_invoice(db, user_id, invoice_data)
     return DataResponse(data=_build_invoice_response(invoice))


@router.get(
     "",
     response_model=ListResponse[InvoiceResponse],
     summary="List invoices with filters"
)
def list_invoices(
     status_filter: Optional[InvoiceStatusEnum] = Query(None, alias="status", description="Filter by status"),
     tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
     property_id: Optional[int] = Query(None, description="Filter by property ID"),
     overdue_only: bool = Query(False, description="Only pending invoices past their due date"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, description="Items per page"),
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     invoices, total = InvoiceService.list_invoices(
          db,
          user_id,
          status=InvoiceStatus(status_filter.value) if status_filter else None,
          tenant_id=tenant_id,
          property_id=property_id,
          overdue_only=overdue_only,
          page=page,
          page_size=page_size,
     )
     return ListResponse(
          data=[_build_invoice_response(inv) for inv in invoices],
          meta=PageMeta(total=total, page=page, page_size=page_size),
     )


# ---------------------------------------------------------------------------
# Batch operations
# ---------------------------------------------------------------------------

@router.post(
     "/batch",
     response_model=DataResponse[BatchInvoiceResult],
     status_code=status.HTTP_201_CREATED,
     summary="Generate monthly rent invoices"
)
def generate_monthly_invoices(
     request: BatchInvoiceRequest,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """One rent invoice per tenant whose lease covers **dueDate**, unless already invoiced that month."""
     created, failed = InvoiceService.generate_monthly_invoices(db, user_id, request.due_date, request.month_label)
     return DataResponse(data=BatchInvoiceResult(
          created=[_build_invoice_response(inv) for inv in created],
          failed=[BatchFailure(**failure) for failure in failed],
     ))


@router.post(
     "/apply-late-fees",
     response_model=DataResponse[LateFeeRunResult],
     summary="Mark overdue invoices and charge late fees"
)
def apply_late_fees(
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     charged, marked = InvoiceService.apply_late_fees(db, user_id, get_settings().late_fees)
     return DataResponse(data=LateFeeRunResult(
          charged=[_build_invoice_response(inv) for inv in charged],
          marked_overdue=marked,
     ))


@router.post(
     "/create-receipts",
     response_model=DataResponse[ReceiptBatchResult],
     summary="Create receipts for paid invoices"
)
def create_receipts(
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     result = InvoiceService.create_receipts_from_paid_invoices(db, user_id)
     return DataResponse(data=ReceiptBatchResult(**result))


# ---------------------------------------------------------------------------
# Single invoice
# ---------------------------------------------------------------------------

@router.get(
     "/{invoice_id}",
     response_model=DataResponse[InvoiceResponse],
     summary="Get invoice by ID"
)
def get_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     invoice = InvoiceService.get_invoice(db, user_id, invoice_id)
     return DataResponse(data=_build_invoice_response(invoice))


@router.put(
     "/{invoice_id}",
     response_model=DataResponse[InvoiceResponse],
     summary="Update an invoice"
)
def update_invoice(
     invoice_id: int,
     invoice_data: InvoiceUpdate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """
     Update an existing invoice.

     Only provided fields are updated. Paid and cancelled invoices cannot be
     edited; a **status** goes through the usual transition rules.
     """
     invoice = InvoiceService.update_invoice(db, user_id, invoice_id, invoice_data)
     return DataResponse(data=_build_invoice_response(invoice))


@router.patch(
     "/{invoice_id}/mark-paid",
     response_model=DataResponse[InvoiceResponse],
     summary="Mark invoice as paid"
)
def mark_invoice_paid(
     invoice_id: int,
     payment: Optional[MarkPaidRequest] = None,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """Sets the paid date (default today) and records the payment method and reference."""
     payment = payment or MarkPaidRequest()
     invoice = InvoiceService.transition(
          db,
          user_id,
          invoice_id,
          InvoiceStatus.PAID,
          paid_date=payment.paid_date,
          payment_method=payment.payment_method,
          reference_number=payment.reference_number,
     )
     return DataResponse(data=_build_invoice_response(invoice))


@router.patch(
     "/{invoice_id}/mark-overdue",
     response_model=DataResponse[InvoiceResponse],
     summary="Mark invoice as overdue"
)
def mark_invoice_overdue(
     invoice_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     invoice = InvoiceService.transition(db, user_id, invoice_id, InvoiceStatus.OVERDUE)
     return DataResponse(data=_build_invoice_response(invoice))


@router.patch(
     "/{invoice_id}/cancel",
     response_model=DataResponse[InvoiceResponse],
     summary="Cancel an invoice"
)
def cancel_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     invoice = InvoiceService.transition(db, user_id, invoice_id, InvoiceStatus.CANCELLED)
     return DataResponse(data=_build_invoice_response(invoice))


@router.delete(
     "/{invoice_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete an invoice"
)
def delete_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """Only pending or cancelled invoices can be deleted."""
     InvoiceService.delete_invoice(db, user_id, invoice_id)
     return None
