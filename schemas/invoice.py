# schemas/invoice.py
"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import Field, ConfigDict, model_validator
from enum import Enum

from schemas.common import ApiModel, CleanStr, CleanText, Money, RequiredStr


class InvoiceStatusEnum(str, Enum):
     """Invoice payment status options."""
     PENDING = "pending"
     PAID = "paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


class LineItem(ApiModel):
     """A single charge within an invoice. total defaults to quantity x unit price."""
     description: RequiredStr = Field(..., min_length=1, max_length=500)
     quantity: Decimal = Field(default=Decimal("1"), gt=0, max_digits=10, decimal_places=3)
     unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     total: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

     @model_validator(mode="after")
     def fill_total(self):
          if self.total is None:
               self.total = (self.quantity * self.unit_price).quantize(Decimal("0.01"))
          return self


class InvoiceCreate(ApiModel):
     """Schema for creating a new invoice."""
     tenant_id: Optional[int] = Field(None, gt=0, description="Tenant being billed")
     property_id: Optional[int] = Field(None, gt=0, description="Property the charge relates to")
     amount: Optional[Decimal] = Field(
          None, gt=0, max_digits=12, decimal_places=2,
          description="Invoice amount; defaults to the sum of the line items",
     )
     issue_date: Optional[date] = Field(None, description="Defaults to today")
     due_date: date = Field(..., description="Payment due date")
     description: Optional[CleanStr] = Field(None, max_length=500)
     line_items: List[LineItem] = Field(default_factory=list)
     notes: Optional[CleanText] = Field(None, max_length=2000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenantId": 1,
                    "propertyId": 1,
                    "dueDate": "2026-02-08",
                    "description": "Rent for February 2026",
                    "lineItems": [
                         {"description": "Monthly Rent", "quantity": 1, "unitPrice": 1200.00}
                    ]
               }
          }
     )

     @model_validator(mode="after")
     def check_amount_and_dates(self):
          if self.amount is None and not self.line_items:
               raise ValueError("Either amount or lineItems must be provided")
          if self.issue_date and self.due_date < self.issue_date:
               raise ValueError("dueDate must be on or after issueDate")
          return self


class InvoiceUpdate(ApiModel):
     """Schema for updating an existing invoice. Status changes follow the transition rules."""
     amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
     due_date: Optional[date] = None
     description: Optional[CleanStr] = Field(None, max_length=500)
     notes: Optional[CleanText] = Field(None, max_length=2000)
     line_items: Optional[List[LineItem]] = Field(None, description="Replaces the stored line items")
     status: Optional[InvoiceStatusEnum] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "status": "paid"
               }
          }
     )


class MarkPaidRequest(ApiModel):
     paid_date: Optional[date] = None
     payment_method: Optional[CleanStr] = Field(None, max_length=50)
     reference_number: Optional[CleanStr] = Field(None, max_length=100)


class LineItemResponse(ApiModel):
     description: str
     quantity: Decimal
     unit_price: Money
     total: Money


class InvoiceResponse(ApiModel):
     """Schema for invoice response."""
     id: int
     number: str
     tenant_id: Optional[int] = None
     property_id: Optional[int] = None
     amount: Money
     issue_date: date
     due_date: date
     paid_date: Optional[date] = None
     status: InvoiceStatusEnum
     description: Optional[str] = None
     line_items: List[LineItemResponse] = []
     late_fee: Optional[Money] = None
     original_amount: Optional[Money] = None
     notes: Optional[str] = None
     payment_method: Optional[str] = None
     reference_number: Optional[str] = None
     created_at: datetime
     updated_at: datetime

     # Optional related data
     tenant_name: Optional[str] = None
     tenant_email: Optional[str] = None
     property_name: Optional[str] = None


class BatchInvoiceRequest(ApiModel):
     due_date: date
     month_label: Optional[CleanStr] = Field(None, max_length=50, description='e.g. "February 2026"')


class BatchFailure(ApiModel):
     tenant_id: int
     error: str


class BatchInvoiceResult(ApiModel):
     created: List[InvoiceResponse] = []
     failed: List[BatchFailure] = []


class LateFeeRunResult(ApiModel):
     charged: List[InvoiceResponse] = []
     marked_overdue: int = 0


class ReceiptBatchResult(ApiModel):
     created: int = 0
     skipped: int = 0
