# schemas/tenant.py
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from schemas.common import ApiModel, CleanStr, CleanText, Money, RequiredStr
from utils.nif import validate_nif
from utils.sanitize import sanitize_email


class PaymentStatusEnum(str, Enum):
     PAID = "paid"
     PENDING = "pending"
     OVERDUE = "overdue"


class _TenantFields(ApiModel):
     @field_validator("email", check_fields=False)
     @classmethod
     def check_email(cls, v):
          if v is None:
               return v
          email = sanitize_email(v)
          if email is None:
               raise ValueError("Invalid email address")
          return email

     @field_validator("tax_id", check_fields=False)
     @classmethod
     def check_tax_id(cls, v):
          if v and not validate_nif(v):
               raise ValueError("Invalid Portuguese NIF")
          return v or None


class TenantCreate(_TenantFields):
     name: RequiredStr = Field(..., min_length=1, max_length=100)
     email: str = Field(..., max_length=255)
     phone: Optional[CleanStr] = Field(None, max_length=20)
     tax_id: Optional[str] = Field(None, max_length=9)
     property_id: Optional[int] = Field(None, gt=0)
     rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     lease_start: date
     lease_end: date
     payment_status: PaymentStatusEnum = PaymentStatusEnum.PENDING
     notes: Optional[CleanText] = Field(None, max_length=2000)

     @model_validator(mode="after")
     def check_lease(self):
          if self.lease_end < self.lease_start:
               raise ValueError("leaseEnd must be on or after leaseStart")
          return self


class TenantUpdate(_TenantFields):
     name: Optional[RequiredStr] = Field(None, min_length=1, max_length=100)
     email: Optional[str] = Field(None, max_length=255)
     phone: Optional[CleanStr] = Field(None, max_length=20)
     tax_id: Optional[str] = Field(None, max_length=9)
     property_id: Optional[int] = Field(None, gt=0)
     rent: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     lease_start: Optional[date] = None
     lease_end: Optional[date] = None
     payment_status: Optional[PaymentStatusEnum] = None
     notes: Optional[CleanText] = Field(None, max_length=2000)


class TenantResponse(ApiModel):
     id: int
     name: str
     email: str
     phone: Optional[str] = None
     tax_id: Optional[str] = None
     property_id: Optional[int] = None
     rent: Money
     lease_start: date
     lease_end: date
     payment_status: PaymentStatusEnum
     notes: Optional[str] = None
     created_at: datetime
     updated_at: datetime
