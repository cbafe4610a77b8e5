# schemas/receipt.py
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from schemas.common import ApiModel, CleanStr, Money


class ReceiptTypeEnum(str, Enum):
     RENT = "rent"
     DEPOSIT = "deposit"
     MAINTENANCE = "maintenance"
     OTHER = "other"


class ReceiptStatusEnum(str, Enum):
     PAID = "paid"
     PENDING = "pending"


class ReceiptCreate(ApiModel):
     tenant_id: int = Field(..., gt=0)
     property_id: int = Field(..., gt=0)
     invoice_id: Optional[int] = Field(None, gt=0)
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     date: dt.date
     type: ReceiptTypeEnum = ReceiptTypeEnum.RENT
     status: ReceiptStatusEnum = ReceiptStatusEnum.PAID
     description: Optional[CleanStr] = Field(None, max_length=500)


class ReceiptUpdate(ApiModel):
     amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
     date: Optional[dt.date] = None
     type: Optional[ReceiptTypeEnum] = None
     status: Optional[ReceiptStatusEnum] = None
     description: Optional[CleanStr] = Field(None, max_length=500)


class ReceiptResponse(ApiModel):
     id: int
     tenant_id: int
     property_id: int
     invoice_id: Optional[int] = None
     amount: Money
     date: dt.date
     type: ReceiptTypeEnum
     status: ReceiptStatusEnum
     description: Optional[str] = None
     created_at: dt.datetime
     updated_at: dt.datetime
