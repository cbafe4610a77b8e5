# schemas/expense.py
import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import Field

from schemas.common import ApiModel, CleanStr, Money, RequiredStr


class ExpenseCreate(ApiModel):
     property_id: int = Field(..., gt=0)
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     date: dt.date
     category: RequiredStr = Field(..., min_length=1, max_length=100)
     description: Optional[CleanStr] = Field(None, max_length=500)


class ExpenseUpdate(ApiModel):
     property_id: Optional[int] = Field(None, gt=0)
     amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
     date: Optional[dt.date] = None
     category: Optional[RequiredStr] = Field(None, min_length=1, max_length=100)
     description: Optional[CleanStr] = Field(None, max_length=500)


class ExpenseResponse(ApiModel):
     id: int
     property_id: int
     amount: Money
     date: dt.date
     category: str
     description: Optional[str] = None
     created_at: dt.datetime
     updated_at: dt.datetime
