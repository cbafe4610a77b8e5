# services/records.py
"""
Plain, immutable records handed out by a FinancialDataSource.

Report and export code works on these instead of ORM objects so it runs the
same against the database or the in-memory fixtures.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class PropertyRecord:
     id: int
     name: str
     rent: Decimal
     status: str
     address: str = ""


@dataclass(frozen=True)
class TenantRecord:
     id: int
     name: str
     rent: Decimal
     lease_start: date
     lease_end: date
     property_id: Optional[int] = None
     payment_status: str = "pending"
     email: str = ""
     tax_id: Optional[str] = None

     def lease_covers(self, day: date) -> bool:
          return self.lease_start <= day <= self.lease_end


@dataclass(frozen=True)
class ReceiptRecord:
     id: int
     tenant_id: int
     property_id: int
     amount: Decimal
     date: date
     type: str = "rent"
     status: str = "paid"
     description: str = ""
     tenant_name: str = ""
     property_name: str = ""


@dataclass(frozen=True)
class ExpenseRecord:
     id: int
     property_id: int
     amount: Decimal
     date: date
     category: str
     description: str = ""
     property_name: str = ""


@dataclass(frozen=True)
class LineItemRecord:
     description: str
     quantity: Decimal
     unit_price: Decimal
     total: Decimal


@dataclass(frozen=True)
class InvoiceRecord:
     id: int
     number: str
     amount: Decimal
     issue_date: date
     due_date: date
     status: str
     created_at: datetime
     updated_at: datetime
     tenant_id: Optional[int] = None
     tenant_name: Optional[str] = None
     tenant_tax_id: Optional[str] = None
     property_id: Optional[int] = None
     property_name: Optional[str] = None
     property_address: Optional[str] = None
     paid_date: Optional[date] = None
     description: Optional[str] = None
     line_items: Tuple[LineItemRecord, ...] = field(default_factory=tuple)
     late_fee_amount: Decimal = Decimal("0")
