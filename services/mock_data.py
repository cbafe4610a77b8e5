# services/mock_data.py
"""Demo records served when DATA_MODE=mock."""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from services.data_source import InMemoryFinancialDataSource
from services.records import (
     ExpenseRecord,
     InvoiceRecord,
     LineItemRecord,
     PropertyRecord,
     ReceiptRecord,
     TenantRecord,
)

MOCK_PROPERTIES = (
     PropertyRecord(id=1, name="Rua Augusta 120", rent=Decimal("1200.00"), status="occupied",
                    address="Rua Augusta 120, 1100-053 Lisboa"),
     PropertyRecord(id=2, name="Avenida da Boavista 45", rent=Decimal("950.00"), status="occupied",
                    address="Avenida da Boavista 45, 4100-112 Porto"),
     PropertyRecord(id=3, name="Largo do Carmo 7", rent=Decimal("800.00"), status="vacant",
                    address="Largo do Carmo 7, 1200-092 Lisboa"),
)


def _month_start(year: int, month: int) -> date:
     while month < 1:
          month += 12
          year -= 1
     return date(year, month, 1)


def build_mock_data_source(today: Optional[date] = None) -> InMemoryFinancialDataSource:
     """
     Six months of rent, expenses and invoices ending with the current month.
     """
     today = today or date.today()
     tenants = (
          TenantRecord(id=1, name="Ana Silva", rent=Decimal("1200.00"), property_id=1,
                       lease_start=date(today.year - 1, 1, 1), lease_end=date(today.year + 1, 12, 31),
                       payment_status="paid", email="ana.silva@example.com", tax_id="123456789"),
          TenantRecord(id=2, name="Bruno Costa", rent=Decimal("950.00"), property_id=2,
                       lease_start=date(today.year - 1, 6, 1), lease_end=date(today.year + 1, 5, 31),
                       payment_status="pending", email="bruno.costa@example.com"),
     )
     names = {p.id: p.name for p in MOCK_PROPERTIES}

     receipts, expenses, invoices = [], [], []
     for offset in range(6):
          month = _month_start(today.year, today.month - offset)
          for tenant in tenants:
               seq = len(invoices) + 1
               paid = offset > 0 or tenant.id == 1
               invoices.append(InvoiceRecord(
                    id=seq,
                    number=f"INV-{month.year}-{seq:05d}",
                    amount=tenant.rent,
                    issue_date=month,
                    due_date=month.replace(day=8),
                    status="paid" if paid else "pending",
                    created_at=datetime.combine(month, time(9, 0)),
                    updated_at=datetime.combine(month, time(9, 0)),
                    tenant_id=tenant.id,
                    tenant_name=tenant.name,
                    tenant_tax_id=tenant.tax_id,
                    property_id=tenant.property_id,
                    property_name=names[tenant.property_id],
                    paid_date=month.replace(day=5) if paid else None,
                    description=f"Rent {month:%B %Y}",
                    line_items=(LineItemRecord(
                         description=f"Monthly Rent - {names[tenant.property_id]}",
                         quantity=Decimal("1"),
                         unit_price=tenant.rent,
                         total=tenant.rent,
                    ),),
               ))
               if paid:
                    receipts.append(ReceiptRecord(
                         id=len(receipts) + 1,
                         tenant_id=tenant.id,
                         property_id=tenant.property_id,
                         amount=tenant.rent,
                         date=month.replace(day=5),
                         type="rent",
                         status="paid",
                         description=f"Rent {month:%B %Y}",
                         tenant_name=tenant.name,
                         property_name=names[tenant.property_id],
                    ))
          expenses.append(ExpenseRecord(
               id=len(expenses) + 1,
               property_id=1,
               amount=Decimal("85.50"),
               date=month.replace(day=15),
               category="utilities",
               description="Common area electricity",
               property_name=names[1],
          ))
          if offset % 3 == 0:
               expenses.append(ExpenseRecord(
                    id=len(expenses) + 1,
                    property_id=2,
                    amount=Decimal("240.00"),
                    date=month.replace(day=20),
                    category="maintenance",
                    description="Boiler service",
                    property_name=names[2],
               ))

     return InMemoryFinancialDataSource(
          receipts=receipts,
          expenses=expenses,
          invoices=invoices,
          properties=MOCK_PROPERTIES,
          tenants=tenants,
     )
