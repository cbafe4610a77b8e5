# services/data_source.py
"""
Financial data sources.

Reports and the SAF-T exporter read through a FinancialDataSource. Two
implementations exist: one backed by the SQLAlchemy session and one holding
in-memory records (demo / mock mode and tests). Which one is used is decided
once from settings.DATA_MODE by build_data_source_factory().
"""
import logging
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from config import Settings
from errors import DatabaseError
from models import Expense, Invoice, Property, Receipt, Tenant
from services.money import to_money
from services.records import (
     ExpenseRecord,
     InvoiceRecord,
     LineItemRecord,
     PropertyRecord,
     ReceiptRecord,
     TenantRecord,
)

logger = logging.getLogger(__name__)


class FinancialDataSource(ABC):
     """Read-only access to one user's financial records."""

     @abstractmethod
     def list_receipts(self, user_id: int, start: date, end: date) -> List[ReceiptRecord]:
          """Receipts dated within [start, end], any status."""

     @abstractmethod
     def list_expenses(self, user_id: int, start: date, end: date) -> List[ExpenseRecord]:
          """Expenses dated within [start, end]."""

     @abstractmethod
     def list_invoices(self, user_id: int, start: Optional[date] = None,
                       end: Optional[date] = None) -> List[InvoiceRecord]:
          """Invoices issued within [start, end], ordered by issue date then number."""

     @abstractmethod
     def list_properties(self, user_id: int) -> List[PropertyRecord]:
          ...

     @abstractmethod
     def list_tenants(self, user_id: int) -> List[TenantRecord]:
          ...


def line_items_from_json(items: Optional[Iterable[dict]]) -> tuple:
     """Convert stored line-item dicts (amounts as strings) to records."""
     records = []
     for item in items or ():
          quantity = Decimal(str(item.get("quantity", 1)))
          unit_price = to_money(item.get("unit_price", item.get("total", 0)))
          total = to_money(item.get("total", quantity * unit_price))
          records.append(LineItemRecord(
               description=item.get("description") or "",
               quantity=quantity,
               unit_price=unit_price,
               total=total,
          ))
     return tuple(records)


def invoice_to_record(invoice: Invoice) -> InvoiceRecord:
     details = invoice.details or {}
     return InvoiceRecord(
          id=invoice.id,
          number=invoice.number,
          amount=to_money(invoice.amount),
          issue_date=invoice.issue_date,
          due_date=invoice.due_date,
          status=invoice.status.value,
          created_at=invoice.created_at,
          updated_at=invoice.updated_at,
          tenant_id=invoice.tenant_id,
          tenant_name=invoice.tenant.name if invoice.tenant else None,
          tenant_tax_id=invoice.tenant.tax_id if invoice.tenant else None,
          property_id=invoice.property_id,
          property_name=invoice.property.name if invoice.property else None,
          property_address=invoice.property.address if invoice.property else None,
          paid_date=invoice.paid_date,
          description=invoice.description,
          line_items=line_items_from_json(invoice.line_items),
          late_fee_amount=to_money(details.get("late_fee_amount", 0)),
     )


class SqlAlchemyFinancialDataSource(FinancialDataSource):
     """Reads from the database through the request's session."""

     def __init__(self, db: Session):
          self.db = db

     def _fetch(self, what: str, query_fn: Callable[[], Sequence]) -> Sequence:
          try:
               return query_fn()
          except SQLAlchemyError as e:
               raise DatabaseError(f"Failed to load {what}", original_error=e) from e

     def list_receipts(self, user_id, start, end):
          rows = self._fetch("receipts", lambda: (
               self.db.query(Receipt)
               .options(joinedload(Receipt.tenant), joinedload(Receipt.property))
               .filter(Receipt.user_id == user_id, Receipt.date >= start, Receipt.date <= end)
               .order_by(Receipt.date, Receipt.id)
               .all()
          ))
          return [
               ReceiptRecord(
                    id=r.id,
                    tenant_id=r.tenant_id,
                    property_id=r.property_id,
                    amount=to_money(r.amount),
                    date=r.date,
                    type=r.type.value,
                    status=r.status.value,
                    description=r.description or "",
                    tenant_name=r.tenant.name if r.tenant else "",
                    property_name=r.property.name if r.property else "",
               )
               for r in rows
          ]

     def list_expenses(self, user_id, start, end):
          rows = self._fetch("expenses", lambda: (
               self.db.query(Expense)
               .options(joinedload(Expense.property))
               .filter(Expense.user_id == user_id, Expense.date >= start, Expense.date <= end)
               .order_by(Expense.date, Expense.id)
               .all()
          ))
          return [
               ExpenseRecord(
                    id=e.id,
                    property_id=e.property_id,
                    amount=to_money(e.amount),
                    date=e.date,
                    category=e.category,
                    description=e.description or "",
                    property_name=e.property.name if e.property else "",
               )
               for e in rows
          ]

     def list_invoices(self, user_id, start=None, end=None):
          def query():
               q = (
                    self.db.query(Invoice)
                    .options(joinedload(Invoice.tenant), joinedload(Invoice.property))
                    .filter(Invoice.user_id == user_id)
               )
               if start is not None:
                    q = q.filter(Invoice.issue_date >= start)
               if end is not None:
                    q = q.filter(Invoice.issue_date <= end)
               return q.order_by(Invoice.issue_date, Invoice.number, Invoice.id).all()

          return [invoice_to_record(inv) for inv in self._fetch("invoices", query)]

     def list_properties(self, user_id):
          rows = self._fetch("properties", lambda: (
               self.db.query(Property)
               .filter(Property.user_id == user_id)
               .order_by(Property.name, Property.id)
               .all()
          ))
          return [
               PropertyRecord(
                    id=p.id,
                    name=p.name,
                    rent=to_money(p.rent),
                    status=p.status.value,
                    address=p.address or "",
               )
               for p in rows
          ]

     def list_tenants(self, user_id):
          rows = self._fetch("tenants", lambda: (
               self.db.query(Tenant)
               .filter(Tenant.user_id == user_id)
               .order_by(Tenant.name, Tenant.id)
               .all()
          ))
          return [
               TenantRecord(
                    id=t.id,
                    name=t.name,
                    rent=to_money(t.rent),
                    lease_start=t.lease_start,
                    lease_end=t.lease_end,
                    property_id=t.property_id,
                    payment_status=t.payment_status.value,
                    email=t.email or "",
                    tax_id=t.tax_id,
               )
               for t in rows
          ]


class InMemoryFinancialDataSource(FinancialDataSource):
     """
     Serves a fixed set of records. The same records are visible to every
     user, which is what demo mode wants.
     """

     def __init__(self, receipts=(), expenses=(), invoices=(), properties=(), tenants=()):
          self.receipts = tuple(receipts)
          self.expenses = tuple(expenses)
          self.invoices = tuple(invoices)
          self.properties = tuple(properties)
          self.tenants = tuple(tenants)

     def list_receipts(self, user_id, start, end):
          rows = [r for r in self.receipts if start <= r.date <= end]
          return sorted(rows, key=lambda r: (r.date, r.id))

     def list_expenses(self, user_id, start, end):
          rows = [e for e in self.expenses if start <= e.date <= end]
          return sorted(rows, key=lambda e: (e.date, e.id))

     def list_invoices(self, user_id, start=None, end=None):
          rows = [
               inv for inv in self.invoices
               if (start is None or inv.issue_date >= start) and (end is None or inv.issue_date <= end)
          ]
          return sorted(rows, key=lambda inv: (inv.issue_date, inv.number, inv.id))

     def list_properties(self, user_id):
          return sorted(self.properties, key=lambda p: (p.name, p.id))

     def list_tenants(self, user_id):
          return sorted(self.tenants, key=lambda t: (t.name, t.id))


def build_data_source_factory(settings: Settings) -> Callable[[Session], FinancialDataSource]:
     """
     Return a callable turning a request session into the configured source.
     Called once at startup.
     """
     if settings.data_mode == "mock":
          from services.mock_data import build_mock_data_source

          mock_source = build_mock_data_source()
          logger.info("Financial data source: in-memory mock data")
          return lambda db: mock_source

     logger.info("Financial data source: database")
     return SqlAlchemyFinancialDataSource
