# services/report_service.py
"""
Financial report generation.

Every report is computed from a fresh read of a FinancialDataSource and
returned as a schema object; nothing is cached. A data-source failure
propagates as DatabaseError, so a report is either complete or not returned.
"""
import calendar
import csv
import io
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from errors import ValidationError
from schemas.report import (
     MIN_REPORT_YEAR,
     CategoryExpense,
     ExpenseBreakdown,
     FinancialReport,
     IncomeBreakdown,
     InvoiceCounts,
     InvoiceListItem,
     InvoiceSection,
     InvoiceSummary,
     InvoiceSummaryReport,
     PropertyExpense,
     PropertyIncome,
     PropertyTaxLine,
     QuarterBreakdown,
     RentRoll,
     RentRollLine,
     ReportEntry,
     ReportPeriod,
     TaxReport,
)
from services.data_source import FinancialDataSource
from services.money import ZERO, format_amount, percentage, to_money
from services.records import ExpenseRecord, InvoiceRecord, ReceiptRecord, TenantRecord

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Date", "Type", "Category", "Property", "Tenant", "Description", "Amount"]
QUARTERS = (("Q1", 1, 3), ("Q2", 4, 6), ("Q3", 7, 9), ("Q4", 10, 12))


def current_month_range(today: Optional[date] = None) -> Tuple[date, date]:
     """First and last day of the month containing today."""
     today = today or date.today()
     last_day = calendar.monthrange(today.year, today.month)[1]
     return today.replace(day=1), today.replace(day=last_day)


def period_label(start: date, end: date) -> str:
     start_label = start.strftime("%b %Y")
     end_label = end.strftime("%b %Y")
     return start_label if start_label == end_label else f"{start_label} - {end_label}"


def _check_range(start: date, end: date) -> None:
     if start > end:
          raise ValidationError("Start date must be on or before end date", field="startDate")


def _check_year(year: int, today: Optional[date] = None) -> None:
     max_year = (today or date.today()).year + 1
     if year < MIN_REPORT_YEAR or year > max_year:
          raise ValidationError(f"Year must be between {MIN_REPORT_YEAR} and {max_year}", field="year")


# ---------------------------------------------------------------------------
# Aggregation helpers
# ---------------------------------------------------------------------------

def _paid(receipts: Iterable[ReceiptRecord]) -> List[ReceiptRecord]:
     return [r for r in receipts if r.status == "paid"]


def _income_breakdown(receipts: List[ReceiptRecord]) -> IncomeBreakdown:
     totals = {"rent": ZERO, "deposit": ZERO, "other": ZERO}
     by_property: Dict[int, dict] = {}

     for receipt in receipts:
          bucket = receipt.type if receipt.type in ("rent", "deposit") else "other"
          totals[bucket] += receipt.amount
          prop = by_property.setdefault(receipt.property_id, {
               "property_id": receipt.property_id,
               "property_name": receipt.property_name,
               "rent": ZERO,
               "deposit": ZERO,
               "other": ZERO,
          })
          prop[bucket] += receipt.amount

     properties = [
          PropertyIncome(
               property_id=p["property_id"],
               property_name=p["property_name"],
               rent=to_money(p["rent"]),
               deposits=to_money(p["deposit"]),
               other=to_money(p["other"]),
               total=to_money(p["rent"] + p["deposit"] + p["other"]),
          )
          for p in by_property.values()
     ]
     properties.sort(key=lambda p: (-p.total, p.property_name))

     return IncomeBreakdown(
          total_rent=to_money(totals["rent"]),
          total_deposits=to_money(totals["deposit"]),
          total_other=to_money(totals["other"]),
          total=to_money(sum(totals.values(), ZERO)),
          by_property=properties,
     )


def _expense_breakdown(expenses: List[ExpenseRecord]) -> ExpenseBreakdown:
     total = sum((e.amount for e in expenses), ZERO)
     by_category: Dict[str, Decimal] = defaultdict(lambda: ZERO)
     by_property: Dict[int, list] = {}

     for expense in expenses:
          by_category[expense.category] += expense.amount
          entry = by_property.setdefault(expense.property_id, [expense.property_name, ZERO])
          entry[1] += expense.amount

     categories = [
          CategoryExpense(category=name, amount=to_money(amount), percentage=percentage(amount, total))
          for name, amount in by_category.items()
     ]
     categories.sort(key=lambda c: (-c.amount, c.category))

     properties = [
          PropertyExpense(
               property_id=prop_id,
               property_name=name,
               amount=to_money(amount),
               percentage=percentage(amount, total),
          )
          for prop_id, (name, amount) in by_property.items()
     ]
     properties.sort(key=lambda p: (-p.amount, p.property_name))

     return ExpenseBreakdown(total=to_money(total), by_category=categories, by_property=properties)


def summarize_invoices(invoices: Iterable[InvoiceRecord]) -> InvoiceSummary:
     """Totals and counts by status. Late fees are counted on overdue invoices."""
     totals = {"pending": ZERO, "paid": ZERO, "overdue": ZERO}
     counts = {"pending": 0, "paid": 0, "overdue": 0, "cancelled": 0}
     late_fees = ZERO

     for invoice in invoices:
          status = invoice.status
          if status in totals:
               totals[status] += invoice.amount
          if status == "overdue":
               late_fees += invoice.late_fee_amount
          if status in counts:
               counts[status] += 1

     return InvoiceSummary(
          total_pending=to_money(totals["pending"]),
          total_paid=to_money(totals["paid"]),
          total_overdue=to_money(totals["overdue"]),
          total_late_fees=to_money(late_fees),
          invoice_count=InvoiceCounts(**counts),
     )


def _entries(receipts: List[ReceiptRecord], expenses: List[ExpenseRecord]) -> List[ReportEntry]:
     entries = [
          ReportEntry(
               date=r.date,
               kind="income",
               category=r.type,
               property_name=r.property_name,
               tenant_name=r.tenant_name,
               description=r.description,
               amount=r.amount,
               record_id=r.id,
          )
          for r in receipts
     ]
     entries.extend(
          ReportEntry(
               date=e.date,
               kind="expense",
               category=e.category,
               property_name=e.property_name,
               description=e.description,
               amount=e.amount,
               record_id=e.id,
          )
          for e in expenses
     )
     entries.sort(key=lambda entry: (entry.date, entry.kind, entry.record_id))
     return entries


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

def generate_financial_report(
     source: FinancialDataSource,
     user_id: int,
     start: Optional[date] = None,
     end: Optional[date] = None,
) -> FinancialReport:
     """
     Income, expenses and invoices for [start, end].

     Missing dates default to the current calendar month. Only paid receipts
     count as income. An empty range yields zero totals.
     """
     if start is None or end is None:
          default_start, default_end = current_month_range()
          start = start or default_start
          end = end or default_end
     _check_range(start, end)

     receipts = _paid(source.list_receipts(user_id, start, end))
     expenses = source.list_expenses(user_id, start, end)
     invoices = source.list_invoices(user_id, start, end)

     income = _income_breakdown(receipts)
     expense_breakdown = _expense_breakdown(expenses)
     net_income = income.total - expense_breakdown.total

     logger.debug(
          "Financial report for user %s %s..%s: %d receipts, %d expenses, %d invoices",
          user_id, start, end, len(receipts), len(expenses), len(invoices),
     )

     return FinancialReport(
          period=ReportPeriod(start_date=start, end_date=end, label=period_label(start, end)),
          total_income=income.total,
          total_expenses=expense_breakdown.total,
          net_income=to_money(net_income),
          profit_margin=percentage(net_income, income.total),
          income=income,
          expenses=expense_breakdown,
          invoices=InvoiceSection(
               summary=summarize_invoices(invoices),
               list=[
                    InvoiceListItem(
                         id=inv.id,
                         number=inv.number,
                         tenant_name=inv.tenant_name,
                         property_name=inv.property_name,
                         amount=inv.amount,
                         issue_date=inv.issue_date,
                         due_date=inv.due_date,
                         status=inv.status,
                         paid_date=inv.paid_date,
                    )
                    for inv in invoices
               ],
          ),
          entries=_entries(receipts, expenses),
     )


def generate_tax_report(source: FinancialDataSource, user_id: int, year: int) -> TaxReport:
     """Yearly totals with a quarterly and a per-property breakdown, from one fetch."""
     _check_year(year)
     start, end = date(year, 1, 1), date(year, 12, 31)

     receipts = _paid(source.list_receipts(user_id, start, end))
     expenses = source.list_expenses(user_id, start, end)

     income = _income_breakdown(receipts)
     expense_breakdown = _expense_breakdown(expenses)

     quarters = []
     for label, first_month, last_month in QUARTERS:
          q_income = sum((r.amount for r in receipts if first_month <= r.date.month <= last_month), ZERO)
          q_expenses = sum((e.amount for e in expenses if first_month <= e.date.month <= last_month), ZERO)
          quarters.append(QuarterBreakdown(
               quarter=label,
               income=to_money(q_income),
               expenses=to_money(q_expenses),
               net=to_money(q_income - q_expenses),
          ))

     properties: Dict[int, dict] = {}
     for prop in income.by_property:
          properties[prop.property_id] = {"name": prop.property_name, "income": prop.total, "expenses": ZERO}
     for prop in expense_breakdown.by_property:
          entry = properties.setdefault(prop.property_id, {"name": prop.property_name, "income": ZERO, "expenses": ZERO})
          entry["expenses"] = prop.amount

     return TaxReport(
          year=year,
          gross_income=income.total,
          total_expenses=expense_breakdown.total,
          net_income=to_money(income.total - expense_breakdown.total),
          deductible_expenses=expense_breakdown.by_category,
          quarterly_breakdown=quarters,
          properties=[
               PropertyTaxLine(
                    property_id=prop_id,
                    property_name=data["name"],
                    income=to_money(data["income"]),
                    expenses=to_money(data["expenses"]),
                    net=to_money(data["income"] - data["expenses"]),
               )
               for prop_id, data in sorted(properties.items())
          ],
     )


def generate_rent_roll(source: FinancialDataSource, user_id: int, as_of: Optional[date] = None) -> RentRoll:
     """
     Current tenant and rent per property as of a date.

     A property counts as occupied when its status is "occupied" and a tenant's
     lease covers as_of; when several do, the one whose lease ends last wins.
     """
     as_of = as_of or date.today()
     properties = source.list_properties(user_id)
     tenants = source.list_tenants(user_id)

     current: Dict[int, TenantRecord] = {}
     for tenant in tenants:
          if tenant.property_id is None or not tenant.lease_covers(as_of):
               continue
          best = current.get(tenant.property_id)
          if best is None or tenant.lease_end > best.lease_end:
               current[tenant.property_id] = tenant

     total_monthly = ZERO
     occupied = 0
     lines = []
     for prop in properties:
          tenant = current.get(prop.id)
          if prop.status == "occupied" and tenant is not None:
               total_monthly += prop.rent
               occupied += 1
          lines.append(RentRollLine(
               property_id=prop.id,
               property_name=prop.name,
               status=prop.status,
               monthly_rent=prop.rent,
               tenant_name=tenant.name if tenant else None,
               lease_end=tenant.lease_end if tenant else None,
          ))

     return RentRoll(
          as_of=as_of,
          total_monthly_rent=to_money(total_monthly),
          total_annual_rent=to_money(total_monthly * 12),
          occupancy_rate=percentage(Decimal(occupied), Decimal(len(properties))),
          properties=lines,
     )


def generate_invoice_summary(
     source: FinancialDataSource,
     user_id: int,
     start: Optional[date] = None,
     end: Optional[date] = None,
) -> InvoiceSummaryReport:
     """Invoice totals by status; unbounded when no dates are given."""
     if start and end:
          _check_range(start, end)
     invoices = source.list_invoices(user_id, start, end)
     period = None
     if start and end:
          period = ReportPeriod(start_date=start, end_date=end, label=period_label(start, end))
     return InvoiceSummaryReport(period=period, summary=summarize_invoices(invoices))


def financial_report_to_csv(report: FinancialReport) -> str:
     """One row per income/expense entry, in the report's entry order."""
     buffer = io.StringIO()
     writer = csv.writer(buffer, lineterminator="\n")
     writer.writerow(CSV_COLUMNS)
     for entry in report.entries:
          writer.writerow([
               entry.date.isoformat(),
               "Income" if entry.kind == "income" else "Expense",
               entry.category,
               entry.property_name,
               entry.tenant_name,
               entry.description,
               format_amount(entry.amount),
          ])
     return buffer.getvalue()
