# schemas/report.py
"""
Report request DTOs and report result shapes.

Requests form a discriminated union on `type`; each variant accepts only its
own fields.
"""
from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, TypeAdapter, field_validator, model_validator

from schemas.common import ApiModel, Money

MIN_REPORT_YEAR = 2000


def _check_year(year: int) -> int:
     max_year = date.today().year + 1
     if year < MIN_REPORT_YEAR or year > max_year:
          raise ValueError(f"Year must be between {MIN_REPORT_YEAR} and {max_year}")
     return year


class _ReportQuery(ApiModel):
     model_config = ConfigDict(extra="forbid")


class _DateRangeQuery(_ReportQuery):
     start_date: Optional[date] = None
     end_date: Optional[date] = None

     @model_validator(mode="after")
     def check_range(self):
          if self.start_date and self.end_date and self.start_date > self.end_date:
               raise ValueError("startDate must be on or before endDate")
          return self


class FinancialReportQuery(_DateRangeQuery):
     type: Literal["financial"]
     format: Literal["json", "csv"] = "json"


class TaxReportQuery(_ReportQuery):
     type: Literal["tax"]
     year: int = Field(default_factory=lambda: date.today().year)

     @field_validator("year")
     @classmethod
     def check_year(cls, v: int) -> int:
          return _check_year(v)


class RentRollQuery(_ReportQuery):
     type: Literal["rent-roll"]
     as_of: Optional[date] = None


class InvoiceSummaryQuery(_DateRangeQuery):
     type: Literal["invoice-summary"]


ReportRequest = Annotated[
     Union[FinancialReportQuery, TaxReportQuery, RentRollQuery, InvoiceSummaryQuery],
     Field(discriminator="type"),
]

report_request_adapter = TypeAdapter(ReportRequest)


# ---------------------------------------------------------------------------
# Report results
# ---------------------------------------------------------------------------

class ReportPeriod(ApiModel):
     start_date: date
     end_date: date
     label: str


class PropertyIncome(ApiModel):
     property_id: int
     property_name: str
     rent: Money
     deposits: Money
     other: Money
     total: Money


class CategoryExpense(ApiModel):
     category: str
     amount: Money
     percentage: Money


class PropertyExpense(ApiModel):
     property_id: int
     property_name: str
     amount: Money
     percentage: Money


class IncomeBreakdown(ApiModel):
     total_rent: Money
     total_deposits: Money
     total_other: Money
     total: Money
     by_property: List[PropertyIncome] = []


class ExpenseBreakdown(ApiModel):
     total: Money
     by_category: List[CategoryExpense] = []
     by_property: List[PropertyExpense] = []


class InvoiceCounts(ApiModel):
     pending: int = 0
     paid: int = 0
     overdue: int = 0
     cancelled: int = 0


class InvoiceSummary(ApiModel):
     total_pending: Money
     total_paid: Money
     total_overdue: Money
     total_late_fees: Money
     invoice_count: InvoiceCounts


class InvoiceListItem(ApiModel):
     id: int
     number: str
     tenant_name: Optional[str] = None
     property_name: Optional[str] = None
     amount: Money
     issue_date: date
     due_date: date
     status: str
     paid_date: Optional[date] = None


class InvoiceSection(ApiModel):
     summary: InvoiceSummary
     list: List[InvoiceListItem] = []


class ReportEntry(ApiModel):
     """One receipt or expense line of a financial report."""
     date: date
     kind: Literal["income", "expense"]
     category: str
     property_name: str = ""
     tenant_name: str = ""
     description: str = ""
     amount: Money
     record_id: int


class FinancialReport(ApiModel):
     type: Literal["financial"] = "financial"
     period: ReportPeriod
     total_income: Money
     total_expenses: Money
     net_income: Money
     profit_margin: Money
     income: IncomeBreakdown
     expenses: ExpenseBreakdown
     invoices: InvoiceSection
     entries: List[ReportEntry] = []


class QuarterBreakdown(ApiModel):
     quarter: str
     income: Money
     expenses: Money
     net: Money


class PropertyTaxLine(ApiModel):
     property_id: int
     property_name: str
     income: Money
     expenses: Money
     net: Money


class TaxReport(ApiModel):
     type: Literal["tax"] = "tax"
     year: int
     gross_income: Money
     total_expenses: Money
     net_income: Money
     deductible_expenses: List[CategoryExpense] = []
     quarterly_breakdown: List[QuarterBreakdown] = []
     properties: List[PropertyTaxLine] = []


class RentRollLine(ApiModel):
     property_id: int
     property_name: str
     status: str
     monthly_rent: Money
     tenant_name: Optional[str] = None
     lease_end: Optional[date] = None


class RentRoll(ApiModel):
     type: Literal["rent-roll"] = "rent-roll"
     as_of: date
     total_monthly_rent: Money
     total_annual_rent: Money
     occupancy_rate: Money
     properties: List[RentRollLine] = []


class InvoiceSummaryReport(ApiModel):
     type: Literal["invoice-summary"] = "invoice-summary"
     period: Optional[ReportPeriod] = None
     summary: InvoiceSummary
