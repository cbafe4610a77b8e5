"""Financial, tax, rent roll and invoice summary reports."""
from datetime import date
from decimal import Decimal

import pytest

from errors import ValidationError
from services.data_source import InMemoryFinancialDataSource, SqlAlchemyFinancialDataSource
from services.report_service import (
     CSV_COLUMNS,
     current_month_range,
     financial_report_to_csv,
     generate_financial_report,
     generate_invoice_summary,
     generate_rent_roll,
     generate_tax_report,
     period_label,
)

Q1_START = date(2025, 1, 1)
Q1_END = date(2025, 3, 31)


@pytest.fixture
def source(db, seed):
     return SqlAlchemyFinancialDataSource(db)


# =============================================================================
# Financial report
# =============================================================================


class TestFinancialReport:

     def test_q1_totals(self, source, seed):
          report = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)

          # The pending March receipt is not income
          assert report.total_income == Decimal("3000.00")
          assert report.income.total_rent == Decimal("2400.00")
          assert report.income.total_deposits == Decimal("600.00")
          assert report.total_expenses == Decimal("400.00")
          assert report.net_income == Decimal("2600.00")
          assert report.profit_margin == Decimal("86.67")
          assert report.period.label == "Jan 2025 - Mar 2025"

     def test_expense_breakdown(self, source, seed):
          report = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)

          categories = [(c.category, c.amount, c.percentage) for c in report.expenses.by_category]
          assert categories == [
               ("maintenance", Decimal("300.00"), Decimal("75.00")),
               ("insurance", Decimal("100.00"), Decimal("25.00")),
          ]
          assert [p.property_name for p in report.expenses.by_property] == [
               "Rua Augusta 120", "Avenida da Boavista 45",
          ]

     def test_invoice_section(self, source, seed):
          report = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)

          summary = report.invoices.summary
          assert summary.total_paid == Decimal("1200.00")
          assert summary.total_pending == Decimal("1200.00")
          assert summary.invoice_count.paid == 1
          assert summary.invoice_count.pending == 1
          assert [inv.number for inv in report.invoices.list] == ["INV-2025-00001", "INV-2025-00002"]

     def test_entries_sorted_by_date(self, source, seed):
          report = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)
          assert [(e.date, e.kind) for e in report.entries] == [
               (date(2025, 1, 5), "income"),
               (date(2025, 1, 20), "expense"),
               (date(2025, 2, 6), "income"),
               (date(2025, 2, 15), "expense"),
               (date(2025, 3, 1), "income"),
          ]

     def test_empty_range_gives_zero_totals(self, source, seed):
          report = generate_financial_report(source, seed["user"].id, date(2024, 6, 1), date(2024, 6, 30))
          assert report.total_income == Decimal("0.00")
          assert report.total_expenses == Decimal("0.00")
          assert report.net_income == Decimal("0.00")
          assert report.profit_margin == Decimal("0.00")
          assert report.entries == []
          assert report.period.label == "Jun 2024"

     def test_is_idempotent(self, source, seed):
          first = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)
          second = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)
          assert first == second

     def test_scoped_to_user(self, source, seed, other_user):
          report = generate_financial_report(source, other_user.id, Q1_START, Q1_END)
          assert report.total_income == Decimal("0.00")
          assert report.invoices.list == []

     def test_inverted_range_rejected(self, source, seed):
          with pytest.raises(ValidationError):
               generate_financial_report(source, seed["user"].id, Q1_END, Q1_START)

     def test_defaults_to_current_month(self):
          report = generate_financial_report(InMemoryFinancialDataSource(), 1)
          start, end = current_month_range()
          assert (report.period.start_date, report.period.end_date) == (start, end)


class TestCsvExport:

     def test_rows(self, source, seed):
          report = generate_financial_report(source, seed["user"].id, Q1_START, Q1_END)
          lines = financial_report_to_csv(report).split("\n")

          assert lines[0] == ",".join(CSV_COLUMNS)
          assert lines[1] == "2025-01-05,Income,rent,Rua Augusta 120,Ana Silva,Rent January,1200.00"
          assert lines[2] == "2025-01-20,Expense,maintenance,Rua Augusta 120,,Boiler repair,300.00"
          # header + 5 entries + trailing newline
          assert len(lines) == 7
          assert lines[-1] == ""

     def test_empty_report_has_header_only(self):
          report = generate_financial_report(InMemoryFinancialDataSource(), 1, Q1_START, Q1_END)
          assert financial_report_to_csv(report) == ",".join(CSV_COLUMNS) + "\n"


# =============================================================================
# Tax report, rent roll, invoice summary
# =============================================================================


class TestTaxReport:

     def test_year_totals(self, source, seed):
          report = generate_tax_report(source, seed["user"].id, 2025)

          assert report.gross_income == Decimal("3000.00")
          assert report.total_expenses == Decimal("400.00")
          assert report.net_income == Decimal("2600.00")
          assert [c.category for c in report.deductible_expenses] == ["maintenance", "insurance"]

     def test_quarters(self, source, seed):
          report = generate_tax_report(source, seed["user"].id, 2025)
          quarters = {q.quarter: (q.income, q.expenses, q.net) for q in report.quarterly_breakdown}
          assert quarters["Q1"] == (Decimal("3000.00"), Decimal("400.00"), Decimal("2600.00"))
          assert quarters["Q4"] == (Decimal("0.00"), Decimal("0.00"), Decimal("0.00"))

     def test_per_property(self, source, seed):
          report = generate_tax_report(source, seed["user"].id, 2025)
          lines = {p.property_name: p.net for p in report.properties}
          assert lines == {
               "Rua Augusta 120": Decimal("2700.00"),
               "Avenida da Boavista 45": Decimal("-100.00"),
          }

     @pytest.mark.parametrize("year", [1999, date.today().year + 2])
     def test_year_out_of_range(self, year):
          with pytest.raises(ValidationError):
               generate_tax_report(InMemoryFinancialDataSource(), 1, year)


class TestRentRoll:

     def test_occupancy(self, source, seed):
          roll = generate_rent_roll(source, seed["user"].id, as_of=date(2025, 3, 15))

          assert roll.total_monthly_rent == Decimal("1200.00")
          assert roll.total_annual_rent == Decimal("14400.00")
          assert roll.occupancy_rate == Decimal("50.00")
          by_name = {line.property_name: line for line in roll.properties}
          assert by_name["Rua Augusta 120"].tenant_name == "Ana Silva"
          assert by_name["Avenida da Boavista 45"].tenant_name is None

     def test_expired_lease_not_counted(self, source, seed):
          roll = generate_rent_roll(source, seed["user"].id, as_of=date(2027, 6, 1))
          assert roll.total_monthly_rent == Decimal("0.00")
          assert roll.occupancy_rate == Decimal("0.00")

     def test_no_properties(self):
          roll = generate_rent_roll(InMemoryFinancialDataSource(), 1, as_of=date(2025, 1, 1))
          assert roll.occupancy_rate == Decimal("0.00")
          assert roll.properties == []


class TestInvoiceSummary:

     def test_unbounded(self, source, seed):
          report = generate_invoice_summary(source, seed["user"].id)
          assert report.period is None
          assert report.summary.total_paid == Decimal("1200.00")
          assert report.summary.total_pending == Decimal("1200.00")

     def test_range(self, source, seed):
          report = generate_invoice_summary(source, seed["user"].id, date(2025, 2, 1), date(2025, 2, 28))
          assert report.period.label == "Feb 2025"
          assert report.summary.invoice_count.pending == 1
          assert report.summary.invoice_count.paid == 0


def test_period_label():
     assert period_label(date(2025, 1, 1), date(2025, 1, 31)) == "Jan 2025"
     assert period_label(date(2024, 12, 1), date(2025, 2, 28)) == "Dec 2024 - Feb 2025"
