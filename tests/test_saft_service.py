"""SAF-T PT validation and XML generation."""
import xml.etree.ElementTree as ET
from datetime import date, datetime
from decimal import Decimal

import pytest

from errors import ValidationError
from services.data_source import InMemoryFinancialDataSource
from services.records import InvoiceRecord, LineItemRecord
from services.saft_service import (
     GENESIS_HASH,
     compute_document_hash,
     export_filename,
     generate_saft_pt,
     requirements_info,
     validate_export_period,
     validate_export_request,
)

NS = {"s": "urn:OECD:StandardAuditFile-Tax:PT_1.04_01"}
TODAY = date(2026, 10, 18)
CREATED_ON = date(2025, 4, 2)


def _invoice(id, number, issue_date, amount="1200.00", status="paid", **kwargs):
     created = datetime.combine(issue_date, datetime.min.time()).replace(hour=9)
     values = dict(
          id=id,
          number=number,
          amount=Decimal(amount),
          issue_date=issue_date,
          due_date=issue_date.replace(day=8),
          status=status,
          created_at=created,
          updated_at=created,
          tenant_id=1,
          tenant_name="Ana Silva",
          tenant_tax_id="123456789",
          property_id=1,
          property_name="Rua Augusta 120",
          property_address="Rua Augusta 120, Lisboa",
     )
     values.update(kwargs)
     return InvoiceRecord(**values)


@pytest.fixture
def q1_source():
     return InMemoryFinancialDataSource(invoices=[
          _invoice(1, "INV-2025-00001", date(2025, 1, 1), paid_date=date(2025, 1, 5)),
          _invoice(2, "INV-2025-00002", date(2025, 2, 1), status="pending"),
          # Outside the Q1 period
          _invoice(3, "INV-2025-00003", date(2025, 4, 1)),
     ])


@pytest.fixture
def q1_request(company_info):
     return validate_export_request(
          {"fiscalYear": 2025, "startMonth": 1, "endMonth": 3, "companyInfo": company_info},
          today=TODAY,
     )


class TestValidation:

     def test_valid_request(self, q1_request):
          assert q1_request.fiscal_year == 2025
          assert q1_request.start_month == 1
          assert q1_request.end_month == 3
          assert q1_request.include_payments is True

     def test_defaults_to_full_year(self, company_info):
          request = validate_export_request({"fiscalYear": 2025, "companyInfo": company_info}, today=TODAY)
          assert (request.start_month, request.end_month) == (1, 12)

     def test_invalid_nif_and_postal_code_both_reported(self, company_info):
          company_info["nif"] = "123456788"
          company_info["address"]["postalCode"] = "1100053"
          with pytest.raises(ValidationError) as exc_info:
               validate_export_request({"fiscalYear": 2025, "companyInfo": company_info}, today=TODAY)

          errors = " | ".join(exc_info.value.errors)
          assert "Invalid Portuguese NIF" in errors
          assert "postal code" in errors
          assert len(exc_info.value.errors) == 2

     def test_structural_and_period_errors_combined(self, company_info):
          company_info["name"] = "A"
          with pytest.raises(ValidationError) as exc_info:
               validate_export_request(
                    {"fiscalYear": 2025, "startMonth": 6, "endMonth": 2, "companyInfo": company_info},
                    today=TODAY,
               )
          errors = exc_info.value.errors
          assert any("name" in e for e in errors)
          assert "Start month cannot be after end month" in errors
          assert exc_info.value.message.startswith("SAF-T export validation failed")

     def test_missing_company_info(self):
          with pytest.raises(ValidationError) as exc_info:
               validate_export_request({"fiscalYear": 2025}, today=TODAY)
          assert any("companyInfo" in e for e in exc_info.value.errors)

     def test_string_year_rejected(self, company_info):
          with pytest.raises(ValidationError):
               validate_export_request({"fiscalYear": "2025", "companyInfo": company_info}, today=TODAY)

     def test_unknown_field_rejected(self, company_info):
          with pytest.raises(ValidationError):
               validate_export_request(
                    {"fiscalYear": 2025, "companyInfo": company_info, "currency": "USD"}, today=TODAY
               )

     def test_non_object_payload(self):
          with pytest.raises(ValidationError):
               validate_export_request(["fiscalYear", 2025], today=TODAY)

     def test_period_rules(self):
          assert validate_export_period(2025, 1, 12, today=TODAY) == []
          assert validate_export_period(2027, 1, 12, today=TODAY) == []
          assert validate_export_period(1999, 1, 12, today=TODAY) == [
               "Invalid fiscal year (must be between 2000 and 2027)"
          ]
          assert validate_export_period(2028, 0, 13, today=TODAY) == [
               "Invalid fiscal year (must be between 2000 and 2027)",
               "Invalid start month (must be between 1 and 12)",
               "Invalid end month (must be between 1 and 12)",
          ]


class TestGeneration:

     def test_q1_totals(self, q1_source, q1_request):
          export = generate_saft_pt(q1_source, 1, q1_request, created_on=CREATED_ON)

          assert export.invoice_count == 2
          assert export.total_amount == Decimal("2400.00")
          assert "<TotalCredit>2400.00</TotalCredit>" in export.xml
          assert "<NumberOfEntries>2</NumberOfEntries>" in export.xml
          assert export.filename == "SAF-T_123456789_2025_01-03.xml"
          assert (export.start_date, export.end_date) == (date(2025, 1, 1), date(2025, 3, 31))

     def test_output_is_deterministic(self, q1_source, q1_request):
          first = generate_saft_pt(q1_source, 1, q1_request, created_on=CREATED_ON)
          second = generate_saft_pt(q1_source, 1, q1_request, created_on=CREATED_ON)
          assert first.xml == second.xml

     def test_document_structure(self, q1_source, q1_request):
          xml = generate_saft_pt(q1_source, 1, q1_request, created_on=CREATED_ON).xml
          assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<AuditFile')

          root = ET.fromstring(xml.encode("utf-8"))
          header = root.find("s:Header", NS)
          assert header.find("s:AuditFileVersion", NS).text == "1.04_01"
          assert header.find("s:TaxRegistrationNumber", NS).text == "123456789"
          assert header.find("s:DateCreated", NS).text == "2025-04-02"
          assert header.find("s:EndDate", NS).text == "2025-03-31"

          invoices = root.findall("s:SourceDocuments/s:SalesInvoices/s:Invoice", NS)
          assert [inv.find("s:InvoiceNo", NS).text for inv in invoices] == ["INV-2025-00001", "INV-2025-00002"]
          assert [inv.find("s:ATCUD", NS).text for inv in invoices] == ["PROMAN-1", "PROMAN-2"]

          line = invoices[0].find("s:Line", NS)
          assert line.find("s:TaxExemptionCode", NS).text == "M07"
          assert line.find("s:Tax/s:TaxCode", NS).text == "ISE"
          assert line.find("s:CreditAmount", NS).text == "1200.00"

          # Only the paid invoice carries a payment
          assert invoices[0].find("s:DocumentTotals/s:Payment", NS) is not None
          assert invoices[1].find("s:DocumentTotals/s:Payment", NS) is None

     def test_hashes_are_chained(self, q1_source, q1_request):
          xml = generate_saft_pt(q1_source, 1, q1_request, created_on=CREATED_ON).xml
          root = ET.fromstring(xml.encode("utf-8"))
          hashes = [h.text for h in root.iter("{urn:OECD:StandardAuditFile-Tax:PT_1.04_01}Hash")]

          first = compute_document_hash(date(2025, 1, 1), datetime(2025, 1, 1, 9), "INV-2025-00001",
                                        Decimal("1200.00"), GENESIS_HASH)
          second = compute_document_hash(date(2025, 2, 1), datetime(2025, 2, 1, 9), "INV-2025-00002",
                                         Decimal("1200.00"), first)
          assert hashes == [first, second]

     def test_line_items_drive_total_credit(self, q1_request):
          source = InMemoryFinancialDataSource(invoices=[
               _invoice(1, "INV-2025-00001", date(2025, 3, 1), amount="1260.00", line_items=(
                    LineItemRecord("Monthly Rent", Decimal("1"), Decimal("1200.00"), Decimal("1200.00")),
                    LineItemRecord("Late fee", Decimal("1"), Decimal("60.00"), Decimal("60.00")),
               )),
          ])
          export = generate_saft_pt(source, 1, q1_request, created_on=CREATED_ON)
          assert "<TotalCredit>1260.00</TotalCredit>" in export.xml
          assert export.xml.count("<Line>") == 2

     def test_lines_not_matching_amount_exported_as_one_line(self, q1_request):
          source = InMemoryFinancialDataSource(invoices=[
               _invoice(1, "INV-2025-00001", date(2025, 1, 1)),
               _invoice(2, "INV-2025-00002", date(2025, 3, 1), amount="1500.00", description="Rent March", line_items=(
                    LineItemRecord("Monthly Rent", Decimal("1"), Decimal("1200.00"), Decimal("1200.00")),
               )),
          ])
          export = generate_saft_pt(source, 1, q1_request, created_on=CREATED_ON)
          root = ET.fromstring(export.xml.encode("utf-8"))
          lines = root.findall(".//s:Invoice[s:InvoiceNo='INV-2025-00002']/s:Line", NS)
          assert len(lines) == 1
          assert lines[0].find("s:CreditAmount", NS).text == "1500.00"
          assert lines[0].find("s:Description", NS).text == "Rent March"
          assert "<TotalCredit>2700.00</TotalCredit>" in export.xml
          assert export.total_amount == Decimal("2700.00")

     def test_cancelled_invoice_marked(self, q1_request):
          source = InMemoryFinancialDataSource(invoices=[
               _invoice(1, "INV-2025-00001", date(2025, 1, 1), status="cancelled"),
          ])
          export = generate_saft_pt(source, 1, q1_request, created_on=CREATED_ON)
          assert "<InvoiceStatus>A</InvoiceStatus>" in export.xml

     def test_customer_without_valid_nif_uses_final_consumer_tax_id(self, q1_request):
          source = InMemoryFinancialDataSource(invoices=[
               _invoice(1, "INV-2025-00001", date(2025, 1, 1), tenant_tax_id=None),
          ])
          xml = generate_saft_pt(source, 1, q1_request, created_on=CREATED_ON).xml
          assert "<CustomerTaxID>999999990</CustomerTaxID>" in xml

     def test_empty_period(self, q1_request):
          export = generate_saft_pt(InMemoryFinancialDataSource(), 1, q1_request, created_on=CREATED_ON)
          assert export.invoice_count == 0
          assert export.total_amount == Decimal("0.00")
          assert "<TotalCredit>0.00</TotalCredit>" in export.xml
          assert "<CustomerID>CONSUMIDOR_FINAL</CustomerID>" in export.xml


def test_export_filename_pads_months():
     assert export_filename("123456789", 2025, 1, 12) == "SAF-T_123456789_2025_01-12.xml"


def test_requirements_info_lists_exemption_code():
     info = requirements_info()
     assert info["version"] == "1.04_01"
     assert "M07" in info["taxExemptionCodes"]
     assert "FT" in info["documentTypes"]
