# services/saft_service.py
"""
SAF-T PT (Standard Audit File for Tax, Portugal) export, version 1.04_01.

Validation runs in two phases that always both run: structural rules from
the SaftExportRequest schema, then period rules. Every violation from both is
raised together in a single ValidationError.

Generation is deterministic: for the same invoices, request and created_on
date the XML is byte-identical.
"""
import base64
import calendar
import hashlib
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError, format_pydantic_errors
from schemas.saft import SaftExportRequest
from services.data_source import FinancialDataSource
from services.money import ZERO, format_amount, to_money
from services.records import InvoiceRecord, LineItemRecord
from utils.nif import validate_nif

logger = logging.getLogger(__name__)

SAFT_VERSION = "1.04_01"
SAFT_NAMESPACE = "urn:OECD:StandardAuditFile-Tax:PT_1.04_01"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

MIN_FISCAL_YEAR = 2000

# VAT exemption for residential rentals
TAX_EXEMPTION_CODE = "M07"
TAX_EXEMPTION_REASON = "Isento nos termos do art.º 9.º do CIVA"
TAX_CODE_EXEMPT = "ISE"

DOCUMENT_TYPES = {
     "FT": "Fatura (Invoice)",
     "FS": "Fatura Simplificada (Simplified Invoice)",
     "NC": "Nota de Crédito (Credit Note)",
     "ND": "Nota de Débito (Debit Note)",
     "RG": "Recibo (Receipt)",
}
INVOICE_STATUS_NORMAL = "N"
INVOICE_STATUS_CANCELLED = "A"

ATCUD_SERIES = "PROMAN"
GENESIS_HASH = ""
FINAL_CONSUMER_ID = "CONSUMIDOR_FINAL"
FINAL_CONSUMER_TAX_ID = "999999990"
PRODUCT_CODE = "RENT"
SOFTWARE_TAX_ID = "999999999"
SOFTWARE_PRODUCT_ID = "ProMan/ProMan"
SOFTWARE_VERSION = "1.0"

__all__ = [
     "SAFT_VERSION",
     "SaftExport",
     "validate_nif",
     "validate_export_period",
     "validate_export_request",
     "generate_saft_pt",
     "compute_document_hash",
     "export_filename",
     "requirements_info",
]


@dataclass(frozen=True)
class SaftExport:
     xml: str
     filename: str
     invoice_count: int
     total_amount: Decimal
     fiscal_year: int
     start_date: date
     end_date: date


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _is_int(value: Any) -> bool:
     return isinstance(value, int) and not isinstance(value, bool)


def validate_export_period(fiscal_year: Any, start_month: Any = 1, end_month: Any = 12,
                           today: Optional[date] = None) -> List[str]:
     """
     Period rules. Returns every violation found; values that are not integers
     are skipped here since the schema already reports them.
     """
     errors = []
     max_year = (today or date.today()).year + 1
     if _is_int(fiscal_year) and not MIN_FISCAL_YEAR <= fiscal_year <= max_year:
          errors.append(f"Invalid fiscal year (must be between {MIN_FISCAL_YEAR} and {max_year})")

     start_ok = _is_int(start_month) and 1 <= start_month <= 12
     end_ok = _is_int(end_month) and 1 <= end_month <= 12
     if _is_int(start_month) and not start_ok:
          errors.append("Invalid start month (must be between 1 and 12)")
     if _is_int(end_month) and not end_ok:
          errors.append("Invalid end month (must be between 1 and 12)")
     if start_ok and end_ok and start_month > end_month:
          errors.append("Start month cannot be after end month")
     return errors


def _raw(payload: Dict[str, Any], alias: str, name: str, default: Any) -> Any:
     if alias in payload:
          return payload[alias]
     return payload.get(name, default)


def validate_export_request(payload: Any, today: Optional[date] = None) -> SaftExportRequest:
     """
     Validate a raw export payload.

     Raises:
          ValidationError: With every structural and period violation.
     """
     if not isinstance(payload, dict):
          raise ValidationError("SAF-T export request must be a JSON object")

     errors: List[str] = []
     request = None
     try:
          request = SaftExportRequest.model_validate(payload)
     except PydanticValidationError as e:
          errors.extend(format_pydantic_errors(e))

     errors.extend(validate_export_period(
          _raw(payload, "fiscalYear", "fiscal_year", None),
          _raw(payload, "startMonth", "start_month", 1),
          _raw(payload, "endMonth", "end_month", 12),
          today=today,
     ))

     if errors:
          raise ValidationError(f"SAF-T export validation failed: {'; '.join(errors)}", errors=errors)
     return request


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def period_bounds(fiscal_year: int, start_month: int, end_month: int):
     last_day = calendar.monthrange(fiscal_year, end_month)[1]
     return date(fiscal_year, start_month, 1), date(fiscal_year, end_month, last_day)


def export_filename(nif: str, fiscal_year: int, start_month: int, end_month: int) -> str:
     return f"SAF-T_{nif}_{fiscal_year}_{start_month:02d}-{end_month:02d}.xml"


def _saft_datetime(value: datetime) -> str:
     return value.strftime("%Y-%m-%dT%H:%M:%S")


def compute_document_hash(invoice_date: date, system_entry: datetime, invoice_no: str,
                          gross_total: Decimal, previous_hash: str) -> str:
     """
     SHA-256 over "date;entry;number;gross;previous", base64-encoded.

     Each document hash includes the previous one, so altering or removing a
     document changes every hash after it.
     """
     payload = ";".join([
          invoice_date.isoformat(),
          _saft_datetime(system_entry),
          invoice_no,
          format_amount(gross_total),
          previous_hash,
     ])
     digest = hashlib.sha256(payload.encode("utf-8")).digest()
     return base64.b64encode(digest).decode("ascii")


def _quantity(value: Decimal) -> str:
     return format(value.normalize(), "f")


def _sub(parent: ET.Element, tag: str, text: Any = None) -> ET.Element:
     elem = ET.SubElement(parent, tag)
     if text is not None:
          elem.text = str(text)
     return elem


def _invoice_lines(invoice: InvoiceRecord) -> List[LineItemRecord]:
     """Stored lines when they add up to the invoice amount, otherwise one line for the whole amount."""
     if invoice.line_items and sum((to_money(i.total) for i in invoice.line_items), ZERO) == to_money(invoice.amount):
          return list(invoice.line_items)
     description = invoice.description or "Renda mensal"
     return [LineItemRecord(description=description, quantity=Decimal("1"),
                            unit_price=invoice.amount, total=invoice.amount)]


def _build_header(root: ET.Element, request: SaftExportRequest, start: date, end: date,
                  created_on: date) -> None:
     company = request.company_info
     header = _sub(root, "Header")
     _sub(header, "AuditFileVersion", SAFT_VERSION)
     _sub(header, "CompanyID", company.nif)
     _sub(header, "TaxRegistrationNumber", company.nif)
     _sub(header, "TaxAccountingBasis", "F")
     _sub(header, "CompanyName", company.name)

     address = _sub(header, "CompanyAddress")
     if company.address.building_number:
          _sub(address, "BuildingNumber", company.address.building_number)
     if company.address.street_name:
          _sub(address, "StreetName", company.address.street_name)
     _sub(address, "AddressDetail", company.address.address_detail)
     _sub(address, "City", company.address.city)
     _sub(address, "PostalCode", company.address.postal_code)
     if company.address.region:
          _sub(address, "Region", company.address.region)
     _sub(address, "Country", company.address.country)

     _sub(header, "FiscalYear", request.fiscal_year)
     _sub(header, "StartDate", start.isoformat())
     _sub(header, "EndDate", end.isoformat())
     _sub(header, "CurrencyCode", "EUR")
     _sub(header, "DateCreated", created_on.isoformat())
     _sub(header, "TaxEntity", company.tax_entity or "Global")
     _sub(header, "ProductCompanyTaxID", SOFTWARE_TAX_ID)
     _sub(header, "SoftwareCertificateNumber", "0")
     _sub(header, "ProductID", SOFTWARE_PRODUCT_ID)
     _sub(header, "ProductVersion", SOFTWARE_VERSION)


def _customer_id(invoice: InvoiceRecord) -> str:
     return str(invoice.tenant_id) if invoice.tenant_id is not None else FINAL_CONSUMER_ID


def _build_master_files(root: ET.Element, invoices: List[InvoiceRecord]) -> None:
     master = _sub(root, "MasterFiles")

     customers: Dict[str, dict] = {}
     for invoice in invoices:
          customer_id = _customer_id(invoice)
          if customer_id in customers:
               continue
          if invoice.tenant_id is None:
               customers[customer_id] = {"tax_id": FINAL_CONSUMER_TAX_ID, "name": "Consumidor Final",
                                         "address": "Desconhecido"}
          else:
               tax_id = invoice.tenant_tax_id if validate_nif(invoice.tenant_tax_id) else FINAL_CONSUMER_TAX_ID
               customers[customer_id] = {"tax_id": tax_id, "name": invoice.tenant_name or "Desconhecido",
                                         "address": invoice.property_address or "Desconhecido"}
     if not customers:
          customers[FINAL_CONSUMER_ID] = {"tax_id": FINAL_CONSUMER_TAX_ID, "name": "Consumidor Final",
                                          "address": "Desconhecido"}

     for customer_id, info in customers.items():
          customer = _sub(master, "Customer")
          _sub(customer, "CustomerID", customer_id)
          _sub(customer, "AccountID", "Desconhecido")
          _sub(customer, "CustomerTaxID", info["tax_id"])
          _sub(customer, "CompanyName", info["name"])
          billing = _sub(customer, "BillingAddress")
          _sub(billing, "AddressDetail", info["address"])
          _sub(billing, "City", "Desconhecido")
          _sub(billing, "PostalCode", "0000-000")
          _sub(billing, "Country", "PT")
          _sub(customer, "SelfBillingIndicator", 0)

     product = _sub(master, "Product")
     _sub(product, "ProductType", "S")
     _sub(product, "ProductCode", PRODUCT_CODE)
     _sub(product, "ProductGroup", "Services")
     _sub(product, "ProductDescription", "Property Rental Services")
     _sub(product, "ProductNumberCode", PRODUCT_CODE)


def _build_invoice(parent: ET.Element, invoice: InvoiceRecord, sequence: int, source_id: str,
                   previous_hash: str, include_payments: bool) -> tuple:
     """Append one <Invoice>; returns (hash, total credit of its lines)."""
     lines = _invoice_lines(invoice)
     gross_total = to_money(invoice.amount)
     document_hash = compute_document_hash(
          invoice.issue_date, invoice.created_at, invoice.number, gross_total, previous_hash,
     )

     elem = _sub(parent, "Invoice")
     _sub(elem, "InvoiceNo", invoice.number)
     _sub(elem, "ATCUD", f"{ATCUD_SERIES}-{sequence}")
     status = _sub(elem, "DocumentStatus")
     _sub(status, "InvoiceStatus",
          INVOICE_STATUS_CANCELLED if invoice.status == "cancelled" else INVOICE_STATUS_NORMAL)
     _sub(status, "InvoiceStatusDate", _saft_datetime(invoice.updated_at))
     _sub(status, "SourceID", source_id)
     _sub(status, "SourceBilling", "P")
     _sub(elem, "Hash", document_hash)
     _sub(elem, "HashControl", "1")
     _sub(elem, "Period", invoice.issue_date.month)
     _sub(elem, "InvoiceDate", invoice.issue_date.isoformat())
     _sub(elem, "InvoiceType", "FT")
     _sub(elem, "SelfBillingIndicator", 0)
     _sub(elem, "SourceID", source_id)
     _sub(elem, "SystemEntryDate", _saft_datetime(invoice.created_at))
     _sub(elem, "CustomerID", _customer_id(invoice))

     credit = ZERO
     for number, item in enumerate(lines, start=1):
          line = _sub(elem, "Line")
          _sub(line, "LineNumber", number)
          _sub(line, "ProductCode", PRODUCT_CODE)
          _sub(line, "ProductDescription", item.description or "Renda")
          _sub(line, "Quantity", _quantity(item.quantity))
          _sub(line, "UnitOfMeasure", "UN")
          _sub(line, "UnitPrice", format_amount(item.unit_price))
          _sub(line, "TaxPointDate", invoice.issue_date.isoformat())
          _sub(line, "Description", item.description or "Renda mensal")
          _sub(line, "CreditAmount", format_amount(item.total))
          tax = _sub(line, "Tax")
          _sub(tax, "TaxType", "IVA")
          _sub(tax, "TaxCountryRegion", "PT")
          _sub(tax, "TaxCode", TAX_CODE_EXEMPT)
          _sub(tax, "TaxPercentage", "0.00")
          _sub(line, "TaxExemptionReason", f"{TAX_EXEMPTION_CODE} - {TAX_EXEMPTION_REASON}")
          _sub(line, "TaxExemptionCode", TAX_EXEMPTION_CODE)
          credit += to_money(item.total)

     totals = _sub(elem, "DocumentTotals")
     _sub(totals, "TaxPayable", "0.00")
     _sub(totals, "NetTotal", format_amount(gross_total))
     _sub(totals, "GrossTotal", format_amount(gross_total))
     if include_payments and invoice.paid_date is not None:
          payment = _sub(totals, "Payment")
          _sub(payment, "PaymentMechanism", "OU")
          _sub(payment, "PaymentAmount", format_amount(gross_total))
          _sub(payment, "PaymentDate", invoice.paid_date.isoformat())

     return document_hash, credit


def generate_saft_pt(source: FinancialDataSource, user_id: int, request: SaftExportRequest,
                     created_on: Optional[date] = None) -> SaftExport:
     """
     Build the SAF-T PT XML for the user's invoices issued in the requested period.

     Args:
          source: Where invoices are read from
          user_id: Owner of the invoices
          request: A validated export request
          created_on: Value of <DateCreated>; today when omitted
     """
     start, end = period_bounds(request.fiscal_year, request.start_month, request.end_month)
     invoices = source.list_invoices(user_id, start, end)
     source_id = str(user_id)

     root = ET.Element("AuditFile")
     root.set("xmlns", SAFT_NAMESPACE)
     root.set("xmlns:xsi", XSI_NAMESPACE)
     _build_header(root, request, start, end, created_on or date.today())
     _build_master_files(root, invoices)

     source_documents = _sub(root, "SourceDocuments")
     sales = _sub(source_documents, "SalesInvoices")
     _sub(sales, "NumberOfEntries", len(invoices))
     _sub(sales, "TotalDebit", "0.00")
     total_credit_elem = _sub(sales, "TotalCredit")

     total_credit = ZERO
     previous_hash = GENESIS_HASH
     for sequence, invoice in enumerate(invoices, start=1):
          previous_hash, credit = _build_invoice(
               sales, invoice, sequence, source_id, previous_hash, request.include_payments,
          )
          total_credit += credit
     total_credit_elem.text = format_amount(total_credit)

     ET.indent(root, space="  ")
     xml = '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"

     logger.info(
          "SAF-T export for user %s %s..%s: %d invoices, total %s",
          user_id, start, end, len(invoices), format_amount(total_credit),
     )

     return SaftExport(
          xml=xml,
          filename=export_filename(request.company_info.nif, request.fiscal_year,
                                   request.start_month, request.end_month),
          invoice_count=len(invoices),
          total_amount=to_money(total_credit),
          fiscal_year=request.fiscal_year,
          start_date=start,
          end_date=end,
     )


def requirements_info() -> dict:
     """Static description of what an export needs."""
     return {
          "version": SAFT_VERSION,
          "description": "SAF-T PT (Standard Audit File for Tax - Portugal)",
          "requirements": {
               "companyInfo": {
                    "nif": "Valid 9-digit Portuguese NIF (Número de Identificação Fiscal)",
                    "name": "Company/landlord legal name",
                    "address": {
                         "addressDetail": "Full address line",
                         "city": "City name",
                         "postalCode": "Portuguese postal code (format: XXXX-XXX)",
                         "country": "Country code (default: PT)",
                    },
               },
               "period": {
                    "fiscalYear": f"Year ({MIN_FISCAL_YEAR} - current year + 1)",
                    "startMonth": "Start month (1-12, default: 1)",
                    "endMonth": "End month (1-12, default: 12)",
               },
          },
          "taxExemptionCodes": {
               TAX_EXEMPTION_CODE: f"{TAX_EXEMPTION_REASON} (residential rental exemption)",
          },
          "documentTypes": DOCUMENT_TYPES,
     }
