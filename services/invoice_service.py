# services/invoice_service.py
"""
Invoice Service - Business logic layer for invoice operations.

This service handles invoice creation, numbering, status transitions,
late fees and batch operations separate from the API layer. Every query is
scoped by the owning user.
"""
import calendar
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from config import LateFeeConfig
from errors import ConflictError, NotFoundError, ValidationError
from models import Invoice, Property, Receipt, Tenant
from models.invoice import InvoiceStatus
from models.receipt import ReceiptStatus, ReceiptType
from schemas.invoice import InvoiceCreate, InvoiceUpdate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
     return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _line_item_json(description: str, quantity: Decimal, unit_price: Decimal, total: Decimal) -> dict:
     """Line items are stored with string amounts so they read back as exact Decimals."""
     return {
          "description": description,
          "quantity": str(quantity),
          "unit_price": str(_money(unit_price)),
          "total": str(_money(total)),
     }


def _lines_total(line_items: List[dict]) -> Decimal:
     return sum((Decimal(item["total"]) for item in line_items), Decimal("0.00"))


def _amount_for_lines(amount: Optional[Decimal], line_items: List[dict]) -> Decimal:
     """
     Invoice amount for a set of stored line items.

     Without line items the explicit amount is used as is. With line items the
     amount is their sum, and an explicit amount must match it.

     Raises:
          ValidationError: If an explicit amount differs from the line-item sum
     """
     if not line_items:
          return amount if amount is not None else Decimal("0.00")
     total = _money(_lines_total(line_items))
     if amount is not None and _money(amount) != total:
          raise ValidationError(
               f"Invoice amount {_money(amount)} does not match the line item total {total}",
               field="amount",
          )
     return total


def _rescale_lines(line_items: List[dict], description: str, amount: Decimal) -> List[dict]:
     """Line items for a new invoice amount: a single line keeps its text, several collapse into one."""
     if len(line_items) == 1:
          description = line_items[0].get("description") or description
     return [_line_item_json(description, Decimal("1"), amount, amount)]


def calculate_late_fee(
     amount: Decimal,
     due_date: date,
     config: LateFeeConfig,
     today: Optional[date] = None
) -> Tuple[Decimal, int]:
     """
     Calculate the late fee owed on an invoice.

     Args:
          amount: Invoice amount the percentage applies to
          due_date: Payment due date
          config: Late fee policy
          today: Reference date (default: today)

     Returns:
          (fee, days overdue after the grace period); (0, 0) inside the grace
          period or when late fees are disabled
     """
     if not config.enabled:
          return Decimal("0.00"), 0

     days_late = ((today or date.today()) - due_date).days
     if days_late <= config.grace_period_days:
          return Decimal("0.00"), 0

     fee = Decimal(amount) * config.percentage_rate / 100 + config.flat_fee
     if config.max_percentage:
          fee = min(fee, Decimal(amount) * config.max_percentage / 100)

     return _money(fee), days_late - config.grace_period_days


class InvoiceService:
     """Service class for invoice-related business logic."""

     @staticmethod
     def next_invoice_number(db: Session, user_id: int, year: int) -> str:
          """
          Next number in the user's INV-{YEAR}-{SEQ} series.

          The sequence restarts at 00001 every year.
          """
          prefix = f"INV-{year}-"
          last = (
               db.query(Invoice.number)
               .filter(Invoice.user_id == user_id, Invoice.number.like(f"{prefix}%"))
               .order_by(Invoice.number.desc())
               .first()
          )
          sequence = 1
          if last:
               try:
                    sequence = int(last[0][len(prefix):]) + 1
               except ValueError:
                    sequence = 1
          return f"{prefix}{sequence:05d}"

     @staticmethod
     def get_invoice(db: Session, user_id: int, invoice_id: int) -> Invoice:
          """
          Fetch one of the user's invoices.

          Raises:
               NotFoundError: If the invoice does not exist or belongs to someone else
          """
          invoice = (
               db.query(Invoice)
               .options(joinedload(Invoice.tenant), joinedload(Invoice.property))
               .filter(Invoice.id == invoice_id, Invoice.user_id == user_id)
               .first()
          )
          if not invoice:
               raise NotFoundError(f"Invoice with ID {invoice_id} not found")
          return invoice

     @staticmethod
     def list_invoices(
          db: Session,
          user_id: int,
          status: Optional[InvoiceStatus] = None,
          tenant_id: Optional[int] = None,
          property_id: Optional[int] = None,
          overdue_only: bool = False,
          page: int = 1,
          page_size: int = 50
     ) -> Tuple[List[Invoice], int]:
          """
          Paginated invoice list, newest due date first.

          Returns:
               (invoices on the page, total matching count)
          """
          query = db.query(Invoice).filter(Invoice.user_id == user_id)

          if status:
               query = query.filter(Invoice.status == status)
          if tenant_id:
               query = query.filter(Invoice.tenant_id == tenant_id)
          if property_id:
               query = query.filter(Invoice.property_id == property_id)
          if overdue_only:
               query = query.filter(
                    Invoice.status == InvoiceStatus.PENDING,
                    Invoice.due_date < date.today()
               )

          total = query.count()
          offset = (page - 1) * page_size
          invoices = (
               query.options(joinedload(Invoice.tenant), joinedload(Invoice.property))
               .order_by(Invoice.due_date.desc(), Invoice.id.desc())
               .offset(offset)
               .limit(page_size)
               .all()
          )
          return invoices, total

     @staticmethod
     def _check_references(db: Session, user_id: int, tenant_id: Optional[int], property_id: Optional[int]):
          tenant = prop = None
          if tenant_id is not None:
               tenant = db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.user_id == user_id).first()
               if not tenant:
                    raise NotFoundError(f"Tenant with ID {tenant_id} not found")
          if property_id is not None:
               prop = db.query(Property).filter(Property.id == property_id, Property.user_id == user_id).first()
               if not prop:
                    raise NotFoundError(f"Property with ID {property_id} not found")
          return tenant, prop

     @staticmethod
     def create_invoice(db: Session, user_id: int, data: InvoiceCreate, today: Optional[date] = None) -> Invoice:
          """
          Create a pending invoice.

          The amount defaults to the sum of the line items and the issue date
          to today.

          Raises:
               NotFoundError: If the tenant or property is not the user's
               ValidationError: If the resulting amount is not positive
               ConflictError: If the generated number collides with another invoice
          """
          InvoiceService._check_references(db, user_id, data.tenant_id, data.property_id)

          issue_date = data.issue_date or today or date.today()
          line_items = [
               _line_item_json(item.description, item.quantity, item.unit_price, item.total)
               for item in data.line_items
          ]
          amount = _amount_for_lines(data.amount, line_items)
          if amount <= 0:
               raise ValidationError("Invoice amount must be greater than zero", field="amount")

          details = {}
          if data.notes:
               details["notes"] = data.notes

          invoice = Invoice(
               user_id=user_id,
               number=InvoiceService.next_invoice_number(db, user_id, issue_date.year),
               tenant_id=data.tenant_id,
               property_id=data.property_id,
               amount=_money(amount),
               issue_date=issue_date,
               due_date=data.due_date,
               status=InvoiceStatus.PENDING,
               description=data.description,
               line_items=line_items,
               details=details,
          )

          db.add(invoice)
          try:
               db.flush()  # Flush to get the ID without committing
          except IntegrityError as e:
               db.rollback()
               raise ConflictError(f"Invoice number {invoice.number} already exists") from e

          logger.info("Created invoice %s for user %s (amount %s)", invoice.number, user_id, invoice.amount)
          return invoice

     @staticmethod
     def update_invoice(db: Session, user_id: int, invoice_id: int, data: InvoiceUpdate) -> Invoice:
          """
          Update editable fields; a status in the payload goes through transition().

          Raises:
               NotFoundError: If the invoice is missing
               ConflictError: If the invoice is paid/cancelled or the status change is not allowed
          """
          invoice = InvoiceService.get_invoice(db, user_id, invoice_id)
          editing = any(value is not None for value in (
               data.amount, data.due_date, data.description, data.line_items,
          ))
          if editing and invoice.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
               raise ConflictError(f"Cannot edit a {invoice.status.value} invoice")

          # Amount and line items always agree
          if data.line_items is not None:
               line_items = [
                    _line_item_json(item.description, item.quantity, item.unit_price, item.total)
                    for item in data.line_items
               ]
               amount = _amount_for_lines(data.amount, line_items)
               if amount <= 0:
                    raise ValidationError("Invoice amount must be greater than zero", field="amount")
               invoice.line_items = line_items
               invoice.amount = amount
          elif data.amount is not None:
               amount = _money(data.amount)
               if invoice.line_items and _money(_lines_total(invoice.line_items)) != amount:
                    invoice.line_items = _rescale_lines(
                         invoice.line_items, data.description or invoice.description or "Renda mensal", amount,
                    )
               invoice.amount = amount
          if data.due_date is not None:
               if data.due_date < invoice.issue_date:
                    raise ValidationError("Due date must be on or after the issue date", field="dueDate")
               invoice.due_date = data.due_date
          if data.description is not None:
               invoice.description = data.description
          if data.notes is not None:
               invoice.details = {**(invoice.details or {}), "notes": data.notes}

          if data.status is not None and data.status.value != invoice.status.value:
               InvoiceService.transition(db, user_id, invoice.id, InvoiceStatus(data.status.value))

          db.flush()
          return invoice

     @staticmethod
     def transition(
          db: Session,
          user_id: int,
          invoice_id: int,
          new_status: InvoiceStatus,
          paid_date: Optional[date] = None,
          payment_method: Optional[str] = None,
          reference_number: Optional[str] = None
     ) -> Invoice:
          """
          Move an invoice to a new status.

          pending -> paid | overdue | cancelled, overdue -> paid | cancelled.
          Paid and cancelled invoices are final.

          Raises:
               NotFoundError: If the invoice is missing
               ConflictError: If the transition is not allowed
          """
          invoice = InvoiceService.get_invoice(db, user_id, invoice_id)
          if not invoice.can_transition_to(new_status):
               raise ConflictError(
                    f"Cannot change invoice {invoice.number} from {invoice.status.value} to {new_status.value}"
               )

          if new_status == InvoiceStatus.PAID:
               invoice.mark_as_paid(paid_date)
               details = dict(invoice.details or {})
               if payment_method:
                    details["payment_method"] = payment_method
               if reference_number:
                    details["reference_number"] = reference_number
               invoice.details = details
          elif new_status == InvoiceStatus.OVERDUE:
               invoice.mark_as_overdue()
          else:
               invoice.cancel()

          db.flush()
          logger.info("Invoice %s is now %s", invoice.number, invoice.status.value)
          return invoice

     @staticmethod
     def delete_invoice(db: Session, user_id: int, invoice_id: int) -> None:
          """
          Delete an invoice. Only pending or cancelled invoices can be removed.

          Raises:
               ConflictError: If the invoice has been paid or is overdue
          """
          invoice = InvoiceService.get_invoice(db, user_id, invoice_id)
          if invoice.status not in (InvoiceStatus.PENDING, InvoiceStatus.CANCELLED):
               raise ConflictError(f"Cannot delete a {invoice.status.value} invoice")
          db.delete(invoice)
          db.flush()

     @staticmethod
     def generate_monthly_invoices(
          db: Session,
          user_id: int,
          due_date: date,
          month_label: Optional[str] = None,
          today: Optional[date] = None
     ) -> Tuple[List[Invoice], List[dict]]:
          """
          Generate rent invoices for every tenant whose lease covers due_date.

          Tenants already invoiced for the due month are skipped.

          Args:
               db: SQLAlchemy database session
               user_id: Owner
               due_date: Due date of the new invoices
               month_label: Text used in descriptions (default: "February 2026" style)
               today: Issue date (default: today)

          Returns:
               (created invoices, failures as {"tenant_id", "error"})
          """
          label = month_label or due_date.strftime("%B %Y")
          month_start = due_date.replace(day=1)
          month_end = due_date.replace(day=calendar.monthrange(due_date.year, due_date.month)[1])

          tenants = (
               db.query(Tenant)
               .options(joinedload(Tenant.property))
               .filter(
                    Tenant.user_id == user_id,
                    Tenant.lease_start <= due_date,
                    Tenant.lease_end >= due_date,
               )
               .order_by(Tenant.id)
               .all()
          )

          created, failed = [], []
          for tenant in tenants:
               # Check if invoice already exists for this month
               existing = db.query(Invoice).filter(
                    Invoice.user_id == user_id,
                    Invoice.tenant_id == tenant.id,
                    Invoice.due_date >= month_start,
                    Invoice.due_date <= month_end,
                    Invoice.status != InvoiceStatus.CANCELLED,
               ).first()
               if existing:
                    continue

               if tenant.property is None:
                    failed.append({"tenant_id": tenant.id, "error": "Tenant is not assigned to a property"})
                    continue
               if not tenant.rent or tenant.rent <= 0:
                    failed.append({"tenant_id": tenant.id, "error": "Tenant rent must be greater than zero"})
                    continue

               rent = _money(tenant.rent)
               invoice = InvoiceService.create_invoice(
                    db,
                    user_id,
                    InvoiceCreate(
                         tenant_id=tenant.id,
                         property_id=tenant.property_id,
                         issue_date=min(today or date.today(), due_date),
                         due_date=due_date,
                         description=f"Rent for {label} - {tenant.property.name}",
                         line_items=[{
                              "description": f"Monthly Rent - {tenant.property.name}",
                              "quantity": 1,
                              "unit_price": rent,
                         }],
                    ),
               )
               created.append(invoice)

          logger.info(
               "Monthly invoices for user %s due %s: %d created, %d failed",
               user_id, due_date, len(created), len(failed),
          )
          return created, failed

     @staticmethod
     def apply_late_fees(
          db: Session,
          user_id: int,
          config: LateFeeConfig,
          today: Optional[date] = None
     ) -> Tuple[List[Invoice], int]:
          """
          Mark unpaid invoices past their due date as OVERDUE and charge late fees.

          A fee is charged once per invoice, after the grace period. The fee is
          added to the amount and recorded as its own line item.

          Returns:
               (invoices charged a fee, number of invoices newly marked overdue)
          """
          today = today or date.today()
          candidates = (
               db.query(Invoice)
               .filter(
                    Invoice.user_id == user_id,
                    Invoice.status.in_([InvoiceStatus.PENDING, InvoiceStatus.OVERDUE]),
                    Invoice.due_date < today,
               )
               .order_by(Invoice.due_date, Invoice.id)
               .all()
          )

          charged = []
          marked = 0
          for invoice in candidates:
               if invoice.status == InvoiceStatus.PENDING:
                    invoice.mark_as_overdue()
                    marked += 1

               details = dict(invoice.details or {})
               if details.get("late_fee_applied"):
                    continue

               original = _money(invoice.amount)
               fee, days_overdue = calculate_late_fee(original, invoice.due_date, config, today)
               if fee <= 0:
                    continue

               line_items = list(invoice.line_items or [])
               if not line_items:
                    line_items.append(_line_item_json(
                         invoice.description or "Renda mensal", Decimal("1"), original, original,
                    ))
               line_items.append(_line_item_json(
                    f"Late fee ({days_overdue} days overdue)", Decimal("1"), fee, fee,
               ))

               invoice.amount = original + fee
               invoice.line_items = line_items
               invoice.details = {
                    **details,
                    "late_fee_applied": True,
                    "late_fee_percentage": str(config.percentage_rate),
                    "late_fee_amount": str(fee),
                    "original_amount": str(original),
                    "days_overdue": days_overdue,
               }
               charged.append(invoice)

          db.flush()
          logger.info("Late fees for user %s: %d charged, %d marked overdue", user_id, len(charged), marked)
          return charged, marked

     @staticmethod
     def create_receipts_from_paid_invoices(db: Session, user_id: int) -> dict:
          """
          Create a paid rent receipt for every paid invoice that has none yet.

          An invoice is skipped when it lacks a tenant, property or paid date,
          or when a receipt for it (or with the same tenant, property, amount
          and date) already exists.
          """
          result = {"created": 0, "skipped": 0}
          invoices = (
               db.query(Invoice)
               .filter(Invoice.user_id == user_id, Invoice.status == InvoiceStatus.PAID)
               .order_by(Invoice.id)
               .all()
          )

          for invoice in invoices:
               if not invoice.tenant_id or not invoice.property_id or not invoice.paid_date:
                    result["skipped"] += 1
                    continue

               existing = db.query(Receipt).filter(
                    Receipt.user_id == user_id,
                    (Receipt.invoice_id == invoice.id) | (
                         (Receipt.tenant_id == invoice.tenant_id)
                         & (Receipt.property_id == invoice.property_id)
                         & (Receipt.amount == invoice.amount)
                         & (Receipt.date == invoice.paid_date)
                    ),
               ).first()
               if existing:
                    result["skipped"] += 1
                    continue

               db.add(Receipt(
                    user_id=user_id,
                    tenant_id=invoice.tenant_id,
                    property_id=invoice.property_id,
                    invoice_id=invoice.id,
                    amount=invoice.amount,
                    date=invoice.paid_date,
                    type=ReceiptType.RENT,
                    status=ReceiptStatus.PAID,
                    description=f"Payment for Invoice {invoice.number}",
               ))
               result["created"] += 1

          db.flush()
          return result
