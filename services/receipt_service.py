# services/receipt_service.py
"""
Receipt Service - money received from tenants.

Paid receipts are the income side of every financial report.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from errors import NotFoundError, ValidationError
from models import Invoice, Property, Receipt, Tenant
from models.receipt import ReceiptStatus, ReceiptType
from schemas.receipt import ReceiptCreate, ReceiptUpdate

logger = logging.getLogger(__name__)


class ReceiptService:
     """Service class for receipt CRUD scoped by user."""

     @staticmethod
     def get_receipt(db: Session, user_id: int, receipt_id: int) -> Receipt:
          receipt = db.query(Receipt).filter(Receipt.id == receipt_id, Receipt.user_id == user_id).first()
          if not receipt:
               raise NotFoundError(f"Receipt with ID {receipt_id} not found")
          return receipt

     @staticmethod
     def list_receipts(
          db: Session,
          user_id: int,
          start: Optional[date] = None,
          end: Optional[date] = None,
          property_id: Optional[int] = None,
          tenant_id: Optional[int] = None,
          page: int = 1,
          page_size: int = 50
     ) -> Tuple[List[Receipt], int]:
          if start and end and start > end:
               raise ValidationError("Start date must be on or before end date", field="startDate")

          query = db.query(Receipt).filter(Receipt.user_id == user_id)
          if start:
               query = query.filter(Receipt.date >= start)
          if end:
               query = query.filter(Receipt.date <= end)
          if property_id:
               query = query.filter(Receipt.property_id == property_id)
          if tenant_id:
               query = query.filter(Receipt.tenant_id == tenant_id)

          total = query.count()
          receipts = (
               query.order_by(Receipt.date.desc(), Receipt.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
               .all()
          )
          return receipts, total

     @staticmethod
     def create_receipt(db: Session, user_id: int, data: ReceiptCreate) -> Receipt:
          """
          Record a receipt.

          Raises:
               NotFoundError: If the tenant, property or invoice is not the user's
          """
          if not db.query(Tenant.id).filter(Tenant.id == data.tenant_id, Tenant.user_id == user_id).first():
               raise NotFoundError(f"Tenant with ID {data.tenant_id} not found")
          if not db.query(Property.id).filter(Property.id == data.property_id, Property.user_id == user_id).first():
               raise NotFoundError(f"Property with ID {data.property_id} not found")
          if data.invoice_id is not None and not (
               db.query(Invoice.id).filter(Invoice.id == data.invoice_id, Invoice.user_id == user_id).first()
          ):
               raise NotFoundError(f"Invoice with ID {data.invoice_id} not found")

          receipt = Receipt(
               user_id=user_id,
               tenant_id=data.tenant_id,
               property_id=data.property_id,
               invoice_id=data.invoice_id,
               amount=data.amount,
               date=data.date,
               type=ReceiptType(data.type.value),
               status=ReceiptStatus(data.status.value),
               description=data.description,
          )
          db.add(receipt)
          db.flush()
          logger.info("Recorded receipt %s for user %s (amount %s)", receipt.id, user_id, receipt.amount)
          return receipt

     @staticmethod
     def update_receipt(db: Session, user_id: int, receipt_id: int, data: ReceiptUpdate) -> Receipt:
          receipt = ReceiptService.get_receipt(db, user_id, receipt_id)
          changes = data.model_dump(exclude_unset=True, exclude_none=True)
          if "type" in changes:
               changes["type"] = ReceiptType(changes["type"].value)
          if "status" in changes:
               changes["status"] = ReceiptStatus(changes["status"].value)
          for field, value in changes.items():
               setattr(receipt, field, value)
          db.flush()
          return receipt

     @staticmethod
     def delete_receipt(db: Session, user_id: int, receipt_id: int) -> None:
          receipt = ReceiptService.get_receipt(db, user_id, receipt_id)
          db.delete(receipt)
          db.flush()
