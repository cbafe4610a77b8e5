# models/__init__.py
from .base import Base
from .user import User
from .property import Property, PropertyStatus
from .tenant import Tenant, PaymentStatus
from .invoice import Invoice, InvoiceStatus
from .receipt import Receipt, ReceiptType, ReceiptStatus
from .expense import Expense
from .correspondence import CorrespondenceTemplate, Correspondence, CorrespondenceStatus

__all__ = [
     "Base",
     "User",
     "Property",
     "PropertyStatus",
     "Tenant",
     "PaymentStatus",
     "Invoice",
     "InvoiceStatus",
     "Receipt",
     "ReceiptType",
     "ReceiptStatus",
     "Expense",
     "CorrespondenceTemplate",
     "Correspondence",
     "CorrespondenceStatus",
]
