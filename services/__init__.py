from .invoice_service import InvoiceService, calculate_late_fee
from .receipt_service import ReceiptService
from .expense_service import ExpenseService
from .correspondence_service import CorrespondenceService, substitute_variables

__all__ = [
     "InvoiceService",
     "calculate_late_fee",
     "ReceiptService",
     "ExpenseService",
     "CorrespondenceService",
     "substitute_variables",
]
