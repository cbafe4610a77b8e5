# routers/__init__.py
from . import correspondence, expenses, invoices, properties, receipts, reports, tax, tenants

__all__ = [
     "correspondence",
     "expenses",
     "invoices",
     "properties",
     "receipts",
     "reports",
     "tax",
     "tenants",
]
