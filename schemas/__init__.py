from .common import DataResponse, ListResponse, PageMeta
from .invoice import (
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceResponse,
     MarkPaidRequest,
)
from .report import ReportRequest, report_request_adapter
from .saft import SaftExportRequest, SaftExportResponse

__all__ = [
     "DataResponse",
     "ListResponse",
     "PageMeta",
     "InvoiceCreate",
     "InvoiceUpdate",
     "InvoiceResponse",
     "MarkPaidRequest",
     "ReportRequest",
     "report_request_adapter",
     "SaftExportRequest",
     "SaftExportResponse",
]
