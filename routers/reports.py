# routers/reports.py
"""
Report API routes.

GET takes the request as query parameters and POST as a JSON body; both are
validated by the same discriminated union on `type`.
"""
import logging
from datetime import date
from typing import Any, Dict, Mapping

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError as PydanticValidationError

from dependencies import get_current_user_id, get_data_source
from errors import ValidationError, format_pydantic_errors
from schemas.common import DataResponse
from schemas.report import (
     FinancialReportQuery,
     InvoiceSummaryQuery,
     RentRollQuery,
     TaxReportQuery,
     report_request_adapter,
)
from services.data_source import FinancialDataSource
from services.report_service import (
     financial_report_to_csv,
     generate_financial_report,
     generate_invoice_summary,
     generate_rent_roll,
     generate_tax_report,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _parse_report_request(payload: Mapping[str, Any]):
     if not payload.get("type"):
          raise ValidationError("Report type is required", field="type")
     try:
          return report_request_adapter.validate_python(dict(payload))
     except PydanticValidationError as e:
          errors = format_pydantic_errors(e)
          raise ValidationError(f"Invalid report request: {', '.join(errors)}", errors=errors)


def _run_report(payload: Mapping[str, Any], source: FinancialDataSource, user_id: int):
     query = _parse_report_request(payload)
     logger.info("Generating %s report for user %s", query.type, user_id)

     if isinstance(query, FinancialReportQuery):
          report = generate_financial_report(source, user_id, query.start_date, query.end_date)
          if query.format == "csv":
               filename = f"financial-report-{date.today().isoformat()}.csv"
               return Response(
                    content=financial_report_to_csv(report),
                    media_type="text/csv",
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'},
               )
          return DataResponse(data=report)

     if isinstance(query, TaxReportQuery):
          return DataResponse(data=generate_tax_report(source, user_id, query.year))

     if isinstance(query, RentRollQuery):
          return DataResponse(data=generate_rent_roll(source, user_id, query.as_of))

     if isinstance(query, InvoiceSummaryQuery):
          return DataResponse(data=generate_invoice_summary(source, user_id, query.start_date, query.end_date))

     raise ValidationError(f"Unknown report type: {query.type}", field="type")


@router.get("", summary="Generate a report from query parameters")
def get_report(
     request: Request,
     source: FinancialDataSource = Depends(get_data_source),
     user_id: int = Depends(get_current_user_id)
):
     """
     - **type**: financial, tax, rent-roll or invoice-summary
     - **startDate** / **endDate**: financial and invoice-summary ranges
     - **year**: tax report year
     - **asOf**: rent roll date
     - **format**: json or csv (financial only)
     """
     return _run_report(request.query_params, source, user_id)


@router.post("", summary="Generate a report from a JSON body")
def post_report(
     payload: Dict[str, Any] = Body(...),
     source: FinancialDataSource = Depends(get_data_source),
     user_id: int = Depends(get_current_user_id)
):
     return _run_report(payload, source, user_id)
