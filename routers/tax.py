# routers/tax.py
"""SAF-T PT export routes."""
import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import Response

from dependencies import get_current_user_id, get_data_source
from schemas.common import DataResponse
from schemas.saft import SaftExportResponse, SaftPeriod
from services.data_source import FinancialDataSource
from services.saft_service import generate_saft_pt, requirements_info, validate_export_request
from utils.sanitize import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tax", tags=["tax"])


@router.get("/saft-pt", summary="SAF-T PT export requirements")
def saft_requirements(user_id: int = Depends(get_current_user_id)):
     return DataResponse(data=requirements_info())


@router.post("/saft-pt", response_model=DataResponse[SaftExportResponse], summary="Generate a SAF-T PT export")
def export_saft(
     payload: Dict[str, Any] = Body(...),
     source: FinancialDataSource = Depends(get_data_source),
     user_id: int = Depends(get_current_user_id)
):
     """
     Validate the company and period data, then build the XML.

     Every validation problem is reported in one 400 response.
     """
     request = validate_export_request(payload)
     export = generate_saft_pt(source, user_id, request)
     return DataResponse(data=SaftExportResponse(
          xml=export.xml,
          filename=export.filename,
          invoice_count=export.invoice_count,
          total_amount=export.total_amount,
          period=SaftPeriod(
               fiscal_year=export.fiscal_year,
               start_date=export.start_date,
               end_date=export.end_date,
          ),
     ))


@router.get("/saft-pt/download", summary="Download a SAF-T PT export as XML")
def download_saft(
     fiscal_year: Optional[int] = Query(None, alias="fiscalYear"),
     start_month: int = Query(1, alias="startMonth"),
     end_month: int = Query(12, alias="endMonth"),
     nif: Optional[str] = Query(None),
     name: Optional[str] = Query(None),
     address_detail: Optional[str] = Query(None, alias="addressDetail"),
     city: Optional[str] = Query(None),
     postal_code: Optional[str] = Query(None, alias="postalCode"),
     country: str = Query("PT"),
     include_payments: bool = Query(True, alias="includePayments"),
     source: FinancialDataSource = Depends(get_data_source),
     user_id: int = Depends(get_current_user_id)
):
     """Same rules as the POST route, with the company fields flattened into the query string."""
     address = {"country": country}
     for key, value in (("addressDetail", address_detail), ("city", city), ("postalCode", postal_code)):
          if value is not None:
               address[key] = value
     company: Dict[str, Any] = {"address": address}
     for key, value in (("nif", nif), ("name", name)):
          if value is not None:
               company[key] = value

     request = validate_export_request({
          "fiscalYear": fiscal_year if fiscal_year is not None else date.today().year,
          "startMonth": start_month,
          "endMonth": end_month,
          "companyInfo": company,
          "includePayments": include_payments,
     })
     export = generate_saft_pt(source, user_id, request)
     return Response(
          content=export.xml,
          media_type="application/xml",
          headers={
               "Content-Disposition": f'attachment; filename="{sanitize_filename(export.filename)}"',
               "Cache-Control": "no-store",
          },
     )
