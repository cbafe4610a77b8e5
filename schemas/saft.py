# schemas/saft.py
"""
Pydantic schemas for the SAF-T PT export.

These hold the structural rules (presence, lengths, formats, NIF check
digit). Period rules live in services.saft_service.validate_export_period.
"""
import re
from datetime import date
from typing import Optional

from pydantic import ConfigDict, Field, StrictBool, StrictInt, field_validator

from schemas.common import ApiModel, Money
from utils.nif import validate_nif

POSTAL_CODE_RE = re.compile(r"^\d{4}-\d{3}$")


class SaftAddress(ApiModel):
     model_config = ConfigDict(extra="forbid")

     building_number: Optional[str] = None
     street_name: Optional[str] = None
     address_detail: str = Field(..., min_length=1)
     city: str = Field(..., min_length=1)
     postal_code: str
     region: Optional[str] = None
     country: str = Field(default="PT", pattern=r"^[A-Za-z]{2}$")

     @field_validator("postal_code")
     @classmethod
     def check_postal_code(cls, v: str) -> str:
          if not POSTAL_CODE_RE.match(v):
               raise ValueError("Invalid Portuguese postal code (format: XXXX-XXX)")
          return v

     @field_validator("country")
     @classmethod
     def upper_country(cls, v: str) -> str:
          return v.upper()


class SaftCompanyInfo(ApiModel):
     model_config = ConfigDict(extra="forbid")

     nif: str
     name: str = Field(..., min_length=2)
     address: SaftAddress
     tax_entity: Optional[str] = None

     @field_validator("nif")
     @classmethod
     def check_nif(cls, v: str) -> str:
          if not validate_nif(v):
               raise ValueError("Invalid Portuguese NIF")
          return v


class SaftExportRequest(ApiModel):
     """Input of a SAF-T PT export."""
     model_config = ConfigDict(
          extra="forbid",
          json_schema_extra={
               "example": {
                    "fiscalYear": 2025,
                    "startMonth": 1,
                    "endMonth": 3,
                    "companyInfo": {
                         "nif": "123456789",
                         "name": "Ana Silva",
                         "address": {
                              "addressDetail": "Rua Augusta 120",
                              "city": "Lisboa",
                              "postalCode": "1100-053",
                              "country": "PT",
                         },
                    },
                    "includePayments": True,
               }
          },
     )

     fiscal_year: StrictInt
     start_month: StrictInt = 1
     end_month: StrictInt = 12
     company_info: SaftCompanyInfo
     include_payments: StrictBool = True


class SaftPeriod(ApiModel):
     fiscal_year: int
     start_date: date
     end_date: date


class SaftExportResponse(ApiModel):
     success: bool = True
     xml: str
     filename: str
     invoice_count: int
     total_amount: Money
     period: SaftPeriod
