# schemas/property.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from schemas.common import ApiModel, CleanStr, CleanText, Money, RequiredStr


class PropertyStatusEnum(str, Enum):
     OCCUPIED = "occupied"
     VACANT = "vacant"
     MAINTENANCE = "maintenance"


class PropertyCreate(ApiModel):
     name: RequiredStr = Field(..., min_length=1, max_length=100)
     address: RequiredStr = Field(..., min_length=1, max_length=255)
     property_type: CleanStr = Field(default="apartment", max_length=50)
     rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     status: PropertyStatusEnum = PropertyStatusEnum.VACANT
     description: Optional[CleanText] = Field(None, max_length=2000)


class PropertyUpdate(ApiModel):
     name: Optional[RequiredStr] = Field(None, min_length=1, max_length=100)
     address: Optional[RequiredStr] = Field(None, min_length=1, max_length=255)
     property_type: Optional[CleanStr] = Field(None, max_length=50)
     rent: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     status: Optional[PropertyStatusEnum] = None
     description: Optional[CleanText] = Field(None, max_length=2000)


class PropertyResponse(ApiModel):
     id: int
     name: str
     address: str
     property_type: str
     rent: Money
     status: PropertyStatusEnum
     description: Optional[str] = None
     created_at: datetime
     updated_at: datetime
