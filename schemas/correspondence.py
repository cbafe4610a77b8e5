# schemas/correspondence.py
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from schemas.common import ApiModel, CleanStr, EscapedStr, RequiredStr, RequiredText


class CorrespondenceStatusEnum(str, Enum):
     DRAFT = "draft"
     SENT = "sent"


class TemplateCreate(ApiModel):
     name: RequiredStr = Field(..., min_length=1, max_length=100)
     type: CleanStr = Field(default="custom", max_length=50)
     subject: RequiredStr = Field(..., min_length=1, max_length=200)
     content: RequiredText = Field(..., min_length=1)
     variables: List[str] = Field(default_factory=list, description="Tokens the template expects")


class TemplateUpdate(ApiModel):
     name: Optional[RequiredStr] = Field(None, min_length=1, max_length=100)
     type: Optional[CleanStr] = Field(None, max_length=50)
     subject: Optional[RequiredStr] = Field(None, min_length=1, max_length=200)
     content: Optional[RequiredText] = Field(None, min_length=1)
     variables: Optional[List[str]] = None


class TemplateResponse(ApiModel):
     id: int
     name: str
     type: str
     subject: str
     content: str
     variables: List[str] = []
     created_at: datetime
     updated_at: datetime


class GenerateCorrespondenceRequest(ApiModel):
     template_id: int = Field(..., gt=0)
     tenant_id: int = Field(..., gt=0)
     variables: Dict[str, EscapedStr] = Field(default_factory=dict)


class TemplateRef(ApiModel):
     id: int
     name: str
     type: str


class CorrespondenceResponse(ApiModel):
     id: int
     template_id: Optional[int] = None
     tenant_id: int
     subject: str
     content: str
     status: CorrespondenceStatusEnum
     sent_at: Optional[datetime] = None
     created_at: datetime
     updated_at: datetime
     original_template: Optional[TemplateRef] = None
