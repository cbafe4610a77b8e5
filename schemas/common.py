# schemas/common.py
"""Shared schema building blocks."""
from decimal import Decimal
from typing import Annotated, Generic, List, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from utils.sanitize import sanitize_for_database, sanitize_html

T = TypeVar("T")

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]

# Free text sanitized on the way in
CleanStr = Annotated[str, AfterValidator(sanitize_for_database)]
CleanText = Annotated[str, AfterValidator(lambda v: sanitize_for_database(v, keep_newlines=True))]
# Values pasted into generated documents; markup is removed and the rest escaped
EscapedStr = Annotated[str, AfterValidator(sanitize_html)]


def _not_blank(value: str) -> str:
     if not value:
          raise ValueError("must not be empty once markup is removed")
     return value


# Required text: length limits apply to the raw input, emptiness to the cleaned value
RequiredStr = Annotated[CleanStr, AfterValidator(_not_blank)]
RequiredText = Annotated[CleanText, AfterValidator(_not_blank)]


class ApiModel(BaseModel):
     """Base for API payloads: camelCase on the wire, snake_case in Python."""
     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          from_attributes=True,
     )


class DataResponse(BaseModel, Generic[T]):
     """Success envelope: {"data": ...}."""
     data: T


class PageMeta(ApiModel):
     total: int
     page: int = 1
     page_size: int = 50


class ListResponse(BaseModel, Generic[T]):
     data: List[T]
     meta: PageMeta