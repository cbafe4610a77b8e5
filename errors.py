# errors.py
"""
Error taxonomy and HTTP translation.

Services raise the typed errors below and never build HTTP responses.
register_exception_handlers() installs the only place where an error is
turned into a status code and a JSON body of the form:

     {"error": "<message>"}                       # any failure
     {"error": "<message>", "errors": [...]}      # validation failures
"""
import logging
from typing import Iterable, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
     """Base class for all application errors."""
     status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class ValidationError(AppError):
     """Bad input shape or range. Carries every violated rule, not just the first."""
     status_code = status.HTTP_400_BAD_REQUEST

     def __init__(self, message: str, errors: Optional[Iterable[str]] = None, field: Optional[str] = None):
          super().__init__(message)
          self.errors: List[str] = list(errors) if errors else [message]
          self.field = field


class AuthenticationError(AppError):
     status_code = status.HTTP_401_UNAUTHORIZED

     def __init__(self, message: str = "Authentication required"):
          super().__init__(message)


class AuthorizationError(AppError):
     status_code = status.HTTP_403_FORBIDDEN

     def __init__(self, message: str = "Insufficient permissions"):
          super().__init__(message)


class NotFoundError(AppError):
     status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
     status_code = status.HTTP_409_CONFLICT


class DatabaseError(AppError):
     """Wraps a failure of the underlying store. The message is never sent to clients."""

     def __init__(self, message: str, original_error: Optional[BaseException] = None):
          super().__init__(message)
          self.original_error = original_error


class ConfigurationError(Exception):
     """Invalid or missing configuration, raised at startup."""


def format_pydantic_errors(exc: PydanticValidationError | RequestValidationError) -> List[str]:
     """
     Flatten Pydantic errors into readable "field: message" strings.

     Location prefixes added by FastAPI ("body", "query") are dropped.
     """
     messages = []
     for error in exc.errors():
          loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
          msg = error.get("msg", "Invalid value")
          # Pydantic prefixes custom ValueError messages
          if msg.startswith("Value error, "):
               msg = msg[len("Value error, "):]
          messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
     return messages


def _error_response(status_code: int, message: str, errors: Optional[List[str]] = None,
                    field: Optional[str] = None) -> JSONResponse:
     content = {"error": message}
     if errors:
          content["errors"] = errors
     if field:
          content["field"] = field
     return JSONResponse(status_code=status_code, content=content)


def _request_context(request: Request) -> dict:
     return {"method": request.method, "path": request.url.path}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
     if isinstance(exc, DatabaseError):
          logger.error(
               "Database error on %s %s: %s",
               request.method, request.url.path, exc.message,
               exc_info=exc.original_error or exc,
          )
          return _error_response(exc.status_code, "Database operation failed")

     if isinstance(exc, ValidationError):
          logger.info("Validation failed on %s %s: %s", request.method, request.url.path, "; ".join(exc.errors))
          return _error_response(exc.status_code, exc.message, exc.errors, exc.field)

     logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
     return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
     errors = format_pydantic_errors(exc)
     logger.info("Request validation failed on %s %s: %s", request.method, request.url.path, "; ".join(errors))
     return _error_response(
          status.HTTP_400_BAD_REQUEST,
          f"Validation error: {', '.join(errors)}",
          errors,
     )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
     message = exc.detail if isinstance(exc.detail, str) else "Request failed"
     if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
          message = "Route not found"
     return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
     from config import get_settings

     logger.error(
          "Unhandled error on %s %s",
          request.method, request.url.path,
          exc_info=exc,
          extra={"extra": _request_context(request)},
     )
     content = {"error": "Internal server error"}
     if get_settings().is_development:
          content["detail"] = str(exc)
     return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
     """Install the error translation layer on the application."""
     app.add_exception_handler(AppError, app_error_handler)
     app.add_exception_handler(RequestValidationError, request_validation_handler)
     app.add_exception_handler(StarletteHTTPException, http_exception_handler)
     app.add_exception_handler(Exception, unhandled_exception_handler)
