# utils/sanitize.py
"""
String sanitization applied to user-supplied text before persistence.

Used from the Pydantic field validators of the create/update schemas so that
services and models only ever see cleaned values.
"""
import html
import re
from typing import Any, Optional

MAX_TEXT_LENGTH = 10000
MAX_FILENAME_LENGTH = 255

_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_RE = re.compile(r"&(#\d+|#x[0-9a-fA-F]+|[a-zA-Z]+);")
_UNSAFE_CHARS_RE = re.compile(r"[<>'\"&]")
_WHITESPACE_RE = re.compile(r"\s+")
_INLINE_SPACE_RE = re.compile(r"[ \t\f\v]+")
_FILENAME_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9._-]")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def sanitize_for_database(value: Any, keep_newlines: bool = False) -> str:
     """
     Clean free text for storage.

     Tags and HTML entities are removed, then the characters < > ' " & are
     dropped, whitespace runs collapse to a single space and the result is
     trimmed and capped at MAX_TEXT_LENGTH characters. Non-strings give "".

     With keep_newlines, line breaks survive and only spaces within a line
     are collapsed (letter bodies).
     """
     if not isinstance(value, str):
          return ""
     cleaned = _TAG_RE.sub("", value)
     cleaned = _ENTITY_RE.sub("", cleaned)
     cleaned = _UNSAFE_CHARS_RE.sub("", cleaned)
     if keep_newlines:
          lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in cleaned.splitlines()]
          cleaned = "\n".join(lines).strip()
     else:
          cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
     return cleaned[:MAX_TEXT_LENGTH]


def sanitize_html(value: Any) -> str:
     """Strip tags and escape whatever markup characters remain."""
     if not isinstance(value, str):
          return ""
     return html.escape(_TAG_RE.sub("", value), quote=True)


def sanitize_filename(filename: Any) -> str:
     if not isinstance(filename, str):
          return "file"
     cleaned = _FILENAME_UNSAFE_RE.sub("_", filename)
     cleaned = re.sub(r"_{2,}", "_", cleaned).strip("_")
     return cleaned[:MAX_FILENAME_LENGTH] or "file"


def sanitize_email(email: Any) -> Optional[str]:
     """Lower-case and trim an email address; None when it does not look like one."""
     if not isinstance(email, str):
          return None
     cleaned = email.strip().lower()
     if not _EMAIL_RE.match(cleaned):
          return None
     return cleaned
