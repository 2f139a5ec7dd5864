"""
Smartsheet Error Taxonomy
=========================

Every error raised by this package derives from ``SmartsheetError`` so callers
can catch the whole family in one place.

Resolution errors
    ``ColumnNotFoundError`` - a column title is not in the sheet's column
    directory. Raised before any request is sent.

Transport errors
    ``SmartsheetTransportError`` - network failure, timeout or non-2xx status.

Decode errors
    ``SmartsheetDecodeError`` - a response (or snapshot file) does not match
    the expected JSON shape.

Parent-linking errors
    ``ParentLinkError`` - a set-parent call failed after the rows were already
    inserted. Carries the insert result.
"""

from typing import Optional, Any


class SmartsheetError(Exception):
    """Base exception for Smartsheet operations."""
    pass


class ColumnNotFoundError(SmartsheetError):
    """Raised when a column title cannot be resolved to a column id."""

    def __init__(self, column_name: str, sheet_name: str = ""):
        self.column_name = column_name
        self.sheet_name = sheet_name
        super().__init__(f"Invalid column name '{column_name}' for sheet '{sheet_name}'")


class SmartsheetTransportError(SmartsheetError):
    """Raised when a request fails or the API returns a non-success status."""

    def __init__(
        self,
        method: str,
        path: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body
        detail = f"HTTP {status_code}" if status_code is not None else (reason or "request failed")
        super().__init__(f"Smartsheet {method} {path} failed: {detail}")


class SmartsheetDecodeError(SmartsheetError):
    """Raised when a response body does not match the expected shape."""
    pass


class ParentLinkError(SmartsheetError):
    """
    Raised when setting the parent of child rows fails after an insert.

    The rows themselves were created; ``result`` holds the insert result so the
    caller can still see the new row ids. Groups flushed before the failure
    remain applied.
    """

    def __init__(self, parent_id: int, result: Any):
        self.parent_id = parent_id
        self.result = result
        super().__init__(f"Failed to set parent {parent_id} on child rows")
