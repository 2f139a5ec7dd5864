"""
Smartsheet Wire Models
======================

Pydantic models for objects sent to and received from the Smartsheet API.

Design Principles
-----------------
- **Pydantic v2** for validation and serialization
- **snake_case fields, camelCase wire names** via a shared alias generator
- **Absent means omitted**: optional fields default to ``None`` and are
  dropped on serialization (``exclude_none``), never sent as ``null``
- **Unknown API fields are ignored** so new provider fields don't break parsing

Model Categories
----------------
Cell data
    Hyperlink, CellLink, Cell, NewCell, CellValue
Sheet structure
    Column, Row, Workspace, Sheet
Requests
    RowLocation, GetSheetOptions, CopyOptions, MoveOptions,
    CrossSheetReference, EmailRecipient, EmailRowsRequest
Responses
    BatchResult, RowResult, Webhook

Usage Examples
--------------
Placement fields for a batch insert:
    >>> RowLocation(to_top=True).to_wire()
    {'toTop': True}

A cell addressed by column title:
    >>> NewCell(column_name="Status", value="Open")
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for models that travel over the wire in camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with provider field names, omitting absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# A cell value is exactly one of these kinds; strict types keep True from
# becoming 1 and "1" from becoming 1 on the way in.
CellValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


# ============== Enumerations ==============

class ExportFormat(str, Enum):
    """Formats accepted by the sheet export endpoint."""
    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"

    @property
    def accept_header(self) -> str:
        return _EXPORT_ACCEPT[self]


_EXPORT_ACCEPT = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.EXCEL: "application/vnd.ms-excel",
    ExportFormat.PDF: "application/pdf",
}


class AttachmentType(str, Enum):
    """Link attachment providers."""
    LINK = "LINK"
    BOX_COM = "BOX_COM"
    DROPBOX = "DROPBOX"
    EGNYTE = "EGNYTE"
    EVERNOTE = "EVERNOTE"
    GOOGLE_DRIVE = "GOOGLE_DRIVE"
    ONEDRIVE = "ONEDRIVE"


# ============== Cell Data ==============

class Hyperlink(ApiModel):
    """Link stored in a cell. Points at a URL, sheet, or report."""
    report_id: Optional[int] = None
    sheet_id: Optional[int] = None
    url: Optional[str] = None


class CellLink(ApiModel):
    """Location of a linked cell value (read-only, computed by Smartsheet)."""
    column_id: Optional[int] = None
    row_id: Optional[int] = None
    sheet_id: Optional[int] = None
    status: Optional[str] = None


class Cell(ApiModel):
    """
    A cell as returned by the API and as sent in row requests.

    Cells read from the API may carry both ``formula`` and its computed
    ``value``; only ``NewCell`` enforces that one of them is set on write.
    """
    column_id: int
    formula: Optional[str] = None
    value: Optional[CellValue] = None
    display_value: Optional[str] = None
    hyperlink: Optional[Hyperlink] = None
    link_in_from_cell: Optional[CellLink] = None
    links_out_to_cells: Optional[List[CellLink]] = None

    def to_wire(self) -> Dict[str, Any]:
        # displayValue is computed by Smartsheet and never sent back
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"display_value"}
        )


class NewCell(BaseModel):
    """A cell to add or update, addressed by column title."""
    column_name: str
    formula: Optional[str] = None
    value: Optional[CellValue] = None  # if hyperlink, value is the displayed text
    hyperlink: Optional[Hyperlink] = None

    @model_validator(mode="after")
    def check_formula_or_value(self) -> "NewCell":
        if self.formula and self.value is not None:
            raise ValueError(
                f"Cell '{self.column_name}' can have a formula or a value, not both"
            )
        return self

    def to_cell(self, column_id: int) -> Cell:
        return Cell(
            column_id=column_id,
            formula=self.formula or None,
            value=self.value,
            hyperlink=self.hyperlink,
        )


# ============== Sheet Structure ==============

class Column(ApiModel):
    """Column definition. Index is zero-based position within the sheet."""
    id: int
    index: int
    title: str
    type: str
    primary: bool = False
    options: Optional[List[str]] = None


class Row(ApiModel):
    """
    A sheet row.

    ``locked`` is three-valued: ``None`` leaves the lock state unchanged,
    ``True`` locks, ``False`` unlocks.
    """
    id: int = 0
    row_number: Optional[int] = None
    parent_id: Optional[int] = None
    cells: List[Cell] = Field(default_factory=list)
    locked: Optional[bool] = None


class Workspace(ApiModel):
    id: int
    name: str = ""


class Sheet(ApiModel):
    """Response of GET /sheets/{sheetId}."""
    id: int
    name: str
    total_row_count: int = 0
    workspace: Optional[Workspace] = None
    permalink: Optional[str] = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None
    columns: List[Column] = Field(default_factory=list)
    rows: List[Row] = Field(default_factory=list)


# ============== Requests ==============

class RowLocation(BaseModel):
    """
    Where rows are added or moved to.

    Only one of to_top / to_bottom / parent_id / sibling_id should be used;
    the combination is not validated. Set indent or outdent to 1 to activate.
    """
    parent_id: int = 0
    sibling_id: int = 0
    to_top: bool = False
    to_bottom: bool = False
    above_sibling: bool = False
    indent: int = 0
    outdent: int = 0

    def to_wire(self) -> Dict[str, Any]:
        """Return only the active placement fields, keyed by wire name."""
        fields: Dict[str, Any] = {}
        if self.to_top:
            fields["toTop"] = True
        if self.to_bottom:
            fields["toBottom"] = True
        if self.parent_id:
            fields["parentId"] = self.parent_id
        if self.sibling_id:
            fields["siblingId"] = self.sibling_id
        if self.above_sibling:
            fields["above"] = True
        if self.indent:
            fields["indent"] = 1
        if self.outdent:
            fields["outdent"] = 1
        return fields

    def is_empty(self) -> bool:
        return not self.to_wire()


class GetSheetOptions(BaseModel):
    """
    Restricts which rows and columns GET /sheets returns.
    With nothing set, all rows and columns are returned.
    """
    row_ids: List[int] = Field(default_factory=list)
    rows_modified_since: Optional[datetime] = None
    rows_modified_mins: int = 0  # rows modified within the last N minutes
    column_names: List[str] = Field(default_factory=list)  # resolved by SheetInfo.load
    column_ids: List[int] = Field(default_factory=list)


# Request the sheet structure without any rows
NO_ROWS = GetSheetOptions(row_ids=[0])


class CopyOptions(BaseModel):
    """Row elements copied in addition to cells. ``all`` overrides the rest."""
    all: bool = False
    attachments: bool = False
    children: bool = False
    discussions: bool = False


class MoveOptions(BaseModel):
    """Row elements moved in addition to cells. Child rows always move."""
    attachments: bool = False
    discussions: bool = False


class CrossSheetReference(ApiModel):
    """External sheet range used by cross-sheet formulas. Omit row ids for all rows."""
    id: Optional[int] = None
    name: str
    source_sheet_id: int
    start_row_id: Optional[int] = None
    end_row_id: Optional[int] = None
    start_column_id: int
    end_column_id: int
    status: Optional[str] = None


class EmailRecipient(ApiModel):
    email: Optional[str] = None
    group_id: Optional[int] = None

    @model_validator(mode="after")
    def check_one_target(self) -> "EmailRecipient":
        if (self.email is None) == (self.group_id is None):
            raise ValueError("EmailRecipient needs exactly one of email or group_id")
        return self


class EmailRowsRequest(ApiModel):
    """Body of POST /sheets/{sheetId}/rows/emails."""
    send_to: List[EmailRecipient]
    subject: str = ""
    message: str = ""
    cc_me: bool = False
    row_ids: List[int]
    column_ids: Optional[List[int]] = None
    include_attachments: bool = False
    include_discussions: bool = False


# ============== Responses ==============

class BatchResult(ApiModel):
    """Response of the add-rows and update-rows endpoints."""
    message: str = ""  # ex. "SUCCESS"
    result_code: int = 0
    result: List[Row] = Field(default_factory=list)


class RowResult(ApiModel):
    """Response of adding exactly one row (``result`` is an object, not a list)."""
    message: str = ""
    result_code: int = 0
    result: Optional[Row] = None


class Webhook(ApiModel):
    id: int
    name: str = ""
    callback_url: Optional[str] = None
    scope: Optional[str] = None
    scope_object_id: Optional[int] = None
    events: List[str] = Field(default_factory=list)
    version: int = 1
    enabled: bool = False
    status: Optional[str] = None
