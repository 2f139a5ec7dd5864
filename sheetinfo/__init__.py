"""
Smartsheet SheetInfo Library
============================

Client for the Smartsheet API with a column-cached ``SheetInfo`` that writes
rows by column title and batches row inserts/updates.

Modules
-------
config
    ClientConfig: token, base URL, request delay, timeout
transport
    HTTP transport with auth header and fixed post-call delay
models
    Pydantic models for cells, rows, columns, sheets and requests
client
    One-shot API wrappers (sheets, rows, attachments, email, cross-sheet refs)
sheet_info
    SheetInfo: column directory, row queues, batch upload, snapshots
webhooks
    Webhook create / enable / list / delete

Quick Start
-----------
>>> from sheetinfo import SmartsheetClient, SheetInfo, NewCell, NO_ROWS
>>>
>>> client = SmartsheetClient.from_env()
>>> sheet = SheetInfo(client)
>>> sheet.load(1849449510135684, NO_ROWS)
>>> sheet.add_row([NewCell(column_name="Level", value="0"), NewCell(column_name="Order", value="488")])
>>> sheet.add_row([NewCell(column_name="Level", value="1"), NewCell(column_name="Order", value="489")])
>>> result = sheet.upload_new_rows(row_level_column="Level")
"""

from .config import ClientConfig
from .exceptions import (
    SmartsheetError,
    ColumnNotFoundError,
    SmartsheetTransportError,
    SmartsheetDecodeError,
    ParentLinkError,
)
from .models import (
    AttachmentType,
    BatchResult,
    Cell,
    CellLink,
    Column,
    CopyOptions,
    CrossSheetReference,
    EmailRecipient,
    EmailRowsRequest,
    ExportFormat,
    GetSheetOptions,
    Hyperlink,
    MoveOptions,
    NewCell,
    NO_ROWS,
    Row,
    RowLocation,
    RowResult,
    Sheet,
    Webhook,
    Workspace,
)
from .transport import Transport
from .client import SmartsheetClient
from .sheet_info import SheetInfo, SheetSnapshot

__all__ = [
    "ClientConfig",
    "SmartsheetError",
    "ColumnNotFoundError",
    "SmartsheetTransportError",
    "SmartsheetDecodeError",
    "ParentLinkError",
    "AttachmentType",
    "BatchResult",
    "Cell",
    "CellLink",
    "Column",
    "CopyOptions",
    "CrossSheetReference",
    "EmailRecipient",
    "EmailRowsRequest",
    "ExportFormat",
    "GetSheetOptions",
    "Hyperlink",
    "MoveOptions",
    "NewCell",
    "NO_ROWS",
    "Row",
    "RowLocation",
    "RowResult",
    "Sheet",
    "Webhook",
    "Workspace",
    "Transport",
    "SmartsheetClient",
    "SheetInfo",
    "SheetSnapshot",
]

__version__ = "0.1.0"
