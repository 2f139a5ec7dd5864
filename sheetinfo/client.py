"""
Smartsheet API Client
=====================

One-shot request/response wrappers around the Smartsheet REST API.

Each method builds one request, sends it through the ``Transport`` (auth,
fixed post-call delay, non-2xx -> ``SmartsheetTransportError``) and decodes
the response into the models in ``sheetinfo.models``.

Batched row mutations addressed by column title live on ``SheetInfo``;
this client only sees wire-level row items (column ids already resolved).

Usage:
    >>> client = SmartsheetClient.from_env()
    >>> sheet = client.get_sheet(1849449510135684, NO_ROWS)
    >>> client.get_sheet_as(sheet.id, "orders.csv", ExportFormat.CSV)
"""

import logging
import mimetypes
import os
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict, Any, Iterable, Union, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .config import ClientConfig
from .exceptions import SmartsheetError, SmartsheetDecodeError
from .models import (
    AttachmentType,
    BatchResult,
    CopyOptions,
    CrossSheetReference,
    EmailRowsRequest,
    ExportFormat,
    GetSheetOptions,
    MoveOptions,
    Row,
    RowResult,
    Sheet,
)
from .transport import Transport

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


# ============== Response Decoding ==============

def decode_json(response: requests.Response, context: str) -> Any:
    """Return the parsed JSON body or raise SmartsheetDecodeError."""
    try:
        return response.json()
    except ValueError as e:
        logger.error(f"{context}: response is not JSON - {response.text[:500]}")
        raise SmartsheetDecodeError(f"{context}: response is not JSON") from e


def decode_model(payload: Any, model: Type[M], context: str) -> M:
    """Validate a parsed payload against ``model`` or raise SmartsheetDecodeError."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"{context}: unexpected response shape - {e}")
        raise SmartsheetDecodeError(f"{context}: unexpected response shape") from e


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()  # naive datetimes are local time
    return value.isoformat(timespec="seconds")


def _join_ids(ids: Iterable[int]) -> str:
    return ",".join(str(i) for i in ids)


# ============== Smartsheet Client ==============

class SmartsheetClient:
    """
    Thin Smartsheet API client.

    Args:
        config: Client configuration. Ignored when ``transport`` is given.
            If both are None, configuration is read from the environment.
        transport: Pre-built transport (tests inject a mock here)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
    ):
        if transport is None:
            transport = Transport(config or ClientConfig.from_env())
        self.transport = transport
        self.config = transport.config

    @classmethod
    def from_env(cls) -> "SmartsheetClient":
        return cls(ClientConfig.from_env())

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "SmartsheetClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # ============== Sheets ==============

    def get_sheet(self, sheet_id: int, options: Optional[GetSheetOptions] = None) -> Sheet:
        """
        Download a sheet's structure and rows.

        Cells that never held a value are excluded. If options is None, all
        rows and columns are requested. ``options.column_names`` is not used
        here (see ``SheetInfo.load``).
        """
        options = options or GetSheetOptions()
        params = {"exclude": "nonexistentCells"}
        if options.row_ids:
            params["rowIds"] = _join_ids(options.row_ids)
        if options.column_ids:
            params["columnIds"] = _join_ids(options.column_ids)
        if options.rows_modified_since is not None:
            params["rowsModifiedSince"] = _rfc3339(options.rows_modified_since)
        if options.rows_modified_mins > 0:
            since = datetime.now(timezone.utc) - timedelta(minutes=options.rows_modified_mins)
            params["rowsModifiedSince"] = _rfc3339(since)

        response = self.transport.request("GET", f"/sheets/{sheet_id}", params=params)
        payload = decode_json(response, "get_sheet")
        return decode_model(payload, Sheet, "get_sheet")

    def get_sheet_as(
        self,
        sheet_id: int,
        file_path: Union[str, os.PathLike],
        export_format: Union[ExportFormat, str],
        paper_size: Optional[str] = None,
    ) -> None:
        """
        Export a sheet to a local file; first line is the column headers.

        Args:
            sheet_id: Sheet to export
            file_path: Destination file (overwritten)
            export_format: csv, excel or pdf
            paper_size: PDF only, e.g. "LETTER" or "A4"

        Raises:
            ValueError: If export_format is not supported
        """
        try:
            export_format = ExportFormat(export_format)
        except ValueError:
            raise ValueError(f"Invalid format - {export_format}") from None

        params = {"paperSize": paper_size} if paper_size else None
        response = self.transport.request(
            "GET",
            f"/sheets/{sheet_id}",
            params=params,
            headers={"Accept": export_format.accept_header},
            stream=True,
        )
        try:
            with open(file_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        f.write(chunk)
        except OSError as e:
            logger.error(f"Failed writing export of sheet {sheet_id} to {file_path}: {e}")
            raise
        finally:
            response.close()

        logger.info(f"Exported sheet {sheet_id} as {export_format.value} to {file_path}")

    # ============== Rows ==============

    def get_row(self, sheet_id: int, row_id: int) -> Row:
        """Get a single row by id."""
        response = self.transport.request(
            "GET", f"/sheets/{sheet_id}/rows/{row_id}", params={"exclude": "nonexistentCells"}
        )
        return decode_model(decode_json(response, "get_row"), Row, "get_row")

    def add_row(self, sheet_id: int, item: Dict[str, Any]) -> RowResult:
        """Add one wire-level row item. The response ``result`` is a single row."""
        response = self.transport.request("POST", f"/sheets/{sheet_id}/rows", json=item)
        result = decode_model(decode_json(response, "add_row"), RowResult, "add_row")
        logger.info(f"Added row to sheet {sheet_id}: row_id={result.result.id if result.result else None}")
        return result

    def update_row(self, sheet_id: int, item: Dict[str, Any]) -> BatchResult:
        """Update one wire-level row item. Update responses are always list-shaped."""
        response = self.transport.request("PUT", f"/sheets/{sheet_id}/rows", json=item)
        result = decode_model(decode_json(response, "update_row"), BatchResult, "update_row")
        logger.info(f"Updated row {item.get('id')} in sheet {sheet_id}")
        return result

    def add_rows(self, sheet_id: int, items: List[Dict[str, Any]]) -> BatchResult:
        """
        Add a batch of wire-level row items in one call.

        Smartsheet answers with a single row object when exactly one row was
        sent and a list otherwise; both shapes are normalized into a list in
        submission order.
        """
        response = self.transport.request("POST", f"/sheets/{sheet_id}/rows", json=items)
        payload = decode_json(response, "add_rows")
        if isinstance(payload, dict) and isinstance(payload.get("result"), dict):
            payload = {**payload, "result": [payload["result"]]}
        result = decode_model(payload, BatchResult, "add_rows")
        logger.info(f"Added {len(result.result)} rows to sheet {sheet_id}")
        return result

    def update_rows(self, sheet_id: int, items: List[Dict[str, Any]]) -> BatchResult:
        """Update a batch of wire-level row items in one call."""
        response = self.transport.request("PUT", f"/sheets/{sheet_id}/rows", json=items)
        result = decode_model(decode_json(response, "update_rows"), BatchResult, "update_rows")
        logger.info(f"Updated {len(result.result)} rows in sheet {sheet_id}")
        return result

    def delete_rows(self, sheet_id: int, row_ids: List[int]) -> None:
        """Delete the given rows from a sheet."""
        self.transport.request(
            "DELETE", f"/sheets/{sheet_id}/rows", params={"ids": _join_ids(row_ids)}
        )
        logger.info(f"Deleted {len(row_ids)} rows from sheet {sheet_id}")

    def copy_rows(
        self,
        from_sheet_id: int,
        row_ids: List[int],
        to_sheet_id: int,
        options: Optional[CopyOptions] = None,
    ) -> None:
        """
        Copy rows to the bottom of another sheet.
        Without options only the cells are copied.
        """
        include: List[str] = []
        if options is not None:
            if options.all:
                include = ["all"]
            else:
                if options.attachments:
                    include.append("attachments")
                if options.children:
                    include.append("children")
                if options.discussions:
                    include.append("discussions")
        self._transfer_rows("copy", from_sheet_id, row_ids, to_sheet_id, include)

    def move_rows(
        self,
        from_sheet_id: int,
        row_ids: List[int],
        to_sheet_id: int,
        options: Optional[MoveOptions] = None,
    ) -> None:
        """Move rows to another sheet. Child rows always move with their parent."""
        include: List[str] = []
        if options is not None:
            if options.attachments:
                include.append("attachments")
            if options.discussions:
                include.append("discussions")
        self._transfer_rows("move", from_sheet_id, row_ids, to_sheet_id, include)

    def _transfer_rows(
        self,
        action: str,
        from_sheet_id: int,
        row_ids: List[int],
        to_sheet_id: int,
        include: List[str],
    ) -> None:
        params = {"include": ",".join(include)} if include else None
        payload = {"rowIds": list(row_ids), "to": {"sheetId": to_sheet_id}}
        self.transport.request(
            "POST", f"/sheets/{from_sheet_id}/rows/{action}", params=params, json=payload
        )
        logger.info(f"{action.capitalize()} {len(row_ids)} rows from sheet {from_sheet_id} to {to_sheet_id}")

    def set_parent_id(
        self,
        sheet_id: int,
        parent_id: int,
        child_ids: List[int],
        to_bottom: bool = False,
    ) -> None:
        """
        Indent child rows under a parent row.

        With several children their relative order is kept. ``to_bottom`` is
        only honoured for a single child; by default it becomes the first child.
        An empty ``child_ids`` sends nothing.
        """
        if not sheet_id:
            raise SmartsheetError("set_parent_id: sheet id not set")
        if not child_ids:
            logger.debug("set_parent_id: no child ids given")
            return

        items: List[Dict[str, Any]] = [
            {"id": child_id, "parentId": parent_id} for child_id in child_ids
        ]
        if to_bottom and len(child_ids) == 1:
            items[0]["toBottom"] = True

        self.transport.request("PUT", f"/sheets/{sheet_id}/rows", json=items)
        logger.info(f"Set parent {parent_id} on {len(child_ids)} rows in sheet {sheet_id}")

    # ============== Cross Sheet References ==============

    def get_cross_sheet_refs(self, sheet_id: int) -> List[CrossSheetReference]:
        response = self.transport.request("GET", f"/sheets/{sheet_id}/crosssheetreferences")
        payload = decode_json(response, "get_cross_sheet_refs")
        return [
            decode_model(ref, CrossSheetReference, "get_cross_sheet_refs")
            for ref in payload.get("data", [])
        ]

    def create_cross_sheet_reference(
        self, sheet_id: int, ref: CrossSheetReference
    ) -> CrossSheetReference:
        """Create the external sheet reference required by cross-sheet formulas."""
        body = ref.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"id", "status"}
        )
        response = self.transport.request(
            "POST", f"/sheets/{sheet_id}/crosssheetreferences", json=body
        )
        payload = decode_json(response, "create_cross_sheet_reference")
        created = decode_model(
            payload.get("result", payload), CrossSheetReference, "create_cross_sheet_reference"
        )
        logger.info(f"Created cross sheet reference '{created.name}' on sheet {sheet_id}")
        return created

    # ============== Attachments ==============

    def attach_file_to_row(
        self, sheet_id: int, row_id: int, file_path: Union[str, os.PathLike]
    ) -> Dict[str, Any]:
        """
        Upload a local file as a row attachment.

        Expensive: Smartsheet counts an upload as 10 requests against the rate limit.
        """
        file_name = os.path.basename(os.fspath(file_path))
        content_type, _ = mimetypes.guess_type(file_name)
        file_size = os.path.getsize(file_path)

        with open(file_path, "rb") as f:
            response = self.transport.request(
                "POST",
                f"/sheets/{sheet_id}/rows/{row_id}/attachments",
                headers={
                    "Content-Type": content_type or "application/octet-stream",
                    "Content-Disposition": f'attachment; filename="{file_name}"',
                    "Content-Length": str(file_size),
                },
                data=f,
            )

        payload = decode_json(response, "attach_file_to_row")
        logger.info(f"Attached file '{file_name}' to row {row_id} in sheet {sheet_id}")
        return payload.get("result", {})

    def attach_url_to_row(
        self,
        sheet_id: int,
        row_id: int,
        name: str,
        attachment_type: Union[AttachmentType, str],
        url: str,
    ) -> Dict[str, Any]:
        """
        Attach a link to a row.

        Args:
            name: Display name for the attachment
            attachment_type: LINK, BOX_COM, DROPBOX, EGNYTE, EVERNOTE, GOOGLE_DRIVE or ONEDRIVE
            url: Link target
        """
        attachment_type = AttachmentType(attachment_type)
        payload = {"name": name, "attachmentType": attachment_type.value, "url": url}

        response = self.transport.request(
            "POST", f"/sheets/{sheet_id}/rows/{row_id}/attachments", json=payload
        )
        result = decode_json(response, "attach_url_to_row")
        logger.info(f"Attached URL to row {row_id} in sheet {sheet_id}")
        return result.get("result", {})

    def list_row_attachments(self, sheet_id: int, row_id: int) -> List[Dict[str, Any]]:
        """List attachment metadata for a row (download URLs are not included)."""
        response = self.transport.request("GET", f"/sheets/{sheet_id}/rows/{row_id}/attachments")
        return decode_json(response, "list_row_attachments").get("data", [])

    # ============== Email ==============

    def email_rows(self, sheet_id: int, request: EmailRowsRequest) -> None:
        """
        Email sheet rows.

        Raises:
            SmartsheetError: If Smartsheet reports a non-zero result code
        """
        response = self.transport.request(
            "POST", f"/sheets/{sheet_id}/rows/emails", json=request.to_wire()
        )
        payload = decode_json(response, "email_rows")
        result_code = payload.get("resultCode", 0)
        if result_code != 0:
            logger.error(f"EmailRows was not successful. Message: {payload.get('message')} Code: {result_code}")
            raise SmartsheetError(f"EmailRows failed with result code {result_code}")

        logger.info(f"Emailed {len(request.row_ids)} rows from sheet {sheet_id}")
