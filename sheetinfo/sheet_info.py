"""
SheetInfo - Column-Cached Sheet With Batched Row Mutations
==========================================================

``SheetInfo`` mirrors one sheet's column definitions so rows can be written
by column title instead of column id, and batches row inserts/updates into
single API calls.

Lifecycle
---------
1. ``load()`` fetches the sheet and rebuilds the column directory
   (by id, by title, by position) and the loaded rows.
2. ``add_row()`` / ``update_row()`` resolve titles to ids and queue rows.
   Nothing is sent yet; an unknown title queues nothing.
3. ``upload_new_rows()`` / ``upload_update_rows()`` send each queue as one
   batch and empty it, whether or not the call succeeded.

Parent/child rows
-----------------
Smartsheet places a whole insert batch at one location, so hierarchies are
built in two passes: insert all rows, then set the parent of each group of
child rows using the ids returned by the insert. A level column marks each
row "0" (parent) or "1" (child); children attach to the nearest preceding
parent.

Snapshots
---------
``store()`` / ``restore()`` write and read the whole aggregate as indented
JSON. Compare a fresh ``load()`` against a stored baseline with
``match_sheet()`` to detect column changes.

Usage:
    >>> sheet = SheetInfo(client)
    >>> sheet.load(1849449510135684, NO_ROWS)
    >>> sheet.add_row([NewCell(column_name="Order", value="488")])
    >>> result = sheet.upload_new_rows()
"""

import logging
import os
from typing import Optional, List, Dict, Union

from pydantic import BaseModel, Field, ValidationError

from .client import SmartsheetClient
from .exceptions import (
    ColumnNotFoundError,
    ParentLinkError,
    SmartsheetDecodeError,
    SmartsheetError,
)
from .models import (
    BatchResult,
    Cell,
    Column,
    CrossSheetReference,
    GetSheetOptions,
    NewCell,
    Row,
    RowLocation,
    RowResult,
)

logger = logging.getLogger(__name__)

# Level column markers used by upload_new_rows(row_level_column=...)
PARENT_ROW = "0"
CHILD_ROW = "1"


class SheetSnapshot(BaseModel):
    """On-disk form of a SheetInfo."""
    sheet_id: int = 0
    sheet_name: str = ""
    workspace_id: int = 0
    workspace_name: str = ""
    columns_by_id: Dict[int, Column] = Field(default_factory=dict)
    columns_by_name: Dict[str, Column] = Field(default_factory=dict)
    columns_by_index: Dict[int, Column] = Field(default_factory=dict)
    rows: List[Row] = Field(default_factory=list)
    new_rows: List[Row] = Field(default_factory=list)
    update_rows: List[Row] = Field(default_factory=list)


def _marker(value) -> str:
    """Normalize a level-column value; numeric 0/1 come back from number columns."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _display(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SheetInfo:
    """
    Sheet identity, column directory, loaded rows and pending row queues.

    Not safe for concurrent use; intended for one caller at a time.

    Args:
        client: Client used for network operations. May be None for
            offline use (restore, match_sheet, row_values).
    """

    def __init__(self, client: Optional[SmartsheetClient] = None):
        self.client = client
        self.sheet_id: int = 0
        self.sheet_name: str = ""
        self.workspace_id: int = 0
        self.workspace_name: str = ""
        self.columns_by_id: Dict[int, Column] = {}
        self.columns_by_name: Dict[str, Column] = {}
        self.columns_by_index: Dict[int, Column] = {}
        self.rows: List[Row] = []
        self.new_rows: List[Row] = []     # queued by add_row, sent by upload_new_rows
        self.update_rows: List[Row] = []  # queued by update_row, sent by upload_update_rows

    def __repr__(self) -> str:
        return (
            f"SheetInfo(sheet_id={self.sheet_id}, sheet_name={self.sheet_name!r}, "
            f"columns={len(self.columns_by_id)}, rows={len(self.rows)})"
        )

    def _require_client(self) -> SmartsheetClient:
        if self.client is None:
            raise SmartsheetError("SheetInfo has no client; pass one to use network operations")
        return self.client

    # ============== Column Directory ==============

    def load(self, sheet_id: int, options: Optional[GetSheetOptions] = None) -> None:
        """
        Download sheet info and rebuild the column directory.

        ``options.column_names`` are resolved to ids through the directory of
        a previous load and added to ``options.column_ids``; the caller's
        options object is not modified. Pending row queues are untouched.

        Raises:
            ColumnNotFoundError: A requested column name is not in the directory
            SmartsheetTransportError / SmartsheetDecodeError: The fetch failed;
                the current state is left unchanged
        """
        client = self._require_client()
        options = options or GetSheetOptions()
        if options.column_names:
            column_ids = list(options.column_ids)
            column_ids.extend(self.column(name).id for name in options.column_names)
            options = options.model_copy(update={"column_ids": column_ids})

        sheet = client.get_sheet(sheet_id, options)

        by_id: Dict[int, Column] = {}
        by_name: Dict[str, Column] = {}
        by_index: Dict[int, Column] = {}
        for column in sheet.columns:
            by_id[column.id] = column
            by_name[column.title] = column
            by_index[column.index] = column

        self.sheet_id = sheet.id
        self.sheet_name = sheet.name
        self.workspace_id = sheet.workspace.id if sheet.workspace else 0
        self.workspace_name = sheet.workspace.name if sheet.workspace else ""
        self.columns_by_id = by_id
        self.columns_by_name = by_name
        self.columns_by_index = by_index
        self.rows = sheet.rows

        logger.info(
            f"Loaded sheet '{self.sheet_name}' ({self.sheet_id}): "
            f"{len(by_id)} columns, {len(self.rows)} rows"
        )

    def column(self, column_name: str) -> Column:
        """Look up a column by title."""
        column = self.columns_by_name.get(column_name)
        if column is None:
            logger.error(f"Column '{column_name}' not found in sheet '{self.sheet_name}'")
            raise ColumnNotFoundError(column_name, self.sheet_name)
        return column

    def match_sheet(self, base: "SheetInfo") -> bool:
        """
        Compare this sheet's structure to ``base`` (e.g. a stored baseline).

        Matches when sheet id, sheet name and column count agree and every
        base column exists here with the same title and type. Rows are not
        compared. The first mismatch is logged and stops the comparison.
        """
        if self.sheet_id != base.sheet_id:
            logger.warning(f"Sheet mismatch - SheetId, expecting {base.sheet_id}, got {self.sheet_id}")
            return False
        if self.sheet_name != base.sheet_name:
            logger.warning(f"Sheet mismatch - SheetName, expecting {base.sheet_name!r}, got {self.sheet_name!r}")
            return False
        if len(self.columns_by_id) != len(base.columns_by_id):
            logger.warning(
                f"Sheet mismatch - Column count, expecting {len(base.columns_by_id)}, "
                f"got {len(self.columns_by_id)}"
            )
            return False

        for base_id, base_column in base.columns_by_id.items():
            column = self.columns_by_id.get(base_id)
            if column is None:
                logger.warning(
                    f"Sheet mismatch - ColumnId {base_id} ({base_column.title!r}) in base, not in sheet"
                )
                return False
            if column.title != base_column.title:
                logger.warning(
                    f"Sheet mismatch - Column title, expecting {base_column.title!r}, got {column.title!r}"
                )
                return False
            if column.type != base_column.type:
                logger.warning(
                    f"Sheet mismatch - Column type for {base_column.title!r}, "
                    f"expecting {base_column.type}, got {column.type}"
                )
                return False

        return True

    # ============== Row Queues ==============

    def _resolve_cells(self, cells: List[NewCell]) -> List[Cell]:
        # Resolve everything before anything is queued
        return [cell.to_cell(self.column(cell.column_name).id) for cell in cells]

    def add_row(self, cells: List[NewCell], locked: Optional[bool] = None) -> None:
        """
        Queue a new row for ``upload_new_rows``.

        Args:
            cells: Cells addressed by column title
            locked: True to lock the new row. New rows are created unlocked,
                so False is treated like None and not sent.

        Raises:
            ColumnNotFoundError: A title is unknown; nothing is queued
        """
        row = Row(cells=self._resolve_cells(cells), locked=True if locked else None)
        self.new_rows.append(row)

    def update_row(
        self, row_id: int, cells: List[NewCell], locked: Optional[bool] = None
    ) -> None:
        """
        Queue an update for ``upload_update_rows``.

        ``cells`` may be empty to change only the lock state. ``locked=None``
        leaves the lock unchanged, True locks, False unlocks.

        Raises:
            ColumnNotFoundError: A title is unknown; nothing is queued
        """
        row = Row(id=row_id, cells=self._resolve_cells(cells), locked=locked)
        self.update_rows.append(row)

    @staticmethod
    def _row_item(row: Row, placement: Dict[str, object], include_id: bool = False) -> Dict[str, object]:
        item: Dict[str, object] = {}
        if include_id:
            item["id"] = str(row.id)  # Smartsheet expects the row id as a string here
            if row.cells:
                item["cells"] = [cell.to_wire() for cell in row.cells]
        else:
            item["cells"] = [cell.to_wire() for cell in row.cells]
        if row.locked is not None:
            item["locked"] = row.locked
        item.update(placement)
        return item

    @staticmethod
    def _insert_placement(location: Optional[RowLocation]) -> Dict[str, object]:
        if location is None or location.is_empty():
            return {"toBottom": True}
        return location.to_wire()

    @staticmethod
    def _update_placement(location: Optional[RowLocation]) -> Dict[str, object]:
        # no location means the rows stay where they are
        return location.to_wire() if location is not None else {}

    # ============== Batch Upload ==============

    def upload_new_rows(
        self,
        location: Optional[RowLocation] = None,
        row_level_column: Optional[str] = None,
    ) -> BatchResult:
        """
        Insert every queued new row in one call, then empty the queue.

        Args:
            location: Placement applied to the whole batch. Defaults to the
                bottom of the sheet.
            row_level_column: Optional title of a column holding "0" for
                parent rows and "1" for child rows. When given, each group of
                child rows is indented under the parent row preceding it.

        Returns:
            The insert result, one row per queued row in queue order

        Raises:
            ColumnNotFoundError: row_level_column is unknown (nothing is sent)
            SmartsheetTransportError / SmartsheetDecodeError: The insert
                failed; the queue is emptied anyway
            ParentLinkError: Rows were inserted but a set-parent call failed
        """
        if not self.new_rows:
            logger.debug(f"upload_new_rows: nothing queued for sheet {self.sheet_id}")
            return BatchResult(message="SUCCESS", result_code=0, result=[])

        client = self._require_client()
        level_column = self.column(row_level_column) if row_level_column is not None else None

        placement = self._insert_placement(location)
        items = [self._row_item(row, placement) for row in self.new_rows]
        try:
            result = client.add_rows(self.sheet_id, items)
        finally:
            self.new_rows = []

        if level_column is not None:
            self._link_child_rows(result, level_column)
        return result

    def get_row_level(self, row: Row, column_name: str) -> str:
        """Return the parent/child marker of ``row`` from the named level column."""
        column = self.column(column_name)
        return self._row_level(row, column)

    @staticmethod
    def _row_level(row: Row, column: Column) -> str:
        for cell in row.cells:
            if cell.column_id == column.id:
                return _marker(cell.value)
        return ""

    def _link_child_rows(self, result: BatchResult, level_column: Column) -> None:
        """Set the parent of each child-row group, in row order."""
        client = self._require_client()
        parent_id = 0
        child_ids: List[int] = []

        def flush() -> None:
            try:
                client.set_parent_id(self.sheet_id, parent_id, child_ids)
            except SmartsheetError as e:
                raise ParentLinkError(parent_id, result) from e

        for row in result.result:
            level = self._row_level(row, level_column)
            if level == PARENT_ROW:
                if child_ids:
                    flush()
                parent_id = row.id
                child_ids = []
            elif level == CHILD_ROW:
                if parent_id:
                    child_ids.append(row.id)
                else:
                    # TODO: decide whether orphan child rows should raise instead of being dropped
                    logger.warning(
                        f"Child row {row.id} in sheet {self.sheet_id} has no preceding parent row; "
                        f"left at top level"
                    )

        if child_ids:
            flush()

    def upload_update_rows(self, location: Optional[RowLocation] = None) -> BatchResult:
        """
        Send every queued update in one call, then empty the queue.

        Args:
            location: Optional placement applied to every row. Without it the
                rows are not moved.

        Returns:
            The update result (always list-shaped)

        Raises:
            SmartsheetTransportError / SmartsheetDecodeError: The update
                failed; the queue is emptied anyway
        """
        if not self.update_rows:
            logger.debug(f"upload_update_rows: nothing queued for sheet {self.sheet_id}")
            return BatchResult(message="SUCCESS", result_code=0, result=[])

        client = self._require_client()
        placement = self._update_placement(location)
        items = [self._row_item(row, placement, include_id=True) for row in self.update_rows]
        try:
            return client.update_rows(self.sheet_id, items)
        finally:
            self.update_rows = []

    # ============== Single Row ==============

    def add_single_row(
        self,
        cells: List[NewCell],
        location: Optional[RowLocation] = None,
        locked: Optional[bool] = None,
    ) -> RowResult:
        """Add one row immediately, bypassing the queue. Defaults to the bottom of the sheet."""
        client = self._require_client()
        row = Row(cells=self._resolve_cells(cells), locked=True if locked else None)
        item = self._row_item(row, self._insert_placement(location))
        return client.add_row(self.sheet_id, item)

    def update_single_row(
        self,
        row_id: int,
        cells: List[NewCell],
        location: Optional[RowLocation] = None,
        locked: Optional[bool] = None,
    ) -> BatchResult:
        """Update one row immediately, bypassing the queue. Without a location the row stays put."""
        client = self._require_client()
        row = Row(id=row_id, cells=self._resolve_cells(cells), locked=locked)
        item = self._row_item(row, self._update_placement(location), include_id=True)
        return client.update_row(self.sheet_id, item)

    # ============== Row Access ==============

    def row_values(self, row: Row) -> Dict[str, str]:
        """
        Return a row's values keyed by column title.

        A hyperlink cell yields its URL; numbers are unformatted; formula
        cells yield the computed value. Every column in the directory is
        present, with "" where the row has no value.
        """
        values: Dict[str, str] = {}
        for cell in row.cells:
            column = self.columns_by_id.get(cell.column_id)
            if column is None:
                continue
            if cell.hyperlink is not None and cell.hyperlink.url:
                values[column.title] = cell.hyperlink.url
            else:
                values[column.title] = _display(cell.value)

        for title in self.columns_by_name:
            values.setdefault(title, "")
        return values

    def cell_info(self, row: Row, column_name: str) -> Cell:
        """
        Return a copy of the row's cell for ``column_name``, including the
        formula. An empty cell is returned when the row has no such cell.
        """
        column = self.column(column_name)
        for cell in row.cells:
            if cell.column_id == column.id:
                return cell.model_copy(deep=True)
        return Cell(column_id=column.id)

    def create_cross_sheet_reference(self, ref: CrossSheetReference) -> CrossSheetReference:
        return self._require_client().create_cross_sheet_reference(self.sheet_id, ref)

    def show(self, row_limit: Optional[int] = None) -> None:
        """Print the sheet identity, columns by position and (up to row_limit) rows."""
        print(f"Sheet Name: {self.sheet_name} Sheet Id: {self.sheet_id}")
        print(f"Workspace Name: {self.workspace_name} Workspace Id: {self.workspace_id}")

        print("--- COLUMNS ---")
        for index in sorted(self.columns_by_index):
            column = self.columns_by_index[index]
            print(f"{column.index:2d} {column.title[:15]:>15} {column.type[:15]:>15} {column.id}")

        print("--- ROWS ---")
        print(f"Total Row Count is {len(self.rows)}")
        rows = self.rows if row_limit is None else self.rows[:row_limit]
        for number, row in enumerate(rows, start=1):
            print(f"Row {number}, id: {row.id} ---")
            for cell in row.cells:
                column = self.columns_by_id.get(cell.column_id)
                title = column.title if column else str(cell.column_id)
                print(f"{title:>15} {_display(cell.value)}")

    # ============== Snapshot ==============

    def to_snapshot(self) -> SheetSnapshot:
        return SheetSnapshot(
            sheet_id=self.sheet_id,
            sheet_name=self.sheet_name,
            workspace_id=self.workspace_id,
            workspace_name=self.workspace_name,
            columns_by_id=self.columns_by_id,
            columns_by_name=self.columns_by_name,
            columns_by_index=self.columns_by_index,
            rows=self.rows,
            new_rows=self.new_rows,
            update_rows=self.update_rows,
        )

    def store(self, file_path: Union[str, os.PathLike]) -> None:
        """Save the whole SheetInfo (queues included) as indented JSON."""
        text = self.to_snapshot().model_dump_json(indent=2, by_alias=True)
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Store failed for sheet {self.sheet_id} at {file_path}: {e}")
            raise
        logger.info(f"Stored sheet '{self.sheet_name}' ({self.sheet_id}) to {file_path}")

    def restore(self, file_path: Union[str, os.PathLike]) -> None:
        """
        Replace this SheetInfo's state with a file written by ``store``.

        Raises:
            OSError: The file cannot be read
            SmartsheetDecodeError: The file is not a valid snapshot
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            logger.error(f"Restore failed, cannot read {file_path}: {e}")
            raise

        try:
            snapshot = SheetSnapshot.model_validate_json(text)
        except ValidationError as e:
            raise SmartsheetDecodeError(f"Invalid snapshot file {file_path}: {e}") from e

        self.sheet_id = snapshot.sheet_id
        self.sheet_name = snapshot.sheet_name
        self.workspace_id = snapshot.workspace_id
        self.workspace_name = snapshot.workspace_name
        self.columns_by_id = snapshot.columns_by_id
        self.columns_by_name = snapshot.columns_by_name
        self.columns_by_index = snapshot.columns_by_index
        self.rows = snapshot.rows
        self.new_rows = snapshot.new_rows
        self.update_rows = snapshot.update_rows
        logger.info(f"Restored sheet '{self.sheet_name}' ({self.sheet_id}) from {file_path}")
