"""
Unit Tests for SmartsheetClient

Tests request building and response decoding for the one-shot wrappers.
The Transport is mocked; assertions inspect the method, path, params and
JSON body handed to it.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from sheetinfo.exceptions import SmartsheetDecodeError, SmartsheetError, SmartsheetTransportError
from sheetinfo.models import (
    AttachmentType,
    CopyOptions,
    CrossSheetReference,
    EmailRecipient,
    EmailRowsRequest,
    GetSheetOptions,
    MoveOptions,
)
from tests.conftest import (
    SHEET_ID,
    batch_response,
    created_row,
    make_response,
    make_sheet_payload,
)


def sent(transport, index=-1):
    """(method, path, kwargs) of a transport call."""
    call = transport.request.call_args_list[index]
    return call.args[0], call.args[1], call.kwargs


@pytest.mark.unit
class TestGetSheet:

    def test_default_params(self, client, transport):
        transport.request.return_value = make_response(make_sheet_payload())

        sheet = client.get_sheet(SHEET_ID)

        method, path, kwargs = sent(transport)
        assert (method, path) == ("GET", f"/sheets/{SHEET_ID}")
        assert kwargs["params"] == {"exclude": "nonexistentCells"}
        assert sheet.name == "Orders"
        assert sheet.workspace.name == "Operations"
        assert len(sheet.columns) == 4

    def test_row_and_column_filters(self, client, transport):
        transport.request.return_value = make_response(make_sheet_payload())
        options = GetSheetOptions(
            row_ids=[1, 2],
            column_ids=[10, 20],
            rows_modified_since=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        )

        client.get_sheet(SHEET_ID, options)

        params = sent(transport)[2]["params"]
        assert params["rowIds"] == "1,2"
        assert params["columnIds"] == "10,20"
        assert params["rowsModifiedSince"] == "2024-03-01T12:00:00+00:00"

    def test_rows_modified_mins_sets_since(self, client, transport):
        transport.request.return_value = make_response(make_sheet_payload())

        client.get_sheet(SHEET_ID, GetSheetOptions(rows_modified_mins=30))

        since = datetime.fromisoformat(sent(transport)[2]["params"]["rowsModifiedSince"])
        age = datetime.now(timezone.utc) - since
        assert 29 * 60 <= age.total_seconds() <= 31 * 60

    def test_bad_shape_raises_decode_error(self, client, transport):
        transport.request.return_value = make_response({"unexpected": True})

        with pytest.raises(SmartsheetDecodeError):
            client.get_sheet(SHEET_ID)

    def test_non_json_raises_decode_error(self, client, transport):
        response = make_response()
        response.json.side_effect = ValueError("no json")
        transport.request.return_value = response

        with pytest.raises(SmartsheetDecodeError):
            client.get_sheet(SHEET_ID)


@pytest.mark.unit
class TestGetSheetAs:

    def test_streams_to_file(self, client, transport, tmp_path):
        response = make_response()
        response.iter_content.return_value = [b"Level,Order\n", b"", b"0,488\n"]
        transport.request.return_value = response
        target = tmp_path / "orders.csv"

        client.get_sheet_as(SHEET_ID, target, "csv")

        assert target.read_bytes() == b"Level,Order\n0,488\n"
        method, path, kwargs = sent(transport)
        assert kwargs["headers"] == {"Accept": "text/csv"}
        assert kwargs["stream"] is True
        assert kwargs["params"] is None
        response.close.assert_called_once()

    def test_pdf_paper_size(self, client, transport, tmp_path):
        response = make_response()
        response.iter_content.return_value = [b"%PDF"]
        transport.request.return_value = response

        client.get_sheet_as(SHEET_ID, tmp_path / "orders.pdf", "pdf", paper_size="A4")

        kwargs = sent(transport)[2]
        assert kwargs["params"] == {"paperSize": "A4"}
        assert kwargs["headers"] == {"Accept": "application/pdf"}

    def test_invalid_format_sends_nothing(self, client, transport, tmp_path):
        with pytest.raises(ValueError):
            client.get_sheet_as(SHEET_ID, tmp_path / "x.doc", "word")
        transport.request.assert_not_called()


@pytest.mark.unit
class TestRowBatches:

    def test_add_rows_normalizes_single_object(self, client, transport):
        transport.request.return_value = make_response(batch_response(created_row(11)))

        result = client.add_rows(SHEET_ID, [{"cells": [], "toBottom": True}])

        assert [row.id for row in result.result] == [11]

    def test_add_rows_keeps_order(self, client, transport):
        transport.request.return_value = make_response(
            batch_response([created_row(13), created_row(11), created_row(12)])
        )

        result = client.add_rows(SHEET_ID, [{"cells": []}] * 3)

        assert [row.id for row in result.result] == [13, 11, 12]
        method, path, kwargs = sent(transport)
        assert (method, path) == ("POST", f"/sheets/{SHEET_ID}/rows")
        assert len(kwargs["json"]) == 3

    def test_update_rows_rejects_single_object(self, client, transport):
        """Update responses are always lists; a single object is a decode error."""
        transport.request.return_value = make_response(batch_response(created_row(11)))

        with pytest.raises(SmartsheetDecodeError):
            client.update_rows(SHEET_ID, [{"id": "11"}])

    def test_add_row_single_result(self, client, transport):
        transport.request.return_value = make_response(batch_response(created_row(21)))

        result = client.add_row(SHEET_ID, {"cells": [], "toBottom": True})

        assert result.result.id == 21
        assert sent(transport)[2]["json"] == {"cells": [], "toBottom": True}

    def test_get_row(self, client, transport):
        transport.request.return_value = make_response(created_row(5, level="0"))

        row = client.get_row(SHEET_ID, 5)

        assert row.id == 5
        method, path, kwargs = sent(transport)
        assert path == f"/sheets/{SHEET_ID}/rows/5"
        assert kwargs["params"] == {"exclude": "nonexistentCells"}


@pytest.mark.unit
class TestRowOperations:

    def test_delete_rows(self, client, transport):
        transport.request.return_value = make_response(batch_response([1, 2]))

        client.delete_rows(SHEET_ID, [1, 2])

        method, path, kwargs = sent(transport)
        assert (method, path) == ("DELETE", f"/sheets/{SHEET_ID}/rows")
        assert kwargs["params"] == {"ids": "1,2"}

    def test_copy_rows_all_overrides_other_options(self, client, transport):
        transport.request.return_value = make_response({})

        client.copy_rows(1, [5, 6], 2, CopyOptions(all=True, attachments=True))

        method, path, kwargs = sent(transport)
        assert (method, path) == ("POST", "/sheets/1/rows/copy")
        assert kwargs["params"] == {"include": "all"}
        assert kwargs["json"] == {"rowIds": [5, 6], "to": {"sheetId": 2}}

    def test_copy_rows_without_options(self, client, transport):
        transport.request.return_value = make_response({})
        client.copy_rows(1, [5], 2)
        assert sent(transport)[2]["params"] is None

    def test_move_rows_include(self, client, transport):
        transport.request.return_value = make_response({})

        client.move_rows(1, [5], 2, MoveOptions(attachments=True, discussions=True))

        method, path, kwargs = sent(transport)
        assert path == "/sheets/1/rows/move"
        assert kwargs["params"] == {"include": "attachments,discussions"}


@pytest.mark.unit
class TestSetParentId:

    def test_payload(self, client, transport):
        transport.request.return_value = make_response(batch_response([]))

        client.set_parent_id(SHEET_ID, 100, [101, 102])

        method, path, kwargs = sent(transport)
        assert (method, path) == ("PUT", f"/sheets/{SHEET_ID}/rows")
        assert kwargs["json"] == [
            {"id": 101, "parentId": 100},
            {"id": 102, "parentId": 100},
        ]

    def test_to_bottom_single_child_only(self, client, transport):
        transport.request.return_value = make_response(batch_response([]))

        client.set_parent_id(SHEET_ID, 100, [101], to_bottom=True)
        assert sent(transport)[2]["json"] == [{"id": 101, "parentId": 100, "toBottom": True}]

        client.set_parent_id(SHEET_ID, 100, [101, 102], to_bottom=True)
        assert all("toBottom" not in item for item in sent(transport)[2]["json"])

    def test_no_children_sends_nothing(self, client, transport):
        client.set_parent_id(SHEET_ID, 100, [])
        transport.request.assert_not_called()

    def test_missing_sheet_id(self, client, transport):
        with pytest.raises(SmartsheetError):
            client.set_parent_id(0, 100, [101])


@pytest.mark.unit
class TestCrossSheetReferences:

    def test_create_sends_without_id(self, client, transport):
        transport.request.return_value = make_response({
            "message": "SUCCESS",
            "result": {
                "id": 77, "name": "Rates", "sourceSheetId": 9,
                "startColumnId": 1, "endColumnId": 2, "status": "OK",
            },
        })
        ref = CrossSheetReference(name="Rates", source_sheet_id=9, start_column_id=1, end_column_id=2)

        created = client.create_cross_sheet_reference(SHEET_ID, ref)

        method, path, kwargs = sent(transport)
        assert path == f"/sheets/{SHEET_ID}/crosssheetreferences"
        assert kwargs["json"] == {
            "name": "Rates", "sourceSheetId": 9, "startColumnId": 1, "endColumnId": 2,
        }
        assert created.id == 77

    def test_list(self, client, transport):
        transport.request.return_value = make_response({"data": [
            {"id": 1, "name": "A", "sourceSheetId": 9, "startColumnId": 1, "endColumnId": 1},
        ]})

        refs = client.get_cross_sheet_refs(SHEET_ID)

        assert [ref.name for ref in refs] == ["A"]


@pytest.mark.unit
class TestAttachments:

    def test_attach_url(self, client, transport):
        transport.request.return_value = make_response({"result": {"id": 9}})

        result = client.attach_url_to_row(SHEET_ID, 5, "Spec", "GOOGLE_DRIVE", "https://drive/x")

        method, path, kwargs = sent(transport)
        assert path == f"/sheets/{SHEET_ID}/rows/5/attachments"
        assert kwargs["json"] == {"name": "Spec", "attachmentType": "GOOGLE_DRIVE", "url": "https://drive/x"}
        assert result == {"id": 9}

    def test_attach_url_bad_type(self, client, transport):
        with pytest.raises(ValueError):
            client.attach_url_to_row(SHEET_ID, 5, "Spec", "FTP", "ftp://x")
        transport.request.assert_not_called()

    def test_attach_file(self, client, transport, tmp_path):
        upload = tmp_path / "invoice.pdf"
        upload.write_bytes(b"%PDF-1.4")
        transport.request.return_value = make_response({"result": {"id": 3, "name": "invoice.pdf"}})

        result = client.attach_file_to_row(SHEET_ID, 5, upload)

        headers = sent(transport)[2]["headers"]
        assert headers["Content-Disposition"] == 'attachment; filename="invoice.pdf"'
        assert headers["Content-Type"] == "application/pdf"
        assert headers["Content-Length"] == "8"
        assert result["name"] == "invoice.pdf"

    def test_list_attachments(self, client, transport):
        transport.request.return_value = make_response({"data": [{"id": 1}, {"id": 2}]})
        assert len(client.list_row_attachments(SHEET_ID, 5)) == 2


@pytest.mark.unit
class TestEmailRows:

    def _request(self):
        return EmailRowsRequest(send_to=[EmailRecipient(email="a@example.com")], row_ids=[1])

    def test_success(self, client, transport):
        transport.request.return_value = make_response({"message": "SUCCESS", "resultCode": 0})

        client.email_rows(SHEET_ID, self._request())

        method, path, kwargs = sent(transport)
        assert path == f"/sheets/{SHEET_ID}/rows/emails"
        assert kwargs["json"]["sendTo"] == [{"email": "a@example.com"}]

    def test_non_zero_result_code(self, client, transport):
        transport.request.return_value = make_response({"message": "PARTIAL", "resultCode": 3})

        with pytest.raises(SmartsheetError):
            client.email_rows(SHEET_ID, self._request())

    def test_transport_error_propagates(self, client, transport):
        transport.request.side_effect = SmartsheetTransportError("POST", "/x", status_code=400)

        with pytest.raises(SmartsheetTransportError):
            client.email_rows(SHEET_ID, self._request())
