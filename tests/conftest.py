"""
Pytest Configuration and Fixtures

This file provides:
- A mock Transport so no test touches the network
- A sample sheet payload shaped like GET /sheets/{id}
- Response factories for the API's JSON envelopes
- A SheetInfo already loaded from the sample sheet
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sheetinfo.client import SmartsheetClient
from sheetinfo.config import ClientConfig
from sheetinfo.sheet_info import SheetInfo
from sheetinfo.transport import Transport


# ============== Custom Pytest Markers ==============

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual modules")


# ============== Sample Data ==============

SHEET_ID = 7955014627944324

LEVEL_COL = 1001
ORDER_COL = 1002
AMOUNT_COL = 1003
COMPLETE_COL = 1004


def make_sheet_payload(rows: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """GET /sheets/{id} response with four columns."""
    return {
        "id": SHEET_ID,
        "name": "Orders",
        "totalRowCount": len(rows or []),
        "permalink": "https://app.smartsheet.com/sheets/abc",
        "workspace": {"id": 555, "name": "Operations"},
        "columns": [
            {"id": LEVEL_COL, "index": 0, "title": "Level", "type": "TEXT_NUMBER", "primary": True},
            {"id": ORDER_COL, "index": 1, "title": "Order", "type": "TEXT_NUMBER"},
            {"id": AMOUNT_COL, "index": 2, "title": "Amount", "type": "TEXT_NUMBER"},
            {"id": COMPLETE_COL, "index": 3, "title": "Complete", "type": "CHECKBOX"},
        ],
        "rows": rows or [],
    }


def make_response(payload: Any = None, status_code: int = 200) -> MagicMock:
    """Mock requests.Response carrying a JSON payload."""
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.json.return_value = payload
    response.text = json.dumps(payload)
    return response


def created_row(row_id: int, level: Optional[str] = None) -> Dict[str, Any]:
    """A row as echoed back by the add-rows endpoint."""
    cells = []
    if level is not None:
        cells.append({"columnId": LEVEL_COL, "value": level})
    cells.append({"columnId": ORDER_COL, "value": f"ORD-{row_id}"})
    return {"id": row_id, "rowNumber": 1, "cells": cells, "locked": False}


def batch_response(rows: Any) -> Dict[str, Any]:
    return {"message": "SUCCESS", "resultCode": 0, "result": rows}


# ============== Fixtures ==============

@pytest.fixture
def config():
    return ClientConfig(api_key="test-key", request_delay=0)


@pytest.fixture
def transport(config):
    mock = MagicMock(spec=Transport)
    mock.config = config
    return mock


@pytest.fixture
def client(transport):
    return SmartsheetClient(transport=transport)


@pytest.fixture
def loaded_sheet(client, transport):
    """SheetInfo loaded from the sample sheet; transport call history reset."""
    transport.request.return_value = make_response(make_sheet_payload())
    sheet = SheetInfo(client)
    sheet.load(SHEET_ID)
    transport.request.reset_mock(return_value=True, side_effect=True)
    return sheet
