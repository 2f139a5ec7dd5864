"""
Webhook Administration
======================

Create and manage Smartsheet webhooks for a sheet.

Smartsheet Webhook Lifecycle:
1. Create webhook (POST /webhooks) - status: NEW_NOT_VERIFIED
2. Enable webhook (PUT /webhooks/{id}) - triggers verification
3. Smartsheet sends a verification challenge to callbackUrl
4. On success, webhook status: ENABLED

References:
- https://developers.smartsheet.com/api/smartsheet/guides/webhooks/launch-a-webhook
"""

import logging
from typing import Optional, List, Dict, Any

from .client import SmartsheetClient, decode_json, decode_model
from .models import Webhook
from .sheet_info import SheetInfo

logger = logging.getLogger(__name__)


def create_webhook(
    client: SmartsheetClient,
    sheet: SheetInfo,
    name: str,
    callback_url: Optional[str] = None,
    column_names: Optional[List[str]] = None,
) -> int:
    """
    Create a webhook on a sheet for all events.

    Smartsheet API: POST /webhooks

    Args:
        client: API client
        sheet: Loaded sheet; supplies the sheet id and resolves column titles
        name: A descriptive name for the webhook
        callback_url: Receiver URL. Defaults to the configured
            ``webhook_callback_url`` with ``name`` appended.
        column_names: Optional columns whose changes trigger the webhook

    Returns:
        The new webhook id

    Raises:
        ColumnNotFoundError: A column title is unknown (nothing is sent)
        ValueError: No callback URL given or configured
    """
    if callback_url is None:
        base_url = client.config.webhook_callback_url
        if not base_url:
            raise ValueError("callback_url is required when WEBHOOK_CALLBACK_URL is not configured")
        callback_url = f"{base_url.rstrip('/')}/{name}"

    payload: Dict[str, Any] = {
        "name": name,
        "callbackUrl": callback_url,
        "scope": "sheet",
        "scopeObjectId": sheet.sheet_id,
        "events": ["*.*"],  # All events - filter in the receiver
        "version": 1,
    }
    if column_names:
        payload["subscope"] = {
            "columnIds": [sheet.column(column_name).id for column_name in column_names]
        }

    response = client.transport.request("POST", "/webhooks", json=payload)
    result = decode_json(response, "create_webhook")
    webhook = decode_model(result.get("result", result), Webhook, "create_webhook")

    logger.info(f"Created webhook {webhook.id} for sheet {sheet.sheet_id}")
    return webhook.id


def enable_webhook(client: SmartsheetClient, webhook_id: int) -> Webhook:
    """
    Enable a webhook (triggers verification).

    Smartsheet API: PUT /webhooks/{webhookId}
    """
    response = client.transport.request("PUT", f"/webhooks/{webhook_id}", json={"enabled": True})
    result = decode_json(response, "enable_webhook")
    webhook = decode_model(result.get("result", result), Webhook, "enable_webhook")

    logger.info(f"Enabled webhook {webhook_id}, status: {webhook.status}")
    return webhook


def get_webhook(client: SmartsheetClient, webhook_id: int) -> Webhook:
    """Smartsheet API: GET /webhooks/{webhookId}"""
    response = client.transport.request("GET", f"/webhooks/{webhook_id}")
    return decode_model(decode_json(response, "get_webhook"), Webhook, "get_webhook")


def list_webhooks(client: SmartsheetClient) -> List[Webhook]:
    """List all webhooks owned by the current user."""
    response = client.transport.request("GET", "/webhooks")
    result = decode_json(response, "list_webhooks")
    return [decode_model(item, Webhook, "list_webhooks") for item in result.get("data", [])]


def delete_webhook(client: SmartsheetClient, webhook_id: int) -> bool:
    """Smartsheet API: DELETE /webhooks/{webhookId}"""
    client.transport.request("DELETE", f"/webhooks/{webhook_id}")
    logger.info(f"Deleted webhook {webhook_id}")
    return True
