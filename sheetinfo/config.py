"""
Client configuration.

Process-wide tunables (auth token, throttle interval, timeout, debug flag)
live on one explicit object handed to the transport instead of module globals.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://api.smartsheet.com/2.0"

# 1 second between calls keeps a single caller under ~60 requests/minute
DEFAULT_REQUEST_DELAY = 1.0
DEFAULT_TIMEOUT = 120.0


class ClientConfig(BaseModel):
    """Settings shared by every request issued through one client."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    request_delay: float = Field(default=DEFAULT_REQUEST_DELAY, ge=0)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    debug: bool = False  # log request payloads
    webhook_callback_url: Optional[str] = None

    @property
    def auth_header(self) -> str:
        return f"Bearer {self.api_key}"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Build configuration from environment variables.

        Reads:
            SMARTSHEET_API_KEY (required)
            SMARTSHEET_BASE_URL
            SMARTSHEET_REQUEST_DELAY
            SMARTSHEET_TIMEOUT
            SMARTSHEET_DEBUG
            WEBHOOK_CALLBACK_URL

        Raises:
            ValueError: If SMARTSHEET_API_KEY is not set
        """
        api_key = os.environ.get("SMARTSHEET_API_KEY")
        if not api_key:
            raise ValueError("SMARTSHEET_API_KEY environment variable is required")

        return cls(
            api_key=api_key,
            base_url=os.environ.get("SMARTSHEET_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            request_delay=float(os.environ.get("SMARTSHEET_REQUEST_DELAY", DEFAULT_REQUEST_DELAY)),
            timeout=float(os.environ.get("SMARTSHEET_TIMEOUT", DEFAULT_TIMEOUT)),
            debug=os.environ.get("SMARTSHEET_DEBUG", "").lower() in ("1", "true", "yes"),
            webhook_callback_url=os.environ.get("WEBHOOK_CALLBACK_URL") or None,
        )
