"""
HTTP transport for the Smartsheet API.

Every call goes through ``Transport.request``, which:
- attaches the bearer token from ``ClientConfig``
- treats any non-2xx status as ``SmartsheetTransportError`` (body captured)
- sleeps ``config.request_delay`` after every call, success or failure,
  to stay under the per-minute request ceiling

No retries; a failed call is reported once.
"""

import json as jsonlib
import logging
import time
from typing import Optional, Dict, Any

import requests
from requests.exceptions import RequestException

from .config import ClientConfig
from .exceptions import SmartsheetTransportError

logger = logging.getLogger(__name__)


class Transport:
    """Issues requests against ``config.base_url`` with a fixed post-call delay."""

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def close(self) -> None:
        """Release pooled connections held by the session."""
        self.session.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Any] = None,
        stream: bool = False,
        skip_delay: bool = False,
    ) -> requests.Response:
        """
        Make an API request.

        Args:
            method: HTTP method
            path: Endpoint path relative to the base URL, e.g. "/sheets/123"
            params: Query parameters
            json: JSON-serializable request body
            headers: Extra headers; override the defaults (Accept, Content-Type, ...)
            data: Raw body (file uploads)
            stream: Stream the response body instead of loading it
            skip_delay: Skip the post-call throttle delay

        Returns:
            The successful response

        Raises:
            SmartsheetTransportError: On network failure, timeout or non-2xx status
        """
        url = f"{self.config.base_url}{path}"
        request_headers = {"Authorization": self.config.auth_header}
        if json is not None:
            request_headers["Content-Type"] = "application/json"
        if headers:
            request_headers.update(headers)

        if self.config.debug:
            logger.debug(f"{method} {path} params={params}")
            if json is not None:
                logger.debug(f"Request body:\n{jsonlib.dumps(json, indent=2)}")

        try:
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    headers=request_headers,
                    params=params,
                    json=json,
                    data=data,
                    stream=stream,
                    timeout=self.config.timeout,
                )
            except RequestException as e:
                logger.error(f"Smartsheet request failed: {method} {path} - {e}")
                raise SmartsheetTransportError(method, path, reason=str(e)) from e

            # 3xx is a failure too; requests reports ok for anything below 400
            if not 200 <= response.status_code < 300:
                body = response.text
                try:
                    error_body = response.json()
                    logger.error(f"Smartsheet API error: {response.status_code} - {error_body}")
                except ValueError:
                    logger.error(f"Smartsheet API error: {response.status_code} - {body[:500]}")
                raise SmartsheetTransportError(
                    method, path, status_code=response.status_code, body=body
                )

            return response
        finally:
            if not skip_delay and self.config.request_delay > 0:
                time.sleep(self.config.request_delay)
