"""
HTTP client for the primary records service.

Blocking `requests` calls run in a worker thread so repository operations stay
awaitable. The client only speaks HTTP: envelope interpretation (success flags,
collection unwrapping) belongs to the repository.
"""

from __future__ import annotations

import asyncio
from typing import Any

import requests

from erp_data.infrastructure.data.errors import (
    RemoteApplicationError,
    RemoteNotFoundError,
    RemoteTransportError,
)
from erp_data.utils.config import api_base_url, api_timeout_seconds, api_token
from erp_data.utils.logger import get_logger

logger = get_logger()

TIER_NAME = "primary_remote"


def _redact_token(token: str | None) -> str:
    if not token:
        return "none"
    return token[:6] + "..."


def _error_message(response: requests.Response) -> tuple[str, Any]:
    """Best-effort message from an error response body."""
    status = getattr(response, "status_code", None)
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message), body
    return f"API Error: {status}", body


class RemoteApiClient:
    """
    JSON-over-HTTP client with bearer auth.

    Failures are raised, never returned:
      - RemoteTransportError for connection problems and timeouts
      - RemoteNotFoundError for 404
      - RemoteApplicationError for any other non-2xx status or an unreadable body
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = (base_url if base_url is not None else api_base_url()).rstrip("/")
        self._timeout = timeout if timeout is not None else api_timeout_seconds()
        self._token = token if token is not None else api_token()
        self._session = session

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Cache-Control": "no-cache"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self._base_url + path

    def send(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """
        Perform one blocking request and return the decoded JSON body.

        Args:
            path: Path below the base URL, e.g. "/finance/transactions".
            method: HTTP method.
            body: JSON-serializable request body, or None.

        Returns:
            Decoded JSON (dict or list). An empty 2xx body decodes to {}.
        """
        url = self._url(path)
        method = method.upper()
        logger.debug("API request %s %s (token: %s)", method, url, _redact_token(self._token))
        sender = self._session.request if self._session is not None else requests.request
        try:
            response = sender(
                method,
                url,
                json=body,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise RemoteTransportError(
                f"Request timed out after {self._timeout} seconds: {method} {path}",
                tier=TIER_NAME,
                original=e,
            ) from e
        except requests.RequestException as e:
            raise RemoteTransportError(
                f"Could not reach records service at {self._base_url}: {e}",
                tier=TIER_NAME,
                original=e,
            ) from e

        status = getattr(response, "status_code", None)
        if status == 304:
            # Not Modified may still carry a body; otherwise report an empty collection.
            try:
                return response.json()
            except ValueError:
                return {"success": True, "data": []}

        if status is None or not 200 <= status < 300:
            message, payload = _error_message(response)
            error_cls = RemoteNotFoundError if status == 404 else RemoteApplicationError
            raise error_cls(message, status_code=status, payload=payload, tier=TIER_NAME)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteApplicationError(
                f"Invalid JSON from records service: {method} {path}",
                status_code=status,
                tier=TIER_NAME,
                original=e,
            ) from e

    async def request(self, path: str, *, method: str = "GET", body: Any = None) -> Any:
        """Awaitable wrapper around send(); suspends until the call settles."""
        return await asyncio.to_thread(self.send, path, method, body)
