"""HTTP client wrapper mapping responses onto the application's error taxonomy."""

import logging
from typing import Any, Dict, Optional

import httpx

from user_directory.core.cancellation import CancellationToken
from user_directory.core.exceptions import (
    ActionFailedError,
    ConflictError,
    HttpStatusError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
)

logger = logging.getLogger(__name__)


def error_for_status(status_code: int, action: str) -> HttpStatusError:
    """
    Build the exception matching a non-success status code.

    Args:
        status_code: HTTP status of the response
        action: Human readable label of the attempted action

    Returns:
        The exception to raise
    """
    if status_code == 404:
        return NotFoundError(f"Could not {action}: resource not found.", status_code, action)
    if status_code == 403:
        return PermissionDeniedError(f"Could not {action}: permission denied.", status_code, action)
    if status_code == 409:
        return ConflictError(f"Could not {action}: the resource was changed by someone else.", status_code, action)
    if status_code >= 500:
        return ServerError(f"Could not {action}: the server failed to respond.", status_code, action)
    return ActionFailedError(f"Opps! Something went wrong while trying to {action}.", status_code, action)


class HttpClient:
    """Thin async wrapper around httpx with cancellation and error mapping."""

    def __init__(self, base_url: str = "", timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the wrapper.

        Args:
            base_url: Prefix for relative URLs
            timeout: Per-request timeout in seconds
            transport: Optional transport, used by tests to fake the network
            client: Optional pre-built httpx client; the wrapper will not close it
        """
        self.base_url = base_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def fetch_resource(self, url: str, action: str, token: Optional[CancellationToken] = None,
                             method: str = "GET", payload: Any = None,
                             params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Issue a request and decode its JSON body.

        Args:
            url: Absolute URL or path relative to the base URL
            action: Label describing the action, carried by ActionFailedError
            token: Optional cancellation token
            method: HTTP verb
            payload: JSON body for POST/PUT
            params: Query string parameters

        Returns:
            Decoded JSON value, or None for an empty body

        Raises:
            RequestCancelledError: If the token fires
            NetworkError: On transport failure
            HttpStatusError: On a non-success status
        """
        request = self._client.request(method, url, json=payload, params=params)
        try:
            if token is not None:
                response = await token.run(request)
            else:
                response = await request
        except httpx.TransportError as e:
            logger.error(f"Network failure while trying to {action}: {str(e)}")
            raise NetworkError(f"Network failure while trying to {action}: {str(e)}") from e

        if not response.is_success:
            logger.error(f"{method} {url} returned {response.status_code}")
            raise error_for_status(response.status_code, action)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ActionFailedError(f"Invalid response while trying to {action}.", response.status_code, action) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"HttpClient(base_url={self.base_url!r})"
