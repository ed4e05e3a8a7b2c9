"""
Base Web API client implementation.
Provides the HTTP plumbing, retries and error mapping shared by API clients.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from detail_composite.core.exceptions import DataverseError
from detail_composite.core.logging import get_logger

logger = get_logger(__name__)


def is_transient(error: BaseException) -> bool:
    """Transport failures, throttling and server errors are worth retrying."""
    if not isinstance(error, DataverseError):
        return False
    return error.http_status is None or error.http_status == 429 or error.http_status >= 500


class BaseWebAPIClient(ABC):
    """
    Abstract base class for OData Web API clients.
    Provides common HTTP client functionality and error handling.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        max_retries: int = 3,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL of the Web API, ending with a slash
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts for transient failures
            headers: Headers sent with every request
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request, retrying transient failures.

        Args:
            method: HTTP method (GET, PATCH, etc.)
            endpoint: Path relative to the base URL, query options included
            data: Request body data

        Returns:
            Response data as dictionary (empty for 204 responses)

        Raises:
            DataverseError: If the request fails
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(is_transient),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, endpoint, data)
        raise AssertionError("unreachable")

    async def _send(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        client = await self._get_client()

        try:
            response = await client.request(method=method, url=endpoint, json=data)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Web API request failed",
                endpoint=endpoint,
                status_code=e.response.status_code,
                response_text=e.response.text,
            )
            raise DataverseError(
                message=f"HTTP {e.response.status_code}: {self._error_message(e.response)}",
                status_code=e.response.status_code,
                details={"endpoint": endpoint},
            ) from e
        except httpx.RequestError as e:
            logger.error("Web API request error", endpoint=endpoint, error=str(e))
            raise DataverseError(
                message=f"Request failed: {e}",
                details={"endpoint": endpoint},
            ) from e

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """OData error message from the body, or the raw text."""
        try:
            return response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return response.text

    async def _get(self, endpoint: str) -> dict[str, Any]:
        """Make a GET request."""
        return await self._request("GET", endpoint)

    async def _patch(self, endpoint: str, data: dict[str, Any]) -> dict[str, Any]:
        """Make a PATCH request."""
        return await self._request("PATCH", endpoint, data=data)

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the Web API is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...

    async def __aenter__(self) -> "BaseWebAPIClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
