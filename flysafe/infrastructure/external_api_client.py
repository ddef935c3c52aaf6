"""
Infrastructure layer: Base HTTP client with retry logic.
"""
from typing import Any, Dict, Optional
import logging
import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from flysafe.config import settings

logger = logging.getLogger(__name__)


class ExternalAPIError(Exception):
    """Error returned by, or while talking to, an external service."""

    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UpstreamUnavailableError(ExternalAPIError):
    """The external service could not be reached or kept failing."""

    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class ExternalAPIClient:
    """
    Async JSON client for one external service.
    Implements retry logic with exponential backoff on 5xx and transport errors.
    """

    def __init__(
        self,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL joined with relative endpoints
            headers: Extra headers sent with every request
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={"accept": "application/json", **(headers or {})},
            timeout=timeout or settings.http_timeout,
        )

    async def __aenter__(self) -> "ExternalAPIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Path relative to the base URL, or an absolute URL
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body

        Raises:
            ExternalAPIError: On a 4xx response or a non-JSON body
            httpx.HTTPStatusError: On a 5xx response (retried)
            httpx.RequestError: On transport failure (retried)
        """
        response = await self.client.request(method, endpoint, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                raise
            # Don't retry on client errors (4xx)
            raise ExternalAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            raise ExternalAPIError(f"API returned a non-JSON response from {endpoint}")

    async def get_json(self, endpoint: str, **kwargs) -> Any:
        """
        GET a JSON document, mapping exhausted retries to UpstreamUnavailableError.

        Raises:
            ExternalAPIError: On a 4xx response or a non-JSON body
            UpstreamUnavailableError: If the service keeps failing
        """
        try:
            return await self._make_request("GET", endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            logger.error(f"Upstream {endpoint} failed with {e.response.status_code}")
            raise UpstreamUnavailableError(
                f"Service error {e.response.status_code} from {endpoint}"
            )
        except httpx.RequestError as e:
            logger.error(f"Upstream {endpoint} unreachable: {e}")
            raise UpstreamUnavailableError(f"Service unreachable: {str(e)}")
