"""
Base HTTP client shared by the source gateways.

Provides the transport concerns every upstream source needs, so the
source-specific clients only describe endpoints and parse payloads:

- A synchronous httpx client with a configurable timeout
- Minimum spacing between requests (football-data's free tier allows
  10 requests a minute, understat is a website we scrape)
- Retry with exponential backoff on transport errors, 429 and 5xx
- Every other failure surfaces as UpstreamError

Retrying belongs here rather than in the resolution or ingestion code,
which never retries.
"""

import json
import logging
import time
from typing import Any, Optional

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from touchline.config import settings
from touchline.exceptions import UpstreamError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class TransientHTTPError(Exception):
    """A failed request worth retrying."""


class BaseAPIClient:
    """
    Common transport for upstream sources.

    Subclasses set BASE_URL and SOURCE, and may override _headers().

    Usage:
        with FPLAPI() as api:
            data = api.bootstrap()
    """

    BASE_URL: str = ""
    SOURCE: str = "upstream"

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        min_request_interval: float = 0.0,
        backoff: float = 1.0,
    ):
        """
        Args:
            base_url: Override the source's base URL
            client: Pre-built httpx client (tests pass one with a MockTransport)
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per request
            min_request_interval: Minimum seconds between two requests
            backoff: Multiplier for the exponential wait between retries
        """
        self.base_url = base_url or self.BASE_URL
        if not self.base_url.endswith("/"):
            self.base_url += "/"
        self.max_retries = max_retries or settings.http_max_retries
        self.min_request_interval = min_request_interval
        self.backoff = backoff
        self._last_request_time = 0.0
        self._client = client or httpx.Client(
            timeout=timeout or settings.http_timeout,
            follow_redirects=True,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict[str, str]:
        return {}

    def _rate_limit(self) -> None:
        """Sleep until min_request_interval has passed since the last request."""
        if self.min_request_interval <= 0:
            return
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.min_request_interval:
            time.sleep(self.min_request_interval - elapsed)

    def _send(self, path: str, params: Optional[dict]) -> httpx.Response:
        self._rate_limit()
        url = self.base_url + path.lstrip("/")
        try:
            response = self._client.get(url, params=params, headers=self._headers())
        except httpx.TransportError as e:
            raise TransientHTTPError(f"{self.SOURCE}: {e}") from e
        finally:
            self._last_request_time = time.monotonic()

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise TransientHTTPError(
                f"{self.SOURCE}: HTTP {response.status_code} for {path}"
            )
        return response

    def _request(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        """
        GET a path relative to the base URL, retrying transient failures.

        Raises:
            UpstreamError: On a non-2xx response, or when retries run out
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff, max=60),
            retry=retry_if_exception_type(TransientHTTPError),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    response = self._send(path, params)
        except TransientHTTPError as e:
            raise UpstreamError(str(e)) from e

        if response.is_error:
            raise UpstreamError(
                f"{self.SOURCE}: HTTP {response.status_code} for {path}"
            )

        logger.debug("%s GET %s -> %d", self.SOURCE, path, response.status_code)
        return response

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """GET a path and decode the JSON body."""
        response = self._request(path, params)
        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise UpstreamError(f"{self.SOURCE}: invalid JSON from {path}") from e

    def get_text(self, path: str, params: Optional[dict] = None) -> str:
        """GET a path and return the body as text."""
        return self._request(path, params).text
