import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from teamfeed.config.settings import settings
from teamfeed.errors import AuthenticationError, RateLimitError, TransportFailure
from teamfeed.models.league import FeedLocator

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class RetryableStatusError(TransportFailure):
    """Non-success status that is worth another attempt."""

    pass


class BaseScraper(ABC):
    """Abstract base class for league feed scrapers.

    One instance owns one ``httpx.AsyncClient`` that is shared by every
    concurrent league fetch issued through it.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.feed_timeout_seconds
        self.max_attempts = max_attempts or settings.feed_max_attempts
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"User-Agent": settings.feed_user_agent},
        )

    @abstractmethod
    async def fetch_payload(self, locator: FeedLocator) -> Any:
        """Fetch the raw payload for one league.

        Raises:
            TransportFailure: On timeout, transport error or non-success status.
        """
        pass

    async def _make_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Makes an HTTP request, retrying transient failures.

        Every failure leaves this method as a ``TransportFailure``.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.25, min=0.25, max=2),
            retry=retry_if_exception_type(
                (httpx.RequestError, RetryableStatusError, RateLimitError)
            ),
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._send(method, url, headers, params, **kwargs)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(
                f"Max retries exceeded for request to {url}. Last exception: {cause}"
            )
            if isinstance(cause, TransportFailure):
                raise cause
            raise TransportFailure(describe_request_error(cause)) from cause
        except TransportFailure:
            raise
        except httpx.RequestError as e:
            raise TransportFailure(describe_request_error(e)) from e
        raise TransportFailure(f"No response received from {url}")

    async def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]],
        params: Optional[Dict[str, Any]],
        **kwargs,
    ) -> httpx.Response:
        logger.debug(f"Making request {method} {url}")
        try:
            response = await self.client.request(
                method, url, headers=headers, params=params, **kwargs
            )
        except httpx.RequestError as e:
            # Network errors, timeouts etc. - these are retryable
            logger.warning(f"Request error for {url}: {describe_request_error(e)}")
            raise

        if response.status_code in {401, 403}:
            logger.warning(f"Authentication error ({response.status_code}) at {url}.")
            raise AuthenticationError(
                f"Feed responded with status: {response.status_code}"
            )

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(f"Rate limit hit (429) at {url}. Retry-After: {retry_after}")
            raise RateLimitError("Feed responded with status: 429")

        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(f"Retryable status {response.status_code} from {url}")
            raise RetryableStatusError(
                f"Feed responded with status: {response.status_code}"
            )

        if not response.is_success:
            logger.error(f"HTTP error {response.status_code} from {url}")
            raise TransportFailure(
                f"Feed responded with status: {response.status_code}"
            )

        logger.debug(f"Request successful: {response.status_code} for {url}")
        return response

    async def close(self):
        """Closes the underlying HTTP client if this scraper created it."""
        if self._owns_client:
            await self.client.aclose()
            logger.debug("Closed feed HTTP client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()


def describe_request_error(error: BaseException) -> str:
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
        return "Feed request timed out"
    message = str(error)
    return message or error.__class__.__name__
