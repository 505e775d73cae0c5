# ABOUTME: Wrapper around the official Notion Python SDK.
# ABOUTME: Provides an authenticated, rate-limited client with error mapping.

import functools
import logging
import time

import httpx
from notion_client import Client
from notion_client.errors import APIResponseError, HTTPResponseError, RequestTimeoutError
from notion_client.helpers import collect_paginated_api

from ..concurrency import RateLimiter
from .errors import NotionApiError

logger = logging.getLogger(__name__)

TIMEOUT_CODE = "request_timeout"
NETWORK_CODE = "network_error"


def _error_code(error: Exception) -> str | None:
    code = getattr(error, "code", None)
    # APIErrorCode is a str-valued Enum
    code = getattr(code, "value", code)
    return str(code) if code else None


def translate_errors(func):
    """Decorator mapping SDK and transport exceptions to NotionApiError."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HTTPResponseError as e:
            status = getattr(e, "status", None)
            message = str(e) or f"API error: {status}"
            raise NotionApiError(message, status, _error_code(e)) from e
        except RequestTimeoutError as e:
            raise NotionApiError("Request to Notion timed out", None, TIMEOUT_CODE) from e
        except httpx.HTTPError as e:
            raise NotionApiError(f"Network error: {e}", None, NETWORK_CODE) from e
    return wrapper


def _retry_after(error: APIResponseError) -> float:
    headers = getattr(error, "headers", None)
    if headers:
        try:
            return float(headers.get("Retry-After", 1))
        except (TypeError, ValueError):
            pass
    return 1.0


def retry_on_rate_limit(func):
    """Decorator to retry on 429 responses using the Retry-After header.

    The number of attempts comes from the client's ``max_retries``.
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        max_retries = self.max_retries
        for attempt in range(max_retries):
            try:
                return func(self, *args, **kwargs)
            except APIResponseError as e:
                if e.status == 429 and attempt < max_retries - 1:
                    retry_after = _retry_after(e)
                    logger.warning(
                        f"Rate limited, retrying in {retry_after:g}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(retry_after)
                    continue
                raise
        return None  # Unreachable but satisfies type checker
    return wrapper


class NotionClient:
    """Wrapper around the Notion SDK client."""

    def __init__(self, token: str, client: Client | None = None):
        self._client = client if client is not None else Client(auth=token)

    @translate_errors
    def get_page(self, page_id: str) -> dict:
        """Retrieve a page by ID."""
        return self._client.pages.retrieve(page_id=page_id)

    @translate_errors
    def get_blocks(self, block_id: str) -> list[dict]:
        """Retrieve all direct child blocks of a block/page."""
        return collect_paginated_api(
            self._client.blocks.children.list,
            block_id=block_id,
        )

    @translate_errors
    def get_current_user(self) -> dict:
        """Retrieve the bot user the token belongs to."""
        return self._client.users.me()


class RateLimitedNotionClient(NotionClient):
    """NotionClient with rate limiting and automatic retry on 429.

    Every API call waits on the shared RateLimiter first, which keeps
    concurrent page and block fetches within Notion's 3 requests/second.
    """

    def __init__(
        self,
        token: str,
        rate_limiter: RateLimiter,
        max_retries: int = 3,
        client: Client | None = None,
    ):
        """Initialize rate-limited client.

        Args:
            token: Notion integration token.
            rate_limiter: RateLimiter instance to throttle requests.
            max_retries: Attempts per call when rate limited.
            client: Pre-built SDK client (mainly for tests).
        """
        super().__init__(token, client)
        self._rate_limiter = rate_limiter
        self.max_retries = max_retries

    @translate_errors
    @retry_on_rate_limit
    def get_page(self, page_id: str) -> dict:
        """Retrieve a page by ID with rate limiting."""
        self._rate_limiter.acquire()
        return self._client.pages.retrieve(page_id=page_id)

    @translate_errors
    @retry_on_rate_limit
    def get_blocks(self, block_id: str) -> list[dict]:
        """Retrieve all direct child blocks with rate limiting.

        Each page of results waits on the rate limiter.
        """
        def list_children(**kwargs):
            self._rate_limiter.acquire()
            return self._client.blocks.children.list(**kwargs)

        return collect_paginated_api(list_children, block_id=block_id)

    @translate_errors
    @retry_on_rate_limit
    def get_current_user(self) -> dict:
        """Retrieve the bot user with rate limiting."""
        self._rate_limiter.acquire()
        return self._client.users.me()
