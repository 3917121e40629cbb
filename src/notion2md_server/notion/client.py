# ABOUTME: Wrapper around the official Notion Python SDK.
# ABOUTME: Adds rate limiting, retry on 429 and translation of SDK errors.

import functools
import logging
import time

import httpx
from notion_client import Client
from notion_client.errors import APIResponseError, HTTPResponseError, RequestTimeoutError
from notion_client.helpers import collect_paginated_api

from ..concurrency import RateLimiter
from ..errors import AuthError, NotFoundError, TransientError, ValidationError

logger = logging.getLogger(__name__)


def _retry_after_seconds(error: APIResponseError) -> float:
    headers = getattr(error, "headers", None)
    if not headers:
        return 1.0
    try:
        return float(headers.get("Retry-After", 1))
    except (TypeError, ValueError):
        return 1.0


def translate_error(error: Exception) -> Exception:
    """Map an SDK or transport error onto the service's error taxonomy."""
    if isinstance(error, APIResponseError):
        if error.status == 404:
            return NotFoundError(str(error))
        if error.status in (401, 403):
            return AuthError(str(error))
        if error.status == 400:
            return ValidationError(str(error))
        return TransientError(f"Notion API error {error.status}: {error}")
    if isinstance(error, RequestTimeoutError):
        return TransientError("Request to Notion timed out")
    if isinstance(error, HTTPResponseError):
        return TransientError(f"Notion returned HTTP {error.status}")
    if isinstance(error, httpx.HTTPError):
        return TransientError(f"Could not reach Notion: {error}")
    return error


def notion_call(func):
    """Decorator that retries on 429 responses and translates SDK errors.

    The wrapped method's instance must provide ``max_retries`` and ``sleep``.
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        attempt = 0
        while True:
            try:
                return func(self, *args, **kwargs)
            except APIResponseError as e:
                attempt += 1
                if e.status == 429 and attempt < self.max_retries:
                    retry_after = _retry_after_seconds(e)
                    logger.warning(
                        f"Rate limited, retrying in {retry_after}s "
                        f"(attempt {attempt}/{self.max_retries})"
                    )
                    self.sleep(retry_after)
                    continue
                raise translate_error(e) from e
            except (RequestTimeoutError, HTTPResponseError, httpx.HTTPError) as e:
                raise translate_error(e) from e
    return wrapper


class NotionClient:
    """Rate-limited wrapper around the Notion SDK client.

    Every API call acquires a slot from the shared rate limiter so that
    concurrent requests using the same token stay within Notion's limit.
    """

    def __init__(
        self,
        token: str,
        rate_limiter: RateLimiter | None = None,
        max_retries: int = 3,
        timeout_seconds: float = 30.0,
        sdk_client: Client | None = None,
    ):
        """Initialize the client.

        Args:
            token: Notion integration token.
            rate_limiter: Limiter shared by all clients for this token.
            max_retries: Attempts per call when Notion answers 429.
            timeout_seconds: Per-request timeout.
            sdk_client: Preconfigured SDK client (mainly for tests).
        """
        self._client = sdk_client or Client(auth=token, timeout_ms=int(timeout_seconds * 1000))
        self._rate_limiter = rate_limiter or RateLimiter()
        self.max_retries = max(1, max_retries)
        self.sleep = time.sleep

    @notion_call
    def get_page(self, page_id: str) -> dict:
        """Retrieve a page (properties only) by ID."""
        self._rate_limiter.acquire()
        return self._client.pages.retrieve(page_id=page_id)

    @notion_call
    def get_blocks(self, block_id: str) -> list[dict]:
        """Retrieve all direct child blocks of a block or page."""
        self._rate_limiter.acquire()
        return collect_paginated_api(
            self._client.blocks.children.list,
            block_id=block_id,
        )

    @notion_call
    def query_database(self, database_id: str) -> list[dict]:
        """Query all rows (pages) of a database."""
        self._rate_limiter.acquire()
        return collect_paginated_api(
            self._client.databases.query,
            database_id=database_id,
        )
