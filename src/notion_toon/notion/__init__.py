# ABOUTME: Notion API integration package.
# ABOUTME: Exports the client, its error type and page fetching.

from .client import NotionClient, RateLimitedNotionClient
from .errors import NotionApiError
from .pages import PageData, fetch_page_with_blocks

__all__ = [
    "NotionClient",
    "RateLimitedNotionClient",
    "NotionApiError",
    "PageData",
    "fetch_page_with_blocks",
]
