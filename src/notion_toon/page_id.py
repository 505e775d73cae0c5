# ABOUTME: Extracts Notion page IDs from URLs and raw IDs.
# ABOUTME: Normalizes every accepted form to a lower-case dashed UUID.

import re
from urllib.parse import urlparse

UUID_WITH_DASHES = re.compile(r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$", re.IGNORECASE)
UUID_WITHOUT_DASHES = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)

_TRAILING_HEX_ID = re.compile(r"([a-f0-9]{32})$", re.IGNORECASE)
_TRAILING_DASHED_ID = re.compile(
    r"([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})$", re.IGNORECASE
)

NOTION_HOSTS = ("notion.so", "notion.site")


def format_as_uuid(hex_id: str) -> str:
    """Format 32 hex characters as a dashed UUID."""
    hex_id = hex_id.lower()
    return f"{hex_id[:8]}-{hex_id[8:12]}-{hex_id[12:16]}-{hex_id[16:20]}-{hex_id[20:]}"


def _notion_host(hostname: str | None) -> bool:
    return bool(hostname) and any(host in hostname for host in NOTION_HOSTS)


def is_notion_url(url: str | None) -> bool:
    """Check whether a string is a URL on a Notion domain."""
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url.strip())
    return bool(parsed.scheme) and _notion_host(parsed.hostname)


def extract_page_id(value: str | None) -> str | None:
    """Extract a page ID from a Notion URL or a raw ID.

    Supported forms:
        - https://www.notion.so/workspace/Page-Title-<32 hex>
        - https://notion.so/<32 hex>?v=...
        - https://<team>.notion.site/<dashed uuid>
        - a dashed UUID or 32 hex characters
        - any other text ending in 32 hex characters (e.g. ``Page-Title-<id>``)

    Returns:
        Lower-case dashed UUID, or None if no ID could be found.
    """
    if not value or not isinstance(value, str):
        return None

    value = value.strip()

    if UUID_WITH_DASHES.match(value):
        return value.lower()
    if UUID_WITHOUT_DASHES.match(value):
        return format_as_uuid(value)

    parsed = urlparse(value)
    if not (parsed.scheme and parsed.netloc):
        match = _TRAILING_HEX_ID.search(value)
        return format_as_uuid(match.group(1)) if match else None

    if not _notion_host(parsed.hostname):
        return None

    segments = [segment for segment in parsed.path.split("/") if segment]
    if not segments:
        return None
    last_segment = segments[-1]

    match = _TRAILING_HEX_ID.search(last_segment)
    if match:
        return format_as_uuid(match.group(1))

    match = _TRAILING_DASHED_ID.search(last_segment)
    if match:
        return match.group(1).lower()

    return None
