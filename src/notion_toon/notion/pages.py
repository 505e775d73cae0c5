# ABOUTME: Page and block fetching logic for TOON export.
# ABOUTME: Recursively retrieves all blocks of a page into an immutable tree.

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ..models import Block, Page
from .client import NotionClient

logger = logging.getLogger(__name__)

# Block types whose children are part of the page content.
# child_page/child_database children belong to other pages and are skipped.
BLOCKS_WITH_CHILDREN = {
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
    "toggle",
    "to_do",
    "quote",
    "callout",
    "synced_block",
    "template",
    "column",
    "column_list",
    "table",
    "table_row",
}


@dataclass(frozen=True)
class PageData:
    """Complete page data including properties and all blocks."""
    page: Page
    blocks: tuple[Block, ...]


def fetch_blocks_recursive(client: NotionClient, block_id: str) -> tuple[Block, ...]:
    """Fetch all blocks under a parent, recursively fetching children.

    Args:
        client: The Notion API client.
        block_id: The ID of the parent block or page.

    Returns:
        Tuple of blocks, each owning its fetched children.
    """
    blocks = []
    for raw in client.get_blocks(block_id):
        children: tuple[Block, ...] = ()
        if raw.get("has_children", False) and raw.get("type") in BLOCKS_WITH_CHILDREN:
            children = fetch_blocks_recursive(client, raw["id"])
        blocks.append(Block.from_api(raw, children))

    return tuple(blocks)


def fetch_page_with_blocks(client: NotionClient, page_id: str) -> PageData:
    """Fetch a page with all its properties and blocks.

    The page record and the block tree are fetched concurrently.

    Args:
        client: The Notion API client.
        page_id: The ID of the page to fetch.

    Returns:
        PageData containing page properties and all blocks.
    """
    logger.debug(f"Fetching page {page_id}")

    with ThreadPoolExecutor(max_workers=2) as executor:
        page_future = executor.submit(client.get_page, page_id)
        blocks_future = executor.submit(fetch_blocks_recursive, client, page_id)
        page = Page.from_api(page_future.result())
        blocks = blocks_future.result()

    logger.debug(f"Fetched page {page_id} with {len(blocks)} top-level blocks")

    return PageData(page=page, blocks=blocks)
