# ABOUTME: Converts a Notion page and its block tree to TOON text.
# ABOUTME: Handles every block kind, list grouping and table compaction.

import logging
from itertools import groupby
from operator import attrgetter
from typing import Callable, Sequence

from ..models import Block, Page, rich_text_to_plain
from .escaping import escape_value
from .properties import convert_properties

logger = logging.getLogger(__name__)

INDENT = "  "

# List kinds that collapse into a tabular run, and the header label for each
LIST_GROUP_LABELS = {
    "bulleted_list_item": "items",
    "numbered_list_item": "list",
    "to_do": "todos",
}

BlockHandler = Callable[[Block, int], list[str]]


def _checkbox(block: Block) -> str:
    return "[x]" if block.checked else "[ ]"


def extract_title(page: Page) -> str | None:
    """Return the text of the page's title property, or None if absent or empty."""
    for prop in (page.properties or {}).values():
        if prop and prop.get("type") == "title":
            return rich_text_to_plain(prop.get("title")) or None
    return None


def convert_to_toon(page: Page, blocks: Sequence[Block]) -> str:
    """Convert Notion page data to TOON.

    Args:
        page: Page metadata and properties.
        blocks: Top-level blocks with their children attached.

    Returns:
        TOON text with ``meta``, ``properties`` and ``content`` sections.
        Empty ``properties`` and ``content`` sections are left out.
    """
    lines = [
        "meta:",
        f"{INDENT}id: {page.id}",
        f"{INDENT}created: {page.created_time}",
        f"{INDENT}updated: {page.last_edited_time}",
    ]

    title = extract_title(page)
    if title:
        lines.append(f"{INDENT}title: {escape_value(title)}")

    properties = convert_properties(page.properties)
    if properties:
        lines.append("properties:")
        lines.extend(f"{INDENT}{prop}" for prop in properties)

    content = blocks_to_lines(blocks, 1)
    if content:
        lines.append("content:")
        lines.extend(content)

    return "\n".join(lines)


def blocks_to_lines(blocks: Sequence[Block], depth: int = 0) -> list[str]:
    """Convert sibling blocks to TOON lines.

    Runs of consecutive same-kind list items are handed to
    ``format_list_items`` as a whole; everything else goes through
    ``block_to_lines`` one block at a time.
    """
    lines = []
    for block_type, run in groupby(blocks or (), key=attrgetter("type")):
        if block_type in LIST_GROUP_LABELS:
            lines.extend(format_list_items(list(run), depth))
        else:
            for block in run:
                lines.extend(block_to_lines(block, depth))
    return lines


def format_list_items(items: Sequence[Block], depth: int = 0) -> list[str]:
    """Format a run of same-kind list items.

    Two or more childless items become ``label[n]:`` followed by one bare
    line per item. Otherwise each item is converted on its own, children
    included.
    """
    if not items:
        return []

    if len(items) < 2 or any(item.children for item in items):
        lines = []
        for item in items:
            lines.extend(block_to_lines(item, depth))
        return lines

    prefix = INDENT * depth
    item_type = items[0].type
    lines = [f"{prefix}{LIST_GROUP_LABELS[item_type]}[{len(items)}]:"]
    for item in items:
        text = escape_value(item.text)
        if item_type == "to_do":
            lines.append(f"{prefix}{INDENT}{_checkbox(item)} {text}")
        else:
            lines.append(f"{prefix}{INDENT}{text}")
    return lines


def format_table(block: Block, depth: int = 0) -> list[str]:
    """Format a table block and its table_row children.

    Cells are joined with bare commas; a comma inside a cell is not escaped
    and reads the same as a cell boundary.
    """
    prefix = INDENT * depth
    rows = list(block.children)
    if not rows:
        return [f"{prefix}table[0]:"]

    headers: list[str] = []
    if block.has_column_header:
        headers = rows[0].cells
        rows = rows[1:]

    if headers:
        header_str = ",".join(escape_value(h) for h in headers)
        lines = [f"{prefix}table[{len(rows)}]{{{header_str}}}:"]
    else:
        lines = [f"{prefix}table[{len(rows)}]:"]

    for row in rows:
        row_str = ",".join(escape_value(cell) for cell in row.cells)
        lines.append(f"{prefix}{INDENT}{row_str}")

    return lines


def _text_block(marker: str) -> BlockHandler:
    """Handler for ``marker: text`` blocks that may nest children."""
    def handler(block: Block, depth: int) -> list[str]:
        lines = []
        text = block.text
        if text:
            lines.append(f"{INDENT * depth}{marker}: {escape_value(text)}")
        lines.extend(blocks_to_lines(block.children, depth + 1))
        return lines
    return handler


def _list_item(marker: Callable[[Block], str]) -> BlockHandler:
    """Handler for a single list item rendered with its own marker."""
    def handler(block: Block, depth: int) -> list[str]:
        lines = []
        text = block.text
        if text:
            lines.append(f"{INDENT * depth}{marker(block)} {escape_value(text)}")
        lines.extend(blocks_to_lines(block.children, depth + 1))
        return lines
    return handler


def _single_line(render: Callable[[Block], str]) -> BlockHandler:
    """Handler for blocks that always produce exactly one line."""
    def handler(block: Block, depth: int) -> list[str]:
        return [f"{INDENT * depth}{render(block)}"]
    return handler


def _code(block: Block, depth: int) -> list[str]:
    # Code keeps its own line breaks and is never escaped
    text = block.text
    if not text:
        return []
    prefix = INDENT * depth
    lines = [f"{prefix}code[{block.language}]:"]
    lines.extend(f"{prefix}{INDENT}{code_line}" for code_line in text.split("\n"))
    return lines


def _callout(block: Block, depth: int) -> list[str]:
    lines = []
    text = block.text
    if text:
        lines.append(f"{INDENT * depth}callout[{block.emoji}]: {escape_value(text)}")
    lines.extend(blocks_to_lines(block.children, depth + 1))
    return lines


def _image(block: Block) -> str:
    caption = block.caption
    if caption:
        return f"image: {escape_value(caption)}"
    return f"image: {block.url}"


def _bookmark(block: Block) -> str:
    caption = block.caption
    if caption:
        return f"bookmark: {escape_value(caption)} ({block.url})"
    return f"bookmark: {block.url}"


def _column_list(block: Block, depth: int) -> list[str]:
    # Column wrappers are flattened; their contents sit one level below the header
    if not block.children:
        return []
    lines = [f"{INDENT * depth}columns:"]
    for column in block.children:
        lines.extend(blocks_to_lines(column.children, depth + 1))
    return lines


def _synced_block(block: Block, depth: int) -> list[str]:
    return blocks_to_lines(block.children, depth)


def _unknown(block: Block, depth: int) -> list[str]:
    logger.debug(f"No TOON rule for block type '{block.type}' ({block.id})")
    return [f"{INDENT * depth}[{block.type}]"]


BLOCK_HANDLERS: dict[str, BlockHandler] = {
    "paragraph": _text_block("p"),
    "heading_1": _text_block("h1"),
    "heading_2": _text_block("h2"),
    "heading_3": _text_block("h3"),
    "toggle": _text_block("toggle"),
    "quote": _text_block("quote"),
    "bulleted_list_item": _list_item(lambda block: "-"),
    "numbered_list_item": _list_item(lambda block: "#"),
    "to_do": _list_item(_checkbox),
    "code": _code,
    "callout": _callout,
    "divider": _single_line(lambda block: "---"),
    "image": _single_line(_image),
    "video": _single_line(lambda block: f"video: {block.url}"),
    "file": _single_line(lambda block: f"file[{block.file_name}]: {block.url}"),
    "pdf": _single_line(lambda block: f"pdf: {block.url}"),
    "bookmark": _single_line(_bookmark),
    "link_preview": _single_line(lambda block: f"link: {block.url}"),
    "embed": _single_line(lambda block: f"embed: {block.url}"),
    "equation": _single_line(lambda block: f"math: {escape_value(block.expression)}"),
    "table_of_contents": _single_line(lambda block: "toc:"),
    "breadcrumb": _single_line(lambda block: "breadcrumb:"),
    "child_page": _single_line(lambda block: f"page: {escape_value(block.title or 'Untitled')}"),
    "child_database": _single_line(lambda block: f"database: {escape_value(block.title or 'Untitled')}"),
    "link_to_page": _single_line(lambda block: f"link_to_page: {block.linked_id}"),
    "column_list": _column_list,
    "synced_block": _synced_block,
    "table": format_table,
}


def block_to_lines(block: Block, depth: int = 0) -> list[str]:
    """Convert a single block (and its subtree) to TOON lines.

    Args:
        block: Block to convert.
        depth: Indentation level; each level is two spaces.

    Returns:
        Lines for the block. Unknown kinds produce ``[kind]``.
    """
    handler = BLOCK_HANDLERS.get(block.type, _unknown)
    return handler(block, depth)
