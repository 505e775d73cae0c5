# ABOUTME: CLI entry point for notion-toon.
# ABOUTME: Provides 'convert', 'convert-json', 'page-id' and 'test-connection' commands.

import argparse
import json
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .concurrency import RateLimiter
from .config import Config, ConfigError, load_config
from .models import Block, Page
from .notion import NotionApiError, RateLimitedNotionClient, fetch_page_with_blocks
from .page_id import extract_page_id, is_notion_url
from .toon import ToonWriter, convert_to_toon

logger = logging.getLogger(__name__)


def setup_logging(log_path: Path | None = None, verbose: bool = False) -> None:
    """Configure logging for the application.

    Console logging goes to stderr so stdout only carries TOON output.

    Args:
        log_path: Optional path for log file. If provided, enables rotating file logging.
        verbose: Log at DEBUG instead of INFO.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_client(config: Config) -> RateLimitedNotionClient:
    """Create a rate-limited client from configuration."""
    token = config.get_token()
    rate_limiter = RateLimiter(calls_per_second=config.calls_per_second)
    return RateLimitedNotionClient(token, rate_limiter, max_retries=config.max_retries)


def emit_output(toon: str, output: Path | None) -> None:
    """Print TOON to stdout, or write it to a file."""
    if output is None:
        sys.stdout.write(toon + "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(toon, encoding="utf-8")
    logger.info(f"Wrote {output}")


def resolve_page_id(source: str) -> str:
    """Extract the page ID from a URL or raw ID, exiting with 1 if there is none."""
    page_id = extract_page_id(source)
    if page_id:
        return page_id

    if "://" in source and not is_notion_url(source):
        logger.error(f"'{source}' is not a Notion URL (expected notion.so or notion.site)")
    else:
        logger.error(f"Could not extract a page ID from '{source}'")
    sys.exit(1)


def cmd_convert(args: argparse.Namespace, config: Config) -> None:
    """Fetch a page from Notion and convert it to TOON."""
    page_id = resolve_page_id(args.source)
    client = build_client(config)

    start = time.monotonic()
    data = fetch_page_with_blocks(client, page_id)
    logger.info(f"Fetched page {page_id} in {time.monotonic() - start:.1f}s")

    output_dir = args.output_dir or (config.output_dir if args.output is None else None)
    if output_dir:
        path = ToonWriter(output_dir).write_page(data.page, data.blocks)
        logger.info(f"Wrote {path}")
        return

    emit_output(convert_to_toon(data.page, data.blocks), args.output)


def _check_block_list(blocks, where: str) -> None:
    """Raise ValueError unless blocks is a list of objects, recursively."""
    if not isinstance(blocks, list):
        raise ValueError(f"{where} must be a list of block objects")
    for index, block in enumerate(blocks):
        if not isinstance(block, dict):
            raise ValueError(f"{where}[{index}] must be a block object")
        if block.get("children") is not None:
            _check_block_list(block["children"], f"{where}[{index}].children")


def load_page_dump(path: Path) -> tuple[Page, tuple[Block, ...]]:
    """Load a ``{"page": ..., "blocks": [...]}`` JSON dump.

    Blocks may carry nested ``children`` lists.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or not shaped like a dump.
    """
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict) or not isinstance(raw.get("page"), dict):
        raise ValueError(f"{path} must contain a 'page' object")

    raw_blocks = raw.get("blocks")
    if raw_blocks is None:
        raw_blocks = []
    _check_block_list(raw_blocks, "blocks")

    page = Page.from_api(raw["page"])
    blocks = tuple(Block.from_api(block) for block in raw_blocks)
    return page, blocks


def cmd_convert_json(args: argparse.Namespace, config: Config) -> None:
    """Convert a saved JSON dump to TOON without calling the API."""
    try:
        page, blocks = load_page_dump(args.file)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read page dump: {e}")
        sys.exit(1)

    emit_output(convert_to_toon(page, blocks), args.output)


def cmd_page_id(args: argparse.Namespace, config: Config) -> None:
    """Print the page ID found in a URL."""
    print(resolve_page_id(args.source))


def cmd_test_connection(args: argparse.Namespace, config: Config) -> None:
    """Check that the configured token can reach the API."""
    client = build_client(config)
    user = client.get_current_user()
    print(f"Connected as {user.get('name') or user.get('id')}")


COMMANDS = {
    "convert": cmd_convert,
    "convert-json": cmd_convert_json,
    "page-id": cmd_page_id,
    "test-connection": cmd_test_connection,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-toon",
        description="Export Notion pages as compact TOON text",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to YAML config file (defaults are used if omitted)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert",
        help="Fetch a page and print it as TOON",
    )
    convert_parser.add_argument("source", help="Notion page URL or ID")
    destination = convert_parser.add_mutually_exclusive_group()
    destination.add_argument("--output", "-o", type=Path, help="Write TOON to this file")
    destination.add_argument(
        "--output-dir", "-d",
        type=Path,
        help="Write <title>.toon into this directory",
    )

    json_parser = subparsers.add_parser(
        "convert-json",
        help="Convert a saved {page, blocks} JSON dump",
    )
    json_parser.add_argument("file", type=Path, help="Path to JSON dump")
    json_parser.add_argument("--output", "-o", type=Path, help="Write TOON to this file")

    page_id_parser = subparsers.add_parser(
        "page-id",
        help="Print the page ID from a Notion URL",
    )
    page_id_parser.add_argument("source", help="Notion page URL or ID")

    subparsers.add_parser(
        "test-connection",
        help="Verify the API token",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else Config()
    except ConfigError as e:
        setup_logging(verbose=args.verbose)
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(config.log_file, args.verbose)

    try:
        COMMANDS[args.command](args, config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except NotionApiError as e:
        logger.error(f"Notion API error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
