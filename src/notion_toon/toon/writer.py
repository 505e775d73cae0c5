# ABOUTME: Writes TOON files named after the page title.
# ABOUTME: Handles safe filename generation and duplicate names.

import logging
import re
from pathlib import Path
from typing import Sequence

from ..models import Block, Page
from .converter import convert_to_toon, extract_title

logger = logging.getLogger(__name__)

TOON_SUFFIX = ".toon"


def sanitize_filename(name: str, max_length: int = 100) -> str:
    """Convert a string to a safe filename.

    Args:
        name: The original name.
        max_length: Maximum filename length.

    Returns:
        Sanitized filename.
    """
    safe = re.sub(r'[<>:"/\\|?*]', "-", name or "")
    safe = re.sub(r"\s+", " ", safe)
    safe = safe.strip(". ")

    if not safe:
        safe = "Untitled"

    if len(safe) > max_length:
        safe = safe[:max_length].rstrip(". ")

    return safe


class ToonWriter:
    """Writes converted pages into a directory, one file per page."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def write_page(self, page: Page, blocks: Sequence[Block]) -> Path:
        """Convert a page and write it as ``<title>.toon``.

        Args:
            page: Page metadata and properties.
            blocks: Top-level blocks of the page.

        Returns:
            Path to the written file.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        safe_title = sanitize_filename(extract_title(page) or "Untitled")
        file_path = self.output_dir / f"{safe_title}{TOON_SUFFIX}"

        # Never overwrite an earlier export
        counter = 1
        original_path = file_path
        while file_path.exists():
            file_path = original_path.with_name(f"{original_path.stem} ({counter}){TOON_SUFFIX}")
            counter += 1

        file_path.write_text(convert_to_toon(page, blocks), encoding="utf-8")
        logger.debug(f"Wrote TOON: {file_path}")

        return file_path
