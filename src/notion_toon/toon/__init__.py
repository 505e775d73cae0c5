# ABOUTME: TOON conversion package.
# ABOUTME: Exports the converter, escaping helper and file writer.

from .converter import convert_to_toon, extract_title
from .escaping import escape_value
from .writer import ToonWriter, sanitize_filename

__all__ = ["convert_to_toon", "extract_title", "escape_value", "ToonWriter", "sanitize_filename"]
