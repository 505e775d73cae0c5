# ABOUTME: Single-line value escaping for TOON output.
# ABOUTME: Multi-line text collapses to its first line plus an ellipsis.

ELLIPSIS = "..."


def escape_value(value: str | None) -> str:
    """Make user text safe for a single-line TOON slot.

    Text without a newline is returned unchanged; commas and colons are not
    quoted. Text with a newline is cut at the first one and ``...`` appended.
    """
    if not value:
        return ""
    if "\n" in value:
        return value.split("\n", 1)[0] + ELLIPSIS
    return value
