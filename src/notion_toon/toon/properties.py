# ABOUTME: Extracts simple values from Notion page properties.
# ABOUTME: Formats them as TOON scalars and inline lists.

import math
from decimal import Decimal
from typing import Any, Mapping

from ..models import rich_text_to_plain
from .escaping import escape_value


def _name_or_id(obj: Any) -> Any:
    if not obj:
        return None
    return obj.get("name") or obj.get("id")


def _date_start(date: Any) -> Any:
    return date.get("start") if date else None


def _extract_formula_value(formula: Any) -> Any:
    if not formula:
        return None
    formula_type = formula.get("type")
    if formula_type in ("string", "number", "boolean"):
        return formula.get(formula_type)
    if formula_type == "date":
        return _date_start(formula.get("date"))
    return None


def _extract_rollup_value(rollup: Any) -> Any:
    if not rollup:
        return None
    rollup_type = rollup.get("type")
    if rollup_type == "number":
        return rollup.get("number")
    if rollup_type == "date":
        return _date_start(rollup.get("date"))
    if rollup_type == "array":
        return [extract_property_value(item) for item in rollup.get("array") or []]
    return None


def extract_property_value(prop: dict) -> Any:
    """Extract a simple value from a Notion property.

    Returns a string, number, bool, list or None. Unknown property types
    give None.
    """
    if not prop:
        return None
    prop_type = prop.get("type")

    if prop_type == "title":
        return rich_text_to_plain(prop.get("title"))
    if prop_type == "rich_text":
        return rich_text_to_plain(prop.get("rich_text"))
    if prop_type == "number":
        return prop.get("number")
    if prop_type in ("select", "status"):
        option = prop.get(prop_type)
        return (option.get("name") or None) if option else None
    if prop_type == "multi_select":
        return [option.get("name") for option in prop.get("multi_select") or []]
    if prop_type == "date":
        date = prop.get("date")
        if not date:
            return None
        if date.get("end"):
            return f"{date.get('start')} → {date['end']}"
        return date.get("start")
    if prop_type == "people":
        return [_name_or_id(person) for person in prop.get("people") or []]
    if prop_type == "files":
        return [
            f.get("name") or (f.get("external") or {}).get("url") or (f.get("file") or {}).get("url")
            for f in prop.get("files") or []
        ]
    if prop_type in ("checkbox", "url", "email", "phone_number", "created_time", "last_edited_time"):
        return prop.get(prop_type)
    if prop_type == "formula":
        return _extract_formula_value(prop.get("formula"))
    if prop_type == "relation":
        return [relation.get("id") for relation in prop.get("relation") or []]
    if prop_type == "rollup":
        return _extract_rollup_value(prop.get("rollup"))
    if prop_type in ("created_by", "last_edited_by"):
        return _name_or_id(prop.get(prop_type))
    if prop_type == "unique_id":
        unique_id = prop.get("unique_id")
        if not unique_id:
            return None
        prefix = unique_id.get("prefix")
        return f"{prefix}-{unique_id.get('number')}" if prefix else unique_id.get("number")

    return None


# Floats outside this magnitude range use exponent notation (1e-7, 1e+21)
EXPONENT_BELOW = 1e-6
EXPONENT_FROM = 1e21


def format_number(value: int | float) -> str:
    """Render a number in its shortest decimal form.

    Integral floats drop the fractional part (3.0 -> "3"). Very small and
    very large magnitudes use an exponent without zero padding, e.g. "1e-7"
    and "1e+21".
    """
    if not isinstance(value, float) or not math.isfinite(value):
        return str(value)

    magnitude = abs(value)
    if magnitude == 0 or EXPONENT_BELOW <= magnitude < EXPONENT_FROM:
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")

    mantissa, _, exponent = repr(value).partition("e")
    sign = "-" if exponent.startswith("-") else "+"
    return f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"


def format_property_value(value: Any) -> str:
    """Format an extracted property value for TOON output."""
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_item(item) for item in value) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return escape_value(str(value))


def _format_item(item: Any) -> str:
    if item is None:
        return "null"
    return format_property_value(item)


def convert_properties(properties: Mapping[str, dict] | None) -> list[str]:
    """Render every non-title property with a value as ``name: value``."""
    if not properties:
        return []

    lines = []
    for name, prop in properties.items():
        if not prop or prop.get("type") == "title":
            continue

        value = extract_property_value(prop)
        if value is None or value == "":
            continue

        lines.append(f"{name}: {format_property_value(value)}")

    return lines
