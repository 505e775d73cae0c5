# ABOUTME: Immutable page and block records handed to the TOON converter.
# ABOUTME: Builds an owned block forest from Notion API dicts.

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

DEFAULT_CALLOUT_EMOJI = "💡"


def rich_text_to_plain(rich_text: Any) -> str:
    """Concatenate the plain_text fragments of a Notion rich_text array."""
    if not isinstance(rich_text, list):
        return ""
    return "".join(segment.get("plain_text") or "" for segment in rich_text if isinstance(segment, dict))


def _read_only(data: Any) -> Mapping[str, Any]:
    return MappingProxyType(dict(data) if isinstance(data, Mapping) else {})


@dataclass(frozen=True)
class Page:
    """Page metadata and its typed property map."""
    id: str
    created_time: str = ""
    last_edited_time: str = ""
    properties: Mapping[str, dict] = field(default_factory=dict)

    @classmethod
    def from_api(cls, page: dict) -> "Page":
        """Build a Page from a Notion API page object."""
        properties = page.get("properties") or {}
        return cls(
            id=page.get("id", ""),
            created_time=page.get("created_time", ""),
            last_edited_time=page.get("last_edited_time", ""),
            properties=_read_only(properties),
        )


@dataclass(frozen=True)
class Block:
    """One node of the content tree. Owns its children exclusively.

    ``payload`` is the kind-specific object from the API (the value stored
    under the block's ``type`` key). Accessors below never raise; missing
    fields fall back to empty values.
    """
    type: str
    id: str = ""
    payload: Mapping[str, Any] = field(default_factory=dict)
    children: tuple["Block", ...] = ()

    @classmethod
    def from_api(cls, block: dict, children: Iterable["Block"] | None = None) -> "Block":
        """Build a Block from a Notion API block object.

        Args:
            block: Notion block dict.
            children: Already-built child blocks. When omitted, any nested
                ``children`` list on the dict is converted recursively.

        Returns:
            Block with its subtree attached.
        """
        block_type = block.get("type") or "unsupported"
        if children is None:
            children = [cls.from_api(child) for child in block.get("children") or []]
        return cls(
            type=block_type,
            id=block.get("id", ""),
            payload=_read_only(block.get(block_type)),
            children=tuple(children),
        )

    @property
    def text(self) -> str:
        return rich_text_to_plain(self.payload.get("rich_text"))

    @property
    def caption(self) -> str:
        return rich_text_to_plain(self.payload.get("caption"))

    @property
    def checked(self) -> bool:
        return bool(self.payload.get("checked"))

    @property
    def language(self) -> str:
        return self.payload.get("language") or "plain"

    @property
    def emoji(self) -> str:
        icon = self.payload.get("icon") or {}
        return icon.get("emoji") or DEFAULT_CALLOUT_EMOJI

    @property
    def url(self) -> str:
        """URL of a link block, or of a hosted/external file."""
        if self.payload.get("url"):
            return self.payload["url"]
        for source in ("file", "external"):
            hosted = self.payload.get(source) or {}
            if hosted.get("url"):
                return hosted["url"]
        return ""

    @property
    def file_name(self) -> str:
        return self.payload.get("name") or "file"

    @property
    def title(self) -> str:
        return self.payload.get("title") or ""

    @property
    def expression(self) -> str:
        return self.payload.get("expression") or ""

    @property
    def has_column_header(self) -> bool:
        return bool(self.payload.get("has_column_header"))

    @property
    def cells(self) -> list[str]:
        """Plain text of each cell of a table row."""
        return [rich_text_to_plain(cell) for cell in self.payload.get("cells") or []]

    @property
    def linked_id(self) -> str:
        return self.payload.get("page_id") or self.payload.get("database_id") or ""
