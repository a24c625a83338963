"""Markdown event model.

A document is an ordered list of events, as produced by a streaming Markdown
parser: ``Start``/``End`` pairs for blocks and inline containers, with leaf
events such as ``Text`` or ``Code`` in between. Events are immutable. Each one
remembers the line it starts on, which is ignored when comparing events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Tag(str, Enum):
    """Container kinds that are opened by ``Start`` and closed by ``End``."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    LIST = "list"
    ITEM = "item"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    FOOTNOTE_DEFINITION = "footnote_definition"

    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    IMAGE = "image"

    @property
    def is_inline(self) -> bool:
        return self in INLINE_TAGS


INLINE_TAGS = frozenset(
    {Tag.EMPHASIS, Tag.STRONG, Tag.STRIKETHROUGH, Tag.LINK, Tag.IMAGE}
)

# Blocks whose direct inline content forms a translation unit.
TEXT_BLOCKS = frozenset(
    {Tag.PARAGRAPH, Tag.HEADING, Tag.ITEM, Tag.TABLE_CELL, Tag.FOOTNOTE_DEFINITION}
)


@dataclass(frozen=True)
class Event:
    """Base class of all events."""

    line: int = field(default=0, compare=False, kw_only=True)

    @property
    def is_inline(self) -> bool:
        return False


@dataclass(frozen=True)
class Start(Event):
    tag: Tag
    attrs: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_inline(self) -> bool:
        return self.tag.is_inline

    def get(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)


@dataclass(frozen=True)
class End(Event):
    tag: Tag

    @property
    def is_inline(self) -> bool:
        return self.tag.is_inline


@dataclass(frozen=True)
class Text(Event):
    text: str

    @property
    def is_inline(self) -> bool:
        return True


@dataclass(frozen=True)
class Code(Event):
    """An inline code span."""

    text: str

    @property
    def is_inline(self) -> bool:
        return True


@dataclass(frozen=True)
class Html(Event):
    """Raw HTML, either a block or an inline tag."""

    text: str


@dataclass(frozen=True)
class SoftBreak(Event):
    @property
    def is_inline(self) -> bool:
        return True


@dataclass(frozen=True)
class HardBreak(Event):
    @property
    def is_inline(self) -> bool:
        return True


@dataclass(frozen=True)
class Rule(Event):
    """A thematic break."""


@dataclass(frozen=True)
class FootnoteReference(Event):
    label: str

    @property
    def is_inline(self) -> bool:
        return True


def merge_text(events: list[Event]) -> list[Event]:
    """Join adjacent ``Text`` events, keeping the line of the first one."""
    merged: list[Event] = []
    for event in events:
        if isinstance(event, Text) and merged and isinstance(merged[-1], Text):
            previous = merged[-1]
            merged[-1] = Text(previous.text + event.text, line=previous.line)
        else:
            merged.append(event)
    return merged
