"""Markdown parsing into the event stream, built on markdown-it-py."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from markdown_it.token import Token

from .config import SUPPORTED_EXTENSIONS
from .events import (
    Code,
    End,
    Event,
    HardBreak,
    Html,
    Rule,
    SoftBreak,
    Start,
    Tag,
    Text,
    merge_text,
)

logger = logging.getLogger(__name__)

_INLINE_PAIRS = {
    "em": Tag.EMPHASIS,
    "strong": Tag.STRONG,
    "s": Tag.STRIKETHROUGH,
    "link": Tag.LINK,
}

_BLOCK_PAIRS = {
    "paragraph": Tag.PARAGRAPH,
    "heading": Tag.HEADING,
    "blockquote": Tag.BLOCK_QUOTE,
    "bullet_list": Tag.LIST,
    "ordered_list": Tag.LIST,
    "list_item": Tag.ITEM,
    "table": Tag.TABLE,
    "thead": Tag.TABLE_HEAD,
    "tr": Tag.TABLE_ROW,
    "th": Tag.TABLE_CELL,
    "td": Tag.TABLE_CELL,
}

_ALIGN = re.compile(r"text-align:\s*(left|right|center)")


@lru_cache(maxsize=None)
def _markdown() -> MarkdownIt:
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


def _block_line(token: Token) -> int:
    return token.map[0] + 1 if token.map else 0


def _split_kind(token_type: str) -> Tuple[str, str]:
    """Split "link_open" into ("link", "open")."""
    base, _, suffix = token_type.rpartition("_")
    return base, suffix


def _start_attrs(token: Token, base: str) -> Dict[str, object]:
    if base == "heading":
        return {"level": int(token.tag[1:])}
    if base == "bullet_list":
        return {"ordered": False}
    if base == "ordered_list":
        return {"ordered": True, "start": int(token.attrGet("start") or 1)}
    if base in ("th", "td"):
        match = _ALIGN.search(str(token.attrGet("style") or ""))
        return {"align": match.group(1)} if match else {}
    if base == "link":
        return {
            "href": str(token.attrGet("href") or ""),
            "title": str(token.attrGet("title") or ""),
            "autolink": token.markup == "autolink",
        }
    return {}


def _inline_events(children: Sequence[Token], line: int) -> List[Event]:
    """Convert the children of an inline token to events."""
    events: List[Event] = []
    for token in children:
        kind = token.type
        if kind in ("text", "text_special"):
            events.append(Text(token.content, line=line))
        elif kind == "code_inline":
            events.append(Code(token.content, line=line))
        elif kind == "softbreak":
            events.append(SoftBreak(line=line))
            line += 1
        elif kind == "hardbreak":
            events.append(HardBreak(line=line))
            line += 1
        elif kind == "html_inline":
            events.append(Html(token.content, line=line))
        elif kind == "image":
            attrs = {
                "src": str(token.attrGet("src") or ""),
                "title": str(token.attrGet("title") or ""),
            }
            events.append(Start(Tag.IMAGE, attrs, line=line))
            events.extend(_inline_events(token.children or [], line))
            events.append(End(Tag.IMAGE, line=line))
        else:
            base, suffix = _split_kind(kind)
            tag = _INLINE_PAIRS.get(base)
            if tag is None:
                logger.debug(f"Ignoring inline token '{kind}'")
            elif suffix == "open":
                events.append(Start(tag, _start_attrs(token, base), line=line))
            else:
                events.append(End(tag, line=line))
    return merge_text(events)


def _block_events(tokens: Sequence[Token]) -> List[Event]:
    events: List[Event] = []
    in_head = False
    for token in tokens:
        kind = token.type
        line = _block_line(token)

        if kind == "inline":
            events.extend(_inline_events(token.children or [], line))
        elif kind == "fence":
            events.append(Start(Tag.CODE_BLOCK, {"info": token.info.strip()}, line=line))
            if token.content:
                events.append(Text(token.content, line=line + 1))
            events.append(End(Tag.CODE_BLOCK))
        elif kind == "code_block":
            events.append(Start(Tag.CODE_BLOCK, {"info": ""}, line=line))
            if token.content:
                events.append(Text(token.content, line=line))
            events.append(End(Tag.CODE_BLOCK))
        elif kind == "html_block":
            content = token.content if token.content.endswith("\n") else token.content + "\n"
            events.append(Html(content, line=line))
        elif kind == "hr":
            events.append(Rule(line=line))
        else:
            base, suffix = _split_kind(kind)
            if base == "thead":
                in_head = suffix == "open"
            if token.hidden or base == "tbody" or (base == "tr" and in_head):
                # Tight list paragraphs and table body/head rows have no event.
                continue
            tag = _BLOCK_PAIRS.get(base)
            if tag is None:
                logger.debug(f"Ignoring block token '{kind}'")
            elif suffix == "open":
                events.append(Start(tag, _start_attrs(token, base), line=line))
            else:
                events.append(End(tag))
    return events


def parse_markdown(text: str) -> List[Event]:
    """
    Parse a Markdown document into events.

    Args:
        text: Markdown source

    Returns:
        Balanced list of events, with 1-based source lines
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _block_events(_markdown().parse(text))


def parse_inline(
    text: str,
    references: Sequence[Tuple[str, str]] = (),
    line: int = 0,
) -> List[Event]:
    """
    Parse a single message as inline Markdown.

    Args:
        text: Message text, e.g. a translation from a catalog
        references: Link targets as (href, title) pairs; ``[text][n]`` in the
            message resolves to the n-th pair (1-based)
        line: Line number given to the first event

    Returns:
        Inline events
    """
    env = {
        "references": {
            normalizeReference(str(number)): {"href": href, "title": title}
            for number, (href, title) in enumerate(references, 1)
        }
    }
    tokens = _markdown().parseInline(text, env)
    if not tokens:
        return []
    return _inline_events(tokens[0].children or [], line)


def validate_markdown_file(path: Path) -> Optional[str]:
    """
    Validate a Markdown file before processing.

    Args:
        path: Path to the document

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        expected = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        return f"Invalid file extension: {suffix} (expected {expected})"

    size = path.stat().st_size
    if size > 50 * 1024 * 1024:  # 50MB
        return f"File too large: {size / 1024 / 1024:.1f}MB (max 50MB)"

    return None
