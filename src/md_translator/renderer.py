"""Render Markdown events back to Markdown text.

The output is normalized rather than byte-for-byte identical to the input:
emphasis is written with ``*``, strong emphasis with ``**``, lists with ``-``
and code blocks are always fenced. Parsing the output again yields the same
events.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .events import (
    TEXT_BLOCKS,
    Code,
    End,
    Event,
    FootnoteReference,
    HardBreak,
    Html,
    Rule,
    SoftBreak,
    Start,
    Tag,
    Text,
)

logger = logging.getLogger(__name__)

EMPHASIS_TOKEN = "*"
STRONG_TOKEN = "**"
STRIKETHROUGH_TOKEN = "~~"
RULE_TOKEN = "---"
# Rule inside containers, where "---" below text is a setext underline.
NESTED_RULE_TOKEN = "***"

_INLINE_MARKERS = {
    Tag.EMPHASIS: EMPHASIS_TOKEN,
    Tag.STRONG: STRONG_TOKEN,
    Tag.STRIKETHROUGH: STRIKETHROUGH_TOKEN,
}

_ALWAYS_ESCAPED = re.compile(r"[\\`*\[\]]")
_UNDERSCORE = re.compile(r"(?<![^\W_])_|_(?![^\W_])")
_HTML_START = re.compile(r"<(?=[A-Za-z/!?])")
_ENTITY = re.compile(r"&(?=#?\w+;)")
_BLOCK_START = re.compile(r"(?:#{1,6}|[-+=]+)(?=[ \t]|$)")
_ORDERED_START = re.compile(r"(\d{1,9})(?=[.)](?:[ \t]|$))")
_CLOSING_HASHES = re.compile(r"(?<![^ \t])(#+)$")

# Link references as (href, title) pairs, numbered from 1.
References = List[Tuple[str, str]]


def escape_text(text: str, *, line_start: bool = False, in_table: bool = False) -> str:
    """
    Backslash-escape characters that would otherwise be read as markup.

    Args:
        text: Literal text
        line_start: Whether the text starts a new line of a block, where
            list, heading and quote markers must be escaped too
        in_table: Whether the text is inside a table cell

    Returns:
        Markdown source that parses back to ``text``
    """
    text = _ALWAYS_ESCAPED.sub(r"\\\g<0>", text)
    text = _UNDERSCORE.sub(r"\\_", text)
    text = text.replace("~~", r"\~\~")
    text = _HTML_START.sub(r"\\<", text)
    text = _ENTITY.sub(r"\\&", text)
    if in_table:
        text = text.replace("|", r"\|")
    if line_start:
        if text.startswith(">") or _BLOCK_START.match(text):
            text = "\\" + text
        else:
            text = _ORDERED_START.sub(r"\1\\", text, count=1)
    return text


def code_span(text: str) -> str:
    """Wrap ``text`` in enough backticks to survive as a code span."""
    runs = {len(run) for run in re.findall(r"`+", text)}
    size = 1
    while size in runs:
        size += 1
    fence = "`" * size
    pad = ""
    if text.startswith("`") or text.endswith("`"):
        pad = " "
    elif text.startswith(" ") and text.endswith(" ") and text.strip():
        pad = " "
    return f"{fence}{pad}{text}{pad}{fence}"


def _link_destination(href: str, title: str) -> str:
    if not href or re.search(r"[\s<>]", href) or href.count("(") != href.count(")"):
        destination = "<" + href.replace("<", "%3C").replace(">", "%3E") + ">"
    else:
        destination = href
    if title:
        escaped = title.replace("\\", "\\\\").replace('"', '\\"')
        return f'({destination} "{escaped}")'
    return f"({destination})"


class InlineWriter:
    """
    Accumulates Markdown for a run of inline events.

    With ``references`` set, link and image targets are not written inline:
    they are appended to the list and the link is written as ``[text][n]``.
    """

    def __init__(
        self,
        *,
        soft_break: str = "\n",
        references: Optional[References] = None,
        escape_line_start: bool = False,
        in_table: bool = False,
    ) -> None:
        self.soft_break = soft_break
        self.references = references
        self.escape_line_start = escape_line_start
        self.in_table = in_table
        self.parts: List[str] = []
        self._open: List[Start] = []

    def __bool__(self) -> bool:
        return bool(self.parts)

    def getvalue(self) -> str:
        return "".join(self.parts)

    def _at_line_start(self) -> bool:
        return not self.parts or self.parts[-1].endswith("\n")

    def _in_autolink(self) -> bool:
        return any(start.tag is Tag.LINK and start.get("autolink") for start in self._open)

    def _target(self, href: str, title: str) -> str:
        if self.references is None:
            return _link_destination(href, title)
        pair = (href, title)
        if pair not in self.references:
            self.references.append(pair)
        return f"[{self.references.index(pair) + 1}]"

    def write(self, event: Event) -> None:
        if isinstance(event, Text):
            if self._in_autolink():
                self.parts.append(event.text)
            else:
                line_start = self.escape_line_start and self._at_line_start()
                self.parts.append(
                    escape_text(event.text, line_start=line_start, in_table=self.in_table)
                )
        elif isinstance(event, Code):
            span = code_span(event.text)
            self.parts.append(span.replace("|", r"\|") if self.in_table else span)
        elif isinstance(event, Html):
            self.parts.append(event.text)
        elif isinstance(event, SoftBreak):
            self.parts.append(self.soft_break)
        elif isinstance(event, HardBreak):
            self.parts.append("\\\n")
        elif isinstance(event, FootnoteReference):
            self.parts.append(f"[^{event.label}]")
        elif isinstance(event, Start) and event.is_inline:
            self._open.append(event)
            if event.tag is Tag.LINK and self.parts and self.parts[-1].endswith("!"):
                # "![" would open an image.
                self.parts[-1] = self.parts[-1][:-1] + "\\!"
            if event.tag is Tag.LINK:
                self.parts.append("<" if event.get("autolink") else "[")
            elif event.tag is Tag.IMAGE:
                self.parts.append("![")
            else:
                self.parts.append(_INLINE_MARKERS[event.tag])
        elif isinstance(event, End) and event.is_inline:
            if not self._open or self._open[-1].tag is not event.tag:
                raise ValueError(f"Unbalanced inline end tag: {event.tag.value}")
            start = self._open.pop()
            if event.tag is Tag.LINK:
                if start.get("autolink"):
                    self.parts.append(">")
                else:
                    self.parts.append("]" + self._target(start.get("href", ""), start.get("title", "")))
            elif event.tag is Tag.IMAGE:
                self.parts.append("]" + self._target(start.get("src", ""), start.get("title", "")))
            else:
                self.parts.append(_INLINE_MARKERS[event.tag])
        else:
            raise ValueError(f"Not an inline event: {event!r}")


def render_inline(
    events: Iterable[Event],
    *,
    soft_break: str = "\n",
    references: Optional[References] = None,
    escape_line_start: bool = False,
) -> str:
    """
    Render a run of inline events.

    Args:
        events: Inline events (text, code spans, emphasis, links...)
        soft_break: Text written for a soft line break
        references: When given, collects link targets and writes numbered
            references instead of inline destinations
        escape_line_start: Whether to escape block markers such as "1." or
            "#" at the start of the run

    Returns:
        Markdown text of the run
    """
    writer = InlineWriter(
        soft_break=soft_break,
        references=references,
        escape_line_start=escape_line_start,
    )
    for event in events:
        writer.write(event)
    return writer.getvalue()


@dataclass
class _Frame:
    """An open block while rendering."""

    start: Optional[Start]
    blocks: List[List[str]] = field(default_factory=list)
    inline: Optional[InlineWriter] = None
    code: List[str] = field(default_factory=list)
    cells: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    alignments: List[str] = field(default_factory=list)
    has_paragraph: bool = False
    loose: bool = False
    items: int = 0

    @property
    def tag(self) -> Optional[Tag]:
        return self.start.tag if self.start is not None else None

    def writer(self) -> InlineWriter:
        if self.inline is None:
            self.inline = InlineWriter(
                soft_break=" " if self.tag is Tag.HEADING else "\n",
                escape_line_start=self.tag is not Tag.TABLE_CELL,
                in_table=self.tag is Tag.TABLE_CELL,
            )
        return self.inline

    def text(self) -> str:
        return self.inline.getvalue() if self.inline is not None else ""

    def flush_inline(self) -> None:
        """Turn inline text written directly into a container into a block."""
        if self.inline:
            self.blocks.append(self.inline.getvalue().split("\n"))
        self.inline = None


def _join_blocks(blocks: List[List[str]], blank: bool = True) -> List[str]:
    lines: List[str] = []
    for block in blocks:
        if lines and blank:
            lines.append("")
        lines.extend(block)
    return lines


def _indent(lines: List[str], first: str, rest: str) -> List[str]:
    if not lines:
        return [first.rstrip()]
    result = [(first + lines[0]).rstrip() if lines[0] else first.rstrip()]
    result.extend(rest + line if line else "" for line in lines[1:])
    return result


def _fence(content: str) -> str:
    longest = max((len(run) for run in re.findall(r"`{3,}", content)), default=2)
    return "`" * max(3, longest + 1)


def _table_row(cells: List[str]) -> str:
    return "| " + " | ".join(cells) + " |"


_ALIGNMENT_RULES = {"left": ":--", "right": "--:", "center": ":-:"}


def _close(frame: _Frame, parent: _Frame) -> None:
    tag = frame.tag
    if tag is Tag.PARAGRAPH:
        parent.blocks.append(frame.text().split("\n"))
        parent.has_paragraph = True
    elif tag is Tag.HEADING:
        hashes = "#" * int(frame.start.get("level", 1))
        text = _CLOSING_HASHES.sub(r"\\\1", frame.text().strip())
        parent.blocks.append([f"{hashes} {text}" if text else hashes])
    elif tag is Tag.CODE_BLOCK:
        content = "".join(frame.code)
        fence = _fence(content)
        info = frame.start.get("info", "")
        body = content[:-1] if content.endswith("\n") else content
        lines = [fence + info]
        if content:
            lines.extend(body.split("\n"))
        lines.append(fence)
        parent.blocks.append(lines)
    elif tag is Tag.BLOCK_QUOTE:
        lines = _join_blocks(frame.blocks)
        parent.blocks.append([f"> {line}" if line else ">" for line in lines] or [">"])
    elif tag is Tag.ITEM:
        if parent.start.get("ordered"):
            marker = f"{int(parent.start.get('start', 1)) + parent.items}."
        else:
            marker = "-"
        parent.items += 1
        if frame.has_paragraph:
            parent.loose = True
        lines = _join_blocks(frame.blocks, blank=frame.has_paragraph)
        parent.blocks.append(_indent(lines, marker + " ", " " * (len(marker) + 1)))
    elif tag is Tag.LIST:
        parent.blocks.append(_join_blocks(frame.blocks, blank=frame.loose))
    elif tag is Tag.TABLE_CELL:
        parent.cells.append(frame.text().strip())
        parent.alignments.append(frame.start.get("align", ""))
    elif tag in (Tag.TABLE_HEAD, Tag.TABLE_ROW):
        parent.rows.append(frame.cells)
        if tag is Tag.TABLE_HEAD:
            parent.alignments = frame.alignments
    elif tag is Tag.TABLE:
        if not frame.rows:
            return
        head, *body = frame.rows
        rules = [_ALIGNMENT_RULES.get(align, "---") for align in frame.alignments]
        rules += ["---"] * (len(head) - len(rules))
        lines = [_table_row(head), _table_row(rules)]
        lines.extend(_table_row(row) for row in body)
        parent.blocks.append(lines)
    elif tag is Tag.FOOTNOTE_DEFINITION:
        lines = _join_blocks(frame.blocks)
        label = frame.start.get("label", "")
        parent.blocks.append(_indent(lines, f"[^{label}]: ", "    "))


def render_markdown(events: Iterable[Event]) -> str:
    """
    Render a complete document.

    Args:
        events: Balanced document events

    Returns:
        Markdown text, ending with a newline unless the document is empty

    Raises:
        ValueError: If the events are not properly nested
    """
    root = _Frame(start=None)
    stack: List[_Frame] = [root]

    for event in events:
        frame = stack[-1]
        if frame.tag is Tag.CODE_BLOCK and isinstance(event, Text):
            frame.code.append(event.text)
        elif isinstance(event, Start) and not event.is_inline:
            frame.flush_inline()
            stack.append(_Frame(start=event))
        elif isinstance(event, End) and not event.is_inline:
            if frame.tag is not event.tag:
                raise ValueError(f"Unbalanced end tag: {event.tag.value}")
            if frame.tag not in (Tag.PARAGRAPH, Tag.HEADING, Tag.TABLE_CELL):
                frame.flush_inline()
            stack.pop()
            _close(frame, stack[-1])
        elif isinstance(event, Rule):
            frame.flush_inline()
            frame.blocks.append([RULE_TOKEN if frame.start is None else NESTED_RULE_TOKEN])
        elif isinstance(event, Html) and (
            frame.tag not in TEXT_BLOCKS or event.text.endswith("\n")
        ):
            # Block-level HTML always ends with a newline.
            frame.flush_inline()
            frame.blocks.append(event.text.rstrip("\n").split("\n"))
        else:
            frame.writer().write(event)

    if len(stack) > 1:
        raise ValueError(f"Unclosed block: {stack[-1].tag.value}")
    root.flush_inline()
    if not root.blocks:
        return ""
    return "\n".join(_join_blocks(root.blocks)) + "\n"
