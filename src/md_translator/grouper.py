"""Grouping of Markdown events into translation units.

The builder walks the event stream once, keeping an explicit stack of open
blocks. Inline events collect into a run belonging to the innermost block;
a block boundary closes the run and turns it into a translation unit. Code
blocks are handed to a language scanner which yields one unit per string
literal or comment. Everything that is not translatable text becomes part of
the skeleton, which is kept alongside the units so that the document can be
rebuilt later.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .codeblocks import Literal, Piece, find_scanner, has_literals
from .directives import Comment, Skip, find_directive
from .errors import DocumentParseError
from .events import (
    TEXT_BLOCKS,
    Code,
    End,
    Event,
    Html,
    Rule,
    SoftBreak,
    Start,
    Tag,
    Text,
)
from .models import TranslationUnit, UnitKind
from .parser import parse_markdown
from .renderer import render_inline

logger = logging.getLogger(__name__)


@dataclass
class Skeleton:
    """Events that are copied to the output unchanged."""

    events: List[Event] = field(default_factory=list)


@dataclass
class TextRun:
    """An inline run that forms one translation unit."""

    unit: TranslationUnit
    events: List[Event]
    lead: List[Event] = field(default_factory=list)
    trail: List[Event] = field(default_factory=list)


@dataclass
class CodeRun:
    """A code block whose literals and comments are translation units."""

    start: Start
    end: End
    pieces: List[Piece]
    units: List[TranslationUnit]
    line: int = 0


Segment = Union[Skeleton, TextRun, CodeRun]


@dataclass
class Extraction:
    """Result of grouping one document."""

    document: str
    units: List[TranslationUnit]
    segments: List[Segment]

    @property
    def messages(self) -> List[TranslationUnit]:
        """Units that take part in translation."""
        return [unit for unit in self.units if not unit.skip]


_BLOCK_KINDS = {
    Tag.HEADING: UnitKind.HEADING,
    Tag.ITEM: UnitKind.LIST_ITEM,
    Tag.TABLE_CELL: UnitKind.TABLE_CELL,
    Tag.FOOTNOTE_DEFINITION: UnitKind.FOOTNOTE,
}


def _has_content(events: Iterable[Event]) -> bool:
    return any(
        isinstance(event, Code) or (isinstance(event, Text) and event.text.strip())
        for event in events
    )


def trim_run(events: Sequence[Event]) -> Tuple[List[Event], List[Event], List[Event]]:
    """
    Split surrounding whitespace off an inline run.

    Returns:
        (leading events, core events, trailing events); leading and trailing
        events are whitespace-only text and soft breaks
    """
    core = list(events)
    lead: List[Event] = []
    trail: List[Event] = []

    while core:
        first = core[0]
        if isinstance(first, SoftBreak):
            lead.append(core.pop(0))
            continue
        if isinstance(first, Text):
            stripped = first.text.lstrip()
            if not stripped:
                lead.append(core.pop(0))
                continue
            if stripped != first.text:
                cut = len(first.text) - len(stripped)
                lead.append(Text(first.text[:cut], line=first.line))
                core[0] = Text(stripped, line=first.line)
        break

    while core:
        last = core[-1]
        if isinstance(last, SoftBreak):
            trail.insert(0, core.pop())
            continue
        if isinstance(last, Text):
            stripped = last.text.rstrip()
            if not stripped:
                trail.insert(0, core.pop())
                continue
            if stripped != last.text:
                trail.insert(0, Text(last.text[len(stripped):], line=last.line))
                core[-1] = Text(stripped, line=last.line)
        break

    return lead, core, trail


class _Builder:
    """Per-document state of one grouping pass."""

    def __init__(self, document: str, context: Optional[str]) -> None:
        self.document = document
        self.context = context
        self.stack: List[Start] = []
        self.segments: List[Segment] = []
        self.units: List[TranslationUnit] = []
        self.run: List[Event] = []
        self.inline_open: List[Tag] = []
        self.code: List[Text] = []
        self.pending_skip = False
        self.pending_comments: List[str] = []

    def fail(self, message: str) -> DocumentParseError:
        return DocumentParseError(self.document, message)

    # Skeleton and units

    def skeleton(self, *events: Event) -> None:
        if self.segments and isinstance(self.segments[-1], Skeleton):
            self.segments[-1].events.extend(events)
        else:
            self.segments.append(Skeleton(list(events)))

    def take_directives(self) -> Tuple[bool, List[str]]:
        skip, comments = self.pending_skip, self.pending_comments
        self.pending_skip = False
        self.pending_comments = []
        return skip, comments

    def new_unit(self, **fields) -> TranslationUnit:
        skip, comments = self.take_directives()
        unit = TranslationUnit(
            document=self.document,
            context=self.context,
            comments=comments,
            skip=skip,
            **fields,
        )
        if skip:
            logger.debug(f"Skipping unit at {unit.location}: {unit.message_key[:40]!r}")
        self.units.append(unit)
        return unit

    def current_kind(self) -> UnitKind:
        if not self.stack:
            return UnitKind.PARAGRAPH
        tag = self.stack[-1].tag
        if tag is Tag.PARAGRAPH and len(self.stack) > 1:
            return _BLOCK_KINDS.get(self.stack[-2].tag, UnitKind.PARAGRAPH)
        return _BLOCK_KINDS.get(tag, UnitKind.PARAGRAPH)

    # Inline runs

    def close_run(self) -> None:
        if self.inline_open:
            raise self.fail(f"Unclosed inline tag: {self.inline_open[-1].value}")
        events, self.run = self.run, []
        if not events:
            return
        if not _has_content(events):
            self.skeleton(*events)
            return

        lead, core, trail = trim_run(events)
        references: List[Tuple[str, str]] = []
        key = render_inline(
            core, soft_break=" ", references=references, escape_line_start=True
        ).strip()
        if not key:
            self.skeleton(*events)
            return

        block = self.stack[-1] if self.stack else None
        unit = self.new_unit(
            message_key=key,
            source_text=render_inline(core, escape_line_start=True),
            kind=self.current_kind(),
            line=core[0].line or (block.line if block else 0),
            leading=render_inline(lead),
            trailing=render_inline(trail),
            references=tuple(references),
            level=int(block.get("level", 0)) if block and block.tag is Tag.HEADING else 0,
        )
        self.segments.append(TextRun(unit, core, lead, trail))

    def inline(self, event: Event) -> None:
        if isinstance(event, Start):
            self.inline_open.append(event.tag)
        elif isinstance(event, End):
            if not self.inline_open or self.inline_open[-1] is not event.tag:
                raise self.fail(f"Unexpected end of inline tag: {event.tag.value}")
            self.inline_open.pop()
        self.run.append(event)

    def html(self, event: Html) -> None:
        in_text = bool(self.stack) and self.stack[-1].tag in TEXT_BLOCKS
        if self.inline_open:
            self.run.append(event)
            return
        directive = find_directive(event.text)
        if directive is None and in_text and not event.text.endswith("\n"):
            self.run.append(event)
            return
        self.close_run()
        if isinstance(directive, Skip):
            self.pending_skip = True
        elif isinstance(directive, Comment):
            self.pending_comments.append(directive.text)
        self.skeleton(event)

    # Code blocks

    def close_code(self, start: Start, end: End) -> None:
        texts, self.code = self.code, []
        code = "".join(text.text for text in texts)
        line = texts[0].line if texts else start.line
        events: List[Event] = [start, *texts, end]

        if self.pending_skip:
            self.take_directives()
            logger.debug(f"Skipping code block at {self.document}:{start.line}")
            self.skeleton(*events)
            return

        scanner = find_scanner(str(start.get("info", "")))
        pieces = scanner.scan(code) if scanner is not None else []
        if not has_literals(pieces):
            self.skeleton(*events)
            return

        units: List[TranslationUnit] = []
        for piece in pieces:
            if isinstance(piece, Literal):
                units.append(
                    self.new_unit(
                        message_key=piece.text,
                        source_text=piece.text,
                        kind=UnitKind.CODE,
                        line=line + code.count("\n", 0, piece.offset),
                    )
                )
        self.segments.append(CodeRun(start, end, pieces, units, line))

    # Driver

    def feed(self, event: Event) -> None:
        top = self.stack[-1].tag if self.stack else None

        if top is Tag.CODE_BLOCK and not isinstance(event, End):
            if not isinstance(event, Text):
                raise self.fail(f"Unexpected event in code block: {event!r}")
            self.code.append(event)
        elif isinstance(event, Start) and not event.is_inline:
            self.close_run()
            self.stack.append(event)
            if event.tag is not Tag.CODE_BLOCK:
                self.skeleton(event)
        elif isinstance(event, End) and not event.is_inline:
            if top is not event.tag:
                raise self.fail(f"Unexpected end of block: {event.tag.value}")
            start = self.stack.pop()
            if event.tag is Tag.CODE_BLOCK:
                self.close_code(start, event)
            else:
                self.close_run()
                self.skeleton(event)
        elif isinstance(event, Html):
            self.html(event)
        elif isinstance(event, Rule):
            self.close_run()
            self.skeleton(event)
        else:
            self.inline(event)

    def finish(self) -> Extraction:
        self.close_run()
        if self.stack:
            raise self.fail(f"Unclosed block: {self.stack[-1].tag.value}")
        return Extraction(self.document, self.units, self.segments)


def build_units(
    events: Iterable[Event],
    document: str = "",
    context: Optional[str] = None,
) -> Extraction:
    """
    Group a document's events into translation units.

    Args:
        events: Event stream of one document
        document: Document identity used in locations and errors
        context: Message context given to every unit

    Returns:
        The units (skipped ones included) and the skeleton segments

    Raises:
        DocumentParseError: If the events are not properly nested
    """
    builder = _Builder(document, context)
    for event in events:
        builder.feed(event)
    extraction = builder.finish()
    logger.debug(
        f"Grouped {document or '<document>'}: {len(extraction.messages)} messages, "
        f"{len(extraction.units) - len(extraction.messages)} skipped"
    )
    return extraction


def extract_messages(text: str, document: str = "") -> List[TranslationUnit]:
    """Parse Markdown text and return its translatable units."""
    return build_units(parse_markdown(text), document).messages
