"""Text processing utilities."""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple


# Block markers that may prefix a line of an old, unnormalized message.
LINE_MARKERS = re.compile(r"^\s*(?:[-*+]|\d{1,9}[.)]|#{1,6}|>)\s+")

# Numbered link references used in message keys, e.g. "[text][2]".
REFERENCE_LABEL = re.compile(r"\]\[(\d+)\]")


def normalize_whitespace(text: str) -> str:
    """Collapse every run of whitespace to a single space and trim."""
    return re.sub(r"\s+", " ", text).strip()


def comparable_text(text: str) -> str:
    """
    Normalize text for similarity comparisons.

    Whitespace is collapsed and case is folded so that rewrapping or
    capitalization changes do not count as edits.
    """
    return normalize_whitespace(text).casefold()


def message_lines(text: str) -> List[str]:
    """
    Split an old message into normalized single lines.

    List bullets, heading hashes and quote markers are dropped, so
    ``"- foo\\n- bar\\n"`` gives ``["foo", "bar"]``. Blank lines are skipped.
    """
    lines: List[str] = []
    for line in text.splitlines():
        line = LINE_MARKERS.sub("", line)
        line = normalize_whitespace(line)
        if line:
            lines.append(line)
    return lines


def slugify(text: str) -> str:
    """
    Turn a heading into a file-name friendly slug.

    Only alphanumeric characters and hyphens are kept. Returns "section" when
    nothing is left.
    """
    text = REFERENCE_LABEL.sub("]", text)
    text = re.sub(r"\s+", "-", text.strip().lower())
    slug = "".join(char for char in text if char.isalnum() or char == "-")
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug or "section"



def renumber_references(
    text: str,
    own: Sequence[Tuple[str, str]],
    target: Sequence[Tuple[str, str]],
) -> str:
    """
    Rewrite the reference numbers of ``text`` to the numbering of ``target``.

    ``own`` holds the (href, title) pairs the numbers of ``text`` refer to.
    References whose target is not in ``target`` keep their number.
    """
    def replace(match):
        number = int(match.group(1))
        if number > len(own) or own[number - 1] not in target:
            return match.group(0)
        return f"][{target.index(own[number - 1]) + 1}]"

    return REFERENCE_LABEL.sub(replace, text)
