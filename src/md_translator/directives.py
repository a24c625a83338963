"""Recognition of translator directives hidden in HTML comments.

Two directives are understood::

    <!-- i18n:skip -->
    <!-- i18n:comment: Keep the product name in English. -->

The older ``mdbook-xgettext`` prefix is accepted as well, and extra dashes
around the comment are tolerated. Anything that does not match is ordinary
HTML.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

DIRECTIVE_PATTERN = re.compile(
    r"""
    <!-{2,}\s*                  # opening of the comment
    (?:i18n|mdbook-xgettext)    # reserved prefix
    \s*:                        # prefix delimiter
    (?P<command>.*[^-])         # command and payload
    -{2,}>                      # closing of the comment
    """,
    re.VERBOSE | re.DOTALL,
)

_DELIMITERS = re.compile(r"[\s:-]")


@dataclass(frozen=True)
class Skip:
    """Suppress translation of the next unit."""


@dataclass(frozen=True)
class Comment:
    """Attach ``text`` to the next unit as a translator comment."""

    text: str


Directive = Union[Skip, Comment]


def find_directive(html: str) -> Optional[Directive]:
    """
    Parse a raw HTML snippet as a directive.

    Args:
        html: Raw HTML, usually the text of an ``Html`` event

    Returns:
        The directive, or None when the HTML is not a well-formed directive
    """
    match = DIRECTIVE_PATTERN.fullmatch(html.strip())
    if not match:
        return None

    command = match.group("command").strip()
    name = _DELIMITERS.split(command, maxsplit=1)[0]
    if name == "skip":
        return Skip()
    if name == "comment":
        payload = command[len("comment"):]
        return Comment(payload.lstrip(": \t\n").strip())
    return None
