"""Minimal lexers that find string literals and comments in code blocks.

Only two things in a code sample are worth translating: the text of string
literals and the text of comments. Each supported language gets a small
scanner built from its comment markers and quote characters. Languages
without a scanner are left alone entirely.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Literal:
    """Translatable text found in code, with its offset in the block."""

    text: str
    offset: int
    kind: str  # "string" or "comment"


Piece = Union[str, Literal]


class Scanner:
    """Splits code into fixed code text and translatable literals."""

    def __init__(
        self,
        line_comments: Sequence[str] = (),
        block_comments: Sequence[Tuple[str, str]] = (),
        quotes: Sequence[str] = ('"',),
        multiline_quotes: Sequence[str] = (),
    ) -> None:
        alternatives: List[str] = []
        self._kinds: Dict[str, str] = {}

        def add(prefix: str, body: str, suffix: str, kind: str) -> None:
            name = f"t{len(alternatives)}"
            self._kinds[name] = kind
            alternatives.append(
                f"(?P<{name}>{prefix}(?P<b{name}>{body}){suffix})"
            )

        # Longer delimiters first so that `"""` wins over `"`.
        for quote in sorted(multiline_quotes, key=len, reverse=True):
            q = re.escape(quote)
            add(q, rf"(?:\\.|(?!{q})[\s\S])*?", q, "string")
        for start, end in block_comments:
            add(re.escape(start), r"[\s\S]*?", re.escape(end), "comment")
        for marker in sorted(line_comments, key=len, reverse=True):
            # Repeated marker characters (`///`, `##`) belong to the marker.
            m = re.escape(marker)
            tail = re.escape(marker[-1])
            add(f"{m}{tail}*!?", r"[^\n]*", "", "comment")
        for quote in quotes:
            q = re.escape(quote)
            add(q, rf"(?:\\.|[^{q}\\\n])*", q, "string")

        self.pattern = re.compile("|".join(alternatives))

    def scan(self, code: str) -> List[Piece]:
        """
        Tokenize ``code`` into pieces.

        Joining the text of all pieces (literals included) gives back
        ``code`` exactly. Whitespace around a literal stays in the code
        pieces, so a literal's text never starts or ends with whitespace.
        """
        pieces: List[Piece] = []
        cursor = 0
        for match in self.pattern.finditer(code):
            name = match.lastgroup
            if name is None:
                continue
            start, end = match.span(f"b{name}")
            body = code[start:end]
            text = body.strip()
            if not text:
                continue
            text_start = start + (len(body) - len(body.lstrip()))
            text_end = text_start + len(text)
            pieces.append(code[cursor:text_start])
            pieces.append(Literal(text, text_start, self._kinds[name]))
            cursor = text_end
        pieces.append(code[cursor:])
        return [piece for piece in pieces if piece != ""]


def has_literals(pieces: Sequence[Piece]) -> bool:
    return any(isinstance(piece, Literal) for piece in pieces)


C_LIKE = Scanner(line_comments=["//"], block_comments=[("/*", "*/")])
PYTHON = Scanner(
    line_comments=["#"],
    quotes=['"', "'"],
    multiline_quotes=['"""', "'''"],
)
SHELL = Scanner(line_comments=["#"], quotes=['"', "'"])
JAVASCRIPT = Scanner(
    line_comments=["//"],
    block_comments=[("/*", "*/")],
    quotes=['"', "'"],
)
HASH_COMMENTS = Scanner(line_comments=["#"])
SQL = Scanner(line_comments=["--"], block_comments=[("/*", "*/")], quotes=["'"])
HTML = Scanner(block_comments=[("<!--", "-->")], quotes=[])

SCANNERS: Dict[str, Scanner] = {
    "rust": C_LIKE,
    "rs": C_LIKE,
    "c": C_LIKE,
    "cpp": C_LIKE,
    "c++": C_LIKE,
    "java": C_LIKE,
    "kotlin": C_LIKE,
    "go": C_LIKE,
    "swift": C_LIKE,
    "csharp": C_LIKE,
    "cs": C_LIKE,
    "dart": C_LIKE,
    "javascript": JAVASCRIPT,
    "js": JAVASCRIPT,
    "typescript": JAVASCRIPT,
    "ts": JAVASCRIPT,
    "python": PYTHON,
    "py": PYTHON,
    "sh": SHELL,
    "bash": SHELL,
    "shell": SHELL,
    "console": SHELL,
    "toml": HASH_COMMENTS,
    "yaml": HASH_COMMENTS,
    "yml": HASH_COMMENTS,
    "sql": SQL,
    "html": HTML,
    "xml": HTML,
}


def code_language(info: str) -> str:
    """
    Extract the language tag from a code fence info string.

    ``rust,editable`` and ``python {.numberLines}`` both yield the first word.
    """
    match = re.match(r"[^\s,{]+", info.strip())
    return match.group(0).lower() if match else ""


def find_scanner(info: str) -> Optional[Scanner]:
    """Look up the scanner for a fence info string, None if unsupported."""
    language = code_language(info)
    if not language:
        return None
    scanner = SCANNERS.get(language)
    if scanner is None:
        logger.debug(f"No literal scanner for code language '{language}'")
    return scanner
