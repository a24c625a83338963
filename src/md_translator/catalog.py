"""Reading and writing catalogs as gettext PO/POT files, via polib."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import polib

from .config import WRAP_WIDTH
from .errors import CatalogConflictError, CatalogParseError
from .models import Catalog, CatalogEntry, Location

logger = logging.getLogger(__name__)

# A line holding a quoted PO string, after an optional keyword and markers.
_STRING_LINE = re.compile(
    r'(?:#~\s*)?(?:#\|\s*)?(?:(?:msgctxt|msgid_plural|msgid|msgstr(?:\[\d+\])?)\s+)?(?=")'
)
_STRING = re.compile(r'"(?:[^"\\]|\\.)*"')
_ERROR_LINE = re.compile(r"line (\d+)")


def _to_poentry(entry: CatalogEntry) -> polib.POEntry:
    kwargs = dict(
        msgid=entry.msgid,
        msgctxt=entry.msgctxt,
        occurrences=[
            (location.document, str(location.line) if location.line else "")
            for location in entry.locations
        ],
        comment="\n".join(entry.comments),
        tcomment="\n".join(entry.translator_comments),
        flags=(["fuzzy"] if entry.fuzzy else []) + list(entry.flags),
        obsolete=entry.obsolete,
        previous_msgid=entry.previous_msgid,
    )
    if entry.msgid_plural is not None:
        kwargs["msgid_plural"] = entry.msgid_plural
        kwargs["msgstr_plural"] = dict(enumerate(entry.translations))
    else:
        kwargs["msgstr"] = entry.msgstr
    return polib.POEntry(**kwargs)


def _from_poentry(poentry: polib.POEntry) -> CatalogEntry:
    if poentry.msgid_plural:
        plural = poentry.msgstr_plural
        translations = [plural[index] for index in sorted(plural, key=int)]
    else:
        translations = [poentry.msgstr]

    locations: List[Location] = []
    for document, line in poentry.occurrences:
        location = Location(document, int(line) if str(line).isdigit() else None)
        if location not in locations:
            locations.append(location)

    return CatalogEntry(
        msgid=poentry.msgid,
        msgctxt=poentry.msgctxt,
        msgid_plural=poentry.msgid_plural or None,
        translations=translations,
        comments=poentry.comment.split("\n") if poentry.comment else [],
        translator_comments=poentry.tcomment.split("\n") if poentry.tcomment else [],
        locations=locations,
        flags=list(poentry.flags),
        obsolete=bool(poentry.obsolete),
        previous_msgid=poentry.previous_msgid or None,
    )


def to_pofile(catalog: Catalog) -> polib.POFile:
    """Convert a catalog to a ``polib.POFile``."""
    po = polib.POFile(wrapwidth=WRAP_WIDTH)
    po.header = catalog.header
    po.metadata = dict(catalog.metadata)
    for entry in catalog:
        po.append(_to_poentry(entry))
    return po


def serialize_catalog(catalog: Catalog) -> str:
    """
    Serialize a catalog to PO text.

    The header entry comes first, then live entries in order, then obsolete
    entries. Strings are wrapped at ``WRAP_WIDTH`` columns.
    """
    return str(to_pofile(catalog))


def save_catalog(catalog: Catalog, path: Union[str, Path]) -> None:
    """
    Save a catalog to a PO or POT file.

    Args:
        catalog: Catalog to save
        path: Output file path, parent directories are created
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    to_pofile(catalog).save(str(path))
    logger.info(f"Saved {len(catalog)} messages to {path}")


def _check_strings(text: str, path: Optional[Union[str, Path]]) -> None:
    """Report unterminated or malformed quoted strings with their position."""
    for number, line in enumerate(text.splitlines(), 1):
        stripped = line.lstrip()
        indent = len(line) - len(stripped)
        prefix = _STRING_LINE.match(stripped)
        if prefix is None:
            continue
        start = prefix.end()
        string = _STRING.match(stripped, start)
        if string is None:
            raise CatalogParseError(path, number, indent + start + 1, "Unterminated string")
        rest = stripped[string.end():]
        if rest.strip():
            column = indent + string.end() + len(rest) - len(rest.lstrip()) + 1
            raise CatalogParseError(path, number, column, "Unexpected text after string")


def _read_header(text: str) -> str:
    """
    Collect the comment block at the top of a PO file.

    Only comments directly above the header entry ('msgid ""') count. Lines
    starting with "#," or "#:" are header text when they sit there.
    """
    lines: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if not line.startswith("#"):
            if line != 'msgid ""':
                return ""
            break
        if line.startswith("# "):
            lines.append(line[2:])
        else:
            lines.append(line[1:])
    return "\n".join(lines).strip("\n")


def parse_catalog(text: str, path: Optional[Union[str, Path]] = None) -> Catalog:
    """
    Parse PO text into a catalog.

    Duplicate keys are merged when their translations agree.

    Args:
        text: Content of a PO or POT file
        path: File name used in error messages

    Returns:
        The parsed catalog

    Raises:
        CatalogParseError: On syntax errors, with line and column
        CatalogConflictError: When a key appears twice with different
            translations
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        return Catalog()

    _check_strings(text, path)
    try:
        po = polib.pofile(text, wrapwidth=WRAP_WIDTH)
    except (OSError, ValueError) as e:
        match = _ERROR_LINE.search(str(e))
        line = int(match.group(1)) if match else 0
        raise CatalogParseError(path, line, 1, str(e)) from e

    catalog = Catalog(metadata=dict(po.metadata), header=_read_header(text))
    for poentry in po:
        line = getattr(poentry, "linenum", 0)
        entry = _from_poentry(poentry)
        if not entry.msgid and entry.msgctxt is None:
            raise CatalogParseError(path, line, 1, "Duplicate header entry")
        existing = catalog.get(entry.msgid, entry.msgctxt)
        if existing is not None and existing.translations != entry.translations:
            raise CatalogConflictError(
                path, line, 1, f"Conflicting translations for msgid {entry.msgid!r}"
            )
        catalog.add(entry)
    return catalog


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load a PO or POT file.

    Args:
        path: Path to the catalog

    Returns:
        The parsed catalog
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig")
    catalog = parse_catalog(text, path)
    logger.debug(f"Loaded {len(catalog)} messages from {path}")
    return catalog
