"""Applying catalog translations to documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .catalog import load_catalog
from .codeblocks import Literal
from .config import CATALOG_SUFFIX
from .events import Event, Text
from .grouper import CodeRun, Extraction, Skeleton, TextRun, build_units
from .models import Catalog, TranslationUnit
from .parser import parse_inline, parse_markdown
from .renderer import render_markdown

logger = logging.getLogger(__name__)


def lookup(catalog: Catalog, unit: TranslationUnit) -> Optional[str]:
    """
    Find a usable translation for a unit.

    Returns:
        The translation, or None when the unit is skipped or the entry is
        missing, fuzzy, obsolete or empty
    """
    if unit.skip:
        return None
    entry = catalog.get(unit.message_key, unit.context)
    if entry is None or not entry.is_usable:
        return None
    return entry.msgstr


def _translate_run(run: TextRun, catalog: Catalog) -> List[Event]:
    unit = run.unit
    translation = lookup(catalog, unit)
    if translation is None or translation == unit.message_key:
        events = run.events
    else:
        events = parse_inline(translation.strip(), unit.references, line=unit.line)
    return [*run.lead, *events, *run.trail]


def _translate_code(run: CodeRun, catalog: Catalog) -> List[Event]:
    units = iter(run.units)
    parts: List[str] = []
    for piece in run.pieces:
        if isinstance(piece, Literal):
            translation = lookup(catalog, next(units))
            parts.append(piece.text if translation is None else translation)
        else:
            parts.append(piece)
    return [run.start, Text("".join(parts), line=run.line), run.end]


def apply_translations(extraction: Extraction, catalog: Catalog) -> List[Event]:
    """
    Rebuild a grouped document with translated units.

    Units without a usable translation keep their original events.
    """
    events: List[Event] = []
    for segment in extraction.segments:
        if isinstance(segment, Skeleton):
            events.extend(segment.events)
        elif isinstance(segment, TextRun):
            events.extend(_translate_run(segment, catalog))
        else:
            events.extend(_translate_code(segment, catalog))
    return events


def translate_events(
    events: Iterable[Event],
    catalog: Catalog,
    document: str = "",
) -> List[Event]:
    """
    Translate a document given as events.

    Args:
        events: Event stream of the document
        catalog: Translated catalog
        document: Document identity used in errors

    Returns:
        Translated event stream
    """
    extraction = build_units(events, document)
    translated = apply_translations(extraction, catalog)
    used = sum(1 for unit in extraction.units if lookup(catalog, unit) is not None)
    logger.debug(f"Translated {used}/{len(extraction.units)} units of {document or '<document>'}")
    return translated


def translate_markdown(text: str, catalog: Catalog, document: str = "") -> str:
    """Translate Markdown text and render the result as Markdown."""
    return render_markdown(translate_events(parse_markdown(text), catalog, document))


def translate_document(
    text: str,
    locale: Optional[str],
    catalog_dir: Union[str, Path],
    document: str = "",
) -> str:
    """
    Translate a document with the catalog of a locale.

    The catalog is ``<catalog_dir>/<locale>.po``. Without a locale or a
    catalog the document is returned unchanged.

    Args:
        text: Markdown source
        locale: Target locale, e.g. "fr"
        catalog_dir: Directory holding the PO files
        document: Document identity used in errors

    Returns:
        Translated Markdown text
    """
    if not locale:
        logger.info("No locale given, leaving document untranslated")
        return text

    path = Path(catalog_dir) / f"{locale}{CATALOG_SUFFIX}"
    if not path.is_file():
        logger.info(f"No catalog for locale '{locale}' at {path}, leaving document untranslated")
        return text

    return translate_markdown(text, load_catalog(path), document)
