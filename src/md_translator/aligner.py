"""Creation of catalogs from documents that were translated by hand.

A source document and its existing translation are grouped into units the
same way extraction does it. Every unit is reduced to a shape that leaves
its text out: the kind of block, the heading level and the inline markup it
contains. ``difflib`` aligns the two shape sequences; units in matching
stretches are paired up as message and translation, everything else is
dropped.
"""

from __future__ import annotations

import logging
from difflib import SequenceMatcher
from typing import Hashable, List, Optional, Sequence, Tuple

from .events import Code, Event, Start
from .grouper import CodeRun, Extraction, TextRun, build_units
from .models import Catalog, CatalogEntry, TranslationUnit, UnitKind
from .parser import parse_markdown
from .text_utils import renumber_references

logger = logging.getLogger(__name__)

Shape = Tuple[Hashable, ...]


def _markup(events: Sequence[Event]) -> Tuple[str, ...]:
    """Inline markup of a run, independent of its order in the sentence."""
    names = []
    for event in events:
        if isinstance(event, Start):
            names.append(event.tag.value)
        elif isinstance(event, Code):
            names.append("code")
    return tuple(sorted(names))


def unit_shapes(extraction: Extraction) -> List[Tuple[TranslationUnit, Shape]]:
    """
    List the units of a document with their shapes, in document order.

    Skipped units are included so that they keep their place in the
    alignment.
    """
    shapes: List[Tuple[TranslationUnit, Shape]] = []
    for segment in extraction.segments:
        if isinstance(segment, TextRun):
            unit = segment.unit
            shapes.append((unit, (unit.kind.value, unit.level, _markup(segment.events))))
        elif isinstance(segment, CodeRun):
            language = segment.start.get("info", "")
            shapes.extend((unit, (UnitKind.CODE.value, language)) for unit in segment.units)
    return shapes


def align_units(
    source: Extraction,
    translation: Extraction,
) -> List[Tuple[TranslationUnit, TranslationUnit]]:
    """
    Pair the units of a document with the units of its translation.

    Args:
        source: Grouped source document
        translation: Grouped translated document

    Returns:
        (source unit, translated unit) pairs in document order. Skipped
        units on either side are left out.
    """
    source_shapes = unit_shapes(source)
    translated_shapes = unit_shapes(translation)
    matcher = SequenceMatcher(
        None,
        [shape for _, shape in source_shapes],
        [shape for _, shape in translated_shapes],
        autojunk=False,
    )

    pairs: List[Tuple[TranslationUnit, TranslationUnit]] = []
    for block in matcher.get_matching_blocks():
        for offset in range(block.size):
            original = source_shapes[block.a + offset][0]
            translated = translated_shapes[block.b + offset][0]
            if not original.skip and not translated.skip:
                pairs.append((original, translated))

    dropped = len(source_shapes) - len(pairs)
    if dropped:
        logger.debug(
            f"{source.document or '<document>'}: {dropped} of {len(source_shapes)} "
            f"units have no counterpart in the translation"
        )
    return pairs


def _entry(original: TranslationUnit, translated: TranslationUnit) -> CatalogEntry:
    msgstr = renumber_references(
        translated.message_key, translated.references, original.references
    )
    return CatalogEntry(
        msgid=original.message_key,
        msgctxt=original.context,
        translations=[msgstr],
        locations=[original.location],
    )


def align_documents(
    source: str,
    translation: str,
    document: str = "",
    catalog: Optional[Catalog] = None,
) -> Catalog:
    """
    Build catalog entries from a document and its existing translation.

    Args:
        source: Markdown text of the source document
        translation: Markdown text of the translated document
        document: Document identity used in locations
        catalog: Catalog to add the entries to, a new one when omitted

    Returns:
        The catalog holding the aligned messages

    Raises:
        DocumentParseError: If either document cannot be grouped
    """
    catalog = catalog if catalog is not None else Catalog()
    pairs = align_units(
        build_units(parse_markdown(source), document),
        build_units(parse_markdown(translation), document),
    )
    for original, translated in pairs:
        update_entry(catalog, _entry(original, translated))
    logger.info(f"Aligned {len(pairs)} messages from {document or '<document>'}")
    return catalog


def update_entry(catalog: Catalog, entry: CatalogEntry) -> CatalogEntry:
    """
    Add an aligned entry to a catalog.

    An existing translation is kept; the aligned one only fills in entries
    that are untranslated, and clears their fuzzy flag.
    """
    existing = catalog.get(entry.msgid, entry.msgctxt)
    stored = catalog.add(entry)
    if existing is None:
        return stored
    if existing.obsolete or not existing.is_translated:
        existing.translations = list(entry.translations)
        existing.fuzzy = False
        existing.obsolete = False
    elif existing.translations != entry.translations:
        logger.debug(f"Keeping existing translation of {entry.msgid[:40]!r}")
    return stored
