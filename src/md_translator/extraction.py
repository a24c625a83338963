"""Building template catalogs from extracted units."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .config import DEFAULT_TEMPLATE_NAME, TEMPLATE_SUFFIX
from .grouper import Extraction
from .models import Catalog, CatalogEntry, Location, TranslationUnit, UnitKind
from .text_utils import slugify

logger = logging.getLogger(__name__)


def build_location(document: str, line: Optional[int], granularity: int = 1) -> Location:
    """
    Build a source location, rounding the line number.

    Args:
        document: Document identity
        line: 1-based line number, 0 or None when unknown
        granularity: 0 drops the line, 1 keeps it, otherwise the line is
            rounded down to a multiple of the granularity (minimum 1)

    Returns:
        The location
    """
    if granularity <= 0 or not line:
        return Location(document, None)
    if granularity == 1:
        return Location(document, line)
    return Location(document, max(1, line - line % granularity))


def generate_metadata(
    language: str = "",
    project: str = "",
    now: Optional[datetime] = None,
    plural_forms: Optional[str] = None,
) -> Dict[str, str]:
    """Header fields for a new template or catalog."""
    now = now or datetime.now().astimezone()
    metadata = {
        "Project-Id-Version": project,
        "POT-Creation-Date": now.strftime("%Y-%m-%d %H:%M%z"),
        "MIME-Version": "1.0",
        "Content-Type": "text/plain; charset=UTF-8",
        "Content-Transfer-Encoding": "8bit",
        "Language": language,
    }
    if plural_forms:
        metadata["Plural-Forms"] = plural_forms
    return metadata


def add_unit(catalog: Catalog, unit: TranslationUnit, granularity: int = 1) -> CatalogEntry:
    """Add a unit to a catalog, merging locations with an existing entry."""
    comments = [
        line for comment in unit.comments for line in comment.splitlines() if line.strip()
    ]
    entry = CatalogEntry(
        msgid=unit.message_key,
        msgctxt=unit.context,
        comments=comments,
        locations=[build_location(unit.document, unit.line, granularity)],
    )
    return catalog.add(entry)


class SectionPathBuilder:
    """
    Assigns unique file paths to document sections.

    Each heading of level 1 to ``depth`` opens a section whose path is the
    slug of its title below the path of the enclosing section. A path that
    was already handed out gets a ``-1``, ``-2``... suffix.
    """

    def __init__(self, depth: int) -> None:
        self.depth = depth
        self._parts: List[Tuple[int, str]] = []
        self._seen: Dict[str, int] = {}

    def reset(self) -> None:
        """Leave all open sections, e.g. at the start of a new document."""
        self._parts = []

    def enter(self, level: int, title: str) -> None:
        if level < 1 or level > self.depth:
            return
        while self._parts and self._parts[-1][0] >= level:
            self._parts.pop()
        parent = self._parts[-1][1] + "/" if self._parts else ""
        path = parent + slugify(title)
        count = self._seen.get(path)
        self._seen[path] = 0 if count is None else count + 1
        if count is not None:
            path = f"{path}-{count + 1}"
        self._parts.append((level, path))

    def path(self) -> str:
        if self.depth == 0 or not self._parts:
            return DEFAULT_TEMPLATE_NAME
        return self._parts[-1][1] + TEMPLATE_SUFFIX


def partition_units(
    extractions: Iterable[Extraction], depth: int = 0
) -> Dict[str, List[TranslationUnit]]:
    """
    Split the translatable units into sections.

    Args:
        extractions: Grouped documents
        depth: Deepest heading level that opens a section, 0 for none

    Returns:
        Units per template path, in order of first appearance
    """
    builder = SectionPathBuilder(depth)
    partition: Dict[str, List[TranslationUnit]] = {}
    for extraction in extractions:
        builder.reset()
        for unit in extraction.units:
            if unit.kind is UnitKind.HEADING:
                builder.enter(unit.level, unit.message_key)
            if not unit.skip:
                partition.setdefault(builder.path(), []).append(unit)
    return partition


def create_catalogs(
    extractions: Iterable[Extraction],
    granularity: int = 1,
    depth: int = 0,
    metadata: Optional[Dict[str, str]] = None,
) -> Dict[str, Catalog]:
    """
    Build template catalogs for a set of documents.

    Returns:
        Catalogs keyed by relative file path; a single ``messages.pot`` when
        depth is 0
    """
    metadata = metadata if metadata is not None else generate_metadata()
    catalogs: Dict[str, Catalog] = {}
    for path, units in partition_units(extractions, depth).items():
        catalog = Catalog(metadata=metadata)
        for unit in units:
            add_unit(catalog, unit, granularity)
        catalogs[path] = catalog

    if not catalogs:
        logger.warning("No translatable messages found")
        catalogs[DEFAULT_TEMPLATE_NAME] = Catalog(metadata=metadata)
    logger.info(
        f"Extracted {sum(len(c) for c in catalogs.values())} messages "
        f"into {len(catalogs)} template(s)"
    )
    return catalogs


def create_template(
    extractions: Iterable[Extraction],
    granularity: int = 1,
    metadata: Optional[Dict[str, str]] = None,
) -> Catalog:
    """Build one template catalog for a set of documents."""
    catalogs = create_catalogs(extractions, granularity, 0, metadata)
    return catalogs[DEFAULT_TEMPLATE_NAME]
