"""Data models for translation units and message catalogs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple


class UnitKind(str, Enum):
    """What a translation unit was extracted from."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST_ITEM = "list_item"
    TABLE_CELL = "table_cell"
    FOOTNOTE = "footnote"
    CODE = "code"


class Location(NamedTuple):
    """A source occurrence of a message."""

    document: str
    line: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.document}:{self.line}" if self.line else self.document


@dataclass
class TranslationUnit:
    """One extracted span of translatable text."""

    message_key: str
    source_text: str
    kind: UnitKind
    document: str = ""
    line: int = 0
    comments: List[str] = field(default_factory=list)
    context: Optional[str] = None
    skip: bool = False

    # Reconstruction data
    leading: str = ""
    trailing: str = ""
    references: Tuple[Tuple[str, str], ...] = ()
    level: int = 0

    @property
    def location(self) -> Location:
        return Location(self.document, self.line or None)

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.message_key, self.context)


@dataclass
class CatalogEntry:
    """A single message of a PO catalog."""

    msgid: str
    msgctxt: Optional[str] = None
    msgid_plural: Optional[str] = None
    translations: List[str] = field(default_factory=lambda: [""])
    comments: List[str] = field(default_factory=list)
    translator_comments: List[str] = field(default_factory=list)
    locations: List[Location] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    fuzzy: bool = False
    obsolete: bool = False
    previous_msgid: Optional[str] = None

    def __post_init__(self):
        """Keep the fuzzy flag out of the free-form flags."""
        if "fuzzy" in self.flags:
            self.flags = [flag for flag in self.flags if flag != "fuzzy"]
            self.fuzzy = True
        if not self.translations:
            self.translations = [""]

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.msgid, self.msgctxt)

    @property
    def msgstr(self) -> str:
        """The singular translation."""
        return self.translations[0]

    @property
    def is_translated(self) -> bool:
        return any(self.translations)

    @property
    def is_usable(self) -> bool:
        """Whether the translation may be used for a build."""
        return self.is_translated and not self.fuzzy and not self.obsolete

    def add_location(self, location: Location) -> None:
        if location not in self.locations:
            self.locations.append(location)

    def mark_obsolete(self) -> None:
        self.obsolete = True
        self.locations = []
        self.comments = []
        self.previous_msgid = None

    def copy(self, **changes) -> "CatalogEntry":
        """Create a copy with optional field changes."""
        values = dict(
            msgid=self.msgid,
            msgctxt=self.msgctxt,
            msgid_plural=self.msgid_plural,
            translations=list(self.translations),
            comments=list(self.comments),
            translator_comments=list(self.translator_comments),
            locations=list(self.locations),
            flags=list(self.flags),
            fuzzy=self.fuzzy,
            obsolete=self.obsolete,
            previous_msgid=self.previous_msgid,
        )
        values.update(changes)
        return CatalogEntry(**values)


class Catalog:
    """
    Ordered collection of catalog entries keyed by (msgid, msgctxt).

    Iteration yields live entries first and obsolete entries last, each group
    in insertion order.
    """

    def __init__(
        self,
        entries: Optional[List[CatalogEntry]] = None,
        metadata: Optional[Dict[str, str]] = None,
        header: str = "",
    ) -> None:
        self.metadata: Dict[str, str] = dict(metadata or {})
        self.header = header
        self._entries: Dict[Tuple[str, Optional[str]], CatalogEntry] = {}
        for entry in entries or []:
            self.add(entry)

    def add(self, entry: CatalogEntry) -> CatalogEntry:
        """
        Add an entry, merging it into an existing entry with the same key.

        Returns:
            The entry stored in the catalog
        """
        if not entry.msgid and entry.msgctxt is None:
            raise ValueError("The empty msgid is reserved for the header")
        existing = self._entries.get(entry.key)
        if existing is None:
            self._entries[entry.key] = entry
            return entry
        for location in entry.locations:
            existing.add_location(location)
        for comment in entry.comments:
            if comment not in existing.comments:
                existing.comments.append(comment)
        return existing

    def get(self, msgid: str, msgctxt: Optional[str] = None) -> Optional[CatalogEntry]:
        return self._entries.get((msgid, msgctxt))

    def live_entries(self) -> List[CatalogEntry]:
        return [entry for entry in self._entries.values() if not entry.obsolete]

    def obsolete_entries(self) -> List[CatalogEntry]:
        return [entry for entry in self._entries.values() if entry.obsolete]

    def __iter__(self) -> Iterator[CatalogEntry]:
        yield from self.live_entries()
        yield from self.obsolete_entries()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return (
            self.metadata == other.metadata
            and self.header == other.header
            and list(self) == list(other)
        )

    def __repr__(self) -> str:
        return f"Catalog({len(self)} entries)"
