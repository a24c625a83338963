"""Translation statistics for catalogs."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Catalog


@dataclass
class CatalogStats:
    """Message counts of one catalog."""

    language: str = ""
    pot_creation_date: str = ""
    translated: int = 0
    untranslated: int = 0
    fuzzy_translated: int = 0
    fuzzy_untranslated: int = 0
    obsolete: int = 0

    @classmethod
    def for_catalog(cls, catalog: Catalog) -> "CatalogStats":
        """Count the live messages of a catalog by state."""
        stats = cls(
            language=catalog.metadata.get("Language", ""),
            pot_creation_date=catalog.metadata.get("POT-Creation-Date", ""),
        )
        for entry in catalog:
            if entry.obsolete:
                stats.obsolete += 1
            elif entry.is_translated:
                if entry.fuzzy:
                    stats.fuzzy_translated += 1
                else:
                    stats.translated += 1
            elif entry.fuzzy:
                stats.fuzzy_untranslated += 1
            else:
                stats.untranslated += 1
        return stats

    @property
    def total(self) -> int:
        """Number of live messages."""
        return (
            self.translated
            + self.untranslated
            + self.fuzzy_translated
            + self.fuzzy_untranslated
        )

    @property
    def completion_rate(self) -> float:
        """Share of live messages with a usable translation (0-1)."""
        if self.total == 0:
            return 1.0
        return self.translated / self.total

    def __str__(self) -> str:
        language = self.language or "?"
        return (
            f"{language}: {self.translated} ({self.fuzzy_translated}, "
            f"{self.fuzzy_untranslated}) / {self.total}, "
            f"{self.completion_rate:.0%} complete"
        )
