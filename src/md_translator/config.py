"""Configuration and constants."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables once
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class TranslatorConfig:
    """Configuration for extraction, merging and translation."""

    # Target language
    locale: Optional[str] = None

    # Extraction settings
    granularity: Optional[int] = None
    depth: Optional[int] = None

    # Locations
    catalog_dir: Path = Path("po")
    output_dir: Optional[Path] = None

    def __post_init__(self):
        """Fill unset values from the environment."""
        if self.locale is None:
            self.locale = os.environ.get("MD_TRANSLATOR_LOCALE") or None
        if self.granularity is None:
            self.granularity = _env_int("MD_TRANSLATOR_GRANULARITY", 1)
        if self.depth is None:
            self.depth = _env_int("MD_TRANSLATOR_DEPTH", 0)
        self.catalog_dir = Path(self.catalog_dir)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)

    @classmethod
    def from_args(cls, args) -> "TranslatorConfig":
        """Create config from argparse namespace."""
        catalog_dir = getattr(args, "catalog_dir", None)
        output_dir = getattr(args, "output_dir", None)
        return cls(
            locale=getattr(args, "locale", None),
            granularity=getattr(args, "granularity", None),
            depth=getattr(args, "depth", None),
            catalog_dir=Path(catalog_dir) if catalog_dir else Path("po"),
            output_dir=Path(output_dir) if output_dir else None,
        )

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if self.granularity < 0:
            return f"Granularity must be >= 0, got {self.granularity}"

        if self.depth < 0:
            return f"Depth must be >= 0, got {self.depth}"

        if self.locale is not None and not self.locale.strip():
            return "Locale must not be empty"

        return None


# Column at which PO strings are wrapped, as xgettext does
WRAP_WIDTH = 78

# Minimum difflib ratio for carrying a translation to a changed message
SIMILARITY_THRESHOLD = 0.6

# Template file used when no partitioning applies
DEFAULT_TEMPLATE_NAME = "messages.pot"

# Supported file extensions
SUPPORTED_EXTENSIONS = {".md", ".markdown"}

# Catalog suffixes
CATALOG_SUFFIX = ".po"
TEMPLATE_SUFFIX = ".pot"
