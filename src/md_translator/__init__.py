"""
md-translator - gettext-based translation of Markdown documents.

Features:
- Extraction of paragraphs, headings, list items and table cells into PO templates
- String literals and comments of code samples as separate messages
- Skip and translator-comment directives in HTML comments
- Merging of new templates into existing translations with fuzzy matching
- Translation of documents without breaking markup, links or code
- Templates split by document sections
- Catalogs built from documents that were already translated by hand
"""

__version__ = "0.1.0"

from .config import TranslatorConfig
from .errors import CatalogConflictError, CatalogParseError, DocumentParseError, MdTranslatorError
from .models import Catalog, CatalogEntry, Location, TranslationUnit, UnitKind
from .parser import parse_markdown, parse_inline, validate_markdown_file
from .renderer import render_markdown, render_inline
from .grouper import Extraction, build_units, extract_messages
from .catalog import parse_catalog, serialize_catalog, load_catalog, save_catalog
from .extraction import build_location, create_catalogs, create_template, partition_units
from .merger import merge_catalogs, normalize_catalog
from .translator import translate_events, translate_markdown, translate_document
from .aligner import align_documents
from .stats import CatalogStats

__all__ = [
    # Models
    "Catalog",
    "CatalogEntry",
    "Location",
    "TranslationUnit",
    "UnitKind",
    "Extraction",
    "CatalogStats",
    "TranslatorConfig",
    # Errors
    "MdTranslatorError",
    "DocumentParseError",
    "CatalogParseError",
    "CatalogConflictError",
    # Markdown
    "parse_markdown",
    "parse_inline",
    "render_markdown",
    "render_inline",
    "validate_markdown_file",
    # Extraction
    "build_units",
    "extract_messages",
    "build_location",
    "create_catalogs",
    "create_template",
    "partition_units",
    # Catalogs
    "parse_catalog",
    "serialize_catalog",
    "load_catalog",
    "save_catalog",
    # Merging
    "merge_catalogs",
    "normalize_catalog",
    # Translation
    "translate_events",
    "translate_markdown",
    "translate_document",
    # Alignment
    "align_documents",
]
