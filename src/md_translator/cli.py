"""Command-line interface for md-translator."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tqdm import tqdm

from .aligner import align_documents
from .catalog import load_catalog, save_catalog
from .config import SUPPORTED_EXTENSIONS, TranslatorConfig
from .errors import MdTranslatorError
from .extraction import create_catalogs, generate_metadata
from .grouper import Extraction, build_units
from .models import Catalog
from .merger import merge_catalogs, normalize_catalog
from .parser import parse_markdown, validate_markdown_file
from .stats import CatalogStats
from .translator import translate_document, translate_markdown

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="md-translator",
        description="Extract, merge and apply gettext translations for Markdown documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s extract docs/ -o po                  # Write po/messages.pot
  %(prog)s extract docs/ -o po --depth 1        # One template per chapter
  %(prog)s merge po/fr.po po/messages.pot       # Update a translation
  %(prog)s translate docs/intro.md -c po/fr.po  # Translate a document
  %(prog)s stats po/*.po                        # Show progress
  %(prog)s from-translation en/ fr/ -o po/fr.po  # Catalog from a translated copy
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    extract = commands.add_parser("extract", help="Extract messages into templates")
    extract.add_argument("inputs", nargs="+", help="Markdown files or directories")
    extract.add_argument(
        "-o", "--output-dir",
        default="po",
        help="Directory for the templates (default: po)"
    )
    extract.add_argument(
        "--root",
        default=None,
        help="Directory that document names are relative to (default: current directory)"
    )
    extract.add_argument(
        "--granularity",
        type=int,
        default=None,
        help="Round line numbers down to this multiple, 0 to omit them (default: 1)"
    )
    extract.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Split templates by headings up to this level (default: 0)"
    )
    extract.add_argument("--project", default="", help="Project-Id-Version header")

    merge = commands.add_parser("merge", help="Merge a template into a translation")
    merge.add_argument("catalog", help="Translated PO file")
    merge.add_argument("template", help="Template POT file")
    merge.add_argument("-o", "--output", default=None, help="Output path (default: overwrite catalog)")

    translate = commands.add_parser("translate", help="Translate a Markdown document")
    translate.add_argument("input_path", help="Markdown file")
    translate.add_argument("-c", "--catalog", default=None, help="Translated PO file")
    translate.add_argument("-l", "--locale", default=None, help="Locale, e.g. fr")
    translate.add_argument(
        "--catalog-dir",
        default=None,
        help="Directory holding <locale>.po files (default: po)"
    )
    translate.add_argument("-o", "--output", default=None, help="Output path")

    normalize = commands.add_parser("normalize", help="Re-extract the messages of a catalog")
    normalize.add_argument("catalog", help="PO file")
    normalize.add_argument("-o", "--output", default=None, help="Output path (default: overwrite)")

    aligned = commands.add_parser(
        "from-translation",
        help="Build a catalog from documents that are already translated"
    )
    aligned.add_argument("source", help="Source Markdown file or directory")
    aligned.add_argument("translation", help="Translated Markdown file or directory")
    aligned.add_argument(
        "-o", "--output",
        required=True,
        help="PO file to create, or to update when it exists"
    )
    aligned.add_argument("-l", "--locale", default=None, help="Language of a new catalog")

    stats = commands.add_parser("stats", help="Show translation statistics")
    stats.add_argument("catalogs", nargs="+", help="PO files")

    return parser.parse_args(argv)


def find_documents(inputs: List[str]) -> List[Path]:
    """Expand directories into the Markdown files they contain."""
    documents: List[Path] = []
    for name in inputs:
        path = Path(name).expanduser()
        if path.is_dir():
            documents.extend(
                sorted(p for p in path.rglob("*") if p.suffix.lower() in SUPPORTED_EXTENSIONS)
            )
        else:
            documents.append(path)
    return documents


def match_documents(source: Path, translation: Path) -> List[Tuple[Path, Path]]:
    """
    Pair source documents with their translations.

    Directories are matched file by file through identical relative paths.
    Source documents without a translation are reported and left out.
    """
    if not source.is_dir():
        return [(source, translation)]
    if not translation.is_dir():
        raise NotADirectoryError(f"Translation is not a directory: {translation}")

    pairs: List[Tuple[Path, Path]] = []
    for path in find_documents([str(source)]):
        counterpart = translation / path.relative_to(source)
        if counterpart.is_file():
            pairs.append((path, counterpart))
        else:
            logger.warning(f"No translation found for {path}")
    return pairs


def _document_name(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def run_extract(args: argparse.Namespace, config: TranslatorConfig) -> int:
    root = Path(args.root or ".").expanduser().resolve()
    documents = find_documents(args.inputs)
    if not documents:
        logger.error("No Markdown documents found")
        return 1

    extractions: List[Extraction] = []
    for path in tqdm(documents, desc="Extracting", unit="doc"):
        error = validate_markdown_file(path)
        if error:
            logger.error(error)
            return 1
        text = path.read_text(encoding="utf-8-sig")
        if not text.strip():
            logger.warning(f"Empty document: {path}")
        name = _document_name(path, root)
        extractions.append(build_units(parse_markdown(text), name))

    metadata = generate_metadata(project=args.project)
    catalogs: Dict[str, Catalog] = create_catalogs(
        extractions, config.granularity, config.depth, metadata
    )
    out_dir = Path(args.output_dir)
    for relative, catalog in catalogs.items():
        save_catalog(catalog, out_dir / relative)

    logger.info(f"Done! Extracted {len(documents)} documents into {out_dir}")
    return 0


def run_merge(args: argparse.Namespace) -> int:
    old = load_catalog(args.catalog)
    template = load_catalog(args.template)
    merged = merge_catalogs(old, template)
    out_path = Path(args.output or args.catalog)
    save_catalog(merged, out_path)
    return 0


def run_translate(args: argparse.Namespace, config: TranslatorConfig) -> int:
    in_path = Path(args.input_path).expanduser()
    error = validate_markdown_file(in_path)
    if error:
        logger.error(error)
        return 1

    logger.info(f"Reading: {in_path}")
    text = in_path.read_text(encoding="utf-8-sig")
    if args.catalog:
        translated = translate_markdown(text, load_catalog(args.catalog), in_path.name)
    else:
        translated = translate_document(text, config.locale, config.catalog_dir, in_path.name)

    if args.output:
        out_path = Path(args.output)
    else:
        suffix = config.locale or Path(args.catalog or "translated").stem
        out_path = in_path.with_name(f"{in_path.stem}.{suffix}{in_path.suffix}")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(translated, encoding="utf-8")
    logger.info(f"Done! Saved to {out_path}")
    return 0


def run_normalize(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog)
    save_catalog(normalize_catalog(catalog), Path(args.output or args.catalog))
    return 0


def run_from_translation(args: argparse.Namespace, config: TranslatorConfig) -> int:
    root = Path(".").resolve()
    pairs = match_documents(Path(args.source).expanduser(), Path(args.translation).expanduser())
    if not pairs:
        logger.error("No documents to align")
        return 1

    out_path = Path(args.output)
    if out_path.exists():
        catalog = load_catalog(out_path)
    else:
        catalog = Catalog(metadata=generate_metadata(config.locale or ""))
    before = len(catalog)

    for source, translation in tqdm(pairs, desc="Aligning", unit="doc"):
        for path in (source, translation):
            error = validate_markdown_file(path)
            if error:
                logger.error(error)
                return 1
        align_documents(
            source.read_text(encoding="utf-8-sig"),
            translation.read_text(encoding="utf-8-sig"),
            _document_name(source, root),
            catalog,
        )

    save_catalog(catalog, out_path)
    logger.info(f"Done! {len(catalog) - before} new messages from {len(pairs)} documents")
    return 0


def run_stats(args: argparse.Namespace) -> int:
    for name in args.catalogs:
        stats = CatalogStats.for_catalog(load_catalog(name))
        print(f"{name}: {stats}")
    return 0


def run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command line."""
    config = TranslatorConfig.from_args(args)
    error = config.validate()
    if error:
        logger.error(error)
        return 1

    try:
        if args.command == "extract":
            return run_extract(args, config)
        if args.command == "merge":
            return run_merge(args)
        if args.command == "translate":
            return run_translate(args, config)
        if args.command == "normalize":
            return run_normalize(args)
        if args.command == "from-translation":
            return run_from_translation(args, config)
        return run_stats(args)
    except (MdTranslatorError, OSError) as e:
        logger.error(str(e))
        return 1


def main() -> None:
    """CLI entry point."""
    args = parse_arguments()
    setup_logging(args.verbose)

    try:
        sys.exit(run(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
