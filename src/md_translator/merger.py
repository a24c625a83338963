"""Reconciliation of translated catalogs with fresh templates."""

from __future__ import annotations

import logging
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .config import SIMILARITY_THRESHOLD
from .grouper import build_units
from .models import Catalog, CatalogEntry, TranslationUnit
from .parser import parse_markdown
from .text_utils import REFERENCE_LABEL, comparable_text, message_lines, renumber_references

logger = logging.getLogger(__name__)

Key = Tuple[str, Optional[str]]


def _merged_metadata(old: Catalog, template: Catalog) -> Dict[str, str]:
    if not old.metadata:
        return dict(template.metadata)
    metadata = dict(old.metadata)
    if "POT-Creation-Date" in template.metadata:
        metadata["POT-Creation-Date"] = template.metadata["POT-Creation-Date"]
    return metadata


def _carry(new: CatalogEntry, old: CatalogEntry, fuzzy: bool) -> CatalogEntry:
    """Copy a translation from an old entry onto a template entry."""
    return new.copy(
        translations=list(old.translations),
        translator_comments=list(old.translator_comments),
        flags=list(dict.fromkeys(new.flags + old.flags)),
        fuzzy=fuzzy,
        obsolete=False,
        previous_msgid=old.msgid if fuzzy else None,
    )


def _split_match(new: CatalogEntry, candidates: Sequence[CatalogEntry]) -> Optional[CatalogEntry]:
    """Find an old multi-line message containing the new message as a line."""
    text = comparable_text(new.msgid)
    for candidate in candidates:
        if "\n" not in candidate.msgid.strip():
            continue
        lines = [line.casefold() for line in message_lines(candidate.msgid)]
        if text in lines:
            return candidate
    return None


def _similarity_match(
    new: CatalogEntry,
    candidates: Sequence[CatalogEntry],
    texts: Dict[Key, str],
) -> Optional[CatalogEntry]:
    """Find the most similar old message, the earliest one on ties."""
    matcher = SequenceMatcher(None, autojunk=False)
    matcher.set_seq2(comparable_text(new.msgid))
    best: Optional[CatalogEntry] = None
    best_ratio = SIMILARITY_THRESHOLD
    for candidate in candidates:
        matcher.set_seq1(texts[candidate.key])
        if matcher.real_quick_ratio() < best_ratio or matcher.quick_ratio() < best_ratio:
            continue
        ratio = matcher.ratio()
        if ratio > best_ratio or (best is None and ratio >= best_ratio):
            best, best_ratio = candidate, ratio
    return best


def merge_catalogs(old: Catalog, template: Catalog) -> Catalog:
    """
    Merge a fresh template into a translated catalog.

    Exact key matches keep their translation and lose the fuzzy flag. Other
    template entries take the translation of the most similar old message and
    are marked fuzzy. Old messages that nothing matched are kept as obsolete
    entries at the end. Neither input is modified.

    Args:
        old: Previously translated catalog
        template: Newly extracted template

    Returns:
        The merged catalog
    """
    new_entries = template.live_entries()
    results: List[Optional[CatalogEntry]] = [None] * len(new_entries)
    consumed: Set[Key] = set()

    # Exact matches first, so that no similar message takes their place.
    for index, new in enumerate(new_entries):
        previous = old.get(new.msgid, new.msgctxt)
        if previous is not None:
            results[index] = _carry(new, previous, fuzzy=False)
            consumed.add(previous.key)
    exact = len(consumed)

    shared: Set[Key] = set()
    texts = {entry.key: comparable_text(entry.msgid) for entry in old}
    fuzzy = 0
    for index, new in enumerate(new_entries):
        if results[index] is not None:
            continue
        candidates = [
            entry for entry in old if entry.key not in consumed and entry.is_translated
        ]
        match = _split_match(new, candidates)
        if match is not None:
            shared.add(match.key)
        else:
            match = _similarity_match(
                new, [entry for entry in candidates if entry.key not in shared], texts
            )
            if match is not None:
                consumed.add(match.key)

        if match is not None:
            results[index] = _carry(new, match, fuzzy=True)
            fuzzy += 1
        else:
            results[index] = new.copy(
                translations=[""] * len(new.translations),
                fuzzy=False,
                obsolete=False,
                previous_msgid=None,
            )

    merged = Catalog(
        metadata=_merged_metadata(old, template),
        header=old.header or template.header,
    )
    for entry in results:
        merged.add(entry)

    obsolete = 0
    for entry in old:
        if entry.key in consumed or entry.key in shared:
            continue
        stale = entry.copy()
        stale.mark_obsolete()
        merged.add(stale)
        obsolete += 1

    logger.info(
        f"Merged {len(new_entries)} messages: {exact} exact, {fuzzy} fuzzy, "
        f"{len(new_entries) - exact - fuzzy} new, {obsolete} obsolete"
    )
    return merged


def _extract(text: str) -> List[TranslationUnit]:
    """
    Re-extract the messages of a stored message text.

    Numbered link references (``[text][1]``) get placeholder targets so that
    they survive as links.
    """
    labels = sorted(set(REFERENCE_LABEL.findall(text)), key=int)
    source = text + "".join(f"\n\n[{label}]: #{label}" for label in labels)
    return build_units(parse_markdown(source)).messages


def _normalize_entry(entry: CatalogEntry) -> List[CatalogEntry]:
    units = _extract(entry.msgid)
    msgids = [unit.message_key for unit in units]
    if not msgids:
        logger.debug(f"Dropping message without translatable text: {entry.msgid[:40]!r}")
        return []
    if entry.msgid_plural is not None or msgids == [entry.msgid]:
        return [entry.copy()]

    msgstrs: List[str] = []
    if entry.is_translated:
        for index, unit in enumerate(_extract(entry.msgstr)):
            target = units[index].references if index < len(units) else ()
            msgstrs.append(renumber_references(unit.message_key, unit.references, target))

    fuzzy = entry.fuzzy or (entry.is_translated and len(msgstrs) != len(msgids))
    if len(msgstrs) > len(msgids):
        tail = "\n\n".join(msgstrs[len(msgids) - 1:])
        msgstrs = msgstrs[: len(msgids) - 1] + [tail]
    msgstrs += [""] * (len(msgids) - len(msgstrs))

    return [
        entry.copy(msgid=msgid, translations=[msgstr], fuzzy=fuzzy, previous_msgid=None)
        for msgid, msgstr in zip(msgids, msgstrs)
    ]


def normalize_catalog(catalog: Catalog) -> Catalog:
    """
    Re-extract all messages with the current extraction rules.

    A message that now splits into several messages is split, with its
    translation split the same way. When the number of parts differs between
    message and translation, the parts are paired in order and marked fuzzy.
    Messages that normalize to the same key are merged, the first
    translation wins.

    Args:
        catalog: Catalog written by an older version of the extractor

    Returns:
        The normalized catalog
    """
    normalized = Catalog(metadata=catalog.metadata, header=catalog.header)
    for entry in catalog:
        for new in _normalize_entry(entry):
            existing = normalized.get(new.msgid, new.msgctxt)
            normalized.add(new)
            if existing is not None and not existing.is_translated and new.is_translated:
                existing.translations = list(new.translations)
                existing.fuzzy = new.fuzzy
    logger.info(f"Normalized {len(catalog)} messages into {len(normalized)}")
    return normalized
