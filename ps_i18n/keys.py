"""Key extraction flow: re-indexing, consolidation and materialization.

Everything is computed in memory first. The source document and the key file
are only touched after the confirmation gate and the backup step.
"""

from __future__ import annotations

import logging
import shutil
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ps_i18n.config import TranslationConfig, load_plugin_details
from ps_i18n.properties import PluginDetails, atomic_write, read_text, write_key_file
from ps_i18n.prompts import Confirmer
from ps_i18n.scanner import OPEN_MARKER, find_duplicate_keys, iter_markers, scan, scan_markers

MULTI_SUFFIX = "_multi"
REINDEX_PROMPT = "Duplicate keys found. Do you want to re-index the file?"
REWRITE_PROMPT = "Warning: This operation will modify both the source and destination files. Proceed?"


@dataclass(frozen=True)
class Resolution:
    document: str
    messages: Dict[str, str]
    key_updates: Dict[str, List[str]]
    resolved: bool


@dataclass(frozen=True)
class Consolidation:
    document: str
    messages: Dict[str, str]
    key_updates: Dict[str, str]


@dataclass(frozen=True)
class CreateKeysResult:
    source: Path
    destination: Path
    messages: Dict[str, str] = field(default_factory=dict)
    duplicates: List[str] = field(default_factory=list)
    reindexed: bool = False
    consolidated: Dict[str, str] = field(default_factory=dict)
    cancelled: bool = False


def reindex_document(document: str, duplicate_keys: Sequence[str]) -> Tuple[str, Dict[str, List[str]]]:
    """Rename the Nth ``[msg:KEY]`` occurrence to ``[msg:KEY_N]``.

    Suffixes whose ``KEY_N`` already names a tag in the document are skipped.
    """
    key_updates: Dict[str, List[str]] = {}
    taken = {entry.key for entry in iter_markers(document)}
    for key in duplicate_keys:
        needle = f"{OPEN_MARKER}{key}]"
        search_from = 0
        index = 0
        while True:
            found = document.find(needle, search_from)
            if found == -1:
                break
            while f"{key}_{index}" in taken:
                index += 1
            new_key = f"{key}_{index}"
            taken.add(new_key)
            key_start = found + len(OPEN_MARKER)
            document = document[:key_start] + new_key + document[key_start + len(key):]
            key_updates.setdefault(key, []).append(new_key)
            search_from = key_start + len(new_key) + 1
            index += 1
    return document, key_updates


def apply_key_updates(messages: Dict[str, str], key_updates: Dict[str, List[str]]) -> Dict[str, str]:
    # Every generated key receives the single value the collapsed map held for
    # the original key; per-occurrence text is only available by re-scanning.
    updated: Dict[str, str] = {}
    for key, text in messages.items():
        new_keys = key_updates.get(key)
        if not new_keys:
            updated[key] = text
            continue
        for new_key in new_keys:
            updated[new_key] = text
    return updated


def resolve_duplicates(
    document: str,
    messages: Dict[str, str],
    duplicate_keys: Sequence[str],
    confirmer: Confirmer,
) -> Resolution:
    """Re-index duplicated keys once the user agrees; otherwise change nothing."""
    if not duplicate_keys:
        return Resolution(document, dict(messages), {}, resolved=False)
    if not confirmer.confirm(REINDEX_PROMPT):
        logging.info("Re-indexing declined; continuing with duplicated keys.")
        return Resolution(document, dict(messages), {}, resolved=False)
    new_document, key_updates = reindex_document(document, duplicate_keys)
    logging.info("Re-indexed %s duplicated key(s).", len(key_updates))
    return Resolution(new_document, apply_key_updates(messages, key_updates), key_updates, resolved=True)


def free_multi_key(first: str, group: Sequence[str], claimed: Set[str]) -> str:
    # ``first_multi`` may already name a key holding some other text.
    candidate = f"{first}{MULTI_SUFFIX}"
    counter = 1
    while candidate in claimed and candidate not in group:
        logging.warning("Key %s is already in use; trying another consolidated name.", candidate)
        candidate = f"{first}_{counter}{MULTI_SUFFIX}"
        counter += 1
    return candidate


def build_consolidation_map(messages: Dict[str, str]) -> Dict[str, str]:
    """Map every key whose text is shared onto ``<first key>_multi``.

    Three or more keys sharing a text all collapse onto the same key.
    """
    keys_by_text: Dict[str, List[str]] = defaultdict(list)
    for key, text in messages.items():
        keys_by_text[text].append(key)

    key_updates: Dict[str, str] = {}
    claimed = set(messages)
    for keys in keys_by_text.values():
        if len(keys) < 2:
            continue
        canonical = keys[0] if keys[0].endswith(MULTI_SUFFIX) else free_multi_key(keys[0], keys, claimed)
        claimed.add(canonical)
        for key in keys:
            if key != canonical:
                key_updates[key] = canonical
    return key_updates


def consolidate(messages: Dict[str, str], document: str) -> Consolidation:
    key_updates = build_consolidation_map(messages)
    consolidated: Dict[str, str] = {}
    for key, text in messages.items():
        target = key_updates.get(key, key)
        consolidated.setdefault(target, text)

    for old_key, new_key in key_updates.items():
        document = document.replace(f"{OPEN_MARKER}{old_key}]", f"{OPEN_MARKER}{new_key}]")

    if key_updates:
        logging.info("Consolidated %s key(s) sharing identical text.", len(key_updates))
    return Consolidation(document, consolidated, key_updates)


def materialize(document: str) -> str:
    """Replace each ``[msg:KEY]text[/msg]`` span with ``~[text:KEY]``."""
    parts: List[str] = []
    cursor = 0
    for entry in iter_markers(document):
        parts.append(document[cursor:entry.start])
        parts.append(f"~[text:{entry.key}]")
        cursor = entry.end
    parts.append(document[cursor:])
    return "".join(parts)


def backup_files(source: Path, destination: Path, backup_dir: Path) -> List[Path]:
    """Copy the source and any existing destination into ``backup_dir``.

    Failures are reported and never stop the caller.
    """
    copied: List[Path] = []
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logging.warning("Could not create backup directory %s: %s", backup_dir, exc)
        return copied

    for path in (source, destination):
        if not path.exists():
            continue
        target = backup_dir / path.name
        try:
            shutil.copy2(path, target)
        except OSError as exc:
            logging.warning("Backup of %s failed: %s", path, exc)
            continue
        copied.append(target)
    logging.info("Backup created for %s file(s) in %s", len(copied), backup_dir)
    return copied


def destination_for(source: Path, locale: str, message_keys_dir: Path) -> Path:
    return message_keys_dir / f"{source.stem}.{locale}.properties"


def create_keys(
    source: Path,
    locale: str,
    config: TranslationConfig,
    confirmer: Confirmer,
    plugin: Optional[PluginDetails] = None,
) -> CreateKeysResult:
    """Extract marked text from ``source`` into its ``.properties`` key file."""
    plugin = plugin or load_plugin_details(config.plugin_file)
    destination = destination_for(source, locale, config.message_keys_dir)

    document = read_text(source)
    entries = scan_markers(document)
    messages = scan(document)
    print(f"🔎 Found {len(entries)} message tag(s) in {source.name}.")

    duplicates = find_duplicate_keys(entries)
    reindexed = False
    if duplicates:
        logging.warning("Duplicate keys found: %s", ", ".join(duplicates))
        resolution = resolve_duplicates(document, messages, duplicates, confirmer)
        if resolution.resolved:
            document = resolution.document
            messages = scan(document)
            reindexed = True
            remaining = find_duplicate_keys(scan_markers(document))
            if remaining:
                logging.warning("Keys still duplicated after re-indexing: %s", ", ".join(remaining))

    consolidation = consolidate(messages, document)
    document = consolidation.document
    messages = consolidation.messages

    if not confirmer.confirm(REWRITE_PROMPT):
        print("Operation cancelled by user.")
        return CreateKeysResult(
            source=source,
            destination=destination,
            messages=messages,
            duplicates=duplicates,
            reindexed=reindexed,
            consolidated=consolidation.key_updates,
            cancelled=True,
        )

    backup_files(source, destination, config.backup_dir)
    write_key_file(destination, plugin, source.stem, locale, messages)
    atomic_write(materialize(document), source)
    print(f"✅ Wrote {len(messages)} key(s) to {destination}")

    return CreateKeysResult(
        source=source,
        destination=destination,
        messages=messages,
        duplicates=duplicates,
        reindexed=reindexed,
        consolidated=consolidation.key_updates,
    )
