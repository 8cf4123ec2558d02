"""Linear scanner for ``[msg:KEY]text[/msg]`` marker tags."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List

OPEN_MARKER = "[msg:"
END_MARKER = "[/msg]"


@dataclass(frozen=True)
class MessageEntry:
    key: str
    text: str
    start: int
    end: int


def iter_markers(document: str) -> Iterator[MessageEntry]:
    """Yield every well-formed marker span in document order.

    A tag without its closing ``]`` or without a matching ``[/msg]`` stops the
    scan; everything found before it is kept.
    """
    cursor = 0
    while cursor < len(document):
        start = document.find(OPEN_MARKER, cursor)
        if start == -1:
            return
        tag_end = document.find("]", start)
        if tag_end == -1:
            return
        end = document.find(END_MARKER, tag_end)
        if end == -1:
            return
        key = document[start + len(OPEN_MARKER):tag_end]
        # Interior whitespace runs become single spaces so the text fits one property line.
        text = " ".join(document[tag_end + 1:end].split())
        cursor = end + len(END_MARKER)
        yield MessageEntry(key=key, text=text, start=start, end=cursor)


def scan_markers(document: str) -> List[MessageEntry]:
    return list(iter_markers(document))


def scan(document: str) -> Dict[str, str]:
    # Later occurrences of a key overwrite earlier ones.
    messages: Dict[str, str] = {}
    for entry in iter_markers(document):
        messages[entry.key] = entry.text
    return messages


def find_duplicate_keys(entries: Iterable[MessageEntry]) -> List[str]:
    """Return keys seen more than once, in order of first appearance."""
    entries = list(entries)
    counts = Counter(entry.key for entry in entries)
    duplicates: List[str] = []
    for entry in entries:
        if counts[entry.key] > 1 and entry.key not in duplicates:
            duplicates.append(entry.key)
    return duplicates
