"""Reading, merging and writing of ``key=value`` property files."""

from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class PluginDetails:
    name: str
    version: str


def decode_auto(path: Path) -> Tuple[str, Optional[bytes]]:
    raw = path.read_bytes()
    if raw.startswith(b"\xff\xfe"):
        return raw[2:].decode("utf-16-le"), b"\xff\xfe"
    if raw.startswith(b"\xfe\xff"):
        return raw[2:].decode("utf-16-be"), b"\xfe\xff"
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw[3:].decode("utf-8"), b"\xef\xbb\xbf"
    return raw.decode("utf-8"), None


def read_text(path: Path) -> str:
    try:
        text, _ = decode_auto(path)
    except UnicodeDecodeError as exc:
        raise OSError(errno.EILSEQ, f"Cannot decode file as UTF-8 or UTF-16: {exc}", str(path)) from exc
    return text


def atomic_write(data: str, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output.with_name(output.name + ".tmp")
    with temp_path.open("w", encoding="utf-8", newline="\n") as fp:
        fp.write(data)
        fp.flush()
        os.fsync(fp.fileno())
    os.replace(temp_path, output)


def is_passthrough_line(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def split_property(line: str) -> Optional[Tuple[str, str]]:
    """Split ``key=value`` on the first ``=``; ``None`` for anything else."""
    if is_passthrough_line(line) or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip()


def parse_properties(content: str) -> Dict[str, str]:
    # Best effort: comments, blanks and lines without '=' are ignored.
    pairs: Dict[str, str] = {}
    for line in content.splitlines():
        pair = split_property(line)
        if pair is not None:
            pairs[pair[0]] = pair[1]
    return pairs


def load_properties(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    return parse_properties(read_text(path))


def merge_properties(existing: Mapping[str, str], new: Mapping[str, str]) -> Dict[str, str]:
    """Overlay ``new`` on ``existing``; keys only present in ``existing`` survive."""
    merged = dict(existing)
    merged.update(new)
    return merged


def generate_header(plugin: PluginDetails, source_name: str, locale: str) -> List[str]:
    return [
        f"# {plugin.name} - Version: {plugin.version}",
        f"# MessageKeys for: {source_name} ({locale})",
    ]


def render_key_file(header: List[str], messages: Mapping[str, str]) -> str:
    lines = list(header)
    lines.append("")
    lines.extend(f"{key}={value}" for key, value in messages.items())
    return "\n".join(lines) + "\n"


def write_key_file(
    destination: Path,
    plugin: PluginDetails,
    source_name: str,
    locale: str,
    messages: Mapping[str, str],
) -> Dict[str, str]:
    """Merge ``messages`` into ``destination`` and rewrite it with a fresh header."""
    existing = load_properties(destination)
    if existing:
        logging.debug("Merging %s existing key(s) from %s", len(existing), destination)
    merged = merge_properties(existing, messages)
    header = generate_header(plugin, source_name, locale)
    atomic_write(render_key_file(header, merged), destination)
    return merged
