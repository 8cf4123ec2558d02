"""Per-file translation progress shared between the translator and the display."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List

SKIPPED = "Skipped"
PENDING = "Pending"
IN_PROGRESS = "In Progress"
COMPLETED = "Completed"

BAR_LENGTH = 10


@dataclass
class FileProgress:
    name: str
    processed: int = 0
    total: int = 0

    @property
    def status(self) -> str:
        return determine_status(self.processed, self.total)

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.processed * 100 / self.total)


def determine_status(processed: int, total: int) -> str:
    if total == 0:
        return SKIPPED
    if processed == 0:
        return PENDING
    if processed < total:
        return IN_PROGRESS
    return COMPLETED


def progress_bar(processed: int, total: int, length: int = BAR_LENGTH) -> str:
    if total == 0:
        return "no content"
    percentage = round(processed * 100 / total)
    filled = round(percentage * length / 100)
    return f"{'█' * filled}{'░' * (length - filled)} {percentage}%"


@dataclass
class ProgressTracker:
    """Counters keyed by file name; subscribers are called on every update."""

    files: Dict[str, FileProgress] = field(default_factory=dict)
    subscribers: List[Callable[["ProgressTracker"], None]] = field(default_factory=list)

    def subscribe(self, callback: Callable[["ProgressTracker"], None]) -> None:
        self.subscribers.append(callback)

    def _entry(self, name: str) -> FileProgress:
        if name not in self.files:
            self.files[name] = FileProgress(name)
        return self.files[name]

    def add_total(self, name: str, lines: int) -> None:
        self._entry(name).total += lines
        self._notify()

    def record_progress(self, name: str, processed: int, total: int) -> None:
        entry = self._entry(name)
        entry.processed = processed
        entry.total = total
        self._notify()

    def increment(self, name: str, count: int = 1) -> None:
        self._entry(name).processed += count
        self._notify()

    def _notify(self) -> None:
        for callback in self.subscribers:
            callback(self)

    @property
    def total_processed(self) -> int:
        return sum(entry.processed for entry in self.files.values())

    @property
    def total_expected(self) -> int:
        return sum(entry.total for entry in self.files.values())

    @property
    def completed_files(self) -> int:
        return sum(1 for entry in self.files.values() if entry.status == COMPLETED)

    def render(self) -> str:
        header = f"{'File':<35}{'Processed':>11}{'Total':>9}  {'Progress':<16}{'Status'}"
        rows = [header, "-" * len(header)]
        for entry in self.files.values():
            rows.append(
                f"{entry.name:<35}{entry.processed:>11}{entry.total:>9}  "
                f"{progress_bar(entry.processed, entry.total):<16}{entry.status}"
            )
        expected = self.total_expected
        overall = round(self.total_processed * 100 / expected) if expected else 0
        rows.append("")
        rows.append(f"Overall: {overall}% ({self.total_processed}/{expected} lines)")
        rows.append(f"Completed files: {self.completed_files}")
        return "\n".join(rows)
