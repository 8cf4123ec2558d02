"""Yes/no confirmation gates used before destructive rewrites."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Protocol

AFFIRMATIVE = {"yes", "y"}


class Confirmer(Protocol):
    def confirm(self, prompt: str) -> bool:
        ...


@dataclass
class InteractiveConfirmer:
    """Ask on the terminal; only an explicit yes proceeds."""

    input_func: Callable[[str], str] = input

    def confirm(self, prompt: str) -> bool:
        try:
            answer = self.input_func(f"{prompt} (yes/no): ")
        except EOFError:
            logging.warning("No answer available on stdin; treating as 'no'.")
            return False
        return answer.strip().lower() in AFFIRMATIVE


@dataclass
class PresetConfirmer:
    """Answer every prompt with a fixed value (``--yes`` and tests)."""

    answer: bool = True
    asked: List[str] = field(default_factory=list)

    def confirm(self, prompt: str) -> bool:
        self.asked.append(prompt)
        logging.debug("Auto-answering %r with %s", prompt, "yes" if self.answer else "no")
        return self.answer
