from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from ps_i18n.config import TranslationConfig
from ps_i18n.properties import PluginDetails
from ps_i18n.translator import TranslationError

SPANISH = {"Hello": "Hola", "Goodbye": "Adiós", "Welcome to the test": "Bienvenido a la prueba"}


class FakeCapability:
    def __init__(self, table: Optional[Dict[str, str]] = None, fail: bool = False) -> None:
        self.table = table if table is not None else dict(SPANISH)
        self.fail = fail
        self.calls: List[Tuple[str, str]] = []

    def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if self.fail:
            raise TranslationError("service unavailable")
        return self.table.get(text, f"{text} [{target_language}]")


class ScriptedConfirmer:
    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.asked: List[str] = []

    def confirm(self, prompt: str) -> bool:
        self.asked.append(prompt)
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PS_I18N_TEST_MODE", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def plugin() -> PluginDetails:
    return PluginDetails(name="Demo Plugin", version="1.0")


@pytest.fixture
def config(tmp_path: Path) -> TranslationConfig:
    return TranslationConfig(
        message_keys_dir=tmp_path / "MessageKeys",
        backup_dir=tmp_path / "backup",
        languages_file=tmp_path / "languages.json",
        plugin_file=tmp_path / "plugin.xml",
        delay_min_ms=0,
        delay_max_ms=0,
    )
