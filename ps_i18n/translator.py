"""Line-by-line translation of key files through Gemini."""

from __future__ import annotations

import logging
import random
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from google import genai
from google.genai import types
from tqdm import tqdm

from ps_i18n.config import DEFAULT_MODEL, TranslationConfig
from ps_i18n.locales import (
    DEFAULT_LANGUAGES,
    LanguageEntry,
    Locale,
    iso_language,
    language_name,
    target_locale,
)
from ps_i18n.progress import ProgressTracker
from ps_i18n.properties import atomic_write, is_passthrough_line, load_properties, read_text, split_property

BACKOFF_SECONDS = 1.0
BACKOFF_MAX_SECONDS = 30.0

PROMPT_TEMPLATE = (
    "You are a professional software localization specialist. "
    "Translate the following user interface text from {source_lang} to {target_lang}. "
    "Keep placeholders such as {{0}}, %s, %1$s and ~[text:...] unchanged. "
    "Do NOT add explanations, quotes or extra words. "
    "Return ONLY the translated text. "
    "Text: {text}"
)

# Known phrases used when the translation service cannot be reached.
FALLBACK_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "es": {"Hello": "Hola", "Goodbye": "Adiós", "Welcome": "Bienvenido", "Yes": "Sí", "No": "No"},
    "hi": {"Hello": "नमस्ते", "Goodbye": "अलविदा", "Welcome": "स्वागत है", "Yes": "हाँ", "No": "नहीं"},
    "fr": {"Hello": "Bonjour", "Goodbye": "Au revoir", "Welcome": "Bienvenue", "Yes": "Oui", "No": "Non"},
}


class TranslationError(RuntimeError):
    pass


class TranslationCapability(Protocol):
    def translate(self, text: str, target_language: str) -> str:
        ...


def setup_gemini(api_key: str) -> genai.Client:
    """Create a Google GenAI client (google-genai SDK)."""
    return genai.Client(api_key=api_key)


def clean_response(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def is_retryable_error(exc: Exception) -> bool:
    transient_signals = (
        "rate limit",
        "resource exhausted",
        "temporarily unavailable",
        "try again",
        "deadline exceeded",
        "overloaded",
        "timeout",
        "429",
        "503",
    )
    message = str(exc).lower()
    if any(signal in message for signal in transient_signals):
        return True
    if isinstance(exc, ValueError):
        return "empty response" in message or "without candidates" in message
    return not isinstance(exc, (TypeError, PermissionError))


def translate_text_gemini(
    client: genai.Client,
    text: str,
    target_language: str,
    model: str = DEFAULT_MODEL,
    source_lang: str = "English",
) -> str:
    prompt = PROMPT_TEMPLATE.format(
        source_lang=source_lang,
        target_lang=f"{language_name(target_language)} ({target_language})",
        text=text,
    )
    response = client.models.generate_content(
        model=model,
        contents=prompt,
        config=types.GenerateContentConfig(temperature=0.2, response_mime_type="text/plain"),
    )
    candidates = getattr(response, "candidates", None)
    if candidates is not None and not candidates:
        raise ValueError("Response without candidates.")
    response_text = getattr(response, "text", None)
    if not response_text or not response_text.strip():
        raise ValueError("Empty response or no usable text returned.")
    return clean_response(response_text)


@dataclass
class GeminiTranslator:
    """Translation capability backed by Gemini, with retry and backoff."""

    client: genai.Client
    model: str = DEFAULT_MODEL
    max_retries: int = 3
    source_lang: str = "English"
    sleep: Callable[[float], None] = time.sleep

    def translate(self, text: str, target_language: str) -> str:
        attempt = 0
        while True:
            try:
                return translate_text_gemini(
                    self.client, text, target_language, model=self.model, source_lang=self.source_lang
                )
            except Exception as exc:
                attempt += 1
                retryable = is_retryable_error(exc)
                logging.warning(
                    "Translation error (attempt %s/%s, retry=%s): %s",
                    attempt,
                    self.max_retries,
                    retryable,
                    exc,
                )
                if (not retryable) or attempt > self.max_retries:
                    raise TranslationError(str(exc)) from exc

                backoff = min(BACKOFF_SECONDS * (2 ** (attempt - 1)), BACKOFF_MAX_SECONDS)
                backoff += random.uniform(0, BACKOFF_SECONDS)
                self.sleep(backoff)


@dataclass(frozen=True)
class UnavailableTranslator:
    reason: str = "no translation service configured"

    def translate(self, text: str, target_language: str) -> str:
        raise TranslationError(self.reason)


def build_translator(config: TranslationConfig) -> TranslationCapability:
    if not config.api_key:
        logging.warning("No Gemini API key configured; falling back to the offline phrase dictionary.")
        return UnavailableTranslator("no Gemini API key configured")
    return GeminiTranslator(setup_gemini(config.api_key), model=config.model, max_retries=config.max_retries)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TranslationOutcome:
    source: Path
    target: Path
    locale: str
    translated: int = 0
    fallbacks: int = 0
    failed: int = 0
    passed_through: int = 0
    retained: int = 0


def progress_name(path: Path, source_locale: str) -> str:
    name = path.name
    if name.endswith(".properties"):
        name = name[: -len(".properties")]
    suffix = f".{source_locale}"
    return name[: -len(suffix)] if name.endswith(suffix) else name


def target_path_for(source: Path, source_locale: Locale, target: Locale) -> Path:
    marker = f".{source_locale.code}."
    if marker in source.name:
        return source.with_name(source.name.replace(marker, f".{target.code}.", 1))
    return source.with_name(f"{source.stem}.{target.code}{source.suffix}")


@dataclass
class LocaleTranslator:
    capability: TranslationCapability
    config: TranslationConfig = field(default_factory=TranslationConfig)
    languages: Sequence[LanguageEntry] = DEFAULT_LANGUAGES
    tracker: ProgressTracker = field(default_factory=ProgressTracker)
    fallback: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: FALLBACK_TRANSLATIONS)
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], datetime] = utc_now

    def pause(self) -> None:
        if self.config.testing_mode:
            return
        delay_ms = random.uniform(self.config.delay_min_ms, self.config.delay_max_ms)
        if delay_ms > 0:
            self.sleep(delay_ms / 1000)

    def translate_value(self, value: str, language: str) -> Tuple[str, str]:
        """Return ``(text, how)`` where ``how`` is translated, fallback or failed."""
        try:
            translated = self.capability.translate(value, language).strip()
        except Exception as exc:
            logging.warning("Translation to %s failed for %r: %s", language, value, exc)
        else:
            if translated:
                return translated, "translated"
            logging.warning("Empty translation to %s for %r; keeping the source text.", language, value)
            return value, "failed"

        known = self.fallback.get(language, {}).get(value)
        if known is not None:
            logging.info("Using fallback dictionary for %r (%s).", value, language)
            return known, "fallback"
        return value, "failed"

    def stamp(self, value: str) -> str:
        if not self.config.append_timestamp:
            return value
        return f"{value} - {self.clock().isoformat(timespec='seconds')}"

    def translate_file(self, source: Path, target_code: str, target: Path) -> TranslationOutcome:
        """Translate every ``key=value`` line of ``source`` into ``target``.

        Comments and blank lines are copied verbatim. Keys already present in
        ``target`` but absent from ``source`` are kept at the end of the file.
        """
        language = iso_language(target_code)
        lines = read_text(source).splitlines()
        existing = load_properties(target)
        name = progress_name(source, self.config.source_locale)

        total = sum(1 for line in lines if split_property(line) is not None)
        self.tracker.add_total(name, total)

        output: List[str] = []
        seen: set[str] = set()
        counts = {"translated": 0, "fallback": 0, "failed": 0, "passed": 0}
        calls = 0

        with tqdm(
            total=total,
            desc=f"{name} -> {target_code}",
            unit="line",
            disable=self.config.testing_mode,
        ) as bar:
            for line in lines:
                pair = split_property(line)
                if pair is None:
                    if not is_passthrough_line(line):
                        logging.debug("Copying unparseable line verbatim: %r", line)
                    output.append(line)
                    continue

                key, value = pair
                seen.add(key)
                if self.config.testing_mode and calls >= 1:
                    output.append(f"{key}={existing.get(key, value)}")
                    counts["passed"] += 1
                else:
                    if calls:
                        self.pause()
                    text, how = self.translate_value(value, language)
                    calls += 1
                    counts[how] += 1
                    output.append(f"{key}={self.stamp(text)}")

                self.tracker.increment(name)
                bar.update(1)

        retained = [f"{key}={value}" for key, value in existing.items() if key not in seen]
        insert_at = len(output)
        while insert_at and not output[insert_at - 1].strip():
            insert_at -= 1
        output[insert_at:insert_at] = retained

        atomic_write("\n".join(output) + "\n", target)
        print(f"✅ Translation completed. Translated file saved as {target}")
        return TranslationOutcome(
            source=source,
            target=target,
            locale=target_code,
            translated=counts["translated"],
            fallbacks=counts["fallback"],
            failed=counts["failed"],
            passed_through=counts["passed"],
            retained=len(retained),
        )

    def target_codes(self, locale: Optional[str] = None) -> List[str]:
        source = Locale.parse(self.config.source_locale)
        if locale and target_locale(source, locale) != source:
            return [locale]
        return [entry.code for entry in self.languages if entry.code != source.language]

    def seed_from_example(self, message_keys_dir: Path) -> List[Path]:
        """Copy the example source-locale key files into an empty directory."""
        example_dir = self.config.example_dir
        if example_dir is None or not example_dir.is_dir():
            return []
        pattern = f"*.{self.config.source_locale}.properties"
        copied: List[Path] = []
        for example in sorted(example_dir.glob(pattern)):
            target = message_keys_dir / example.name
            shutil.copy2(example, target)
            copied.append(target)
        if copied:
            logging.warning("No matching files found in %s, copied %s example file(s).", message_keys_dir, len(copied))
        return copied

    def translate_all(self, message_keys_dir: Path, locale: Optional[str] = None) -> List[TranslationOutcome]:
        """Translate every source-locale key file to the requested or configured languages."""
        source = Locale.parse(self.config.source_locale)
        files = sorted(message_keys_dir.glob(f"*.{source.code}.properties"))
        if not files:
            files = self.seed_from_example(message_keys_dir)
        if not files:
            logging.warning("No %s key files found in %s.", source.code, message_keys_dir)
            return []

        outcomes: List[TranslationOutcome] = []
        for path in files:
            for code in self.target_codes(locale):
                target = target_locale(source, code)
                print(f"🌐 Translating {path.name} to {target.code}")
                outcomes.append(self.translate_file(path, target.code, target_path_for(path, source, target)))
        return outcomes
