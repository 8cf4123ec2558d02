"""Compound ``<region>_<language>`` locales and the configured language list."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ps_i18n.config import ConfigError

CODE_FIELD = "Language Code"
NAME_FIELD = "Language"

ISO_LANGUAGE_NAMES = {
    "af": "Afrikaans", "sq": "Albanian", "am": "Amharic", "ar": "Arabic",
    "hy": "Armenian", "az": "Azerbaijani", "eu": "Basque", "be": "Belarusian",
    "bn": "Bengali", "bs": "Bosnian", "bg": "Bulgarian", "ca": "Catalan",
    "ceb": "Cebuano", "ny": "Chichewa", "zh-CN": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)", "co": "Corsican", "hr": "Croatian",
    "cs": "Czech", "da": "Danish", "nl": "Dutch", "en": "English",
    "eo": "Esperanto", "et": "Estonian", "tl": "Filipino", "fi": "Finnish",
    "fr": "French", "fy": "Frisian", "gl": "Galician", "ka": "Georgian",
    "de": "German", "el": "Greek", "gu": "Gujarati", "ht": "Haitian Creole",
    "ha": "Hausa", "haw": "Hawaiian", "iw": "Hebrew", "hi": "Hindi",
    "hmn": "Hmong", "hu": "Hungarian", "is": "Icelandic", "ig": "Igbo",
    "id": "Indonesian", "ga": "Irish", "it": "Italian", "ja": "Japanese",
    "jw": "Javanese", "kn": "Kannada", "kk": "Kazakh", "km": "Khmer",
    "ko": "Korean", "ku": "Kurdish (Kurmanji)", "ky": "Kyrgyz", "lo": "Lao",
    "la": "Latin", "lv": "Latvian", "lt": "Lithuanian", "lb": "Luxembourgish",
    "mk": "Macedonian", "mg": "Malagasy", "ms": "Malay", "ml": "Malayalam",
    "mt": "Maltese", "mi": "Maori", "mr": "Marathi", "mn": "Mongolian",
    "my": "Myanmar (Burmese)", "ne": "Nepali", "no": "Norwegian", "ps": "Pashto",
    "fa": "Persian", "pl": "Polish", "pt": "Portuguese", "pa": "Punjabi",
    "ro": "Romanian", "ru": "Russian", "sm": "Samoan", "gd": "Scots Gaelic",
    "sr": "Serbian", "st": "Sesotho", "sn": "Shona", "sd": "Sindhi",
    "si": "Sinhala", "sk": "Slovak", "sl": "Slovenian", "so": "Somali",
    "es": "Spanish", "su": "Sundanese", "sw": "Swahili", "sv": "Swedish",
    "tg": "Tajik", "ta": "Tamil", "te": "Telugu", "th": "Thai",
    "tr": "Turkish", "uk": "Ukrainian", "ur": "Urdu", "uz": "Uzbek",
    "vi": "Vietnamese", "cy": "Welsh", "xh": "Xhosa", "yi": "Yiddish",
    "yo": "Yoruba", "zu": "Zulu",
}


@dataclass(frozen=True)
class Locale:
    region: str
    language: str

    @classmethod
    def parse(cls, code: str) -> "Locale":
        region, sep, language = code.partition("_")
        if not sep or not region or not language:
            raise ValueError(f"Expected a <region>_<language> locale, got {code!r}")
        return cls(region=region, language=language)

    @property
    def code(self) -> str:
        return f"{self.region}_{self.language}"

    def with_language(self, language: str) -> "Locale":
        return Locale(region=self.region, language=language)

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class LanguageEntry:
    code: str
    name: str

    def to_json(self) -> dict:
        return {CODE_FIELD: self.code, NAME_FIELD: self.name}


DEFAULT_LANGUAGES = (
    LanguageEntry("en", "English"),
    LanguageEntry("es", "Spanish"),
    LanguageEntry("hi", "Hindi"),
)


def iso_language(code: str) -> str:
    """ISO code for a compound (``US_es``) or bare (``es``) locale code."""
    if "_" in code:
        return Locale.parse(code).language
    return code


def target_locale(source: Locale, code: str) -> Locale:
    """Compound locale for ``code``, keeping the source region for bare codes."""
    if "_" in code:
        return Locale.parse(code)
    return source.with_language(code)


def language_name(code: str) -> str:
    return ISO_LANGUAGE_NAMES.get(code, code)


def create_languages_file(path: Path, languages: Sequence[LanguageEntry] = DEFAULT_LANGUAGES) -> bool:
    """Write the default list when ``path`` is missing. Returns True if created."""
    if path.exists():
        logging.info("%s already exists.", path)
        return False
    logging.warning("%s not found. Creating with default values.", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [entry.to_json() for entry in languages]
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return True


def load_languages(path: Path) -> List[LanguageEntry]:
    create_languages_file(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigError(f"{path} must contain a JSON list.")

    languages: List[LanguageEntry] = []
    for item in data:
        if not isinstance(item, dict) or not item.get(CODE_FIELD):
            logging.warning("Skipping malformed language entry in %s: %r", path, item)
            continue
        code = str(item[CODE_FIELD])
        languages.append(LanguageEntry(code=code, name=str(item.get(NAME_FIELD) or language_name(code))))
    return languages


def language_code_for(name: str, languages: Sequence[LanguageEntry]) -> Optional[str]:
    wanted = name.strip().lower()
    for entry in languages:
        if entry.name.lower() == wanted:
            return entry.code
    return None
