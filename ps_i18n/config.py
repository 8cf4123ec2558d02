"""Runtime configuration for key extraction and translation."""

from __future__ import annotations

import json
import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ps_i18n.properties import PluginDetails

DEFAULT_CONFIG_FILE = "translation.config.json"
DEFAULT_MODEL = "gemini-2.5-flash"
TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class TranslationConfig:
    source_locale: str = "US_en"
    message_keys_dir: Path = Path("src/powerschool/MessageKeys")
    backup_dir: Path = Path("original_files_backup")
    languages_file: Path = Path("languages.json")
    plugin_file: Path = Path("plugin.xml")
    testing_mode: bool = False
    debug: bool = False
    # Randomized pause between translation calls, in milliseconds.
    delay_min_ms: int = 1000
    delay_max_ms: int = 3000
    append_timestamp: bool = False
    model: str = DEFAULT_MODEL
    max_retries: int = 3
    api_key: Optional[str] = None
    # Sample source-locale key files copied in when the message keys directory has none.
    example_dir: Optional[Path] = None


_PATH_FIELDS = {"message_keys_dir", "backup_dir", "languages_file", "plugin_file", "example_dir"}


def _coerce(name: str, value: Any) -> Any:
    if name in _PATH_FIELDS and value is not None:
        return Path(value)
    return value


def config_from_mapping(data: Mapping[str, Any], base: Optional[TranslationConfig] = None) -> TranslationConfig:
    base = base or TranslationConfig()
    known = {f.name for f in fields(TranslationConfig)}
    updates: Dict[str, Any] = {}
    for name, value in data.items():
        if name not in known:
            logging.warning("Unknown configuration key ignored: %s", name)
            continue
        updates[name] = _coerce(name, value)
    if not updates:
        return base
    config = replace(base, **updates)
    if config.delay_min_ms < 0 or config.delay_max_ms < config.delay_min_ms:
        raise ConfigError(
            f"Invalid delay range: {config.delay_min_ms}-{config.delay_max_ms} ms"
        )
    return config


def apply_environment(config: TranslationConfig, environ: Optional[Mapping[str, str]] = None) -> TranslationConfig:
    environ = os.environ if environ is None else environ
    updates: Dict[str, Any] = {}
    if environ.get("PS_I18N_TEST_MODE", "").strip().lower() in TRUTHY:
        updates["testing_mode"] = True
    api_key = environ.get("GEMINI_API_KEY") or environ.get("GOOGLE_API_KEY")
    if api_key and not config.api_key:
        updates["api_key"] = api_key
    return replace(config, **updates) if updates else config


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> TranslationConfig:
    """Load defaults, then the JSON config file (if any), then environment overrides."""
    config = TranslationConfig()
    config_path = path or Path(DEFAULT_CONFIG_FILE)
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a JSON object.")
        config = config_from_mapping(data, config)
        logging.debug("Loaded configuration from %s", config_path)
    elif path is not None:
        raise ConfigError(f"Configuration file does not exist: {config_path}")
    return apply_environment(config, environ)


def load_plugin_details(path: Path) -> PluginDetails:
    """Read the plugin name and version from ``plugin.xml``."""
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise ConfigError(f"Error parsing {path}: {exc}") from exc
    plugin = root if root.tag == "plugin" else root.find(".//plugin")
    if plugin is None:
        raise ConfigError(f"No <plugin> element in {path}")
    name = plugin.attrib.get("name")
    version = plugin.attrib.get("version")
    if not name or not version:
        raise ConfigError(f"<plugin> in {path} needs both name and version attributes.")
    return PluginDetails(name=name, version=version)
