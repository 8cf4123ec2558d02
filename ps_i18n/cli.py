"""Command line entry point: ``ps-i18n create-keys`` and ``ps-i18n translate``."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from ps_i18n import __version__
from ps_i18n.config import ConfigError, TranslationConfig, load_config
from ps_i18n.keys import create_keys
from ps_i18n.locales import load_languages
from ps_i18n.progress import ProgressTracker
from ps_i18n.prompts import Confirmer, InteractiveConfirmer, PresetConfirmer
from ps_i18n.translator import LocaleTranslator, build_translator


def add_common_options(parser: argparse.ArgumentParser, suppress: bool = False) -> None:
    # Subcommands repeat the global flags so they work on either side of the command.
    default = argparse.SUPPRESS if suppress else False
    parser.add_argument("-d", "--debug", action="store_true", default=default, help="Enable debug output")
    parser.add_argument(
        "-Y",
        "--yes",
        action="store_true",
        default=default,
        help='Bypass the "yes" prompt for confirmation',
    )
    parser.add_argument(
        "--test-mode",
        action="store_true",
        default=default,
        help="Run in test mode (no request delay, one translated line per file, no progress bar)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ps-i18n", description="CLI for translation and internationalization")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    add_common_options(parser)
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON configuration file.")
    parser.add_argument("--api-key", type=str, default=None, help="Gemini API key (defaults to GEMINI_API_KEY).")

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    create = subparsers.add_parser("create-keys", help="Create message keys from a source HTML file")
    create.add_argument("source_file", type=Path)
    create.add_argument("locale")
    add_common_options(create, suppress=True)

    translate = subparsers.add_parser("translate", help="Translate all message keys to the configured languages")
    translate.add_argument(
        "locale",
        nargs="?",
        default=None,
        help="Single target locale (e.g. es or US_es); the source locale or nothing means every language.",
    )
    translate.add_argument("--message-keys-dir", type=Path, default=None)
    add_common_options(translate, suppress=True)
    return parser


def resolve_config(args: argparse.Namespace) -> TranslationConfig:
    config = load_config(args.config)
    updates = {}
    if args.debug:
        updates["debug"] = True
    if args.test_mode:
        updates["testing_mode"] = True
    if args.api_key:
        updates["api_key"] = args.api_key
    return replace(config, **updates) if updates else config


def build_confirmer(args: argparse.Namespace) -> Confirmer:
    if args.yes:
        return PresetConfirmer(answer=True)
    return InteractiveConfirmer()


def run_create_keys(args: argparse.Namespace, config: TranslationConfig) -> int:
    if not args.source_file.exists():
        logging.error("Source file does not exist: %s", args.source_file)
        return 1
    result = create_keys(args.source_file, args.locale, config, build_confirmer(args))
    if result.cancelled:
        return 0
    if result.consolidated:
        print("🔗 Consolidation complete. Duplicate values have been merged and files updated.")
    return 0


def run_translate(args: argparse.Namespace, config: TranslationConfig) -> int:
    languages = load_languages(config.languages_file)
    tracker = ProgressTracker()
    translator = LocaleTranslator(
        capability=build_translator(config),
        config=config,
        languages=languages,
        tracker=tracker,
    )
    message_keys_dir = args.message_keys_dir or config.message_keys_dir
    if not message_keys_dir.is_dir():
        logging.error("Message keys directory does not exist: %s", message_keys_dir)
        return 1

    outcomes = translator.translate_all(message_keys_dir, args.locale)
    if not outcomes:
        print("No files to process.")
        return 0
    print()
    print(tracker.render())
    failed = sum(outcome.failed for outcome in outcomes)
    if failed:
        logging.warning("%s line(s) were left untranslated.", failed)
    print("\n✅ Translation process completed.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = resolve_config(args)
        if args.command == "create-keys":
            return run_create_keys(args, config)
        return run_translate(args, config)
    except ConfigError as exc:
        logging.error("Configuration error: %s", exc)
        return 1
    except OSError as exc:
        logging.error("File operation failed (%s): %s", getattr(exc, "filename", None) or "unknown path", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
