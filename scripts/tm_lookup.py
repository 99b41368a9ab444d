#!/usr/bin/env python3
"""
TM Lookup: inspect a vendor TMX export from the command line.

Usage:
    python -m scripts.tm_lookup --tmx de.tmx --stats
    python -m scripts.tm_lookup --tmx de.tmx --locale de-DE --checksum
    python -m scripts.tm_lookup --tmx de.tmx --locale de-DE \\
        --key "Hello there %{name}" --meta-key greeting
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tm_engine.config import get_settings  # noqa: E402
from tm_engine.exceptions import CorpusLoadError  # noqa: E402
from tm_engine.io import TmxIndexBuilder  # noqa: E402
from tm_engine.memory import TranslationMemory  # noqa: E402
from tm_engine.schemas import LocaleStats, LookupResult, Phrase  # noqa: E402

logger = logging.getLogger(__name__)


def locale_stats(memory: TranslationMemory, locale: str) -> LocaleStats:
    index = memory.index_for(locale)
    return LocaleStats(
        locale=locale,
        meta_keys=len(index),
        units=index.unit_count,
        duplicate_keys=sum(1 for _, units in index.items() if len(units) > 1),
        plural_units=sum(1 for unit in index.units() if unit.plural_form),
        checksum=memory.checksum_for(locale),
    )


def lookup(memory: TranslationMemory, locale: str, key: str, meta_key: Optional[str]) -> LookupResult:
    translation = memory.translation_for(locale, Phrase(key=key, meta_key=meta_key))
    return LookupResult(
        locale=locale,
        meta_key=meta_key,
        key=key,
        translation=translation,
        translated=translation != key,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Translation memory lookup tool")
    parser.add_argument("--tmx", type=Path, required=True, help="TMX export file")
    parser.add_argument("--locale", type=str, help="Target locale (default: from the file)")
    parser.add_argument("--key", type=str, help="Phrase key to translate")
    parser.add_argument("--meta-key", type=str, help="Phrase meta key")
    parser.add_argument("--checksum", action="store_true", help="Print the locale checksum")
    parser.add_argument("--stats", action="store_true", help="Print per-locale statistics")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(message)s")

    try:
        indexes = TmxIndexBuilder(settings).build(args.tmx.read_bytes(), locale=args.locale)
    except CorpusLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    memory = TranslationMemory(indexes, settings)
    locales = [args.locale] if args.locale else memory.locales

    if args.stats:
        for locale in locales:
            print(locale_stats(memory, locale).model_dump_json())

    if args.checksum:
        for locale in locales:
            print(f"{locale}  {memory.checksum_for(locale)}")

    if args.key is not None:
        for locale in locales:
            print(lookup(memory, locale, args.key, args.meta_key).model_dump_json())

    if not (args.stats or args.checksum or args.key is not None):
        parser.print_help()

    return 0


if __name__ == "__main__":
    sys.exit(main())
