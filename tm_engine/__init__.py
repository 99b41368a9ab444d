"""
Translation Memory Matching Engine
Map vendor TMX exports back onto the pipeline's source phrases.

Key components:
- TranslationMemory: locale + phrase -> translated string, per-locale checksum
- TmxIndexBuilder: parse the vendor export into per-locale indexes
- VariantPathCodec: vendor variant paths <-> dotted meta keys
- PlaceholderAligner: realign {0}, {1}, ... onto %{name} and HTML tokens
- TextNormalizer: comparison-only text normalization
- ChecksumComputer: deterministic index fingerprint
"""

from .aligner import PlaceholderAligner
from .checksum import ChecksumComputer
from .config import TMSettings, get_settings
from .exceptions import CorpusLoadError, MalformedPathError, TMEngineError
from .io import TMXExporter, TmxIndexBuilder
from .memory import TranslationMemory
from .models import LocaleIndex, TranslationUnit
from .normalizer import TextNormalizer
from .paths import VariantPathCodec
from .repository import InMemoryTTLCache, TranslationMemoryRepository
from .schemas import Phrase

__all__ = [
    "TranslationMemory",
    "TranslationMemoryRepository",
    "InMemoryTTLCache",
    "TmxIndexBuilder",
    "TMXExporter",
    "VariantPathCodec",
    "PlaceholderAligner",
    "TextNormalizer",
    "ChecksumComputer",
    "LocaleIndex",
    "TranslationUnit",
    "Phrase",
    "TMSettings",
    "get_settings",
    "TMEngineError",
    "MalformedPathError",
    "CorpusLoadError",
]
