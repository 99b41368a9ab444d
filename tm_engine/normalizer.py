"""
Text Normalizer
Canonical form used for every text comparison in the engine.

Comparison only: normalized text is never written into a translation.
"""
import html
import re
import unicodedata
from typing import Dict

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Normalize text for equality comparison.

    - HTML character references decoded (``&larr;`` == ``←``)
    - Unicode NFC composition (``n`` + U+0303 == ``ñ``)
    - whitespace runs collapsed to one space, ends trimmed
    """
    if not text:
        return ""
    text = html.unescape(text)
    text = unicodedata.normalize("NFC", text)
    return _WHITESPACE.sub(" ", text).strip()


class TextNormalizer:
    """Normalizer with a bounded memo of already normalized strings."""

    MAX_CACHE_ENTRIES = 10000

    def __init__(self):
        self._cache: Dict[str, str] = {}

    def normalize(self, text: str) -> str:
        cached = self._cache.get(text)
        if cached is not None:
            return cached

        normalized = normalize_text(text)

        # Keep cache size bounded
        if len(self._cache) >= self.MAX_CACHE_ENTRIES:
            self._cache.clear()
        self._cache[text] = normalized

        return normalized

    def equal(self, left: str, right: str) -> bool:
        return self.normalize(left) == self.normalize(right)


def texts_equal(left: str, right: str) -> bool:
    """Compare two texts after normalization (convenience function)"""
    return normalize_text(left) == normalize_text(right)
