"""
Variant Path Codec
Convert between the vendor's flattened variant paths and dotted meta keys.

Vendor form:  ``en:#:foo:#:[2]:#:bar``
Meta key:     ``foo.1.bar``  (locale stripped, array indices 0-based)
"""
import re
from typing import Tuple

from .exceptions import MalformedPathError

DELIMITER = ":#:"
META_KEY_SEPARATOR = "."

_ARRAY_SEGMENT = re.compile(r"^\[(.*)\]$")
_INDEX = re.compile(r"^[0-9]+$")


class VariantPathCodec:
    """Encode/decode vendor variant paths."""

    def __init__(self, delimiter: str = DELIMITER, separator: str = META_KEY_SEPARATOR):
        self.delimiter = delimiter
        self.separator = separator

    def decode(self, variant: str) -> Tuple[str, str]:
        """
        Split a variant into (locale, meta_key).

        Raises:
            MalformedPathError: empty variant, missing delimiter, empty
                segment, or a bracketed segment that is not a positive integer
        """
        if not variant or not variant.strip():
            raise MalformedPathError(variant or "", "empty variant")

        if self.delimiter not in variant:
            raise MalformedPathError(variant, f"delimiter {self.delimiter!r} not found")

        locale, *segments = variant.strip().split(self.delimiter)
        if not locale:
            raise MalformedPathError(variant, "missing locale segment")

        parts = [self._decode_segment(variant, segment) for segment in segments]
        return locale, self.separator.join(parts)

    def encode(self, locale: str, meta_key: str) -> str:
        """Inverse of decode(): numeric meta key segments become 1-based [n]."""
        if not locale or not meta_key:
            raise ValueError("locale and meta_key are required")

        segments = [locale]
        for part in meta_key.split(self.separator):
            if _INDEX.match(part):
                segments.append(f"[{int(part) + 1}]")
            else:
                segments.append(part)
        return self.delimiter.join(segments)

    def _decode_segment(self, variant: str, segment: str) -> str:
        if not segment:
            raise MalformedPathError(variant, "empty path segment")

        match = _ARRAY_SEGMENT.match(segment)
        if match is None:
            return segment

        raw_index = match.group(1).strip()
        if not _INDEX.match(raw_index):
            raise MalformedPathError(variant, f"non-numeric array index {segment!r}")

        # vendor array indices start at 1
        index = int(raw_index) - 1
        if index < 0:
            raise MalformedPathError(variant, f"array index {segment!r} out of range")
        return str(index)


_codec = VariantPathCodec()


def decode_variant(variant: str) -> Tuple[str, str]:
    """Decode a variant path (convenience function)"""
    return _codec.decode(variant)


def encode_variant(locale: str, meta_key: str) -> str:
    """Encode a meta key as a variant path (convenience function)"""
    return _codec.encode(locale, meta_key)
