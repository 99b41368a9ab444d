"""
Checksum Computer
Deterministic fingerprint of a locale index, used as a cache key.
"""
import hashlib
import json
from typing import List

from .models import LocaleIndex

# Unit fields in serialization order
UNIT_FIELDS = ("meta_key", "source_text", "target_text", "plural_form")


class ChecksumComputer:
    """
    SHA-256 over a canonical serialization of a LocaleIndex.

    Meta keys are sorted; units under one key keep their export order.
    """

    def canonical_bytes(self, index: LocaleIndex) -> bytes:
        payload: List[list] = []
        for meta_key in sorted(index.keys()):
            units = [
                [getattr(unit, field) for field in UNIT_FIELDS]
                for unit in index.get(meta_key)
            ]
            payload.append([meta_key, units])

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def compute(self, index: LocaleIndex) -> str:
        return hashlib.sha256(self.canonical_bytes(index)).hexdigest()


def compute_checksum(index: LocaleIndex) -> str:
    """Compute the checksum of an index (convenience function)"""
    return ChecksumComputer().compute(index)
