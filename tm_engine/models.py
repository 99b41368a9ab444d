"""
Translation Memory Data Models
In-memory units and per-locale indexes built from a vendor TMX export.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class TranslationUnit:
    """
    A single source/target pair from the vendor export.

    target_text keeps the vendor's positional placeholders ({0}, {1}, ...)
    and literal markup exactly as exported.
    """

    source_text: str
    target_text: str
    meta_key: str
    plural_form: Optional[str] = None
    tuid: Optional[str] = field(default=None, compare=False)

    def __repr__(self):
        src = self.source_text[:30] + "..." if len(self.source_text) > 30 else self.source_text
        return f"<Unit {self.meta_key} {src!r}>"


class LocaleIndex:
    """
    Read-only mapping of meta key -> ordered units for one locale.

    Duplicates under the same meta key are kept in export order; they are
    disambiguated at lookup time, never overwritten.
    """

    def __init__(self, locale: str, entries: Dict[str, Tuple[TranslationUnit, ...]] = None):
        self.locale = locale
        self._entries: Dict[str, Tuple[TranslationUnit, ...]] = dict(entries or {})

    @classmethod
    def from_units(cls, locale: str, units: List[TranslationUnit]) -> "LocaleIndex":
        buckets: Dict[str, List[TranslationUnit]] = {}
        for unit in units:
            buckets.setdefault(unit.meta_key, []).append(unit)
        return cls(locale, {key: tuple(bucket) for key, bucket in buckets.items()})

    def get(self, meta_key: str) -> Tuple[TranslationUnit, ...]:
        return self._entries.get(meta_key, ())

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def items(self) -> List[Tuple[str, Tuple[TranslationUnit, ...]]]:
        return list(self._entries.items())

    def units(self) -> Iterator[TranslationUnit]:
        for bucket in self._entries.values():
            yield from bucket

    @property
    def unit_count(self) -> int:
        return sum(len(bucket) for bucket in self._entries.values())

    def without(self, meta_key: str) -> "LocaleIndex":
        """Return a copy of this index lacking ``meta_key``."""
        entries = {key: bucket for key, bucket in self._entries.items() if key != meta_key}
        return LocaleIndex(self.locale, entries)

    def __contains__(self, meta_key: object) -> bool:
        return meta_key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocaleIndex):
            return NotImplemented
        return self.locale == other.locale and self._entries == other._entries

    def __repr__(self):
        return f"<LocaleIndex {self.locale} ({len(self)} keys, {self.unit_count} units)>"
