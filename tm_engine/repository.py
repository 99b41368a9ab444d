"""
Translation Memory Repository
Pipeline-facing lookups backed by a cached, downloaded vendor export.

The vendor download itself and the shared cache are collaborators passed in
by the caller:

    repo = TranslationMemoryRepository(
        settings,
        cache=InMemoryTTLCache(),
        downloader=lambda: {"de-DE": fetch_tmx("de-DE")},
    )
    repo.lookup_translation("de-DE", Phrase(key="Hello", meta_key="greeting"))
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Union

from .config import TMSettings, get_settings
from .io import TmxIndexBuilder
from .memory import TranslationMemory
from .schemas import Phrase

logger = logging.getLogger(__name__)

RawExports = Dict[str, Union[str, bytes]]
Downloader = Callable[[], RawExports]


# ---------------------------------------------------------------------------
# Cache contract
# ---------------------------------------------------------------------------

class MemoryCache(Protocol):
    """``fetch(key, ttl, build)``: cached value for key, else build() stored for ttl seconds."""

    def fetch(self, key: str, ttl: int, build: Callable[[], Any]) -> Any:
        ...


class InMemoryTTLCache:
    """Dict-based, single-process implementation of the cache contract."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._store: dict[str, tuple[Any, float]] = {}  # key -> (value, expire_ts)
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires = entry
            if self._clock() > expires:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def fetch(self, key: str, ttl: int, build: Callable[[], Any]) -> Any:
        value = self.get(key)
        if value is not None:
            return value

        logger.debug(f"Cache miss for {key}, building")
        # built outside the lock: a download can take minutes
        value = build()
        self.set(key, value, ttl)
        return value

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class TranslationMemoryRepository:
    """Lookups and checksums for one repository's vendor translations."""

    def __init__(
        self,
        settings: Optional[TMSettings] = None,
        cache: Optional[MemoryCache] = None,
        downloader: Optional[Downloader] = None,
        builder: Optional[TmxIndexBuilder] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else InMemoryTTLCache()
        self.downloader = downloader
        self.builder = builder or TmxIndexBuilder(self.settings)
        self._memory: Optional[TranslationMemory] = None

    # --- Lookups ---

    def lookup_translations(self, locale: str, phrases: Iterable[Phrase]) -> List[str]:
        return self.memory.translations_for(locale, phrases)

    def lookup_translation(self, locale: str, phrase: Phrase) -> str:
        return self.lookup_translations(locale, [phrase])[0]

    def checksum_for(self, locale: str, commit_id: Optional[str] = None) -> str:
        # commit_id kept for interface parity; the export is not per-commit
        return self.memory.checksum_for(locale)

    # --- Memory ---

    @property
    def memory(self) -> TranslationMemory:
        if self._memory is None:
            self._memory = self._build_memory(self._memory_exports())
        return self._memory

    def reset(self) -> None:
        """Drop the held memory so the next lookup consults the cache again."""
        self._memory = None

    def _memory_exports(self) -> RawExports:
        return self.cache.fetch(
            self.settings.repo_name, self.settings.pull_expiration, self._download_memory
        )

    def _download_memory(self) -> RawExports:
        if self.downloader is None:
            raise RuntimeError("No translation memory downloader configured")

        exports = self.downloader()
        logger.info(
            f"[{self.settings.repo_name}] Downloaded translation memory for "
            f"serializer {self.settings.serializer_id}, "
            f"{len(exports)} locale(s)"
        )
        return exports

    def _build_memory(self, exports: RawExports) -> TranslationMemory:
        indexes = {
            locale: self.builder.load(raw_tmx, locale)
            for locale, raw_tmx in exports.items()
        }
        return TranslationMemory(indexes, self.settings)
