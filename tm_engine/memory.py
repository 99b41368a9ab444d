"""
Translation Memory
Resolve (locale, phrase) pairs against parsed vendor exports.

Lookups never raise for a missing translation: the phrase key itself is the
valid "untranslated" result.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .aligner import PlaceholderAligner
from .checksum import ChecksumComputer
from .config import TMSettings, get_settings
from .models import LocaleIndex, TranslationUnit
from .normalizer import TextNormalizer
from .plurals import PluralPolicy
from .schemas import Phrase

logger = logging.getLogger(__name__)


class TranslationMemory:
    """
    Immutable set of per-locale indexes with lookup policy.

    Built once per cache epoch; any number of threads may call
    translation_for() and checksum_for() concurrently.
    """

    def __init__(
        self,
        indexes: Dict[str, LocaleIndex],
        settings: Optional[TMSettings] = None,
        aligner: Optional[PlaceholderAligner] = None,
        normalizer: Optional[TextNormalizer] = None,
        checksum_computer: Optional[ChecksumComputer] = None,
    ):
        self.settings = settings or get_settings()
        self._indexes: Dict[str, LocaleIndex] = dict(indexes)
        self.aligner = aligner or PlaceholderAligner()
        self.normalizer = normalizer or TextNormalizer()
        self.checksum_computer = checksum_computer or ChecksumComputer()
        self.plural_policy = PluralPolicy.from_names(
            self.settings.plural_strategies, self.settings.plural_forms
        )
        self._checksums: Dict[str, str] = {}

    def __repr__(self):
        return f"<TranslationMemory {self.settings.repo_name} ({', '.join(self.locales)})>"

    @property
    def locales(self) -> List[str]:
        return sorted(self._indexes)

    def index_for(self, locale: str) -> Optional[LocaleIndex]:
        return self._indexes.get(locale)

    # ==================== LOOKUP ====================

    def translation_for(self, locale: str, phrase: Phrase) -> str:
        """
        Translate a phrase into locale.

        Args:
            locale: Target locale code
            phrase: Phrase with key and meta_key

        Returns:
            The realigned translation, or phrase.key when the locale, meta
            key, or an unambiguous unit cannot be found
        """
        index = self._indexes.get(locale)
        if index is None:
            logger.debug(f"[{self.settings.repo_name}] No translation memory for locale {locale}")
            return phrase.key

        unit = self._select_unit(index, phrase)
        if unit is None:
            return phrase.key

        return self.aligner.align(unit, phrase.key)

    def translations_for(self, locale: str, phrases: Iterable[Phrase]) -> List[str]:
        """Translate many phrases, preserving order."""
        return [self.translation_for(locale, phrase) for phrase in phrases]

    def _select_unit(self, index: LocaleIndex, phrase: Phrase) -> Optional[TranslationUnit]:
        candidates = self._candidates(index, phrase.meta_key)

        if not candidates:
            logger.debug(f"[{index.locale}] No units for meta key {phrase.meta_key!r}")
            return None

        if len(candidates) == 1:
            return candidates[0]

        unit = self._disambiguate(candidates, phrase.key)
        if unit is None:
            logger.debug(
                f"[{index.locale}] {len(candidates)} units share meta key {phrase.meta_key!r}, "
                f"none matches the phrase key"
            )
        return unit

    def _candidates(self, index: LocaleIndex, meta_key: Optional[str]) -> Tuple[TranslationUnit, ...]:
        """Plural strategies in policy order, then the meta key itself."""
        if not meta_key:
            return ()

        for strategy, lookup in self.plural_policy.lookups(meta_key):
            units = index.get(lookup.meta_key)
            if lookup.plural_form is not None:
                units = tuple(unit for unit in units if unit.plural_form == lookup.plural_form)
            if units:
                logger.debug(f"[{index.locale}] {meta_key!r} resolved via {strategy} plurals")
                return units

        return index.get(meta_key)

    def _disambiguate(self, candidates: Tuple[TranslationUnit, ...], key: str) -> Optional[TranslationUnit]:
        """First unit whose source text matches the phrase key after normalization."""
        wanted = self.normalizer.normalize(key)
        tokens = self.aligner.tokenize(key)

        for unit in candidates:
            if self.normalizer.normalize(unit.source_text) == wanted:
                return unit

        # vendor source holds {i} markers where the key has named tokens
        for unit in candidates:
            rehydrated = self.aligner.rehydrate_source(unit, tokens)
            if self.normalizer.normalize(rehydrated) == wanted:
                return unit

        return None

    # ==================== CHECKSUM ====================

    def checksum_for(self, locale: str) -> str:
        """
        Stable fingerprint of a locale's index, memoized per instance.

        An unknown locale yields the checksum of an empty index.
        """
        checksum = self._checksums.get(locale)
        if checksum is None:
            index = self._indexes.get(locale) or LocaleIndex(locale)
            checksum = self.checksum_computer.compute(index)
            self._checksums[locale] = checksum
        return checksum
