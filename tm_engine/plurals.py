"""
Plural Lookup Policy
Ordered strategies mapping a pluralized meta key to an index lookup.

Two conventions exist in a vendor export:
- vendor-style: one meta key (``teapot``) with the plural category carried
  on each unit (``plural_form="one"``)
- caller-style: the pipeline's own dotted suffix stored as an ordinary key
  (``teapot.one``)
"""
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

DEFAULT_PLURAL_FORMS = ("zero", "one", "two", "few", "many", "other")


class PluralLookup(NamedTuple):
    """Where to look: index key, and the unit plural form to require (if any)."""
    meta_key: str
    plural_form: Optional[str] = None


def split_plural_suffix(meta_key: str, forms: Sequence[str]) -> Optional[Tuple[str, str]]:
    """Split ``base.form`` into (base, form) when form is a recognized category."""
    if not meta_key or "." not in meta_key:
        return None
    base, _, suffix = meta_key.rpartition(".")
    if not base or suffix not in forms:
        return None
    return base, suffix


def vendor_style(meta_key: str, forms: Sequence[str]) -> Optional[PluralLookup]:
    split = split_plural_suffix(meta_key, forms)
    if split is None:
        return None
    base, form = split
    return PluralLookup(meta_key=base, plural_form=form)


def caller_style(meta_key: str, forms: Sequence[str]) -> Optional[PluralLookup]:
    if split_plural_suffix(meta_key, forms) is None:
        return None
    return PluralLookup(meta_key=meta_key)


STRATEGIES = {
    "vendor": vendor_style,
    "caller": caller_style,
}


@dataclass(frozen=True)
class PluralStrategy:
    name: str
    resolve: Callable[[str, Sequence[str]], Optional[PluralLookup]]


@dataclass(frozen=True)
class PluralPolicy:
    """
    Strategies tried in order for a meta key with a plural suffix.

    Usage:
        policy = PluralPolicy.from_names(["vendor", "caller"])
        for lookup in policy.lookups("teapot.one"):
            ...
    """
    strategies: Tuple[PluralStrategy, ...] = ()
    forms: Tuple[str, ...] = DEFAULT_PLURAL_FORMS

    @classmethod
    def from_names(cls, names: Sequence[str], forms: Sequence[str] = DEFAULT_PLURAL_FORMS) -> "PluralPolicy":
        strategies = []
        for name in names:
            if name not in STRATEGIES:
                raise ValueError(f"Unknown plural strategy: {name}")
            strategies.append(PluralStrategy(name=name, resolve=STRATEGIES[name]))
        return cls(strategies=tuple(strategies), forms=tuple(forms))

    def is_plural(self, meta_key: str) -> bool:
        return split_plural_suffix(meta_key, self.forms) is not None

    def lookups(self, meta_key: str) -> List[Tuple[str, PluralLookup]]:
        """(strategy name, lookup) pairs applicable to meta_key, in order."""
        found = []
        for strategy in self.strategies:
            lookup = strategy.resolve(meta_key, self.forms)
            if lookup is not None:
                found.append((strategy.name, lookup))
        return found
