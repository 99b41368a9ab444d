"""
Translation Memory Pydantic Schemas
Validation schemas for phrases consumed from the localization pipeline.
"""
from typing import Optional

from pydantic import BaseModel, Field


class Phrase(BaseModel):
    """A source phrase as known to the pipeline.

    ``key`` is the original source text (may embed ``%{name}`` placeholders
    and HTML markup); ``meta_key`` is its dotted structural path.
    """
    key: str
    meta_key: Optional[str] = Field(default=None)

    def __str__(self) -> str:
        return self.key


class LookupResult(BaseModel):
    """Outcome of a single lookup, for inspection tooling."""
    locale: str
    meta_key: Optional[str] = None
    key: str
    translation: str
    translated: bool


class LocaleStats(BaseModel):
    """Summary of one parsed locale index."""
    locale: str
    meta_keys: int
    units: int
    duplicate_keys: int
    plural_units: int
    checksum: str
