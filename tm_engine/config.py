"""
TM Engine Settings - configuration for parsing and lookup policy
"""

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

KNOWN_PLURAL_STRATEGIES = ("vendor", "caller")


class TMSettings(BaseSettings):
    """Translation memory engine settings"""

    # ========== Repository ==========
    repo_name: str = "default"
    serializer_id: str = "serializer_not_configured"
    source_locale: str = "en"

    # ========== TMX dialect ==========
    variant_prop_type: str = "x-smartling-string-variant"
    plural_prop_type: str = "x-smartling-plural-form"

    # ========== Plural policy ==========
    # CLDR plural categories recognized as meta key suffixes
    plural_forms: List[str] = ["zero", "one", "two", "few", "many", "other"]
    # Tried in order: vendor-style (form carried as unit prop) then caller-style (dotted suffix)
    plural_strategies: List[str] = ["vendor", "caller"]

    # ========== Cache / scheduling ==========
    pull_expiration: int = 3600  # one hour in seconds
    thread_pool_size: int = 10

    # ========== Logging ==========
    log_level: str = "INFO"

    class Config:
        env_prefix = "TM_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_plural_policy()

    def _validate_plural_policy(self):
        """Reject unknown strategy names and empty form lists."""
        unknown = [s for s in self.plural_strategies if s not in KNOWN_PLURAL_STRATEGIES]
        if unknown:
            raise ValueError(
                f"Unknown plural strategies: {', '.join(unknown)} "
                f"(expected any of: {', '.join(KNOWN_PLURAL_STRATEGIES)})"
            )
        if self.plural_strategies and not self.plural_forms:
            raise ValueError("plural_forms must not be empty when plural strategies are enabled")

        if self.pull_expiration <= 0:
            raise ValueError("pull_expiration must be a positive number of seconds")


# Global instance
_settings: Optional[TMSettings] = None


def get_settings() -> TMSettings:
    """Get settings instance."""
    global _settings
    if _settings is None:
        _settings = TMSettings()
    return _settings
