"""Internationalization — lightweight JSON-based translation system.

Loads translations from haui/translations/{lang}.json files.
Supports nested JSON (flattened to dot-notation keys at load time).
Provides global t() function for string lookup with English fallback.

Usage:
    from haui.core.i18n import t, TranslationManager

    # Initialize (once, at app startup)
    TranslationManager.init("de")

    # Translate
    msg = t("errors.validation", "Invalid simulation: {detail}").format(detail=err)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from haui.constants import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

_TRANSLATIONS_DIR = Path(__file__).parent.parent / "translations"


class TranslationManager:
    """Singleton translation manager with JSON backend."""

    _instance: TranslationManager | None = None

    def __init__(self, lang: str = DEFAULT_LANGUAGE):
        self.lang = lang
        self._strings: dict[str, str] = {}
        self._load(lang)

    def _load(self, lang: str) -> None:
        """Load flat key-value dict from translations/{lang}.json."""
        path = _TRANSLATIONS_DIR / f"{lang}.json"
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            self._strings = _flatten(data)
        else:
            logger.warning("No translations for %r, using English defaults", lang)
            self._strings = {}

    def get(self, key: str, default: str = "") -> str:
        """Get translated string by dot-key. Falls back to default (English)."""
        return self._strings.get(key, default)

    @classmethod
    def instance(cls) -> TranslationManager:
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls(DEFAULT_LANGUAGE)
        return cls._instance

    @classmethod
    def init(cls, lang: str = DEFAULT_LANGUAGE) -> TranslationManager:
        """Initialize the singleton with given language."""
        cls._instance = cls(lang)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton (for testing)."""
        cls._instance = None


def _flatten(d: dict, prefix: str = "") -> dict[str, str]:
    """Flatten nested dict to dot-notation keys.

    {"errors": {"remote": "Serverfehler"}} -> {"errors.remote": "Serverfehler"}
    """
    result: dict[str, str] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else k
        if isinstance(v, dict):
            result.update(_flatten(v, key))
        else:
            result[key] = str(v)
    return result


def t(key: str, default: str = "") -> str:
    """Global translate function.

    Args:
        key: Dot-notation key (e.g. "errors.transport").
        default: Fallback string if key not found (English).

    Returns:
        Translated string or default.
    """
    return TranslationManager.instance().get(key, default)
