"""Minimal internationalization helpers."""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict

TRANSLATIONS_DIR = Path(__file__).resolve().parents[1] / "translations"
DEFAULT_LANG = "es"


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


@lru_cache()
def load_translations(lang: str) -> Dict[str, str]:
    """Load translation mappings for the given language."""
    path = TRANSLATIONS_DIR / f"{lang}.json"
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return {}


def t(key: str, lang: str = DEFAULT_LANG, **params) -> str:
    """Translate ``key`` in ``lang``, falling back to Spanish, then to the key.

    ``params`` fill ``{placeholders}``; unknown placeholders are left as-is.
    """
    text = load_translations(lang).get(key)
    if text is None:
        text = load_translations(DEFAULT_LANG).get(key, key)
    if params:
        text = text.format_map(_KeepMissing(params))
    return text
