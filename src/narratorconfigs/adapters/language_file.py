"""Dictionary sources backed by host language data."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

from narratorconfigs.core.errors import DictionaryUnavailable

LOGGER = logging.getLogger(__name__)


def _as_translations(data: Any, origin: str) -> dict[str, str]:
    if not isinstance(data, Mapping):
        raise DictionaryUnavailable(f"{origin} is not a key to text mapping ({type(data).__name__})")
    translations: dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise DictionaryUnavailable(f"{origin} contains a non-string entry for {key!r}")
        translations[key] = value
    return translations


class LanguageFileDictionarySource:
    """Reads translations from a language JSON file such as ``en_us.json``.

    The file may not exist yet when the engine starts; every failure is
    logged and reported as an empty mapping so the caller can retry later.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    def _load(self) -> dict[str, str]:
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError as exc:
            raise DictionaryUnavailable(f"Language file not found: {self._path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise DictionaryUnavailable(f"Cannot read language file {self._path}: {exc}") from exc
        return _as_translations(data, self._path)

    def snapshot(self) -> Mapping[str, str]:
        try:
            translations = self._load()
        except DictionaryUnavailable as exc:
            LOGGER.error("%s, prefixes will not work until translations load", exc)
            return {}
        LOGGER.info("Pulled %s translations from %s", len(translations), self._path)
        return translations


class CallableDictionarySource:
    """Wraps a host callable returning the current translation store."""

    def __init__(self, provider: Callable[[], Any]) -> None:
        self._provider = provider

    def snapshot(self) -> Mapping[str, str]:
        try:
            return _as_translations(self._provider(), "Translation store")
        except DictionaryUnavailable as exc:
            LOGGER.error("%s, prefixes will not work until translations load", exc)
            return {}
