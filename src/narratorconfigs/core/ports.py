"""Ports (interfaces) used by the core engine.

Ports define the minimal contracts for configuration, dictionary, speech and
mode adapters so that the core can be reused with different hosts.
"""

from __future__ import annotations

from typing import Callable, Mapping, Protocol

from narratorconfigs.core.config import NarratorConfig

ConfigListener = Callable[[], None]
DiagnosticSink = Callable[[str], None]


class ConfigurationSource(Protocol):
    """Supplies the current narrator config and change notifications."""

    def current(self) -> NarratorConfig:
        ...

    def subscribe(self, listener: ConfigListener) -> None:
        ...


class DictionarySource(Protocol):
    """Supplies the localization key to template mapping.

    Must return an empty mapping, never raise, while the dictionary is not
    available yet.
    """

    def snapshot(self) -> Mapping[str, str]:
        ...


class PlaybackState(Protocol):
    """Speech sink operations required by the narration manager."""

    def active(self) -> bool:
        ...

    def clear(self) -> None:
        ...

    def say(self, text: str, interrupt: bool) -> None:
        ...


class ModeQuery(Protocol):
    """Answers whether the host currently runs the custom narration mode."""

    def is_custom_narration_mode(self) -> bool:
        ...
