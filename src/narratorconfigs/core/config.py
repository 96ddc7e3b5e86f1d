"""Core configuration dataclasses.

We keep config file parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple

from narratorconfigs.core.errors import ConfigurationError

# Keys as they appear in the persisted narrator config file.
MOD_ENABLED_KEY = "modEnabled"
CHAT_ENABLED_KEY = "chatEnabled"
ENABLED_PREFIXES_KEY = "enabledPrefixes"
DISABLED_PREFIXES_KEY = "disabledPrefixes"
ENABLED_REGEXES_KEY = "enabledRegularExpressions"


def _string_tuple(raw: Any, key: str) -> Tuple[str, ...]:
    # Absent or null lists behave as empty.
    if raw is None:
        return ()
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise ConfigurationError(f"{key} must be a list of strings")
    values = tuple(raw)
    for value in values:
        if not isinstance(value, str):
            raise ConfigurationError(f"{key} must only contain strings, got {value!r}")
    return values


def _flag(raw: Any, key: str, default: bool) -> bool:
    if raw is None:
        return default
    if not isinstance(raw, bool):
        raise ConfigurationError(f"{key} must be true or false")
    return raw


def _describe_list(values: Tuple[str, ...], empty: str, label: str) -> str:
    if not values:
        return empty
    return f"{label} include [{', '.join(values)}]"


@dataclass(frozen=True)
class NarratorConfig:
    """User settings that drive the custom narration mode."""

    mod_enabled: bool = True
    chat_enabled: bool = False
    enabled_prefixes: Tuple[str, ...] = ()
    disabled_prefixes: Tuple[str, ...] = ()
    enabled_regular_expressions: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NarratorConfig":
        """Build a config from the flat, camelCase file schema."""

        if not isinstance(data, Mapping):
            raise ConfigurationError("Narrator config must be a mapping")
        return cls(
            mod_enabled=_flag(data.get(MOD_ENABLED_KEY), MOD_ENABLED_KEY, True),
            chat_enabled=_flag(data.get(CHAT_ENABLED_KEY), CHAT_ENABLED_KEY, False),
            enabled_prefixes=_string_tuple(data.get(ENABLED_PREFIXES_KEY), ENABLED_PREFIXES_KEY),
            disabled_prefixes=_string_tuple(data.get(DISABLED_PREFIXES_KEY), DISABLED_PREFIXES_KEY),
            enabled_regular_expressions=_string_tuple(
                data.get(ENABLED_REGEXES_KEY), ENABLED_REGEXES_KEY
            ),
        )

    def to_mapping(self) -> dict:
        return {
            MOD_ENABLED_KEY: self.mod_enabled,
            CHAT_ENABLED_KEY: self.chat_enabled,
            ENABLED_PREFIXES_KEY: list(self.enabled_prefixes),
            DISABLED_PREFIXES_KEY: list(self.disabled_prefixes),
            ENABLED_REGEXES_KEY: list(self.enabled_regular_expressions),
        }

    def describe(self) -> str:
        """Return a sentence summarizing the config, suitable for narration."""

        parts = [
            "Narrator Configs Configuration: The mod is " + ("enabled" if self.mod_enabled else "disabled"),
            "Chat is " + ("enabled" if self.chat_enabled else "disabled"),
            _describe_list(self.enabled_prefixes, "No prefixes are enabled", "Enabled Prefixes"),
            _describe_list(self.disabled_prefixes, "No prefixes are disabled", "Disabled Prefixes"),
        ]
        regexes = _describe_list(
            self.enabled_regular_expressions,
            "No regular expressions are enabled",
            "Custom Regular Expressions",
        )
        return ", ".join(parts) + ", and " + regexes + "."
