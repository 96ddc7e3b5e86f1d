"""Exception types raised by the core and its adapters."""

from __future__ import annotations


class NarratorConfigsError(Exception):
    """Base class for all narrator configs errors."""


class ConfigurationError(NarratorConfigsError):
    """The narrator configuration could not be read or has the wrong shape."""


class DictionaryUnavailable(NarratorConfigsError):
    """The localization dictionary is missing or not of the expected type.

    Dictionary sources raise this internally and recover by returning an empty
    mapping, so it never reaches the decision path.
    """


class PatternCompilationError(NarratorConfigsError):
    """A pattern could not be compiled into a matcher."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Invalid regular expression {source!r}: {reason}")
        self.source = source
        self.reason = reason
