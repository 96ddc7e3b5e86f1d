"""Pattern compilation and matching logic (core domain)."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import ClassVar, FrozenSet, Iterable, Iterator, List, Mapping, Optional

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.errors import PatternCompilationError

LOGGER = logging.getLogger(__name__)

ORIGIN_DICTIONARY = "dictionary"
ORIGIN_CUSTOM = "custom"

_SPECIAL_CHARACTERS = re.compile(r"([\[\]\\.()^$*+?{}|])")
# Runs on escaped text, so a positional "$" arrives as "\$".
_PLACEHOLDER = re.compile(r"%(\d+\\\$)?[sd]")
_WILDCARD = ".*"


@dataclass(frozen=True)
class Matcher:
    """Compiled pattern used for acceptance testing.

    Equality and hashing use the compiled source only, so identical patterns
    coming from different keys collapse into one matcher inside a set.
    """

    source: str
    pattern: re.Pattern = field(compare=False, repr=False)
    origin: str = field(default=ORIGIN_DICTIONARY, compare=False)
    key: Optional[str] = field(default=None, compare=False)

    def accepts(self, text: str) -> bool:
        return self.pattern.fullmatch(text) is not None


@dataclass(frozen=True)
class AcceptanceSet:
    """Immutable snapshot of the matchers currently in effect."""

    matchers: FrozenSet[Matcher] = frozenset()

    EMPTY: ClassVar["AcceptanceSet"]

    def __len__(self) -> int:
        return len(self.matchers)

    def __iter__(self) -> Iterator[Matcher]:
        return iter(self.matchers)

    def accepts(self, text: str) -> bool:
        return any(matcher.accepts(text) for matcher in self.matchers)

    def first_match(self, text: str) -> Optional[Matcher]:
        """Return one matcher accepting the text, preferring custom regexes."""

        hits = [matcher for matcher in self.matchers if matcher.accepts(text)]
        if not hits:
            return None
        hits.sort(key=lambda matcher: (matcher.origin != ORIGIN_CUSTOM, matcher.source))
        return hits[0]


AcceptanceSet.EMPTY = AcceptanceSet()


def escape_template(template: str) -> str:
    """Backslash-escape every regex metacharacter in a translation template."""

    return _SPECIAL_CHARACTERS.sub(r"\\\1", template)


def template_to_pattern(template: str) -> str:
    """Turn a translation template into an anchored pattern string.

    Placeholders such as ``%s``, ``%d`` and ``%1$s`` become wildcards. The
    pattern is anchored at the start and ends in a wildcard, so narrations that
    append text after the template are still accepted.
    """

    escaped = escape_template(template)
    substituted = _PLACEHOLDER.sub(_WILDCARD, escaped)
    return "^" + substituted + _WILDCARD


def select_templates(
    dictionary: Mapping[str, str],
    enabled_prefixes: Iterable[str],
    disabled_prefixes: Iterable[str],
) -> dict[str, str]:
    """Filter dictionary entries by the prefix allow and deny lists.

    No enabled prefixes means no entries. Disabled prefixes always win.
    """

    enabled = tuple(enabled_prefixes)
    disabled = tuple(disabled_prefixes)
    if not enabled:
        return {}
    return {
        key: value
        for key, value in dictionary.items()
        if key.startswith(enabled) and not (disabled and key.startswith(disabled))
    }


def _compile(source: str, origin: str, key: Optional[str] = None) -> Matcher:
    try:
        pattern = re.compile(source)
    except re.error as exc:
        raise PatternCompilationError(source, str(exc)) from exc
    return Matcher(source=source, pattern=pattern, origin=origin, key=key)


def compile_acceptance_set(
    dictionary: Mapping[str, str],
    enabled_prefixes: Iterable[str],
    disabled_prefixes: Iterable[str],
    custom_regexes: Iterable[str],
) -> AcceptanceSet:
    """Compile dictionary templates and custom regexes into an acceptance set.

    Custom regexes are used verbatim: no escaping, no placeholder substitution
    and no anchoring. A custom regex that fails to compile raises
    ``PatternCompilationError`` and nothing is returned.
    """

    matchers: set[Matcher] = set()
    for key, template in select_templates(dictionary, enabled_prefixes, disabled_prefixes).items():
        matchers.add(_compile(template_to_pattern(template), ORIGIN_DICTIONARY, key))

    custom: List[Matcher] = [_compile(source, ORIGIN_CUSTOM) for source in custom_regexes]
    matchers.update(custom)

    LOGGER.info(
        "Compiled %s accepted narrations (%s custom regular expressions)",
        len(matchers),
        len(custom),
    )
    LOGGER.debug("Accepted narrations: %s", sorted(matcher.source for matcher in matchers))
    return AcceptanceSet(frozenset(matchers))


def build_acceptance_set(dictionary: Mapping[str, str], config: NarratorConfig) -> AcceptanceSet:
    """Compile an acceptance set from a dictionary and a narrator config."""

    return compile_acceptance_set(
        dictionary,
        config.enabled_prefixes,
        config.disabled_prefixes,
        config.enabled_regular_expressions,
    )
