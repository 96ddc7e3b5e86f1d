from __future__ import annotations

import pytest

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.errors import PatternCompilationError
from narratorconfigs.core.patterns import (
    ORIGIN_CUSTOM,
    AcceptanceSet,
    build_acceptance_set,
    compile_acceptance_set,
    escape_template,
    select_templates,
    template_to_pattern,
)


def _compile(dictionary: dict[str, str], enabled=(), disabled=(), regexes=()) -> AcceptanceSet:
    return compile_acceptance_set(dictionary, enabled, disabled, regexes)


def test_includes_enabled_prefixes() -> None:
    acceptance = _compile({"a": "A", "a.1": "X", "b": "B", "c": "C"}, enabled=["a"])

    assert len(acceptance) == 2
    assert acceptance.accepts("A")
    assert acceptance.accepts("X")
    assert not acceptance.accepts("B")
    assert not acceptance.accepts("C")


def test_disabled_prefix_wins_over_enabled() -> None:
    acceptance = _compile({"a.1": "A1", "a.2": "A2", "a.3": "A3"}, enabled=["a"], disabled=["a.2"])

    assert len(acceptance) == 2
    assert acceptance.accepts("A1")
    assert acceptance.accepts("A3")
    assert not acceptance.accepts("A2")


def test_no_enabled_prefixes_means_no_dictionary_matchers() -> None:
    acceptance = _compile({"a": "A", "b": "B"}, disabled=["b"])

    assert len(acceptance) == 0
    assert not acceptance.accepts("A")


def test_select_templates_disabled_more_general_than_enabled() -> None:
    selected = select_templates({"death.fell": "F", "death.attack": "X"}, ["death.fell"], ["death"])
    assert selected == {}


def test_custom_regex_is_used_verbatim() -> None:
    acceptance = _compile({"a.1": "A1", "a.2": "A2"}, regexes=["^test string only$"])

    assert len(acceptance) == 1
    assert acceptance.accepts("test string only")
    assert not acceptance.accepts("test string only, not")
    assert not acceptance.accepts("A1")
    (matcher,) = list(acceptance)
    assert matcher.origin == ORIGIN_CUSTOM
    assert matcher.source == "^test string only$"


def test_custom_regex_must_match_whole_text() -> None:
    acceptance = _compile({}, regexes=["hello"])

    assert acceptance.accepts("hello")
    assert not acceptance.accepts("hello there")
    assert not acceptance.accepts("oh hello")


def test_escapes_special_characters() -> None:
    complicated = (
        "Some ^ special $ things (on the inside) %% right? It's cool that 2 + 2 = 2 * 2. "
        "But don't forget about pipes | and brackets like { and } [or else you may be in trouble] \\o/."
    )
    acceptance = _compile({"a": complicated}, enabled=["a"])

    assert acceptance.accepts(complicated)
    assert not acceptance.accepts(complicated.replace(".", "!"))


def test_escape_template_adds_single_backslash() -> None:
    assert escape_template("a.b") == "a\\.b"
    assert escape_template("[x]") == "\\[x\\]"
    assert escape_template("back\\slash") == "back\\\\slash"


def test_placeholders_are_wildcards() -> None:
    acceptance = _compile(
        {
            "narrator.position.screen": "Screen element %s out of %s",
            "death.attack.inWall.player": "%1$s suffocated in a wall whilst fighting %2$s",
            "stat.count": "%d items",
        },
        enabled=["narrator", "death", "stat"],
    )

    assert acceptance.accepts("Screen element 'banana' out of 25")
    assert acceptance.accepts("Screen element 64 out of foobar")
    assert acceptance.accepts("case_walker suffocated in a wall whilst fighting houdini")
    assert acceptance.accepts("John_Doe suffocated in a wall whilst fighting case_walker")
    assert acceptance.accepts("12 items")


def test_positional_placeholder_consumes_escaped_dollar() -> None:
    assert template_to_pattern("%1$s fell") == "^.* fell.*"
    assert template_to_pattern("cost: $5") == "^cost: \\$5.*"


def test_anchored_at_start_with_trailing_text_allowed() -> None:
    acceptance = _compile({"a": "It should match this sentence"}, enabled=["a"])

    assert acceptance.accepts("It should match this sentence")
    assert not acceptance.accepts("abcIt should match this sentence")
    assert acceptance.accepts("It should match this sentence, even now")


def test_duplicate_templates_collapse() -> None:
    acceptance = _compile({"a.1": "Same", "a.2": "Same"}, enabled=["a"])
    assert len(acceptance) == 1


def test_compiling_twice_accepts_the_same_texts() -> None:
    dictionary = {"a.1": "Hello %s", "a.2": "Bye", "b": "Other"}
    first = _compile(dictionary, enabled=["a"], regexes=["^x+$"])
    second = _compile(dictionary, enabled=["a"], regexes=["^x+$"])

    assert {m.source for m in first} == {m.source for m in second}
    for text in ["Hello world", "Bye", "Other", "xxx", ""]:
        assert first.accepts(text) == second.accepts(text)


def test_invalid_custom_regex_raises_with_source() -> None:
    with pytest.raises(PatternCompilationError) as excinfo:
        _compile({"a": "A"}, enabled=["a"], regexes=["fine", "(unclosed"])

    assert excinfo.value.source == "(unclosed"
    assert "(unclosed" in str(excinfo.value)


def test_first_match_prefers_custom_regex() -> None:
    acceptance = _compile({"a": "Hello"}, enabled=["a"], regexes=["^Hello$"])

    matcher = acceptance.first_match("Hello")
    assert matcher is not None
    assert matcher.origin == ORIGIN_CUSTOM
    assert acceptance.first_match("Goodbye") is None


def test_build_acceptance_set_from_config() -> None:
    config = NarratorConfig(
        enabled_prefixes=("death.",),
        disabled_prefixes=("death.attack",),
        enabled_regular_expressions=("^custom$",),
    )
    acceptance = build_acceptance_set(
        {"death.fell": "%s fell from a high place", "death.attack.arrow": "%s was shot"},
        config,
    )

    assert acceptance.accepts("Steve fell from a high place")
    assert not acceptance.accepts("Steve was shot")
    assert acceptance.accepts("custom")


def test_empty_acceptance_set_rejects_everything() -> None:
    assert len(AcceptanceSet.EMPTY) == 0
    assert not AcceptanceSet.EMPTY.accepts("anything")
