from __future__ import annotations

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.gate import decide, decide_forced
from narratorconfigs.core.models import Message, Provenance
from narratorconfigs.core.patterns import AcceptanceSet, compile_acceptance_set

ACCEPTANCE = compile_acceptance_set({}, [], [], ["^testing$"])
CHAT_ON = NarratorConfig(chat_enabled=True)
CHAT_OFF = NarratorConfig(chat_enabled=False)


def _chat(text: str = "hi there") -> Message:
    return Message(text, Provenance.CHAT)


def _system(text: str) -> Message:
    return Message(text, Provenance.SYSTEM)


def test_no_verdict_when_mode_is_not_custom() -> None:
    for message in [_chat(), _system("testing"), _system("")]:
        assert decide(message, ACCEPTANCE, CHAT_ON, playback_active=True, mode_is_custom=False) is None
    assert decide_forced("testing", ACCEPTANCE, CHAT_ON, mode_is_custom=False) is None


def test_no_verdict_when_mod_disabled() -> None:
    config = NarratorConfig(mod_enabled=False, chat_enabled=True)
    assert decide(_system("testing"), ACCEPTANCE, config, playback_active=True, mode_is_custom=True) is None


def test_chat_enabled_narrates_without_interrupt() -> None:
    verdict = decide(_chat(), AcceptanceSet.EMPTY, CHAT_ON, playback_active=True, mode_is_custom=True)

    assert verdict is not None
    assert verdict.narrate
    assert not verdict.interrupt
    assert not verdict.clear_first


def test_chat_disabled_never_narrates_but_is_claimed() -> None:
    verdict = decide(_chat("testing"), ACCEPTANCE, CHAT_OFF, playback_active=True, mode_is_custom=True)

    assert verdict is not None
    assert not verdict.narrate


def test_chat_ignores_acceptance_set() -> None:
    verdict = decide(_chat("not accepted"), AcceptanceSet.EMPTY, CHAT_ON, playback_active=False, mode_is_custom=True)

    assert verdict is not None
    assert verdict.narrate


def test_system_accepted_clears_and_interrupts() -> None:
    verdict = decide(_system("testing"), ACCEPTANCE, CHAT_OFF, playback_active=True, mode_is_custom=True)

    assert verdict is not None
    assert verdict.narrate
    assert verdict.interrupt
    assert verdict.clear_first
    assert "^testing$" in verdict.reason


def test_system_not_accepted_is_claimed_silently() -> None:
    verdict = decide(_system("not testing dude"), ACCEPTANCE, CHAT_ON, playback_active=True, mode_is_custom=True)

    assert verdict is not None
    assert not verdict.narrate


def test_empty_system_text_is_never_narrated() -> None:
    acceptance = compile_acceptance_set({}, [], [], [".*"])
    verdict = decide(_system(""), acceptance, CHAT_ON, playback_active=True, mode_is_custom=True)

    assert verdict is not None
    assert not verdict.narrate
    assert verdict.reason == "empty system text"


def test_system_with_inactive_playback_is_claimed_silently() -> None:
    verdict = decide(_system("testing"), ACCEPTANCE, CHAT_OFF, playback_active=False, mode_is_custom=True)

    assert verdict is not None
    assert not verdict.narrate
    assert "inactive" in verdict.reason


def test_system_reason_names_dictionary_key() -> None:
    acceptance = compile_acceptance_set({"death.fell": "%s fell"}, ["death"], [], [])
    verdict = decide(_system("Steve fell"), acceptance, CHAT_OFF, playback_active=True, mode_is_custom=True)

    assert verdict is not None
    assert "death.fell" in verdict.reason


def test_forced_narration_applies_system_matching_only() -> None:
    accepted = decide_forced("testing", ACCEPTANCE, CHAT_ON, mode_is_custom=True)
    rejected = decide_forced("hello chat", ACCEPTANCE, CHAT_ON, mode_is_custom=True)
    empty = decide_forced("", compile_acceptance_set({}, [], [], [".*"]), CHAT_ON, mode_is_custom=True)

    assert accepted is not None
    assert accepted.narrate
    assert not accepted.interrupt
    assert not accepted.clear_first
    assert rejected is None
    assert empty is None
