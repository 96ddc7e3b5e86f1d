from __future__ import annotations

from fakes import FakeConfigSource, FakeDictionarySource, FakeMode, FakePlayback

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.manager import CHAT_NOT_RESOLVED, NarrationManager
from narratorconfigs.core.models import Claim, Message, Provenance
from narratorconfigs.core.reload import ReloadCoordinator


def _manager(
    config: NarratorConfig,
    *,
    active: bool = True,
    custom: bool = True,
    diagnostics=None,
) -> tuple[NarrationManager, FakePlayback]:
    playback = FakePlayback(active=active)
    coordinator = ReloadCoordinator(
        FakeConfigSource(config),
        FakeDictionarySource({"death.fell": "%s fell from a high place"}),
        FakePlayback(),
    )
    assert coordinator.reload()
    manager = NarrationManager(coordinator, playback, FakeMode(custom), diagnostics=diagnostics)
    return manager, playback


def _config(**overrides) -> NarratorConfig:
    values = dict(
        chat_enabled=False,
        enabled_prefixes=("death.",),
        enabled_regular_expressions=("^testing$",),
    )
    values.update(overrides)
    return NarratorConfig(**values)


def test_wrong_mode_passes_everything_through() -> None:
    manager, playback = _manager(_config(chat_enabled=True), custom=False)

    assert manager.narrate("testing") is Claim.PASS_THROUGH
    assert manager.narrate_chat_message(lambda: "hello") is Claim.PASS_THROUGH
    assert manager.force_narrate_on_mode("testing") is False
    assert playback.said == []


def test_inactive_narrator_claims_system_text_without_speaking() -> None:
    manager, playback = _manager(_config(), active=False)

    claim = manager.narrate("testing")

    assert claim is Claim.CLAIM
    assert claim.suppress_host_default
    assert playback.said == []
    assert playback.events == []


def test_chat_narrates_without_interrupt() -> None:
    manager, playback = _manager(_config(chat_enabled=True))

    claim = manager.narrate_chat_message(lambda: "<Steve> hello")

    assert claim is Claim.CLAIM
    assert playback.said == [("<Steve> hello", False)]
    assert "clear" not in playback.events


def test_chat_disabled_is_claimed_and_producer_not_called() -> None:
    manager, playback = _manager(_config(chat_enabled=False))
    calls: list[int] = []

    def producer() -> str:
        calls.append(1)
        return "hello"

    assert manager.narrate_chat_message(producer) is Claim.CLAIM
    assert calls == []
    assert playback.said == []


def test_system_text_clears_then_interrupts() -> None:
    manager, playback = _manager(_config())

    assert manager.narrate("Steve fell from a high place") is Claim.CLAIM
    assert playback.events == ["clear", "say"]
    assert playback.said == [("Steve fell from a high place", True)]


def test_unaccepted_system_text_is_claimed_silently() -> None:
    manager, playback = _manager(_config(chat_enabled=True))

    assert manager.narrate("not testing dude") is Claim.CLAIM
    assert manager.narrate("") is Claim.CLAIM
    assert playback.said == []


def test_handle_dispatches_by_provenance() -> None:
    manager, playback = _manager(_config(chat_enabled=True))

    manager.handle(Message("hello", Provenance.CHAT))
    manager.handle(Message("testing", Provenance.SYSTEM))

    assert playback.said == [("hello", False), ("testing", True)]


def test_forced_narration_reports_whether_it_spoke() -> None:
    manager, playback = _manager(_config())

    assert manager.force_narrate_on_mode("testing") is True
    assert manager.force_narrate_on_mode("something else") is False
    assert playback.said == [("testing", False)]
    assert "clear" not in playback.events


def test_mod_disabled_passes_through() -> None:
    manager, playback = _manager(_config(mod_enabled=False, chat_enabled=True))

    assert manager.narrate("testing") is Claim.PASS_THROUGH
    assert manager.narrate_chat_message(lambda: "hello") is Claim.PASS_THROUGH
    assert playback.said == []


def test_every_decision_is_reported() -> None:
    seen: list[str] = []
    manager, _ = _manager(_config(), diagnostics=seen.append)

    manager.narrate("testing")
    manager.narrate("rejected")
    manager.force_narrate_on_mode("toast")

    assert seen == ["testing", "rejected", "toast"]


def test_failing_diagnostics_do_not_break_narration() -> None:
    def broken(text: str) -> None:
        raise RuntimeError("diagnostics down")

    manager, playback = _manager(_config(), diagnostics=broken)

    assert manager.narrate("testing") is Claim.CLAIM
    assert playback.said == [("testing", True)]


def test_disabled_chat_reports_unresolved_marker() -> None:
    seen: list[str] = []
    manager, _ = _manager(_config(chat_enabled=False), diagnostics=seen.append)

    manager.narrate_chat_message(lambda: "hello")
    manager.narrate("")

    assert seen == [CHAT_NOT_RESOLVED, ""]
