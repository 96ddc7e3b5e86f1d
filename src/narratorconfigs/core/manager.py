"""Host-facing narration entry points.

This module is host-agnostic. It only relies on ports for speech and mode
queries, and reads the engine context published by the reload coordinator at
call time.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from narratorconfigs.core.gate import decide, decide_forced
from narratorconfigs.core.models import Claim, Message, Provenance, Verdict
from narratorconfigs.core.ports import DiagnosticSink, ModeQuery, PlaybackState
from narratorconfigs.core.reload import ReloadCoordinator

LOGGER = logging.getLogger(__name__)

# Reported instead of chat text that was never produced.
CHAT_NOT_RESOLVED = "<chat not resolved>"


def _log_diagnostic(text: str) -> None:
    LOGGER.debug("Narration candidate: %s", text)


class NarrationManager:
    """Applies gate verdicts to the speech sink and reports the claim."""

    def __init__(
        self,
        coordinator: ReloadCoordinator,
        playback: PlaybackState,
        mode: ModeQuery,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        self._coordinator = coordinator
        self._playback = playback
        self._mode = mode
        self._diagnostics = diagnostics or _log_diagnostic

    def _report(self, text: str, verdict: Optional[Verdict]) -> None:
        # Diagnostics must never break narration.
        try:
            self._diagnostics(text)
        except Exception:
            LOGGER.warning("Diagnostic sink failed", exc_info=True)
        if verdict is not None:
            LOGGER.debug("Verdict narrate=%s (%s)", verdict.narrate, verdict.reason)

    def _speak(self, text: str, verdict: Verdict) -> None:
        if not verdict.narrate:
            return
        if verdict.clear_first:
            self._playback.clear()
        self._playback.say(text, verdict.interrupt)

    def narrate_chat_message(self, producer: Callable[[], str]) -> Claim:
        """Handle chat text; the producer is only resolved when chat is narrated."""

        if not self._mode.is_custom_narration_mode():
            return Claim.PASS_THROUGH
        context = self._coordinator.context
        if not context.config.mod_enabled:
            return Claim.PASS_THROUGH
        if not context.config.chat_enabled:
            return self._apply(Message("", Provenance.CHAT), reported=CHAT_NOT_RESOLVED)
        return self._apply(Message(producer(), Provenance.CHAT))

    def narrate(self, text: str) -> Claim:
        """Handle a single system string."""

        return self.handle(Message(text, Provenance.SYSTEM))

    def handle(self, message: Message) -> Claim:
        """Handle an already-resolved message of either provenance."""

        if not self._mode.is_custom_narration_mode():
            return Claim.PASS_THROUGH
        return self._apply(message)

    def _apply(self, message: Message, reported: Optional[str] = None) -> Claim:
        context = self._coordinator.context
        verdict = decide(
            message,
            context.acceptance,
            context.config,
            playback_active=self._playback.active(),
            mode_is_custom=True,
        )
        self._report(message.text if reported is None else reported, verdict)
        if verdict is None:
            return Claim.PASS_THROUGH
        self._speak(message.text, verdict)
        return Claim.CLAIM

    def force_narrate_on_mode(self, text: str) -> bool:
        """Narrate out-of-band system text; returns whether narration occurred."""

        context = self._coordinator.context
        verdict = decide_forced(
            text,
            context.acceptance,
            context.config,
            mode_is_custom=self._mode.is_custom_narration_mode(),
        )
        self._report(text, verdict)
        if verdict is None:
            return False
        self._speak(text, verdict)
        return True
