"""Decision gate: decides whether and how a single message is narrated.

The gate is pure and synchronous. It never speaks, sleeps or performs I/O;
the narration manager turns its verdicts into sink calls.

Rules, first match wins:
1) Mode is not custom (or the mod is disabled): no verdict, the host decides.
2) Chat: narrate iff chat is enabled. Never interrupts.
3) System: narrate iff the text is non-empty and accepted. Clears the sink and
   interrupts.
4) System while playback is inactive: the message is still claimed, but
   nothing is spoken.
"""

from __future__ import annotations

from typing import Optional

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.models import Message, Provenance, Verdict
from narratorconfigs.core.patterns import AcceptanceSet


def _engine_owns(config: NarratorConfig, mode_is_custom: bool) -> bool:
    return mode_is_custom and config.mod_enabled


def _system_reason(text: str, acceptance: AcceptanceSet) -> Optional[str]:
    """Return why a system text is accepted, or None when it is not."""

    if not text:
        return None
    matcher = acceptance.first_match(text)
    if matcher is None:
        return None
    if matcher.key is not None:
        return f"system text accepted by {matcher.key} ({matcher.source})"
    return f"system text accepted by {matcher.origin} regex {matcher.source}"


def decide(
    message: Message,
    acceptance: AcceptanceSet,
    config: NarratorConfig,
    playback_active: bool,
    mode_is_custom: bool,
) -> Optional[Verdict]:
    """Return the verdict for a message, or None to leave it to the host."""

    if not _engine_owns(config, mode_is_custom):
        return None

    if message.provenance is Provenance.CHAT:
        if config.chat_enabled:
            return Verdict(narrate=True, interrupt=False, clear_first=False, reason="chat enabled")
        return Verdict(narrate=False, interrupt=False, clear_first=False, reason="chat disabled")

    reason = _system_reason(message.text, acceptance)
    if reason is None:
        reason = "empty system text" if not message.text else "system text not accepted"
        return Verdict(narrate=False, interrupt=False, clear_first=False, reason=reason)
    if not playback_active:
        return Verdict(narrate=False, interrupt=False, clear_first=False, reason=f"{reason}; narrator inactive")
    return Verdict(narrate=True, interrupt=True, clear_first=True, reason=reason)


def decide_forced(
    text: str,
    acceptance: AcceptanceSet,
    config: NarratorConfig,
    mode_is_custom: bool,
) -> Optional[Verdict]:
    """Verdict for out-of-band system text such as toasts and HUD alerts.

    Only the system matching rule applies. Forced narrations queue behind
    current speech instead of interrupting it. None means the engine did not
    narrate and the caller should fall back to its own behavior.
    """

    if not _engine_owns(config, mode_is_custom):
        return None
    reason = _system_reason(text, acceptance)
    if reason is None:
        return None
    return Verdict(narrate=True, interrupt=False, clear_first=False, reason=f"forced {reason}")
