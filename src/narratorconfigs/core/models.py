"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any host-specific message or text types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Provenance(Enum):
    """Where a message came from in the host."""

    CHAT = "chat"
    SYSTEM = "system"


class Claim(Enum):
    """Signal returned to the host for each message it hands over."""

    # The engine handled the message; the host must skip its default narration.
    CLAIM = "claim"
    PASS_THROUGH = "pass_through"

    @property
    def suppress_host_default(self) -> bool:
        return self is Claim.CLAIM


@dataclass(frozen=True)
class Message:
    """Minimal message used by the decision gate."""

    text: str
    provenance: Provenance


@dataclass(frozen=True)
class Verdict:
    """Outcome of the decision gate for a claimed message.

    A verdict always means the engine owns the message. ``narrate`` tells the
    caller whether anything should be spoken, ``clear_first`` whether in-flight
    speech must be dropped before speaking.
    """

    narrate: bool
    interrupt: bool
    clear_first: bool
    reason: str
