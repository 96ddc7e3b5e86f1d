"""State container for the narration tester."""

from __future__ import annotations

from dataclasses import dataclass

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.patterns import AcceptanceSet


@dataclass
class TesterState:
    config: NarratorConfig | None = None
    acceptance: AcceptanceSet = AcceptanceSet.EMPTY
    translations: int = 0
    error: str | None = None
