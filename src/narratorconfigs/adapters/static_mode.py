"""Mode query for hosts without a narrator mode switch."""

from __future__ import annotations


class StaticModeQuery:
    """ModeQuery returning a fixed, settable answer."""

    def __init__(self, custom: bool = True) -> None:
        self.custom = custom

    def is_custom_narration_mode(self) -> bool:
        return self.custom
