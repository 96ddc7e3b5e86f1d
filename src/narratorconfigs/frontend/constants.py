"""Shared constants for the Textual UI."""

from __future__ import annotations

NARRATOR_GREEN = "#5FD38D"
