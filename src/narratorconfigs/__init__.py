"""Narrator Configs: a custom narration mode driven by key prefixes and regexes."""

__version__ = "1.0.0"
