"""Runtime settings for narrator configs.

The narrator config file holds what to narrate; everything about how the
process runs (file locations, speech sink, logging) comes from environment
variables, optionally loaded from a ``.env`` file.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional, Tuple

from dotenv import load_dotenv

from narratorconfigs.adapters.file_config_source import DEFAULT_CONFIG_PATHS
from narratorconfigs.core.reload import DEFAULT_POLL_INTERVAL

SINK_CONSOLE = "console"
SINK_PYTTSX3 = "pyttsx3"
SINKS = (SINK_CONSOLE, SINK_PYTTSX3)


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    console: bool = True
    file_path: Optional[str] = None
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5


@dataclass(frozen=True)
class Settings:
    config_paths: Tuple[str, ...]
    language_file: str
    sink: str
    poll_interval: float
    max_attempts: Optional[int]
    watch_debounce: float
    custom_mode: bool
    logging: LoggingSettings


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build settings from the environment; an explicit config path wins."""

    load_dotenv()

    if config_path is None:
        config_path = os.getenv("NARRATOR_CONFIG_PATH")
    config_paths = (config_path,) if config_path else DEFAULT_CONFIG_PATHS

    sink = os.getenv("NARRATOR_SINK", SINK_CONSOLE).strip().lower()
    if sink not in SINKS:
        raise ValueError(f"NARRATOR_SINK must be one of {', '.join(SINKS)}, got {sink!r}")

    logging_settings = LoggingSettings(
        level=os.getenv("NARRATOR_LOG_LEVEL", "INFO").upper(),
        console=_env_bool("NARRATOR_LOG_CONSOLE", True),
        file_path=os.getenv("NARRATOR_LOG_FILE") or None,
        max_bytes=int(os.getenv("NARRATOR_LOG_MAX_BYTES", str(5 * 1024 * 1024))),
        backup_count=int(os.getenv("NARRATOR_LOG_BACKUP_COUNT", "5")),
    )

    return Settings(
        config_paths=config_paths,
        language_file=os.getenv("NARRATOR_LANGUAGE_FILE", os.path.join("lang", "en_us.json")),
        sink=sink,
        poll_interval=float(os.getenv("NARRATOR_POLL_SECONDS", str(DEFAULT_POLL_INTERVAL))),
        max_attempts=_env_optional_int("NARRATOR_POLL_MAX_ATTEMPTS"),
        watch_debounce=float(os.getenv("NARRATOR_WATCH_DEBOUNCE_SECONDS", "0.5")),
        custom_mode=_env_bool("NARRATOR_CUSTOM_MODE", True),
        logging=logging_settings,
    )
