"""Application entry point for narrator configs."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

from art import tprint

from narratorconfigs.adapters.console_narrator import ConsoleNarrator
from narratorconfigs.adapters.file_config_source import FileConfigurationSource, resolve_config_path
from narratorconfigs.adapters.language_file import LanguageFileDictionarySource
from narratorconfigs.adapters.static_mode import StaticModeQuery
from narratorconfigs.core.errors import NarratorConfigsError
from narratorconfigs.core.manager import NarrationManager
from narratorconfigs.core.models import Claim
from narratorconfigs.core.patterns import build_acceptance_set
from narratorconfigs.core.reload import ReloadCoordinator
from narratorconfigs.settings import SINK_PYTTSX3, LoggingSettings, Settings, load_settings

NAME = "NARRATOR"
FONT = "tarty-1"

CHAT_PREFIX = "chat:"
SYSTEM_PREFIX = "system:"
FORCED_PREFIX = "toast:"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging(config: LoggingSettings) -> None:
    level = getattr(logging, config.level, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if config.file_path:
        directory = os.path.dirname(config.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_sink(settings: Settings):
    if settings.sink == SINK_PYTTSX3:
        # Imported lazily so the console sink works without a TTS backend.
        from narratorconfigs.adapters.pyttsx3_narrator import Pyttsx3Narrator

        narrator = Pyttsx3Narrator()
        if not narrator.start():
            logging.getLogger(__name__).warning("pyttsx3 is not active, narrations will be skipped")
        return narrator
    return ConsoleNarrator()


def dispatch_line(manager: NarrationManager, line: str) -> str:
    """Route one input line to the matching entry point and describe the outcome."""

    stripped = line.rstrip("\n")
    if stripped.startswith(CHAT_PREFIX):
        text = stripped[len(CHAT_PREFIX):].strip()
        claim = manager.narrate_chat_message(lambda: text)
        return f"chat -> {claim.value}"
    if stripped.startswith(FORCED_PREFIX):
        narrated = manager.force_narrate_on_mode(stripped[len(FORCED_PREFIX):].strip())
        return f"forced -> {'narrated' if narrated else 'host fallback'}"
    if stripped.startswith(SYSTEM_PREFIX):
        stripped = stripped[len(SYSTEM_PREFIX):].strip()
    claim = manager.narrate(stripped)
    return f"system -> {claim.value}"


def _run(settings: Settings, stream: TextIO) -> int:
    logger = logging.getLogger(__name__)
    logger.info("Starting narrator configs")

    config_source = FileConfigurationSource(resolve_config_path(settings.config_paths))
    dictionary_source = LanguageFileDictionarySource(settings.language_file)
    sink = _build_sink(settings)
    coordinator = ReloadCoordinator(
        config_source,
        dictionary_source,
        sink,
        poll_interval=settings.poll_interval,
        max_attempts=settings.max_attempts,
    )
    manager = NarrationManager(coordinator, sink, StaticModeQuery(settings.custom_mode))

    coordinator.start()
    config_source.start_watching(settings.watch_debounce)
    logger.info("Reading messages from stdin (prefix with %s, %s or %s)", CHAT_PREFIX, SYSTEM_PREFIX, FORCED_PREFIX)
    try:
        for line in stream:
            if not line.strip():
                continue
            outcome = dispatch_line(manager, line)
            logger.debug(outcome)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        coordinator.stop()
        config_source.stop_watching()
        coordinator.join()
        sink.close()
    return 0


def _check(settings: Settings, texts: list[str]) -> int:
    config_source = FileConfigurationSource(resolve_config_path(settings.config_paths))
    dictionary = LanguageFileDictionarySource(settings.language_file).snapshot()
    acceptance = build_acceptance_set(dictionary, config_source.current())
    print(f"{len(acceptance)} accepted narrations")
    for text in texts:
        matcher = acceptance.first_match(text)
        if matcher is None:
            print(f"REJECT {text!r}")
        else:
            print(f"ACCEPT {text!r} via {matcher.key or matcher.origin}: {matcher.source}")
    return 0


def _set_chat(settings: Settings, enabled: bool) -> int:
    config_source = FileConfigurationSource(resolve_config_path(settings.config_paths))
    config_source.save(dataclasses.replace(config_source.current(), chat_enabled=enabled))
    print(config_source.current().describe())
    return 0


def _setup(settings: Settings) -> int:
    from narratorconfigs.frontend.app import NarrationTesterApp

    NarrationTesterApp(settings).run()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="narratorconfigs")
    parser.add_argument("--config", help="Path to the narrator config file (JSON or YAML)")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Narrate messages read from stdin")
    check_parser = subparsers.add_parser("check", help="Test texts against the accepted narrations")
    check_parser.add_argument("texts", nargs="+")
    subparsers.add_parser("config", help="Launch the narration tester TUI")
    chat_parser = subparsers.add_parser("chat", help="Turn chat narration on or off in the config file")
    chat_parser.add_argument("state", choices=["on", "off"])

    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    _configure_logging(settings.logging)

    try:
        if args.command == "check":
            return _check(settings, args.texts)
        if args.command == "chat":
            return _set_chat(settings, args.state == "on")
        _print_banner()
        if args.command == "config":
            return _setup(settings)
        return _run(settings, sys.stdin)
    except NarratorConfigsError as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
