"""File-backed configuration source.

The narrator config lives in a single JSON or YAML file so users can edit
prefixes and regexes without touching Python. A watchdog observer on the
file's directory reloads it on change and notifies subscribers after each
successful reload that changed something.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, List, Optional, Sequence

import yaml
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.errors import ConfigurationError
from narratorconfigs.core.ports import ConfigListener

LOGGER = logging.getLogger(__name__)

BASE_FILENAME = "narratorconfigsmod"
DEFAULT_CONFIG_PATHS = (
    os.path.join("config", f"{BASE_FILENAME}.json"),
    os.path.join("config", f"{BASE_FILENAME}.yml"),
    os.path.join("config", f"{BASE_FILENAME}.yaml"),
)


def resolve_config_path(candidates: Sequence[str] = DEFAULT_CONFIG_PATHS) -> str:
    """Return the first existing candidate path."""

    for path in candidates:
        if os.path.exists(path):
            return path
    raise ConfigurationError(f"No narrator config found, tried: {', '.join(candidates)}")


def read_config_file(path: str) -> NarratorConfig:
    """Parse a JSON or YAML narrator config file."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            if path.endswith((".yml", ".yaml")):
                data: Any = yaml.safe_load(handle)
            else:
                data = json.load(handle)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot parse config file {path}: {exc}") from exc

    # An empty YAML document is an empty config.
    return NarratorConfig.from_mapping(data if data is not None else {})


def write_config_file(path: str, config: NarratorConfig) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        if path.endswith((".yml", ".yaml")):
            yaml.safe_dump(config.to_mapping(), handle, sort_keys=False)
        else:
            json.dump(config.to_mapping(), handle, indent=2)
            handle.write("\n")


class ConfigFileEventHandler(FileSystemEventHandler):
    """Reloads a config source when its file changes on disk.

    The observer watches the file's directory, so events for sibling files
    are filtered out here. Editors that save through a temp file and a rename
    show up as moves onto the config path.
    """

    def __init__(self, source: "FileConfigurationSource", debounce_seconds: float = 0.5) -> None:
        super().__init__()
        self._source = source
        self._target = os.path.abspath(source.path)
        self._debounce_seconds = debounce_seconds
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def _should_process(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(path and os.path.abspath(os.fsdecode(path)) == self._target for path in paths)

    def _reload(self) -> None:
        try:
            self._source.reload()
        except Exception:
            # A failing listener must not kill the observer thread.
            LOGGER.exception("Error while reloading narrator config")

    def _handle_event(self, event: FileSystemEvent) -> None:
        if not self._should_process(event):
            return
        LOGGER.debug("Config file event: %s %s", event.event_type, event.src_path)
        if self._debounce_seconds <= 0:
            self._reload()
            return
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce_seconds, self._reload)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle_event(event)


class FileConfigurationSource:
    """Configuration source backed by a JSON or YAML file."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._config = read_config_file(path)
        self._listeners: List[ConfigListener] = []
        self._observer: Optional[Observer] = None
        self._handler: Optional[ConfigFileEventHandler] = None
        LOGGER.info("Loaded narrator config from %s", path)

    @property
    def path(self) -> str:
        return self._path

    def current(self) -> NarratorConfig:
        return self._config

    def subscribe(self, listener: ConfigListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def reload(self) -> bool:
        """Re-read the file; keeps the previous config if it is invalid."""

        try:
            config = read_config_file(self._path)
        except ConfigurationError as exc:
            LOGGER.error("Keeping previous narrator config: %s", exc)
            return False
        if config == self._config:
            LOGGER.debug("Narrator config unchanged on disk: %s", self._path)
            return False
        self._config = config
        LOGGER.info("Narrator config reloaded from %s", self._path)
        self._notify()
        return True

    def save(self, config: NarratorConfig) -> None:
        """Persist a config and notify subscribers."""

        write_config_file(self._path, config)
        self._config = config
        LOGGER.info("Narrator config saved to %s", self._path)
        self._notify()

    def start_watching(self, debounce_seconds: float = 0.5) -> None:
        if self._observer is not None:
            return
        directory = os.path.dirname(os.path.abspath(self._path))
        self._handler = ConfigFileEventHandler(self, debounce_seconds)
        self._observer = Observer()
        self._observer.schedule(self._handler, directory, recursive=False)
        self._observer.start()
        LOGGER.info("Watching %s for narrator config changes", directory)

    def stop_watching(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        if self._handler is not None:
            self._handler.cancel()
        self._observer = None
        self._handler = None
