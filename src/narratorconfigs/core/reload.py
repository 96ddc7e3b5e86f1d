"""Reload coordination for the acceptance set.

The coordinator owns the only writable engine state: an ``EngineContext``
holding the config and acceptance set in effect. Each reload builds a fresh
context and publishes it with a single attribute assignment, so readers on
other threads observe either the old or the new context and never a mix.

Lifecycle:
1) UNINITIALIZED until ``start()`` is called
2) WAITING_FOR_DICTIONARY while a background thread polls the dictionary
3) READY after the first successful reload; later triggers reload in place
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import threading
from typing import Optional

from narratorconfigs.core.config import NarratorConfig
from narratorconfigs.core.errors import PatternCompilationError
from narratorconfigs.core.patterns import AcceptanceSet, build_acceptance_set
from narratorconfigs.core.ports import ConfigurationSource, DictionarySource, PlaybackState

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
UPDATED_ANNOUNCEMENT = "Narrator configuration has updated from the config file"


class ReloadState(Enum):
    UNINITIALIZED = "uninitialized"
    WAITING_FOR_DICTIONARY = "waiting_for_dictionary"
    READY = "ready"


@dataclass(frozen=True)
class EngineContext:
    """Config and acceptance set published together."""

    config: NarratorConfig
    acceptance: AcceptanceSet


class ReloadCoordinator:
    """Builds and republishes the engine context on startup and config changes."""

    def __init__(
        self,
        config_source: ConfigurationSource,
        dictionary_source: DictionarySource,
        playback: PlaybackState,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: Optional[int] = None,
    ) -> None:
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._config_source = config_source
        self._dictionary_source = dictionary_source
        self._playback = playback
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._context = EngineContext(config_source.current(), AcceptanceSet.EMPTY)
        self._state = ReloadState.UNINITIALIZED
        self._write_lock = threading.Lock()
        self._pending = threading.Event()
        self._poll_lock = threading.Lock()
        self._polling = False
        self._wake = threading.Event()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def context(self) -> EngineContext:
        return self._context

    @property
    def state(self) -> ReloadState:
        return self._state

    @property
    def waiting(self) -> bool:
        """True while the dictionary wait thread is alive."""

        return self._thread is not None and self._thread.is_alive()

    def _set_state(self, state: ReloadState) -> None:
        if state is not self._state:
            LOGGER.info("Reload state %s -> %s", self._state.value, state.value)
        self._state = state

    def start(self) -> None:
        """Subscribe to config changes and start waiting for the dictionary.

        The wait runs on a daemon thread so the host's startup never blocks on
        dictionary availability.
        """

        if self._state is not ReloadState.UNINITIALIZED:
            raise RuntimeError("ReloadCoordinator has already been started")
        self._config_source.subscribe(self.on_config_changed)
        self._set_state(ReloadState.WAITING_FOR_DICTIONARY)
        self._polling = True
        self._thread = threading.Thread(
            target=self._wait_for_dictionary,
            name="narrator-dictionary-wait",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Cancel the dictionary wait, if it is still running."""

        self._stopped.set()
        self._wake.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def wake(self) -> None:
        """Interrupt the current backoff so the next poll happens now."""

        self._wake.set()

    def _wait_for_dictionary(self) -> None:
        attempts = 0
        try:
            while not self._stopped.is_set():
                attempts += 1
                LOGGER.info("Trying to pull translations (attempt %s)...", attempts)
                if self._dictionary_source.snapshot():
                    with self._poll_lock:
                        self._polling = False
                    self.reload()
                    return
                if self._max_attempts is not None and attempts >= self._max_attempts:
                    LOGGER.error("Translations still unavailable after %s attempts, giving up", attempts)
                    return
                LOGGER.info("Sleep %ss before pulling translations...", self._poll_interval)
                if self._wake.wait(self._poll_interval):
                    self._wake.clear()
                    if not self._stopped.is_set():
                        LOGGER.warning("Interrupted while waiting to load translations, retrying now")
            LOGGER.info("Stopped waiting for translations")
        finally:
            with self._poll_lock:
                self._polling = False

    def on_config_changed(self) -> None:
        """Config listener: reload, or cut the backoff short while polling.

        Never blocks on a reload running on another thread. When one is in
        progress it is asked to rebuild again once it has published, so the
        latest config always ends up live.
        """

        with self._poll_lock:
            if self._polling:
                self.wake()
                return
        self._pending.set()
        self._drain(blocking=False)

    def reload(self) -> bool:
        """Rebuild and publish the engine context.

        Returns False when a custom regex fails to compile; the previous
        context stays live in that case.
        """

        self._pending.set()
        return self._drain(blocking=True)

    def _drain(self, blocking: bool) -> bool:
        published = False
        while self._pending.is_set():
            if not self._write_lock.acquire(blocking=blocking):
                # The holder re-checks the pending flag after releasing.
                return False
            try:
                if not self._pending.is_set():
                    break
                self._pending.clear()
                config = self._rebuild()
            finally:
                self._write_lock.release()
            published = config is not None
            if config is not None:
                self._announce(config)
            blocking = True
        return published

    def _rebuild(self) -> Optional[NarratorConfig]:
        config = self._config_source.current()
        dictionary = self._dictionary_source.snapshot()
        try:
            acceptance = build_acceptance_set(dictionary, config)
        except PatternCompilationError as exc:
            LOGGER.error(
                "Reload aborted, keeping %s previous accepted narrations: %s",
                len(self._context.acceptance),
                exc,
            )
            return None
        self._context = EngineContext(config, acceptance)
        self._set_state(ReloadState.READY)
        return config

    def _announce(self, config: NarratorConfig) -> None:
        if self._playback.active():
            self._playback.say(UPDATED_ANNOUNCEMENT, False)
        else:
            LOGGER.info("Updated configuration: %s", config.describe())
