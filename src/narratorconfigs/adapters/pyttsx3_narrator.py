"""Speech sink backed by the local pyttsx3 text-to-speech engine.

pyttsx3's ``runAndWait`` blocks, so utterances are queued and spoken by a
worker thread that also owns the engine. ``say`` and ``clear`` only touch the
queue and a stop flag and return immediately; the engine is stopped from its
own word callback, never from the caller's thread.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Optional

import pyttsx3

LOGGER = logging.getLogger(__name__)

_SHUTDOWN = object()


class Pyttsx3Narrator:
    """PlaybackState adapter speaking through pyttsx3."""

    def __init__(self, rate: Optional[int] = None, volume: Optional[float] = None) -> None:
        self._rate = rate
        self._volume = volume
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._engine: Optional[Any] = None
        self._ready = threading.Event()
        self._stop_requested = threading.Event()
        self._thread = threading.Thread(target=self._run, name="narrator-tts", daemon=True)

    def start(self, timeout: float = 10.0) -> bool:
        """Start the worker and wait for the engine to initialize."""

        self._thread.start()
        self._ready.wait(timeout)
        return self.active()

    def active(self) -> bool:
        return self._engine is not None

    def say(self, text: str, interrupt: bool) -> None:
        if interrupt:
            self._drain()
        self._queue.put(text)

    def clear(self) -> None:
        """Drop queued speech and cut off the utterance being spoken."""

        self._drain()
        self._stop_requested.set()

    def close(self) -> None:
        """Finish queued speech, then stop the worker."""

        if not self._thread.is_alive():
            return
        self._queue.put(_SHUTDOWN)
        self._thread.join()

    def _drain(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def _on_word(self, name: Any, location: int, length: int) -> None:
        # Runs on the worker thread, inside runAndWait.
        if self._stop_requested.is_set() and self._engine is not None:
            self._stop_requested.clear()
            self._engine.stop()

    def _run(self) -> None:
        try:
            engine = pyttsx3.init()
            if self._rate is not None:
                engine.setProperty("rate", self._rate)
            if self._volume is not None:
                engine.setProperty("volume", self._volume)
            engine.connect("started-word", self._on_word)
            self._engine = engine
        except Exception:
            LOGGER.exception("Failed to initialize pyttsx3, narration is inactive")
            return
        finally:
            self._ready.set()

        LOGGER.info("pyttsx3 narrator ready")
        while True:
            item = self._queue.get()
            if item is _SHUTDOWN:
                break
            # A clear() issued while idle must not cut off the next utterance.
            self._stop_requested.clear()
            try:
                engine.say(item)
                engine.runAndWait()
            except RuntimeError:
                LOGGER.exception("pyttsx3 failed to speak %r", item)
        self._engine = None
        LOGGER.info("pyttsx3 narrator stopped")
