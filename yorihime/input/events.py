"""
Input event channel.

A background thread polls a key source and pushes key presses into a
FIFO queue, interleaved with tick events emitted on a fixed cadence. The
main loop blocks on ``Events.next()`` once per iteration.
"""

from __future__ import annotations

import curses
import logging
import queue
import time
from dataclasses import dataclass
from threading import Event, Lock, Thread
from typing import Protocol

from ..errors import EventSourceError
from . import keys
from .keys import Key, key_from_char

log = logging.getLogger(__name__)

DEFAULT_TICK_RATE = 0.2
# sleep between non-blocking reads of a curses window
POLL_INTERVAL = 0.01


@dataclass(frozen=True)
class KeyEvent:
    key: Key


@dataclass(frozen=True)
class TickEvent:
    pass


InputEvent = KeyEvent | TickEvent

TICK = TickEvent()


@dataclass(frozen=True)
class _Failure:
    error: BaseException


_CLOSED = object()


class KeySource(Protocol):
    def poll(self, timeout: float) -> Key | None:
        """Wait up to ``timeout`` seconds for a key press."""
        ...

    def close(self) -> None:
        ...


# curses keypad codes
CURSES_KEYS: dict[int, Key] = {
    curses.KEY_UP: keys.UP,
    curses.KEY_DOWN: keys.DOWN,
    curses.KEY_LEFT: keys.LEFT,
    curses.KEY_RIGHT: keys.RIGHT,
    curses.KEY_ENTER: keys.ENTER,
    curses.KEY_BACKSPACE: keys.BACKSPACE,
}


def key_from_curses(code: int | str) -> Key:
    """Translate a ``get_wch()`` result into a Key."""
    if isinstance(code, str):
        return key_from_char(code)
    return CURSES_KEYS.get(code, keys.UNKNOWN)


class CursesKeySource:
    """
    Reads key presses from a curses window.

    curses is not thread-safe, so every call on the window is made while
    holding ``lock``, the same lock the renderer draws under. The window is
    switched to non-blocking reads and the wait happens outside the lock.
    """

    def __init__(self, window: curses.window, lock: Lock | None = None, interval: float = POLL_INTERVAL):
        self._window = window
        self._lock = lock if lock is not None else Lock()
        self._interval = interval
        with self._lock:
            self._window.nodelay(True)

    def _read(self) -> int | str | None:
        with self._lock:
            try:
                return self._window.get_wch()
            except curses.error:
                # nothing buffered
                return None

    def poll(self, timeout: float) -> Key | None:
        deadline = time.monotonic() + timeout
        while True:
            code = self._read()
            if code is not None and code != curses.KEY_MOUSE:
                key = key_from_curses(code)
                if key is not keys.UNKNOWN:
                    return key
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            if code is None:
                time.sleep(min(self._interval, remaining))

    def close(self) -> None:
        pass


class Events:
    """
    Single-consumer event channel fed by a background producer.

    Usage:
        events = Events(CursesKeySource(stdscr), tick_rate=0.2)
        event = events.next()   # blocks
        events.close()
    """

    def __init__(self, source: KeySource, tick_rate: float = DEFAULT_TICK_RATE, start: bool = True):
        if tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        self._source = source
        self._tick_rate = tick_rate
        self._queue: queue.Queue[object] = queue.Queue()
        self._stop = Event()
        self._closed = False
        self._thread = Thread(target=self._produce, name="yorihime-events", daemon=True)
        if start:
            self._thread.start()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    def _produce(self) -> None:
        next_tick = time.monotonic() + self._tick_rate
        try:
            while not self._stop.is_set():
                key = self._source.poll(max(next_tick - time.monotonic(), 0.0))
                if key is not None:
                    self._queue.put(KeyEvent(key))
                now = time.monotonic()
                if now >= next_tick:
                    self._queue.put(TICK)
                    next_tick = now + self._tick_rate
        except Exception as exc:
            log.exception("Event producer failed")
            self._queue.put(_Failure(exc))
        finally:
            self._queue.put(_CLOSED)

    def next(self) -> InputEvent:
        """Block until the next event arrives."""
        if self._closed:
            raise EventSourceError("Event channel is closed")
        item = self._queue.get()
        if isinstance(item, _Failure):
            self._closed = True
            raise EventSourceError(f"Event producer failed: {item.error}") from item.error
        if item is _CLOSED:
            self._closed = True
            raise EventSourceError("Event channel is closed")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Stop the producer and release the key source."""
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout=max(self._tick_rate * 2, 1.0))
        self._source.close()

    def __enter__(self) -> Events:
        return self

    def __exit__(self, *args) -> None:
        self.close()
