"""
Global keyboard key source backed by pynput.

Lets the menus be driven while the game window has focus. Key presses are
captured system-wide by a pynput listener thread and buffered until the
event producer polls for them.
"""

from __future__ import annotations

import logging
import queue
from typing import Any

from . import keys
from .keys import Key

log = logging.getLogger(__name__)

# pynput Key enum member name -> Key
PYNPUT_KEYS: dict[str, Key] = {
    "enter": keys.ENTER,
    "esc": keys.ESC,
    "backspace": keys.BACKSPACE,
    "tab": keys.TAB,
    "up": keys.UP,
    "down": keys.DOWN,
    "left": keys.LEFT,
    "right": keys.RIGHT,
}

CTRL_NAMES = {"ctrl", "ctrl_l", "ctrl_r"}


class PynputKeySource:
    """
    Key source fed by a global pynput listener.

    Usage:
        source = PynputKeySource()
        source.start()
        key = source.poll(0.2)
        source.close()
    """

    def __init__(self):
        self._keys: queue.Queue[Key] = queue.Queue()
        self._ctrl = False
        self._listener: Any = None

    def start(self) -> None:
        """Start the listener thread."""
        if self._listener is not None:
            return
        # pynput picks its platform backend at import time, which needs a
        # running display server on Linux.
        from pynput.keyboard import Listener

        self._listener = Listener(on_press=self._on_press, on_release=self._on_release)
        self._listener.start()
        log.info("Global keyboard listener started")

    def poll(self, timeout: float) -> Key | None:
        try:
            return self._keys.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None

    def translate(self, key: Any) -> Key | None:
        """Translate a pynput ``Key`` or ``KeyCode`` into a Key."""
        char = getattr(key, "char", None)
        if char:
            if self._ctrl:
                # Ctrl+letter may arrive as the raw control code
                code = ord(char[0])
                if 1 <= code <= 26:
                    return Key.of_ctrl(chr(code + ord("a") - 1))
                return Key.of_ctrl(char)
            return Key.of_char(char)
        name = getattr(key, "name", None)
        if name is None:
            return None
        return PYNPUT_KEYS.get(name)

    def _on_press(self, key: Any) -> None:
        if getattr(key, "name", None) in CTRL_NAMES:
            self._ctrl = True
            return
        translated = self.translate(key)
        if translated is not None:
            self._keys.put(translated)

    def _on_release(self, key: Any) -> None:
        if getattr(key, "name", None) in CTRL_NAMES:
            self._ctrl = False
