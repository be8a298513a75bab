"""
Terminal-independent key model.

Key sources (curses, pynput) translate their native codes into Key values
so the action table and the editing handler never see backend details.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Key:
    """A single key press: a named key, a printable char or Ctrl+char."""
    name: str
    char: str = ""
    ctrl: bool = False

    @classmethod
    def of_char(cls, char: str) -> Key:
        return cls("char", char)

    @classmethod
    def of_ctrl(cls, char: str) -> Key:
        return cls("char", char.lower(), ctrl=True)

    @property
    def is_printable(self) -> bool:
        """True for plain characters that can be typed into the value box."""
        return self.name == "char" and not self.ctrl and self.char.isprintable()

    def __str__(self) -> str:
        if self.name != "char":
            return f"<{self.name}>"
        return f"<ctrl-{self.char}>" if self.ctrl else self.char


ENTER = Key("enter")
ESC = Key("esc")
BACKSPACE = Key("backspace")
TAB = Key("tab")
UP = Key("up")
DOWN = Key("down")
LEFT = Key("left")
RIGHT = Key("right")
UNKNOWN = Key("unknown")

# Control characters delivered by a terminal in raw mode
_CONTROL_KEYS: dict[str, Key] = {
    "\n": ENTER,
    "\r": ENTER,
    "\x1b": ESC,
    "\x7f": BACKSPACE,
    "\b": BACKSPACE,
    "\t": TAB,
}


def key_from_char(ch: str) -> Key:
    """
    Translate a single character read from a terminal into a Key.

    Control codes 0x01-0x1A become Ctrl+letter (so raw-mode Ctrl+C arrives
    as ``Key.of_ctrl("c")``).
    """
    if ch in _CONTROL_KEYS:
        return _CONTROL_KEYS[ch]
    code = ord(ch)
    if 1 <= code <= 26:
        return Key.of_ctrl(chr(code + ord("a") - 1))
    if ch.isprintable():
        return Key.of_char(ch)
    return UNKNOWN
