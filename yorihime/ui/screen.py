"""
Curses presentation of the application state.

Draws the current menu as a framed list with the selection highlighted,
the value box while a cheat is chosen, and the status overlay on top of
everything when it is active.
"""

from __future__ import annotations

import curses
from contextlib import contextmanager
from threading import Lock
from typing import Iterator

from ..app import AppState, InputMode, Menu

TITLE = "Yorihime"
HIGHLIGHT = ">> "
MAX_ITEM_WIDTH = 30
MARGIN = 3
# smallest terminal the menu layout fits in
MIN_HEIGHT = 2 * MARGIN + 8
MIN_WIDTH = 2 * MARGIN + 20
RESIZE_HINT = "Terminal too small, please resize"
# ms to wait after Esc for the rest of an escape sequence
ESC_DELAY = 25

HEADERS: dict[Menu, str] = {
    Menu.MAIN: "Selection Menu",
    Menu.GAME_SELECTION: "Select Game",
    Menu.CHEAT_SELECTION: "Select Cheat",
}

# color pair ids
HEADER_PAIR = 1
SUCCESS_PAIR = 2
ERROR_PAIR = 3
EDITING_PAIR = 4


def truncate(text: str, width: int = MAX_ITEM_WIDTH) -> str:
    """Shorten ``text`` to ``width`` columns, ending with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def centered_rect(percent_x: int, percent_y: int, height: int, width: int) -> tuple[int, int, int, int]:
    """Return ``(top, left, height, width)`` of a box centered in the screen."""
    box_h = max(height * percent_y // 100, 3)
    box_w = max(width * percent_x // 100, 10)
    return (max((height - box_h) // 2, 0), max((width - box_w) // 2, 0), min(box_h, height), min(box_w, width))


def _safe_addstr(win: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    """Add ``text`` at ``(y, x)``, clipped to the window."""
    max_y, max_x = win.getmaxyx()
    if y < 0 or x < 0 or y >= max_y or x >= max_x:
        return
    try:
        win.addstr(y, x, text[: max_x - x], attr)
    except curses.error:
        # writing the bottom-right cell raises on most terminals
        pass


def _box(win: curses.window, top: int, left: int, height: int, width: int, title: str = "", attr: int = 0) -> None:
    if height < 2 or width < 2:
        return
    for row in range(top, top + height):
        _safe_addstr(win, row, left, " " * width, attr)
    _safe_addstr(win, top, left, "┌" + "─" * (width - 2) + "┐", attr)
    for row in range(top + 1, top + height - 1):
        _safe_addstr(win, row, left, "│", attr)
        _safe_addstr(win, row, left + width - 1, "│", attr)
    _safe_addstr(win, top + height - 1, left, "└" + "─" * (width - 2) + "┘", attr)
    if title:
        _safe_addstr(win, top, left + max((width - len(title)) // 2, 1), title, attr | curses.A_BOLD)


class Screen:
    """
    Renders AppState snapshots onto a curses window.

    Drawing holds ``lock``; pass the lock the key source reads under when
    both share the window.
    """

    def __init__(self, window: curses.window, colors: bool = True, lock: Lock | None = None):
        self._win = window
        self._lock = lock if lock is not None else Lock()
        self._colors = colors and curses.has_colors()
        if self._colors:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(HEADER_PAIR, curses.COLOR_BLACK, curses.COLOR_GREEN)
            curses.init_pair(SUCCESS_PAIR, curses.COLOR_GREEN, curses.COLOR_BLACK)
            curses.init_pair(ERROR_PAIR, curses.COLOR_RED, curses.COLOR_BLACK)
            curses.init_pair(EDITING_PAIR, curses.COLOR_YELLOW, -1)

    def _pair(self, pair: int) -> int:
        return curses.color_pair(pair) if self._colors else 0

    def draw(self, state: AppState) -> None:
        with self._lock:
            self._win.erase()
            if state.status.is_error:
                self._draw_overlay("An error occured!", f"Error: {state.status.message}", ERROR_PAIR)
            elif state.status.is_success:
                self._draw_overlay("Notification", state.status.message, SUCCESS_PAIR)
            else:
                self._draw_menu(state)
            self._win.refresh()

    def _draw_overlay(self, title: str, message: str, pair: int) -> None:
        height, width = self._win.getmaxyx()
        top, left, box_h, box_w = centered_rect(60, 20, height, width)
        attr = self._pair(pair)
        _box(self._win, top, left, box_h, box_w, title, attr)
        text = message[: box_w - 2]
        _safe_addstr(self._win, top + box_h // 2, left + max((box_w - len(text)) // 2, 1), text, attr)

    def _draw_menu(self, state: AppState) -> None:
        height, width = self._win.getmaxyx()
        if height < MIN_HEIGHT or width < MIN_WIDTH:
            self._draw_resize_hint(height, width)
            return
        list_h = height - 2 * MARGIN - 3
        _box(self._win, MARGIN, MARGIN, list_h, width - 2 * MARGIN, TITLE)

        header = HEADERS[state.current_menu]
        _safe_addstr(self._win, MARGIN + 1, MARGIN + 1, header.ljust(width - 2 * MARGIN - 2), self._pair(HEADER_PAIR))

        row = MARGIN + 3
        for index, item in enumerate(state.items):
            if row >= MARGIN + list_h - 1:
                break
            selected = index == state.selected
            prefix = HIGHLIGHT if selected else " " * len(HIGHLIGHT)
            attr = curses.A_REVERSE if selected else 0
            _safe_addstr(self._win, row, MARGIN + 1, prefix + truncate(item), attr)
            row += 2

        if state.current_menu is Menu.CHEAT_SELECTION and state.selected_cheat is not None:
            self._draw_value_box(state, height - MARGIN - 3, width - 2 * MARGIN)

    def _draw_value_box(self, state: AppState, top: int, box_w: int) -> None:
        title = "Value"
        if state.current_value is not None:
            title = f"Value ({state.selected_cheat.value}: {state.current_value})"
        editing = state.input_mode is InputMode.EDITING
        _box(self._win, top, MARGIN, 3, box_w, title)
        attr = self._pair(EDITING_PAIR) if editing else 0
        _safe_addstr(self._win, top + 1, MARGIN + 1, state.input, attr)
        if editing:
            try:
                curses.curs_set(1)
            except curses.error:
                pass
            try:
                self._win.move(top + 1, min(MARGIN + 1 + len(state.input), MARGIN + box_w - 2))
            except curses.error:
                # cursor position outside the window
                pass
        else:
            try:
                curses.curs_set(0)
            except curses.error:
                pass

    def _draw_resize_hint(self, height: int, width: int) -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        row = max(0, height // 2 - 1)
        size = f"Needs at least {MIN_WIDTH}x{MIN_HEIGHT}"
        _safe_addstr(self._win, row, max(0, (width - len(RESIZE_HINT)) // 2), RESIZE_HINT, curses.A_BOLD)
        _safe_addstr(self._win, row + 1, max(0, (width - len(size)) // 2), size)


@contextmanager
def terminal_session() -> Iterator[curses.window]:
    """
    Take over the terminal: alternate screen, raw mode, mouse capture.

    The terminal is restored on exit, including when the body raises.
    """
    stdscr = curses.initscr()
    try:
        curses.set_escdelay(ESC_DELAY)
        curses.noecho()
        curses.raw()
        stdscr.keypad(True)
        curses.mousemask(curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION)
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        yield stdscr
    finally:
        curses.mousemask(0)
        stdscr.keypad(False)
        curses.noraw()
        curses.echo()
        curses.endwin()
