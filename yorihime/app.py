"""
Menu state machine.

AppState owns everything the menus need: the history stack, the item list
and its selection, the input mode and buffer, the detected games, the
chosen game and cheat, and the status overlay. ``execute`` handles one
action in Selecting mode, ``execute_input`` commits the typed value in
Editing mode. Recoverable failures are raised as StatusError and turned
into an overlay by the main loop.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from .config import AddressDatabase, GameRecord
from .errors import (
    InvalidInputError,
    NoGameFoundError,
    NoMenuInHistoryError,
    NotSupportedError,
    ProcessNotFoundError,
    StatusError,
)
from .input.actions import Action
from .memory.process import MemoryAccess
from .status import RUNNING, Status

log = logging.getLogger(__name__)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class Menu(Enum):
    MAIN = "main"
    GAME_SELECTION = "game_selection"
    CHEAT_SELECTION = "cheat_selection"


class InputMode(Enum):
    SELECTING = "selecting"
    EDITING = "editing"


class Cheat(Enum):
    """A game variable that can be overwritten. Values are the menu labels."""
    SCORE = "Score"
    LIVES = "Lives"
    BOMBS = "Bombs"
    POWER = "Power"


class AppReturn(Enum):
    CONTINUE = "continue"
    EXIT = "exit"


SELECT_GAME = "Select Game"
MAIN_ITEMS = (SELECT_GAME,)
CHEAT_ITEMS = tuple(cheat.value for cheat in Cheat)

SUCCESS_MESSAGES: dict[Cheat, str] = {
    Cheat.SCORE: "Score updated!",
    Cheat.LIVES: "Lives updated!",
    Cheat.BOMBS: "Bombs updated!",
}


def parse_int32(text: str) -> int:
    """Parse a signed 32-bit decimal integer (optional sign, digits only)."""
    if not _INT_PATTERN.fullmatch(text):
        raise InvalidInputError(f"{text!r} is not a number")
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        raise InvalidInputError(f"{text} is out of range")
    return value


def cheat_offset(game: GameRecord, cheat: Cheat) -> int:
    """Address of the variable ``cheat`` targets in ``game``."""
    if cheat is Cheat.SCORE:
        return game.score_offset
    if cheat is Cheat.LIVES:
        return game.live_offset
    if cheat is Cheat.BOMBS:
        return game.bomb_offset
    raise NotSupportedError(f"{cheat.value} cheat")


class AppState:
    """
    Application state, created once and mutated in place until Quit.

    Usage:
        state = AppState(AddressDatabase.bundled(), ProcessMemory())
        state.execute(Action.DOWN)
        state.execute(Action.ENTER)
    """

    def __init__(self, database: AddressDatabase, memory: MemoryAccess):
        self.database = database
        self.memory = memory
        self.history: list[Menu] = [Menu.MAIN]
        self.items: list[str] = list(MAIN_ITEMS)
        self.selected: int | None = 0
        self.input_mode = InputMode.SELECTING
        self.input = ""
        self.detected_games: list[GameRecord] = []
        self.current_game: GameRecord | None = None
        self.selected_cheat: Cheat | None = None
        self.current_value: int | None = None
        self.status: Status = RUNNING
        self.refresh_games()

    # -- queries -----------------------------------------------------------

    @property
    def current_menu(self) -> Menu:
        if not self.history:
            raise NoMenuInHistoryError()
        return self.history[-1]

    @property
    def selected_item(self) -> str | None:
        if self.selected is None:
            return None
        return self.items[self.selected]

    # -- selection ---------------------------------------------------------

    def next(self) -> None:
        """Move the selection down, wrapping past the last item to the first."""
        if not self.items:
            self.selected = None
        elif self.selected is None or self.selected >= len(self.items) - 1:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self) -> None:
        """Move the selection up, wrapping before the first item to the last."""
        if not self.items:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self.items) - 1
        else:
            self.selected -= 1

    def _set_items(self, items: list[str] | tuple[str, ...]) -> None:
        self.items = list(items)
        self.selected = 0 if self.items else None

    # -- history -----------------------------------------------------------

    def _push(self, menu: Menu) -> None:
        log.debug("Menu %s -> %s", self.current_menu.value, menu.value)
        self.history.append(menu)

    def _pop(self) -> Menu:
        left = self.current_menu
        self.history.pop()
        log.debug("Menu %s -> %s", left.value, self.current_menu.value)
        return self.current_menu

    # -- collaborators -----------------------------------------------------

    def refresh_games(self) -> list[GameRecord]:
        """Re-query running processes and keep the known games among them."""
        records = list(self.database.records())
        running = self.memory.running(name for record in records for name in record.names)
        self.detected_games = [
            record for record in records
            if any(name in running for name in record.names)
        ]
        log.info("Detected games: %s", [game.process_name for game in self.detected_games])
        return self.detected_games

    def _game_items(self) -> list[str]:
        return [game.name for game in self.detected_games]

    def _resolve_pid(self, game: GameRecord) -> int:
        for name in game.names:
            pid = self.memory.find_pid(name)
            if pid is not None:
                return pid
        raise ProcessNotFoundError(game.process_name)

    def _read_current_value(self) -> int | None:
        if self.current_game is None or self.selected_cheat is None:
            return None
        try:
            pid = self._resolve_pid(self.current_game)
            return self.memory.read_i32(pid, cheat_offset(self.current_game, self.selected_cheat))
        except StatusError as exc:
            log.warning("Could not read current %s: %s", self.selected_cheat.value, exc)
            return None

    # -- actions -----------------------------------------------------------

    def execute(self, action: Action) -> AppReturn:
        """Handle one action in Selecting mode."""
        if action is Action.QUIT:
            return AppReturn.EXIT

        menu = self.current_menu
        if action is Action.UP:
            self.previous()
        elif action is Action.DOWN:
            self.next()
        elif menu is Menu.MAIN:
            self._execute_main(action)
        elif menu is Menu.GAME_SELECTION:
            self._execute_game_selection(action)
        else:
            self._execute_cheat_selection(action)
        return AppReturn.CONTINUE

    def _execute_main(self, action: Action) -> None:
        if action is Action.ENTER and self.selected_item == SELECT_GAME:
            self.refresh_games()
            self._push(Menu.GAME_SELECTION)
            self._set_items(self._game_items())
            if not self.items:
                self._pop()
                self._set_items(MAIN_ITEMS)
                raise NoGameFoundError()

    def _execute_game_selection(self, action: Action) -> None:
        if action is Action.ENTER:
            if self.selected is None:
                raise NoGameFoundError()
            self.current_game = self.detected_games[self.selected].model_copy()
            log.info("Selected game %s", self.current_game.name)
            self._push(Menu.CHEAT_SELECTION)
            self._set_items(CHEAT_ITEMS)
        elif action is Action.PREV:
            self._pop()
            self._set_items(MAIN_ITEMS)

    def _execute_cheat_selection(self, action: Action) -> None:
        if action is Action.ENTER:
            if self.selected_item is None:
                return
            cheat = Cheat(self.selected_item)
            if cheat is Cheat.POWER:
                raise NotSupportedError(f"{cheat.value} cheat")
            self.selected_cheat = cheat
            self.input_mode = InputMode.EDITING
            self.input = ""
            self.current_value = self._read_current_value()
        elif action is Action.PREV:
            self._pop()
            self.refresh_games()
            self._set_items(self._game_items())
            self.current_game = None
            self.selected_cheat = None
            self.current_value = None

    def execute_input(self) -> AppReturn:
        """
        Commit the typed value to the selected cheat's address.

        Raises:
            ProcessNotFoundError: the game is no longer running.
            InvalidInputError: the buffer is not a signed 32-bit integer.
            NotSupportedError: the selected cheat has no address.
            MemoryAccessError: the write failed.

        On failure the mode stays Editing and the buffer is kept.
        """
        game = self.current_game
        if game is None:
            raise NoGameFoundError()
        pid = self._resolve_pid(game)
        value = parse_int32(self.input)
        cheat = self.selected_cheat
        if cheat is None or cheat is Cheat.POWER:
            raise NotSupportedError(f"{cheat.value} cheat" if cheat else "")

        address = cheat_offset(game, cheat)
        self.memory.write_i32(pid, address, value)
        log.info("%s set to %d in %s", cheat.value, value, game.name)

        self.status = Status.success(SUCCESS_MESSAGES[cheat])
        self.current_value = value
        self.input = ""
        self.input_mode = InputMode.SELECTING
        return AppReturn.CONTINUE

    # -- editing -----------------------------------------------------------

    def push_char(self, char: str) -> None:
        self.input += char

    def pop_char(self) -> None:
        self.input = self.input[:-1]

    def cancel_editing(self) -> None:
        self.input = ""
        self.input_mode = InputMode.SELECTING

    # -- status overlay ----------------------------------------------------

    def fail(self, error: StatusError) -> None:
        log.warning("%s", error)
        self.status = Status.failure(error)

    def dismiss_status(self) -> None:
        """Clear the overlay. A dismissed NoGameFound also re-detects games."""
        if isinstance(self.status.error, NoGameFoundError):
            self.refresh_games()
            # the game list must keep matching the detected games
            if self.current_menu is Menu.GAME_SELECTION:
                self._set_items(self._game_items())
        self.status = RUNNING
