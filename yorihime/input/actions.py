"""
Key to action table.

Each action owns a fixed set of bound keys. Lookup walks the actions in
declaration order and the first action bound to the key wins.
"""

from __future__ import annotations

from enum import Enum

from . import keys
from .keys import Key


class Action(Enum):
    """Semantic actions understood by the menu state machine."""
    QUIT = "quit"
    ENTER = "enter"
    UP = "up"
    DOWN = "down"
    PREV = "prev"
    NEXT = "next"

    @property
    def keys(self) -> tuple[Key, ...]:
        return ACTION_KEYS[self]

    def __str__(self) -> str:
        return self.value.capitalize()


ACTION_KEYS: dict[Action, tuple[Key, ...]] = {
    Action.QUIT: (Key.of_ctrl("c"), Key.of_char("q")),
    Action.ENTER: (keys.ENTER,),
    Action.UP: (keys.UP,),
    Action.DOWN: (keys.DOWN,),
    Action.PREV: (keys.LEFT,),
    Action.NEXT: (keys.RIGHT,),
}


class ActionMap:
    """Stateless lookup from a key to the first action bound to it."""

    def __init__(self, actions: list[Action] | None = None):
        self._actions: tuple[Action, ...] = tuple(actions if actions is not None else Action)

    @property
    def actions(self) -> tuple[Action, ...]:
        return self._actions

    def find(self, key: Key) -> Action | None:
        for action in self._actions:
            if key in action.keys:
                return action
        return None


DEFAULT_ACTIONS = ActionMap()
