"""
Main event loop.

One event is handled per iteration: an active status overlay swallows the
next key press, otherwise the key is routed by input mode. Only
StatusError is recovered here; anything else ends the loop.
"""

from __future__ import annotations

import logging
from typing import Protocol

from ..app import AppReturn, AppState, InputMode
from ..errors import StatusError
from ..input import keys
from ..input.actions import DEFAULT_ACTIONS, ActionMap
from ..input.events import InputEvent, KeyEvent
from ..input.keys import Key

log = logging.getLogger(__name__)


class Renderer(Protocol):
    def draw(self, state: AppState) -> None: ...


class EventSource(Protocol):
    def next(self) -> InputEvent: ...


def handle_editing_key(state: AppState, key: Key) -> AppReturn:
    """Route a key typed into the value box."""
    if key == keys.ENTER:
        try:
            return state.execute_input()
        except StatusError as exc:
            state.fail(exc)
    elif key == keys.BACKSPACE:
        state.pop_char()
    elif key == keys.ESC:
        state.cancel_editing()
    elif key.is_printable:
        state.push_char(key.char)
    return AppReturn.CONTINUE


def handle_event(
    state: AppState,
    event: InputEvent,
    actions: ActionMap = DEFAULT_ACTIONS,
) -> AppReturn:
    """Apply one input event to ``state``."""
    if not isinstance(event, KeyEvent):
        # ticks only trigger the redraw
        return AppReturn.CONTINUE

    if not state.status.is_running:
        state.dismiss_status()
        return AppReturn.CONTINUE

    if state.input_mode is InputMode.EDITING:
        return handle_editing_key(state, event.key)

    action = actions.find(event.key)
    if action is None:
        return AppReturn.CONTINUE
    try:
        return state.execute(action)
    except StatusError as exc:
        state.fail(exc)
        return AppReturn.CONTINUE


def run_app(
    screen: Renderer,
    state: AppState,
    events: EventSource,
    actions: ActionMap = DEFAULT_ACTIONS,
) -> None:
    """Draw, wait for an event, apply it; until Quit or a fatal error."""
    while True:
        screen.draw(state)
        event = events.next()
        if handle_event(state, event, actions) is AppReturn.EXIT:
            log.info("Quit requested")
            break
