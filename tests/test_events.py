from __future__ import annotations

import curses
import threading
import time
import unittest
from types import SimpleNamespace
from unittest import mock

from fakes import TrackingWindow

from yorihime.errors import EventSourceError
from yorihime.input import keys
from yorihime.input.events import CursesKeySource, Events, KeyEvent, TickEvent, key_from_curses
from yorihime.input.keys import Key
from yorihime.input.pynput_source import PynputKeySource


class ListSource:
    """Key source that hands out a fixed list of keys, then idles."""

    def __init__(self, pressed: list[Key]):
        self._pressed = list(pressed)
        self.closed = False

    def poll(self, timeout: float) -> Key | None:
        if self._pressed:
            return self._pressed.pop(0)
        time.sleep(timeout)
        return None

    def close(self) -> None:
        self.closed = True


class FailingSource:
    def poll(self, timeout: float) -> Key | None:
        raise OSError("terminal went away")

    def close(self) -> None:
        pass


class EventsTests(unittest.TestCase):
    def test_keys_arrive_in_order(self) -> None:
        pressed = [Key.of_char(c) for c in "abc"] + [keys.ENTER]
        with Events(ListSource(pressed), tick_rate=0.05) as events:
            received = []
            while len(received) < len(pressed):
                event = events.next()
                if isinstance(event, KeyEvent):
                    received.append(event.key)
        self.assertEqual(received, pressed)

    def test_ticks_keep_coming_without_keys(self) -> None:
        with Events(ListSource([]), tick_rate=0.02) as events:
            for _ in range(3):
                self.assertIsInstance(events.next(), TickEvent)

    def test_producer_failure_is_fatal(self) -> None:
        events = Events(FailingSource(), tick_rate=0.05)
        with self.assertRaises(EventSourceError):
            events.next()
        # the channel stays closed afterwards
        with self.assertRaises(EventSourceError):
            events.next()
        events.close()

    def test_close_stops_producer_and_source(self) -> None:
        source = ListSource([])
        events = Events(source, tick_rate=0.02)
        events.close()
        self.assertTrue(source.closed)
        self.assertFalse(events._thread.is_alive())

    def test_rejects_non_positive_tick_rate(self) -> None:
        with self.assertRaises(ValueError):
            Events(ListSource([]), tick_rate=0, start=False)


class CursesKeyTests(unittest.TestCase):
    def test_keypad_codes(self) -> None:
        self.assertEqual(key_from_curses(curses.KEY_UP), keys.UP)
        self.assertEqual(key_from_curses(curses.KEY_DOWN), keys.DOWN)
        self.assertEqual(key_from_curses(curses.KEY_LEFT), keys.LEFT)
        self.assertEqual(key_from_curses(curses.KEY_RIGHT), keys.RIGHT)
        self.assertEqual(key_from_curses(curses.KEY_BACKSPACE), keys.BACKSPACE)
        self.assertEqual(key_from_curses(curses.KEY_F1), keys.UNKNOWN)

    def test_wide_chars(self) -> None:
        self.assertEqual(key_from_curses("\n"), keys.ENTER)
        self.assertEqual(key_from_curses("\x03"), Key.of_ctrl("c"))
        self.assertEqual(key_from_curses("4"), Key.of_char("4"))

    def test_source_skips_mouse_and_unknown_codes(self) -> None:
        window = TrackingWindow(codes=[curses.KEY_MOUSE, curses.KEY_F1, curses.KEY_UP, "7"])
        source = CursesKeySource(window, interval=0.001)
        self.assertIs(window.nodelay_flag, True)
        self.assertEqual(source.poll(0.05), keys.UP)
        self.assertEqual(source.poll(0.05), Key.of_char("7"))

    def test_source_waits_out_the_timeout(self) -> None:
        source = CursesKeySource(TrackingWindow(), interval=0.001)
        started = time.monotonic()
        self.assertIsNone(source.poll(0.03))
        self.assertGreaterEqual(time.monotonic() - started, 0.03)

    def test_reads_happen_under_the_lock(self) -> None:
        lock = threading.Lock()
        held = []

        def get_wch():
            held.append(lock.locked())
            raise curses.error("no input")

        window = mock.MagicMock()
        window.get_wch.side_effect = get_wch
        source = CursesKeySource(window, lock, interval=0.001)
        self.assertIsNone(source.poll(0.02))
        self.assertTrue(held)
        self.assertTrue(all(held))
        # released between reads
        self.assertFalse(lock.locked())


class PynputKeySourceTests(unittest.TestCase):
    def test_named_and_char_keys(self) -> None:
        source = PynputKeySource()
        source._on_press(SimpleNamespace(name="up"))
        source._on_press(SimpleNamespace(char="7"))
        source._on_press(SimpleNamespace(name="f5"))
        self.assertEqual(source.poll(0.01), keys.UP)
        self.assertEqual(source.poll(0.01), Key.of_char("7"))
        self.assertIsNone(source.poll(0.01))

    def test_ctrl_modifier(self) -> None:
        source = PynputKeySource()
        source._on_press(SimpleNamespace(name="ctrl_l"))
        source._on_press(SimpleNamespace(char="\x03"))
        source._on_release(SimpleNamespace(name="ctrl_l"))
        source._on_press(SimpleNamespace(char="c"))
        self.assertEqual(source.poll(0.01), Key.of_ctrl("c"))
        self.assertEqual(source.poll(0.01), Key.of_char("c"))


if __name__ == "__main__":
    unittest.main()
