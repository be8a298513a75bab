from __future__ import annotations

import ctypes
import os
import sys
import unittest
from types import SimpleNamespace
from unittest import mock

from yorihime.errors import MemoryAccessError
from yorihime.memory import process
from yorihime.memory.process import ProcessHandle, ProcessMemory


def fake_processes(*entries: tuple[int, str | None]):
    return [SimpleNamespace(info={"pid": pid, "name": name}) for pid, name in entries]


class ProcessLookupTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.object(
            process.psutil,
            "process_iter",
            return_value=fake_processes((10, "explorer.exe"), (20, "TH06.EXE"), (30, None), (40, "th06.exe")),
        )
        self.process_iter = patcher.start()
        self.addCleanup(patcher.stop)

    def test_enumerate_skips_unnamed(self) -> None:
        names = [p.name for p in process.enumerate_processes()]
        self.assertEqual(names, ["explorer.exe", "TH06.EXE", "th06.exe"])
        self.process_iter.assert_called_with(["pid", "name"])

    def test_find_pid_returns_first_match(self) -> None:
        self.assertEqual(process.find_pid("th06.exe"), 20)
        self.assertIsNone(process.find_pid("th10.exe"))

    def test_running_names_keeps_caller_spelling(self) -> None:
        self.assertEqual(process.running_names(["th06.exe", "th10.exe", "Explorer.exe"]), {"th06.exe", "Explorer.exe"})

    def test_process_memory_delegates(self) -> None:
        memory = ProcessMemory()
        self.assertEqual(memory.find_pid("explorer.exe"), 10)
        self.assertEqual(memory.running(["th06.exe"]), {"th06.exe"})


@unittest.skipUnless(sys.platform.startswith("linux") and os.path.exists("/proc/self/mem"), "needs /proc/<pid>/mem")
class ProcessHandleTests(unittest.TestCase):
    def test_write_and_read_own_memory(self) -> None:
        target = ctypes.c_int32(5)
        address = ctypes.addressof(target)
        memory = ProcessMemory()
        memory.write_i32(os.getpid(), address, -12345)
        self.assertEqual(target.value, -12345)
        self.assertEqual(memory.read_i32(os.getpid(), address), -12345)

    def test_unmapped_address_fails(self) -> None:
        with ProcessHandle(os.getpid()) as handle:
            with self.assertRaises(MemoryAccessError):
                handle.read_int32(0)
            with self.assertRaises(MemoryAccessError):
                handle.write_int32(0, 1)

    def test_value_must_fit_in_32_bits(self) -> None:
        target = ctypes.c_int32(0)
        with ProcessHandle(os.getpid()) as handle:
            with self.assertRaises(MemoryAccessError):
                handle.write_int32(ctypes.addressof(target), 2**31)
        self.assertEqual(target.value, 0)

    def test_missing_process_cannot_be_opened(self) -> None:
        handle = ProcessHandle(2**22 + 12345)
        with self.assertRaises(MemoryAccessError):
            handle.open()
        self.assertFalse(handle.is_open)

    def test_close_is_idempotent(self) -> None:
        handle = ProcessHandle(os.getpid())
        handle.open()
        self.assertTrue(handle.is_open)
        handle.close()
        handle.close()
        self.assertFalse(handle.is_open)


if __name__ == "__main__":
    unittest.main()
