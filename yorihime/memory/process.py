"""
Process lookup and memory access.

Processes are found by name through psutil. Memory is read and written
through ReadProcessMemory/WriteProcessMemory on Windows and through
/proc/<pid>/mem on Linux (games running under Wine).
"""

from __future__ import annotations

import ctypes
import functools
import logging
import os
import sys
from dataclasses import dataclass
from typing import Iterable, Protocol

import psutil

from ..errors import MemoryAccessError

log = logging.getLogger(__name__)

# Windows constants
PROCESS_VM_READ = 0x0010
PROCESS_VM_WRITE = 0x0020
PROCESS_VM_OPERATION = 0x0008
PROCESS_QUERY_INFORMATION = 0x0400

INT32_SIZE = 4


@dataclass
class ProcessInfo:
    """Information about a running process."""
    pid: int
    name: str


@functools.lru_cache(maxsize=None)
def _kernel32():
    """Bind the kernel32 functions used for memory access."""
    import ctypes.wintypes as wt

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    kernel32.OpenProcess.argtypes = [wt.DWORD, wt.BOOL, wt.DWORD]
    kernel32.OpenProcess.restype = wt.HANDLE

    kernel32.CloseHandle.argtypes = [wt.HANDLE]
    kernel32.CloseHandle.restype = wt.BOOL

    kernel32.ReadProcessMemory.argtypes = [
        wt.HANDLE,
        ctypes.c_void_p,
        ctypes.c_void_p,
        ctypes.c_size_t,
        ctypes.POINTER(ctypes.c_size_t),
    ]
    kernel32.ReadProcessMemory.restype = wt.BOOL

    kernel32.WriteProcessMemory.argtypes = [
        wt.HANDLE,
        ctypes.c_void_p,
        ctypes.c_void_p,
        ctypes.c_size_t,
        ctypes.POINTER(ctypes.c_size_t),
    ]
    kernel32.WriteProcessMemory.restype = wt.BOOL

    return kernel32


def enumerate_processes() -> list[ProcessInfo]:
    """List all running processes."""
    processes: list[ProcessInfo] = []
    for proc in psutil.process_iter(["pid", "name"]):
        name = proc.info.get("name")
        if name:
            processes.append(ProcessInfo(pid=proc.info["pid"], name=name))
    return processes


def find_pid(name: str) -> int | None:
    """Return the pid of the first process called ``name``."""
    wanted = name.lower()
    for proc in enumerate_processes():
        if proc.name.lower() == wanted:
            return proc.pid
    return None


def running_names(names: Iterable[str]) -> set[str]:
    """Return the subset of ``names`` that currently have a running process."""
    running = {proc.name.lower() for proc in enumerate_processes()}
    return {name for name in names if name.lower() in running}


class ProcessHandle:
    """
    Open a process for reading and writing its memory.

    Usage:
        with ProcessHandle(pid) as handle:
            handle.write(address, data)

    Every failure raises MemoryAccessError.
    """

    def __init__(self, pid: int):
        self._pid = pid
        self._handle: int | None = None
        self._fd: int | None = None

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def is_open(self) -> bool:
        return self._handle is not None or self._fd is not None

    def open(self) -> None:
        if self.is_open:
            return
        if sys.platform == "win32":
            access = (
                PROCESS_VM_READ | PROCESS_VM_WRITE
                | PROCESS_VM_OPERATION | PROCESS_QUERY_INFORMATION
            )
            handle = _kernel32().OpenProcess(access, False, self._pid)
            if not handle:
                raise MemoryAccessError(
                    f"cannot open process {self._pid} (error {ctypes.get_last_error()})"
                )
            self._handle = handle
        else:
            try:
                self._fd = os.open(f"/proc/{self._pid}/mem", os.O_RDWR)
            except OSError as exc:
                raise MemoryAccessError(f"cannot open process {self._pid}: {exc.strerror}") from exc

    def close(self) -> None:
        if self._handle is not None:
            _kernel32().CloseHandle(self._handle)
            self._handle = None
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def read(self, address: int, size: int) -> bytes:
        """Read exactly ``size`` bytes at ``address``."""
        self.open()
        if self._handle is not None:
            buf = ctypes.create_string_buffer(size)
            bytes_read = ctypes.c_size_t(0)
            ok = _kernel32().ReadProcessMemory(
                self._handle,
                ctypes.c_void_p(address),
                buf,
                size,
                ctypes.byref(bytes_read),
            )
            data = buf.raw[: bytes_read.value] if ok else b""
        else:
            try:
                data = os.pread(self._fd, size, address)
            except OSError as exc:
                raise MemoryAccessError(f"cannot read 0x{address:X}: {exc.strerror}") from exc
        if len(data) != size:
            raise MemoryAccessError(f"cannot read {size} bytes at 0x{address:X}")
        return data

    def write(self, address: int, data: bytes) -> None:
        """Write all of ``data`` at ``address``."""
        self.open()
        if self._handle is not None:
            written = ctypes.c_size_t(0)
            ok = _kernel32().WriteProcessMemory(
                self._handle,
                ctypes.c_void_p(address),
                data,
                len(data),
                ctypes.byref(written),
            )
            count = written.value if ok else 0
        else:
            try:
                count = os.pwrite(self._fd, data, address)
            except OSError as exc:
                raise MemoryAccessError(f"cannot write 0x{address:X}: {exc.strerror}") from exc
        if count != len(data):
            raise MemoryAccessError(f"cannot write {len(data)} bytes at 0x{address:X}")

    def read_int32(self, address: int) -> int:
        """Read a 32-bit signed integer."""
        return int.from_bytes(self.read(address, INT32_SIZE), "little", signed=True)

    def write_int32(self, address: int, value: int) -> None:
        """Write a 32-bit signed integer."""
        try:
            data = value.to_bytes(INT32_SIZE, "little", signed=True)
        except OverflowError:
            raise MemoryAccessError(f"{value} does not fit in 32 bits") from None
        self.write(address, data)

    def __enter__(self) -> ProcessHandle:
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()


class MemoryAccess(Protocol):
    """The process and memory operations the menus depend on."""

    def find_pid(self, name: str) -> int | None: ...

    def running(self, names: Iterable[str]) -> set[str]: ...

    def read_i32(self, pid: int, address: int) -> int: ...

    def write_i32(self, pid: int, address: int, value: int) -> None: ...


class ProcessMemory:
    """MemoryAccess implementation backed by the running OS."""

    def find_pid(self, name: str) -> int | None:
        return find_pid(name)

    def running(self, names: Iterable[str]) -> set[str]:
        return running_names(names)

    def read_i32(self, pid: int, address: int) -> int:
        with ProcessHandle(pid) as handle:
            return handle.read_int32(address)

    def write_i32(self, pid: int, address: int, value: int) -> None:
        with ProcessHandle(pid) as handle:
            handle.write_int32(address, value)
        log.info("Wrote %d to 0x%08X in pid %d", value, address, pid)
