"""
Process lookup and memory access for yorihime.

The menus only talk to the MemoryAccess interface; raw handles stay here.
"""

from .process import (
    MemoryAccess,
    ProcessHandle,
    ProcessInfo,
    ProcessMemory,
    enumerate_processes,
    find_pid,
    running_names,
)

__all__ = [
    "MemoryAccess",
    "ProcessHandle",
    "ProcessInfo",
    "ProcessMemory",
    "enumerate_processes",
    "find_pid",
    "running_names",
]
