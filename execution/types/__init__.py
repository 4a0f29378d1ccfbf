"""
execution.types — small, dependency-light dataclasses shared by the host and
its callers (tooling, tests).

Public surface (re-exported):
    LogEvent : Dataclass — (address, name, args)
    Receipt  : Dataclass — result of a successful transaction
"""

from __future__ import annotations

from .events import LogEvent
from .result import Receipt

__all__ = [
    "LogEvent",
    "Receipt",
]
