from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class ProcessRecord:
    """A live process seen during one enumeration; never cached across calls."""

    pid: int
    name: str


class SignalTarget(Protocol):
    """Minimal contract of the psutil process handle the terminator signals."""

    pid: int

    def send_signal(self, sig: Any) -> None: ...


@dataclass(frozen=True)
class ProcessCandidate:
    """Enumerated process paired with the handle used to signal it."""

    record: ProcessRecord
    handle: SignalTarget

    @property
    def pid(self) -> int:
        return self.record.pid

    @property
    def name(self) -> str:
        return self.record.name
