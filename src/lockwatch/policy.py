"""Termination policy and the enums it is built from."""

from __future__ import annotations

import signal
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .config.errors import ConfigurationError

DEFAULT_PROCESS_NAME = "WallpaperAerialsExtension"
DEFAULT_DISPLAY_TIMEOUT_MS = 5000
DEFAULT_SETTLE_DELAY_MS = 1500


class SignalKind(Enum):
    """Signals the terminator can deliver, valued by POSIX signal number."""

    TERMINATE = signal.SIGTERM
    KILL = signal.SIGKILL

    @property
    def signal_name(self) -> str:
        return signal.Signals(self.value).name

    @classmethod
    def parse(cls, text: str) -> "SignalKind":
        """Accept ``TERM``/``SIGTERM``/``KILL``/``SIGKILL`` in any case."""
        normalized = text.strip().upper()
        if normalized.startswith("SIG"):
            normalized = normalized[3:]
        if normalized == "TERM":
            return cls.TERMINATE
        if normalized == "KILL":
            return cls.KILL
        raise ConfigurationError.invalid_value("signal", text, "Expected TERM or KILL")


class LockState(Enum):
    UNLOCKED = "unlocked"
    LOCKED = "locked"


class TriggerEvent(Enum):
    """Lock-state transition that starts a termination cycle."""

    ON_UNLOCK = "unlock"
    ON_LOCK = "lock"

    @classmethod
    def parse(cls, text: str) -> "TriggerEvent":
        normalized = text.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ConfigurationError.invalid_value("event", text, "Expected unlock or lock")

    @property
    def lock_state(self) -> LockState:
        return LockState.UNLOCKED if self is TriggerEvent.ON_UNLOCK else LockState.LOCKED

    def matches(self, state: LockState) -> bool:
        return self.lock_state is state


@dataclass(frozen=True)
class TerminationPolicy:
    """Immutable description of what to kill, how, and when.

    Durations are whole milliseconds. ``grace_period_ms == 0`` disables the
    force stage; ``force_signal`` may also be ``None`` to disable it.
    """

    process_names: frozenset[str]
    primary_signal: SignalKind = SignalKind.TERMINATE
    force_signal: Optional[SignalKind] = SignalKind.KILL
    grace_period_ms: int = 0
    trigger: TriggerEvent = TriggerEvent.ON_UNLOCK
    wait_for_displays: bool = False
    display_timeout_ms: int = DEFAULT_DISPLAY_TIMEOUT_MS
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS
    verbose: bool = False

    def __post_init__(self) -> None:
        names = self.process_names
        if isinstance(names, str) or not isinstance(names, frozenset):
            raise ConfigurationError.invalid_value("process_names", names, "Expected a frozenset of names")
        if not names:
            raise ConfigurationError.missing_value("process_names", "at least one target process is required")
        for name in names:
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError.invalid_value("process_names", name, "Process names must be non-blank strings")
        for field_name in ("grace_period_ms", "display_timeout_ms", "settle_delay_ms"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError.invalid_value(field_name, value, "Must be a non-negative integer")

    @classmethod
    def for_processes(cls, names: Iterable[str], **kwargs) -> "TerminationPolicy":
        return cls(process_names=frozenset(names), **kwargs)

    @property
    def escalates(self) -> bool:
        return self.force_signal is not None and self.grace_period_ms > 0

    @property
    def grace_period_seconds(self) -> float:
        return self.grace_period_ms / 1000.0

    @property
    def display_timeout_seconds(self) -> float:
        return self.display_timeout_ms / 1000.0

    @property
    def settle_delay_seconds(self) -> float:
        return self.settle_delay_ms / 1000.0


__all__ = [
    "DEFAULT_DISPLAY_TIMEOUT_MS",
    "DEFAULT_PROCESS_NAME",
    "DEFAULT_SETTLE_DELAY_MS",
    "LockState",
    "SignalKind",
    "TerminationPolicy",
    "TriggerEvent",
]
