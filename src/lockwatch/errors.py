"""Runtime error types for the lock watcher.

``SubscriptionError`` is fatal and ends the daemon. ``EnumerationError`` and
``DeliveryError`` are recovered inside the event-handling path and only
logged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .policy import SignalKind


class LockWatchError(RuntimeError):
    """Base class for lock watcher runtime failures.

    Keyword arguments are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Lock watcher error"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class SubscriptionError(LockWatchError):
    """Cannot attach to an operating system event source."""

    @classmethod
    def unsupported_platform(cls, platform: str) -> "SubscriptionError":
        return cls(f"Lock and display notifications are not available on platform {platform!r}", platform=platform)

    @classmethod
    def missing_bridge(cls, module_name: str) -> "SubscriptionError":
        return cls(f"Unable to import {module_name}; install the pyobjc frameworks", module_name=module_name)

    @classmethod
    def registration_failed(cls, source: str, detail: str = "") -> "SubscriptionError":
        msg = f"Failed to subscribe to {source}"
        if detail:
            msg += f": {detail}"
        return cls(msg, source=source)


class EnumerationError(LockWatchError):
    """Cannot list the running processes."""


class DeliveryError(LockWatchError):
    """A signal could not be delivered to one process."""

    def __init__(
        self,
        message: str = "",
        *,
        pid: int | None = None,
        name: str | None = None,
        signal_kind: "SignalKind | None" = None,
    ) -> None:
        super().__init__(message, pid=pid, name=name, signal_kind=signal_kind)

    @classmethod
    def for_process(cls, pid: int, name: str, signal_kind: "SignalKind", reason: str) -> "DeliveryError":
        return cls(
            f"Failed to send {signal_kind.signal_name} to {name} (PID {pid}): {reason}",
            pid=pid,
            name=name,
            signal_kind=signal_kind,
        )


__all__ = [
    "DeliveryError",
    "EnumerationError",
    "LockWatchError",
    "SubscriptionError",
]
