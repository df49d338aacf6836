"""Single-flight flag shared by the display and timeout paths."""

from __future__ import annotations

import threading


class PendingKillIntent:
    """Boolean flag whose only mutations are atomic exchanges.

    ``take()`` reads the current value and clears it in one step, so when the
    display-ready path and the timeout path race, exactly one of them
    observes ``True``. Safe to use from several threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = False

    def exchange(self, value: bool) -> bool:
        """Store ``value`` and return the previous value atomically."""
        with self._lock:
            previous = self._value
            self._value = value
        return previous

    def arm(self) -> bool:
        """Set the flag; return ``True`` only if it was previously clear."""
        return not self.exchange(True)

    def take(self) -> bool:
        """Clear the flag; return ``True`` only for the caller that cleared it."""
        return self.exchange(False)

    @property
    def is_set(self) -> bool:
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"PendingKillIntent(is_set={self.is_set})"


__all__ = ["PendingKillIntent"]
