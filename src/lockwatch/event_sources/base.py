"""Contracts for the lock-state and display-topology event sources."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from ..policy import LockState


@dataclass(frozen=True)
class DisplayInfo:
    """An active display and whether it is the built-in panel."""

    display_id: int
    builtin: bool


@dataclass(frozen=True)
class DisplayChangeEvent:
    """Topology change for one display."""

    display_id: int
    enabled: bool
    builtin: bool

    @property
    def is_external_attach(self) -> bool:
        return self.enabled and not self.builtin


LockCallback = Callable[[LockState], None]
DisplayCallback = Callable[[DisplayChangeEvent], None]


class Subscription(Protocol):
    def close(self) -> None: ...


class LockStateSource(Protocol):
    def subscribe(self, callback: LockCallback) -> Subscription: ...


class DisplaySource(Protocol):
    def subscribe(self, callback: DisplayCallback) -> Subscription: ...

    def active_displays(self) -> List[DisplayInfo]: ...


class CallbackSubscription:
    """Subscription that runs ``on_close`` the first time it is closed."""

    def __init__(self, on_close: Optional[Callable[[], None]] = None) -> None:
        self._on_close = on_close
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            on_close = self._on_close
        if on_close is not None:
            on_close()


def has_external_display(displays: List[DisplayInfo]) -> bool:
    return any(not display.builtin for display in displays)
