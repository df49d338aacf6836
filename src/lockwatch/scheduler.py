"""One-shot deferred callbacks on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Timer service: run ``callback`` once after ``delay_seconds``."""

    def call_later(self, delay_seconds: float, callback: Callback) -> TimerHandle: ...


def guarded(callback: Callback, description: str) -> Callback:
    """Wrap ``callback`` so an exception is logged instead of escaping into the loop."""

    def _run() -> None:
        try:
            callback()
        except Exception:  # policy_guard: allow-silent-handler
            logger.exception("Unhandled error in %s", description)

    return _run


class _ThreadSafeHandle:
    """Handle for a timer armed from outside the loop thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._lock = threading.Lock()
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False

    def attach(self, handle: asyncio.TimerHandle) -> None:
        with self._lock:
            if self._cancelled:
                handle.cancel()
                return
            self._handle = handle

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            handle = self._handle
        if handle is not None:
            self._loop.call_soon_threadsafe(handle.cancel)


class AsyncioScheduler:
    """``Scheduler`` backed by ``loop.call_later``; never blocks the caller."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def call_later(self, delay_seconds: float, callback: Callback) -> TimerHandle:
        wrapped = guarded(callback, getattr(callback, "__qualname__", "scheduled callback"))
        if self._on_loop_thread():
            return self._loop.call_later(max(delay_seconds, 0.0), wrapped)

        proxy = _ThreadSafeHandle(self._loop)
        self._loop.call_soon_threadsafe(lambda: proxy.attach(self._loop.call_later(max(delay_seconds, 0.0), wrapped)))
        return proxy

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:  # policy_guard: allow-silent-handler
            return False
