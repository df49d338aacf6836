"""macOS event sources built on PyObjC.

Lock and unlock arrive as distributed notifications
(``com.apple.screenIsUnlocked`` / ``com.apple.screenIsLocked``); display
topology changes come from the Quartz reconfiguration callback. Both are
delivered through the main thread's CoreFoundation run loop, which
``RunLoopPump`` drives from an asyncio task so the callbacks run on the
event loop thread.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from typing import Any, List, Optional

from ..errors import SubscriptionError
from ..policy import LockState
from ..scheduler import guarded
from .base import CallbackSubscription, DisplayCallback, DisplayChangeEvent, DisplayInfo, LockCallback

logger = logging.getLogger(__name__)

UNLOCK_NOTIFICATION = "com.apple.screenIsUnlocked"
LOCK_NOTIFICATION = "com.apple.screenIsLocked"
NOTIFICATION_STATES = {
    UNLOCK_NOTIFICATION: LockState.UNLOCKED,
    LOCK_NOTIFICATION: LockState.LOCKED,
}

MAX_ACTIVE_DISPLAYS = 32
DEFAULT_PUMP_INTERVAL_SECONDS = 0.05


def import_bridge(module_name: str) -> Any:
    """Import a PyObjC framework module or raise ``SubscriptionError``."""
    try:
        return importlib.import_module(module_name)
    except ImportError as exc:
        raise SubscriptionError.missing_bridge(module_name) from exc


class DistributedLockStateSource:
    """Screen lock/unlock notifications from the distributed notification center."""

    def __init__(self, foundation: Any = None) -> None:
        self._foundation = foundation or import_bridge("Foundation")

    def subscribe(self, callback: LockCallback) -> CallbackSubscription:
        center = self._foundation.NSDistributedNotificationCenter.defaultCenter()
        if center is None:
            raise SubscriptionError.registration_failed("distributed notification center", "center unavailable")

        def _on_notification(notification: Any) -> None:
            state = NOTIFICATION_STATES.get(str(notification.name()))
            if state is not None:
                callback(state)

        handler = guarded(_on_notification, "lock-state notification")
        tokens = []
        try:
            for name in NOTIFICATION_STATES:
                tokens.append(center.addObserverForName_object_queue_usingBlock_(name, None, None, handler))
        except Exception as exc:
            for token in tokens:
                center.removeObserver_(token)
            raise SubscriptionError.registration_failed("distributed notification center", str(exc)) from exc

        logger.debug("Registered for %s", ", ".join(NOTIFICATION_STATES))

        def _remove() -> None:
            for token in tokens:
                center.removeObserver_(token)

        return CallbackSubscription(_remove)


class QuartzDisplaySource:
    """Display reconfiguration events and active display queries via Quartz."""

    def __init__(self, quartz: Any = None) -> None:
        self._quartz = quartz or import_bridge("Quartz")

    def active_displays(self) -> List[DisplayInfo]:
        quartz = self._quartz
        error, display_ids, count = quartz.CGGetActiveDisplayList(MAX_ACTIVE_DISPLAYS, None, None)
        if error != 0:
            raise OSError(f"CGGetActiveDisplayList failed with error {error}")
        return [
            DisplayInfo(display_id=int(display_id), builtin=bool(quartz.CGDisplayIsBuiltin(display_id)))
            for display_id in list(display_ids)[:count]
        ]

    def subscribe(self, callback: DisplayCallback) -> CallbackSubscription:
        quartz = self._quartz

        def _on_reconfigure(display_id: int, flags: int, _user_info: Any) -> None:
            callback(
                DisplayChangeEvent(
                    display_id=int(display_id),
                    enabled=bool(flags & quartz.kCGDisplayEnabledFlag),
                    builtin=bool(quartz.CGDisplayIsBuiltin(display_id)),
                )
            )

        def _handler(display_id: int, flags: int, user_info: Any) -> None:
            guarded(lambda: _on_reconfigure(display_id, flags, user_info), "display reconfiguration")()

        error = quartz.CGDisplayRegisterReconfigurationCallback(_handler, None)
        if error != 0:
            raise SubscriptionError.registration_failed("display reconfiguration", f"CGError {error}")
        logger.debug("Registered display reconfiguration callback")

        return CallbackSubscription(lambda: quartz.CGDisplayRemoveReconfigurationCallback(_handler, None))


class RunLoopPump:
    """Drains the main CoreFoundation run loop from an asyncio task."""

    def __init__(self, quartz: Any = None, *, interval_seconds: float = DEFAULT_PUMP_INTERVAL_SECONDS) -> None:
        self._quartz = quartz or import_bridge("Quartz")
        self._interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:  # policy_guard: allow-silent-handler
            logger.debug("Run loop pump stopped")

    async def _run(self) -> None:
        quartz = self._quartz
        while True:
            quartz.CFRunLoopRunInMode(quartz.kCFRunLoopDefaultMode, 0, False)
            await asyncio.sleep(self._interval_seconds)
