"""Select the event sources for the current platform."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..errors import SubscriptionError
from .base import DisplaySource, LockStateSource

if TYPE_CHECKING:
    from .macos import RunLoopPump

logger = logging.getLogger(__name__)


@dataclass
class PlatformEventSources:
    lock_source: LockStateSource
    display_source: DisplaySource
    run_loop_pump: Optional["RunLoopPump"] = None


def create_event_sources(platform: Optional[str] = None) -> PlatformEventSources:
    """
    Build the lock and display sources for ``platform`` (default ``sys.platform``).

    Raises:
        SubscriptionError: On platforms without lock notifications, or when
            the PyObjC bridge is not installed.
    """
    platform = platform or sys.platform
    if platform != "darwin":
        raise SubscriptionError.unsupported_platform(platform)

    from .macos import DistributedLockStateSource, QuartzDisplaySource, RunLoopPump, import_bridge

    foundation = import_bridge("Foundation")
    quartz = import_bridge("Quartz")
    logger.debug("Using PyObjC event sources")
    return PlatformEventSources(
        lock_source=DistributedLockStateSource(foundation),
        display_source=QuartzDisplaySource(quartz),
        run_loop_pump=RunLoopPump(quartz),
    )
