"""Wiring of policy, event sources and the arbiter into a long-running daemon."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import List, Optional

from .errors import SubscriptionError
from .escalation import EscalationController, Terminator
from .event_sources.base import DisplaySource, LockStateSource, Subscription
from .policy import TerminationPolicy
from .process_killer import ProcessTerminator
from .scheduler import AsyncioScheduler, Scheduler
from .trigger_arbiter import TriggerArbiter

logger = logging.getLogger(__name__)


class LockWatchDaemon:
    """Subscribes the trigger arbiter to its event sources.

    The lock source is always subscribed; the display source only in
    display-wait mode. ``stop`` closes every subscription.
    """

    def __init__(
        self,
        policy: TerminationPolicy,
        *,
        lock_source: LockStateSource,
        display_source: Optional[DisplaySource],
        scheduler: Scheduler,
        terminator: Optional[Terminator] = None,
    ) -> None:
        self.policy = policy
        self._lock_source = lock_source
        self._display_source = display_source
        self._escalation = EscalationController(policy, terminator or ProcessTerminator(), scheduler)
        self.arbiter = TriggerArbiter(
            policy,
            self._escalation,
            scheduler,
            display_source=display_source if policy.wait_for_displays else None,
        )
        self._subscriptions: List[Subscription] = []

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def start(self) -> None:
        """Subscribe to the event sources.

        Raises:
            SubscriptionError: If any subscription cannot be established; any
                subscription made before the failure is closed.
        """
        if self.running:
            return
        try:
            self._subscriptions.append(self._lock_source.subscribe(self.arbiter.on_lock_state))
            if self.policy.wait_for_displays:
                self._subscriptions.append(self._display_source.subscribe(self.arbiter.on_display_change))
                logger.info("Registered display reconfiguration callback")
        except SubscriptionError:
            self.stop()
            raise
        except Exception as exc:
            self.stop()
            raise SubscriptionError.registration_failed("event sources", str(exc)) from exc

        suffix = " (will wait for external displays)" if self.policy.wait_for_displays else ""
        logger.info("Listening for %s events%s...", self.policy.trigger.value, suffix)

    def stop(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            try:
                subscription.close()
            except Exception:  # policy_guard: allow-silent-handler
                logger.exception("Failed to close subscription %r", subscription)


async def run_daemon(policy: TerminationPolicy, *, stop_event: Optional[asyncio.Event] = None) -> None:
    """Run the daemon on the current event loop until ``stop_event`` is set.

    SIGINT and SIGTERM set the stop event when signal handlers can be
    installed on the loop.

    Raises:
        SubscriptionError: If the platform event sources are unavailable.
    """
    from .event_sources.factory import create_event_sources

    loop = asyncio.get_running_loop()
    stop_event = stop_event or asyncio.Event()
    sources = create_event_sources()

    daemon = LockWatchDaemon(
        policy,
        lock_source=sources.lock_source,
        display_source=sources.display_source,
        scheduler=AsyncioScheduler(loop),
    )
    daemon.start()
    installed = _install_stop_handlers(loop, stop_event)
    if sources.run_loop_pump is not None:
        sources.run_loop_pump.start()
    try:
        await stop_event.wait()
        logger.info("Stopping lock watcher")
    finally:
        if sources.run_loop_pump is not None:
            await sources.run_loop_pump.stop()
        daemon.stop()
        for signum in installed:
            loop.remove_signal_handler(signum)


def _install_stop_handlers(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> List[int]:
    installed: List[int] = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except (NotImplementedError, RuntimeError, ValueError):  # policy_guard: allow-silent-handler
            # Not supported off the main thread or on some platforms.
            logger.debug("Cannot install handler for %s", signal.Signals(signum).name)
            continue
        installed.append(signum)
    return installed


__all__ = ["LockWatchDaemon", "run_daemon"]
