"""
Trigger Arbiter

Decides when a termination cycle escalates. Three independent sources feed
it: lock-state notifications, display-attach notifications and a timeout
timer. In display-wait mode the display path and the timeout path race to
consume a single ``PendingKillIntent``; whichever clears it first escalates,
the other becomes a no-op.
"""

from __future__ import annotations

import functools
import logging
import threading
from enum import Enum
from typing import Optional, Protocol

from .event_sources.base import DisplayChangeEvent, DisplaySource, has_external_display
from .pending_kill_intent import PendingKillIntent
from .policy import LockState, TerminationPolicy
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class ArbiterState(Enum):
    IDLE = "idle"
    AWAITING_DISPLAY_CONFIRMATION = "awaiting_display_confirmation"


class Escalator(Protocol):
    def escalate(self) -> object: ...


class TriggerArbiter:
    """Single-flight coordinator between trigger, display and timeout events."""

    def __init__(
        self,
        policy: TerminationPolicy,
        escalation: Escalator,
        scheduler: Scheduler,
        *,
        display_source: Optional[DisplaySource] = None,
        intent: Optional[PendingKillIntent] = None,
    ) -> None:
        if policy.wait_for_displays and display_source is None:
            raise ValueError("display_source is required when waiting for displays")
        self._policy = policy
        self._escalation = escalation
        self._scheduler = scheduler
        self._display_source = display_source
        self._intent = intent or PendingKillIntent()
        self._timeout_handle: Optional[TimerHandle] = None
        self._cycle = 0
        self._cycle_lock = threading.Lock()

    @property
    def state(self) -> ArbiterState:
        if self._intent.is_set:
            return ArbiterState.AWAITING_DISPLAY_CONFIRMATION
        return ArbiterState.IDLE

    def on_lock_state(self, lock_state: LockState) -> None:
        """Handle a lock-state notification."""
        policy = self._policy
        if not policy.trigger.matches(lock_state):
            logger.debug("Ignoring %s notification", lock_state.value)
            return

        logger.info("%s detected", policy.trigger.value)

        if not policy.wait_for_displays:
            self._escalate("trigger")
            return

        if self._external_display_present():
            logger.info("External displays already online, escalating after %dms settle delay", policy.settle_delay_ms)
            self._scheduler.call_later(policy.settle_delay_seconds, self._on_settle_delay)
            return

        with self._cycle_lock:
            if not self._intent.arm():
                logger.info("Already waiting for external displays; ignoring repeated %s", policy.trigger.value)
                return
            self._cycle += 1
            self._timeout_handle = self._scheduler.call_later(
                policy.display_timeout_seconds,
                functools.partial(self._on_display_timeout, self._cycle),
            )

        logger.info(
            "State %s -> %s (timeout: %dms)",
            ArbiterState.IDLE.value,
            ArbiterState.AWAITING_DISPLAY_CONFIRMATION.value,
            policy.display_timeout_ms,
        )

    def on_display_change(self, event: DisplayChangeEvent) -> None:
        """Handle a display reconfiguration notification."""
        if not event.is_external_attach:
            logger.debug("Ignoring display change %s", event)
            return
        with self._cycle_lock:
            if not self._intent.take():
                logger.debug("External display %s enabled with no pending intent", event.display_id)
                return
            handle, self._timeout_handle = self._timeout_handle, None
        if handle is not None:
            handle.cancel()
        logger.info("External display enabled (ID: %s), escalating now", event.display_id)
        self._escalate("display attach")

    def _on_display_timeout(self, cycle: int) -> None:
        with self._cycle_lock:
            if cycle != self._cycle:
                logger.debug("Ignoring display timeout from an earlier cycle")
                return
            if not self._intent.take():
                logger.debug("Display timeout fired after the intent was consumed")
                return
            self._timeout_handle = None
        logger.info("Timeout reached after %dms, escalating", self._policy.display_timeout_ms)
        self._escalate("display timeout")

    def _on_settle_delay(self) -> None:
        logger.info("Settle delay complete, escalating")
        self._escalate("settle delay")

    def _external_display_present(self) -> bool:
        try:
            displays = self._display_source.active_displays()
        except Exception:  # policy_guard: allow-silent-handler
            logger.exception("Failed to query active displays; waiting for display events")
            return False
        return has_external_display(displays)

    def _escalate(self, reason: str) -> None:
        logger.debug("Escalating (%s)", reason)
        try:
            self._escalation.escalate()
        except Exception:  # policy_guard: allow-silent-handler
            logger.exception("Escalation failed (%s)", reason)


__all__ = ["ArbiterState", "TriggerArbiter"]
