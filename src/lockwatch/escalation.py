"""Two-stage signal escalation: primary signal, then an optional forced one."""

from __future__ import annotations

import logging
from typing import AbstractSet, Optional, Protocol

from .policy import SignalKind, TerminationPolicy
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class Terminator(Protocol):
    def terminate(self, names: AbstractSet[str], signal_kind: SignalKind) -> bool: ...


class EscalationController:
    """Drives a ``Terminator`` through the primary and force stages.

    The grace period is a scheduled callback, never a sleep, so escalating
    from inside an event callback does not stall the event loop.
    """

    def __init__(self, policy: TerminationPolicy, terminator: Terminator, scheduler: Scheduler) -> None:
        self._policy = policy
        self._terminator = terminator
        self._scheduler = scheduler

    def escalate(self) -> Optional[TimerHandle]:
        """Send the primary signal and schedule the force stage if it applies.

        Returns the timer handle of the scheduled force stage, or ``None`` when
        nothing was scheduled.
        """
        policy = self._policy
        any_signaled = self._terminator.terminate(policy.process_names, policy.primary_signal)
        if not any_signaled:
            logger.info("Primary %s matched no process; skipping force stage", policy.primary_signal.signal_name)
            return None
        if not policy.escalates:
            return None

        logger.info(
            "Scheduling %s in %dms",
            policy.force_signal.signal_name,
            policy.grace_period_ms,
        )
        return self._scheduler.call_later(policy.grace_period_seconds, self._force)

    def _force(self) -> None:
        policy = self._policy
        if policy.force_signal is None:
            return
        logger.info("Grace period elapsed; sending %s", policy.force_signal.signal_name)
        self._terminator.terminate(policy.process_names, policy.force_signal)


__all__ = ["EscalationController", "Terminator"]
