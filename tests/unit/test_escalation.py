"""Tests for the two-stage escalation controller."""

from __future__ import annotations

import pytest

from lockwatch.escalation import EscalationController
from lockwatch.policy import SignalKind
from tests.helpers.lockwatch_fakes import RecordingTerminator


class TestEscalate:
    def test_primary_only_without_grace_period(self, make_policy, scheduler) -> None:
        """grace_period_ms == 0 never sends the force signal."""
        terminator = RecordingTerminator(clock=scheduler)
        controller = EscalationController(make_policy(grace_period_ms=0), terminator, scheduler)

        assert controller.escalate() is None
        scheduler.advance(60)

        assert terminator.signals == [SignalKind.TERMINATE]

    def test_force_follows_grace_period(self, make_policy, scheduler) -> None:
        """The force call uses the force signal, no earlier than the grace period."""
        terminator = RecordingTerminator(clock=scheduler)
        policy = make_policy(grace_period_ms=300, force_signal=SignalKind.KILL)
        controller = EscalationController(policy, terminator, scheduler)

        controller.escalate()
        assert terminator.signals == [SignalKind.TERMINATE]

        scheduler.advance(0.299)
        assert len(terminator.calls) == 1

        scheduler.advance(0.01)
        assert terminator.signals == [SignalKind.TERMINATE, SignalKind.KILL]
        assert terminator.calls[1][2] >= 0.3

    @pytest.mark.parametrize("grace_period_ms", [0, 300, 10_000])
    def test_no_force_when_primary_matched_nothing(self, make_policy, scheduler, grace_period_ms) -> None:
        """If the primary stage signaled nothing, the force signal is never sent."""
        terminator = RecordingTerminator(results=[False], clock=scheduler)
        controller = EscalationController(make_policy(grace_period_ms=grace_period_ms), terminator, scheduler)

        assert controller.escalate() is None
        scheduler.advance(60)

        assert terminator.signals == [SignalKind.TERMINATE]

    def test_force_signal_disabled(self, make_policy, scheduler) -> None:
        terminator = RecordingTerminator(clock=scheduler)
        controller = EscalationController(make_policy(grace_period_ms=300, force_signal=None), terminator, scheduler)

        controller.escalate()
        scheduler.advance(1)

        assert terminator.signals == [SignalKind.TERMINATE]

    def test_uses_configured_signal_kinds_and_names(self, make_policy, scheduler) -> None:
        terminator = RecordingTerminator(clock=scheduler)
        policy = make_policy(
            names=["a", "b"],
            primary_signal=SignalKind.KILL,
            force_signal=SignalKind.TERMINATE,
            grace_period_ms=50,
        )
        controller = EscalationController(policy, terminator, scheduler)

        controller.escalate()
        scheduler.advance(0.05)

        assert [(names, kind) for names, kind, _ in terminator.calls] == [
            (frozenset({"a", "b"}), SignalKind.KILL),
            (frozenset({"a", "b"}), SignalKind.TERMINATE),
        ]

    def test_escalate_does_not_block(self, make_policy, scheduler) -> None:
        """The grace period is a scheduled callback, not a sleep."""
        terminator = RecordingTerminator(clock=scheduler)
        controller = EscalationController(make_policy(grace_period_ms=10_000), terminator, scheduler)

        handle = controller.escalate()

        assert handle is scheduler.timers[0]
        assert scheduler.now == 0.0
