"""Tests for the name-based process terminator."""

from __future__ import annotations

import signal
from unittest.mock import MagicMock, patch

import psutil
import pytest

from lockwatch.errors import EnumerationError
from lockwatch.policy import SignalKind
from lockwatch.process_killer import ProcessTerminator
from tests.helpers.lockwatch_fakes import FakeProcess


def _terminator_over(processes, exclude_pid=99999):
    return ProcessTerminator(exclude_pid=exclude_pid), patch("psutil.process_iter", return_value=iter(processes))


class TestProcessTerminator:
    def test_signals_every_exact_match(self) -> None:
        """All processes with the exact name receive the signal."""
        first = FakeProcess(100, "WallpaperAerialsExtension")
        second = FakeProcess(101, "WallpaperAerialsExtension")
        other = FakeProcess(102, "Finder")
        terminator, patcher = _terminator_over([first, second, other])

        with patcher:
            result = terminator.terminate(frozenset({"WallpaperAerialsExtension"}), SignalKind.TERMINATE)

        assert result is True
        assert first.signals == [signal.SIGTERM]
        assert second.signals == [signal.SIGTERM]
        assert other.signals == []

    @pytest.mark.parametrize(
        "name",
        ["WallpaperAerialsExtensionHelper", "wallpaperaerialsextension", "AerialsExtension", "WallpaperAerialsExtension "],
    )
    def test_matching_is_exact(self, name) -> None:
        """Substrings, prefixes and case variants never match."""
        near_miss = FakeProcess(200, name)
        terminator, patcher = _terminator_over([near_miss])

        with patcher:
            result = terminator.terminate(frozenset({"WallpaperAerialsExtension"}), SignalKind.KILL)

        assert result is False
        assert near_miss.signals == []

    def test_returns_false_without_matches(self) -> None:
        terminator, patcher = _terminator_over([FakeProcess(1, "launchd")])

        with patcher:
            assert terminator.terminate(frozenset({"absent"}), SignalKind.TERMINATE) is False

    def test_delivery_failure_does_not_stop_siblings(self) -> None:
        """One failed delivery is reported; the other matches are still signaled."""
        gone = FakeProcess(300, "target", send_error=psutil.NoSuchProcess(300))
        denied = FakeProcess(301, "target", send_error=psutil.AccessDenied(301))
        alive = FakeProcess(302, "target")
        terminator, patcher = _terminator_over([gone, denied, alive])

        with patcher:
            result = terminator.terminate(frozenset({"target"}), SignalKind.TERMINATE)

        assert result is True
        assert alive.signals == [signal.SIGTERM]

    def test_all_deliveries_failing_returns_false(self) -> None:
        denied = FakeProcess(301, "target", send_error=psutil.AccessDenied(301))
        terminator, patcher = _terminator_over([denied])

        with patcher:
            assert terminator.terminate(frozenset({"target"}), SignalKind.TERMINATE) is False

    def test_enumeration_failure_counts_as_no_matches(self) -> None:
        """Failure to list processes is non-fatal."""
        terminator = ProcessTerminator(exclude_pid=1)

        with patch("psutil.process_iter", side_effect=psutil.AccessDenied()):
            assert terminator.terminate(frozenset({"target"}), SignalKind.TERMINATE) is False

    def test_custom_lister_enumeration_error(self) -> None:
        lister = MagicMock(side_effect=EnumerationError("no table"))
        terminator = ProcessTerminator(process_lister=lister, exclude_pid=1)

        assert terminator.terminate(frozenset({"target"}), SignalKind.TERMINATE) is False
        lister.assert_called_once_with(exclude_pid=1)

    def test_never_signals_itself(self) -> None:
        me = FakeProcess(4242, "python3")
        terminator, patcher = _terminator_over([me], exclude_pid=4242)

        with patcher:
            assert terminator.terminate(frozenset({"python3"}), SignalKind.KILL) is False
        assert me.signals == []

    def test_resolves_fresh_on_every_call(self) -> None:
        """No caching between calls: a process that exited is not signaled again."""
        first = FakeProcess(500, "target")
        terminator = ProcessTerminator(exclude_pid=1)

        with patch("psutil.process_iter", side_effect=[iter([first]), iter([])]) as process_iter:
            assert terminator.terminate(frozenset({"target"}), SignalKind.TERMINATE) is True
            assert terminator.terminate(frozenset({"target"}), SignalKind.KILL) is False

        assert process_iter.call_count == 2
        assert first.signals == [signal.SIGTERM]
