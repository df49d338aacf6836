"""Tests for process enumeration."""

from __future__ import annotations

from unittest.mock import patch

import psutil
import pytest

from lockwatch.errors import EnumerationError
from lockwatch.process_killer_helpers.process_discovery import list_running_processes
from tests.helpers.lockwatch_fakes import FakeProcess


class TestListRunningProcesses:
    def test_builds_records(self) -> None:
        procs = [FakeProcess(10, "Dock"), FakeProcess(11, "Finder")]

        with patch("psutil.process_iter", return_value=iter(procs)) as process_iter:
            result = list_running_processes(exclude_pid=1)

        process_iter.assert_called_once_with(["pid", "name"])
        assert [(c.pid, c.name) for c in result] == [(10, "Dock"), (11, "Finder")]
        assert result[0].handle is procs[0]

    def test_skips_pid_zero_excluded_and_nameless(self) -> None:
        procs = [FakeProcess(0, "kernel_task"), FakeProcess(77, "self"), FakeProcess(12, None), FakeProcess(13, "ok")]

        with patch("psutil.process_iter", return_value=iter(procs)):
            result = list_running_processes(exclude_pid=77)

        assert [c.pid for c in result] == [13]

    def test_excludes_current_pid_by_default(self) -> None:
        procs = [FakeProcess(123, "me"), FakeProcess(124, "other")]

        with patch("os.getpid", return_value=123), patch("psutil.process_iter", return_value=iter(procs)):
            result = list_running_processes()

        assert [c.pid for c in result] == [124]

    @pytest.mark.parametrize("error", [psutil.AccessDenied(), OSError("EAGAIN")])
    def test_wraps_enumeration_failures(self, error) -> None:
        with patch("psutil.process_iter", side_effect=error):
            with pytest.raises(EnumerationError, match="enumerate"):
                list_running_processes(exclude_pid=1)
