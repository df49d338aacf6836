"""Tests for exact name filtering."""

from __future__ import annotations

from lockwatch.process_killer_helpers.process_filter import filter_processes_by_name
from tests.helpers.lockwatch_fakes import candidate


class TestFilterProcessesByName:
    def test_keeps_exact_matches_only(self) -> None:
        processes = [
            candidate(1, "WallpaperAerialsExtension"),
            candidate(2, "WallpaperAerialsExtensionHelper"),
            candidate(3, "Dock"),
            candidate(4, "WallpaperAerialsExtension"),
        ]

        result = filter_processes_by_name(processes, frozenset({"WallpaperAerialsExtension"}))

        assert [proc.pid for proc in result] == [1, 4]

    def test_multiple_targets(self) -> None:
        processes = [candidate(1, "a"), candidate(2, "b"), candidate(3, "c")]

        result = filter_processes_by_name(processes, frozenset({"a", "c"}))

        assert [proc.name for proc in result] == ["a", "c"]

    def test_case_sensitive(self) -> None:
        assert filter_processes_by_name([candidate(1, "Dock")], frozenset({"dock"})) == []
