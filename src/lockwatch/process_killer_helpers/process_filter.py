"""Filter helpers for the process terminator."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List

from .process_models import ProcessCandidate


def filter_processes_by_name(processes: Iterable[ProcessCandidate], names: AbstractSet[str]) -> List[ProcessCandidate]:
    """Return processes whose image name equals one of ``names``.

    Matching is exact and case-sensitive: no substring, prefix or
    case folding.
    """
    return [proc for proc in processes if proc.name in names]
