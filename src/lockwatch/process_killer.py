"""
Process Terminator

Resolves target processes by exact image name and delivers a signal to each
match. Processes are enumerated fresh on every call because earlier matches
may have exited.

Usage:
    from lockwatch.process_killer import ProcessTerminator
    from lockwatch.policy import SignalKind

    ProcessTerminator().terminate({"WallpaperAerialsExtension"}, SignalKind.TERMINATE)
"""

from __future__ import annotations

import logging
import os
from typing import AbstractSet, Callable, List, Optional

from .errors import EnumerationError
from .policy import SignalKind
from .process_killer_helpers.process_discovery import list_running_processes
from .process_killer_helpers.process_filter import filter_processes_by_name
from .process_killer_helpers.process_models import ProcessCandidate
from .process_killer_helpers.process_terminator import signal_matching_processes

logger = logging.getLogger(__name__)

ProcessLister = Callable[..., List[ProcessCandidate]]


class ProcessTerminator:
    """Signals every live process whose name is in a target set.

    Fails open: enumeration failures count as "no matches" and per-process
    delivery failures are logged without affecting sibling matches.
    """

    def __init__(self, *, process_lister: Optional[ProcessLister] = None, exclude_pid: Optional[int] = None) -> None:
        self._process_lister = process_lister or list_running_processes
        self._exclude_pid = os.getpid() if exclude_pid is None else exclude_pid

    def terminate(self, names: AbstractSet[str], signal_kind: SignalKind) -> bool:
        """Return ``True`` if at least one matching process was signaled."""
        try:
            running = self._process_lister(exclude_pid=self._exclude_pid)
        except EnumerationError as exc:  # policy_guard: allow-silent-handler
            logger.info("%s", exc)
            return False

        matching = filter_processes_by_name(running, names)
        if not matching:
            logger.info("No running process matches %s", ", ".join(sorted(names)))
            return False

        signaled = signal_matching_processes(matching, signal_kind)
        logger.debug("Signaled %d of %d matching processes with %s", len(signaled), len(matching), signal_kind.signal_name)
        return bool(signaled)


__all__ = ["ProcessTerminator"]
