"""Enumeration of running processes via psutil."""

import logging
import os
from typing import Any, List, Optional

import psutil

from ..errors import EnumerationError
from .process_models import ProcessCandidate, ProcessRecord

logger = logging.getLogger(__name__)


def list_running_processes(*, exclude_pid: Optional[int] = None) -> List[ProcessCandidate]:
    """
    Return every running process whose image name can be read.

    PID 0 and ``exclude_pid`` (the current process by default) are skipped, as
    are processes that exit or deny access while being inspected.

    Raises:
        EnumerationError: When the process table itself cannot be read.
    """
    if exclude_pid is None:
        exclude_pid = os.getpid()

    try:
        iterator = psutil.process_iter(["pid", "name"])
        candidates = [candidate for candidate in (_to_candidate(proc) for proc in iterator) if candidate is not None]
    except (psutil.Error, OSError) as exc:
        raise EnumerationError(f"Unable to enumerate running processes: {exc}") from exc

    return [candidate for candidate in candidates if candidate.pid not in (0, exclude_pid)]


def _to_candidate(proc: Any) -> Optional[ProcessCandidate]:
    try:
        info = proc.info
    except (psutil.NoSuchProcess, psutil.AccessDenied):  # policy_guard: allow-silent-handler
        return None
    pid = info.get("pid")
    name = info.get("name")
    if pid is None or not name:
        logger.debug("Skipping process without readable name (pid=%s)", pid)
        return None
    return ProcessCandidate(record=ProcessRecord(pid=int(pid), name=str(name)), handle=proc)
