"""Deliver a signal to each matched process, one failure at a time."""

import logging
from typing import List

import psutil

from ..errors import DeliveryError
from ..policy import SignalKind
from .process_models import ProcessCandidate

logger = logging.getLogger(__name__)


def signal_matching_processes(matching_processes: List[ProcessCandidate], signal_kind: SignalKind) -> List[int]:
    """
    Send ``signal_kind`` to every matched process.

    A failure for one process is logged and does not stop delivery to the
    remaining matches.

    Returns:
        PIDs that were signaled successfully
    """
    signaled: List[int] = []
    for proc in matching_processes:
        try:
            deliver_signal(proc, signal_kind)
        except DeliveryError as exc:  # policy_guard: allow-silent-handler
            logger.info("%s", exc)
            continue
        logger.info("Sent %s to %s (PID %s)", signal_kind.signal_name, proc.name, proc.pid)
        signaled.append(proc.pid)
    return signaled


def deliver_signal(proc: ProcessCandidate, signal_kind: SignalKind) -> None:
    """Send one signal, translating psutil failures into ``DeliveryError``."""
    try:
        proc.handle.send_signal(signal_kind.value)
    except psutil.NoSuchProcess as exc:
        raise DeliveryError.for_process(proc.pid, proc.name, signal_kind, "process no longer exists") from exc
    except psutil.AccessDenied as exc:
        raise DeliveryError.for_process(proc.pid, proc.name, signal_kind, "permission denied") from exc
    except (psutil.Error, OSError) as exc:
        raise DeliveryError.for_process(proc.pid, proc.name, signal_kind, str(exc)) from exc
