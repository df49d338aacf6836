"""Terminate named processes in response to screen lock or unlock."""

from .policy import LockState, SignalKind, TerminationPolicy, TriggerEvent

__version__ = "0.1.0"

__all__ = [
    "LockState",
    "SignalKind",
    "TerminationPolicy",
    "TriggerEvent",
    "__version__",
]
