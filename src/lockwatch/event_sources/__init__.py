"""Event sources feeding the trigger arbiter."""

from .base import (
    CallbackSubscription,
    DisplayCallback,
    DisplayChangeEvent,
    DisplayInfo,
    DisplaySource,
    LockCallback,
    LockStateSource,
    Subscription,
    has_external_display,
)

__all__ = [
    "CallbackSubscription",
    "DisplayCallback",
    "DisplayChangeEvent",
    "DisplayInfo",
    "DisplaySource",
    "LockCallback",
    "LockStateSource",
    "Subscription",
    "has_external_display",
]
