"""Scheduling module."""

from .timer import RecurringTimer, TickCallback

__all__ = ["RecurringTimer", "TickCallback"]
