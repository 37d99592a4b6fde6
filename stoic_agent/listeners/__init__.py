"""Listeners module."""

from .cpu import CpuListener, IListener, classify

__all__ = ["CpuListener", "IListener", "classify"]
