"""Shared utilities."""

from .moving_average import MovingAverage

__all__ = ["MovingAverage"]
