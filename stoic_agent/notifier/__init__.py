"""Notifier module."""

from .notifier import DesktopNotifier, INotifier, build_linux_command, build_macos_command

__all__ = ["DesktopNotifier", "INotifier", "build_linux_command", "build_macos_command"]
