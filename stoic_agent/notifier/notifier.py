"""Desktop notification sink."""

import asyncio
import sys
from typing import Protocol

from ..errors import NotificationError
from ..logging_config import get_logger
from ..models import NotificationRequest, NotificationResult

logger = get_logger(__name__)

DEFAULT_APP_NAME = "Stoic Agent"
DEFAULT_ACTION_WAIT = 30  # seconds to wait for a button click
MACOS_SOUND = "Glass"
LINUX_SOUND = "message-new-instant"


class INotifier(Protocol):
    """Displays notifications to the user."""

    async def notify(self, request: NotificationRequest) -> NotificationResult:
        """Show a notification. Raises NotificationError on failure."""
        ...


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


async def _reap(proc: asyncio.subprocess.Process) -> None:
    """Kill a still-running child and wait for it to exit."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass  # exited between the check and the kill
    await proc.wait()


def build_linux_command(
    request: NotificationRequest, app_name: str = DEFAULT_APP_NAME
) -> list[str]:
    """Build a notify-send invocation for the request."""
    argv = ["notify-send", f"--app-name={app_name}", "--urgency=normal"]
    if request.timeout_seconds:
        argv.append(f"--expire-time={request.timeout_seconds * 1000}")
    if request.sound:
        argv.append(f"--hint=string:sound-name:{LINUX_SOUND}")
    for action in request.actions:
        argv.append(f"--action={action.lower()}={action}")

    body = request.message
    if request.subtitle:
        body = f"{request.subtitle}\n{request.message}"
    argv.extend([request.title, body])
    return argv


def build_macos_command(request: NotificationRequest) -> list[str]:
    """Build an osascript invocation for the request (no action buttons)."""
    script = (
        f"display notification {_applescript_quote(request.message)} "
        f"with title {_applescript_quote(request.title)}"
    )
    if request.subtitle:
        script += f" subtitle {_applescript_quote(request.subtitle)}"
    if request.sound:
        script += f" sound name {_applescript_quote(MACOS_SOUND)}"
    return ["osascript", "-e", script]


class DesktopNotifier:
    """Shows notifications with notify-send (Linux) or osascript (macOS)."""

    def __init__(
        self,
        enabled: bool = True,
        app_name: str = DEFAULT_APP_NAME,
        platform: str | None = None,
        command_timeout: float = 5.0,
    ):
        self._enabled = enabled
        self._app_name = app_name
        self._platform = platform or sys.platform
        self._command_timeout = command_timeout

    def build_command(self, request: NotificationRequest) -> list[str]:
        """Return the argv for this platform."""
        if self._platform.startswith("linux"):
            return build_linux_command(request, self._app_name)
        if self._platform == "darwin":
            return build_macos_command(request)
        raise NotificationError(f"Notifications not supported on {self._platform}")

    def _waits_for_action(self, request: NotificationRequest) -> bool:
        return bool(request.actions) and self._platform.startswith("linux")

    async def notify(self, request: NotificationRequest) -> NotificationResult:
        """Show a notification and report the action the user picked, if any."""
        if not self._enabled:
            logger.info("Notifications are disabled by config. Skipping: %s", request.title)
            return NotificationResult(delivered=False)

        argv = self.build_command(request)
        waits = self._waits_for_action(request)
        timeout = self._command_timeout
        if waits:
            timeout += request.timeout_seconds or DEFAULT_ACTION_WAIT

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise NotificationError(f"{argv[0]} not available") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
        except asyncio.CancelledError:
            # Executor shutdown; don't leave the notification process behind
            await _reap(proc)
            raise
        except asyncio.TimeoutError:
            await _reap(proc)
            if waits:
                # Shown, but nobody clicked before the deadline
                logger.info("Notification '%s' got no response", request.title)
                return NotificationResult(delivered=True)
            raise NotificationError(
                f"{argv[0]} did not finish within {timeout:.0f}s"
            ) from None

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()
            raise NotificationError(
                f"{argv[0]} exited with {proc.returncode}: {detail}"
            )

        response = stdout.decode(errors="replace").strip().lower() or None
        logger.debug("Notification '%s' sent, response=%s", request.title, response)
        return NotificationResult(delivered=True, response=response)
