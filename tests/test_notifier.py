"""Tests for DesktopNotifier."""

import asyncio
import shutil
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from stoic_agent.errors import NotificationError
from stoic_agent.models import NotificationRequest
from stoic_agent.notifier import DesktopNotifier, build_linux_command, build_macos_command

SUBPROCESS = "stoic_agent.notifier.notifier.asyncio.create_subprocess_exec"


def make_process(stdout=b"", stderr=b"", returncode=0):
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    proc.returncode = returncode
    return proc


@pytest.fixture
def breathing_request():
    return NotificationRequest(
        title="High CPU Usage Detected!",
        message="How about a quick 60-second breathing exercise?",
        subtitle="Stoic Agent Suggestion",
        sound=True,
        actions=["Start", "Dismiss"],
        timeout_seconds=30,
    )


class TestCommandBuilders:
    """Tests for platform command lines."""

    def test_linux_command(self, breathing_request):
        """Test notify-send arguments."""
        argv = build_linux_command(breathing_request)

        assert argv[0] == "notify-send"
        assert "--expire-time=30000" in argv
        assert "--action=start=Start" in argv
        assert "--action=dismiss=Dismiss" in argv
        assert any(arg.startswith("--hint=string:sound-name:") for arg in argv)
        assert argv[-2] == "High CPU Usage Detected!"
        assert argv[-1].startswith("Stoic Agent Suggestion\n")

    def test_linux_command_minimal(self):
        """Test a plain request produces no optional flags."""
        argv = build_linux_command(NotificationRequest(title="t", message="m"))
        assert argv == ["notify-send", "--app-name=Stoic Agent", "--urgency=normal", "t", "m"]

    def test_macos_command_escapes_quotes(self):
        """Test AppleScript string quoting."""
        argv = build_macos_command(
            NotificationRequest(title='Say "hi"', message="back\\slash", subtitle="sub")
        )

        assert argv[:2] == ["osascript", "-e"]
        assert 'with title "Say \\"hi\\""' in argv[2]
        assert '"back\\\\slash"' in argv[2]
        assert 'subtitle "sub"' in argv[2]

    def test_unsupported_platform(self, breathing_request):
        """Test that unknown platforms fail with NotificationError."""
        notifier = DesktopNotifier(platform="win32")
        with pytest.raises(NotificationError):
            notifier.build_command(breathing_request)


class TestDesktopNotifier:
    """Tests for DesktopNotifier.notify()."""

    @pytest.mark.asyncio
    async def test_disabled_skips_delivery(self, breathing_request):
        """Test that a disabled notifier never spawns a process."""
        notifier = DesktopNotifier(enabled=False, platform="linux")

        with patch(SUBPROCESS, new=AsyncMock()) as spawn:
            result = await notifier.notify(breathing_request)

        assert result.delivered is False
        spawn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_action_response(self, breathing_request):
        """Test that the clicked action is reported."""
        notifier = DesktopNotifier(platform="linux")

        with patch(SUBPROCESS, new=AsyncMock(return_value=make_process(b"Start\n"))):
            result = await notifier.notify(breathing_request)

        assert result.delivered is True
        assert result.response == "start"

    @pytest.mark.asyncio
    async def test_no_response(self):
        """Test that empty output means no response."""
        notifier = DesktopNotifier(platform="darwin")

        with patch(SUBPROCESS, new=AsyncMock(return_value=make_process())) as spawn:
            result = await notifier.notify(NotificationRequest(title="t", message="m"))

        assert result.delivered is True
        assert result.response is None
        assert spawn.await_args.args[0] == "osascript"

    @pytest.mark.asyncio
    async def test_missing_binary(self, breathing_request):
        """Test that a missing notify-send raises NotificationError."""
        notifier = DesktopNotifier(platform="linux")

        with patch(SUBPROCESS, new=AsyncMock(side_effect=FileNotFoundError())):
            with pytest.raises(NotificationError, match="not available"):
                await notifier.notify(breathing_request)

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, breathing_request):
        """Test that a failing command raises NotificationError."""
        notifier = DesktopNotifier(platform="linux")
        proc = make_process(stderr=b"cannot open display", returncode=1)

        with patch(SUBPROCESS, new=AsyncMock(return_value=proc)):
            with pytest.raises(NotificationError, match="cannot open display"):
                await notifier.notify(breathing_request)

    @pytest.mark.asyncio
    async def test_unanswered_action_is_delivered(self, breathing_request):
        """Test that an action prompt nobody clicks still counts as shown."""
        notifier = DesktopNotifier(platform="linux", command_timeout=0.01)
        request = NotificationRequest(title="t", message="m", actions=["Start"], timeout_seconds=0)
        proc = make_process()
        proc.returncode = None

        async def hang():
            await asyncio.sleep(10)

        proc.communicate = AsyncMock(side_effect=hang)

        with patch(SUBPROCESS, new=AsyncMock(return_value=proc)):
            with patch("stoic_agent.notifier.notifier.DEFAULT_ACTION_WAIT", 0.01):
                result = await notifier.notify(request)

        assert result.delivered is True
        assert result.response is None
        proc.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_hanging_command_without_actions(self):
        """Test that a stuck command raises NotificationError."""
        notifier = DesktopNotifier(platform="linux", command_timeout=0.01)
        proc = make_process()
        proc.returncode = None

        async def hang():
            await asyncio.sleep(10)

        proc.communicate = AsyncMock(side_effect=hang)

        with patch(SUBPROCESS, new=AsyncMock(return_value=proc)):
            with pytest.raises(NotificationError, match="did not finish"):
                await notifier.notify(NotificationRequest(title="t", message="m"))
        proc.kill.assert_called_once()


class TestDesktopNotifierCancellation:
    """Tests for cancelling notify() while the command is still running."""

    @pytest.mark.asyncio
    async def test_cancel_kills_the_process(self, breathing_request):
        """Test that a cancelled notify() kills and reaps its child."""
        notifier = DesktopNotifier(platform="linux")
        proc = make_process()
        proc.returncode = None
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.sleep(10)

        proc.communicate = AsyncMock(side_effect=hang)

        with patch(SUBPROCESS, new=AsyncMock(return_value=proc)):
            task = asyncio.create_task(notifier.notify(breathing_request))
            await asyncio.wait_for(started.wait(), 1.0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_skips_kill_for_finished_process(self, breathing_request):
        """Test that a child which already exited is only waited for."""
        notifier = DesktopNotifier(platform="linux")
        proc = make_process()
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.sleep(10)

        proc.communicate = AsyncMock(side_effect=hang)

        with patch(SUBPROCESS, new=AsyncMock(return_value=proc)):
            task = asyncio.create_task(notifier.notify(breathing_request))
            await asyncio.wait_for(started.wait(), 1.0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        proc.kill.assert_not_called()
        proc.wait.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sleep") is None, reason="needs a sleep binary")
    async def test_cancel_leaves_no_child_running(self):
        """Test with a real child process that cancellation does not orphan it."""

        class SleepingNotifier(DesktopNotifier):
            def build_command(self, request):
                return ["sleep", "30"]

        spawned = []
        real_spawn = asyncio.create_subprocess_exec

        async def spawn(*args, **kwargs):
            proc = await real_spawn(*args, **kwargs)
            spawned.append(proc)
            return proc

        notifier = SleepingNotifier(platform="linux", command_timeout=60)
        with patch(SUBPROCESS, new=spawn):
            task = asyncio.create_task(
                notifier.notify(NotificationRequest(title="t", message="m"))
            )
            while not spawned:
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert spawned[0].returncode is not None
