"""Unit tests for the hyprctl window control port."""

import asyncio
import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from minimizer.compositor.hyprland import HyprlandCompositor
from minimizer.tests.mocks import ADDRESS, MockCompositor, client
from minimizer.utils.exceptions import PortCommandFailure, PortDecodeError, PortExecError

def fake_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    proc.returncode = returncode
    return proc

class TestHyprlandCompositor(unittest.IsolatedAsyncioTestCase):
    """Test cases for HyprlandCompositor."""

    def setUp(self):
        self.compositor = HyprlandCompositor()

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_query_returns_json(self, mock_exec):
        """Test a successful JSON query."""
        mock_exec.return_value = fake_process(json.dumps({"id": 4, "name": "4"}).encode())

        result = await self.compositor.query("activeworkspace")

        self.assertEqual(result, {"id": 4, "name": "4"})
        args = mock_exec.call_args[0]
        self.assertEqual(args, ("hyprctl", "-j", "activeworkspace"))

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_query_invalid_json(self, mock_exec):
        """Test that unparsable output raises PortDecodeError."""
        mock_exec.return_value = fake_process(b"Invalid command")
        with self.assertRaises(PortDecodeError) as ctx:
            await self.compositor.query("clients")
        self.assertEqual(ctx.exception.command, "clients")

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_nonzero_exit(self, mock_exec):
        """Test that a failing hyprctl raises PortCommandFailure."""
        mock_exec.return_value = fake_process(stderr=b"HYPRLAND_INSTANCE_SIGNATURE not set", returncode=1)
        with self.assertRaises(PortCommandFailure) as ctx:
            await self.compositor.query("clients")
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertIn("HYPRLAND_INSTANCE_SIGNATURE", ctx.exception.stderr)

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_missing_binary(self, mock_exec):
        """Test that a missing hyprctl raises PortExecError."""
        mock_exec.side_effect = FileNotFoundError("hyprctl")
        with self.assertRaises(PortExecError):
            await self.compositor.dispatch(f"closewindow address:{ADDRESS}")

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_dispatch(self, mock_exec):
        """Test that dispatch passes the command through."""
        mock_exec.return_value = fake_process(b"ok\n")

        await self.compositor.dispatch(f"focuswindow address:{ADDRESS}")

        args = mock_exec.call_args[0]
        self.assertEqual(args, ("hyprctl", "dispatch", f"focuswindow address:{ADDRESS}"))

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_dispatch_error_reply(self, mock_exec):
        """Test that a dispatch reply other than 'ok' is a failure."""
        mock_exec.return_value = fake_process(b"Invalid dispatcher\n")
        with self.assertRaises(PortCommandFailure):
            await self.compositor.dispatch("nosuchdispatcher")

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_timeout(self, mock_exec):
        """Test that a hung call is killed once the timeout passes."""
        proc = fake_process()

        async def hang():
            await asyncio.sleep(10)

        proc.communicate = AsyncMock(side_effect=hang)
        mock_exec.return_value = proc
        compositor = HyprlandCompositor(timeout=0.01)

        with self.assertRaises(PortExecError):
            await compositor.query("clients")
        proc.kill.assert_called_once()

    @patch('minimizer.compositor.hyprland.asyncio.create_subprocess_exec', new_callable=AsyncMock)
    async def test_cancel_kills_child(self, mock_exec):
        """Test that cancelling an in-flight query kills and reaps hyprctl."""
        proc = fake_process()
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.sleep(10)

        proc.communicate = AsyncMock(side_effect=hang)
        mock_exec.return_value = proc

        task = asyncio.create_task(self.compositor.query("clients"))
        await asyncio.wait_for(started.wait(), 1)
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()

class TestCompositorHelpers(unittest.IsolatedAsyncioTestCase):
    """Test cases for the typed helpers on BaseCompositor."""

    async def test_active_window(self):
        compositor = MockCompositor(active_window=client(workspace_id=2))
        window = await compositor.get_active_window()
        self.assertEqual(window.address, ADDRESS)
        self.assertEqual(window.workspace_id, 2)

    async def test_no_active_window(self):
        """Test that hyprctl's empty object means no focused window."""
        compositor = MockCompositor(active_window={})
        self.assertIsNone(await compositor.get_active_window())

    async def test_get_window_by_address(self):
        compositor = MockCompositor(windows=[client(address="0x1"), client()])
        window = await compositor.get_window(ADDRESS)
        self.assertEqual(window.address, ADDRESS)
        self.assertIsNone(await compositor.get_window("0xdead"))

    async def test_bad_shape_raises_decode_error(self):
        compositor = MockCompositor()
        compositor.responses["activeworkspace"] = {"name": "1"}
        with self.assertRaises(PortDecodeError):
            await compositor.get_active_workspace()

    async def test_command_strings(self):
        """Test the exact hyprctl dispatcher strings."""
        compositor = MockCompositor()
        await compositor.move_to_workspace_silent(ADDRESS, "minimized")
        await compositor.move_to_workspace(ADDRESS, 3)
        await compositor.focus_window(ADDRESS)
        await compositor.close_window(ADDRESS)
        self.assertEqual(compositor.dispatched, [
            f"movetoworkspacesilent special:minimized,address:{ADDRESS}",
            f"movetoworkspace 3,address:{ADDRESS}",
            f"focuswindow address:{ADDRESS}",
            f"closewindow address:{ADDRESS}",
        ])

if __name__ == '__main__':
    unittest.main()
