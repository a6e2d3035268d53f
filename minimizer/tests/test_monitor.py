"""Unit tests for the external state monitor."""

import asyncio
import unittest

from minimizer.models import WindowSnapshot
from minimizer.monitor import MonitorOutcome, WindowMonitor
from minimizer.tests.mocks import ADDRESS, MockCompositor, client
from minimizer.utils.exceptions import PortExecError
from minimizer.utils.exit_signal import ExitSignal

INTERVAL = 0.02

class TestWindowMonitor(unittest.IsolatedAsyncioTestCase):
    """Test cases for WindowMonitor."""

    def setUp(self):
        self.snapshot = WindowSnapshot.model_validate(client(workspace_id=3))
        self.compositor = MockCompositor()
        self.exit_signal = ExitSignal()
        self.monitor = WindowMonitor(self.compositor, self.snapshot, self.exit_signal, interval=INTERVAL)

    async def test_window_closed(self):
        """Test that a missing window fires and stops querying."""
        self.compositor.responses["clients"] = [client(address="0xother", workspace_id=-98)]

        outcome = await asyncio.wait_for(self.monitor.run(), INTERVAL * 5)

        self.assertEqual(outcome, MonitorOutcome.CLOSED)
        self.assertTrue(self.exit_signal.is_set())
        await asyncio.sleep(INTERVAL * 3)
        self.assertEqual(self.compositor.queries, ["clients"])

    async def test_window_restored(self):
        """Test that a window on a positive workspace fires."""
        self.compositor.responses["clients"] = [client(workspace_id=5)]
        outcome = await asyncio.wait_for(self.monitor.run(), INTERVAL * 5)
        self.assertEqual(outcome, MonitorOutcome.RESTORED)
        self.assertTrue(self.exit_signal.is_set())

    async def test_window_still_hidden(self):
        """Test that a hidden window keeps the monitor polling."""
        self.compositor.responses["clients"] = [client(workspace_id=-2)]
        task = asyncio.create_task(self.monitor.run())

        await asyncio.sleep(INTERVAL * 3.5)
        self.assertFalse(self.exit_signal.is_set())
        self.assertGreaterEqual(len(self.compositor.queries), 2)

        self.exit_signal.fire("test done")
        self.assertIsNone(await asyncio.wait_for(task, 1))

    async def test_hidden_then_restored(self):
        """Test the check after the interval sees the restored window."""
        states = iter([[client(workspace_id=-2)], [client(workspace_id=1)]])
        self.compositor.responses["clients"] = lambda: next(states)

        outcome = await asyncio.wait_for(self.monitor.run(), 1)

        self.assertEqual(outcome, MonitorOutcome.RESTORED)
        self.assertEqual(self.monitor.checks, 2)

    async def test_query_failure(self):
        """Test that a failed query fires without retrying."""
        self.compositor.query_errors["clients"] = PortExecError("hyprctl gone")
        outcome = await asyncio.wait_for(self.monitor.run(), INTERVAL * 5)
        self.assertEqual(outcome, MonitorOutcome.QUERY_FAILED)
        self.assertEqual(self.compositor.queries, ["clients"])
        self.assertTrue(self.exit_signal.is_set())

    async def test_stops_when_already_fired(self):
        self.exit_signal.fire("menu action close")
        self.assertIsNone(await self.monitor.run())
        self.assertEqual(self.compositor.queries, [])

    async def test_check_once(self):
        self.compositor.responses["clients"] = [client(address=ADDRESS, workspace_id=0)]
        self.assertEqual(await self.monitor.check_once(), MonitorOutcome.HIDDEN)
        self.compositor.responses["clients"] = [client(address=ADDRESS, workspace_id=1)]
        self.assertEqual(await self.monitor.check_once(), MonitorOutcome.RESTORED)

if __name__ == '__main__':
    unittest.main()
