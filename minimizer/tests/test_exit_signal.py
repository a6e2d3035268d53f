"""Unit tests for the exit signal."""

import asyncio
import threading
import unittest

from minimizer.utils.exit_signal import ExitSignal

class TestExitSignal(unittest.IsolatedAsyncioTestCase):
    """Test cases for ExitSignal."""

    async def test_wakes_all_waiters(self):
        """Test that one fire wakes every waiter."""
        signal = ExitSignal()
        waiters = [asyncio.create_task(signal.wait()) for _ in range(3)]
        await asyncio.sleep(0)
        self.assertTrue(signal.fire("menu action close"))
        reasons = await asyncio.wait_for(asyncio.gather(*waiters), 1)
        self.assertEqual(reasons, ["menu action close"] * 3)

    async def test_late_waiter_returns_immediately(self):
        """Test that waiting after the fire does not block."""
        signal = ExitSignal()
        signal.fire("monitor")
        self.assertEqual(await asyncio.wait_for(signal.wait(), 1), "monitor")

    async def test_second_fire_is_noop(self):
        """Test that only the first fire counts."""
        signal = ExitSignal()
        self.assertTrue(signal.fire("first"))
        self.assertFalse(signal.fire("second"))
        self.assertEqual(signal.reason, "first")
        self.assertTrue(signal.is_set())

    async def test_concurrent_fires(self):
        """Test that concurrent fires from threads neither deadlock nor raise."""
        signal = ExitSignal()
        waiter = asyncio.create_task(signal.wait())
        await asyncio.sleep(0)

        results = []
        threads = [
            threading.Thread(target=lambda i=i: results.append(signal.fire(f"thread {i}")))
            for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(1)

        reason = await asyncio.wait_for(waiter, 1)
        self.assertEqual(results.count(True), 1)
        self.assertEqual(results.count(False), 7)
        self.assertEqual(reason, signal.reason)

    async def test_not_set_initially(self):
        """Test the initial state."""
        signal = ExitSignal()
        self.assertFalse(signal.is_set())
        self.assertIsNone(signal.reason)
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(signal.wait(), 0.05)

if __name__ == '__main__':
    unittest.main()
