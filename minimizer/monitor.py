"""Background check for windows that are closed or restored behind our back.

Hyprland does not tell this process when the minimized window goes away or
is pulled back onto a workspace by another tool, so the client list is
polled until one of those happens.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from minimizer.compositor.base_compositor import BaseCompositor
from minimizer.models import WindowSnapshot
from minimizer.utils.exceptions import PortError
from minimizer.utils.exit_signal import ExitSignal

logger = logging.getLogger(__name__)

class MonitorOutcome(Enum):
    HIDDEN = "hidden"
    CLOSED = "closed"
    RESTORED = "restored"
    QUERY_FAILED = "query failed"

class WindowMonitor:
    """Polls ``hyprctl clients`` until the tracked window leaves the special workspace."""

    def __init__(self, compositor: BaseCompositor, snapshot: WindowSnapshot,
                 exit_signal: ExitSignal, interval: float = 2.0) -> None:
        self.compositor = compositor
        self.snapshot = snapshot
        self.interval = interval
        self._exit_signal = exit_signal
        self.checks = 0

    async def check_once(self) -> MonitorOutcome:
        """Look up the tracked window once."""
        self.checks += 1
        try:
            windows = await self.compositor.get_windows()
        except PortError as e:
            logger.error(f"Error checking window state: {e}")
            return MonitorOutcome.QUERY_FAILED

        window = next((w for w in windows if w.address == self.snapshot.address), None)
        if window is None:
            logger.info("Window closed externally")
            return MonitorOutcome.CLOSED
        if not window.is_hidden:
            logger.info(f"Window restored externally to workspace {window.workspace_id}")
            return MonitorOutcome.RESTORED
        return MonitorOutcome.HIDDEN

    async def run(self) -> Optional[MonitorOutcome]:
        """Check until a terminal outcome, firing the exit signal when one is seen.

        Returns None if the exit signal was fired by someone else first.
        """
        while not self._exit_signal.is_set():
            outcome = await self.check_once()
            if outcome is not MonitorOutcome.HIDDEN:
                self._exit_signal.fire(f"monitor: window {outcome.value}")
                return outcome

            try:
                await asyncio.wait_for(self._exit_signal.wait(), self.interval)
            except asyncio.TimeoutError:
                continue

        logger.debug("Monitor stopped by exit signal")
        return None
