"""Tray icon behaviour (org.kde.StatusNotifierItem semantics)."""

import logging
from typing import List, Tuple

from minimizer.actions import WindowActions
from minimizer.models import WindowSnapshot
from minimizer.utils.exit_signal import ExitSignal
from minimizer.utils.recovery import ChainResult

logger = logging.getLogger(__name__)

class StatusNotifier:
    """Properties and click handling of the tray icon for one window."""

    CATEGORY = "ApplicationStatus"
    STATUS = "Active"

    def __init__(self, snapshot: WindowSnapshot, actions: WindowActions,
                 exit_signal: ExitSignal, menu_path: str = "/Menu"):
        self.snapshot = snapshot
        self.menu_path = menu_path
        self._actions = actions
        self._exit_signal = exit_signal

    @property
    def category(self) -> str:
        return self.CATEGORY

    @property
    def id(self) -> str:
        return self.snapshot.window_class

    @property
    def title(self) -> str:
        return self.snapshot.title

    @property
    def status(self) -> str:
        return self.STATUS

    @property
    def icon_name(self) -> str:
        return self.snapshot.window_class

    @property
    def tool_tip(self) -> Tuple[str, List[Tuple[int, int, bytes]], str, str]:
        # (icon name, icon pixmaps, title, description)
        return "", [], self.snapshot.title, ""

    @property
    def item_is_menu(self) -> bool:
        return False

    async def activate(self, x: int = 0, y: int = 0) -> ChainResult:
        """Primary click: bring the window to the active workspace."""
        logger.info("Tray icon activated")
        result = await self._actions.reopen_on_current_workspace()
        if not result.succeeded:
            logger.error("Failed to execute activate action")
        self._exit_signal.fire("tray icon activated")
        return result

    async def secondary_activate(self, x: int = 0, y: int = 0) -> ChainResult:
        """Middle click: close the window."""
        logger.info("Tray icon secondary activated")
        result = await self._actions.close()
        if not result.succeeded:
            logger.error("Failed to execute secondary activate action")
        self._exit_signal.fire("tray icon secondary activated")
        return result
