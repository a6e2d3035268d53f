"""Startup, registration and shutdown of one minimized window."""

import asyncio
import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

from minimizer.actions import WindowActions
from minimizer.compositor.base_compositor import BaseCompositor
from minimizer.models import WindowSnapshot, describe
from minimizer.monitor import WindowMonitor
from minimizer.tray.base_bus import BaseTrayBus, MENU_PATH
from minimizer.tray.menu import ContextMenu
from minimizer.tray.status_notifier import StatusNotifier
from minimizer.utils.exceptions import NoTargetWindow, RegistrationFailure
from minimizer.utils.exit_signal import ExitSignal

logger = logging.getLogger(__name__)

class LifecycleState(Enum):
    START = "start"
    CAPTURED = "captured"
    HIDDEN = "hidden"
    REGISTERED = "registered"
    RUNNING = "running"
    EXITING_CLEAN = "exiting-clean"
    EXITING_RESTORE = "exiting-restore"
    TERMINATED = "terminated"

class ExitReason(Enum):
    SIGNALLED = "signalled"
    INTERRUPTED = "interrupted"

class Minimizer:
    """Moves one window to the tray and waits until it comes back."""

    def __init__(self, config: Dict[str, Any], compositor: BaseCompositor,
                 tray_bus: BaseTrayBus, exit_signal: Optional[ExitSignal] = None):
        self.config = config
        self.compositor = compositor
        self.tray_bus = tray_bus
        self.exit_signal = exit_signal or ExitSignal()
        self.state = LifecycleState.START
        self.bus_name = f"{config['bus_name_prefix']}.p{os.getpid()}"

        self.snapshot: Optional[WindowSnapshot] = None
        self.actions: Optional[WindowActions] = None
        self.monitor_task: Optional[asyncio.Task] = None

    def _transition(self, state: LifecycleState) -> None:
        logger.debug(f"Lifecycle: {self.state.value} -> {state.value}")
        self.state = state

    async def capture(self, address: Optional[str] = None) -> WindowSnapshot:
        """Resolve the target window, by address or the focused one."""
        if address:
            snapshot = await self.compositor.get_window(address)
            if snapshot is None:
                raise NoTargetWindow(f"No window with address {address}")
        else:
            snapshot = await self.compositor.get_active_window()
            if snapshot is None:
                raise NoTargetWindow("Failed to get active window. Is a window focused?")

        self.snapshot = snapshot
        self.actions = WindowActions(self.compositor, snapshot)
        logger.info(f"Minimizing window: '{snapshot.title}' ({snapshot.window_class})")
        logger.debug(f"Captured window: {describe(snapshot)}")
        self._transition(LifecycleState.CAPTURED)
        return snapshot

    async def hide(self) -> None:
        """Park the window on the special workspace. Failures are fatal."""
        await self.compositor.move_to_workspace_silent(
            self.snapshot.address, self.config["special_workspace"]
        )
        self._transition(LifecycleState.HIDDEN)

    async def register(self) -> None:
        """Publish the tray objects and announce them to the tray host.

        On failure the window is put back on its original workspace and the
        bus is released before ``RegistrationFailure`` propagates.
        """
        status_notifier = StatusNotifier(self.snapshot, self.actions, self.exit_signal, menu_path=MENU_PATH)
        menu = ContextMenu(self.snapshot, self.actions, self.exit_signal, variant=self.config["menu_variant"])

        try:
            await self.tray_bus.publish(self.bus_name, status_notifier, menu)
            await self.tray_bus.register(self.bus_name)
        except RegistrationFailure as e:
            logger.error(f"{e}")
            logger.info(f"Restoring window to workspace {self.snapshot.workspace_id}")
            await self.actions.restore_after_registration_failure()
            await self.tray_bus.close()
            self._transition(LifecycleState.TERMINATED)
            raise

        self._transition(LifecycleState.REGISTERED)

    def start_monitor(self) -> asyncio.Task:
        monitor = WindowMonitor(
            self.compositor, self.snapshot, self.exit_signal, interval=self.config["poll_interval"]
        )
        self.monitor_task = asyncio.create_task(monitor.run())
        self._transition(LifecycleState.RUNNING)
        return self.monitor_task

    async def wait_for_exit(self, interrupt: Optional[asyncio.Event] = None) -> ExitReason:
        """Block until the exit signal fires or an interrupt is requested."""
        interrupt = interrupt or asyncio.Event()
        logger.info("Application minimized to tray. Waiting for activation...")

        exit_task = asyncio.create_task(self.exit_signal.wait())
        interrupt_task = asyncio.create_task(interrupt.wait())
        try:
            await asyncio.wait({exit_task, interrupt_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (exit_task, interrupt_task):
                if not task.done():
                    task.cancel()

        if exit_task.done() and not exit_task.cancelled():
            logger.info("Exit notification received")
            self._transition(LifecycleState.EXITING_CLEAN)
            return ExitReason.SIGNALLED

        logger.info("Interrupted. Restoring window")
        self._transition(LifecycleState.EXITING_RESTORE)
        result = await self.actions.restore_after_interrupt()
        if not result.succeeded:
            logger.error("Window could not be fully restored")
        return ExitReason.INTERRUPTED

    async def shutdown(self) -> None:
        """Stop the monitor and release the bus connection."""
        if self.monitor_task is not None and not self.monitor_task.done():
            self.monitor_task.cancel()
            try:
                await self.monitor_task
            except asyncio.CancelledError:
                pass
        self.monitor_task = None

        await self.tray_bus.close()
        self._transition(LifecycleState.TERMINATED)
        logger.info("Exiting")

    async def run(self, address: Optional[str] = None,
                  interrupt: Optional[asyncio.Event] = None) -> ExitReason:
        """Run the whole lifecycle. Startup errors propagate to the caller."""
        await self.capture(address)
        await self.hide()
        await self.register()
        self.start_monitor()
        try:
            return await self.wait_for_exit(interrupt)
        finally:
            await self.shutdown()
