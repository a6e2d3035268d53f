"""Window actions run from the tray icon, the menu and the exit paths.

Each action is a ``run_chain`` over hyprctl calls for the captured window,
so every recovery path can be exercised without a bus or a running loop
other than the test's own.
"""

import logging

from minimizer.compositor.base_compositor import BaseCompositor
from minimizer.models import WindowSnapshot
from minimizer.utils.recovery import ChainResult, RecoveryStep, StepPolicy, run_chain

logger = logging.getLogger(__name__)

class WindowActions:
    """hyprctl step chains bound to one captured window."""

    def __init__(self, compositor: BaseCompositor, snapshot: WindowSnapshot):
        self.compositor = compositor
        self.snapshot = snapshot

    def _query_active_workspace(self, policy: StepPolicy = StepPolicy.ABORT, fallback=None) -> RecoveryStep:
        return RecoveryStep(
            "query active workspace",
            lambda ctx: self.compositor.get_active_workspace(),
            policy=policy,
            fallback=fallback,
            store_as="workspace",
        )

    def _move_to_active(self, policy: StepPolicy = StepPolicy.ABORT) -> RecoveryStep:
        return RecoveryStep(
            "move to active workspace",
            lambda ctx: self.compositor.move_to_workspace(self.snapshot.address, ctx["workspace"]),
            policy=policy,
        )

    def _move_to_original(self, policy: StepPolicy = StepPolicy.ABORT) -> RecoveryStep:
        return RecoveryStep(
            f"move to original workspace {self.snapshot.workspace_id}",
            lambda ctx: self.compositor.move_to_workspace(self.snapshot.address, self.snapshot.workspace_id),
            policy=policy,
        )

    def _focus(self, policy: StepPolicy = StepPolicy.ABORT) -> RecoveryStep:
        return RecoveryStep(
            "focus window",
            lambda ctx: self.compositor.focus_window(self.snapshot.address),
            policy=policy,
        )

    async def reopen_on_current_workspace(self) -> ChainResult:
        return await run_chain(
            [self._query_active_workspace(), self._move_to_active(), self._focus()],
            label="reopen",
        )

    async def reopen_on_original_workspace(self) -> ChainResult:
        return await run_chain([self._move_to_original(), self._focus()], label="reopen-original")

    async def close(self) -> ChainResult:
        step = RecoveryStep("close window", lambda ctx: self.compositor.close_window(self.snapshot.address))
        return await run_chain([step], label="close")

    async def restore_after_interrupt(self) -> ChainResult:
        """Bring the window back to the active workspace, or its original one if that is unknown."""
        return await run_chain(
            [
                self._query_active_workspace(
                    policy=StepPolicy.FALLBACK,
                    fallback=self._move_to_original(StepPolicy.CONTINUE),
                ),
                self._move_to_active(),
                self._focus(StepPolicy.CONTINUE),
            ],
            label="restore",
        )

    async def restore_after_registration_failure(self) -> ChainResult:
        return await run_chain([self._move_to_original(StepPolicy.CONTINUE)], label="restore")
