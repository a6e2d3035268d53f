import abc
from typing import Any, List, Optional

from pydantic import ValidationError

from minimizer.models import ActiveWorkspace, WindowSnapshot, WINDOW_LIST
from minimizer.utils.exceptions import PortDecodeError

class BaseCompositor(abc.ABC):
    """Abstract window control port.

    Subclasses only provide the two raw operations, ``query`` and
    ``dispatch``. The typed helpers below speak Hyprland's command
    vocabulary on top of them.
    """

    @abc.abstractmethod
    async def query(self, command: str) -> Any:
        """Run a read-only query and return its decoded JSON.

        Raises:
            PortExecError: The query mechanism could not run.
            PortDecodeError: The output was not valid JSON.
            PortCommandFailure: The mechanism reported a failure.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def dispatch(self, command: str) -> None:
        """Run a mutating command. Raises the same errors as ``query``."""
        raise NotImplementedError

    async def get_active_window(self) -> Optional[WindowSnapshot]:
        """Get the currently focused window, or None if nothing is focused."""
        data = await self.query("activewindow")
        if not data:
            return None
        return self._decode(WindowSnapshot.model_validate, data, "activewindow")

    async def get_windows(self) -> List[WindowSnapshot]:
        """Get every client window."""
        data = await self.query("clients")
        return self._decode(WINDOW_LIST.validate_python, data, "clients")

    async def get_window(self, address: str) -> Optional[WindowSnapshot]:
        """Find a client window by address."""
        for window in await self.get_windows():
            if window.address == address:
                return window
        return None

    async def get_active_workspace(self) -> int:
        """Get the id of the workspace that currently has focus."""
        data = await self.query("activeworkspace")
        return self._decode(ActiveWorkspace.model_validate, data, "activeworkspace").id

    async def move_to_workspace_silent(self, address: str, special_name: str) -> None:
        """Move a window to a special workspace without following it."""
        await self.dispatch(f"movetoworkspacesilent special:{special_name},address:{address}")

    async def move_to_workspace(self, address: str, workspace_id: int) -> None:
        await self.dispatch(f"movetoworkspace {workspace_id},address:{address}")

    async def focus_window(self, address: str) -> None:
        await self.dispatch(f"focuswindow address:{address}")

    async def close_window(self, address: str) -> None:
        await self.dispatch(f"closewindow address:{address}")

    @staticmethod
    def _decode(validator, data: Any, command: str) -> Any:
        try:
            return validator(data)
        except ValidationError as e:
            raise PortDecodeError(
                f"Unexpected output shape from hyprctl {command}: {e}", command=command
            ) from e
