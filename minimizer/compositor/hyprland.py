import json
import asyncio
import logging
from typing import Any, List, Optional, Tuple

from minimizer.compositor.base_compositor import BaseCompositor
from minimizer.utils.exceptions import PortCommandFailure, PortDecodeError, PortExecError

logger = logging.getLogger(__name__)

class HyprlandCompositor(BaseCompositor):
    """Window control port backed by the ``hyprctl`` command line tool."""

    def __init__(self, hyprctl: str = "hyprctl", timeout: Optional[float] = None) -> None:
        """Initialize Hyprland compositor interface.

        Args:
            hyprctl: Path or name of the hyprctl binary.
            timeout: Seconds to wait for a single call; None waits forever.
        """
        self.hyprctl = hyprctl
        self.timeout = timeout

    async def _run(self, args: List[str], command: str) -> Tuple[bytes, bytes]:
        """Run hyprctl with the given arguments and return (stdout, stderr)."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.hyprctl, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise PortExecError(f"Failed to execute hyprctl {command}: {e}", command=command) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise PortExecError(
                f"hyprctl {command} did not finish within {self.timeout}s", command=command
            ) from e
        except asyncio.CancelledError:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            raise

        if proc.returncode != 0:
            error = stderr.decode(errors="replace").strip()
            raise PortCommandFailure(
                f"hyprctl {command} failed with status {proc.returncode}: {error}",
                command=command, stderr=error, returncode=proc.returncode
            )
        return stdout, stderr

    async def query(self, command: str) -> Any:
        stdout, _ = await self._run(["-j", command], command)
        try:
            return json.loads(stdout.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PortDecodeError(f"Failed to parse JSON from hyprctl {command}: {e}", command=command) from e

    async def dispatch(self, command: str) -> None:
        stdout, stderr = await self._run(["dispatch", command], command)
        # hyprctl answers "ok" on success but keeps exit status 0 for some errors
        reply = stdout.decode(errors="replace").strip()
        if reply and reply != "ok":
            raise PortCommandFailure(
                f"hyprctl dispatch {command} failed: {reply}",
                command=command, stderr=reply, returncode=0
            )
        logger.debug(f"Dispatched: {command}")
