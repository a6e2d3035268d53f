"""Single-fire shutdown latch shared by every running actor."""

import asyncio
import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)

class ExitSignal:
    """Broadcast latch that fires at most once.

    ``fire`` may be called any number of times, from the event loop or from
    another thread; only the first call has an effect. Every coroutine
    awaiting ``wait`` is woken, including ones that start waiting after the
    fire.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fired = False
        self._reason: Optional[str] = None
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            pass

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def is_set(self) -> bool:
        return self._fired

    def fire(self, reason: str = "") -> bool:
        """Fire the signal. Returns True only for the call that fired it."""
        with self._lock:
            if self._fired:
                logger.debug(f"Exit signal already fired, ignoring: {reason}")
                return False
            self._fired = True
            self._reason = reason

        logger.info(f"Exit requested: {reason}")
        loop = self._loop
        if loop is None or loop.is_closed() or self._on_loop(loop):
            self._event.set()
        else:
            loop.call_soon_threadsafe(self._event.set)
        return True

    async def wait(self) -> Optional[str]:
        """Wait for the signal and return the reason given by the first fire."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        await self._event.wait()
        return self._reason

    @staticmethod
    def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            return False
