# app/scanline.py
import asyncio
import logging
from typing import Optional

from .config import settings
from .schemas import SessionState, SessionStatus

logger = logging.getLogger(__name__)


class ScanLine:
    """Cosmetic sweep over the preview image while an analysis is running.

    Purely presentational: the position (0-100, percent of image height) is
    rendered by the generator page and has no effect on the session.
    """

    def __init__(self, interval: Optional[float] = None):
        self.interval = interval if interval is not None else settings.scan_interval_seconds
        self.position = 0
        self.token: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, token: int):
        self.stop()
        self.token = token
        self._task = asyncio.get_running_loop().create_task(self._sweep())

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.token = None
        self.position = 0

    def follow(self, state: SessionState):
        """Session listener: run only while the current request is processing."""
        if state.status != SessionStatus.PROCESSING:
            self.stop()
        elif state.token != self.token or not self.running:
            self.start(state.token)

    async def _sweep(self):
        while True:
            await asyncio.sleep(self.interval)
            self.position = 0 if self.position >= 100 else self.position + 1
