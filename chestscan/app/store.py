# app/store.py
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import settings
from .report_generator import MockReportGenerator, ReportGenerator
from .scanline import ScanLine
from .schemas import SessionResponse
from .workflow import WorkflowController

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    controller: WorkflowController
    scan_line: ScanLine
    last_seen: float = field(default_factory=time.monotonic)

    def response(self) -> SessionResponse:
        state = self.controller.state
        return SessionResponse(
            **state.model_dump(), scan_position=self.scan_line.position
        )


class SessionStore:
    """In-memory sessions, one controller per browser session. Not persisted.

    Sessions idle for longer than ``ttl_seconds`` are dropped, and the least
    recently used ones go first once ``max_sessions`` is reached.
    """

    def __init__(
        self,
        generator_factory: Callable[[], ReportGenerator] = MockReportGenerator,
        scan_interval: Optional[float] = None,
        max_sessions: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.generator_factory = generator_factory
        self.scan_interval = scan_interval
        self.max_sessions = max_sessions if max_sessions is not None else settings.max_sessions
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds
        self.clock = clock
        self._sessions: "OrderedDict[str, SessionEntry]" = OrderedDict()

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, session_id: str):
        return session_id in self._sessions

    def create(self) -> SessionEntry:
        self.evict()
        while len(self._sessions) >= self.max_sessions:
            oldest = next(iter(self._sessions))
            logger.info("session %s evicted, store full", oldest)
            self.discard(oldest)

        controller = WorkflowController(self.generator_factory())
        scan_line = ScanLine(self.scan_interval)
        controller.subscribe(scan_line.follow)
        entry = SessionEntry(controller, scan_line, last_seen=self.clock())
        self._sessions[controller.session_id] = entry
        logger.info("session %s created", controller.session_id)
        return entry

    def get(self, session_id: str) -> Optional[SessionEntry]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        if self._expired(entry):
            logger.info("session %s expired", session_id)
            self.discard(session_id)
            return None
        entry.last_seen = self.clock()
        self._sessions.move_to_end(session_id)
        return entry

    def evict(self) -> int:
        """Drop every expired session, returning how many went."""
        expired = [sid for sid, entry in self._sessions.items() if self._expired(entry)]
        for session_id in expired:
            logger.info("session %s expired", session_id)
            self.discard(session_id)
        return len(expired)

    def discard(self, session_id: str) -> bool:
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        entry.controller.close()
        entry.scan_line.stop()
        logger.info("session %s closed", session_id)
        return True

    def close_all(self):
        for session_id in list(self._sessions):
            self.discard(session_id)

    def _expired(self, entry: SessionEntry) -> bool:
        return self.clock() - entry.last_seen > self.ttl_seconds


store: Optional[SessionStore] = None


async def init_store():
    global store
    if store is None:
        store = SessionStore()
    logger.info("session store ready")


async def close_store():
    global store
    if store is not None:
        logger.info("closing %d session(s)", len(store))
        store.close_all()
    store = None


def get_store() -> SessionStore:
    if store is None:
        raise RuntimeError("session store not initialised")
    return store
