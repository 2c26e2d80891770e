# app/workflow.py
"""
Upload-and-report workflow controller.

One controller owns the state of one analysis session: accept a single image,
check its size, hold it for preview, run the report generator in the
background and publish the outcome. Every new upload (or a reset) bumps the
session token; a generator result is applied only if the token it was started
with is still current, so a late answer from a superseded upload can never
overwrite a newer session.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set
from uuid import uuid4

from .config import settings
from .report_generator import ReportGenerator
from .schemas import Report, SessionState, SessionStatus

logger = logging.getLogger(__name__)

FILE_TOO_LARGE_MESSAGE = "File size must be less than 10MB"
ANALYSIS_FAILED_MESSAGE = "Failed to analyze the image. Please try again."

Listener = Callable[[SessionState], None]


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes = b""
    size: Optional[int] = None

    def __post_init__(self):
        if self.size is None:
            self.size = len(self.data)


class ImageReleased(RuntimeError):
    pass


@dataclass
class ImageHandle:
    """Transient in-memory handle to an uploaded image, like a browser blob URL."""

    filename: str
    content_type: str
    _data: Optional[bytes] = field(default=None, repr=False)
    handle_id: str = field(default_factory=lambda: uuid4().hex)

    @classmethod
    def from_upload(cls, upload: UploadedFile) -> "ImageHandle":
        return cls(upload.filename, upload.content_type, upload.data)

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise ImageReleased(f"image handle {self.handle_id} was released")
        return self._data

    def release(self):
        self._data = None


class WorkflowController:
    def __init__(
        self,
        generator: ReportGenerator,
        session_id: Optional[str] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.session_id = session_id or str(uuid4())
        self._generator = generator
        self._max_upload_bytes = (
            max_upload_bytes
            if max_upload_bytes is not None
            else settings.max_upload_bytes
        )

        self._token = 0
        self._status = SessionStatus.IDLE
        self._image: Optional[ImageHandle] = None
        self._error: Optional[str] = None
        self._report: Optional[Report] = None

        self._listeners: List[Listener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._state = self._snapshot()

    # --- read side ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def image(self) -> Optional[ImageHandle]:
        return self._image

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- operations ---

    def submit(self, upload: UploadedFile) -> Optional[asyncio.Task]:
        """Start a new session for ``upload``.

        Returns the background analysis task, or None when the upload was
        rejected before processing started. Must be called from the event loop.
        """
        token = self._supersede()

        if upload.size > self._max_upload_bytes:
            logger.info(
                "session %s: rejected %s (%d bytes, limit %d)",
                self.session_id,
                upload.filename,
                upload.size,
                self._max_upload_bytes,
            )
            self._fail(FILE_TOO_LARGE_MESSAGE)
            return None

        image = ImageHandle.from_upload(upload)
        self._image = image
        self._status = SessionStatus.PROCESSING
        self._publish()
        logger.info(
            "session %s: analyzing %s (token %d)", self.session_id, upload.filename, token
        )

        task = asyncio.get_running_loop().create_task(self._analyze(token, image))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def reject(self, message: str):
        """Fail the session for an upload refused at the drop zone."""
        self._supersede()
        logger.info("session %s: upload rejected: %s", self.session_id, message)
        self._fail(message)

    def dismiss_error(self):
        if self._error is None:
            return
        self._error = None
        self._status = SessionStatus.IDLE
        self._publish()

    def reset(self):
        self._supersede()
        self._status = SessionStatus.IDLE
        self._publish()

    async def wait(self):
        """Wait for every outstanding analysis task to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self):
        self.reset()
        for task in list(self._tasks):
            task.cancel()
        self._listeners.clear()

    # --- internals ---

    async def _analyze(self, token: int, image: ImageHandle):
        try:
            report = await self._generator.generate(image)
        except Exception:
            if token != self._token:
                logger.info(
                    "session %s: ignoring failure of superseded request %d",
                    self.session_id,
                    token,
                )
                return
            logger.exception("session %s: analysis failed", self.session_id)
            self._fail(ANALYSIS_FAILED_MESSAGE)
            return

        if token != self._token:
            logger.info(
                "session %s: discarding stale report for request %d (current %d)",
                self.session_id,
                token,
                self._token,
            )
            return

        self._report = report
        self._status = SessionStatus.COMPLETE
        self._publish()
        logger.info("session %s: report ready", self.session_id)

    def _supersede(self) -> int:
        self._token += 1
        if self._image is not None:
            self._image.release()
        self._image = None
        self._error = None
        self._report = None
        return self._token

    def _fail(self, message: str):
        self._error = message
        self._status = SessionStatus.FAILED
        self._publish()

    def _snapshot(self) -> SessionState:
        image_url = None
        if self._image is not None:
            image_url = (
                f"/api/sessions/{self.session_id}/image?h={self._image.handle_id}"
            )
        return SessionState(
            session_id=self.session_id,
            token=self._token,
            status=self._status,
            image_url=image_url,
            error=self._error,
            report=self._report,
        )

    def _publish(self):
        self._state = self._snapshot()
        for listener in list(self._listeners):
            listener(self._state)
