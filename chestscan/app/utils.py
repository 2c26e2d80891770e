# app/utils.py
import os
from typing import Optional, Sequence

from .config import settings
from .workflow import FILE_TOO_LARGE_MESSAGE, UploadedFile

TOO_MANY_FILES = "too-many-files"
FILE_INVALID_TYPE = "file-invalid-type"
FILE_TOO_LARGE = "file-too-large"

REJECTION_MESSAGES = {
    TOO_MANY_FILES: "Please drop a single X-ray image",
    FILE_INVALID_TYPE: "Supported formats: JPEG, PNG",
    FILE_TOO_LARGE: FILE_TOO_LARGE_MESSAGE,
}


class DropRejected(Exception):
    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or REJECTION_MESSAGES[code]
        super().__init__(self.message)


def accept_drop(files: Sequence[UploadedFile]) -> UploadedFile:
    """Drop-zone gate: exactly one JPEG/PNG file no larger than the upload limit."""
    if len(files) != 1:
        raise DropRejected(TOO_MANY_FILES)
    upload = files[0]

    content_type = (upload.content_type or "").lower()
    ext = os.path.splitext(upload.filename or "")[1].lower()
    if (
        content_type not in settings.allowed_content_types
        or ext not in settings.allowed_extensions
    ):
        raise DropRejected(FILE_INVALID_TYPE)

    if upload.size > settings.max_upload_bytes:
        raise DropRejected(FILE_TOO_LARGE)
    return upload


def format_confidence(confidence: float) -> str:
    # halves round up, as browsers do
    return f"{int(confidence * 100 + 0.5)}% confidence"
