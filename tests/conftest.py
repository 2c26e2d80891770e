import asyncio

import pytest
from fastapi.testclient import TestClient

from chestscan.app.main import app
from chestscan.app.report_generator import MockReportGenerator, ReportGenerator
from chestscan.app import store as store_module
from chestscan.app.store import SessionStore
from chestscan.app.workflow import UploadedFile

MiB = 1024 * 1024
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class FailingGenerator(ReportGenerator):
    async def generate(self, image):
        await asyncio.sleep(0)
        raise ConnectionError("inference backend unreachable")


class GatedGenerator(ReportGenerator):
    """Each call blocks until the test resolves its future."""

    def __init__(self):
        self.calls = []

    async def generate(self, image):
        fut = asyncio.get_running_loop().create_future()
        self.calls.append((image, fut))
        return await fut


def make_upload(size=2 * MiB, filename="chest.png", content_type="image/png"):
    return UploadedFile(
        filename=filename,
        content_type=content_type,
        data=PNG_MAGIC + b"\0" * max(size - len(PNG_MAGIC), 0),
    )


@pytest.fixture
def fast_generator():
    return MockReportGenerator(delay_seconds=0.01)


@pytest.fixture
def store():
    return SessionStore(
        generator_factory=lambda: MockReportGenerator(delay_seconds=0.2),
        scan_interval=0.005,
    )


@pytest.fixture
def client(store, monkeypatch):
    # shutdown closes whatever store is installed, inside the app loop
    monkeypatch.setattr(store_module, "store", store)
    with TestClient(app) as c:
        yield c
