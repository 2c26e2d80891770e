# app/report_generator.py
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from .config import settings
from .schemas import Finding, Report, Severity

logger = logging.getLogger(__name__)

# Canned result returned by the demo analysis. No image content is examined.
MOCK_FINDINGS = [
    {
        "condition": "Pneumonia",
        "confidence": 0.92,
        "description": "Bilateral infiltrates consistent with pneumonia",
        "severity": Severity.MODERATE,
        "regions": ["Lower right lobe", "Lower left lobe"],
    },
    {
        "condition": "Cardiomegaly",
        "confidence": 0.85,
        "description": "Mild cardiac enlargement observed",
        "severity": Severity.MILD,
        "regions": ["Heart silhouette"],
    },
]

MOCK_RECOMMENDATIONS = [
    "Follow-up chest X-ray recommended in 2 weeks",
    "Consider additional cardiac evaluation",
    "Clinical correlation with patient symptoms advised",
]


class ReportGenerator(ABC):
    """Turns one uploaded image into one Report, or raises."""

    @abstractmethod
    async def generate(self, image) -> Report:
        ...


class MockReportGenerator(ReportGenerator):
    def __init__(self, delay_seconds: Optional[float] = None):
        if delay_seconds is None:
            delay_seconds = settings.analysis_delay_seconds
        self.delay_seconds = delay_seconds

    async def generate(self, image) -> Report:
        logger.debug(
            "mock analysis of %s, resolving in %.2fs",
            getattr(image, "filename", None),
            self.delay_seconds,
        )
        await asyncio.sleep(self.delay_seconds)
        return build_mock_report()


def build_mock_report() -> Report:
    return Report(
        findings=[Finding(**f) for f in MOCK_FINDINGS],
        recommendations=list(MOCK_RECOMMENDATIONS),
        timestamp=datetime.now(timezone.utc),
    )
