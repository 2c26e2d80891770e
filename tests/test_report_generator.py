from datetime import datetime, timedelta, timezone

from chestscan.app.report_generator import MockReportGenerator
from chestscan.app.schemas import Severity
from chestscan.app.workflow import ImageHandle

from conftest import make_upload


async def test_mock_report_is_fixed():
    image = ImageHandle.from_upload(make_upload())
    report = await MockReportGenerator(delay_seconds=0).generate(image)

    pneumonia, cardiomegaly = report.findings
    assert pneumonia.condition == "Pneumonia"
    assert pneumonia.confidence == 0.92
    assert pneumonia.severity == Severity.MODERATE
    assert pneumonia.regions == ["Lower right lobe", "Lower left lobe"]

    assert cardiomegaly.condition == "Cardiomegaly"
    assert cardiomegaly.confidence == 0.85
    assert cardiomegaly.severity == Severity.MILD
    assert cardiomegaly.regions == ["Heart silhouette"]

    assert report.recommendations[0] == "Follow-up chest X-ray recommended in 2 weeks"
    assert len(report.recommendations) == 3


async def test_timestamp_is_call_time():
    before = datetime.now(timezone.utc)
    report = await MockReportGenerator(delay_seconds=0).generate(None)
    assert before - timedelta(seconds=1) <= report.timestamp <= datetime.now(timezone.utc)


async def test_reports_do_not_share_lists():
    generator = MockReportGenerator(delay_seconds=0)
    first = await generator.generate(None)
    first.recommendations.append("extra")
    second = await generator.generate(None)
    assert len(second.recommendations) == 3


def test_default_delay_comes_from_settings():
    assert MockReportGenerator().delay_seconds == 3.0


def test_explicit_none_delay_falls_back_to_settings():
    assert MockReportGenerator(delay_seconds=None).delay_seconds == 3.0
