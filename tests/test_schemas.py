from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from chestscan.app.schemas import Finding, Report, SessionState, SessionStatus


def report():
    return Report(findings=[], recommendations=[], timestamp=datetime.now(timezone.utc))


def test_report_only_when_complete():
    SessionState(session_id="s", status=SessionStatus.COMPLETE, report=report())
    with pytest.raises(ValidationError):
        SessionState(session_id="s", status=SessionStatus.COMPLETE)
    with pytest.raises(ValidationError):
        SessionState(session_id="s", status=SessionStatus.IDLE, report=report())


def test_error_only_when_failed():
    SessionState(session_id="s", status=SessionStatus.FAILED, error="bad")
    with pytest.raises(ValidationError):
        SessionState(session_id="s", status=SessionStatus.FAILED)
    with pytest.raises(ValidationError):
        SessionState(session_id="s", status=SessionStatus.PROCESSING, error="bad")


@pytest.mark.parametrize("confidence", [-0.1, 1.01])
def test_confidence_is_bounded(confidence):
    with pytest.raises(ValidationError):
        Finding(condition="x", confidence=confidence, description="", severity="Mild")


def test_state_is_frozen():
    state = SessionState(session_id="s")
    with pytest.raises(ValidationError):
        state.status = SessionStatus.PROCESSING
