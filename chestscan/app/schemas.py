# app/schemas.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class Severity(str, Enum):
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"


class SessionStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


class Finding(BaseModel):
    condition: str
    confidence: float = Field(ge=0.0, le=1.0)
    description: str
    severity: Severity
    regions: List[str] = []


class Report(BaseModel):
    findings: List[Finding] = []
    recommendations: List[str] = []
    timestamp: datetime


class SessionState(BaseModel):
    """Snapshot of one workflow session. Never mutated once published."""

    session_id: str
    token: int = 0
    status: SessionStatus = SessionStatus.IDLE
    image_url: Optional[str] = None
    error: Optional[str] = None
    report: Optional[Report] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_status_fields(self):
        if (self.report is not None) != (self.status == SessionStatus.COMPLETE):
            raise ValueError("report must be set exactly when status is complete")
        if (self.error is not None) != (self.status == SessionStatus.FAILED):
            raise ValueError("error must be set exactly when status is failed")
        return self

    @property
    def is_processing(self) -> bool:
        return self.status == SessionStatus.PROCESSING


class SessionResponse(SessionState):
    scan_position: int = 0
