"""
Pydantic schemas for readiness reports.
"""

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field


class ProbeResultOut(BaseModel):
    """Individual probe result."""
    category: str
    name: str
    outcome: Literal["pass", "degraded", "fail"]
    detail: str = ""
    kind: Optional[str] = None


class IssueOut(BaseModel):
    """Ledgered issue."""
    category: str
    name: str
    kind: str
    severity: Literal["critical", "normal"]
    detail: str = ""


class RemediationOut(BaseModel):
    action: str
    status: Literal["applied", "failed", "skipped"]
    detail: str = ""
    advisory: bool = False


class ScoreOut(BaseModel):
    """Readiness score."""
    percentage: int = Field(..., ge=0, le=100)
    mode: Literal["penalty", "weighted"]
    verdict: Literal["ready", "near_ready", "significant_work", "not_ready"]
    breakdown: dict[str, float] = {}


class ReadinessReport(BaseModel):
    """Complete readiness report."""
    project: str

    # Timestamps
    started_at: datetime
    completed_at: datetime
    duration_seconds: float = 0

    score: ScoreOut
    exit_code: int

    # Details
    results: list[ProbeResultOut] = []
    issues: list[IssueOut] = []
    critical_issues: int = 0
    remediations: list[RemediationOut] = []
    next_steps: list[str] = []

    # Metadata
    scoring_version: str = "1.0"

    class Config:
        json_schema_extra = {
            "example": {
                "project": "stylze",
                "started_at": "2024-01-01T12:00:00Z",
                "completed_at": "2024-01-01T12:00:05Z",
                "duration_seconds": 5.2,
                "score": {
                    "percentage": 72,
                    "mode": "weighted",
                    "verdict": "near_ready",
                    "breakdown": {"service": 30.0, "database": 15.0}
                },
                "exit_code": 0
            }
        }
