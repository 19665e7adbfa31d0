"""
Readiness API endpoints.

Runs are validate-only; remediation is reserved for the CLI.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from deploycheck.config import settings
from deploycheck.logger import logger
from deploycheck.schemas.report import ReadinessReport
from deploycheck.schemas.targets import TargetsError, load_targets
from deploycheck.services.readiness_runner import ReadinessRunner, build_report
from deploycheck.services.scoring.models import ScoringMode

router = APIRouter(tags=["Readiness"])


class ReadinessRequest(BaseModel):
    """Request body for a readiness run."""
    mode: ScoringMode = Field(ScoringMode.WEIGHTED, description="Scoring mode")

    class Config:
        json_schema_extra = {
            "example": {"mode": "weighted"}
        }


def get_runner() -> ReadinessRunner:
    try:
        targets = load_targets(settings.TARGETS_FILE)
    except TargetsError as e:
        logger.error(f"Cannot load targets: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return ReadinessRunner(targets)


@router.post("", response_model=ReadinessReport)
async def run_readiness(request: ReadinessRequest, runner: ReadinessRunner = Depends(get_runner)):
    """Validate the deployment and return the scored report."""
    try:
        outcome = await runner.run(request.mode, fix=False)
    except Exception as e:
        logger.exception(f"Readiness run failed: {e}")
        raise HTTPException(status_code=500, detail="Readiness run failed")

    logger.info(f"Readiness run completed: {outcome.score.percentage}% ({request.mode.value})")
    return build_report(outcome)
