"""
Readiness Runner - Main orchestrator for validation runs.

Coordinates checklist execution, scoring and optional remediation.
"""
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

import httpx

from deploycheck.config import settings
from deploycheck.logger import logger
from deploycheck.schemas.report import (
    IssueOut,
    ProbeResultOut,
    ReadinessReport,
    RemediationOut,
    ScoreOut,
)
from deploycheck.schemas.targets import Targets
from deploycheck.services.checklist import ChecklistRunner, build_checklists
from deploycheck.services.commands import CommandRunner
from deploycheck.services.models import RemediationOutcome, RemediationStatus, ValidationRun
from deploycheck.services.probes.api_probe import PlaceholderPredicate, looks_like_placeholder
from deploycheck.services.probes.base import ProbeContext
from deploycheck.services.remediation import NEXT_STEPS, Remediator
from deploycheck.services.scoring.engine import ScoringEngine
from deploycheck.services.scoring.models import ReadinessScore, ScoringMode
from deploycheck.services.scoring.weights import SCORING_VERSION


@dataclass
class RunOutcome:
    """Everything one run produced."""
    run: ValidationRun
    score: ReadinessScore
    remediations: list[RemediationOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def exit_code(self) -> int:
        return self.score.exit_code


class ReadinessRunner:
    """Orchestrates the complete validation process."""

    def __init__(
        self,
        targets: Targets,
        root: Optional[Path] = None,
        commands: Optional[CommandRunner] = None,
        environ: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        is_placeholder: PlaceholderPredicate = looks_like_placeholder,
        remediator: Optional[Remediator] = None
    ):
        self.targets = targets
        self.root = root or Path(settings.ROOT)
        self.commands = commands or CommandRunner()
        self.environ = dict(environ) if environ is not None else dict(os.environ)
        self.transport = transport
        self.is_placeholder = is_placeholder
        self.checklist_runner = ChecklistRunner()
        self.scoring_engine = ScoringEngine()
        self.remediator = remediator or Remediator(
            targets, self.root, commands=self.commands, environ=self.environ
        )

    async def validate(self) -> ValidationRun:
        """Run every checklist once against a fresh ledger."""
        checklists = build_checklists(self.targets, self.is_placeholder)
        async with httpx.AsyncClient(transport=self.transport, timeout=settings.HTTP_TIMEOUT) as client:
            ctx = ProbeContext(
                http=client,
                commands=self.commands,
                environ=self.environ,
                root=self.root,
                transport=self.transport
            )
            return await self.checklist_runner.run(checklists, ctx)

    async def run(self, mode: ScoringMode, fix: bool = False) -> RunOutcome:
        """
        Run a complete validation.

        Args:
            mode: Scoring mode, chosen explicitly by the caller
            fix: Whether to attempt remediation after scoring

        Returns:
            RunOutcome with results, ledger, score and remediation outcomes
        """
        started_at = datetime.utcnow()
        logger.info(f"Starting readiness validation for {settings.PROJECT_NAME} (mode={mode.value})")

        run = await self.validate()
        score = self.scoring_engine.score(run, mode)

        remediations = []
        if fix:
            remediations = await self.remediator.remediate(run.ledger)

        return RunOutcome(
            run=run,
            score=score,
            remediations=remediations,
            started_at=started_at,
            completed_at=datetime.utcnow()
        )


def build_report(outcome: RunOutcome) -> ReadinessReport:
    """Serializable view of a run."""
    run = outcome.run
    applied = any(r.status is RemediationStatus.APPLIED for r in outcome.remediations)

    return ReadinessReport(
        project=settings.PROJECT_NAME,
        started_at=outcome.started_at,
        completed_at=outcome.completed_at,
        duration_seconds=round((outcome.completed_at - outcome.started_at).total_seconds(), 2),
        score=ScoreOut(
            percentage=outcome.score.percentage,
            mode=outcome.score.mode.value,
            verdict=outcome.score.verdict.value,
            breakdown=outcome.score.breakdown
        ),
        exit_code=outcome.exit_code,
        results=[
            ProbeResultOut(
                category=r.category.value,
                name=r.name,
                outcome=r.outcome.value,
                detail=r.detail,
                kind=r.kind.value if r.kind else None
            )
            for r in run.results
        ],
        issues=[
            IssueOut(
                category=i.category.value,
                name=i.name,
                kind=i.kind.value,
                severity=i.severity.value,
                detail=i.detail
            )
            for i in run.ledger
        ],
        critical_issues=len(run.ledger.critical()),
        remediations=[
            RemediationOut(action=r.action, status=r.status.value, detail=r.detail, advisory=r.advisory)
            for r in outcome.remediations
        ],
        next_steps=NEXT_STEPS if applied else [],
        scoring_version=SCORING_VERSION
    )
