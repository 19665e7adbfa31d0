"""
Scoring Engine - Converts a validation run into a readiness score.

Modes:
- Penalty: 100 minus fixed deductions per issue and per critical issue
- Weighted: fixed category weights times each category's pass ratio
"""

import math
from typing import Sequence

from deploycheck.logger import logger
from deploycheck.services.models import CATEGORY_ORDER, Ledger, ProbeResult, ValidationRun
from deploycheck.services.scoring.models import ReadinessScore, ScoringMode, Verdict
from deploycheck.services.scoring.weights import (
    CATEGORY_WEIGHTS,
    PENALTY_WEIGHTS,
    THRESHOLDS,
    CategoryWeights,
    PenaltyWeights,
)


def verdict_for(percentage: int, mode: ScoringMode) -> Verdict:
    """Map a percentage to a verdict; only weighted mode has the significant-work tier."""
    if percentage >= THRESHOLDS.ready:
        return Verdict.READY
    if percentage >= THRESHOLDS.near_ready:
        return Verdict.NEAR_READY
    if mode is ScoringMode.WEIGHTED and percentage >= THRESHOLDS.significant_work:
        return Verdict.SIGNIFICANT_WORK
    return Verdict.NOT_READY


class ScoringEngine:
    """Scores a run under either mode."""

    def __init__(
        self,
        category_weights: CategoryWeights = CATEGORY_WEIGHTS,
        penalty_weights: PenaltyWeights = PENALTY_WEIGHTS
    ):
        self.category_weights = category_weights
        self.penalty_weights = penalty_weights

    def penalty(self, ledger: Ledger) -> ReadinessScore:
        total = len(ledger)
        critical = len(ledger.critical())
        deduction = total * self.penalty_weights.per_issue + critical * self.penalty_weights.per_critical
        percentage = max(0, 100 - deduction)

        return ReadinessScore(
            percentage=percentage,
            mode=ScoringMode.PENALTY,
            verdict=verdict_for(percentage, ScoringMode.PENALTY),
            breakdown={"issues": total, "critical": critical, "deduction": deduction}
        )

    def weighted(self, results: Sequence[ProbeResult]) -> ReadinessScore:
        breakdown: dict[str, float] = {}
        score = 0.0

        for category in CATEGORY_ORDER:
            weight = self.category_weights.for_category(category)
            if not weight:
                continue
            checks = [r for r in results if r.category is category]
            # An empty category contributes nothing but keeps its weight
            contribution = weight * sum(1 for r in checks if r.passed) / len(checks) if checks else 0.0
            breakdown[category.value] = round(contribution, 2)
            score += contribution

        percentage = min(100, int(math.floor(score + 0.5)))
        return ReadinessScore(
            percentage=percentage,
            mode=ScoringMode.WEIGHTED,
            verdict=verdict_for(percentage, ScoringMode.WEIGHTED),
            breakdown=breakdown
        )

    def score(self, run: ValidationRun, mode: ScoringMode) -> ReadinessScore:
        """Score a run under the explicitly selected mode."""
        if mode is ScoringMode.PENALTY:
            result = self.penalty(run.ledger)
        else:
            result = self.weighted(run.results)

        logger.info(f"Readiness ({mode.value}): {result.percentage}% -> {result.verdict.value}")
        return result
