from dataclasses import dataclass, field
from enum import Enum


class ScoringMode(str, Enum):
    PENALTY = "penalty"
    WEIGHTED = "weighted"


class Verdict(str, Enum):
    READY = "ready"
    NEAR_READY = "near_ready"
    SIGNIFICANT_WORK = "significant_work"
    NOT_READY = "not_ready"


@dataclass
class ReadinessScore:
    """Readiness of one run."""
    percentage: int  # 0-100
    mode: ScoringMode
    verdict: Verdict
    breakdown: dict[str, float] = field(default_factory=dict)

    @property
    def exit_code(self) -> int:
        from deploycheck.services.scoring.weights import THRESHOLDS
        return 0 if self.percentage >= THRESHOLDS.passing else 1
