"""
Scoring Weights Configuration

Category weights for the weighted mode, fixed penalties for the penalty mode,
and the verdict thresholds both modes share.
"""

from dataclasses import dataclass

from deploycheck.services.models import Category


@dataclass
class CategoryWeights:
    """Weighted-mode category weights (must sum to 100)."""
    services: int = 35
    database: int = 15
    cache: int = 10
    api: int = 20
    configuration: int = 15
    security: int = 5
    # Reported, not scored
    monitoring: int = 0
    testing: int = 0

    def for_category(self, category: Category) -> int:
        return {
            Category.SERVICE: self.services,
            Category.DATABASE: self.database,
            Category.CACHE: self.cache,
            Category.API: self.api,
            Category.CONFIGURATION: self.configuration,
            Category.SECURITY: self.security,
            Category.MONITORING: self.monitoring,
            Category.TESTING: self.testing,
        }[category]

    @property
    def total(self) -> int:
        return sum(self.for_category(c) for c in Category)


@dataclass
class PenaltyWeights:
    """Penalty-mode deductions."""
    per_issue: int = 5
    per_critical: int = 10  # on top of per_issue


@dataclass
class Thresholds:
    """Verdict boundaries (inclusive lower bounds)."""
    ready: int = 90
    near_ready: int = 70
    significant_work: int = 50  # weighted mode only
    passing: int = 70  # exit code 0 at or above


# Default weight instances
CATEGORY_WEIGHTS = CategoryWeights()
PENALTY_WEIGHTS = PenaltyWeights()
THRESHOLDS = Thresholds()

# Scoring version
SCORING_VERSION = "1.0"

# --- Validation (Prevent Drift) ---
def _validate_weights():
    """Ensure category weights sum to exactly 100."""
    total = CATEGORY_WEIGHTS.total
    if total != 100:
        raise ValueError(f"CRITICAL: Category weights sum to {total}, expected 100")

_validate_weights()
