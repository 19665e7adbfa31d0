"""
Issue model - probe results, issues and the per-run ledger.

Every non-passing probe result materializes as exactly one Issue. Issue kinds
are a closed enum; each kind is bound to the categories it can occur in.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class Category(str, Enum):
    """Diagnostic groupings, declared in execution order."""
    SERVICE = "service"
    DATABASE = "database"
    CACHE = "cache"
    CONFIGURATION = "configuration"
    API = "api"
    SECURITY = "security"
    MONITORING = "monitoring"
    TESTING = "testing"


CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)


class Outcome(str, Enum):
    PASS = "pass"
    DEGRADED = "degraded"
    FAIL = "fail"


class Severity(str, Enum):
    CRITICAL = "critical"
    NORMAL = "normal"


class IssueKind(str, Enum):
    """Specific sub-classification of a problem."""
    # service / database
    NOT_RUNNING = "not_running"
    DEGRADED = "degraded"
    MISSING_USER = "missing_user"
    MISSING_SCHEMA = "missing_schema"
    # cache
    CACHE_UNREACHABLE = "cache_unreachable"
    # configuration
    MOCK_ENABLED = "mock_enabled"
    DEBUG_ENABLED = "debug_enabled"
    LOCAL_STORAGE_ENABLED = "local_storage_enabled"
    MISSING_CONFIG = "missing_config"
    MISSING_ENV_VAR = "missing_env_var"
    DEFAULT_SECRET = "default_secret"
    # api
    MOCK_RESPONSE = "mock_response"
    ENDPOINT_ERROR = "endpoint_error"
    MISSING_CREDENTIAL = "missing_credential"
    CREDENTIAL_FILE_MISSING = "credential_file_missing"
    # security
    HARDCODED_SECRET = "hardcoded_secret"
    NO_HTTPS = "no_https"
    NO_RATE_LIMITING = "no_rate_limiting"
    # monitoring
    METRICS_UNREACHABLE = "metrics_unreachable"
    NO_SCRAPE_TARGETS = "no_scrape_targets"
    DASHBOARD_UNREACHABLE = "dashboard_unreachable"
    NO_LOGGING = "no_logging"
    # testing
    LOW_COVERAGE = "low_coverage"
    NO_CI = "no_ci"


KIND_CATEGORIES: dict[IssueKind, frozenset[Category]] = {
    IssueKind.NOT_RUNNING: frozenset({Category.SERVICE, Category.DATABASE}),
    IssueKind.DEGRADED: frozenset({Category.SERVICE}),
    IssueKind.MISSING_USER: frozenset({Category.DATABASE}),
    IssueKind.MISSING_SCHEMA: frozenset({Category.DATABASE}),
    IssueKind.CACHE_UNREACHABLE: frozenset({Category.CACHE}),
    IssueKind.MOCK_ENABLED: frozenset({Category.CONFIGURATION}),
    IssueKind.DEBUG_ENABLED: frozenset({Category.CONFIGURATION}),
    IssueKind.LOCAL_STORAGE_ENABLED: frozenset({Category.CONFIGURATION}),
    IssueKind.MISSING_CONFIG: frozenset({Category.CONFIGURATION}),
    IssueKind.MISSING_ENV_VAR: frozenset({Category.CONFIGURATION}),
    IssueKind.DEFAULT_SECRET: frozenset({Category.CONFIGURATION}),
    IssueKind.MOCK_RESPONSE: frozenset({Category.API}),
    IssueKind.ENDPOINT_ERROR: frozenset({Category.API}),
    IssueKind.MISSING_CREDENTIAL: frozenset({Category.API}),
    IssueKind.CREDENTIAL_FILE_MISSING: frozenset({Category.API}),
    IssueKind.HARDCODED_SECRET: frozenset({Category.SECURITY}),
    IssueKind.NO_HTTPS: frozenset({Category.SECURITY}),
    IssueKind.NO_RATE_LIMITING: frozenset({Category.SECURITY}),
    IssueKind.METRICS_UNREACHABLE: frozenset({Category.MONITORING}),
    IssueKind.NO_SCRAPE_TARGETS: frozenset({Category.MONITORING}),
    IssueKind.DASHBOARD_UNREACHABLE: frozenset({Category.MONITORING}),
    IssueKind.NO_LOGGING: frozenset({Category.MONITORING}),
    IssueKind.LOW_COVERAGE: frozenset({Category.TESTING}),
    IssueKind.NO_CI: frozenset({Category.TESTING}),
}

CRITICAL_CATEGORIES = frozenset({Category.SECURITY, Category.DATABASE})


def _check_kind(category: Category, kind: IssueKind) -> None:
    if category not in KIND_CATEGORIES[kind]:
        raise ValueError(f"Issue kind {kind.value} is not valid for category {category.value}")


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe invocation."""
    category: Category
    name: str
    outcome: Outcome
    detail: str = ""
    kind: Optional[IssueKind] = None

    def __post_init__(self):
        if self.outcome is Outcome.PASS:
            if self.kind is not None:
                raise ValueError("A passing probe result carries no issue kind")
        else:
            if self.kind is None:
                raise ValueError(f"Probe result {self.name} is {self.outcome.value} but has no issue kind")
            _check_kind(self.category, self.kind)

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS


@dataclass(frozen=True)
class Issue:
    """A materialized problem derived from a non-passing probe result."""
    category: Category
    name: str
    kind: IssueKind
    detail: str = ""
    outcome: Outcome = Outcome.FAIL

    def __post_init__(self):
        _check_kind(self.category, self.kind)

    @property
    def severity(self) -> Severity:
        if self.category in CRITICAL_CATEGORIES or self.kind is IssueKind.NOT_RUNNING:
            return Severity.CRITICAL
        return Severity.NORMAL

    @classmethod
    def from_result(cls, result: ProbeResult) -> Optional["Issue"]:
        """Materialize an Issue, or None for a passing result."""
        if result.passed:
            return None
        return cls(
            category=result.category,
            name=result.name,
            kind=result.kind,
            detail=result.detail,
            outcome=result.outcome
        )


@dataclass(frozen=True)
class Ledger:
    """Ordered, immutable sequence of Issues for one run."""
    issues: tuple[Issue, ...] = ()

    def extend(self, issues) -> "Ledger":
        return Ledger(self.issues + tuple(issues))

    def by_category(self, category: Category) -> list[Issue]:
        return [i for i in self.issues if i.category is category]

    def by_severity(self, severity: Severity) -> list[Issue]:
        return [i for i in self.issues if i.severity is severity]

    def critical(self) -> list[Issue]:
        return self.by_severity(Severity.CRITICAL)

    def find(self, kind: IssueKind, category: Optional[Category] = None) -> list[Issue]:
        return [
            i for i in self.issues
            if i.kind is kind and (category is None or i.category is category)
        ]

    def has(self, kind: IssueKind, category: Optional[Category] = None) -> bool:
        return bool(self.find(kind, category))

    def counts_by_category(self) -> dict[Category, int]:
        counts = {c: 0 for c in CATEGORY_ORDER}
        for issue in self.issues:
            counts[issue.category] += 1
        return counts

    def __iter__(self) -> Iterator[Issue]:
        return iter(self.issues)

    def __len__(self) -> int:
        return len(self.issues)


@dataclass(frozen=True)
class ValidationRun:
    """Probe results and ledger of one run, threaded through the runner."""
    results: tuple[ProbeResult, ...] = ()
    ledger: Ledger = field(default_factory=Ledger)

    def record(self, results) -> "ValidationRun":
        """Return a new run with results appended and their issues ledgered."""
        results = tuple(results)
        issues = [i for i in (Issue.from_result(r) for r in results) if i is not None]
        return ValidationRun(
            results=self.results + results,
            ledger=self.ledger.extend(issues)
        )

    def results_for(self, category: Category) -> list[ProbeResult]:
        return [r for r in self.results if r.category is category]


class RemediationStatus(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class RemediationOutcome:
    """Result of one remediation attempt."""
    action: str
    status: RemediationStatus
    detail: str = ""
    advisory: bool = False
