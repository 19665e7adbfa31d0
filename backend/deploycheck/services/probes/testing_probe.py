"""
Testing Probes - Test file counts and CI workflow definitions.
"""
from deploycheck.schemas.targets import CoverageTargets
from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext


class TestSuiteProbe(Probe):
    """Counts test files across the declared directories."""

    __test__ = False  # not a pytest class

    category = Category.TESTING
    failure_kind = IssueKind.LOW_COVERAGE

    def __init__(self, target: CoverageTargets, **kwargs):
        super().__init__("test files", **kwargs)
        self.target = target

    def _is_test_file(self, filename: str) -> bool:
        return (
            any(m in filename for m in self.target.markers)
            or any(filename.startswith(p) for p in self.target.prefixes)
        )

    async def check(self, ctx: ProbeContext):
        total = 0
        for test_dir in self.target.test_dirs:
            path = ctx.path(test_dir)
            if path.is_dir():
                total += sum(1 for f in path.iterdir() if f.is_file() and self._is_test_file(f.name))

        if total > self.target.minimum:
            return self.passed(f"{total} test files found")
        return self.fail(f"only {total} test files found (need more than {self.target.minimum})")


class CiWorkflowProbe(Probe):
    """At least one CI workflow must be defined."""

    category = Category.TESTING
    failure_kind = IssueKind.NO_CI

    def __init__(self, workflows_dir: str, **kwargs):
        super().__init__("ci workflows", **kwargs)
        self.workflows_dir = workflows_dir

    async def check(self, ctx: ProbeContext):
        path = ctx.path(self.workflows_dir)
        if not path.is_dir():
            return self.fail(f"{self.workflows_dir} not found")

        workflows = [f for f in path.iterdir() if f.is_file()]
        if workflows:
            return self.passed(f"{len(workflows)} workflows configured")
        return self.fail("no workflows configured")
