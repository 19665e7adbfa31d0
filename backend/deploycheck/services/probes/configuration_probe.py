"""
Configuration Probes - Forbidden patterns in config sources, required secrets in the environment.

Checks:
- Mock mode, debug flag and local storage must be off in each config source
- Required variables must be set and must not hold a default/dev value
"""
import re
from typing import Sequence

from deploycheck.schemas.targets import ConfigRule, ConfigSource, EnvVarTarget
from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext


class ConfigRuleProbe(Probe):
    """One forbidden pattern evaluated against one configuration source."""

    category = Category.CONFIGURATION
    failure_kind = IssueKind.MISSING_CONFIG

    def __init__(self, source: ConfigSource, rule: ConfigRule, **kwargs):
        super().__init__(f"{rule.name} ({source.path})", **kwargs)
        self.source = source
        self.rule = rule
        self.pattern = re.compile(rule.pattern, re.IGNORECASE | re.MULTILINE)

    async def check(self, ctx: ProbeContext):
        path = ctx.path(self.source.path)
        if not path.exists():
            if self.source.required:
                return self.fail(f"{self.source.path} not found")
            return self.passed("absent")

        content = path.read_text(encoding="utf-8", errors="replace")
        match = self.pattern.search(content)
        if match:
            return self.fail(f"{match.group(0).strip()} in {path.name}", self.rule.kind)
        return self.passed("disabled")


def is_default_value(value: str, markers: Sequence[str]) -> bool:
    """True when a secret looks like a development placeholder."""
    lowered = value.strip().lower()
    return any(lowered == m or lowered.startswith(m) for m in markers)


class EnvVarProbe(Probe):
    """One declared environment variable."""

    category = Category.CONFIGURATION
    failure_kind = IssueKind.MISSING_ENV_VAR

    def __init__(self, target: EnvVarTarget, default_markers: Sequence[str] = (), **kwargs):
        super().__init__(target.name, **kwargs)
        self.target = target
        self.default_markers = [m.lower() for m in default_markers]

    async def check(self, ctx: ProbeContext):
        value = ctx.environ.get(self.target.name, "")
        if not value:
            if self.target.required:
                return self.fail(f"{self.target.name} is not set")
            return self.passed("optional, not set")

        if is_default_value(value, self.default_markers):
            return self.fail(f"{self.target.name} holds a default value", IssueKind.DEFAULT_SECRET)
        return self.passed("set")
