"""
Monitoring Probes - Metrics targets, dashboard liveness, log artifacts.
"""
from typing import Sequence

import httpx

from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext


class MetricsTargetsProbe(Probe):
    """Prometheus must be up with at least one active scrape target."""

    category = Category.MONITORING
    failure_kind = IssueKind.METRICS_UNREACHABLE

    def __init__(self, base_url: str, **kwargs):
        super().__init__("prometheus", **kwargs)
        self.url = f"{base_url.rstrip('/')}/api/v1/targets"

    async def check(self, ctx: ProbeContext):
        try:
            response = await ctx.http.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            return self.fail(f"not running: {type(e).__name__}")

        active = (data.get("data") or {}).get("activeTargets") or []
        if active:
            return self.passed(f"{len(active)} active targets")
        return self.degraded("no active targets", IssueKind.NO_SCRAPE_TARGETS)


class DashboardProbe(Probe):
    """Grafana health endpoint."""

    category = Category.MONITORING
    failure_kind = IssueKind.DASHBOARD_UNREACHABLE

    def __init__(self, base_url: str, **kwargs):
        super().__init__("grafana", **kwargs)
        self.url = f"{base_url.rstrip('/')}/api/health"

    async def check(self, ctx: ProbeContext):
        try:
            response = await ctx.http.get(self.url, timeout=self.timeout)
        except httpx.HTTPError as e:
            return self.fail(f"not running: {type(e).__name__}")
        if not response.is_success:
            return self.fail(f"HTTP {response.status_code}")
        return self.passed("running")


class LogArtifactProbe(Probe):
    """At least one declared log file must exist and be non-empty."""

    category = Category.MONITORING
    failure_kind = IssueKind.NO_LOGGING

    def __init__(self, log_files: Sequence[str], **kwargs):
        super().__init__("logging", **kwargs)
        self.log_files = list(log_files)

    async def check(self, ctx: ProbeContext):
        for log_file in self.log_files:
            path = ctx.path(log_file)
            if path.is_file() and path.stat().st_size > 0:
                return self.passed(f"active ({log_file})")
        return self.fail("no non-empty log file found")
