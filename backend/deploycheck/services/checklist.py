"""
Checklist Runner - Executes probes category by category.

Categories run sequentially in a fixed order so the ledger is deterministic;
the probes of one category are independent and run concurrently.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Iterable

from deploycheck.logger import logger
from deploycheck.schemas.targets import Targets
from deploycheck.services.models import CATEGORY_ORDER, Category, ProbeResult, ValidationRun
from deploycheck.services.probes.api_probe import (
    ApiCredentialProbe,
    ApiEndpointProbe,
    PlaceholderPredicate,
    looks_like_placeholder,
)
from deploycheck.services.probes.base import Probe, ProbeContext
from deploycheck.services.probes.cache_probe import CacheProbe
from deploycheck.services.probes.configuration_probe import ConfigRuleProbe, EnvVarProbe
from deploycheck.services.probes.database_probe import DatabaseProbe
from deploycheck.services.probes.monitoring_probe import DashboardProbe, LogArtifactProbe, MetricsTargetsProbe
from deploycheck.services.probes.security_probe import HardcodedSecretProbe, RateLimitProbe, TransportSecurityProbe
from deploycheck.services.probes.service_probe import ServiceProbe
from deploycheck.services.probes.testing_probe import CiWorkflowProbe, TestSuiteProbe


@dataclass
class Checklist:
    """The ordered probes of one category."""
    category: Category
    probes: list[Probe] = field(default_factory=list)


def build_checklists(
    targets: Targets,
    is_placeholder: PlaceholderPredicate = looks_like_placeholder
) -> list[Checklist]:
    """Expand declared targets into one checklist per category, in execution order."""
    probes: dict[Category, list[Probe]] = {c: [] for c in CATEGORY_ORDER}

    for svc in targets.services:
        probes[Category.SERVICE].append(ServiceProbe(svc.name, targets.host, svc.port, svc.health_path))

    probes[Category.DATABASE].append(DatabaseProbe(targets.database))
    probes[Category.CACHE].append(CacheProbe(targets.cache))

    for source in targets.config_sources:
        for rule in targets.config_rules:
            probes[Category.CONFIGURATION].append(ConfigRuleProbe(source, rule))
    for var in targets.env_vars:
        probes[Category.CONFIGURATION].append(EnvVarProbe(var, targets.default_secret_markers))

    for endpoint in targets.endpoints:
        port = targets.service(endpoint.service).port
        probes[Category.API].append(ApiEndpointProbe(endpoint, targets.host, port, is_placeholder))
    for credential in targets.credentials:
        probes[Category.API].append(ApiCredentialProbe(credential))

    sec = targets.security
    for source in sec.source_files:
        probes[Category.SECURITY].append(HardcodedSecretProbe(source))
    probes[Category.SECURITY].append(TransportSecurityProbe(sec.https_url, verify=sec.tls_verify))
    probes[Category.SECURITY].append(
        RateLimitProbe(sec.rate_limit_url, sec.rate_limit_burst, sec.rate_limit_status)
    )

    mon = targets.monitoring
    probes[Category.MONITORING].append(MetricsTargetsProbe(mon.prometheus_url))
    probes[Category.MONITORING].append(DashboardProbe(mon.grafana_url))
    probes[Category.MONITORING].append(LogArtifactProbe(mon.log_files))

    probes[Category.TESTING].append(TestSuiteProbe(targets.testing))
    probes[Category.TESTING].append(CiWorkflowProbe(targets.testing.workflows_dir))

    return [Checklist(category, probes[category]) for category in CATEGORY_ORDER]


class ChecklistRunner:
    """Runs checklists and threads a ValidationRun through them."""

    async def run_checklist(self, checklist: Checklist, ctx: ProbeContext, run: ValidationRun) -> ValidationRun:
        """Run one category's probes concurrently and record their results in order."""
        logger.info(f"Checking {checklist.category.value} ({len(checklist.probes)} probes)...")

        results: list[ProbeResult] = await asyncio.gather(
            *(probe.run(ctx) for probe in checklist.probes)
        )

        for result in results:
            if not result.passed:
                logger.info(f"  {result.outcome.value}: {result.name} [{result.kind.value}] {result.detail}")
        return run.record(results)

    async def run(self, checklists: Iterable[Checklist], ctx: ProbeContext) -> ValidationRun:
        """Run every checklist in order against a fresh run."""
        run = ValidationRun()
        for checklist in checklists:
            run = await self.run_checklist(checklist, ctx, run)
        return run
