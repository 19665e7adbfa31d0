"""
Probe base - contract shared by every readiness probe.

A probe checks one dependency and always returns a ProbeResult: timeouts,
connection errors and unexpected exceptions become a failing result.
"""
import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import httpx

from deploycheck.config import settings
from deploycheck.logger import logger
from deploycheck.services.commands import CommandRunner
from deploycheck.services.models import Category, IssueKind, Outcome, ProbeResult


@dataclass
class ProbeContext:
    """Collaborators available to probes during one run."""
    http: httpx.AsyncClient
    commands: CommandRunner = field(default_factory=CommandRunner)
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    root: Path = field(default_factory=lambda: Path(settings.ROOT))
    # Transport for probes that build their own client (TLS settings differ)
    transport: Optional[httpx.AsyncBaseTransport] = None

    def path(self, relative: str) -> Path:
        """Resolve a declared path against the project root."""
        p = Path(relative)
        return p if p.is_absolute() else self.root / p


class Probe:
    """Base class for probes.

    Subclasses set `category`, `failure_kind` and implement `check`.
    """

    category: Category
    failure_kind: IssueKind
    timeout: float = settings.PROBE_TIMEOUT

    def __init__(self, name: str, timeout: Optional[float] = None):
        self.name = name
        if timeout is not None:
            self.timeout = timeout

    async def run(self, ctx: ProbeContext) -> ProbeResult:
        """Run the check within this probe's timeout. Never raises."""
        try:
            return await asyncio.wait_for(self.check(ctx), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self.category.value}/{self.name}: timed out after {self.timeout}s")
            return self.fail(f"timed out after {self.timeout}s")
        except Exception as e:
            logger.exception(f"{self.category.value}/{self.name}: {type(e).__name__}: {e}")
            return self.fail(str(e) or type(e).__name__)

    async def check(self, ctx: ProbeContext) -> ProbeResult:
        raise NotImplementedError

    def passed(self, detail: str = "") -> ProbeResult:
        return ProbeResult(self.category, self.name, Outcome.PASS, detail)

    def fail(self, detail: str = "", kind: Optional[IssueKind] = None) -> ProbeResult:
        return ProbeResult(self.category, self.name, Outcome.FAIL, detail, kind or self.failure_kind)

    def degraded(self, detail: str, kind: IssueKind) -> ProbeResult:
        return ProbeResult(self.category, self.name, Outcome.DEGRADED, detail, kind)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
