"""
Security Probes - Hardcoded secrets, secured transport, rate limiting.
"""
import asyncio
import re
from typing import Optional

import httpx

from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext

SECRET_PATTERNS = [
    re.compile(r"JWT_SECRET\s*=\s*[\"'][\w\-]+[\"']"),
    re.compile(r"password\s*=\s*[\"']\w+[\"']", re.IGNORECASE),
    re.compile(r"api[_\-]?key\s*=\s*[\"'][\w\-]+[\"']", re.IGNORECASE),
]


class HardcodedSecretProbe(Probe):
    """Static scan of one source artifact for secret assignments."""

    category = Category.SECURITY
    failure_kind = IssueKind.HARDCODED_SECRET

    def __init__(self, source: str, **kwargs):
        super().__init__(f"secrets in {source}", **kwargs)
        self.source = source

    async def check(self, ctx: ProbeContext):
        path = ctx.path(self.source)
        if not path.exists():
            return self.passed("absent")

        content = path.read_text(encoding="utf-8", errors="replace")
        for pattern in SECRET_PATTERNS:
            match = pattern.search(content)
            if match:
                # Report the assignment target only, never the value
                target = re.split(r"\s*=", match.group(0), maxsplit=1)[0]
                return self.fail(f"hardcoded {target} in {path.name}")
        return self.passed("clean")


class TransportSecurityProbe(Probe):
    """A service must answer over HTTPS."""

    category = Category.SECURITY
    failure_kind = IssueKind.NO_HTTPS

    def __init__(self, url: str, verify: bool = True, **kwargs):
        super().__init__("HTTPS", **kwargs)
        self.url = url
        self.verify = verify

    async def check(self, ctx: ProbeContext):
        try:
            # TLS verification is a client setting, so this probe needs its own client
            async with httpx.AsyncClient(verify=self.verify, timeout=self.timeout, transport=ctx.transport) as client:
                await client.get(self.url)
        except httpx.HTTPError as e:
            return self.fail(f"{self.url}: {type(e).__name__}")
        return self.passed("enabled")


class RateLimitProbe(Probe):
    """Fires a burst of requests; at least one must be rejected as rate-limited."""

    category = Category.SECURITY
    failure_kind = IssueKind.NO_RATE_LIMITING

    def __init__(self, url: str, burst: int = 10, limited_status: int = 429, **kwargs):
        super().__init__("rate limiting", **kwargs)
        self.url = url
        self.burst = burst
        self.limited_status = limited_status

    async def _hit(self, ctx: ProbeContext) -> Optional[int]:
        try:
            response = await ctx.http.get(self.url, timeout=1.0)
            return response.status_code
        except httpx.HTTPError:
            return None

    async def check(self, ctx: ProbeContext):
        statuses = await asyncio.gather(*(self._hit(ctx) for _ in range(self.burst)))
        limited = sum(1 for s in statuses if s == self.limited_status)
        if limited:
            return self.passed(f"{limited}/{self.burst} requests limited")
        return self.fail(f"0/{self.burst} requests answered {self.limited_status}")
