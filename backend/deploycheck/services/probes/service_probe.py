"""
Service Probe - HTTP health check against one deployed service.
"""
import httpx

from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext


class ServiceProbe(Probe):
    """Healthy iff GET <health_path> answers 200 with {"status": "healthy"}."""

    category = Category.SERVICE
    failure_kind = IssueKind.NOT_RUNNING
    timeout = 2.0

    def __init__(self, name: str, host: str, port: int, health_path: str = "/health", **kwargs):
        super().__init__(name, **kwargs)
        self.port = port
        self.url = f"http://{host}:{port}{health_path}"

    async def check(self, ctx: ProbeContext):
        try:
            response = await ctx.http.get(self.url, timeout=self.timeout)
        except httpx.HTTPError as e:
            return self.fail(f"not running on port {self.port}: {type(e).__name__}")

        if response.status_code != 200:
            return self.fail(f"HTTP {response.status_code} from {self.url}")

        try:
            status = response.json().get("status")
        except (ValueError, AttributeError):
            status = None

        if status == "healthy":
            return self.passed(f"healthy (port {self.port})")
        return self.degraded(f"reported status {status!r}", IssueKind.DEGRADED)
