"""
Cache Probe - Redis liveness ping.
"""
from deploycheck.schemas.targets import CacheTarget
from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext


class CacheProbe(Probe):
    category = Category.CACHE
    failure_kind = IssueKind.CACHE_UNREACHABLE

    def __init__(self, target: CacheTarget, **kwargs):
        super().__init__("redis", **kwargs)
        self.target = target

    async def check(self, ctx: ProbeContext):
        result = await ctx.commands.run(["docker", "exec", self.target.container, "redis-cli", "ping"])
        if result.ok and result.stdout.strip() == "PONG":
            return self.passed("PONG")
        return self.fail(result.output or f"exit status {result.returncode}")
