"""
Database Probe - Two escalating PostgreSQL checks.

1. Connectivity as the admin role. Failure here short-circuits: not_running.
2. Service account against the service database. Failure is missing_schema
   when the database itself is absent, missing_user otherwise.
"""
import re

from deploycheck.config import settings
from deploycheck.schemas.targets import DatabaseTarget
from deploycheck.services.commands import CommandTimeout
from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext

TABLE_COUNT_SQL = "SELECT COUNT(*) FROM information_schema.tables WHERE table_schema = 'public';"
MISSING_DATABASE = re.compile(r'database "[^"]+" does not exist')


def psql(target: DatabaseTarget, user: str, sql: str, database: str = None) -> list[str]:
    """Build a `docker exec ... psql` argv."""
    args = ["docker", "exec", target.container, "psql", "-U", user]
    if database:
        args += ["-d", database]
    return args + ["-tAc", sql]


class DatabaseProbe(Probe):
    """Checks the data store is reachable and provisioned for the service account."""

    category = Category.DATABASE
    failure_kind = IssueKind.NOT_RUNNING

    def __init__(self, target: DatabaseTarget, **kwargs):
        super().__init__("postgres", **kwargs)
        self.target = target

    def step_timeout(self) -> float:
        """Per-command limit; both steps must fit inside the probe timeout."""
        return min(settings.COMMAND_TIMEOUT, self.timeout / 2)

    async def check(self, ctx: ProbeContext):
        t = self.target
        limit = self.step_timeout()

        try:
            conn = await ctx.commands.run(psql(t, t.admin_user, "SELECT 1;"), timeout=limit)
        except (CommandTimeout, OSError) as e:
            return self.fail(f"container {t.container} unreachable: {e}")
        if not conn.ok:
            return self.fail(f"container {t.container} not running: {conn.output}")

        try:
            scoped = await ctx.commands.run(psql(t, t.user, TABLE_COUNT_SQL, database=t.name), timeout=limit)
        except (CommandTimeout, OSError) as e:
            return self.fail(f"service account check failed: {e}", IssueKind.MISSING_USER)

        if scoped.ok:
            tables = scoped.stdout.strip() or "0"
            return self.passed(f"{t.user}@{t.name}: {tables} public tables")

        if MISSING_DATABASE.search(scoped.output):
            return self.fail(f"database {t.name} does not exist", IssueKind.MISSING_SCHEMA)
        return self.fail(f"role {t.user} cannot connect: {scoped.output}", IssueKind.MISSING_USER)
