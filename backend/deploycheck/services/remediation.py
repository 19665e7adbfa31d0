"""
Remediator - Applies a bounded set of known-safe fixes for ledgered issues.

Actions run sequentially. Each one checks its precondition against the
ledger, applies its side effect through a collaborator, and records an
outcome; failures are recorded, never raised. Fixes are not re-validated.
"""

import base64
import secrets
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote

from deploycheck.logger import logger
from deploycheck.schemas.targets import Targets
from deploycheck.services.commands import CommandRunner
from deploycheck.services.models import (
    Category,
    IssueKind,
    Ledger,
    RemediationOutcome,
    RemediationStatus,
)
from deploycheck.services.probes.database_probe import psql

NEXT_STEPS = [
    "Restart all services with production config",
    "Run database migrations",
    "Configure real API keys",
    "Enable HTTPS",
    "Set up monitoring",
]


def generate_secret(nbytes: int = 32) -> str:
    """Fresh base64 secret from the OS CSPRNG."""
    return base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii")


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _sql_ident(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


class Remediator:
    """Selects and applies fixes for the issues of one ledger.

    An instance remembers what it applied; asking again yields `skipped`.
    Not safe to run concurrently against the same infrastructure.
    """

    def __init__(
        self,
        targets: Targets,
        root: Path,
        commands: Optional[CommandRunner] = None,
        environ: Optional[dict] = None,
        secret_factory: Callable[[], str] = generate_secret
    ):
        self.targets = targets
        self.root = root
        self.commands = commands or CommandRunner()
        self.environ = environ if environ is not None else {}
        self.secret_factory = secret_factory
        self.applied: set[str] = set()

    async def remediate(self, ledger: Ledger) -> list[RemediationOutcome]:
        """Attempt every known fix against the ledger, in a fixed order."""
        if not len(ledger):
            return []

        logger.info("Attempting automatic fixes...")
        outcomes = [
            await self._guarded("database_setup", self._database_setup, ledger),
            await self._guarded("production_config", self._production_config, ledger),
        ]
        outcomes.extend(self._service_advisories(ledger))

        applied = sum(1 for o in outcomes if o.status is RemediationStatus.APPLIED)
        logger.info(f"Fixes applied: {applied}")
        return outcomes

    async def _guarded(self, action: str, fix, ledger: Ledger) -> RemediationOutcome:
        if action in self.applied:
            return RemediationOutcome(action, RemediationStatus.SKIPPED, "already applied")
        try:
            outcome = await fix(ledger)
        except Exception as e:
            logger.exception(f"Fix {action} failed: {e}")
            return RemediationOutcome(action, RemediationStatus.FAILED, str(e) or type(e).__name__)

        if outcome.status is RemediationStatus.APPLIED:
            self.applied.add(action)
            logger.info(f"Fix {action} applied: {outcome.detail}")
        elif outcome.status is RemediationStatus.FAILED:
            logger.error(f"Fix {action} failed: {outcome.detail}")
        return outcome

    async def _database_setup(self, ledger: Ledger) -> RemediationOutcome:
        action = "database_setup"
        if ledger.has(IssueKind.NOT_RUNNING, Category.DATABASE):
            return RemediationOutcome(action, RemediationStatus.SKIPPED, "database is not running")

        missing_user = ledger.has(IssueKind.MISSING_USER, Category.DATABASE)
        missing_schema = ledger.has(IssueKind.MISSING_SCHEMA, Category.DATABASE)
        if not (missing_user or missing_schema):
            return RemediationOutcome(action, RemediationStatus.SKIPPED, "no database issue")

        db = self.targets.database
        password = self.environ.get(db.password_env)
        if not password:
            return RemediationOutcome(action, RemediationStatus.FAILED, f"{db.password_env} is not set")

        steps = []
        if missing_user:
            create_role = (
                "DO $$ BEGIN "
                f"IF NOT EXISTS (SELECT FROM pg_roles WHERE rolname = {_sql_literal(db.user)}) THEN "
                f"CREATE ROLE {_sql_ident(db.user)} LOGIN PASSWORD {_sql_literal(password)}; "
                "END IF; END $$;"
            )
            result = await self.commands.run(psql(db, db.admin_user, create_role))
            if not result.ok:
                return RemediationOutcome(action, RemediationStatus.FAILED, f"create role: {result.stderr}")
            steps.append(f"role {db.user}")

        exists = await self.commands.run(
            psql(db, db.admin_user, f"SELECT 1 FROM pg_database WHERE datname = {_sql_literal(db.name)};")
        )
        if not exists.ok:
            return RemediationOutcome(action, RemediationStatus.FAILED, f"lookup database: {exists.stderr}")
        if exists.stdout.strip() != "1":
            result = await self.commands.run(
                psql(db, db.admin_user, f"CREATE DATABASE {_sql_ident(db.name)} OWNER {_sql_ident(db.user)};")
            )
            if not result.ok:
                return RemediationOutcome(action, RemediationStatus.FAILED, f"create database: {result.stderr}")
            steps.append(f"database {db.name}")

        if not steps:
            return RemediationOutcome(action, RemediationStatus.SKIPPED, "role and database already present")
        return RemediationOutcome(action, RemediationStatus.APPLIED, f"created {' and '.join(steps)}")

    async def _production_config(self, ledger: Ledger) -> RemediationOutcome:
        action = "production_config"
        if not ledger.has(IssueKind.MOCK_ENABLED, Category.CONFIGURATION):
            return RemediationOutcome(action, RemediationStatus.SKIPPED, "mock mode not enabled")

        cfg = self.targets.production_config
        path = Path(cfg.path)
        if not path.is_absolute():
            path = self.root / path

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render_production_config(), encoding="utf-8")
        return RemediationOutcome(action, RemediationStatus.APPLIED, f"wrote {path}")

    def render_production_config(self) -> str:
        """KEY=VALUE lines with mock/debug off and a fresh secret."""
        cfg = self.targets.production_config
        db = self.targets.database

        password = self.environ.get(db.password_env)
        credentials = f"{db.user}:{quote(password, safe='')}" if password else db.user
        values = dict(cfg.values)
        values[cfg.secret_key] = self.secret_factory()
        values["DATABASE_URL"] = f"postgresql://{credentials}@{db.host}:{db.port}/{db.name}"
        values["REDIS_URL"] = self.targets.cache.url

        lines = ["# Production Configuration"]
        lines += [f"{key}={value}" for key, value in values.items()]
        return "\n".join(lines) + "\n"

    def _service_advisories(self, ledger: Ledger) -> list[RemediationOutcome]:
        """Services are never started from here; emit the command to run instead."""
        outcomes = []
        for issue in ledger.find(IssueKind.NOT_RUNNING, Category.SERVICE):
            try:
                hint = self.targets.service(issue.name).start_hint
            except KeyError:
                hint = None
            detail = f"run: {hint}" if hint else f"start the {issue.name} service"
            outcomes.append(RemediationOutcome(
                f"start_service:{issue.name}", RemediationStatus.SKIPPED, detail, advisory=True
            ))
        return outcomes
