"""Shared fixtures: a scripted command runner, an in-memory HTTP stack and a project tree."""
from typing import Sequence

import httpx
import pytest

from deploycheck.schemas.targets import SecurityTargets, Targets
from deploycheck.services.commands import CommandResult
from deploycheck.services.probes.base import ProbeContext
from deploycheck.services.readiness_runner import ReadinessRunner

RATE_LIMITED_URL = "http://localhost:3001/ratelimited"


class FakeCommandRunner:
    """Stand-in for CommandRunner.

    Responses are matched by substring against the joined argv, first rule wins.
    A rule whose response is an exception raises it.
    """

    def __init__(self, default: CommandResult = None):
        self.rules = []
        self.default = default or CommandResult(0, "")
        self.calls = []
        self.timeouts = []

    def when(self, fragment: str, response) -> "FakeCommandRunner":
        self.rules.append((fragment, response))
        return self

    def calls_matching(self, fragment: str) -> list:
        return [c for c in self.calls if fragment in " ".join(c)]

    async def run(self, args: Sequence[str], timeout: float = None) -> CommandResult:
        self.calls.append(list(args))
        self.timeouts.append(timeout)
        line = " ".join(args)
        for fragment, response in self.rules:
            if fragment in line:
                if isinstance(response, BaseException):
                    raise response
                return response
        return self.default


def healthy_handler(request: httpx.Request) -> httpx.Response:
    """Every declared endpoint of a fully healthy deployment."""
    port, path = request.url.port, request.url.path
    if port == 9090:
        return httpx.Response(200, json={"status": "success", "data": {"activeTargets": [{"health": "up"}]}})
    if port == 3007:
        return httpx.Response(200, json={"database": "ok"})
    if path == "/ratelimited":
        return httpx.Response(429)
    if path == "/health":
        return httpx.Response(200, json={"status": "healthy"})
    if path.startswith("/api/v1/"):
        return httpx.Response(200, json={"id": 42, "items": [{"name": "navy blazer"}]})
    return httpx.Response(404)


@pytest.fixture
def commands():
    return FakeCommandRunner()


@pytest.fixture
def healthy_commands():
    """Postgres and Redis containers up, service account provisioned."""
    return (
        FakeCommandRunner()
        .when("SELECT 1;", CommandResult(0, "1"))
        .when("information_schema", CommandResult(0, "12"))
        .when("redis-cli", CommandResult(0, "PONG"))
    )


@pytest.fixture
def environ():
    return {
        "GEMINI_API_KEY": "AIzaSyD4live0key",
        "VISION_API_KEY": "vk-live-7f3a9c",
        "JWT_SECRET": "q8Zr1n2XbT0f5PpW3yL6uV9sK4eH7dJc",
        "DATABASE_URL": "postgresql://stylze_user@db:5432/stylze_db",
        "GOOGLE_APPLICATION_CREDENTIALS": "gcp-key.json",
        "STYLZE_DB_PASSWORD": "pw-from-vault",
    }


@pytest.fixture
def project_root(tmp_path):
    """A project tree with credentials, logs, enough tests and a CI workflow."""
    (tmp_path / "gcp-key.json").write_text("{}")

    log_file = tmp_path / "ai-styling-backend/services/api-gateway/logs/combined.log"
    log_file.parent.mkdir(parents=True)
    log_file.write_text("gateway started\n")

    tests_dir = tmp_path / "ai-styling-app/tests"
    tests_dir.mkdir(parents=True)
    for i in range(11):
        (tests_dir / f"screen{i}.test.js").write_text("")

    workflows = tmp_path / ".github/workflows"
    workflows.mkdir(parents=True)
    (workflows / "ci.yml").write_text("on: push\n")
    return tmp_path


@pytest.fixture
def targets():
    return Targets(security=SecurityTargets(rate_limit_url=RATE_LIMITED_URL))


@pytest.fixture
def make_runner(targets, project_root, healthy_commands, environ):
    """Runner factory defaulting to a fully healthy deployment."""
    def _make(handler=healthy_handler, commands=None, env=None, **kwargs):
        return ReadinessRunner(
            targets,
            root=project_root,
            commands=commands or healthy_commands,
            environ=environ if env is None else env,
            transport=httpx.MockTransport(handler),
            **kwargs
        )
    return _make


@pytest.fixture
async def make_ctx(tmp_path):
    """ProbeContext factory over an in-memory transport."""
    clients = []

    def _make(handler=healthy_handler, commands=None, environ=None, root=None):
        transport = httpx.MockTransport(handler)
        client = httpx.AsyncClient(transport=transport)
        clients.append(client)
        return ProbeContext(
            http=client,
            commands=commands or FakeCommandRunner(),
            environ=environ or {},
            root=root or tmp_path,
            transport=transport
        )

    yield _make
    for client in clients:
        await client.aclose()
