"""
API Probes - Representative requests against service endpoints, external credentials.

Placeholder detection is a heuristic: a real payload containing one of the
sentinels is flagged (false positive), and mock data without them passes
(false negative). Swap the predicate to tune it.
"""
import json
from pathlib import Path
from typing import Callable, Sequence

import httpx

from deploycheck.schemas.targets import CredentialTarget, EndpointTarget
from deploycheck.services.models import Category, IssueKind
from deploycheck.services.probes.base import Probe, ProbeContext

PlaceholderPredicate = Callable[[str], bool]

PLACEHOLDER_SENTINELS = ("mock", "test_", "fake", "placeholder", "lorem ipsum")


def looks_like_placeholder(body: str, sentinels: Sequence[str] = PLACEHOLDER_SENTINELS) -> bool:
    """Substring check for markers of mock/placeholder data."""
    lowered = body.lower()
    return any(s in lowered for s in sentinels)


class ApiEndpointProbe(Probe):
    """Issues one request and inspects the payload for mock data."""

    category = Category.API
    failure_kind = IssueKind.ENDPOINT_ERROR
    timeout = 2.0

    def __init__(
        self,
        target: EndpointTarget,
        host: str,
        port: int,
        is_placeholder: PlaceholderPredicate = looks_like_placeholder,
        **kwargs
    ):
        super().__init__(f"{target.service}{target.path}", **kwargs)
        self.target = target
        self.url = f"http://{host}:{port}{target.path}"
        self.is_placeholder = is_placeholder

    async def check(self, ctx: ProbeContext):
        headers = {}
        if self.target.auth_env:
            token = ctx.environ.get(self.target.auth_env)
            if token:
                headers["Authorization"] = f"Bearer {token}"

        try:
            response = await ctx.http.request(
                self.target.method,
                self.url,
                json=self.target.json_body,
                headers=headers,
                timeout=self.timeout
            )
        except httpx.HTTPError as e:
            return self.fail(f"{type(e).__name__}: {e}")

        if response.status_code == 401:
            return self.passed("requires authentication")
        if not response.is_success:
            return self.fail(f"HTTP {response.status_code}")

        try:
            body = json.dumps(response.json())
        except ValueError:
            body = response.text

        if self.is_placeholder(body):
            return self.degraded("response looks like mock data", IssueKind.MOCK_RESPONSE)
        return self.passed("real data")


class ApiCredentialProbe(Probe):
    """An external API credential must be configured (and resolvable, for file paths)."""

    category = Category.API
    failure_kind = IssueKind.MISSING_CREDENTIAL

    def __init__(self, target: CredentialTarget, **kwargs):
        super().__init__(f"{target.name} credentials", **kwargs)
        self.target = target

    async def check(self, ctx: ProbeContext):
        t = self.target
        value = ctx.environ.get(t.env, "").strip()
        if not value:
            return self.fail(f"{t.env} not configured")
        if t.prefix and not value.startswith(t.prefix):
            return self.fail(f"{t.env} does not look like a {t.name} key")
        if t.is_path:
            path = Path(value)
            if not path.is_absolute():
                path = ctx.path(value)
            if not path.exists():
                return self.degraded(f"{t.env} set but {value} not found", IssueKind.CREDENTIAL_FILE_MISSING)
        return self.passed("configured")
