"""Tests for checklist construction and execution."""
import httpx

from deploycheck.schemas.targets import Targets
from deploycheck.services.checklist import Checklist, ChecklistRunner, build_checklists
from deploycheck.services.models import CATEGORY_ORDER, Category, IssueKind, ValidationRun
from deploycheck.services.probes.base import Probe
from deploycheck.services.probes.service_probe import ServiceProbe


class ExplodingProbe(Probe):
    category = Category.SERVICE
    failure_kind = IssueKind.NOT_RUNNING

    async def check(self, ctx):
        raise RuntimeError("probe bug")


def test_one_checklist_per_category_in_order():
    checklists = build_checklists(Targets())
    assert [c.category for c in checklists] == list(CATEGORY_ORDER)


def test_default_probe_counts():
    counts = {c.category: len(c.probes) for c in build_checklists(Targets())}
    assert counts[Category.SERVICE] == 7
    assert counts[Category.DATABASE] == 1
    assert counts[Category.CACHE] == 1
    # 3 sources x 3 rules + 4 env vars
    assert counts[Category.CONFIGURATION] == 13
    # 4 endpoints + 2 credentials
    assert counts[Category.API] == 6
    assert counts[Category.SECURITY] == 4
    assert counts[Category.MONITORING] == 3
    assert counts[Category.TESTING] == 2


def test_endpoint_probes_use_service_ports():
    api = next(c for c in build_checklists(Targets()) if c.category is Category.API)
    urls = [p.url for p in api.probes if hasattr(p, "url")]
    assert "http://localhost:8000/api/v1/analyze/body" in urls


async def test_results_keep_declaration_order(make_ctx):
    def handler(request):
        if request.url.port == 3002:
            return httpx.Response(503)
        return httpx.Response(200, json={"status": "healthy"})

    checklist = Checklist(Category.SERVICE, [
        ServiceProbe("user", "localhost", 3001),
        ServiceProbe("wardrobe", "localhost", 3002),
        ServiceProbe("avatar", "localhost", 3003),
    ])
    run = await ChecklistRunner().run_checklist(checklist, make_ctx(handler), ValidationRun())

    assert [r.name for r in run.results] == ["user", "wardrobe", "avatar"]
    assert [i.name for i in run.ledger] == ["wardrobe"]


async def test_failing_probe_does_not_affect_siblings(make_ctx):
    checklist = Checklist(Category.SERVICE, [
        ExplodingProbe("broken"),
        ServiceProbe("user", "localhost", 3001),
    ])
    run = await ChecklistRunner().run_checklist(checklist, make_ctx(), ValidationRun())

    broken, user = run.results
    assert not broken.passed
    assert broken.detail == "probe bug"
    assert user.passed
    assert len(run.ledger) == 1


async def test_passing_probes_add_no_issues(make_ctx):
    checklist = Checklist(Category.SERVICE, [ServiceProbe("user", "localhost", 3001)])
    run = await ChecklistRunner().run_checklist(checklist, make_ctx(), ValidationRun())
    assert len(run.results) == 1
    assert len(run.ledger) == 0


async def test_empty_checklist(make_ctx):
    run = await ChecklistRunner().run_checklist(Checklist(Category.CACHE), make_ctx(), ValidationRun())
    assert run == ValidationRun()


async def test_each_run_starts_from_a_fresh_ledger(make_ctx, targets, project_root, healthy_commands):
    checklists = build_checklists(targets)
    ctx = make_ctx(commands=healthy_commands, root=project_root)
    runner = ChecklistRunner()

    first = await runner.run(checklists, ctx)
    second = await runner.run(checklists, ctx)

    assert first.ledger == second.ledger
    assert first.results == second.results
