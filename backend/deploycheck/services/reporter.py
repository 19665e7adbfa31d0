"""
Reporter - Render readiness reports for humans.

Uses Jinja2 to fill the text template in `templates/`.
"""

import os
from jinja2 import Environment, FileSystemLoader

from deploycheck.schemas.report import ReadinessReport
from deploycheck.services.models import CATEGORY_ORDER

CATEGORY_TITLES = {
    "service": "Service Health",
    "database": "Database",
    "cache": "Cache",
    "configuration": "Configuration",
    "api": "API Endpoints & Credentials",
    "security": "Security",
    "monitoring": "Monitoring & Observability",
    "testing": "Testing",
}

VERDICT_LINES = {
    "ready": "PRODUCTION READY",
    "near_ready": "NEAR PRODUCTION READY (minor fixes needed)",
    "significant_work": "SIGNIFICANT WORK NEEDED",
    "not_ready": "NOT PRODUCTION READY",
}

OUTCOME_MARKS = {"pass": "PASS", "degraded": "WARN", "fail": "FAIL"}


class Reporter:
    """Renders a ReadinessReport as plain text."""

    def __init__(self):
        self.template_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )

    def render(self, report: ReadinessReport) -> str:
        sections = []
        for category in CATEGORY_ORDER:
            results = [r for r in report.results if r.category == category.value]
            issues = [i for i in report.issues if i.category == category.value]
            sections.append({
                "title": CATEGORY_TITLES[category.value],
                "results": results,
                "issues": issues,
            })

        template = self.env.get_template("report.txt.j2")
        return template.render(
            report=report,
            sections=sections,
            marks=OUTCOME_MARKS,
            verdict_line=VERDICT_LINES[report.score.verdict]
        )
