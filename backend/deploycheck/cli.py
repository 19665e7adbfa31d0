"""
Command-line entry point.

Exit status: 0 if readiness >= 70, 1 otherwise, 2 if the run itself failed.
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from deploycheck.config import settings
from deploycheck.logger import logger
from deploycheck.schemas.targets import load_targets
from deploycheck.services.readiness_runner import ReadinessRunner, build_report
from deploycheck.services.reporter import Reporter
from deploycheck.services.scoring.models import ScoringMode

EXIT_RUN_FAILED = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="deploycheck",
        description="Validate deployment readiness and optionally apply safe fixes."
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ScoringMode],
        help="scoring mode (default: weighted, or penalty with --fix)"
    )
    parser.add_argument("--fix", action="store_true", help="attempt automatic fixes after validation")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--targets", default=settings.TARGETS_FILE, help="JSON targets file")
    parser.add_argument("--root", default=settings.ROOT, help="project root for relative paths")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    if args.mode:
        mode = ScoringMode(args.mode)
    else:
        mode = ScoringMode.PENALTY if args.fix else ScoringMode.WEIGHTED

    try:
        targets = load_targets(args.targets)
        runner = ReadinessRunner(targets, root=Path(args.root))
        outcome = asyncio.run(runner.run(mode, fix=args.fix))
        report = build_report(outcome)
    except Exception as e:
        logger.exception(f"Validation failed: {e}")
        print(f"Validation failed: {e}", file=sys.stderr)
        return EXIT_RUN_FAILED

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(Reporter().render(report), end="")
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
