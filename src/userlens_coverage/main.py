"""
Main entry point for the UserLens coverage planner.
"""

import argparse
import asyncio
import json
import logging
import sys

from userlens_coverage.config import get_settings
from userlens_coverage.coverage import CoverageStatus
from userlens_coverage.db import (
    JsonFileProjectStore,
    ProjectStore,
    SqlProjectStore,
    create_database_engine,
    create_session_factory,
)
from userlens_coverage.planner import CoveragePlanner, CoverageReport


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="userlens-coverage",
        description="Report how well research hypotheses are covered by test tasks.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--file",
        help="JSON project export with 'hypotheses' and 'tasks'",
    )
    source.add_argument(
        "--project-id",
        help="Project id to load from the configured database",
    )
    parser.add_argument(
        "--toggle",
        nargs=2,
        metavar=("TASK_ID", "HYPOTHESIS_ID"),
        help="Link or unlink a hypothesis on a task before reporting",
    )
    parser.add_argument(
        "--format",
        choices=["json", "summary"],
        default="summary",
        help="Output a JSON report or a short text summary",
    )
    return parser


def format_summary(report: CoverageReport) -> str:
    """Render a coverage report as plain text."""
    metrics = report.metrics
    lines = [
        f"Project {report.project_id}: {metrics.hypotheses_with_tasks}/{metrics.total_hypotheses} "
        f"hypotheses have tasks ({metrics.coverage_percentage}%)",
        f"Tasks: {metrics.tasks_linked_to_hypotheses}/{metrics.total_tasks} linked, "
        f"{metrics.orphaned_tasks} orphaned, {metrics.alignment_issues} alignment issues",
        "",
    ]
    for entry in report.coverage:
        segments = ", ".join(entry.segments) or "any segment"
        lines.append(
            f"[{entry.coverage_status.value:>7}] {entry.hypothesis_id}: {entry.hypothesis} "
            f"({segments}; {len(entry.linked_tasks)} tasks)"
        )
        for issue in entry.segment_alignment_issues:
            lines.append(f"          ! {issue.message}")

    uncovered = [e for e in report.coverage if e.coverage_status == CoverageStatus.NONE]
    if uncovered:
        lines.append("")
        lines.append(f"Without tasks: {', '.join(e.hypothesis_id for e in uncovered)}")
    if report.orphaned_tasks:
        lines.append(f"Orphaned tasks: {', '.join(str(t.id) for t in report.orphaned_tasks)}")
    for ref in report.dangling_references:
        lines.append(f"Warning: task {ref.task_id} links unknown hypothesis {ref.hypothesis_id}")
    if report.duplicate_hypothesis_ids:
        lines.append(f"Warning: duplicate hypothesis ids {', '.join(report.duplicate_hypothesis_ids)}")
    for entry in report.unknown_segments:
        lines.append(f"Warning: hypothesis {entry.hypothesis_id} targets unknown segment '{entry.segment}'")
    return "\n".join(lines)


async def run_report(argv: list[str] | None = None) -> str:
    """
    Build a coverage report from the command line arguments.

    Returns:
        The rendered report.
    """
    args = build_parser().parse_args(argv)
    logger = logging.getLogger(__name__)

    store: ProjectStore
    engine = None
    if args.file:
        file_store = JsonFileProjectStore(args.file)
        project_id = file_store.project_id
        store = file_store
    else:
        settings = get_settings()
        logger.debug(f"Using project store: {settings.redacted_database_url()}")
        engine = create_database_engine(settings)
        store = SqlProjectStore(create_session_factory(engine))
        project_id = args.project_id

    planner = CoveragePlanner(store)
    try:
        if args.toggle:
            task_id, hypothesis_id = args.toggle
            report = await planner.toggle_link(project_id, task_id, hypothesis_id)
        else:
            report = await planner.build_report(project_id)
    finally:
        if engine is not None:
            await engine.dispose()

    if args.format == "json":
        return json.dumps(report.model_dump(mode="json", by_alias=True), indent=2)
    return format_summary(report)


def main() -> None:
    """Main entry point for the application."""
    setup_logging()

    try:
        print(asyncio.run(run_report(sys.argv[1:])))
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
