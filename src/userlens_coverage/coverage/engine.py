"""
Hypothesis-task coverage engine.

Pure functions over in-memory hypothesis and task collections. Nothing here
performs I/O or mutates its inputs; every call allocates fresh results, so
callers simply re-invoke the engine after each persisted edit.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from userlens_coverage.coverage.alignment import check_alignment, is_aligned
from userlens_coverage.coverage.schemas import (
    AlignmentIssue,
    CoverageStatus,
    Hypothesis,
    HypothesisCoverage,
    MatrixCell,
    PlanningMetrics,
    Task,
    TaskId,
)
from userlens_coverage.coverage.segments import TaskDifficulty, reached_segments

logger = logging.getLogger(__name__)


def tasks_for_hypothesis(hypothesis_id: str, tasks: Sequence[Task]) -> list[Task]:
    """Return the tasks linked to a hypothesis, in task-collection order."""
    return [task for task in tasks if hypothesis_id in task.hypothesis_ids]


def hypotheses_for_task(
    task_id: TaskId,
    tasks: Sequence[Task],
    hypotheses: Sequence[Hypothesis],
) -> list[Hypothesis]:
    """
    Return the hypotheses a task is linked to, in hypothesis-collection order.

    Task ids are compared by their string form. An unknown task id yields
    an empty list.
    """
    task = next((t for t in tasks if str(t.id) == str(task_id)), None)
    if task is None:
        return []
    return [h for h in hypotheses if h.id in task.hypothesis_ids]


def find_orphans(tasks: Sequence[Task]) -> list[Task]:
    """Return tasks linked to no hypothesis, in original order."""
    return [task for task in tasks if not task.hypothesis_ids]


def find_uncovered_hypotheses(
    hypotheses: Sequence[Hypothesis],
    tasks: Sequence[Task],
) -> list[Hypothesis]:
    """Return hypotheses with no linked task."""
    return [h for h in hypotheses if not tasks_for_hypothesis(h.id, tasks)]


def alignment_issues_for_hypothesis(
    hypothesis: Hypothesis,
    tasks: Sequence[Task],
) -> list[AlignmentIssue]:
    """Return the alignment issues of every task linked to a hypothesis."""
    issues: list[AlignmentIssue] = []
    for task in tasks_for_hypothesis(hypothesis.id, tasks):
        issue = check_alignment(task, hypothesis)
        if issue is not None:
            issues.append(issue)
    return issues


def _coverage_status(hypothesis: Hypothesis, linked: Sequence[Task]) -> CoverageStatus:
    if not linked:
        return CoverageStatus.NONE
    if not hypothesis.segments:
        return CoverageStatus.FULL

    if any(task.difficulty == TaskDifficulty.ALL for task in linked):
        return CoverageStatus.FULL

    reached: set[str] = set()
    for task in linked:
        reached |= reached_segments(task.difficulty)
    if reached.issuperset(hypothesis.segments):
        return CoverageStatus.FULL
    return CoverageStatus.PARTIAL


def build_coverage(
    hypotheses: Sequence[Hypothesis],
    tasks: Sequence[Task],
) -> list[HypothesisCoverage]:
    """
    Build coverage for every hypothesis, in hypothesis-collection order.

    A hypothesis is ``none`` without linked tasks, ``full`` when it has no
    target segments, a linked ``all`` task, or the union of segments reached
    by its linked tasks covers all of them, and ``partial`` otherwise. Duplicate hypothesis ids
    are processed independently.

    Args:
        hypotheses: Hypotheses to report on.
        tasks: All tasks of the project.

    Returns:
        One HypothesisCoverage per input hypothesis.
    """
    coverage: list[HypothesisCoverage] = []
    for hypothesis in hypotheses:
        linked = tasks_for_hypothesis(hypothesis.id, tasks)
        issues = [
            issue
            for issue in (check_alignment(task, hypothesis) for task in linked)
            if issue is not None
        ]
        coverage.append(
            HypothesisCoverage(
                hypothesis_id=hypothesis.id,
                hypothesis=hypothesis.hypothesis,
                priority=hypothesis.priority,
                segments=list(hypothesis.segments),
                linked_task_ids=[str(task.id) for task in linked],
                linked_tasks=linked,
                coverage_status=_coverage_status(hypothesis, linked),
                segment_alignment_issues=issues,
            )
        )

    logger.debug(f"Built coverage for {len(hypotheses)} hypotheses over {len(tasks)} tasks")
    return coverage


def _round_percentage(part: int, whole: int) -> int:
    # Half-up rounding in integer arithmetic.
    return (200 * part + whole) // (2 * whole)


def compute_metrics(
    hypotheses: Sequence[Hypothesis],
    tasks: Sequence[Task],
    coverage: Sequence[HypothesisCoverage] | None = None,
) -> PlanningMetrics:
    """
    Summarize a hypothesis/task set.

    The alignment issue total is taken from the coverage entries so the two
    reports can never disagree.

    Args:
        hypotheses: Hypotheses of the project.
        tasks: Tasks of the project.
        coverage: Result of build_coverage for the same inputs, if the
            caller already has it.

    Returns:
        PlanningMetrics for the inputs.
    """
    if coverage is None:
        coverage = build_coverage(hypotheses, tasks)

    total_hypotheses = len(hypotheses)
    total_tasks = len(tasks)
    with_tasks = sum(1 for entry in coverage if entry.linked_tasks)
    linked_tasks = sum(1 for task in tasks if task.hypothesis_ids)

    return PlanningMetrics(
        total_hypotheses=total_hypotheses,
        hypotheses_with_tasks=with_tasks,
        hypotheses_without_tasks=total_hypotheses - with_tasks,
        total_tasks=total_tasks,
        tasks_linked_to_hypotheses=linked_tasks,
        orphaned_tasks=total_tasks - linked_tasks,
        alignment_issues=sum(len(entry.segment_alignment_issues) for entry in coverage),
        coverage_percentage=_round_percentage(with_tasks, total_hypotheses) if total_hypotheses else 0,
    )


def build_matrix(
    hypotheses: Sequence[Hypothesis],
    tasks: Sequence[Task],
) -> list[list[MatrixCell]]:
    """Build the planning grid: one row per hypothesis, one cell per task."""
    rows: list[list[MatrixCell]] = []
    for hypothesis in hypotheses:
        row: list[MatrixCell] = []
        for task in tasks:
            linked = hypothesis.id in task.hypothesis_ids
            issue = check_alignment(task, hypothesis) if linked else None
            row.append(
                MatrixCell(
                    hypothesis_id=hypothesis.id,
                    task_id=str(task.id),
                    is_linked=linked,
                    has_alignment_issue=issue is not None,
                    alignment_issue=issue,
                )
            )
        rows.append(row)
    return rows


def suggest_tasks_for_hypothesis(hypothesis: Hypothesis, tasks: Sequence[Task]) -> list[Task]:
    """Return unlinked tasks whose difficulty reaches one of the hypothesis's segments."""
    return [
        task
        for task in tasks
        if hypothesis.id not in task.hypothesis_ids and is_aligned(task.difficulty, hypothesis.segments)
    ]


def suggest_hypotheses_for_task(
    task: Task,
    hypotheses: Sequence[Hypothesis],
) -> tuple[list[Hypothesis], list[Hypothesis]]:
    """
    Split hypotheses by whether the task's difficulty reaches their segments.

    Returns:
        (aligned, misaligned), each in hypothesis-collection order.
    """
    aligned: list[Hypothesis] = []
    misaligned: list[Hypothesis] = []
    for hypothesis in hypotheses:
        if is_aligned(task.difficulty, hypothesis.segments):
            aligned.append(hypothesis)
        else:
            misaligned.append(hypothesis)
    return aligned, misaligned
