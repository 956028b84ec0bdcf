"""Segment alignment between a task's difficulty and a hypothesis's targets."""

from __future__ import annotations

from collections.abc import Collection

from userlens_coverage.coverage.schemas import AlignmentIssue, Hypothesis, Task
from userlens_coverage.coverage.segments import TaskDifficulty, reached_segments, segments_for


def is_aligned(difficulty: TaskDifficulty, target_segments: Collection[str]) -> bool:
    """
    Check whether a difficulty tier reaches any of the target segments.

    An empty target list is always aligned: there is nothing to miss.
    The ``all`` tier reaches every segment, including labels outside the
    segment table.
    """
    if not target_segments or difficulty == TaskDifficulty.ALL:
        return True
    return not reached_segments(difficulty).isdisjoint(target_segments)


def check_alignment(task: Task, hypothesis: Hypothesis) -> AlignmentIssue | None:
    """
    Check one linked task against one hypothesis.

    Args:
        task: A task whose hypothesis_ids contains hypothesis.id.
        hypothesis: The hypothesis the task is linked to.

    Returns:
        An AlignmentIssue when the segments reached by the task's difficulty
        and the hypothesis's target segments are disjoint, otherwise None.
    """
    if is_aligned(task.difficulty, hypothesis.segments):
        return None

    reached = list(segments_for(task.difficulty))
    message = (
        f"Task difficulty '{task.difficulty.value}' reaches {', '.join(reached)} users, "
        f"but hypothesis targets {', '.join(hypothesis.segments)}; "
        "this task may not produce useful evidence for this hypothesis."
    )
    return AlignmentIssue(
        task_id=task.id,
        task_title=task.title,
        task_difficulty=task.difficulty,
        hypothesis_id=hypothesis.id,
        hypothesis_segments=list(hypothesis.segments),
        reached_segments=reached,
        message=message,
    )
