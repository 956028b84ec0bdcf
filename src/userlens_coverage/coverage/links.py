"""
Task-hypothesis link mutations.

Each function returns a new Task and leaves its input untouched; the caller
persists the result and re-runs the coverage engine.
"""

from __future__ import annotations

from collections.abc import Sequence

from userlens_coverage.coverage.schemas import Hypothesis, Task


def is_linked(task: Task, hypothesis_id: str) -> bool:
    """Check whether a task declares a hypothesis."""
    return hypothesis_id in task.hypothesis_ids


def set_links(task: Task, hypothesis_ids: Sequence[str]) -> Task:
    """Return a copy of the task with its hypothesis ids replaced."""
    return task.model_copy(update={"hypothesis_ids": [str(h) for h in hypothesis_ids]})


def toggle_link(task: Task, hypothesis_id: str) -> Task:
    """
    Link or unlink a hypothesis.

    A missing id is appended; a present id is removed, including any
    duplicate occurrences.
    """
    if is_linked(task, hypothesis_id):
        return set_links(task, [h for h in task.hypothesis_ids if h != hypothesis_id])
    return set_links(task, [*task.hypothesis_ids, hypothesis_id])


def link_all(task: Task, hypotheses: Sequence[Hypothesis]) -> Task:
    """Link the task to every hypothesis, in hypothesis-collection order."""
    return set_links(task, list(dict.fromkeys(h.id for h in hypotheses)))


def unlink_all(task: Task) -> Task:
    """Remove every hypothesis link from the task."""
    return set_links(task, [])
