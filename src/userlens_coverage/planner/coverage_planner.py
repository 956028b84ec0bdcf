"""
Coverage planner.

Coordinates the project store and the coverage engine: loads a project's
hypotheses and tasks, computes the coverage report, and applies link
mutations by persisting first and recomputing from a fresh fetch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from userlens_coverage.coverage import (
    build_coverage,
    build_matrix,
    compute_metrics,
    find_dangling_references,
    find_duplicate_hypothesis_ids,
    find_unknown_segments,
    find_orphans,
    link_all,
    set_links,
    toggle_link,
    unlink_all,
)
from userlens_coverage.db.errors import TaskNotFoundError
from userlens_coverage.planner.schemas import CoverageReport, ProjectSnapshot

if TYPE_CHECKING:
    from userlens_coverage.coverage.schemas import Task, TaskId
    from userlens_coverage.db.store import ProjectStore


class CoveragePlanner:
    """
    Serves coverage reports for research projects.

    Holds no coverage state of its own: every report is recomputed from
    the store, so a report always reflects the last persisted mutation.
    """

    def __init__(self, store: ProjectStore) -> None:
        """
        Initialize the coverage planner.

        Args:
            store: Project store to read from and persist link changes to.
        """
        self._logger = logging.getLogger(__name__)
        self._store = store

    def report_from_snapshot(self, snapshot: ProjectSnapshot) -> CoverageReport:
        """
        Compute a coverage report without touching the store.

        Args:
            snapshot: Hypotheses and tasks of one project.

        Returns:
            The coverage report.
        """
        hypotheses, tasks = snapshot.hypotheses, snapshot.tasks
        coverage = build_coverage(hypotheses, tasks)
        metrics = compute_metrics(hypotheses, tasks, coverage=coverage)

        dangling = find_dangling_references(hypotheses, tasks)
        for ref in dangling:
            self._logger.warning(
                f"Task {ref.task_id} in project {snapshot.project_id} links unknown hypothesis {ref.hypothesis_id}"
            )
        duplicates = find_duplicate_hypothesis_ids(hypotheses)
        if duplicates:
            self._logger.warning(
                f"Duplicate hypothesis ids in project {snapshot.project_id}: {', '.join(duplicates)}"
            )
        unknown = find_unknown_segments(hypotheses)
        for entry in unknown:
            self._logger.warning(
                f"Hypothesis {entry.hypothesis_id} in project {snapshot.project_id} "
                f"targets unknown segment '{entry.segment}'"
            )

        self._logger.debug(
            f"Coverage for {snapshot.project_id}: {metrics.coverage_percentage}% "
            f"({metrics.alignment_issues} alignment issues)"
        )
        return CoverageReport(
            project_id=snapshot.project_id,
            coverage=coverage,
            metrics=metrics,
            orphaned_tasks=find_orphans(tasks),
            matrix=build_matrix(hypotheses, tasks),
            dangling_references=dangling,
            duplicate_hypothesis_ids=duplicates,
            unknown_segments=unknown,
        )

    async def build_report(self, project_id: str) -> CoverageReport:
        """
        Fetch a project and compute its coverage report.

        Args:
            project_id: Project identifier.

        Returns:
            The coverage report.
        """
        snapshot = await self._store.fetch_snapshot(project_id)
        return self.report_from_snapshot(snapshot)

    async def toggle_link(self, project_id: str, task_id: TaskId, hypothesis_id: str) -> CoverageReport:
        """
        Link or unlink a hypothesis on a task, then recompute.

        Args:
            project_id: Project identifier.
            task_id: Task identifier, compared by string form.
            hypothesis_id: Hypothesis to link or unlink.

        Returns:
            The coverage report after the change.

        Raises:
            TaskNotFoundError: If the task is not in the project.
        """
        task = await self._find_task(project_id, task_id)
        updated = toggle_link(task, hypothesis_id)
        linked = hypothesis_id in updated.hypothesis_ids
        self._logger.info(f"{'Linked' if linked else 'Unlinked'} hypothesis {hypothesis_id} on task {task_id}")
        return await self._persist(project_id, updated)

    async def set_task_links(
        self,
        project_id: str,
        task_id: TaskId,
        hypothesis_ids: Sequence[str] | None,
    ) -> CoverageReport:
        """
        Replace a task's hypothesis links, then recompute.

        Args:
            project_id: Project identifier.
            task_id: Task identifier.
            hypothesis_ids: New links; None links every hypothesis in the
                project, an empty sequence removes all links.

        Returns:
            The coverage report after the change.
        """
        task = await self._find_task(project_id, task_id)
        if hypothesis_ids is None:
            snapshot = await self._store.fetch_snapshot(project_id)
            updated = link_all(task, snapshot.hypotheses)
        elif not hypothesis_ids:
            updated = unlink_all(task)
        else:
            updated = set_links(task, hypothesis_ids)
        return await self._persist(project_id, updated)

    async def _find_task(self, project_id: str, task_id: TaskId) -> Task:
        snapshot = await self._store.fetch_snapshot(project_id)
        for task in snapshot.tasks:
            if str(task.id) == str(task_id):
                return task
        raise TaskNotFoundError(project_id, task_id)

    async def _persist(self, project_id: str, task: Task) -> CoverageReport:
        await self._store.update_task_hypotheses(project_id, task.id, task.hypothesis_ids)
        return await self.build_report(project_id)
