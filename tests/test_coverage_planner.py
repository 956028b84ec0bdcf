"""
Tests for the coverage planner service.

Uses an in-memory project store holding raw camelCase documents, the same
shape the database store keeps.
"""

import copy
from collections.abc import Sequence
from typing import Any

import pytest

from userlens_coverage.coverage import CoverageStatus, Task
from userlens_coverage.db import ProjectNotFoundError, TaskNotFoundError
from userlens_coverage.planner import CoveragePlanner, ProjectSnapshot


class FakeProjectStore:
    def __init__(self, projects: dict[str, dict[str, Any]]) -> None:
        self.projects = copy.deepcopy(projects)
        self.updates: list[tuple[str, Any, list[str]]] = []

    async def fetch_snapshot(self, project_id: str) -> ProjectSnapshot:
        if project_id not in self.projects:
            raise ProjectNotFoundError(project_id)
        doc = self.projects[project_id]
        return ProjectSnapshot.model_validate(
            {"projectId": project_id, "hypotheses": doc["hypotheses"], "tasks": doc["tasks"]}
        )

    async def update_task_hypotheses(self, project_id: str, task_id: Any, hypothesis_ids: Sequence[str]) -> Task:
        self.updates.append((project_id, task_id, list(hypothesis_ids)))
        for doc in self.projects[project_id]["tasks"]:
            if str(doc["id"]) == str(task_id):
                doc["hypothesisIds"] = list(hypothesis_ids)
                return Task.model_validate(doc)
        raise TaskNotFoundError(project_id, task_id)


@pytest.fixture
def store() -> FakeProjectStore:
    """Store with one project: two hypotheses, two tasks, one dangling link."""
    return FakeProjectStore(
        {
            "p1": {
                "hypotheses": [
                    {"id": "H1", "hypothesis": "Active users skip onboarding", "segments": ["Active"], "status": "testing"},
                    {"id": "H2", "hypothesis": "Lapsed users churn on pricing", "segments": ["abandoned"], "priority": "high"},
                ],
                "tasks": [
                    {"id": 1, "title": "Find settings", "difficulty": "easy", "hypothesisIds": ["H1"], "order": 0},
                    {"id": 2, "title": "Compare plans", "difficulty": "easy", "hypothesisIds": ["H9"], "order": 1},
                ],
            }
        }
    )


@pytest.fixture
def planner(store: FakeProjectStore) -> CoveragePlanner:
    """Create a CoveragePlanner over the fake store."""
    return CoveragePlanner(store)


class TestBuildReport:
    """Tests for CoveragePlanner.build_report."""

    @pytest.mark.asyncio
    async def test_report_contents(self, planner: CoveragePlanner) -> None:
        report = await planner.build_report("p1")

        assert report.project_id == "p1"
        assert [c.coverage_status for c in report.coverage] == [CoverageStatus.PARTIAL, CoverageStatus.NONE]
        assert report.coverage[1].segments == ["Abandoned"]
        assert report.metrics.total_tasks == 2
        assert report.metrics.coverage_percentage == 50
        assert report.metrics.alignment_issues == 1
        assert report.orphaned_tasks == []
        assert len(report.matrix) == 2 and len(report.matrix[0]) == 2

    @pytest.mark.asyncio
    async def test_report_flags_dangling_references(
        self,
        planner: CoveragePlanner,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        report = await planner.build_report("p1")

        assert [(d.task_id, d.hypothesis_id) for d in report.dangling_references] == [(2, "H9")]
        assert report.duplicate_hypothesis_ids == []
        assert "unknown hypothesis H9" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_project_raises(self, planner: CoveragePlanner) -> None:
        with pytest.raises(ProjectNotFoundError):
            await planner.build_report("missing")

    def test_report_flags_unknown_segments(
        self,
        planner: CoveragePlanner,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        snapshot = ProjectSnapshot(
            project_id="p3",
            hypotheses=[{"id": "H1", "segments": ["Power Users"]}],
            tasks=[{"id": "T1", "difficulty": "all", "hypothesisIds": ["H1"]}],
        )

        report = planner.report_from_snapshot(snapshot)

        assert [(u.hypothesis_id, u.segment) for u in report.unknown_segments] == [("H1", "Power Users")]
        assert report.coverage[0].coverage_status == CoverageStatus.FULL
        assert "unknown segment 'Power Users'" in caplog.text

    def test_report_from_snapshot_flags_duplicates(self, planner: CoveragePlanner) -> None:
        snapshot = ProjectSnapshot(
            project_id="p2",
            hypotheses=[{"id": "H1"}, {"id": "H1"}],
            tasks=[{"id": "T1", "difficulty": "all", "hypothesisIds": ["H1"]}],
        )

        report = planner.report_from_snapshot(snapshot)

        assert report.duplicate_hypothesis_ids == ["H1"]
        assert len(report.coverage) == 2
        assert report.metrics.coverage_percentage == 100

    @pytest.mark.asyncio
    async def test_report_serializes_with_camel_case(self, planner: CoveragePlanner) -> None:
        report = await planner.build_report("p1")

        dumped = report.model_dump(mode="json", by_alias=True)

        assert dumped["projectId"] == "p1"
        assert dumped["metrics"]["coveragePercentage"] == 50
        assert dumped["danglingReferences"][0] == {"taskId": 2, "hypothesisId": "H9"}


class TestLinkMutation:
    """Tests for persisting link changes and recomputing."""

    @pytest.mark.asyncio
    async def test_toggle_link_persists_then_recomputes(
        self,
        planner: CoveragePlanner,
        store: FakeProjectStore,
    ) -> None:
        report = await planner.toggle_link("p1", "2", "H2")

        assert store.updates == [("p1", 2, ["H9", "H2"])]
        h2 = report.coverage[1]
        assert h2.coverage_status == CoverageStatus.FULL
        assert h2.linked_task_ids == ["2"]
        assert report.metrics.coverage_percentage == 100

    @pytest.mark.asyncio
    async def test_toggle_link_unlinks(self, planner: CoveragePlanner, store: FakeProjectStore) -> None:
        report = await planner.toggle_link("p1", 1, "H1")

        assert store.updates[-1] == ("p1", 1, [])
        assert report.coverage[0].coverage_status == CoverageStatus.NONE
        assert [t.id for t in report.orphaned_tasks] == [1]

    @pytest.mark.asyncio
    async def test_toggle_link_unknown_task(self, planner: CoveragePlanner, store: FakeProjectStore) -> None:
        with pytest.raises(TaskNotFoundError):
            await planner.toggle_link("p1", "99", "H1")
        assert store.updates == []

    @pytest.mark.asyncio
    async def test_set_task_links_select_all_and_none(
        self,
        planner: CoveragePlanner,
        store: FakeProjectStore,
    ) -> None:
        report = await planner.set_task_links("p1", 2, None)
        assert store.updates[-1] == ("p1", 2, ["H1", "H2"])
        assert report.dangling_references == []

        report = await planner.set_task_links("p1", 2, [])
        assert store.updates[-1] == ("p1", 2, [])
        assert [t.id for t in report.orphaned_tasks] == [2]

    @pytest.mark.asyncio
    async def test_set_task_links_explicit(self, planner: CoveragePlanner, store: FakeProjectStore) -> None:
        await planner.set_task_links("p1", 1, ["H2", "H1"])

        assert store.updates[-1] == ("p1", 1, ["H2", "H1"])
        assert store.projects["p1"]["tasks"][0]["order"] == 0
