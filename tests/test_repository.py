"""
Tests for the project repositories.

A fake session stands in for SQLAlchemy's AsyncSession so the document
handling can be checked without a database.
"""

from typing import Any

import pytest

from userlens_coverage.coverage import TaskDifficulty
from userlens_coverage.db import (
    ProjectModel,
    ProjectNotFoundError,
    ProjectRepository,
    SynthesisModel,
    SynthesisRepository,
    TaskNotFoundError,
)


class FakeSession:
    def __init__(self, *entities: Any) -> None:
        self.rows: dict[tuple[type, str], Any] = {}
        for entity in entities:
            self.add(entity)
        self.flushes = 0

    def _key(self, entity: Any) -> tuple[type, str]:
        if isinstance(entity, SynthesisModel):
            return SynthesisModel, entity.project_id
        return type(entity), entity.id

    async def get(self, model_class: type, entity_id: str) -> Any:
        return self.rows.get((model_class, entity_id))

    def add(self, entity: Any) -> None:
        self.rows[self._key(entity)] = entity

    async def flush(self) -> None:
        self.flushes += 1

    async def refresh(self, entity: Any) -> None:
        return None


@pytest.fixture
def session() -> FakeSession:
    """Session holding one project with synthesis data."""
    project = ProjectModel(
        id="p1",
        tasks=[
            {"id": 1, "title": "Sign up", "difficulty": "easy", "hypothesisIds": ["H1"], "order": 0},
            {"id": 2, "title": "Invite team", "difficulty": "expert", "order": 1},
        ],
    )
    synthesis = SynthesisModel(
        project_id="p1",
        hypotheses=[{"id": "H1", "hypothesis": "Sign-up is too long", "segments": ["non-users"], "evidence": ""}],
    )
    return FakeSession(project, synthesis)


class TestProjectRepository:
    """Tests for ProjectRepository."""

    @pytest.mark.asyncio
    async def test_fetch_snapshot_validates_documents(self, session: FakeSession) -> None:
        snapshot = await ProjectRepository(session).fetch_snapshot("p1")

        assert snapshot.project_id == "p1"
        assert snapshot.hypotheses[0].segments == ["Non-Users"]
        assert [t.id for t in snapshot.tasks] == [1, 2]
        assert snapshot.tasks[1].difficulty == TaskDifficulty.ALL
        assert snapshot.tasks[1].hypothesis_ids == []

    @pytest.mark.asyncio
    async def test_fetch_snapshot_unknown_project(self, session: FakeSession) -> None:
        with pytest.raises(ProjectNotFoundError):
            await ProjectRepository(session).fetch_snapshot("nope")

    @pytest.mark.asyncio
    async def test_fetch_snapshot_without_synthesis(self) -> None:
        session = FakeSession(ProjectModel(id="p2", tasks=[]))

        snapshot = await ProjectRepository(session).fetch_snapshot("p2")

        assert snapshot.hypotheses == []
        assert snapshot.tasks == []

    @pytest.mark.asyncio
    async def test_update_task_hypotheses_replaces_only_links(self, session: FakeSession) -> None:
        repo = ProjectRepository(session)
        before = (await session.get(ProjectModel, "p1")).tasks

        task = await repo.update_task_hypotheses("p1", "2", ["H1"])

        project = await session.get(ProjectModel, "p1")
        assert task.hypothesis_ids == ["H1"]
        assert project.tasks is not before
        assert project.tasks[1] == {
            "id": 2,
            "title": "Invite team",
            "difficulty": "expert",
            "order": 1,
            "hypothesisIds": ["H1"],
        }
        assert project.tasks[0]["hypothesisIds"] == ["H1"]
        assert session.flushes == 1

    @pytest.mark.asyncio
    async def test_update_unknown_task(self, session: FakeSession) -> None:
        with pytest.raises(TaskNotFoundError):
            await ProjectRepository(session).update_task_hypotheses("p1", 42, [])


class TestSynthesisRepository:
    """Tests for SynthesisRepository."""

    @pytest.mark.asyncio
    async def test_replace_hypotheses(self, session: FakeSession) -> None:
        repo = SynthesisRepository(session)

        await repo.replace_hypotheses("p1", [{"id": "H2", "segments": ["Active"]}])

        assert [h.id for h in await repo.get_hypotheses("p1")] == ["H2"]

    @pytest.mark.asyncio
    async def test_replace_hypotheses_creates_synthesis(self) -> None:
        session = FakeSession(ProjectModel(id="p3", tasks=[]))
        repo = SynthesisRepository(session)

        await repo.replace_hypotheses("p3", [{"id": "H1"}])

        assert [h.id for h in await repo.get_hypotheses("p3")] == ["H1"]
