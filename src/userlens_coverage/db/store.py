"""
Project store used by the coverage planner.

``ProjectStore`` is the collaborator interface: fetch a project's
hypotheses and tasks, and persist one task's revised hypothesis links.
``SqlProjectStore`` implements it on top of the SQLAlchemy repositories,
``JsonFileProjectStore`` on top of a JSON project export.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from userlens_coverage.coverage.schemas import Task, TaskId
from userlens_coverage.db.errors import ProjectNotFoundError, ProjectStoreError, TaskNotFoundError
from userlens_coverage.db.repository import ProjectRepository
from userlens_coverage.planner.schemas import ProjectSnapshot

if TYPE_CHECKING:
    from userlens_coverage.config import Settings

logger = logging.getLogger(__name__)


class ProjectStore(Protocol):
    """Read/write access to project hypotheses and tasks."""

    async def fetch_snapshot(self, project_id: str) -> ProjectSnapshot:
        """Return the project's hypotheses and tasks."""
        ...

    async def update_task_hypotheses(
        self,
        project_id: str,
        task_id: TaskId,
        hypothesis_ids: Sequence[str],
    ) -> Task:
        """Persist a task's revised hypothesis links and return the task."""
        ...


def create_database_engine(settings: Settings) -> AsyncEngine:
    """
    Build an async engine for the configured database.

    The caller owns the engine and must ``await engine.dispose()`` when done.

    Args:
        settings: Application settings.

    Returns:
        A new async engine.
    """
    return create_async_engine(str(settings.database_url), echo=settings.database_echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build an async session factory bound to an engine."""
    return async_sessionmaker(engine, expire_on_commit=False)


class SqlProjectStore:
    """ProjectStore backed by the SQLAlchemy project repositories."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Factory producing async sessions.
        """
        self._session_factory = session_factory

    async def fetch_snapshot(self, project_id: str) -> ProjectSnapshot:
        async with self._session_factory() as session:
            return await ProjectRepository(session).fetch_snapshot(project_id)

    async def update_task_hypotheses(
        self,
        project_id: str,
        task_id: TaskId,
        hypothesis_ids: Sequence[str],
    ) -> Task:
        async with self._session_factory() as session:
            async with session.begin():
                task = await ProjectRepository(session).update_task_hypotheses(
                    project_id, task_id, hypothesis_ids
                )
        logger.debug(f"Persisted {len(task.hypothesis_ids)} links for task {task_id} in {project_id}")
        return task


class JsonFileProjectStore:
    """
    ProjectStore backed by a JSON project export.

    The file holds ``{"id": ..., "hypotheses": [...], "tasks": [...]}``;
    a missing ``id`` falls back to the file name. Link updates rewrite the
    file, preserving every other field.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, Any]:
        with self._path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ProjectStoreError(f"Project export must be a JSON object: {self._path}")
        return data

    @property
    def project_id(self) -> str:
        """Project id stored in the export, or the file stem."""
        data = self._read()
        return str(data.get("id") or data.get("projectId") or self._path.stem)

    def _check_project(self, data: dict[str, Any], project_id: str) -> None:
        stored = str(data.get("id") or data.get("projectId") or self._path.stem)
        if stored != project_id:
            raise ProjectNotFoundError(project_id)

    async def fetch_snapshot(self, project_id: str) -> ProjectSnapshot:
        data = self._read()
        self._check_project(data, project_id)
        return ProjectSnapshot.model_validate(
            {
                "project_id": project_id,
                "hypotheses": data.get("hypotheses") or [],
                "tasks": data.get("tasks") or [],
            }
        )

    async def update_task_hypotheses(
        self,
        project_id: str,
        task_id: TaskId,
        hypothesis_ids: Sequence[str],
    ) -> Task:
        data = self._read()
        self._check_project(data, project_id)
        documents = [dict(doc) for doc in data.get("tasks") or []]
        for doc in documents:
            if str(doc.get("id")) == str(task_id):
                doc["hypothesisIds"] = [str(h) for h in hypothesis_ids]
                doc.pop("hypothesis_ids", None)
                updated = doc
                break
        else:
            raise TaskNotFoundError(project_id, task_id)

        data["tasks"] = documents
        self._write(data)
        return Task.model_validate(updated)

    def _write(self, data: dict[str, Any]) -> None:
        # A failed dump must leave the existing export untouched.
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
                fh.write("\n")
            tmp_path.replace(self._path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
