"""
Repository pattern for database operations.

Provides a clean abstraction over SQLAlchemy for the project document
store. Raw JSON documents are validated into coverage schemas here, at the
store boundary.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from userlens_coverage.coverage.schemas import Hypothesis, Task, TaskId
from userlens_coverage.db.errors import ProjectNotFoundError, TaskNotFoundError
from userlens_coverage.db.models import Base, ProjectModel, SynthesisModel
from userlens_coverage.planner.schemas import ProjectSnapshot

T = TypeVar("T", bound=Base)


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository with common CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @property
    @abstractmethod
    def _model_class(self) -> type[T]:
        """Get the model class for this repository."""
        ...

    async def get_by_id(self, entity_id: str) -> T | None:
        """
        Get an entity by its ID.

        Args:
            entity_id: The entity's primary key.

        Returns:
            The entity if found, None otherwise.
        """
        return await self._session.get(self._model_class, entity_id)

    async def create(self, entity: T) -> T:
        """
        Create a new entity.

        Args:
            entity: The entity to create.

        Returns:
            The created entity.
        """
        self._session.add(entity)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity

    async def update(self, entity: T) -> T:
        """
        Update an existing entity.

        Args:
            entity: The entity to update.

        Returns:
            The updated entity.
        """
        await self._session.flush()
        await self._session.refresh(entity)
        return entity


class SynthesisRepository(BaseRepository[SynthesisModel]):
    """Repository for per-project synthesis data."""

    @property
    def _model_class(self) -> type[SynthesisModel]:
        """Get the model class."""
        return SynthesisModel

    async def get_hypotheses(self, project_id: str) -> list[Hypothesis]:
        """
        Get a project's hypotheses.

        Args:
            project_id: Project identifier.

        Returns:
            Validated hypotheses; empty if synthesis was never initialized.
        """
        synthesis = await self.get_by_id(project_id)
        if synthesis is None:
            return []
        return [Hypothesis.model_validate(doc) for doc in synthesis.hypotheses or []]

    async def replace_hypotheses(
        self,
        project_id: str,
        hypotheses: Sequence[dict[str, Any]],
    ) -> SynthesisModel:
        """
        Replace a project's hypothesis documents, creating synthesis if needed.

        Args:
            project_id: Project identifier.
            hypotheses: Raw hypothesis documents.

        Returns:
            The stored synthesis model.
        """
        synthesis = await self.get_by_id(project_id)
        if synthesis is None:
            return await self.create(
                SynthesisModel(project_id=project_id, hypotheses=[dict(doc) for doc in hypotheses])
            )
        synthesis.hypotheses = [dict(doc) for doc in hypotheses]
        return await self.update(synthesis)


class ProjectRepository(BaseRepository[ProjectModel]):
    """Repository for project and task operations."""

    @property
    def _model_class(self) -> type[ProjectModel]:
        """Get the model class."""
        return ProjectModel

    async def fetch_snapshot(self, project_id: str) -> ProjectSnapshot:
        """
        Load a project's hypotheses and tasks.

        Args:
            project_id: Project identifier.

        Returns:
            Validated snapshot of the project.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """
        project = await self.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        hypotheses = await SynthesisRepository(self._session).get_hypotheses(project_id)
        tasks = [Task.model_validate(doc) for doc in project.tasks or []]
        return ProjectSnapshot(project_id=project_id, hypotheses=hypotheses, tasks=tasks)

    async def update_task_hypotheses(
        self,
        project_id: str,
        task_id: TaskId,
        hypothesis_ids: Sequence[str],
    ) -> Task:
        """
        Replace one task's hypothesis links, keeping its other fields.

        Args:
            project_id: Project identifier.
            task_id: Task identifier, compared by string form.
            hypothesis_ids: New ordered list of hypothesis ids.

        Returns:
            The updated task.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            TaskNotFoundError: If the task is not in the project.
        """
        project = await self.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        documents = [dict(doc) for doc in project.tasks or []]
        for doc in documents:
            if str(doc.get("id")) == str(task_id):
                doc["hypothesisIds"] = [str(h) for h in hypothesis_ids]
                doc.pop("hypothesis_ids", None)
                updated = doc
                break
        else:
            raise TaskNotFoundError(project_id, task_id)

        # JSON columns only register reassignment, not in-place mutation.
        project.tasks = documents
        await self.update(project)
        return Task.model_validate(updated)
