"""Errors raised by the project store."""

from userlens_coverage.coverage.schemas import TaskId


class ProjectStoreError(Exception):
    """Base error raised by the project store."""


class ProjectNotFoundError(ProjectStoreError):
    """Raised when a project id is unknown to the store."""

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class TaskNotFoundError(ProjectStoreError):
    """Raised when a task id is unknown within a project."""

    def __init__(self, project_id: str, task_id: TaskId) -> None:
        super().__init__(f"Task not found in project {project_id}: {task_id}")
        self.project_id = project_id
        self.task_id = task_id
