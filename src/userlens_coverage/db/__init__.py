"""
Database module for persistence.

Provides SQLAlchemy models and the repository pattern for the project
document store consumed by the coverage planner.
"""

from userlens_coverage.db.errors import ProjectNotFoundError, ProjectStoreError, TaskNotFoundError
from userlens_coverage.db.models import Base, ProjectModel, SynthesisModel
from userlens_coverage.db.repository import ProjectRepository, SynthesisRepository
from userlens_coverage.db.store import (
    JsonFileProjectStore,
    ProjectStore,
    SqlProjectStore,
    create_database_engine,
    create_session_factory,
)

__all__ = [
    "Base",
    "ProjectModel",
    "SynthesisModel",
    "ProjectRepository",
    "SynthesisRepository",
    "ProjectStore",
    "SqlProjectStore",
    "JsonFileProjectStore",
    "create_database_engine",
    "create_session_factory",
    "ProjectStoreError",
    "ProjectNotFoundError",
    "TaskNotFoundError",
]
