"""
Pydantic schemas for the planner module.

Defines the project snapshot loaded from the store and the coverage report
handed back to callers.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from userlens_coverage.coverage.schemas import (
    DanglingReference,
    Hypothesis,
    HypothesisCoverage,
    MatrixCell,
    PlanningMetrics,
    Task,
    UnknownSegment,
)


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class ProjectSnapshot(BaseModel):
    """Hypotheses and tasks of one project, as fetched from the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    project_id: str = Field(default="", description="Project identifier")
    hypotheses: list[Hypothesis] = Field(default_factory=list, description="Project hypotheses")
    tasks: list[Task] = Field(default_factory=list, description="Project tasks")


class CoverageReport(BaseModel):
    """Everything the coverage view renders for one project."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_id: str = Field(default="", description="Project identifier")
    coverage: list[HypothesisCoverage] = Field(
        default_factory=list,
        description="Per-hypothesis coverage, in hypothesis order",
    )
    metrics: PlanningMetrics = Field(default_factory=PlanningMetrics, description="Summary metrics")
    orphaned_tasks: list[Task] = Field(default_factory=list, description="Tasks linked to no hypothesis")
    matrix: list[list[MatrixCell]] = Field(default_factory=list, description="Hypothesis x task grid")
    dangling_references: list[DanglingReference] = Field(
        default_factory=list,
        description="Task links to unknown hypothesis ids",
    )
    duplicate_hypothesis_ids: list[str] = Field(
        default_factory=list,
        description="Hypothesis ids occurring more than once",
    )
    unknown_segments: list[UnknownSegment] = Field(
        default_factory=list,
        description="Hypothesis segment labels outside the segment table",
    )
    generated_at: datetime = Field(default_factory=_now_utc, description="When the report was computed")
