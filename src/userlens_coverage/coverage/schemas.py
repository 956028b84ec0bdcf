"""
Pydantic schemas for the coverage engine.

Hypothesis and Task documents are validated here at the project-store
boundary, so the engine only ever sees closed difficulty tiers and
canonical segment labels. Documents use camelCase keys; the models accept
either camelCase or snake_case names and ignore unrelated fields.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from userlens_coverage.coverage.segments import (
    DEFAULT_DIFFICULTY,
    TaskDifficulty,
    canonical_segment,
    parse_difficulty,
)

TaskId = str | int


class HypothesisPriority(str, Enum):
    """Research priority of a hypothesis."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class HypothesisStatus(str, Enum):
    """Validation status of a hypothesis (not interpreted by the engine)."""

    TESTING = "testing"
    VALIDATED = "validated"
    DISPROVEN = "disproven"
    UNCLEAR = "unclear"


class CoverageStatus(str, Enum):
    """How well a hypothesis's target segments are reached by its tasks."""

    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class _DocumentModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Hypothesis(_DocumentModel):
    """A testable belief about user behavior, tagged with target segments."""

    id: str = Field(..., min_length=1, description="Unique hypothesis id")
    hypothesis: str = Field(default="", description="Hypothesis statement")
    segments: list[str] = Field(
        default_factory=list,
        description="Canonical target-segment labels, duplicates removed",
    )
    priority: HypothesisPriority | None = Field(default=None, description="Research priority")
    status: HypothesisStatus = Field(default=HypothesisStatus.TESTING, description="Validation status")
    research_question_id: str | None = Field(
        default=None,
        description="Research question grouping used by the UI",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("segments", mode="before")
    @classmethod
    def _canonicalize_segments(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        seen: dict[str, None] = {}
        for label in value:
            if not isinstance(label, str) or not label.strip():
                continue
            seen.setdefault(canonical_segment(label), None)
        return list(seen)

    @field_validator("priority", mode="before")
    @classmethod
    def _lenient_priority(cls, value: Any) -> HypothesisPriority | None:
        if isinstance(value, HypothesisPriority):
            return value
        try:
            return HypothesisPriority(str(value).strip().lower())
        except ValueError:
            return None

    @field_validator("status", mode="before")
    @classmethod
    def _lenient_status(cls, value: Any) -> HypothesisStatus:
        if isinstance(value, HypothesisStatus):
            return value
        try:
            return HypothesisStatus(str(value).strip().lower())
        except ValueError:
            return HypothesisStatus.TESTING


class Task(_DocumentModel):
    """A test activity assigned to participants."""

    id: TaskId = Field(..., description="Opaque task identifier")
    title: str = Field(default="", description="Task title")
    difficulty: TaskDifficulty = Field(default=DEFAULT_DIFFICULTY, description="Difficulty tier")
    hypothesis_ids: list[str] = Field(
        default_factory=list,
        description="Hypotheses this task is declared to validate, in order",
    )

    @field_validator("difficulty", mode="before")
    @classmethod
    def _coerce_difficulty(cls, value: Any) -> TaskDifficulty:
        return parse_difficulty(value)

    @field_validator("hypothesis_ids", mode="before")
    @classmethod
    def _coerce_hypothesis_ids(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item) for item in value if item is not None]


class AlignmentIssue(_DocumentModel):
    """A task whose difficulty-implied audience misses a hypothesis's segments."""

    task_id: TaskId
    task_title: str = ""
    task_difficulty: TaskDifficulty
    hypothesis_id: str
    hypothesis_segments: list[str] = Field(default_factory=list)
    reached_segments: list[str] = Field(default_factory=list)
    message: str


class HypothesisCoverage(_DocumentModel):
    """Derived coverage of one hypothesis by its linked tasks."""

    hypothesis_id: str
    hypothesis: str = ""
    priority: HypothesisPriority | None = None
    segments: list[str] = Field(default_factory=list)
    linked_task_ids: list[str] = Field(default_factory=list)
    linked_tasks: list[Task] = Field(default_factory=list)
    coverage_status: CoverageStatus
    segment_alignment_issues: list[AlignmentIssue] = Field(default_factory=list)


class PlanningMetrics(_DocumentModel):
    """Summary counts over a full hypothesis/task set."""

    total_hypotheses: int = 0
    hypotheses_with_tasks: int = 0
    hypotheses_without_tasks: int = 0
    total_tasks: int = 0
    tasks_linked_to_hypotheses: int = 0
    orphaned_tasks: int = 0
    alignment_issues: int = 0
    coverage_percentage: int = Field(default=0, ge=0, le=100)


class MatrixCell(_DocumentModel):
    """One hypothesis x task cell of the planning grid."""

    hypothesis_id: str
    task_id: str
    is_linked: bool = False
    has_alignment_issue: bool = False
    alignment_issue: AlignmentIssue | None = None


class DanglingReference(_DocumentModel):
    """A task link naming a hypothesis id absent from the collection."""

    task_id: TaskId
    hypothesis_id: str


class UnknownSegment(_DocumentModel):
    """A hypothesis segment label outside the segment table."""

    hypothesis_id: str
    segment: str
