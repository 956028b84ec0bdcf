"""
Coverage module for hypothesis-task analysis.

Determines which research hypotheses are adequately validated by the
project's test tasks and where task difficulty misses the user segments a
hypothesis targets.
"""

from userlens_coverage.coverage.alignment import check_alignment, is_aligned
from userlens_coverage.coverage.engine import (
    alignment_issues_for_hypothesis,
    build_coverage,
    build_matrix,
    compute_metrics,
    find_orphans,
    find_uncovered_hypotheses,
    hypotheses_for_task,
    suggest_hypotheses_for_task,
    suggest_tasks_for_hypothesis,
    tasks_for_hypothesis,
)
from userlens_coverage.coverage.integrity import (
    find_dangling_references,
    find_duplicate_hypothesis_ids,
    find_unknown_segments,
)
from userlens_coverage.coverage.links import is_linked, link_all, set_links, toggle_link, unlink_all
from userlens_coverage.coverage.schemas import (
    AlignmentIssue,
    CoverageStatus,
    DanglingReference,
    Hypothesis,
    HypothesisCoverage,
    HypothesisPriority,
    HypothesisStatus,
    MatrixCell,
    PlanningMetrics,
    Task,
    UnknownSegment,
)
from userlens_coverage.coverage.segments import (
    DIFFICULTY_SEGMENT_MAP,
    SEGMENT_DIFFICULTY_MAP,
    Segment,
    TaskDifficulty,
)

__all__ = [
    "AlignmentIssue",
    "CoverageStatus",
    "DanglingReference",
    "DIFFICULTY_SEGMENT_MAP",
    "Hypothesis",
    "HypothesisCoverage",
    "HypothesisPriority",
    "HypothesisStatus",
    "MatrixCell",
    "PlanningMetrics",
    "SEGMENT_DIFFICULTY_MAP",
    "Segment",
    "Task",
    "TaskDifficulty",
    "UnknownSegment",
    "alignment_issues_for_hypothesis",
    "build_coverage",
    "build_matrix",
    "check_alignment",
    "compute_metrics",
    "find_dangling_references",
    "find_duplicate_hypothesis_ids",
    "find_unknown_segments",
    "find_orphans",
    "find_uncovered_hypotheses",
    "hypotheses_for_task",
    "is_aligned",
    "is_linked",
    "link_all",
    "set_links",
    "suggest_hypotheses_for_task",
    "suggest_tasks_for_hypothesis",
    "tasks_for_hypothesis",
    "toggle_link",
    "unlink_all",
]
