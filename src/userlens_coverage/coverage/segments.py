"""
Segment-mapping table.

Single owner of the known user segments and of the presumed reach of each
task difficulty tier. Alignment and coverage logic look segments up here
and never re-derive the list.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Segment(str, Enum):
    """User-population categories a hypothesis can target."""

    NON_USERS = "Non-Users"
    ABANDONED = "Abandoned"
    OCCASIONAL = "Occasional"
    ACTIVE = "Active"


class TaskDifficulty(str, Enum):
    """Difficulty tier of a test task."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    ALL = "all"  # Reaches every segment


DIFFICULTY_SEGMENT_MAP: dict[TaskDifficulty, tuple[Segment, ...]] = {
    TaskDifficulty.EASY: (Segment.NON_USERS, Segment.ABANDONED),
    TaskDifficulty.MEDIUM: (Segment.OCCASIONAL,),
    TaskDifficulty.HARD: (Segment.ACTIVE,),
    TaskDifficulty.ALL: tuple(Segment),
}

SEGMENT_DIFFICULTY_MAP: dict[Segment, tuple[TaskDifficulty, ...]] = {
    segment: tuple(
        difficulty
        for difficulty, reached in DIFFICULTY_SEGMENT_MAP.items()
        if segment in reached
    )
    for segment in Segment
}

# Difficulty assumed for task documents created before difficulty existed.
DEFAULT_DIFFICULTY = TaskDifficulty.MEDIUM


def _segment_key(label: str) -> str:
    key = re.sub(r"[-_\s]", "", label.lower())
    return re.sub(r"users?$", "", key)


_SEGMENTS_BY_KEY: dict[str, Segment] = {_segment_key(s.value): s for s in Segment}


def canonical_segment(label: str) -> str:
    """
    Map a free-form segment label onto its canonical spelling.

    "non-user", "Non Users" and "NON_USERS" all become "Non-Users";
    "active users" becomes "Active". Labels that match no known segment
    are returned stripped but otherwise unchanged.

    Args:
        label: Segment label as stored on a hypothesis.

    Returns:
        The canonical segment label, or the stripped input.
    """
    cleaned = label.strip()
    segment = _SEGMENTS_BY_KEY.get(_segment_key(cleaned))
    return segment.value if segment else cleaned


def parse_difficulty(value: Any) -> TaskDifficulty:
    """
    Coerce a raw difficulty value into a TaskDifficulty.

    Missing values get the default tier. Unrecognised values fall back to
    ``all`` so that one bad task cannot halt a coverage computation.
    """
    if value is None or value == "":
        return DEFAULT_DIFFICULTY
    if isinstance(value, TaskDifficulty):
        return value
    try:
        return TaskDifficulty(str(value).strip().lower())
    except ValueError:
        logger.warning(f"Unknown task difficulty '{value}', treating as 'all'")
        return TaskDifficulty.ALL


def segments_for(difficulty: TaskDifficulty) -> tuple[str, ...]:
    """Return the segment labels a difficulty tier reaches, in table order."""
    return tuple(segment.value for segment in DIFFICULTY_SEGMENT_MAP[difficulty])


def reached_segments(difficulty: TaskDifficulty) -> frozenset[str]:
    """Return the set of segment labels a difficulty tier reaches."""
    return frozenset(segments_for(difficulty))
