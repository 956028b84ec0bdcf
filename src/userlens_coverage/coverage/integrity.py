"""
Data-integrity diagnostics for project collections.

The engine tolerates dangling task links, duplicate hypothesis ids and
segment labels outside the segment table; these helpers surface them so the project store can be corrected.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from userlens_coverage.coverage.schemas import DanglingReference, Hypothesis, Task, UnknownSegment
from userlens_coverage.coverage.segments import Segment


def find_dangling_references(
    hypotheses: Sequence[Hypothesis],
    tasks: Sequence[Task],
) -> list[DanglingReference]:
    """Return task links to hypothesis ids missing from the collection, once per task and id."""
    known = {hypothesis.id for hypothesis in hypotheses}
    dangling: list[DanglingReference] = []
    for task in tasks:
        for hypothesis_id in dict.fromkeys(task.hypothesis_ids):
            if hypothesis_id not in known:
                dangling.append(DanglingReference(task_id=task.id, hypothesis_id=hypothesis_id))
    return dangling


def find_duplicate_hypothesis_ids(hypotheses: Sequence[Hypothesis]) -> list[str]:
    """Return hypothesis ids that occur more than once, in first-seen order."""
    counts = Counter(hypothesis.id for hypothesis in hypotheses)
    return [hypothesis_id for hypothesis_id, count in counts.items() if count > 1]


def find_unknown_segments(hypotheses: Sequence[Hypothesis]) -> list[UnknownSegment]:
    """
    Return segment labels that match no known segment.

    Only ``all`` tasks reach such labels, so hypotheses targeting them are
    usually mislabeled.
    """
    known = {segment.value for segment in Segment}
    return [
        UnknownSegment(hypothesis_id=hypothesis.id, segment=label)
        for hypothesis in hypotheses
        for label in hypothesis.segments
        if label not in known
    ]
