"""
Planner module wiring the coverage engine to the project store.
"""

from userlens_coverage.planner.coverage_planner import CoveragePlanner
from userlens_coverage.planner.schemas import CoverageReport, ProjectSnapshot

__all__ = [
    "CoveragePlanner",
    "CoverageReport",
    "ProjectSnapshot",
]
