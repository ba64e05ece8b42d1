"""
solaudit — Analysis

Diff engine, classifier and the orchestrator that ties them to the RPC
client. diff_snapshots and classify are pure and synchronous.
"""

from solaudit.analysis.classifier import classify
from solaudit.analysis.diff import diff_snapshots
from solaudit.analysis.engine import RetrySafetyAnalyzer, analyse
from solaudit.analysis.types import (
    AnalysisResult,
    Classification,
    RetrySafety,
    SimulationOutcome,
    SnapshotDiff,
)

__all__ = [
    "AnalysisResult",
    "Classification",
    "RetrySafety",
    "RetrySafetyAnalyzer",
    "SimulationOutcome",
    "SnapshotDiff",
    "analyse",
    "classify",
    "diff_snapshots",
]
