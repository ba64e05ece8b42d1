"""
solaudit -- Analysis Types

Value types produced by the diff / classify / analyse pipeline. All of them
are frozen and built fresh for every analysis.
"""

from __future__ import annotations

import enum

from pydantic import Field, model_validator

from solaudit.primitives.account import AccountSnapshot
from solaudit.primitives.common import SolauditBaseModel

# --- Enums -------------------------------------------------------------------


class RetrySafety(str, enum.Enum):
    SAFE = "safe"
    UNSAFE = "unsafe"


# --- Models ------------------------------------------------------------------


class SnapshotDiff(SolauditBaseModel):
    """Field-level change-set between a before and an after snapshot."""

    lamports_changed: bool = False
    owner_changed: bool = False
    executable_changed: bool = False
    data_len_changed: bool = False
    data_changed: bool = False

    def changed_fields(self) -> list[str]:
        """Names of the set flags, in classification order."""
        return [name for name in _FLAG_ORDER if getattr(self, name)]

    @property
    def any_changed(self) -> bool:
        return any(getattr(self, name) for name in _FLAG_ORDER)


_FLAG_ORDER: tuple[str, ...] = (
    "lamports_changed",
    "owner_changed",
    "executable_changed",
    "data_len_changed",
    "data_changed",
)


class Classification(SolauditBaseModel):
    """Safety verdict over a diff. Reasons are empty exactly when SAFE."""

    safety: RetrySafety
    reasons: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_reasons(self) -> Classification:
        if (self.safety == RetrySafety.SAFE) != (not self.reasons):
            raise ValueError("reasons must be empty if and only if safety is SAFE")
        return self


class SimulationOutcome(SolauditBaseModel):
    """Decoded ``simulateTransaction`` value for a single watched address."""

    error: str | None = None
    logs: tuple[str, ...] = ()
    post_snapshot: AccountSnapshot | None = None
    units_consumed: int | None = Field(default=None, ge=0)


class AnalysisResult(SolauditBaseModel):
    """Everything one retry-safety analysis produced."""

    before: AccountSnapshot
    after: AccountSnapshot
    diff: SnapshotDiff
    classification: Classification
    simulation_logs: tuple[str, ...] = ()
    simulation_error: str | None = None
    units_consumed: int | None = None
    cluster: str | None = None

    @property
    def safety(self) -> RetrySafety:
        return self.classification.safety
