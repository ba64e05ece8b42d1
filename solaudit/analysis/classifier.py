"""
solaudit — Retry-Safety Classifier

Turns a SnapshotDiff into a verdict. Any observable change to balance,
owner, executability or stored data means the operation already had a
visible side effect, so only an identical before/after is safe to retry.
"""

from __future__ import annotations

from solaudit.analysis.types import Classification, RetrySafety, SnapshotDiff

# Walk order is fixed so reports are deterministic.
_REASONS: tuple[tuple[str, str], ...] = (
    ("lamports_changed", "Balance changed"),
    ("owner_changed", "Owner changed"),
    ("executable_changed", "Executable flag changed"),
    ("data_len_changed", "Account data size changed"),
    ("data_changed", "Account data content changed"),
)


def classify(diff: SnapshotDiff) -> Classification:
    reasons = tuple(reason for flag, reason in _REASONS if getattr(diff, flag))
    safety = RetrySafety.UNSAFE if reasons else RetrySafety.SAFE
    return Classification(safety=safety, reasons=reasons)
