"""
solaudit — Diff Engine

Pure field-by-field comparison of two account snapshots.
"""

from __future__ import annotations

from solaudit.analysis.types import SnapshotDiff
from solaudit.primitives.account import AccountSnapshot


def diff_snapshots(before: AccountSnapshot, after: AccountSnapshot) -> SnapshotDiff:
    """
    Compute the change-set between ``before`` and ``after``.

    Content is compared independently of length: a same-length payload can
    still differ byte for byte. When either side's payload was not captured
    the content flag stays False, since nothing can be said about it.
    """
    return SnapshotDiff(
        lamports_changed=before.lamports != after.lamports,
        owner_changed=before.owner != after.owner,
        executable_changed=before.executable != after.executable,
        data_len_changed=before.data_len != after.data_len,
        data_changed=_payload_changed(before.data, after.data),
    )


def _payload_changed(before: bytes | None, after: bytes | None) -> bool:
    if before is None or after is None:
        return False
    return before != after
