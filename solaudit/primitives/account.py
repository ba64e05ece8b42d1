"""
solaudit — Account Snapshot

The immutable capture of one account's observable state at one instant.

Snapshots are created only by reads: a direct ``getAccountInfo`` fetch, a
default-on-not-found fetch, or extraction from a ``simulateTransaction``
response. Two snapshots with the same field values are interchangeable
regardless of where they came from.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from solaudit.primitives.common import (
    SYSTEM_PROGRAM_ID,
    U64_MAX,
    Address,
    SolauditBaseModel,
)


class AccountSnapshot(SolauditBaseModel):
    """
    State of one account.

    ``data`` is ``None`` when the payload was not captured (a lightweight
    read using a zero-length data slice). ``b""`` is an empty payload.
    """

    pubkey: Address
    lamports: int = Field(ge=0, le=U64_MAX)
    owner: Address
    executable: bool = False
    data: bytes | None = None
    data_len: int = Field(default=0, ge=0)
    rent_epoch: int = Field(default=0, ge=0, le=U64_MAX)

    @model_validator(mode="after")
    def _check_data_len(self) -> AccountSnapshot:
        if self.data is not None and self.data_len != len(self.data):
            raise ValueError(
                f"data_len ({self.data_len}) does not match payload length ({len(self.data)})"
            )
        return self

    @classmethod
    def default(cls, pubkey: str) -> AccountSnapshot:
        """The canonical snapshot of an account that does not exist yet."""
        return cls(
            pubkey=pubkey,
            lamports=0,
            owner=SYSTEM_PROGRAM_ID,
            executable=False,
            data=b"",
            data_len=0,
            rent_epoch=0,
        )

    @classmethod
    def with_payload(
        cls,
        pubkey: str,
        *,
        lamports: int,
        owner: str,
        data: bytes,
        executable: bool = False,
        rent_epoch: int = 0,
    ) -> AccountSnapshot:
        """Build a snapshot from a full read, deriving ``data_len`` from the payload."""
        return cls(
            pubkey=pubkey,
            lamports=lamports,
            owner=owner,
            executable=executable,
            data=data,
            data_len=len(data),
            rent_epoch=rent_epoch,
        )

    @property
    def data_captured(self) -> bool:
        return self.data is not None

    def __repr__(self) -> str:
        return (
            f"AccountSnapshot({self.pubkey[:8]}… lamports={self.lamports} "
            f"data_len={self.data_len})"
        )
