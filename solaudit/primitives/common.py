"""
solaudit — Common Primitives

Shared base model and address helpers used across all modules.
"""

from __future__ import annotations

import base64
import binascii
from typing import Annotated, Any

import base58
from pydantic import AfterValidator, BaseModel, ConfigDict

from solaudit.errors import InvalidInputError

# ─── Constants ────────────────────────────────────────────────────

PUBKEY_BYTES = 32
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
U64_MAX = 2**64 - 1


# ─── Address helpers ──────────────────────────────────────────────


def validate_address(value: str, *, field: str = "address") -> str:
    """
    Check that ``value`` is a base58 Solana address (32 bytes once decoded).

    Returns the address unchanged. Raises InvalidInputError otherwise.
    """
    if not isinstance(value, str) or not value:
        raise InvalidInputError(f"Invalid {field}: expected a base58 string", field=field)
    try:
        raw = base58.b58decode(value)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid {field} '{value}': {exc}", field=field) from exc
    if len(raw) != PUBKEY_BYTES:
        raise InvalidInputError(
            f"Invalid {field} '{value}': decodes to {len(raw)} bytes, expected {PUBKEY_BYTES}",
            field=field,
        )
    return value


def validate_transaction(tx_base64: str) -> bytes:
    """Decode a base64-encoded transaction, raising InvalidInputError if it is not valid."""
    if not isinstance(tx_base64, str) or not tx_base64.strip():
        raise InvalidInputError("Invalid base64 transaction: empty", field="tx")
    try:
        return base64.b64decode(tx_base64.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError(f"Invalid base64 transaction: {exc}", field="tx") from exc


def is_u64(value: Any) -> bool:
    """True for a non-bool int that fits an unsigned 64-bit field."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= U64_MAX


def _address_validator(value: str) -> str:
    # pydantic turns ValueError into a ValidationError; InvalidInputError is one.
    return validate_address(value)


Address = Annotated[str, AfterValidator(_address_validator)]


# ─── Base Models ──────────────────────────────────────────────────


class SolauditBaseModel(BaseModel):
    """Base model for all solaudit values. Immutable, compared by value."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )
