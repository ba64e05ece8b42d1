"""
solaudit — Primitives

Address helpers, the shared base model and the account snapshot.
"""

from solaudit.primitives.account import AccountSnapshot
from solaudit.primitives.common import (
    SYSTEM_PROGRAM_ID,
    Address,
    SolauditBaseModel,
    is_u64,
    validate_address,
    validate_transaction,
)

__all__ = [
    "AccountSnapshot",
    "Address",
    "SYSTEM_PROGRAM_ID",
    "SolauditBaseModel",
    "is_u64",
    "validate_address",
    "validate_transaction",
]
