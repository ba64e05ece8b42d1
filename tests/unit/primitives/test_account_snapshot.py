"""
Unit tests for AccountSnapshot and the address helpers.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from solaudit.errors import InvalidInputError
from solaudit.primitives.account import AccountSnapshot
from solaudit.primitives.common import (
    SYSTEM_PROGRAM_ID,
    validate_address,
    validate_transaction,
)

ACCOUNT = "So11111111111111111111111111111111111111112"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class TestDefaultSnapshot:
    def test_shape(self):
        snap = AccountSnapshot.default(ACCOUNT)
        assert snap.pubkey == ACCOUNT
        assert snap.lamports == 0
        assert snap.owner == SYSTEM_PROGRAM_ID
        assert snap.executable is False
        assert snap.data == b""
        assert snap.data_len == 0
        assert snap.rent_epoch == 0
        assert snap.data_captured

    def test_equal_regardless_of_provenance(self):
        built = AccountSnapshot.with_payload(
            ACCOUNT, lamports=0, owner=SYSTEM_PROGRAM_ID, data=b""
        )
        assert built == AccountSnapshot.default(ACCOUNT)


class TestInvariants:
    def test_data_len_must_match_payload(self):
        with pytest.raises(ValidationError):
            AccountSnapshot(
                pubkey=ACCOUNT, lamports=1, owner=TOKEN_PROGRAM, data=b"abc", data_len=4
            )

    def test_uncaptured_payload_keeps_reported_length(self):
        snap = AccountSnapshot(
            pubkey=ACCOUNT, lamports=1, owner=TOKEN_PROGRAM, data=None, data_len=165
        )
        assert not snap.data_captured
        assert snap.data_len == 165

    def test_lamports_must_fit_u64(self):
        with pytest.raises(ValidationError):
            AccountSnapshot(pubkey=ACCOUNT, lamports=2**64, owner=TOKEN_PROGRAM)
        with pytest.raises(ValidationError):
            AccountSnapshot(pubkey=ACCOUNT, lamports=-1, owner=TOKEN_PROGRAM)

    def test_rejects_bad_address(self):
        with pytest.raises(ValidationError):
            AccountSnapshot(pubkey="not-a-key", lamports=1, owner=TOKEN_PROGRAM)

    def test_frozen(self):
        snap = AccountSnapshot.default(ACCOUNT)
        with pytest.raises(ValidationError):
            snap.lamports = 5  # type: ignore[misc]


class TestValidateAddress:
    def test_accepts_known_programs(self):
        assert validate_address(SYSTEM_PROGRAM_ID) == SYSTEM_PROGRAM_ID
        assert validate_address(TOKEN_PROGRAM) == TOKEN_PROGRAM

    @pytest.mark.parametrize("value", ["", "not-a-key", "abc", "0OIl" * 8])
    def test_rejects_invalid(self, value: str):
        with pytest.raises(InvalidInputError) as excinfo:
            validate_address(value, field="program")
        assert excinfo.value.field == "program"


class TestValidateTransaction:
    def test_decodes_base64(self):
        assert validate_transaction("AQID") == b"\x01\x02\x03"

    @pytest.mark.parametrize("value", ["", "   ", "not base64!", "AQI"])
    def test_rejects_invalid(self, value: str):
        with pytest.raises(InvalidInputError) as excinfo:
            validate_transaction(value)
        assert excinfo.value.field == "tx"
