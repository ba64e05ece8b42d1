"""
solaudit — Simulation Response Parser

Decodes the ``value`` object of a ``simulateTransaction`` result into a
SimulationOutcome in one pass. After this step nothing downstream looks at
the raw document again.

Field contract:
  err            optional, any JSON       -> error description
  logs           optional, list[str]      -> log lines (default empty)
  unitsConsumed  optional, int            -> compute units (default None)
  accounts       optional, list           -> one entry per requested address
    lamports     MANDATORY int
    owner        MANDATORY base58 address
    executable   optional bool            (default False)
    rentEpoch    optional int             (default 0)
    data         optional [payload, encoding] (default / undecodable -> b"")

The parser only interprets a document a collaborator already fetched; it
never talks to the cluster.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

import base58
import structlog

from solaudit.analysis.types import SimulationOutcome
from solaudit.errors import InvalidInputError, MalformedResponseError
from solaudit.primitives.account import AccountSnapshot
from solaudit.primitives.common import is_u64, validate_address

logger = structlog.get_logger(system="solaudit.simulation")


def parse_simulation_response(
    document: Mapping[str, Any],
    watch_address: str,
) -> SimulationOutcome:
    """
    Decode a simulation document for a single watched address.

    Raises:
        MalformedResponseError: the document is not an object, or an account
            entry is present but lacks a valid ``lamports`` or ``owner``.
        InvalidInputError: ``watch_address`` is not a valid address.
    """
    validate_address(watch_address, field="watch_address")
    if not isinstance(document, Mapping):
        raise MalformedResponseError(
            f"Simulation value must be an object, got {type(document).__name__}",
            field="value",
        )

    return SimulationOutcome(
        error=_parse_error(document.get("err")),
        logs=_parse_logs(document.get("logs")),
        post_snapshot=_parse_account(document.get("accounts"), watch_address),
        units_consumed=_parse_units(document.get("unitsConsumed")),
    )


def try_parse_simulation_response(
    document: Mapping[str, Any],
    watch_address: str,
) -> SimulationOutcome | MalformedResponseError:
    """Like parse_simulation_response, but returns the failure instead of raising it."""
    try:
        return parse_simulation_response(document, watch_address)
    except MalformedResponseError as exc:
        return exc


# ── Top-level fields ──────────────────────────────────────────────


def _parse_error(raw: Any) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    return json.dumps(raw, separators=(",", ":"), sort_keys=True)


def _parse_logs(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(line for line in raw if isinstance(line, str))


def _parse_units(raw: Any) -> int | None:
    if is_u64(raw):
        return raw
    return None


# ── Account entry ─────────────────────────────────────────────────


def _parse_account(raw_accounts: Any, watch_address: str) -> AccountSnapshot | None:
    # One address is requested, so only the first entry is meaningful.
    if not isinstance(raw_accounts, list) or not raw_accounts:
        return None
    entry = raw_accounts[0]
    if entry is None:
        return None
    if not isinstance(entry, Mapping):
        raise MalformedResponseError(
            f"Simulated account entry must be an object, got {type(entry).__name__}",
            field="accounts[0]",
        )

    lamports = entry.get("lamports")
    if not is_u64(lamports):
        raise MalformedResponseError(
            "Missing lamports in simulated account", field="lamports"
        )

    owner = entry.get("owner")
    if not isinstance(owner, str):
        raise MalformedResponseError("Missing owner in simulated account", field="owner")
    try:
        validate_address(owner, field="owner")
    except InvalidInputError as exc:
        raise MalformedResponseError(str(exc), field="owner") from exc

    executable = entry.get("executable")
    rent_epoch = entry.get("rentEpoch")

    return AccountSnapshot.with_payload(
        watch_address,
        lamports=lamports,
        owner=owner,
        executable=executable if isinstance(executable, bool) else False,
        data=_decode_data(entry.get("data")),
        rent_epoch=rent_epoch if is_u64(rent_epoch) else 0,
    )


def _decode_data(raw: Any) -> bytes:
    """
    Decode a ``[payload, encoding]`` pair.

    Decode failures yield an empty payload; the document's ``err`` field is
    the authoritative failure signal, not the data encoding.
    """
    if not isinstance(raw, list) or not raw:
        return b""
    encoded = raw[0]
    encoding = raw[1] if len(raw) > 1 else "base64"
    if not isinstance(encoded, str) or not encoded:
        return b""

    try:
        if encoding == "base64":
            return base64.b64decode(encoded, validate=True)
        if encoding == "base58":
            return base58.b58decode(encoded)
    except (binascii.Error, ValueError) as exc:
        logger.debug("simulated_data_undecodable", encoding=encoding, error=str(exc))
        return b""

    logger.debug("simulated_data_unsupported_encoding", encoding=encoding)
    return b""
