"""
solaudit — Solana JSON-RPC Client

Async read-only client for the two RPC methods the analysis needs:

  getAccountInfo       -> AccountSnapshot (or AccountNotFoundError)
  simulateTransaction  -> SimulationOutcome

Nothing here submits transactions. Simulation runs with signature
verification off and blockhash replacement on, and asks the node to return
the post-state of the watched address.

Lifecycle: construct → use → close(), or ``async with SolanaRpcClient(...)``.
"""

from __future__ import annotations

import base64
import binascii
import itertools
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from solaudit.clients.simulation import parse_simulation_response
from solaudit.errors import (
    AccountNotFoundError,
    InvalidInputError,
    MalformedResponseError,
    TransportError,
)
from solaudit.primitives.account import AccountSnapshot
from solaudit.primitives.common import is_u64, validate_address, validate_transaction

if TYPE_CHECKING:
    from solaudit.analysis.types import SimulationOutcome
    from solaudit.config import RpcConfig

logger = structlog.get_logger(system="solaudit.rpc")


class SolanaRpcClient:
    """
    JSON-RPC 2.0 client over a shared ``httpx.AsyncClient``.

    Every failure to obtain a usable response raises TransportError;
    a response that is valid JSON-RPC but has the wrong shape raises
    MalformedResponseError.
    """

    def __init__(
        self,
        config: RpcConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._endpoint = config.endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_s, connect=5.0),
            headers={"content-type": "application/json"},
        )
        self._ids = itertools.count(1)
        self._log = logger.bind(endpoint=self._endpoint)

    async def __aenter__(self) -> SolanaRpcClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # ── Account reads ─────────────────────────────────────────────

    async def fetch_snapshot(self, address: str, *, with_data: bool = True) -> AccountSnapshot:
        """
        Read the current state of ``address``.

        With ``with_data=False`` a zero-length data slice is requested: the
        payload is left uncaptured (``data is None``) and ``data_len`` comes
        from the node's ``space`` field.

        Raises:
            InvalidInputError: malformed address.
            AccountNotFoundError: the account does not exist.
        """
        validate_address(address)
        options: dict[str, Any] = {
            "encoding": "base64",
            "commitment": self._config.commitment,
        }
        if not with_data:
            options["dataSlice"] = {"offset": 0, "length": 0}

        result = await self._call("getAccountInfo", [address, options])
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            raise AccountNotFoundError(address)
        if not isinstance(value, dict):
            raise MalformedResponseError("getAccountInfo value must be an object", field="value")

        snapshot = _snapshot_from_account_info(address, value, with_data=with_data)
        self._log.debug(
            "snapshot_fetched",
            address=address,
            lamports=snapshot.lamports,
            data_len=snapshot.data_len,
        )
        return snapshot

    async def fetch_snapshot_or_default(self, address: str) -> AccountSnapshot:
        """Read ``address``, or return the default snapshot if it does not exist yet."""
        try:
            return await self.fetch_snapshot(address)
        except AccountNotFoundError:
            self._log.info("account_missing_using_default", address=address)
            return AccountSnapshot.default(address)

    # ── Simulation ────────────────────────────────────────────────

    async def simulate_transaction(
        self,
        tx_base64: str,
        watch_address: str,
    ) -> SimulationOutcome:
        """
        Preview ``tx_base64`` and return the simulated post-state of ``watch_address``.

        The cluster state is not modified.
        """
        validate_transaction(tx_base64)
        validate_address(watch_address, field="watch_address")

        params = [
            tx_base64.strip(),
            {
                "encoding": "base64",
                "sigVerify": False,
                "replaceRecentBlockhash": True,
                "commitment": self._config.commitment,
                "accounts": {
                    "encoding": "base64",
                    "addresses": [watch_address],
                },
            },
        ]
        result = await self._call("simulateTransaction", params)
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            raise MalformedResponseError("simulateTransaction returned no value", field="value")

        outcome = parse_simulation_response(value, watch_address)
        self._log.info(
            "transaction_simulated",
            watch_address=watch_address,
            error=outcome.error,
            log_lines=len(outcome.logs),
            units_consumed=outcome.units_consumed,
            has_post_state=outcome.post_snapshot is not None,
        )
        return outcome

    # ── Transport ─────────────────────────────────────────────────

    async def _call(self, method: str, params: list[Any]) -> Any:
        """POST one JSON-RPC request and return its ``result`` member."""
        request_id = next(self._ids)
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        self._log.debug("rpc_request", method=method, id=request_id)

        try:
            response = await self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} timed out: {exc}", method=method) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(
                f"{method} failed with HTTP {status}", method=method, code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} failed: {exc}", method=method) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"{method} returned a non-JSON body", field="body"
            ) from exc
        if not isinstance(body, dict):
            raise MalformedResponseError(f"{method} returned a non-object body", field="body")

        error = body.get("error")
        if error is not None:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", error) if isinstance(error, dict) else error
            raise TransportError(
                f"{method} RPC error {code}: {message}",
                method=method,
                code=code if isinstance(code, int) else None,
            )
        if "result" not in body:
            raise MalformedResponseError(f"{method} response has no result", field="result")
        return body["result"]

    # ── Lifecycle ─────────────────────────────────────────────────

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it. Idempotent."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()


# ── Helpers ──────────────────────────────────────────────────────────


def _snapshot_from_account_info(
    address: str,
    value: dict[str, Any],
    *,
    with_data: bool,
) -> AccountSnapshot:
    lamports = value.get("lamports")
    if not is_u64(lamports):
        raise MalformedResponseError(
            f"Account info lamports must be a u64, got {lamports!r}", field="lamports"
        )
    owner = value.get("owner")
    if not isinstance(owner, str):
        raise MalformedResponseError("Missing owner in account info", field="owner")
    try:
        validate_address(owner, field="owner")
    except InvalidInputError as exc:
        raise MalformedResponseError(str(exc), field="owner") from exc

    executable = bool(value.get("executable", False))
    rent_epoch = value.get("rentEpoch")
    rent_epoch = rent_epoch if is_u64(rent_epoch) else 0

    if not with_data:
        space = value.get("space")
        if not is_u64(space):
            raise MalformedResponseError(
                "Lightweight read needs the 'space' field to size the payload",
                field="space",
            )
        return AccountSnapshot(
            pubkey=address,
            lamports=lamports,
            owner=owner,
            executable=executable,
            data=None,
            data_len=space,
            rent_epoch=rent_epoch,
        )

    data = value.get("data")
    if not isinstance(data, list) or not data or not isinstance(data[0], str):
        raise MalformedResponseError("Missing data in account info", field="data")
    try:
        payload = base64.b64decode(data[0], validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedResponseError(f"Undecodable account data: {exc}", field="data") from exc

    return AccountSnapshot.with_payload(
        address,
        lamports=lamports,
        owner=owner,
        executable=executable,
        data=payload,
        rent_epoch=rent_epoch,
    )
