"""
solaudit — Analysis Orchestrator

One retry-safety analysis, start to finish:

  1. validate inputs (no network yet)
  2. fetch the pre-state of the watched account
  3. obtain the post-state from a simulation of the proposed transaction,
     or compare the pre-state with itself when there is no transaction
  4. fall back to the pre-state when the simulation returns no account
  5. diff → classify → AnalysisResult

The post-state only ever comes from a real simulation or from a confirmed
and polled read; the orchestrator never synthesizes state.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

import structlog

from solaudit.analysis.classifier import classify
from solaudit.analysis.diff import diff_snapshots
from solaudit.analysis.types import AnalysisResult, SimulationOutcome
from solaudit.primitives.common import validate_address, validate_transaction

if TYPE_CHECKING:
    from solaudit.clients.poller import AccountPoller
    from solaudit.primitives.account import AccountSnapshot

logger = structlog.get_logger(system="solaudit.analysis")


class AccountReader(Protocol):
    """The slice of SolanaRpcClient the analyzer depends on."""

    async def fetch_snapshot(self, address: str, *, with_data: bool = True) -> AccountSnapshot: ...

    async def fetch_snapshot_or_default(self, address: str) -> AccountSnapshot: ...

    async def simulate_transaction(
        self, tx_base64: str, watch_address: str
    ) -> SimulationOutcome: ...


def analyse(
    before: AccountSnapshot,
    after: AccountSnapshot,
    logs: Iterable[str] = (),
    *,
    simulation_error: str | None = None,
    units_consumed: int | None = None,
    cluster: str | None = None,
) -> AnalysisResult:
    """Diff and classify a before/after pair. Pure; no I/O."""
    diff = diff_snapshots(before, after)
    classification = classify(diff)
    return AnalysisResult(
        before=before,
        after=after,
        diff=diff,
        classification=classification,
        simulation_logs=tuple(logs),
        simulation_error=simulation_error,
        units_consumed=units_consumed,
        cluster=cluster,
    )


class RetrySafetyAnalyzer:
    """
    Runs the analysis pipeline against a live cluster.

    Holds no state between calls; every analysis builds fresh values.
    """

    def __init__(self, rpc: AccountReader, *, cluster: str | None = None) -> None:
        self._rpc = rpc
        self._cluster = cluster

    async def analyse_account(
        self,
        address: str,
        transaction_b64: str | None = None,
        *,
        allow_missing: bool = True,
    ) -> AnalysisResult:
        """
        Analyse ``address`` against an optional base64 transaction.

        With ``allow_missing`` a not-yet-existing account is compared as the
        default snapshot; otherwise AccountNotFoundError propagates.
        """
        validate_address(address)
        if transaction_b64 is not None:
            validate_transaction(transaction_b64)

        log = logger.bind(address=address, cluster=self._cluster)

        if allow_missing:
            before = await self._rpc.fetch_snapshot_or_default(address)
        else:
            before = await self._rpc.fetch_snapshot(address)

        outcome: SimulationOutcome | None = None
        if transaction_b64 is None:
            after = before
        else:
            outcome = await self._rpc.simulate_transaction(transaction_b64, address)
            if outcome.error is not None:
                log.warning("simulation_reported_error", error=outcome.error)
            if outcome.post_snapshot is None:
                log.info("simulation_returned_no_post_state")
                after = before
            else:
                after = outcome.post_snapshot

        result = analyse(
            before,
            after,
            outcome.logs if outcome else (),
            simulation_error=outcome.error if outcome else None,
            units_consumed=outcome.units_consumed if outcome else None,
            cluster=self._cluster,
        )
        log.info(
            "analysis_complete",
            safety=result.safety.value,
            reasons=list(result.classification.reasons),
        )
        return result

    async def analyse_confirmed(
        self,
        address: str,
        before: AccountSnapshot,
        poller: AccountPoller,
    ) -> AnalysisResult:
        """
        Compare ``before`` with the state of ``address`` after a real submission.

        The poller waits for the account to become readable; its
        VisibilityTimeoutError propagates unchanged.
        """
        validate_address(address)
        after = await poller.wait_for_account(address)
        result = analyse(before, after, cluster=self._cluster)
        logger.info(
            "confirmed_analysis_complete",
            address=address,
            safety=result.safety.value,
        )
        return result

