"""
solaudit — Post-state Poller

Reads on a Solana RPC node are only eventually consistent with a
just-confirmed transaction. AccountPoller bridges that gap: it re-reads an
account until the read succeeds or the RetryPolicy's attempt budget is
spent.

Only callers that performed a real submission use the poller. The
simulation path never does.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import structlog

from solaudit.config import RetryPolicy
from solaudit.errors import AccountNotFoundError, TransportError, VisibilityTimeoutError

if TYPE_CHECKING:
    from solaudit.primitives.account import AccountSnapshot

logger = structlog.get_logger(system="solaudit.poller")

FetchFn = Callable[[str], Awaitable["AccountSnapshot"]]
SleepFn = Callable[[float], Awaitable[None]]

# Failures that mean "not visible yet". Anything else propagates at once.
_RETRYABLE = (AccountNotFoundError, TransportError)


class AccountPoller:
    """
    Bounded retry loop around a snapshot read.

    Args:
        fetch:  Coroutine function returning a snapshot for an address,
                typically ``SolanaRpcClient.fetch_snapshot``.
        policy: Attempt budget and delays.
        sleep:  Awaitable used between attempts. Tests inject a fake clock.

    Each attempt is a full, independent read. Both the attempt and the wait
    are plain awaits, so an enclosing ``asyncio.timeout()`` cancels the loop.
    """

    def __init__(
        self,
        fetch: FetchFn,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._fetch = fetch
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    async def wait_for_account(self, address: str) -> AccountSnapshot:
        """
        Return the first successful read of ``address``.

        Raises:
            VisibilityTimeoutError: every attempt failed; chained from the
                last underlying error.
        """
        policy = self._policy
        last_error: Exception | None = None

        for attempt in range(1, policy.max_attempts + 1):
            try:
                snapshot = await self._attempt(address)
            except _RETRYABLE as exc:
                last_error = exc
                logger.info(
                    "poll_attempt_failed",
                    address=address,
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    error=str(exc),
                )
                if attempt < policy.max_attempts:
                    await self._sleep(policy.delay_for(attempt))
                continue

            logger.info("account_visible", address=address, attempt=attempt)
            return snapshot

        logger.warning(
            "account_visibility_timeout",
            address=address,
            attempts=policy.max_attempts,
            error=str(last_error),
        )
        raise VisibilityTimeoutError(address, policy.max_attempts, last_error) from last_error

    async def _attempt(self, address: str) -> AccountSnapshot:
        timeout_s = self._policy.attempt_timeout_s
        if timeout_s is None:
            return await self._fetch(address)
        try:
            async with asyncio.timeout(timeout_s):
                return await self._fetch(address)
        except TimeoutError as exc:
            raise TransportError(
                f"Read of {address} exceeded {timeout_s}s", method="getAccountInfo"
            ) from exc
