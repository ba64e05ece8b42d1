"""
Devnet integration tests for solaudit.

Required env vars (in .env or exported in the shell):
  SOLAUDIT_DEVNET_TEST=1

  pytest tests/integration -m integration
"""

from __future__ import annotations

import os

import base58
import pytest
from dotenv import load_dotenv

from solaudit.analysis.engine import RetrySafetyAnalyzer
from solaudit.analysis.types import RetrySafety
from solaudit.clients.poller import AccountPoller
from solaudit.clients.rpc import SolanaRpcClient
from solaudit.config import Cluster, RetryPolicy, RpcConfig
from solaudit.errors import VisibilityTimeoutError
from solaudit.primitives.account import AccountSnapshot
from solaudit.primitives.common import SYSTEM_PROGRAM_ID

load_dotenv()

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.environ.get("SOLAUDIT_DEVNET_TEST"),
        reason="set SOLAUDIT_DEVNET_TEST=1 to run against devnet",
    ),
]

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def _fresh_address() -> str:
    return base58.b58encode(os.urandom(32)).decode()


@pytest.mark.asyncio
async def test_existing_program_is_safe_without_transaction():
    async with SolanaRpcClient(RpcConfig(cluster=Cluster.DEVNET)) as rpc:
        result = await RetrySafetyAnalyzer(rpc, cluster="devnet").analyse_account(TOKEN_PROGRAM)

    assert result.safety == RetrySafety.SAFE
    assert result.before.executable
    assert result.before.data_len > 0


@pytest.mark.asyncio
async def test_fresh_address_reads_as_default():
    address = _fresh_address()
    async with SolanaRpcClient(RpcConfig(cluster=Cluster.DEVNET)) as rpc:
        snap = await rpc.fetch_snapshot_or_default(address)
    assert snap == AccountSnapshot.default(address)
    assert snap.owner == SYSTEM_PROGRAM_ID


@pytest.mark.asyncio
async def test_lightweight_read_matches_full_read_length():
    async with SolanaRpcClient(RpcConfig(cluster=Cluster.DEVNET)) as rpc:
        full = await rpc.fetch_snapshot(TOKEN_PROGRAM)
        light = await rpc.fetch_snapshot(TOKEN_PROGRAM, with_data=False)
    assert light.data is None
    assert light.data_len == full.data_len


@pytest.mark.asyncio
async def test_poller_times_out_on_missing_account():
    address = _fresh_address()
    async with SolanaRpcClient(RpcConfig(cluster=Cluster.DEVNET)) as rpc:
        poller = AccountPoller(rpc.fetch_snapshot, RetryPolicy(max_attempts=2, delay_s=0.5))
        with pytest.raises(VisibilityTimeoutError) as excinfo:
            await poller.wait_for_account(address)
    assert excinfo.value.attempts == 2
