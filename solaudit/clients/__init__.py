"""
solaudit — Cluster Clients

JSON-RPC access, simulation response decoding and the post-state poller.
"""

from solaudit.clients.poller import AccountPoller
from solaudit.clients.rpc import SolanaRpcClient
from solaudit.clients.simulation import (
    parse_simulation_response,
    try_parse_simulation_response,
)

__all__ = [
    "AccountPoller",
    "SolanaRpcClient",
    "parse_simulation_response",
    "try_parse_simulation_response",
]
