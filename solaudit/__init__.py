"""
solaudit — Solana retry-safety analysis.

Decides whether re-submitting an unconfirmed transaction is safe by
comparing a watched account's state before and after the operation.

Public API:
  RetrySafetyAnalyzer   — fetch → simulate → diff → classify pipeline
  SolanaRpcClient       — read-only JSON-RPC client
  AccountPoller         — bounded wait for a confirmed account to be readable
  AccountSnapshot       — immutable account state
  AnalysisResult        — output of one analysis
"""

__version__ = "0.1.0"
