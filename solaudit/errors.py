"""
solaudit -- Error Hierarchy

All exceptions raised by the retry-safety pipeline.

Every fatal kind aborts the current analysis and reaches the caller with
enough context (address, field, RPC method, attempt count) to diagnose the
failure without re-running.

Recovery guide:
  InvalidInputError       raised before any network call; fix the input
  AccountNotFoundError    recoverable via fetch_snapshot_or_default()
  TransportError          retried only by AccountPoller
  MalformedResponseError  fatal; names the offending field
  VisibilityTimeoutError  fatal; carries the last underlying error
"""

from __future__ import annotations


class SolauditError(RuntimeError):
    """Base for all solaudit errors."""


class InvalidInputError(SolauditError, ValueError):
    """
    An address, encoded transaction, or selector failed validation.

    Raised before any RPC call is made.
    """

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class AccountNotFoundError(SolauditError):
    """The requested account does not exist on the cluster."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Account not found: {address}")
        self.address = address


class TransportError(SolauditError):
    """
    The RPC call did not produce a usable response.

    Covers connection failures, timeouts, non-2xx HTTP statuses and
    JSON-RPC error objects. ``code`` holds the JSON-RPC or HTTP status code
    when there is one.
    """

    def __init__(self, message: str, *, method: str = "", code: int | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.code = code


class MalformedResponseError(SolauditError):
    """A response document is missing a mandatory field or has the wrong shape."""

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class VisibilityTimeoutError(SolauditError):
    """AccountPoller exhausted its attempt budget before the account became visible."""

    def __init__(self, address: str, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(
            f"Account {address} not visible after {attempts} attempts: {last_error}"
        )
        self.address = address
        self.attempts = attempts
        self.last_error = last_error
