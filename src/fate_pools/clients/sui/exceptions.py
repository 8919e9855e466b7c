"""Exception hierarchy for Sui read-only client errors.

A base exception class with specialised errors that carry enough context
for callers to decide whether a failure is worth retrying on the next
polling tick.
"""

from enum import Enum


class SuiError(Exception):
    """Base exception for all Sui client errors."""


class QueryErrorKind(Enum):
    """Classify where a read-only query failed."""

    TRANSPORT = "transport"
    EXECUTION = "execution"
    MISSING_RESULT = "missing_result"
    NOT_FOUND = "not_found"
    UNSUPPORTED = "unsupported"


class QueryError(SuiError):
    """Failure of a read-only query against a Sui full node.

    Transport failures (network errors, HTTP errors, JSON-RPC error
    members) are retryable: the same request may succeed on the next tick.
    Contract-level failures such as a Move abort reported by
    ``devInspect`` are deterministic for the same on-chain state and are
    not retryable.

    Args:
        msg: Human-readable description of the error.
        kind: Where the query failed.

    """

    def __init__(self, msg: str, kind: QueryErrorKind) -> None:
        """Initialize query error.

        Args:
            msg: Human-readable description of the error.
            kind: Where the query failed.

        """
        super().__init__(f"[{kind.value}] {msg}")
        self.msg = msg
        self.kind = kind

    @property
    def retryable(self) -> bool:
        """Return True when the failure is transient."""
        return self.kind is QueryErrorKind.TRANSPORT


class DecodeError(SuiError):
    """Raw return bytes do not match the expected BCS shape.

    Always a bug or a protocol mismatch between this client and the
    deployed Move package, never an expected runtime condition.

    Args:
        msg: Human-readable description of the mismatch.
        shape: Name of the shape being decoded (e.g. ``"u64"``).

    """

    def __init__(self, msg: str, shape: str) -> None:
        """Initialize decode error.

        Args:
            msg: Human-readable description of the mismatch.
            shape: Name of the shape being decoded.

        """
        super().__init__(f"cannot decode {shape}: {msg}")
        self.msg = msg
        self.shape = shape
