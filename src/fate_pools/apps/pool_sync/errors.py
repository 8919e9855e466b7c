"""Exceptions and error values for pool synchronisation.

``PoolNotFound`` and ``PoolSchemaError`` are raised by a single pool fetch
and recorded, not propagated, by the concurrent loader.  ``RegistryError``
is returned as a value alongside the partially discovered ids, because a
partial discovery is more useful to callers than none.
"""


class PoolSyncError(Exception):
    """Base exception for pool synchronisation errors."""


class PoolNotFound(PoolSyncError):  # noqa: N818
    """The pool object does not exist or has no structured content.

    Args:
        pool_id: Id of the missing pool.

    """

    def __init__(self, pool_id: str) -> None:
        """Initialize the error.

        Args:
            pool_id: Id of the missing pool.

        """
        super().__init__(f"Pool not found: {pool_id}")
        self.pool_id = pool_id


class PoolSchemaError(PoolSyncError):
    """Raw pool fields do not match the expected on-chain schema.

    Args:
        pool_id: Id of the offending pool.
        field: Name of the missing or malformed field.
        reason: What is wrong with it.

    """

    def __init__(self, pool_id: str, field: str, reason: str) -> None:
        """Initialize the error.

        Args:
            pool_id: Id of the offending pool.
            field: Name of the missing or malformed field.
            reason: What is wrong with it.

        """
        super().__init__(f"Pool {pool_id} field {field!r}: {reason}")
        self.pool_id = pool_id
        self.field = field
        self.reason = reason


class RegistryError(PoolSyncError):
    """A registry page could not be fetched.

    Carried as a value on ``RegistryScan.error`` rather than raised.

    Args:
        page: Zero-based index of the page that failed.
        cause: The underlying query failure.

    """

    def __init__(self, page: int, cause: Exception) -> None:
        """Initialize the error.

        Args:
            page: Zero-based index of the page that failed.
            cause: The underlying query failure.

        """
        super().__init__(f"Registry page {page} failed: {cause}")
        self.page = page
        self.cause = cause

    @property
    def retryable(self) -> bool:
        """Return True when the underlying failure is transient."""
        return bool(getattr(self.cause, "retryable", False))
