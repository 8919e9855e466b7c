"""Structural protocols for pluggable chain access.

Define the ``ReadOnlyQueryClient`` interface that decouples the pool
synchronisation layer from the concrete RPC transport. Any class whose
shape matches this protocol can be used without explicit inheritance
(structural subtyping), which is how tests substitute in-memory fakes.
"""

from typing import Any, Protocol, runtime_checkable

from fate_pools.core.models import MoveCall


@runtime_checkable
class ReadOnlyQueryClient(Protocol):
    """Async source of on-chain state that never mutates it.

    Implementors simulate view function calls and read object fields from
    a full node, raising ``QueryError`` on failure.
    """

    async def simulate_call(self, call: MoveCall, sender: str) -> list[bytes]:
        """Return the raw BCS return values of a simulated call."""
        ...

    async def read_object_fields(self, object_id: str) -> dict[str, Any]:
        """Return the structured field map of an object."""
        ...
