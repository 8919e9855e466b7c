"""Async JSON-RPC client for read-only queries against a Sui full node.

Implement the two reads the pool synchronisation layer depends on:
fetching an object's structured fields (``sui_getObject``) and simulating a
view function call (``sui_devInspectTransactionBlock``).  Every failure
surfaces as a ``QueryError`` whose kind tells callers whether a retry on
the next poll can help.
"""

import asyncio
import base64
import itertools
import logging
from typing import Any

import httpx

from fate_pools.clients.sui._transaction import SharedObjectRef, build_inspect_kind
from fate_pools.clients.sui.exceptions import QueryError, QueryErrorKind
from fate_pools.core.models import MoveCall

logger = logging.getLogger(__name__)

_HTTP_BAD_REQUEST = 400
_MOVE_OBJECT = "moveObject"
_SUCCESS = "success"


class SuiClient:
    """Async read-only client for a Sui full node.

    Args:
        rpc_url: JSON-RPC endpoint of the full node.
        timeout: Request timeout in seconds.

    """

    TESTNET_URL = "https://fullnode.testnet.sui.io:443"

    def __init__(self, rpc_url: str = TESTNET_URL, timeout: float = 30.0) -> None:
        """Initialize the Sui client.

        Args:
            rpc_url: JSON-RPC endpoint of the full node.
            timeout: Request timeout in seconds.

        """
        self.rpc_url = rpc_url.rstrip("/")
        self._http_client = httpx.AsyncClient(timeout=timeout)
        self._request_ids = itertools.count(1)
        self._shared_versions: dict[str, int] = {}

    async def read_object_fields(self, object_id: str) -> dict[str, Any]:
        """Fetch the current structured fields of a Move object.

        Args:
            object_id: Object id to read.

        Returns:
            The object's ``content.fields`` mapping.

        Raises:
            QueryError: With kind ``NOT_FOUND`` when the object does not exist
                or has no Move content, ``TRANSPORT`` on network failures.

        """
        data = await self._get_object(object_id, show_content=True)
        content = data.get("content")
        if not isinstance(content, dict) or content.get("dataType") != _MOVE_OBJECT:
            raise QueryError(
                msg=f"Object has no Move content: {object_id}",
                kind=QueryErrorKind.NOT_FOUND,
            )
        fields = content.get("fields")
        if not isinstance(fields, dict):
            raise QueryError(
                msg=f"Object has no structured fields: {object_id}",
                kind=QueryErrorKind.NOT_FOUND,
            )
        return fields

    async def simulate_call(self, call: MoveCall, sender: str) -> list[bytes]:
        """Execute a view function without committing any state.

        Args:
            call: The Move call to simulate.
            sender: Address used as the transaction sender for simulation.

        Returns:
            Raw BCS return values in declaration order.

        Raises:
            QueryError: ``TRANSPORT`` on network failures or a response with
                no result, ``EXECUTION`` when the call aborted on-chain,
                ``MISSING_RESULT`` when fewer than ``call.expected_returns``
                well-formed values came back.

        """
        refs = await asyncio.gather(*(self._shared_ref(oid) for oid in call.objects))
        kind = build_inspect_kind(call, list(refs))
        tx_bytes = base64.b64encode(kind).decode()

        logger.debug("devInspect %s objects=%s", call.target, call.objects)
        result = await self._rpc("sui_devInspectTransactionBlock", [sender, tx_bytes])
        if not isinstance(result, dict):
            raise QueryError(
                msg=f"{call.target}: devInspect response has no result",
                kind=QueryErrorKind.TRANSPORT,
            )
        self._raise_for_execution(call, result)

        return_values = self._return_values(call, result)
        if len(return_values) < call.expected_returns:
            raise QueryError(
                msg=(
                    f"{call.target} returned {len(return_values)} values, "
                    f"expected {call.expected_returns}"
                ),
                kind=QueryErrorKind.MISSING_RESULT,
            )
        return return_values

    @staticmethod
    def _return_values(call: MoveCall, result: dict[str, Any]) -> list[bytes]:
        """Extract the first command's return values as raw bytes.

        Each value is a ``[bytes_as_int_list, type_tag]`` pair.

        Raises:
            QueryError: ``MISSING_RESULT`` when the payload has another shape.

        """
        results = result.get("results") or []
        first = results[0] if isinstance(results, list) and results else {}
        raw_values = first.get("returnValues") if isinstance(first, dict) else None
        if raw_values is None:
            return []
        try:
            return [bytes(value[0]) for value in raw_values]
        except (TypeError, ValueError, IndexError, KeyError) as exc:
            raise QueryError(
                msg=f"{call.target} returned malformed values: {exc}",
                kind=QueryErrorKind.MISSING_RESULT,
            ) from exc

    @staticmethod
    def _raise_for_execution(call: MoveCall, result: dict[str, Any]) -> None:
        """Raise an ``EXECUTION`` error when devInspect reports a failure.

        Args:
            call: The simulated call, for the error message.
            result: The ``devInspect`` result payload.

        Raises:
            QueryError: When the simulation aborted.

        """
        error = result.get("error")
        if not error:
            status = (result.get("effects") or {}).get("status") or {}
            if status.get("status", _SUCCESS) != _SUCCESS:
                error = status.get("error", "execution failed")
        if error:
            raise QueryError(msg=f"{call.target}: {error}", kind=QueryErrorKind.EXECUTION)

    async def _shared_ref(self, object_id: str) -> SharedObjectRef:
        """Resolve the initial shared version of an object, cached per client.

        Args:
            object_id: Object id used as a call argument.

        Returns:
            Shared object reference for the transaction input.

        Raises:
            QueryError: ``UNSUPPORTED`` when the object is not shared,
                ``TRANSPORT`` when the owner payload carries no version.

        """
        version = self._shared_versions.get(object_id)
        if version is None:
            data = await self._get_object(object_id, show_owner=True)
            owner = data.get("owner")
            shared = owner.get("Shared") if isinstance(owner, dict) else None
            if not isinstance(shared, dict):
                raise QueryError(
                    msg=f"Only shared objects can be passed to view calls: {object_id}",
                    kind=QueryErrorKind.UNSUPPORTED,
                )
            try:
                version = int(shared["initial_shared_version"])
            except (KeyError, TypeError, ValueError) as exc:
                raise QueryError(
                    msg=f"Object {object_id} has no usable initial shared version",
                    kind=QueryErrorKind.TRANSPORT,
                ) from exc
            self._shared_versions[object_id] = version
        return SharedObjectRef(object_id=object_id, initial_shared_version=version)

    async def _get_object(
        self,
        object_id: str,
        *,
        show_content: bool = False,
        show_owner: bool = False,
    ) -> dict[str, Any]:
        """Call ``sui_getObject`` and return its ``data`` member.

        Raises:
            QueryError: ``NOT_FOUND`` when the node reports no such object.

        """
        options = {"showContent": show_content, "showOwner": show_owner}
        result = await self._rpc("sui_getObject", [object_id, options])
        data = result.get("data") if isinstance(result, dict) else None
        if not isinstance(data, dict):
            error = result.get("error") if isinstance(result, dict) else None
            code = error.get("code", "notExists") if isinstance(error, dict) else "notExists"
            raise QueryError(
                msg=f"Object {object_id} not available ({code})",
                kind=QueryErrorKind.NOT_FOUND,
            )
        return data

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        """Send a JSON-RPC request and return its ``result`` member.

        Args:
            method: JSON-RPC method name.
            params: Positional parameters.

        Returns:
            Parsed ``result`` member of the response.

        Raises:
            QueryError: ``TRANSPORT`` on network, HTTP or JSON-RPC errors.

        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._http_client.request("POST", self.rpc_url, json=payload)
        except httpx.HTTPError as exc:
            raise QueryError(
                msg=f"HTTP request failed: {exc}",
                kind=QueryErrorKind.TRANSPORT,
            ) from exc

        if response.status_code >= _HTTP_BAD_REQUEST:
            raise QueryError(
                msg=f"{method} failed with HTTP {response.status_code}",
                kind=QueryErrorKind.TRANSPORT,
            )

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise QueryError(
                msg=f"{method} returned a non-JSON body",
                kind=QueryErrorKind.TRANSPORT,
            ) from exc

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise QueryError(msg=f"{method}: {message}", kind=QueryErrorKind.TRANSPORT)
        return body.get("result") if isinstance(body, dict) else None

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "SuiClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()
