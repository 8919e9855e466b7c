"""Build ``TransactionKind`` bytes for a single-call ``devInspect``.

``sui_devInspectTransactionBlock`` takes a BCS-encoded ``TransactionKind``
rather than a signed transaction, so no gas object, signature, or
expiration is needed.  Only the shape used by read-only view calls is
covered: one ``ProgrammableTransaction`` with shared-object and pure
inputs and a single ``MoveCall`` command without type arguments.
"""

from dataclasses import dataclass

from fate_pools.clients.sui._bcs import (
    encode_address,
    encode_bool,
    encode_scalar,
    encode_string,
    encode_u16,
    encode_u64,
    encode_uleb128,
)
from fate_pools.core.models import MoveCall

# Enum variant tags from sui-types
_KIND_PROGRAMMABLE = 0
_CALL_ARG_PURE = 0
_CALL_ARG_OBJECT = 1
_OBJECT_ARG_SHARED = 1
_COMMAND_MOVE_CALL = 0
_ARGUMENT_INPUT = 1


@dataclass(frozen=True)
class SharedObjectRef:
    """Reference to a shared object used as a read-only call input.

    Args:
        object_id: Object id of the shared object.
        initial_shared_version: Version at which the object became shared.

    """

    object_id: str
    initial_shared_version: int


def _vector(items: list[bytes]) -> bytes:
    return encode_uleb128(len(items)) + b"".join(items)


def _shared_object_input(ref: SharedObjectRef) -> bytes:
    return (
        bytes([_CALL_ARG_OBJECT, _OBJECT_ARG_SHARED])
        + encode_address(ref.object_id)
        + encode_u64(ref.initial_shared_version)
        + encode_bool(False)
    )


def _pure_input(raw: bytes) -> bytes:
    return bytes([_CALL_ARG_PURE]) + encode_uleb128(len(raw)) + raw


def build_inspect_kind(call: MoveCall, objects: list[SharedObjectRef]) -> bytes:
    """Encode a programmable transaction holding exactly one Move call.

    Args:
        call: The call to encode.
        objects: Resolved shared-object references, in the same order as
            ``call.objects``.

    Returns:
        BCS bytes of the ``TransactionKind``.

    Raises:
        ValueError: If the resolved objects do not line up with the call.

    """
    if [ref.object_id for ref in objects] != list(call.objects):
        msg = "Resolved object references do not match the call's object arguments"
        raise ValueError(msg)

    inputs = [_shared_object_input(ref) for ref in objects]
    inputs.extend(_pure_input(encode_scalar(arg.value, arg.shape)) for arg in call.pure)
    arguments = [bytes([_ARGUMENT_INPUT]) + encode_u16(index) for index in range(len(inputs))]

    command = (
        bytes([_COMMAND_MOVE_CALL])
        + encode_address(call.package)
        + encode_string(call.module)
        + encode_string(call.function)
        + _vector([])
        + _vector(arguments)
    )
    return bytes([_KIND_PROGRAMMABLE]) + _vector(inputs) + _vector([command])
