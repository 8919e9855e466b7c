"""Minimal BCS codec for the values returned by Fate read-only calls.

Sui encodes Move return values and pure call arguments with BCS (Binary
Canonical Serialization).  The registries and pools only ever return a
handful of shapes, so this module covers exactly those: little-endian
``u32`` and ``u64``, ``bool``, 32-byte ``address`` and ``vector<T>`` of any
of them with a ULEB128 length prefix.

Decoders are pure: they copy the input into ``bytes`` before reading, never
mutate it, and raise ``DecodeError`` when the buffer is too short.  BCS
values are self-delimiting, so trailing bytes are ignored.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from fate_pools.clients.sui.exceptions import DecodeError

ADDRESS_LENGTH = 32
ADDRESS_PREFIX = "0x"

_U32_SIZE = 4
_U64_SIZE = 8
_BOOL_SIZE = 1
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_ULEB_MAX_BYTES = 5  # lengths are u32 in BCS
_ULEB_CONTINUATION = 0x80
_ULEB_PAYLOAD = 0x7F

ByteSource = bytes | bytearray | memoryview | Sequence[int]


def _as_bytes(buf: ByteSource) -> bytes:
    """Return an immutable copy of ``buf``.

    JSON-RPC hands return values back as lists of ints; everything else is
    already bytes-like.
    """
    try:
        return bytes(buf)
    except (TypeError, ValueError) as exc:
        msg = f"expected a byte buffer, got {type(buf).__name__}"
        raise DecodeError(msg, "bytes") from exc


def _require(data: bytes, offset: int, size: int, shape: str) -> None:
    available = len(data) - offset
    if available < size:
        msg = f"need {size} bytes at offset {offset}, got {max(available, 0)}"
        raise DecodeError(msg, shape)


def _read_uint(data: bytes, offset: int, size: int, shape: str) -> int:
    _require(data, offset, size, shape)
    return int.from_bytes(data[offset : offset + size], "little")


def _read_u32(data: bytes, offset: int) -> tuple[int, int]:
    return _read_uint(data, offset, _U32_SIZE, "u32"), offset + _U32_SIZE


def _read_u64(data: bytes, offset: int) -> tuple[int, int]:
    return _read_uint(data, offset, _U64_SIZE, "u64"), offset + _U64_SIZE


def _read_bool(data: bytes, offset: int) -> tuple[bool, int]:
    _require(data, offset, _BOOL_SIZE, "bool")
    return data[offset] != 0, offset + _BOOL_SIZE


def _read_address(data: bytes, offset: int) -> tuple[str, int]:
    _require(data, offset, ADDRESS_LENGTH, "address")
    raw = data[offset : offset + ADDRESS_LENGTH]
    return ADDRESS_PREFIX + raw.hex(), offset + ADDRESS_LENGTH


_READERS: dict[str, Callable[[bytes, int], tuple[Any, int]]] = {
    "u32": _read_u32,
    "u64": _read_u64,
    "bool": _read_bool,
    "address": _read_address,
}


def _read_uleb128(data: bytes, offset: int) -> tuple[int, int]:
    value = 0
    shift = 0
    for index in range(_ULEB_MAX_BYTES):
        _require(data, offset + index, 1, "uleb128")
        byte = data[offset + index]
        value |= (byte & _ULEB_PAYLOAD) << shift
        if not byte & _ULEB_CONTINUATION:
            return value, offset + index + 1
        shift += 7
    msg = f"length prefix longer than {_ULEB_MAX_BYTES} bytes"
    raise DecodeError(msg, "uleb128")


def decode_uleb128(buf: ByteSource) -> tuple[int, int]:
    """Decode a ULEB128 length prefix.

    Args:
        buf: Bytes starting with the encoded integer.

    Returns:
        Tuple of (value, number of bytes consumed).

    Raises:
        DecodeError: If the prefix is truncated or longer than a u32 allows.

    """
    return _read_uleb128(_as_bytes(buf), 0)


def decode_u32(buf: ByteSource) -> int:
    """Decode a little-endian ``u32``."""
    return _read_u32(_as_bytes(buf), 0)[0]


def decode_u64(buf: ByteSource) -> int:
    """Decode a little-endian ``u64`` into a Python ``int``."""
    return _read_u64(_as_bytes(buf), 0)[0]


def decode_bool(buf: ByteSource) -> bool:
    """Decode a one-byte ``bool``; any non-zero byte is ``True``."""
    return _read_bool(_as_bytes(buf), 0)[0]


def decode_address(buf: ByteSource) -> str:
    """Decode a 32-byte Sui address into its ``0x``-prefixed hex form."""
    return _read_address(_as_bytes(buf), 0)[0]


def decode_vector(buf: ByteSource, element: str) -> list[Any]:
    """Decode a ``vector<element>``.

    Args:
        buf: Bytes holding a ULEB128 length followed by the elements.
        element: Element shape: ``"u32"``, ``"u64"``, ``"bool"`` or
            ``"address"``.

    Returns:
        Decoded elements in order.

    Raises:
        DecodeError: If the buffer is shorter than the declared length needs.
        ValueError: If ``element`` is not a supported shape.

    """
    reader = _READERS.get(element)
    if reader is None:
        msg = f"Unsupported vector element shape: {element}"
        raise ValueError(msg)
    data = _as_bytes(buf)
    length, offset = _read_uleb128(data, 0)
    values: list[Any] = []
    for _ in range(length):
        value, offset = reader(data, offset)
        values.append(value)
    return values


def encode_uleb128(value: int) -> bytes:
    """Encode a non-negative integer as ULEB128."""
    if not 0 <= value <= _U32_MAX:
        msg = f"ULEB128 length out of range: {value}"
        raise ValueError(msg)
    out = bytearray()
    while True:
        byte = value & _ULEB_PAYLOAD
        value >>= 7
        if value:
            out.append(byte | _ULEB_CONTINUATION)
        else:
            out.append(byte)
            return bytes(out)


def encode_u16(value: int) -> bytes:
    """Encode a little-endian ``u16`` (used for PTB argument indices)."""
    return value.to_bytes(2, "little")


def encode_u32(value: int) -> bytes:
    """Encode a little-endian ``u32``."""
    if not 0 <= value <= _U32_MAX:
        msg = f"u32 out of range: {value}"
        raise ValueError(msg)
    return value.to_bytes(_U32_SIZE, "little")


def encode_u64(value: int) -> bytes:
    """Encode a little-endian ``u64``."""
    if not 0 <= value <= _U64_MAX:
        msg = f"u64 out of range: {value}"
        raise ValueError(msg)
    return value.to_bytes(_U64_SIZE, "little")


def encode_bool(value: bool) -> bytes:  # noqa: FBT001
    """Encode a ``bool`` as a single byte."""
    return b"\x01" if value else b"\x00"


def encode_address(value: str) -> bytes:
    """Encode a hex Sui address, left-padding short forms such as ``0x2``."""
    hex_part = value.removeprefix(ADDRESS_PREFIX)
    if len(hex_part) > ADDRESS_LENGTH * 2:
        msg = f"Address too long: {value}"
        raise ValueError(msg)
    return bytes.fromhex(hex_part.zfill(ADDRESS_LENGTH * 2))


def encode_string(value: str) -> bytes:
    """Encode a UTF-8 string as a length-prefixed byte vector."""
    raw = value.encode()
    return encode_uleb128(len(raw)) + raw


_WRITERS: dict[str, Callable[[Any], bytes]] = {
    "u32": encode_u32,
    "u64": encode_u64,
    "bool": encode_bool,
    "address": encode_address,
}


def encode_vector(values: Iterable[Any], element: str) -> bytes:
    """Encode a ``vector<element>`` with a ULEB128 length prefix."""
    writer = _WRITERS.get(element)
    if writer is None:
        msg = f"Unsupported vector element shape: {element}"
        raise ValueError(msg)
    items = list(values)
    return encode_uleb128(len(items)) + b"".join(writer(item) for item in items)


def encode_scalar(value: Any, shape: str) -> bytes:
    """Encode a single scalar of the given shape."""
    writer = _WRITERS.get(shape)
    if writer is None:
        msg = f"Unsupported scalar shape: {shape}"
        raise ValueError(msg)
    return writer(value)
