"""TCP option list dissector."""

from __future__ import annotations

import struct
from datetime import datetime, timezone
from typing import Callable

from .core import (
    LABEL_WIDTH,
    BufferOverflowError,
    InvalidValuesError,
    Packet,
)

_OPTION_NAMES = {
    0: "End of options",
    1: "NOOP",
    2: "Maximum segment size",
    3: "Window scale",
    4: "Selective acknowledgement OK",
    5: "Selective acknowledgement",
    8: "Timestamp / echo",
    27: "Quick-start response",
    28: "User timeout",
    29: "TCP authentication option",
    30: "Multipath TCP",
    34: "TCP fast-open cookie",
    69: "Encryption negociation",
}

_END_OF_OPTIONS = 0
_NOOP = 1
_TIMESTAMP_LENGTH = 10
_QUICKSTART_LENGTH = 8
_USER_TIMEOUT_LENGTH = 4
_AUTH_MIN_LENGTH = 4
_SACK_BLOCK = struct.Struct(">II")


def option_name(kind: int) -> str:
    """Name of a TCP option kind."""
    return _OPTION_NAMES.get(kind, "Unknown")


def _utc(seconds: int) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _dump_default(packet: Packet, offset: int, length: int) -> None:
    if offset + length > len(packet.data):
        raise InvalidValuesError("TCP option runs past the end of the header")
    text = ""
    if length > 2:
        text = " = 0x" + "".join(f"{byte:x}" for byte in packet.data[offset + 2:offset + length])
    packet.emit(text + "\n")


def _dump_mss(packet: Packet, offset: int, length: int) -> None:
    packet.require(offset + 6)
    # The value is read as a 32-bit word, as the original dissector does.
    (value,) = struct.unpack_from(">I", packet.data, offset + 2)
    packet.emit(f" = {value}\n")


def _dump_window_scale(packet: Packet, offset: int, length: int) -> None:
    packet.require(offset + 3)
    packet.emit(f" = {packet.data[offset + 2]}\n")


def _dump_sack_permitted(packet: Packet, offset: int, length: int) -> None:
    packet.emit("\n")


def _dump_sack(packet: Packet, offset: int, length: int) -> None:
    if offset + length > len(packet.data):
        raise InvalidValuesError("SACK option runs past the end of the header")
    packet.emit(" = [")
    for count, position in enumerate(range(2, length, _SACK_BLOCK.size), start=1):
        packet.require(offset + position + _SACK_BLOCK.size)
        left, right = _SACK_BLOCK.unpack_from(packet.data, offset + position)
        packet.emit(f"Left edge of block {count} : {left}, ")
        packet.emit(f"Right edge of block {count} : {right}")
        if position < length - _SACK_BLOCK.size:
            packet.emit(", ")
    packet.emit("]\n")


def _dump_timestamp(packet: Packet, offset: int, length: int) -> None:
    packet.require(offset + _TIMESTAMP_LENGTH)
    if length != _TIMESTAMP_LENGTH:
        raise InvalidValuesError(f"timestamp option length {length} is not {_TIMESTAMP_LENGTH}")
    # Both values are taken in little-endian host order.
    timestamp, echo = struct.unpack_from("<II", packet.data, offset + 2)
    packet.emit(f" = {_utc(timestamp)} / {_utc(echo)}\n")


def _dump_quickstart(packet: Packet, offset: int, length: int) -> None:
    if length != _QUICKSTART_LENGTH:
        raise InvalidValuesError(f"quick-start option length {length} is not {_QUICKSTART_LENGTH}")
    packet.require(offset + length)
    first, ttl, word = struct.unpack_from(">BBI", packet.data, offset + 2)
    packet.emit(
        f" = Func : {first >> 4}, Rate request : {first & 0x0F}, QS ttl : {ttl}, "
        f"QS Nonce : {word >> 2}, R : {word & 0x3}\n"
    )


def _dump_user_timeout(packet: Packet, offset: int, length: int) -> None:
    if length != _USER_TIMEOUT_LENGTH:
        raise InvalidValuesError(f"user timeout option length {length} is not {_USER_TIMEOUT_LENGTH}")
    packet.require(offset + length)
    (word,) = struct.unpack_from(">H", packet.data, offset + 2)
    packet.emit(f" = G : {word >> 15}, User timeout : {word & 0x7FFF}\n")


def _dump_authentication(packet: Packet, offset: int, length: int) -> None:
    if length < _AUTH_MIN_LENGTH:
        raise InvalidValuesError(f"authentication option length {length} is too short")
    packet.require(offset + length)
    data = packet.data
    packet.emit(f" = Key ID : {data[offset + 2]}, R next key ID : {data[offset + 3]}, ")
    # The MAC bound is compared with the option length, not with its end offset.
    packet.emit("MAC = " + "".join(f"{byte:02x}" for byte in data[offset + 4:length]))


def _not_decoded(packet: Packet, offset: int, length: int) -> None:
    return None


_HANDLERS: dict[int, Callable[[Packet, int, int], None]] = {
    2: _dump_mss,
    3: _dump_window_scale,
    4: _dump_sack_permitted,
    5: _dump_sack,
    8: _dump_timestamp,
    27: _dump_quickstart,
    28: _dump_user_timeout,
    29: _dump_authentication,
    30: _not_decoded,
    69: _not_decoded,
}


def dump_tcp_options(packet: Packet, offset: int, end: int) -> None:
    """Print the TCP options found between ``offset`` and ``end``."""
    data = packet.data
    packet.emit("--- BEGIN TCP OPTIONS ---\n")
    position = offset
    while position < end:
        if position + 1 >= len(data):
            raise BufferOverflowError("TCP option kind and length run past the data")
        kind, length = data[position], data[position + 1]
        packet.emit(f"{option_name(kind):<{LABEL_WIDTH}}")

        if kind == _END_OF_OPTIONS:
            packet.emit("\n")
            return
        if kind == _NOOP:
            packet.emit("\n")
            position += 1
            continue

        _HANDLERS.get(kind, _dump_default)(packet, position, length)
        if length == 0:
            raise InvalidValuesError(f"TCP option {kind} has a zero length")
        position += length