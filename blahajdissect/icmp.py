"""ICMPv4 dissector."""

from __future__ import annotations

import struct

from .core import (
    InvalidValuesError,
    Packet,
    Verbosity,
    checksum_status,
    ipv4_to_str,
)

_HEADER = struct.Struct(">BBH4s")

_CONTROL_MESSAGES = {
    0: "Echo reply",
    3: "Destination unreachable",
    4: "Source quench",
    5: "Redirect",
    8: "Echo request",
    9: "Router advertisement",
    10: "Router sollicitation",
    11: "Time exceeded",
    12: "Parameter problem",
    13: "Timestamp",
    14: "Timestamp reply",
    15: "Information request",
    16: "Information reply",
    17: "Address mask request",
    18: "Address mask reply",
    30: "Traceroute",
    42: "Extended echo request",
    43: "Extended echo reply",
}

_UNREACHABLE_MESSAGES = (
    "Net Unreachable",
    "Host Unreachable",
    "Protocol Unreachable",
    "Port Unreachable",
    "Fragmentation Needed and DF Set",
    "Source Route Failed",
)

_ECHO_LIKE = {0, 8, 13, 14}
_INFO = {15, 16}
_TIMESTAMPS = {13, 14}
_CARRIES_IP_HEADER = {3, 4, 5, 11, 12}
_ROUTER_ADVERTISEMENT = 9


def control_message(type_: int) -> str:
    """Name of an ICMPv4 message type."""
    return _CONTROL_MESSAGES.get(type_, "Reserved / deprecated")


def unreachable_message(code: int) -> str:
    """Name of a destination-unreachable code."""
    if 0 <= code < len(_UNREACHABLE_MESSAGES):
        return _UNREACHABLE_MESSAGES[code]
    return "Unknown"


def _dump_rest_header(packet: Packet, type_: int, rest: bytes) -> None:
    identifier, sequence = struct.unpack(">HH", rest)
    word = int.from_bytes(rest, "big")
    if type_ in _ECHO_LIKE:
        packet.field("Identifier", identifier)
        packet.field("Sequence Number", sequence)
    elif type_ in _INFO:
        packet.field("Identifier", identifier)
        packet.field("Sequence Number", identifier)
    elif type_ == 12:
        packet.field("Pointer", word)
    elif type_ == 5:
        packet.field("Gateway Internet Address", ipv4_to_str(rest))
    else:
        packet.field("Rest header", f"0x{word:x}")


def _dump_data(packet: Packet, type_: int, rest: bytes, offset: int) -> None:
    data = packet.data
    if type_ in _TIMESTAMPS:
        packet.require(offset + 12)
        originate, receive, transmit = struct.unpack_from(">III", data, offset)
        packet.field("Originate Timestamp", originate)
        packet.field("Receive Timestamp", receive)
        packet.field("Transmit Timestamp", transmit)
    elif type_ in _CARRIES_IP_HEADER:
        packet.emit("IP HEADER\n")
    elif type_ == _ROUTER_ADVERTISEMENT:
        # The rest-of-header word is taken in little-endian host order as the entry count.
        count = int.from_bytes(rest, "little")
        end = offset + 8 * count
        if end > len(data):
            raise InvalidValuesError(f"{count} router entries do not fit in the message")
        for address, level in struct.iter_unpack(">4sI", data[offset:end]):
            packet.field("Router Address", ipv4_to_str(address))
            packet.field("Router Level", level)
    else:
        raw = "".join(f"{byte:x} " for byte in data[offset:])
        packet.emit(f"{'Raw Data':<45} = {raw}\n")


def _dump_code(packet: Packet, code: int) -> None:
    if code == 3:
        packet.field("Code", f"0x{code:x} ({unreachable_message(code)})")
    else:
        packet.field("Code", f"0x{code:x}")


def dump_icmp(packet: Packet) -> None:
    """Print an ICMPv4 message."""
    packet.require(_HEADER.size)
    type_, code, checksum, rest = _HEADER.unpack_from(packet.data)

    if packet.verbosity == Verbosity.LOW:
        packet.emit("> ICMPv4 ")
        return
    if packet.verbosity == Verbosity.MEDIUM:
        packet.emit(f"ICMPv4 => ICMP Message type : {control_message(type_)}\n")
        return

    packet.emit("--- BEGIN ICMP MESSAGE ---\n")
    packet.field("ICMP Message type", f"0x{type_:x} ({control_message(type_)})")
    _dump_code(packet, code)
    packet.field("Checksum", f"0x{checksum:x} {checksum_status(packet.data, 0, False)}")
    _dump_rest_header(packet, type_, rest)
    _dump_data(packet, type_, rest, _HEADER.size)