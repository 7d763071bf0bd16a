"""ICMPv6 dissector."""

from __future__ import annotations

import struct
from dataclasses import replace

from .core import (
    Packet,
    Verbosity,
    checksum_status,
    ipv6_to_str,
    ones_complement_sum,
)

_HEADER = struct.Struct(">BBH4s")
_CHECKSUM_OFFSET = 2

_CONTROL_MESSAGES = {
    1: "Destination Unreachable",
    2: "Packet Too Big",
    3: "Time Exceeded",
    4: "Parameter Problem",
    128: "Echo Request",
    129: "Echo Reply",
    130: "Multicast Listener Query",
    131: "Multicast Listener Report",
    132: "Multicast Listener Done",
    133: "Router Solicitation",
    134: "Router Advertisement",
    135: "Neighbor Solicitation",
    136: "Neighbor Advertisement",
    137: "Redirect Message",
    138: "Router Renumbering",
    139: "ICMP Node Information Query",
    140: "ICMP Node Information Response",
    141: "Inverse Neighbor Discovery Solicitation Message",
    142: "Inverse Neighbor Discovery Advertisement Message",
    143: "Version 2 Multicast Listener Report",
    144: "Home Agent Address Discovery Request Message",
    145: "Home Agent Address Discovery Reply Message",
    146: "Mobile Prefix Solicitation",
    147: "Mobile Prefix Advertisement",
    148: "Certification Path Solicitation Message",
    149: "Certification Path Advertisement Message",
    150: "ICMP messages utilized by experimental mobility protocols such as Seamoby",
    151: "Multicast Router Advertisement",
    152: "Multicast Router Solicitation",
    153: "Multicast Router Termination",
    154: "FMIPv6 Messages",
    155: "RPL Control Message",
    156: "ILNPv6 Locator Update Message",
    157: "Duplicate Address Request",
    158: "Duplicate Address Confirmation",
    159: "MPL Control Message",
    160: "Extended Echo Request",
    161: "Extended Echo Reply",
}

_UNREACHABLE_MESSAGES = (
    "No route to destination",
    "Communication with destination administratively prohibited",
    "Beyond scope of source address",
    "Address unreachable",
    "Port unreachable",
    "Source address failed ingress/egress policy",
    "Reject route to destination",
    "Error in Source Routing Header",
)

_DESTINATION_UNREACHABLE = 1
_NEIGHBOR_MESSAGES = {0x87, 0x88}
_NEIGHBOR_ADVERTISEMENT = 0x88


def control_message(type_: int) -> str:
    """Name of an ICMPv6 message type."""
    return _CONTROL_MESSAGES.get(type_, "Unknown")


def unreachable_message(code: int) -> str:
    """Name of a destination-unreachable code."""
    if 0 <= code < len(_UNREACHABLE_MESSAGES):
        return _UNREACHABLE_MESSAGES[code]
    return "Unknown"


def _checksum_input(packet: Packet, checksum: int) -> bytes:
    data = bytes(packet.data)
    pseudo = packet.pseudo_header
    if pseudo is None:
        return data
    folded = ones_complement_sum(b"", checksum + pseudo.sum16())
    return data[:_CHECKSUM_OFFSET] + folded.to_bytes(2, "big") + data[_CHECKSUM_OFFSET + 2:]


def _dump_rest_header(packet: Packet, type_: int, rest: bytes) -> None:
    word = int.from_bytes(rest, "big")
    # Flags and the generic rest word are taken in little-endian host order.
    host_word = int.from_bytes(rest, "little")
    if type_ in (1, 3):
        packet.field("Unused", word)
    elif type_ == 2:
        packet.field("MTU", word)
    elif type_ == 4:
        packet.field("Pointer", word)
    elif type_ in (0x80, 0x81):
        identifier, sequence = struct.unpack(">HH", rest)
        packet.field("Identifier", identifier)
        packet.field("Sequence Number", sequence)
    elif type_ == _NEIGHBOR_ADVERTISEMENT:
        packet.field("R", (host_word >> 31) & 1)
        packet.field("S", (host_word >> 30) & 1)
        packet.field("O", (host_word >> 29) & 1)
        packet.field("Reserved", host_word & 0x1FFFFFFF)
    else:
        packet.field("Rest header", f"0x{host_word:x}")


def _dump_raw(packet: Packet, data: bytes) -> None:
    raw = "".join(f"{byte:x} " for byte in data)
    packet.emit(f"{'Raw Data':<45} = {raw}\n")


def _dump_data(packet: Packet, type_: int, offset: int) -> None:
    data = packet.data
    if type_ == _DESTINATION_UNREACHABLE:
        inner = replace(packet, data=bytes(data[offset:]))
        if packet.fallback is not None:
            packet.fallback(inner)
        else:
            _dump_raw(packet, inner.data)
    elif type_ in _NEIGHBOR_MESSAGES:
        packet.require(offset + 16)
        packet.field("Address", ipv6_to_str(data[offset:offset + 16]))
    else:
        _dump_raw(packet, data[offset:])


def _dump_code(packet: Packet, code: int) -> None:
    if code == 3:
        packet.field("Code", f"0x{code:x} ({unreachable_message(code)})")
    else:
        packet.field("Code", f"0x{code:x}")


def dump_icmp6(packet: Packet) -> None:
    """Print an ICMPv6 message.

    The IPv6 packet embedded in a destination-unreachable message is handed to
    ``packet.fallback`` when one is set, otherwise its bytes are printed raw.
    """
    packet.require(_HEADER.size)
    type_, code, checksum, rest = _HEADER.unpack_from(packet.data)

    if packet.verbosity == Verbosity.LOW:
        packet.emit("> ICMPv6 ")
        return
    if packet.verbosity == Verbosity.MEDIUM:
        packet.emit(f"ICMPv6 => ICMP Message type : {control_message(type_)}\n")
        return

    packet.emit("--- BEGIN ICMPv6 MESSAGE ---\n")
    packet.field("ICMP Message type", f"0x{type_:x} ({control_message(type_)})")
    _dump_code(packet, code)
    status = checksum_status(_checksum_input(packet, checksum), 0, False)
    packet.field("Checksum", f"0x{checksum:x} {status}")
    _dump_rest_header(packet, type_, rest)
    _dump_data(packet, type_, _HEADER.size)