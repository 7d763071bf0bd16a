"""IGMP and RGMP dissector."""

from __future__ import annotations

import struct

from .core import Packet, Verbosity, checksum_status, ipv4_to_str

_HEADER = struct.Struct(">BBH4s")

RGMP_TYPE_LEAVE_GROUP = 0xFC

_TYPE_NAMES = {
    0x11: "Membership query",
    0x12: "Membership report",
    0x16: "Membership report",
    0x17: "Leave group",
    0x13: "DVMRP routing",
    0x14: "PIM routing",
    0x15: "Traceroute",
    0x1E: "Traceroute response",
    0x1F: "Multicast traceroute",
    0xFC: "RGMP leave group",
    0xFD: "RGMP join group",
    0xFE: "RGMP bye",
    0xFF: "RGMP hello",
}


def igmp_type_name(type_: int) -> str:
    """Name of an IGMP or RGMP message type."""
    return _TYPE_NAMES.get(type_, "Unknown")


def dump_igmp(packet: Packet) -> None:
    """Print an IGMP or RGMP message."""
    packet.require(_HEADER.size)
    type_, code, checksum, group_bytes = _HEADER.unpack_from(packet.data)
    is_rgmp = type_ >= RGMP_TYPE_LEAVE_GROUP
    group = ipv4_to_str(group_bytes)

    if packet.verbosity == Verbosity.LOW:
        packet.emit("> IGMP ")
    elif packet.verbosity == Verbosity.MEDIUM:
        parts = [f"Type : {igmp_type_name(type_)}, "]
        if not is_rgmp:
            parts.append(f"Code : 0x{code:x}, ")
        packet.emit(("RGMP => " if is_rgmp else "IGMP => ") + "".join(parts) + f"Group : {group}\n")
    else:
        packet.emit("--- BEGIN RGMP MESSAGE ---\n" if is_rgmp else "--- BEGIN IGMP MESSAGE ---\n")
        packet.field("Type", f"0x{type_:x} ({igmp_type_name(type_)})")
        if not is_rgmp:
            packet.field("Code", f"0x{code:x}")
        packet.field("Checksum", f"0x{checksum:x} {checksum_status(packet.data, checksum, False)}")
        packet.field("Group", group)