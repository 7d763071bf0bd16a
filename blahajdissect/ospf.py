"""OSPF common header dissector."""

from __future__ import annotations

import struct

from .core import Packet, Verbosity, checksum_status, ipv4_to_str, ones_complement_sum
from .ospf_v2 import dump_v2
from .ospf_v3 import dump_v3

_COMMON = struct.Struct(">BBH4s4sH")
_V2_REST = struct.Struct(">HQ")
_HEADER_SIZE = 24
_V3_BODY_OFFSET = 16
_CHECKSUM_OFFSET = 12

_PACKET_TYPES = {
    1: "Hello",
    2: "Database description",
    3: "Link state request",
    4: "Link state update",
    5: "Link state ACK",
}


def packet_type_name(type_: int) -> str:
    """Name of an OSPF packet type."""
    return _PACKET_TYPES.get(type_, "Unknown")


def _v3_checksum_input(packet: Packet, checksum: int) -> bytes:
    data = bytes(packet.data)
    pseudo = packet.pseudo_header
    if pseudo is None:
        return data
    folded = ones_complement_sum(b"", checksum + pseudo.sum16())
    return data[:_CHECKSUM_OFFSET] + folded.to_bytes(2, "big") + data[_CHECKSUM_OFFSET + 2:]


def _dump_detail(packet: Packet, version: int, type_: int, length: int,
                 router_id: str, area_id: str, checksum: int) -> None:
    packet.emit("--- BEGIN OSPF MESSAGE ---\n")
    packet.field("Version", version)
    packet.field("Type", f"{type_} ({packet_type_name(type_)})")
    packet.field("Packet length", length)
    packet.field("Router ID", router_id)
    packet.field("Area ID", area_id)

    if version == 3:
        status = checksum_status(_v3_checksum_input(packet, checksum), 0, False)
        packet.field("Checksum", f"0x{checksum:x} {status}")
        packet.field("Instance ID", packet.data[_COMMON.size])
        dump_v3(packet, type_, _V3_BODY_OFFSET)
    elif version == 2:
        packet.field("Checksum", f"0x{checksum:x} {checksum_status(packet.data, 0, False)}")
        au_type, authentication = _V2_REST.unpack_from(packet.data, _COMMON.size)
        packet.field("AuType", au_type)
        packet.field("Authentication", authentication)
        dump_v2(packet, type_, _HEADER_SIZE)
    else:
        packet.emit("Unhandled OSPF version\n")


def dump_ospf(packet: Packet) -> None:
    """Print an OSPF packet of version 2 or 3."""
    packet.require(_HEADER_SIZE)
    version, type_, length, router, area, checksum = _COMMON.unpack_from(packet.data)
    router_id = ipv4_to_str(router)

    if packet.verbosity == Verbosity.LOW:
        packet.emit("> OSPF ")
    elif packet.verbosity == Verbosity.MEDIUM:
        packet.emit(
            f"OSPF => Version : {version}, Type : {packet_type_name(type_)}, "
            f"Router ID : {router_id}\n"
        )
    else:
        _dump_detail(packet, version, type_, length, router_id, ipv4_to_str(area), checksum)