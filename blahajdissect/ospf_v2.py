"""OSPFv2 packet body dissectors."""

from __future__ import annotations

import struct

from .core import InvalidValuesError, Packet, ipv4_to_str
from .ospf_lsa import (
    LSA_HEADER,
    dump_as_external_lsa,
    dump_network_lsa,
    dump_router_lsa,
    dump_summary_lsa,
    dump_v2_lsa_header,
)

_HELLO = struct.Struct(">4sHBBI4s4s")
_DD = struct.Struct(">HBBI")
_LSR = struct.Struct(">I4s4s")
_LSA_COUNT = struct.Struct(">I")
_NEIGHBOR_SIZE = 4

_ROUTER_LSA = 1
_NETWORK_LSA = 2
_SUMMARY_LSAS = {3, 4}
_AS_EXTERNAL_LSA = 5


def dump_v2_hello(packet: Packet, offset: int) -> None:
    """Print an OSPFv2 hello body and its neighbor list."""
    packet.require(offset + _HELLO.size)
    mask, hello_interval, _options, priority, dead_interval, designated, backup = (
        _HELLO.unpack_from(packet.data, offset)
    )
    packet.emit("--- BEGIN OSPF v2 HELLO MESSAGE ---\n")
    packet.field("Netmask", ipv4_to_str(mask))
    packet.field("Hello interval", hello_interval)
    packet.field("Router priority", priority)
    packet.field("Router dead interval", dead_interval)
    packet.field("Designated router ID", ipv4_to_str(designated))
    packet.field("Backup designated router ID", ipv4_to_str(backup))

    for position in range(offset + _HELLO.size, len(packet.data), _NEIGHBOR_SIZE):
        packet.require(position + _NEIGHBOR_SIZE)
        packet.field("Neighbor ID", ipv4_to_str(packet.data[position:position + _NEIGHBOR_SIZE]))


def dump_v2_dd(packet: Packet, offset: int) -> None:
    """Print an OSPFv2 database description and the LSA headers it lists."""
    packet.require(offset + _DD.size)
    mtu, options, flags, sequence = _DD.unpack_from(packet.data, offset)
    packet.emit("--- BEGIN OSPF v2 DATABASE DESCRIPTION ---\n")
    packet.field("Interface MTU", mtu)
    packet.field("Options", options)
    packet.field("Flags", flags)
    packet.field("DD sequence number", sequence)

    for position in range(offset + _DD.size, len(packet.data), LSA_HEADER.size):
        dump_v2_lsa_header(packet, position)


def dump_v2_lsr(packet: Packet, offset: int) -> None:
    """Print every OSPFv2 link state request entry from ``offset`` on."""
    for position in range(offset, len(packet.data), _LSR.size):
        packet.require(position + _LSR.size)
        ls_type, link_state_id, router = _LSR.unpack_from(packet.data, position)
        packet.emit("--- BEGIN OSPF v2 LINK STATE REQUEST ---\n")
        packet.field("LS type", ls_type)
        packet.field("Link state ID", ipv4_to_str(link_state_id))
        packet.field("Advertising router", ipv4_to_str(router))


def _dump_lsa_body(packet: Packet, ls_type: int, offset: int, length: int) -> None:
    if ls_type == _ROUTER_LSA:
        dump_router_lsa(packet, offset)
    elif ls_type == _NETWORK_LSA:
        dump_network_lsa(packet, offset, length)
    elif ls_type in _SUMMARY_LSAS:
        dump_summary_lsa(packet, offset, length)
    elif ls_type == _AS_EXTERNAL_LSA:
        dump_as_external_lsa(packet, offset, length)


def dump_v2_lsu(packet: Packet, offset: int) -> None:
    """Print an OSPFv2 link state update and the LSAs it carries."""
    packet.require(offset + _LSA_COUNT.size)
    (count,) = _LSA_COUNT.unpack_from(packet.data, offset)
    offset += _LSA_COUNT.size
    packet.emit(f"NEW OFFSET = {offset}\n")

    packet.emit("--- BEGIN OSPF v2 LINK STATE UPDATE ---\n")
    packet.field("LSA count", count)

    for _ in range(count):
        packet.require(offset + LSA_HEADER.size)
        header = LSA_HEADER.unpack_from(packet.data, offset)
        ls_type, length = header[2], header[7]
        dump_v2_lsa_header(packet, offset)
        offset += LSA_HEADER.size

        body_length = length - LSA_HEADER.size
        if body_length < 0:
            raise InvalidValuesError(f"LSA length {length} is shorter than its header")
        _dump_lsa_body(packet, ls_type, offset, body_length & 0xFFFF)
        offset += body_length


def dump_v2_lsack(packet: Packet, offset: int) -> None:
    """Print every LSA header acknowledged from ``offset`` on."""
    for position in range(offset, len(packet.data), LSA_HEADER.size):
        dump_v2_lsa_header(packet, position)


_DISPATCH = {
    1: dump_v2_hello,
    2: dump_v2_dd,
    3: dump_v2_lsr,
    4: dump_v2_lsu,
    5: dump_v2_lsack,
}


def dump_v2(packet: Packet, type_: int, offset: int) -> None:
    """Print the OSPFv2 body of packet type ``type_``; unknown types print nothing."""
    handler = _DISPATCH.get(type_)
    if handler is not None:
        handler(packet, offset)