"""OSPFv3 packet body dissectors."""

from __future__ import annotations

import struct

from .core import InvalidValuesError, Packet, ipv4_to_str

LSA_HEADER_V3 = struct.Struct(">HH4s4sIHH")
_HELLO = struct.Struct(">IB3sHH4s4s")
_DD = struct.Struct(">B3sHBBI")
_LSR = struct.Struct(">HH4s4s")
_LSA_COUNT = struct.Struct(">I")
_NEIGHBOR_SIZE = 4


def dump_v3_lsa_header(packet: Packet, offset: int) -> None:
    """Print the OSPFv3 LSA header found at ``offset``."""
    packet.require(offset + LSA_HEADER_V3.size)
    age, ls_type, link_state_id, router, sequence, checksum, length = (
        LSA_HEADER_V3.unpack_from(packet.data, offset)
    )
    packet.emit("--- BEGIN OSPF v3 LSA HEADER ---\n")
    packet.field("LSA age", age)
    packet.field("LSA type", f"0x{ls_type:x}")
    packet.field("Link state ID", ipv4_to_str(link_state_id))
    packet.field("Advertising router", ipv4_to_str(router))
    packet.field("LS sequence number", f"0x{sequence:x}")
    packet.field("LS checksum", f"0x{checksum:x} [Unchecked]")
    packet.field("Length", length)


def dump_v3_hello(packet: Packet, offset: int) -> None:
    """Print an OSPFv3 hello body and its neighbor list."""
    packet.require(offset + _HELLO.size)
    interface, priority, options, hello_interval, dead_interval, designated, backup = (
        _HELLO.unpack_from(packet.data, offset)
    )
    packet.emit("--- BEGIN OSPF v3 HELLO MESSAGE ---\n")
    packet.field("Interface ID", interface)
    packet.field("Router priority", priority)
    packet.field("Options", int.from_bytes(options, "big"))
    packet.field("Hello interval", hello_interval)
    packet.field("Router dead interval", dead_interval)
    packet.field("Designated router ID", ipv4_to_str(designated))
    packet.field("Backup designated router ID", ipv4_to_str(backup))

    for position in range(offset + _HELLO.size, len(packet.data), _NEIGHBOR_SIZE):
        packet.require(position + _NEIGHBOR_SIZE)
        packet.field("Neighbor ID", ipv4_to_str(packet.data[position:position + _NEIGHBOR_SIZE]))


def dump_v3_dd(packet: Packet, offset: int) -> None:
    """Print an OSPFv3 database description and the LSA headers it lists."""
    packet.require(offset + _DD.size)
    _reserved, options, mtu, _reserved2, flags, sequence = _DD.unpack_from(packet.data, offset)
    packet.emit("--- BEGIN OSPF v3 DATABASE DESCRIPTION ---\n")
    packet.field("Options", int.from_bytes(options, "big"))
    packet.field("Interface MTU", mtu)
    packet.field("Flags", flags)
    packet.field("DD sequence number", sequence)

    for position in range(offset + _DD.size, len(packet.data), LSA_HEADER_V3.size):
        dump_v3_lsa_header(packet, position)


def dump_v3_lsr(packet: Packet, offset: int) -> None:
    """Print every OSPFv3 link state request entry from ``offset`` on."""
    for position in range(offset, len(packet.data), _LSR.size):
        packet.require(position + _LSR.size)
        _reserved, ls_type, link_state_id, router = _LSR.unpack_from(packet.data, position)
        packet.emit("--- BEGIN OSPF v3 LINK STATE REQUEST ---\n")
        packet.field("LS type", ls_type)
        packet.field("Link state ID", ipv4_to_str(link_state_id))
        packet.field("Advertising router", ipv4_to_str(router))


def dump_v3_lsu(packet: Packet, offset: int) -> None:
    """Print an OSPFv3 link state update; only the LSA headers are decoded."""
    packet.require(offset + _LSA_COUNT.size)
    (count,) = _LSA_COUNT.unpack_from(packet.data, offset)
    offset += _LSA_COUNT.size
    packet.emit(f"NEW OFFSET = {offset}\n")

    packet.emit("--- BEGIN OSPF v3 LINK STATE UPDATE ---\n")
    packet.field("LSA count", count)

    for _ in range(count):
        packet.require(offset + LSA_HEADER_V3.size)
        length = LSA_HEADER_V3.unpack_from(packet.data, offset)[6]
        dump_v3_lsa_header(packet, offset)
        offset += LSA_HEADER_V3.size

        body_length = length - LSA_HEADER_V3.size
        if body_length < 0:
            raise InvalidValuesError(f"LSA length {length} is shorter than its header")
        offset += body_length


_DISPATCH = {
    1: dump_v3_hello,
    2: dump_v3_dd,
    3: dump_v3_lsr,
    4: dump_v3_lsu,
}


def dump_v3(packet: Packet, type_: int, offset: int) -> None:
    """Print the OSPFv3 body of packet type ``type_``; unknown types print nothing."""
    handler = _DISPATCH.get(type_)
    if handler is not None:
        handler(packet, offset)