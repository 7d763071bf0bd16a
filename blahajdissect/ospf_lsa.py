"""OSPFv2 link-state advertisement dissectors."""

from __future__ import annotations

import itertools
import struct
from typing import Iterable

from .core import BufferOverflowError, InvalidValuesError, Packet, ipv4_to_str

LSA_HEADER = struct.Struct(">HBB4s4sIHH")
_ROUTER_LSA = struct.Struct(">HH")
_ROUTER_LINK = struct.Struct(">4s4sBBH")
_MASK = struct.Struct(">4s")
_SUMMARY_METRIC_SIZE = 4
_EXTERNAL_ROUTE = struct.Struct(">B3s4sI")
# Bound checks in the summary LSA use the size of a machine word.
_SUMMARY_CHECK_SIZE = 8


def _repeat(count: int) -> Iterable[int]:
    # A negative count wraps around to a huge unsigned value: loop until data runs out.
    return range(count) if count >= 0 else itertools.count()


def dump_v2_lsa_header(packet: Packet, offset: int) -> None:
    """Print the OSPFv2 LSA header found at ``offset``."""
    packet.require(offset + LSA_HEADER.size)
    age, options, ls_type, link_state_id, router, sequence, checksum, length = (
        LSA_HEADER.unpack_from(packet.data, offset)
    )
    packet.emit("--- BEGIN OSPF v2 LSA HEADER ---\n")
    packet.field("LSA age", age)
    packet.field("Options", options)
    packet.field("LSA type", f"0x{ls_type:x}")
    packet.field("Link state ID", ipv4_to_str(link_state_id))
    packet.field("Advertising router", ipv4_to_str(router))
    packet.field("LS sequence number", f"0x{sequence:x}")
    packet.field("LS checksum", f"0x{checksum:x} [Unchecked]")
    packet.field("Length", length)


def dump_router_lsa(packet: Packet, offset: int) -> None:
    """Print a router LSA body and its links."""
    packet.require(offset + _ROUTER_LSA.size)
    flags, link_count = _ROUTER_LSA.unpack_from(packet.data, offset)
    offset += _ROUTER_LSA.size

    packet.emit("--- BEGIN OSPF v2 ROUTER LSA ---\n")
    packet.field("Flags", flags)
    packet.field("Link count", link_count)

    if offset + link_count * _ROUTER_LINK.size > len(packet.data):
        raise InvalidValuesError(f"{link_count} router links do not fit in the packet")

    for index in range(link_count):
        packet.require(offset + _ROUTER_LINK.size)
        link_id, link_data, link_type, tos_count, metric = _ROUTER_LINK.unpack_from(packet.data, offset)
        offset += index * _ROUTER_LINK.size
        packet.emit("--- BEGIN OSPF v2 LSA LINK ---\n")
        packet.field("Link ID", ipv4_to_str(link_id))
        packet.field("Link data", ipv4_to_str(link_data))
        packet.field("Type", link_type)
        packet.field("Tos count", tos_count)
        packet.field("Metric", metric)


def dump_network_lsa(packet: Packet, offset: int, length: int) -> None:
    """Print a network LSA body of ``length`` bytes."""
    packet.require(offset + _MASK.size)
    (mask,) = _MASK.unpack_from(packet.data, offset)
    offset += _MASK.size

    packet.emit("--- BEGIN OSPF v2 NETWORK LSA ---\n")
    packet.field("Network mask", ipv4_to_str(mask))

    for _ in _repeat(length // 4 - 1):
        packet.require(offset + 4)
        packet.field("Attached router", ipv4_to_str(packet.data[offset:offset + 4]))
        offset += 4


def dump_summary_lsa(packet: Packet, offset: int, length: int) -> None:
    """Print a summary LSA body of ``length`` bytes."""
    packet.require(offset + _SUMMARY_CHECK_SIZE)
    (mask,) = _MASK.unpack_from(packet.data, offset)
    offset += _MASK.size

    packet.emit("--- BEGIN OSPF v2 SUMMARY LSA ---\n")
    packet.field("Network mask", ipv4_to_str(mask))

    for _ in _repeat((length - _MASK.size) // _SUMMARY_METRIC_SIZE):
        packet.require(offset + _SUMMARY_CHECK_SIZE)
        tos = packet.data[offset]
        metric = int.from_bytes(packet.data[offset + 1:offset + 4], "big")
        packet.emit("--- BEGIN OSPF v2 SUMMARY LSA METRIC ---\n")
        packet.field("TOS", tos)
        packet.field("Metric", metric)
        offset += _SUMMARY_METRIC_SIZE


def dump_as_external_lsa(packet: Packet, offset: int, length: int) -> None:
    """Print an AS-external LSA body of ``length`` bytes."""
    if offset + _MASK.size > len(packet.data):
        raise InvalidValuesError("AS external LSA is truncated")
    (mask,) = _MASK.unpack_from(packet.data, offset)
    offset += _MASK.size

    packet.emit("--- BEGIN OSPF v2 AS EXTERNAL LSA ---\n")
    packet.field("Network mask", ipv4_to_str(mask))

    for _ in _repeat((length - _MASK.size) // _EXTERNAL_ROUTE.size):
        if offset + _EXTERNAL_ROUTE.size > len(packet.data):
            raise InvalidValuesError("AS external LSA route is truncated")
        first, metric_bytes, forwarding, tag = _EXTERNAL_ROUTE.unpack_from(packet.data, offset)
        packet.emit("--- BEGIN OSPF v2 EXTERNAL LSA ROUTE ---\n")
        packet.field("External", first >> 7)
        packet.field("TOS", first & 0x7F)
        packet.field("Metric", int.from_bytes(metric_bytes, "big"))
        packet.field("Forwarding address", ipv4_to_str(forwarding))
        packet.field("External route tag", tag)
        offset += _EXTERNAL_ROUTE.size


__all__ = [
    "BufferOverflowError",
    "dump_as_external_lsa",
    "dump_network_lsa",
    "dump_router_lsa",
    "dump_summary_lsa",
    "dump_v2_lsa_header",
]