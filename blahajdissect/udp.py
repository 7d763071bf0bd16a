"""UDP header dissector."""

from __future__ import annotations

import struct
from dataclasses import replace

from .core import (
    InvalidValuesError,
    Packet,
    PseudoHeader,
    Verbosity,
    checksum_status,
    ones_complement_sum,
)

_HEADER = struct.Struct(">HHHH")
_CHECKSUM_OFFSET = 6


def _fold_pseudo_header(data: bytes, checksum: int, pseudo: PseudoHeader | None) -> bytes:
    if pseudo is None:
        return bytes(data)
    folded = ones_complement_sum(b"", checksum + pseudo.sum16())
    return (
        bytes(data[:_CHECKSUM_OFFSET])
        + folded.to_bytes(2, "big")
        + bytes(data[_CHECKSUM_OFFSET + 2:])
    )


def _dump_detail(packet: Packet, sport: int, dport: int, length: int, checksum: int) -> None:
    packet.emit("--- BEGIN UDP MESSAGE ---\n")
    packet.field("Source port", f"{sport} ({packet.port_name('udp', sport)})")
    packet.field("Destination port", f"{dport} ({packet.port_name('udp', dport)})")
    packet.field("Length", length)
    covered = _fold_pseudo_header(packet.data, checksum, packet.pseudo_header)[:length]
    packet.field("Checksum", f"0x{checksum:x} {checksum_status(covered, checksum, True)}")


def dump_udp(packet: Packet) -> None:
    """Print a UDP header and pass the payload on to the matching application."""
    packet.require(_HEADER.size)
    sport, dport, length, checksum = _HEADER.unpack_from(packet.data)
    if length > len(packet.data):
        raise InvalidValuesError(f"UDP length {length} exceeds the {len(packet.data)} bytes received")

    if packet.verbosity == Verbosity.LOW:
        packet.emit("> UDP ")
    elif packet.verbosity == Verbosity.MEDIUM:
        packet.emit(f"UDP => Source port : {sport}, Destination port : {dport}\n")
    else:
        _dump_detail(packet, sport, dport, length, checksum)

    payload = replace(packet, data=bytes(packet.data[_HEADER.size:]))
    payload.dump_payload("udp", sport, dport)