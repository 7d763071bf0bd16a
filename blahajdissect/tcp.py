"""TCP header dissector with segment reassembly."""

from __future__ import annotations

import struct
from dataclasses import replace
from typing import Optional

from .core import (
    BufferOverflowError,
    Packet,
    PseudoHeader,
    Verbosity,
    checksum_status,
    ones_complement_sum,
)
from .tcp_options import dump_tcp_options
from .tcp_reassembly import TcpReassembler, TcpSegment

_HEADER = struct.Struct(">HHIIBBHHH")
_CHECKSUM_OFFSET = 16
_WORD = 4

FLAG_FIN = 0x01
FLAG_SYN = 0x02
FLAG_RST = 0x04
FLAG_PSH = 0x08
FLAG_ACK = 0x10
FLAG_URG = 0x20

_PARTIAL = "\033[1m[Received partial packet, saved for later]\033[22m\n"


def _checksum_input(data: bytes, checksum: int, pseudo: Optional[PseudoHeader]) -> bytes:
    if pseudo is None:
        return bytes(data)
    folded = ones_complement_sum(b"", checksum + pseudo.sum16())
    return (
        bytes(data[:_CHECKSUM_OFFSET])
        + folded.to_bytes(2, "big")
        + bytes(data[_CHECKSUM_OFFSET + 2:])
    )


def _flag(flags: int, mask: int) -> int:
    return 1 if flags & mask else 0


def _dump_detail(packet: Packet, sport: int, dport: int, seq: int, ack: int,
                 data_offset: int, flags: int, window: int, checksum: int, urgent: int) -> None:
    packet.emit("--- BEGIN TCP MESSAGE ---\n")
    packet.field("Source Port", f"{sport} ({packet.port_name('tcp', sport)})")
    packet.field("Destination Port", f"{dport} ({packet.port_name('tcp', dport)})")
    packet.field("Sequence Number", seq)
    packet.field("ACK", ack)
    packet.field("Data Offset", data_offset)
    packet.field("URG", _flag(flags, FLAG_URG))
    packet.field("ACK", _flag(flags, FLAG_ACK))
    packet.field("PSH", _flag(flags, FLAG_PSH))
    packet.field("RST", _flag(flags, FLAG_RST))
    packet.field("SYN", _flag(flags, FLAG_SYN))
    packet.field("FIN", _flag(flags, FLAG_FIN))
    packet.field("Window Size", window)
    covered = _checksum_input(packet.data, checksum, packet.pseudo_header)
    packet.field("Checksum", f"0x{checksum:x} {checksum_status(covered, checksum, True)}")
    packet.field("Urgent Pointer", urgent)


def _announce_reassembly(packet: Packet, indices: list[int]) -> None:
    # Only announced when more than two segments were joined.
    if len(indices) <= 2:
        return
    listed = ", ".join(str(index) for index in indices)
    ending = " " if packet.verbosity == Verbosity.LOW else "\n"
    packet.emit(f"\033[1m[Reassembly of packets {listed}]\033[22m{ending}")


def dump_tcp(packet: Packet, reassembler: TcpReassembler) -> None:
    """Print a TCP header, store its payload and pass complete messages on."""
    packet.require(_HEADER.size)
    sport, dport, seq, ack, offset_byte, flags, window, checksum, urgent = (
        _HEADER.unpack_from(packet.data)
    )
    data_offset = offset_byte >> 4

    if packet.verbosity == Verbosity.LOW:
        packet.emit("> TCP ")
    elif packet.verbosity == Verbosity.MEDIUM:
        packet.emit(f"TCP => Source Port : {sport}, Destination Port : {dport}\n")
    else:
        _dump_detail(packet, sport, dport, seq, ack, data_offset, flags, window, checksum, urgent)

    header_size = data_offset * _WORD
    if header_size > len(packet.data):
        raise BufferOverflowError(
            f"TCP header of {header_size} bytes exceeds the {len(packet.data)} bytes received"
        )

    if packet.verbosity == Verbosity.HIGH and header_size > _HEADER.size:
        dump_tcp_options(packet, _HEADER.size, header_size)

    if header_size == len(packet.data):
        return

    stream = reassembler.stream(packet, sport, dport)
    stream.insert(TcpSegment(
        seq=seq,
        data=bytes(packet.data[header_size:]),
        index=packet.packet_index,
        syn=bool(flags & FLAG_SYN),
        psh=bool(flags & FLAG_PSH),
    ))

    start = stream.complete_index()
    if start is None:
        packet.emit(_PARTIAL)
        return

    message, indices = stream.reassemble(start)
    _announce_reassembly(packet, indices)
    replace(packet, data=message).dump_payload("tcp", sport, dport)