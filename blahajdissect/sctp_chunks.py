"""SCTP chunk list dissector."""

from __future__ import annotations

import struct

from .core import (
    BufferOverflowError,
    InvalidValuesError,
    Packet,
    hex_bytes,
)
from .sctp_params import dump_parameter
from .sctp_reassembly import SctpFragment, SctpReassembler

_CHUNK = struct.Struct(">BBH")
_DATA = struct.Struct(">IHHI")
_INIT = struct.Struct(">IIHHI")
_SACK = struct.Struct(">IIHH")
_GAP_BLOCK = struct.Struct(">HH")
_U32 = struct.Struct(">I")
_AUTH = struct.Struct(">HH")
_IDATA = struct.Struct(">IHHII")
_FORWARD_STREAM = struct.Struct(">HH")
_IFORWARD_STREAM = struct.Struct(">HHI")

_CHUNK_TYPES = {
    0: "Data",
    1: "Init",
    2: "Init ACK",
    3: "SACK",
    4: "Heartbeat",
    5: "Heartbeat ACK",
    6: "Abort",
    7: "Shutdown",
    8: "Shutdown ACK",
    9: "Error",
    10: "Cookie echo",
    11: "Cookie ACK",
    12: "ECNE",
    13: "CWR",
    14: "Shutdown complete",
    15: "Auth",
    64: "I-Data",
    128: "ASCONF-ACK",
    130: "RE-Config",
    132: "Pad",
    192: "Forward-TSN",
    193: "ASCONF",
    194: "I-Forward-TSN",
}

# Chunks that are recognised but whose body is not decoded.
_SILENT_CHUNKS = {6, 8, 9, 11, 14, 128, 132, 193}

_FLAG_E = 0x1
_FLAG_B = 0x2
_FLAG_U = 0x4


def chunk_type_name(type_: int) -> str:
    """Name of an SCTP chunk type."""
    return _CHUNK_TYPES.get(type_, "Unknown")


def _title(name: str, ack: bool) -> str:
    return f"--- BEGIN SCTP {name}{' ACK' if ack else ''} ---\n"


def _parameters(packet: Packet, offset: int, end: int) -> None:
    while offset < end:
        offset += dump_parameter(packet, offset, True)


def _dump_data(packet: Packet, offset: int, length: int, flags: int,
               source_port: int, destination_port: int, reassembler: SctpReassembler) -> None:
    packet.require(offset + _DATA.size)
    tsn, stream_id, stream_sequence, payload_id = _DATA.unpack_from(packet.data, offset)
    length -= _DATA.size
    offset += _DATA.size

    packet.emit("--- BEGIN SCTP DATA ---\n")
    packet.field("TSN", tsn)
    packet.field("Stream identifier", stream_id)
    packet.field("Stream sequence number", stream_sequence)
    packet.field("Payload protocol identifier", payload_id)

    if offset + length > len(packet.data):
        raise BufferOverflowError("SCTP data payload runs past the end of the packet")
    if length < 0:
        raise InvalidValuesError("SCTP data chunk is shorter than its header")

    stream = reassembler.stream(packet, source_port, destination_port, stream_id, True)
    stream.insert(SctpFragment(
        tsn=tsn,
        data=bytes(packet.data[offset:offset + length]),
        index=packet.packet_index,
        flag_e=bool(flags & _FLAG_E),
        flag_b=bool(flags & _FLAG_B),
        flag_u=bool(flags & _FLAG_U),
    ))


def _dump_init(packet: Packet, offset: int, length: int, ack: bool) -> None:
    end = offset + length
    packet.require(offset + _INIT.size)
    tag, window, outbound, inbound, initial_tsn = _INIT.unpack_from(packet.data, offset)
    packet.emit(_title("INIT", ack))
    packet.field("Initiate tag", f"0x{tag:x}")
    packet.field("Advertized receiver window credit", window)
    packet.field("Outbound stream count", outbound)
    packet.field("Inbount stream count", inbound)
    packet.field("Initial TSN", initial_tsn)
    _parameters(packet, offset + _INIT.size, end)


def _dump_sack(packet: Packet, offset: int) -> None:
    packet.require(offset + _SACK.size)
    cumulative, window, gap_count, duplicate_count = _SACK.unpack_from(packet.data, offset)
    packet.emit("--- BEGIN SCTP SACK ---\n")
    packet.field("Cumulative TSN ack", cumulative)
    packet.field("Advertized receiver window credit", window)
    packet.field("Number of Gap ACK blocks", gap_count)
    packet.field("Number of duplicate TSNs", duplicate_count)
    offset += _SACK.size

    for _ in range(gap_count):
        packet.require(offset + _GAP_BLOCK.size)
        start, end = _GAP_BLOCK.unpack_from(packet.data, offset)
        packet.emit("--- BEGIN SCTP GAP ACK BLOCK ---\n")
        packet.field("Start", start)
        packet.field("End", end)
        offset += _GAP_BLOCK.size

    # The duplicate list is walked as many times as there are gap blocks.
    for _ in range(gap_count):
        packet.require(offset + _U32.size)
        (duplicate,) = _U32.unpack_from(packet.data, offset)
        packet.emit("--- BEGIN SCTP DUPLICATE TSN ---\n")
        packet.field("Duplicate TSN", duplicate)
        offset += _U32.size


def _dump_heartbeat(packet: Packet, offset: int, length: int, ack: bool) -> None:
    packet.emit(_title("HEARTBEAT", ack))
    _parameters(packet, offset, offset + length)


def _dump_shutdown(packet: Packet, offset: int) -> None:
    packet.require(offset + _U32.size)
    (cumulative,) = _U32.unpack_from(packet.data, offset)
    packet.emit("--- BEGIN SCTP SHUTDOWN ---\n")
    packet.field("Cumulative TSN ack", cumulative)


def _dump_cookie_echo(packet: Packet, offset: int, length: int) -> None:
    packet.emit("--- BEGIN SCTP COOKIE ECHO ---\n")
    packet.field("Cookie", hex_bytes(packet.data[offset:offset + max(length, 0)]))


def _dump_auth(packet: Packet, offset: int, length: int) -> None:
    end = offset + length
    packet.require(offset + _AUTH.size)
    key_id, hmac_id = _AUTH.unpack_from(packet.data, offset)
    offset += _AUTH.size
    packet.emit("--- BEGIN SCTP AUTH ---\n")
    packet.field("Shared key identifier", key_id)
    packet.field("HMAC identifier", hmac_id)
    packet.field("HMAC", hex_bytes(packet.data[offset:max(end, offset)]))


def _dump_idata(packet: Packet, offset: int, length: int) -> None:
    end = offset + length
    packet.require(offset + _IDATA.size)
    tsn, stream_id, _reserved, message_id, payload_or_fsn = _IDATA.unpack_from(packet.data, offset)
    offset += _IDATA.size
    packet.emit("--- BEGIN SCTP I-Data ---\n")
    packet.field("TSN", tsn)
    packet.field("Stream identifier", stream_id)
    packet.field("Message identifier", message_id)
    packet.field("Payload protocol identifier / Fragment sequence number", payload_or_fsn)
    packet.field("User data", hex_bytes(packet.data[offset:max(end, offset)]))


def _dump_reconfig(packet: Packet, offset: int, length: int) -> None:
    packet.emit("--- BEGIN SCTP RE-CONFIG ---\n")
    _parameters(packet, offset, offset + length)


def _dump_forward_tsn(packet: Packet, offset: int, length: int) -> None:
    end = offset + length
    packet.require(offset + _U32.size)
    (new_tsn,) = _U32.unpack_from(packet.data, offset)
    packet.emit("--- BEGIN SCTP FORWARD TSN ---\n")
    packet.field("New cumulative TSN", new_tsn)
    offset += _U32.size
    while offset < end:
        packet.require(offset + _FORWARD_STREAM.size)
        stream, sequence = _FORWARD_STREAM.unpack_from(packet.data, offset)
        packet.field("Stream", stream)
        packet.field("Stream sequence", sequence)
        offset += _FORWARD_STREAM.size


def _dump_iforward_tsn(packet: Packet, offset: int, length: int) -> None:
    end = offset + length
    packet.require(offset + _U32.size)
    (new_tsn,) = _U32.unpack_from(packet.data, offset)
    packet.emit("--- BEGIN SCTP I-FORWARD TSN ---\n")
    packet.field("New cumulative TSN", new_tsn)
    offset += _U32.size
    while offset < end:
        packet.require(offset + _IFORWARD_STREAM.size)
        stream_id, flags, message_id = _IFORWARD_STREAM.unpack_from(packet.data, offset)
        packet.field("Stream identifier", stream_id)
        packet.field("U", flags & 0x1)
        packet.field("Message identifier", message_id)
        offset += _IFORWARD_STREAM.size


def dump_chunks(packet: Packet, offset: int, source_port: int, destination_port: int,
                reassembler: SctpReassembler) -> None:
    """Print every chunk from ``offset`` on, storing DATA payloads in ``reassembler``.

    Parsing stops at the first chunk type that is not known.
    """
    position = offset
    while position < len(packet.data):
        packet.require(position + _CHUNK.size)
        type_, flags, length = _CHUNK.unpack_from(packet.data, position)

        packet.emit("--- BEGIN SCTP CHUNK ---\n")
        packet.field("Type", f"0x{type_:x} ({chunk_type_name(type_)})")
        packet.field("Flags", flags)
        packet.field("Length", length)

        if length == 0:
            raise InvalidValuesError("SCTP chunk has a zero length")

        position += _CHUNK.size
        body_length = length - _CHUNK.size
        padded_length = body_length
        if padded_length % 4:
            padded_length = (padded_length + 4) & 0xFFFC
        packet.require(position + padded_length)

        if type_ == 0:
            _dump_data(packet, position, body_length, flags, source_port, destination_port, reassembler)
        elif type_ in (1, 2):
            _dump_init(packet, position, body_length, type_ == 2)
        elif type_ == 3:
            _dump_sack(packet, position)
        elif type_ in (4, 5):
            _dump_heartbeat(packet, position, body_length, type_ == 5)
        elif type_ == 7:
            _dump_shutdown(packet, position)
        elif type_ == 10:
            _dump_cookie_echo(packet, position, body_length)
        elif type_ == 15:
            _dump_auth(packet, position, body_length)
        elif type_ == 64:
            _dump_idata(packet, position, body_length)
        elif type_ == 130:
            _dump_reconfig(packet, position, body_length)
        elif type_ == 192:
            _dump_forward_tsn(packet, position, body_length)
        elif type_ == 194:
            _dump_iforward_tsn(packet, position, body_length)
        elif type_ not in _SILENT_CHUNKS:
            return

        position += padded_length