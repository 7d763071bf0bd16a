import io
import struct

import pytest

from blahajdissect.core import BufferOverflowError, InvalidValuesError, Packet
from blahajdissect.sctp_chunks import chunk_type_name, dump_chunks
from blahajdissect.sctp_reassembly import SctpReassembler


def make_packet(data, index=0):
    return Packet(data=data, out=io.StringIO(), packet_index=index)


def chunk(type_, flags, body):
    raw = struct.pack(">BBH", type_, flags, 4 + len(body)) + body
    padding = (-len(raw)) % 4
    return raw + b"\x00" * padding


def data_chunk(tsn, stream_id, payload, flags):
    return chunk(0, flags, struct.pack(">IHHI", tsn, stream_id, 0, 0) + payload)


def run(data, index=0):
    packet = make_packet(data, index)
    reassembler = SctpReassembler()
    dump_chunks(packet, 0, 5000, 6000, reassembler)
    return packet.out.getvalue(), reassembler


def test_chunk_type_names():
    assert chunk_type_name(0) == "Data"
    assert chunk_type_name(192) == "Forward-TSN"
    assert chunk_type_name(250) == "Unknown"


def test_data_chunk_is_stored_in_reassembler():
    output, reassembler = run(data_chunk(42, 3, b"hello", 0x3), index=9)
    assert "--- BEGIN SCTP DATA ---" in output
    stream = reassembler.stream(make_packet(b""), 5000, 6000, 3, False)
    assert stream is not None
    assert len(stream.fragments) == 1
    fragment = stream.fragments[0]
    assert fragment.data == b"hello"
    assert fragment.tsn == 42
    assert fragment.index == 9
    assert fragment.flag_b and fragment.flag_e and not fragment.flag_u


def test_data_chunks_reassemble_in_order():
    data = data_chunk(11, 1, b"def", 0x1) + data_chunk(10, 1, b"abc", 0x2)
    _, reassembler = run(data)
    stream = reassembler.stream(make_packet(b""), 5000, 6000, 1, False)
    start = stream.complete_index()
    joined, _ = stream.reassemble(start)
    assert joined == b"abc" + b"def"


def test_chunk_header_is_printed():
    output, _ = run(chunk(7, 0, struct.pack(">I", 77)))
    assert "--- BEGIN SCTP CHUNK ---" in output
    assert "(Shutdown)" in output
    assert "--- BEGIN SCTP SHUTDOWN ---" in output
    assert "= 77" in output


def test_padding_is_skipped_between_chunks():
    data = chunk(10, 0, b"\xab") + chunk(7, 0, struct.pack(">I", 5))
    output, _ = run(data)
    assert "--- BEGIN SCTP COOKIE ECHO ---" in output
    assert "ab\n" in output
    assert "--- BEGIN SCTP SHUTDOWN ---" in output


def test_unknown_chunk_stops_parsing():
    data = chunk(12, 0, b"\x00\x00\x00\x00") + data_chunk(1, 1, b"x", 0x3)
    output, reassembler = run(data)
    assert "--- BEGIN SCTP DATA ---" not in output
    assert reassembler.streams == {}


def test_silent_chunk_does_not_stop_parsing():
    data = chunk(11, 0, b"") + chunk(7, 0, struct.pack(">I", 1))
    output, _ = run(data)
    assert output.count("--- BEGIN SCTP CHUNK ---") == 2
    assert "--- BEGIN SCTP SHUTDOWN ---" in output


def test_init_and_init_ack_with_parameter():
    parameter = struct.pack(">HHI", 9, 8, 1000)
    body = struct.pack(">IIHHI", 0xABCD, 65535, 10, 10, 1) + parameter
    output, _ = run(chunk(1, 0, body) + chunk(2, 0, body))
    assert "--- BEGIN SCTP INIT ---" in output
    assert "--- BEGIN SCTP INIT ACK ---" in output
    assert "0xabcd" in output
    assert output.count("--- BEGIN SCTP PARAMETER ---") == 2


def test_heartbeat_ack_prints_parameter():
    parameter = struct.pack(">HH", 1, 8) + b"\x01\x02\x03\x04"
    output, _ = run(chunk(5, 0, parameter))
    assert "--- BEGIN SCTP HEARTBEAT ACK ---" in output
    assert "01020304" in output


def test_sack_with_gap_block():
    body = struct.pack(">IIHH", 100, 2000, 1, 0) + struct.pack(">HH", 2, 4) + struct.pack(">I", 150)
    output, _ = run(chunk(3, 0, body))
    assert "--- BEGIN SCTP SACK ---" in output
    assert "--- BEGIN SCTP GAP ACK BLOCK ---" in output
    assert "--- BEGIN SCTP DUPLICATE TSN ---" in output
    assert "= 150" in output


def test_forward_tsn_streams():
    body = struct.pack(">I", 500) + struct.pack(">HH", 3, 9)
    output, _ = run(chunk(192, 0, body))
    assert "--- BEGIN SCTP FORWARD TSN ---" in output
    assert "= 500" in output
    assert "Stream sequence" in output


def test_zero_length_chunk_raises():
    with pytest.raises(InvalidValuesError):
        run(b"\x07\x00\x00\x00")


def test_truncated_chunk_header_raises():
    with pytest.raises(BufferOverflowError):
        run(b"\x07\x00")


def test_chunk_longer_than_data_raises():
    with pytest.raises(BufferOverflowError):
        run(struct.pack(">BBH", 10, 0, 40) + b"\x00" * 4)


def test_truncated_data_header_raises():
    with pytest.raises(BufferOverflowError):
        run(struct.pack(">BBH", 0, 3, 8) + b"\x00" * 4)