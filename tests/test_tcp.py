import io
import struct

import pytest

from blahajdissect.core import BufferOverflowError, Packet, Verbosity
from blahajdissect.tcp import FLAG_ACK, FLAG_PSH, dump_tcp
from blahajdissect.tcp_reassembly import TcpReassembler


def _tcp(sport=1234, dport=80, seq=0, flags=FLAG_ACK, payload=b"", options=b"",
         checksum=0, offset_words=None):
    words = offset_words if offset_words is not None else (20 + len(options)) // 4
    header = struct.pack(">HHIIBBHHH", sport, dport, seq, 0, words << 4, flags, 0x1000, checksum, 0)
    return header + options + payload


def _packet(data, verbosity=Verbosity.HIGH, index=0, seen=None, names=None):
    applications = {}
    if seen is not None:
        applications[("tcp", 80)] = lambda p: seen.append(p.data)
    return Packet(
        data=data,
        verbosity=verbosity,
        packet_index=index,
        out=io.StringIO(),
        applications=applications,
        application_names=names or {},
    )


def test_low_verbosity_header_only():
    packet = _packet(_tcp(), Verbosity.LOW)
    dump_tcp(packet, TcpReassembler())
    assert packet.out.getvalue() == "> TCP "


def test_medium_verbosity_summary():
    packet = _packet(_tcp(), Verbosity.MEDIUM)
    dump_tcp(packet, TcpReassembler())
    assert packet.out.getvalue() == "TCP => Source Port : 1234, Destination Port : 80\n"


def test_short_header_raises():
    with pytest.raises(BufferOverflowError):
        dump_tcp(_packet(b"\x00" * 10), TcpReassembler())


def test_data_offset_beyond_data_raises():
    packet = _packet(_tcp(offset_words=15, payload=b"abcd"), Verbosity.LOW)
    with pytest.raises(BufferOverflowError):
        dump_tcp(packet, TcpReassembler())


def test_high_verbosity_header_fields():
    packet = _packet(_tcp(), names={("tcp", 80): "HTTP"})
    dump_tcp(packet, TcpReassembler())
    text = packet.out.getvalue()
    assert "--- BEGIN TCP MESSAGE ---" in text
    assert "80 (HTTP)" in text
    assert "1234 (Unknown)" in text
    assert "[Unset]" in text


def test_wrong_checksum_is_reported_incorrect():
    packet = _packet(_tcp(checksum=0x1234))
    dump_tcp(packet, TcpReassembler())
    assert "0x1234 [Incorrect]" in packet.out.getvalue()


def test_pushed_segment_reaches_application():
    seen = []
    reassembler = TcpReassembler()
    dump_tcp(_packet(_tcp(flags=FLAG_PSH | FLAG_ACK, payload=b"hello"), seen=seen), reassembler)
    assert seen == [b"hello"]
    (stream,) = reassembler.streams.values()
    assert stream.segments == []


def test_unpushed_segment_is_kept():
    seen = []
    reassembler = TcpReassembler()
    packet = _packet(_tcp(payload=b"part"), seen=seen)
    dump_tcp(packet, reassembler)
    assert seen == []
    assert "saved for later" in packet.out.getvalue()
    (stream,) = reassembler.streams.values()
    assert [segment.data for segment in stream.segments] == [b"part"]


def test_three_segments_are_joined():
    seen = []
    reassembler = TcpReassembler()
    dump_tcp(_packet(_tcp(seq=100, payload=b"aa"), index=1, seen=seen), reassembler)
    dump_tcp(_packet(_tcp(seq=102, payload=b"bb"), index=2, seen=seen), reassembler)
    last = _packet(_tcp(seq=104, flags=FLAG_PSH | FLAG_ACK, payload=b"cc"), index=3, seen=seen)
    dump_tcp(last, reassembler)
    assert seen == [b"aabbcc"]
    assert "[Reassembly of packets 1, 2, 3]" in last.out.getvalue()