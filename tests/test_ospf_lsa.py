import io
import ipaddress
import struct

import pytest

from blahajdissect.core import BufferOverflowError, InvalidValuesError, Packet
from blahajdissect.ospf_lsa import (
    dump_as_external_lsa,
    dump_network_lsa,
    dump_router_lsa,
    dump_summary_lsa,
    dump_v2_lsa_header,
)


def _ip(text):
    return ipaddress.IPv4Address(text)


def _packet(data):
    return Packet(data=data, out=io.StringIO())


def _pairs(text):
    return [
        (label.strip(), value)
        for label, sep, value in (line.partition(" = ") for line in text.splitlines())
        if sep
    ]


def test_lsa_header_fields():
    data = b"\xee" + struct.pack(
        ">HBB4s4sIHH", 30, 2, 1, _ip("10.0.0.1").packed, _ip("10.0.0.2").packed, 0x80000001, 0xBEEF, 36
    )
    packet = _packet(data)
    dump_v2_lsa_header(packet, 1)
    pairs = dict(_pairs(packet.out.getvalue()))
    assert pairs["LSA age"] == "30"
    assert pairs["LSA type"] == "0x1"
    assert pairs["Link state ID"] == "10.0.0.1"
    assert pairs["Advertising router"] == "10.0.0.2"
    assert pairs["LS sequence number"] == "0x80000001"
    assert pairs["LS checksum"] == "0xbeef [Unchecked]"
    assert pairs["Length"] == "36"


def test_lsa_header_overflow():
    with pytest.raises(BufferOverflowError):
        dump_v2_lsa_header(_packet(b"\x00" * 19), 0)


def test_router_lsa_single_link():
    link = struct.pack(">4s4sBBH", _ip("192.0.2.1").packed, _ip("255.255.255.0").packed, 3, 0, 10)
    packet = _packet(struct.pack(">HH", 1, 1) + link)
    dump_router_lsa(packet, 0)
    pairs = dict(_pairs(packet.out.getvalue()))
    assert pairs["Link count"] == "1"
    assert pairs["Link ID"] == "192.0.2.1"
    assert pairs["Link data"] == "255.255.255.0"
    assert pairs["Type"] == "3"
    assert pairs["Metric"] == "10"


def test_router_lsa_link_count_too_large():
    with pytest.raises(InvalidValuesError):
        dump_router_lsa(_packet(struct.pack(">HH", 0, 3) + b"\x00" * 12), 0)


def test_network_lsa_attached_routers():
    routers = [_ip("10.1.1.1"), _ip("10.1.1.2")]
    body = _ip("255.255.255.0").packed + b"".join(r.packed for r in routers)
    packet = _packet(body)
    dump_network_lsa(packet, 0, len(body))
    pairs = _pairs(packet.out.getvalue())
    assert [v for k, v in pairs if k == "Attached router"] == [str(r) for r in routers]
    assert ("Network mask", "255.255.255.0") in pairs


def test_network_lsa_short_length_runs_out_of_data():
    with pytest.raises(BufferOverflowError):
        dump_network_lsa(_packet(_ip("255.0.0.0").packed + b"\x00" * 8), 0, 0)


def test_summary_lsa_metric():
    body = _ip("255.255.0.0").packed + bytes([0]) + (500).to_bytes(3, "big")
    packet = _packet(body + b"\x00" * 4)
    dump_summary_lsa(packet, 0, len(body))
    pairs = dict(_pairs(packet.out.getvalue()))
    assert pairs["Network mask"] == "255.255.0.0"
    assert pairs["TOS"] == "0"
    assert pairs["Metric"] == "500"


def test_summary_lsa_overflow():
    with pytest.raises(BufferOverflowError):
        dump_summary_lsa(_packet(b"\x00" * 4), 0, 8)


def test_as_external_route():
    route = struct.pack(">B3s4sI", 0x80, (20).to_bytes(3, "big"), _ip("192.0.2.254").packed, 7)
    body = _ip("255.255.255.0").packed + route
    packet = _packet(body)
    dump_as_external_lsa(packet, 0, len(body))
    pairs = dict(_pairs(packet.out.getvalue()))
    assert pairs["External"] == "1"
    assert pairs["TOS"] == "0"
    assert pairs["Metric"] == "20"
    assert pairs["Forwarding address"] == "192.0.2.254"
    assert pairs["External route tag"] == "7"


def test_as_external_truncated_is_invalid():
    with pytest.raises(InvalidValuesError):
        dump_as_external_lsa(_packet(b"\x00\x00"), 0, 16)
    with pytest.raises(InvalidValuesError):
        dump_as_external_lsa(_packet(b"\x00" * 10), 0, 16)