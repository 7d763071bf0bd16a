import io
import ipaddress
import struct

import pytest

from blahajdissect.core import (
    CHECKSUM_CORRECT,
    CHECKSUM_INCORRECT,
    BufferOverflowError,
    InvalidValuesError,
    Packet,
    Verbosity,
    ones_complement_sum,
)
from blahajdissect.icmp import control_message, dump_icmp, unreachable_message


def _message(type_, code, rest, body=b""):
    zeroed = struct.pack(">BBH", type_, code, 0) + rest + body
    checksum = ~ones_complement_sum(zeroed) & 0xFFFF
    return struct.pack(">BBH", type_, code, checksum) + rest + body


def _run(data, verbosity=Verbosity.HIGH):
    packet = Packet(data=data, verbosity=verbosity, out=io.StringIO())
    dump_icmp(packet)
    return packet.out.getvalue()


def _pairs(text):
    return [
        (label.strip(), value)
        for label, sep, value in (line.partition(" = ") for line in text.splitlines())
        if sep
    ]


def test_names():
    assert control_message(8) == "Echo request"
    assert control_message(200) == "Reserved / deprecated"
    assert unreachable_message(3) == "Port Unreachable"
    assert unreachable_message(6) == "Unknown"


def test_echo_request():
    data = _message(8, 0, struct.pack(">HH", 0x1234, 7), b"ping")
    pairs = dict(_pairs(_run(data)))
    assert pairs["ICMP Message type"] == "0x8 (Echo request)"
    assert pairs["Identifier"] == str(0x1234)
    assert pairs["Sequence Number"] == "7"
    assert pairs["Checksum"].endswith(CHECKSUM_CORRECT)


def test_bad_checksum():
    data = bytearray(_message(0, 0, struct.pack(">HH", 1, 2)))
    data[-1] ^= 0xFF
    assert dict(_pairs(_run(bytes(data))))["Checksum"].endswith(CHECKSUM_INCORRECT)


def test_information_reply_repeats_identifier():
    data = _message(16, 0, struct.pack(">HH", 42, 99))
    pairs = dict(_pairs(_run(data)))
    assert pairs["Sequence Number"] == "42"


def test_code_three_is_named():
    data = _message(3, 3, b"\x00" * 4)
    text = _run(data)
    assert dict(_pairs(text))["Code"] == "0x3 (Port Unreachable)"
    assert "IP HEADER\n" in text


def test_redirect_gateway():
    gateway = ipaddress.IPv4Address("198.51.100.1")
    pairs = dict(_pairs(_run(_message(5, 1, gateway.packed))))
    assert pairs["Gateway Internet Address"] == str(gateway)


def test_timestamp_values_and_overflow():
    body = struct.pack(">III", 11, 22, 33)
    pairs = dict(_pairs(_run(_message(13, 0, struct.pack(">HH", 1, 1), body))))
    assert (pairs["Originate Timestamp"], pairs["Receive Timestamp"], pairs["Transmit Timestamp"]) == (
        "11",
        "22",
        "33",
    )
    with pytest.raises(BufferOverflowError):
        _run(_message(14, 0, struct.pack(">HH", 1, 1), body[:8]))


def test_router_advertisement_entries():
    router = ipaddress.IPv4Address("203.0.113.5")
    body = router.packed + struct.pack(">I", 77)
    pairs = _pairs(_run(_message(9, 0, bytes([1, 0, 0, 0]), body)))
    assert ("Router Address", str(router)) in pairs
    assert ("Router Level", "77") in pairs


def test_router_advertisement_count_too_large():
    with pytest.raises(InvalidValuesError):
        _run(_message(9, 0, bytes([2, 0, 0, 0]), b"\x00" * 8))


def test_raw_data_for_other_types():
    text = _run(_message(17, 0, b"\x00" * 4, b"\xab\x01"))
    assert dict(_pairs(text))["Raw Data"] == "ab 1 "


def test_short_message_and_levels():
    with pytest.raises(BufferOverflowError):
        _run(b"\x08\x00\x00")
    data = _message(8, 0, b"\x00" * 4)
    assert _run(data, Verbosity.LOW) == "> ICMPv4 "
    assert _run(data, Verbosity.MEDIUM) == "ICMPv4 => ICMP Message type : Echo request\n"