import io
import struct

import pytest

from blahajdissect.core import BufferOverflowError, InvalidValuesError, Packet
from blahajdissect.tcp_options import dump_tcp_options, option_name


def _run(data: bytes, end: int | None = None) -> list[str]:
    out = io.StringIO()
    packet = Packet(bytes(data), out=out)
    dump_tcp_options(packet, 0, len(data) if end is None else end)
    return out.getvalue().splitlines()


def test_option_names():
    assert option_name(2) == "Maximum segment size"
    assert option_name(69) == "Encryption negociation"
    assert option_name(200) == "Unknown"


def test_noop_then_end_of_options_stops():
    lines = _run(bytes([1, 0, 3, 3, 7]))
    assert lines[0] == "--- BEGIN TCP OPTIONS ---"
    assert lines[1].rstrip() == "NOOP"
    assert lines[2].rstrip() == "End of options"
    assert len(lines) == 3


def test_window_scale():
    lines = _run(bytes([3, 3, 7]))
    assert lines[1].startswith("Window scale")
    assert lines[1].endswith(" = 7")


def test_mss_reads_a_word():
    data = bytes([2, 4, 0x05, 0xB4, 1, 1])
    lines = _run(data, end=4)
    expected = int.from_bytes(data[2:6], "big")
    assert lines[1].endswith(f" = {expected}")


def test_sack_single_block():
    data = bytes([5, 10]) + struct.pack(">II", 100, 200)
    lines = _run(data)
    assert lines[1].endswith(" = [Left edge of block 1 : 100, Right edge of block 1 : 200]")


def test_sack_two_blocks_separated():
    data = bytes([5, 18]) + struct.pack(">IIII", 1, 2, 3, 4)
    lines = _run(data)
    assert "Right edge of block 1 : 2, Left edge of block 2 : 3" in lines[1]


def test_default_option_prints_hex():
    lines = _run(bytes([34, 4, 0xAB, 0xCD]))
    assert lines[1].startswith("TCP fast-open cookie")
    assert lines[1].endswith(" = 0xabcd")


def test_user_timeout():
    lines = _run(bytes([28, 4, 0x80, 0x10]))
    assert lines[1].endswith(" = G : 1, User timeout : 16")


def test_timestamp_contains_both_values():
    data = bytes([8, 10]) + struct.pack("<II", 0, 0)
    lines = _run(data)
    assert lines[1].count("1970") == 2
    assert " / " in lines[1]


def test_timestamp_wrong_length():
    data = bytes([8, 9]) + bytes(8)
    with pytest.raises(InvalidValuesError):
        _run(data)


def test_quickstart_wrong_length():
    with pytest.raises(InvalidValuesError):
        _run(bytes([27, 6, 0, 0, 0, 0]))


def test_truncated_option_overflows():
    with pytest.raises(BufferOverflowError):
        _run(bytes([3]), end=2)


def test_default_option_past_data_is_invalid():
    with pytest.raises(InvalidValuesError):
        _run(bytes([99, 10, 1, 2]))


def test_zero_length_option_is_invalid():
    with pytest.raises(InvalidValuesError):
        _run(bytes([99, 0, 0, 0]))