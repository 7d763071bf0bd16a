"""SCTP chunk parameter dissector."""

from __future__ import annotations

import struct

from .core import (
    LABEL_WIDTH,
    InvalidValuesError,
    Packet,
    hex_bytes,
    ipv4_to_str,
    ipv6_to_str,
)

_PARAMETER = struct.Struct(">HH")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_OUTGOING_RESET = struct.Struct(">III")
_RECONFIG_RESPONSE = struct.Struct(">IIII")
_ADD_STREAM = struct.Struct(">IHH")

_PARAMETER_TYPES = {
    0x1: "Heartbeat info",
    0x5: "IPv4 address",
    0x6: "IPv6 address",
    0x7: "State cookie",
    0x8: "Unrecognized parameter",
    0x9: "Cookie preservative",
    0xB: "Host name address",
    0xC: "Supported address types",
    0xD: "Outgoing SSN reset request parameter",
    0xE: "Incoming SSN reset request parameter",
    0xF: "SSN / TSN reset request parameter",
    0x10: "Re-configuration response parameter",
    0x11: "Add outgoing streams request parameter",
    0x12: "Add incoming streams request parameter",
    0x8000: "Reserved for ECN capable",
    0x8001: "Zero checksum acceptable",
    0x8002: "Random",
    0x8003: "Chunk list",
    0x8004: "Requested HMAC algorithm parameter",
    0x8005: "Padding",
    0x8008: "Supported extensions",
    0xC000: "Forward TSN supported",
    0xC001: "Add IP address",
    0xC002: "Delete IP address",
    0xC003: "Error cause indication",
    0xC004: "Set primary address",
    0xC005: "Success indication",
    0xC006: "Adaptation layer indication",
}


def parameter_type_name(type_: int) -> str:
    """Name of an SCTP parameter type."""
    return _PARAMETER_TYPES.get(type_, "Unknown")


def _truncating_half(value: int) -> int:
    # Integer division rounding toward zero.
    return int(value / 2)


def _prefix(packet: Packet, name: str) -> None:
    packet.emit(f"{name:<{LABEL_WIDTH}} = ")


def _hex(packet: Packet, offset: int, length: int, name: str) -> None:
    packet.field(name, hex_bytes(packet.data[offset:offset + max(length, 0)]))


def _ipv4(packet: Packet, offset: int) -> None:
    packet.require(offset + 4)
    packet.field("IPv4 address", ipv4_to_str(packet.data[offset:offset + 4]))


def _ipv6(packet: Packet, offset: int) -> None:
    packet.require(offset + 16)
    packet.field("IPv6 address", ipv6_to_str(packet.data[offset:offset + 16]))


def _supported_address_types(packet: Packet, offset: int, length: int) -> None:
    _prefix(packet, "Supported address types")
    end = offset + length
    for position in range(offset, end, 2):
        packet.require(position + 2)
        (address_type,) = _U16.unpack_from(packet.data, position)
        packet.emit(f"{address_type} ({parameter_type_name(address_type)})")
        if position < end - 2:
            packet.emit(", ")
    packet.emit("\n")


def _list(packet: Packet, offset: int, length: int, name: str) -> None:
    items = packet.data[offset:offset + max(length, 0)]
    packet.field(name, ", ".join(f"{byte:02x}" for byte in items))


def _u32(packet: Packet, offset: int, name: str) -> None:
    packet.require(offset + 4)
    (value,) = _U32.unpack_from(packet.data, offset)
    packet.field(name, f"0x{value:x}")


def _streams(packet: Packet, offset: int, count: int) -> None:
    for _ in range(count):
        packet.require(offset + 2)
        (stream,) = _U16.unpack_from(packet.data, offset)
        packet.field("Stream", stream)
        offset += 2


def _outgoing_ssn_reset(packet: Packet, offset: int, length: int) -> None:
    packet.require(offset + _OUTGOING_RESET.size)
    request, response, last_tsn = _OUTGOING_RESET.unpack_from(packet.data, offset)
    packet.field("Re-configuration request sequence number", request)
    packet.field("Re-configuration response sequence number", response)
    packet.field("Sender last TSN", last_tsn)
    _streams(packet, offset + _OUTGOING_RESET.size, _truncating_half(length - 16))


def _incoming_ssn_reset(packet: Packet, offset: int, length: int) -> None:
    packet.require(offset + 4)
    (request,) = _U32.unpack_from(packet.data, offset)
    packet.field("Re-configuration request sequence number", request)
    _streams(packet, offset + 4, _truncating_half(length - 8))


def _reconfiguration_response(packet: Packet, offset: int) -> None:
    packet.require(offset + _RECONFIG_RESPONSE.size)
    response, result, sender_next, receiver_next = _RECONFIG_RESPONSE.unpack_from(packet.data, offset)
    packet.field("Re-configuration response sequence number", response)
    packet.field("Result", result)
    packet.field("Sender next TSN", sender_next)
    packet.field("Receiver next TSN", receiver_next)


def _add_stream(packet: Packet, offset: int) -> None:
    packet.require(offset + _ADD_STREAM.size)
    request, new_streams, _reserved = _ADD_STREAM.unpack_from(packet.data, offset)
    packet.field("Re-configuration request sequence number", request)
    packet.field("Number of new streams", new_streams)


def _hmac_identifiers(packet: Packet, offset: int, length: int) -> None:
    _prefix(packet, "HMAC identifiers")
    end = offset + length
    for position in range(offset, end, 2):
        packet.require(position + 2)
        (identifier,) = _U16.unpack_from(packet.data, position)
        packet.emit(str(identifier))
        if position < end - 2:
            packet.emit(", ")
    packet.emit("\n")


def _asconf(packet: Packet, offset: int, length: int) -> None:
    end = offset + length
    _u32(packet, offset, "ASCONF request correlation ID")
    position = offset + 4
    while position < end:
        step = dump_parameter(packet, position, False)
        if step == 0:
            raise InvalidValuesError("nested SCTP parameter does not advance")
        position += step


def dump_parameter(packet: Packet, offset: int, header: bool) -> int:
    """Print the SCTP parameter at ``offset`` and return its padded length."""
    packet.require(offset + _PARAMETER.size)
    type_, length = _PARAMETER.unpack_from(packet.data, offset)
    offset += _PARAMETER.size

    if header:
        packet.emit("--- BEGIN SCTP PARAMETER ---\n")
    packet.field("Type", f"{type_} ({parameter_type_name(type_)})")
    packet.field("Length", length)

    if length == 0:
        raise InvalidValuesError("SCTP parameter has a zero length")

    data_length = length - _PARAMETER.size
    packet.require(offset + data_length)

    if type_ == 0x1:
        _hex(packet, offset, data_length, "Heartbeat info")
    elif type_ == 0x5:
        _ipv4(packet, offset)
    elif type_ == 0x6:
        _ipv6(packet, offset)
    elif type_ == 0x7:
        _hex(packet, offset, data_length, "State cookie")
    elif type_ == 0x8:
        _list(packet, offset, data_length, "Unrecognized Parameters")
    elif type_ == 0x9:
        _u32(packet, offset, "Cookie preservative")
    elif type_ == 0xC:
        _supported_address_types(packet, offset, data_length)
    elif type_ == 0xD:
        _outgoing_ssn_reset(packet, offset, data_length)
    elif type_ == 0xE:
        _incoming_ssn_reset(packet, offset, data_length)
    elif type_ == 0xF:
        _u32(packet, offset, "Re-configuration request sequence number")
    elif type_ == 0x10:
        _reconfiguration_response(packet, offset)
    elif type_ in (0x11, 0x12):
        _add_stream(packet, offset)
    elif type_ == 0x8001:
        _u32(packet, offset, "Error detection method identifier")
    elif type_ == 0x8002:
        _hex(packet, offset, data_length, "Random number")
    elif type_ in (0x8003, 0x8008):
        _list(packet, offset, data_length, "Chunk types")
    elif type_ == 0x8004:
        _hmac_identifiers(packet, offset, data_length)
    elif type_ in (0xC001, 0xC002, 0xC003, 0xC004):
        _asconf(packet, offset, data_length)
    elif type_ == 0xC005:
        _u32(packet, offset, "ASCONF request correlation ID")
    elif type_ == 0xC006:
        _u32(packet, offset, "Adaptation code point")

    if length % 4:
        length = (length + 4) & 0xFFFC
    return length