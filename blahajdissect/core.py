"""Packet model, errors and shared helpers used by every transport dissector."""

from __future__ import annotations

import enum
import ipaddress
import struct
import sys
from dataclasses import dataclass, field as dc_field
from typing import Callable, ClassVar, Mapping, Optional, TextIO, Union

LABEL_WIDTH = 45

CHECKSUM_CORRECT = "[Correct]"
CHECKSUM_INCORRECT = "[Incorrect]"
CHECKSUM_UNSET = "[Unset]"


class Verbosity(enum.IntEnum):
    """How much detail a dissector prints."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class DissectError(Exception):
    """Base class for every error raised while dissecting a packet."""


class BufferOverflowError(DissectError):
    """The packet is shorter than a field that should be read."""


class InvalidValuesError(DissectError):
    """A field holds a value that cannot be right."""


class DataUnavailableError(DissectError):
    """Data needed for reassembly is not present."""


def ones_complement_sum(data: bytes, initial: int = 0) -> int:
    """Return the folded 16-bit one's complement sum of ``data`` plus ``initial``."""
    raw = bytes(data)
    if len(raw) % 2:
        raw += b"\x00"
    total = initial + sum(struct.unpack(f">{len(raw) // 2}H", raw))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return total


def checksum_status(data: bytes, expected: int, allow_zero: bool) -> str:
    """Describe whether ``data`` (checksum field included) sums to a valid checksum."""
    if allow_zero and expected == 0:
        return CHECKSUM_UNSET
    return CHECKSUM_CORRECT if ones_complement_sum(data) == 0xFFFF else CHECKSUM_INCORRECT


def ipv4_to_str(data: bytes) -> str:
    """Render the first four bytes of ``data`` as a dotted IPv4 address."""
    if len(data) < 4:
        raise ValueError("an IPv4 address needs 4 bytes")
    return str(ipaddress.IPv4Address(bytes(data[:4])))


def ipv6_to_str(data: bytes) -> str:
    """Render the first sixteen bytes of ``data`` as a compressed IPv6 address."""
    if len(data) < 16:
        raise ValueError("an IPv6 address needs 16 bytes")
    return str(ipaddress.IPv6Address(bytes(data[:16])))


def hex_bytes(data: bytes) -> str:
    """Two lower-case hex digits per byte, no separator."""
    return bytes(data).hex()


@dataclass(frozen=True)
class IPv4PseudoHeader:
    """The IPv4 fields that take part in transport checksums and flow keys."""

    source: bytes
    destination: bytes
    protocol: int
    length: int
    version: ClassVar[int] = 4

    def __post_init__(self) -> None:
        if len(self.source) != 4 or len(self.destination) != 4:
            raise ValueError("IPv4 addresses must be 4 bytes long")

    def sum16(self) -> int:
        """Folded one's complement sum of the pseudo header."""
        return ones_complement_sum(self.source + self.destination, self.length + self.protocol)


@dataclass(frozen=True)
class IPv6PseudoHeader:
    """The IPv6 fields that take part in transport checksums and flow keys."""

    source: bytes
    destination: bytes
    next_header: int
    length: int
    version: ClassVar[int] = 6

    def __post_init__(self) -> None:
        if len(self.source) != 16 or len(self.destination) != 16:
            raise ValueError("IPv6 addresses must be 16 bytes long")

    def sum16(self) -> int:
        """Folded one's complement sum of the pseudo header."""
        return ones_complement_sum(self.source + self.destination, self.length + self.next_header)


PseudoHeader = Union[IPv4PseudoHeader, IPv6PseudoHeader]
Dissector = Callable[["Packet"], None]


@dataclass
class Packet:
    """A view on the bytes of one protocol layer and the context to print it."""

    data: bytes
    verbosity: Verbosity = Verbosity.HIGH
    pseudo_header: Optional[PseudoHeader] = None
    packet_index: int = 0
    out: Optional[TextIO] = None
    applications: Mapping[tuple[str, int], Dissector] = dc_field(default_factory=dict)
    application_names: Mapping[tuple[str, int], str] = dc_field(default_factory=dict)
    fallback: Optional[Dissector] = None

    def emit(self, text: str) -> None:
        """Write ``text`` as is to the output stream."""
        (sys.stdout if self.out is None else self.out).write(text)

    def field(self, label: str, value: object) -> None:
        """Write one aligned ``label = value`` line."""
        self.emit(f"{label:<{LABEL_WIDTH}} = {value}\n")

    def require(self, end: int) -> None:
        """Raise BufferOverflowError unless the data reaches offset ``end``."""
        if end > len(self.data):
            raise BufferOverflowError(f"need {end} bytes, only {len(self.data)} available")

    def port_name(self, transport: str, port: int) -> str:
        """Name of the application known to use ``port`` over ``transport``."""
        return self.application_names.get((transport, port), "Unknown")

    def dump_payload(self, transport: str, source_port: int, destination_port: int) -> None:
        """Hand this packet to the application matching the source, else the destination port."""
        handler = (
            self.applications.get((transport, source_port))
            or self.applications.get((transport, destination_port))
            or self.fallback
            or _dump_raw
        )
        handler(self)


def _dump_raw(packet: Packet) -> None:
    if packet.data and packet.verbosity >= Verbosity.HIGH:
        packet.field("Data", hex_bytes(packet.data))