"""Reassembly of TCP segments into application messages, one flow at a time."""

from __future__ import annotations

import bisect
import itertools
from dataclasses import dataclass, field
from typing import Optional

from .core import DataUnavailableError, Packet


@dataclass
class TcpSegment:
    """The payload of one TCP segment waiting for reassembly."""

    seq: int
    data: bytes
    index: int = 0
    syn: bool = False
    psh: bool = False

    @property
    def next_seq(self) -> int:
        """Sequence number expected right after this segment."""
        return self.seq + len(self.data) + (1 if self.syn else 0)


@dataclass
class TcpStream:
    """The segments received for one direction of a connection, sorted by sequence."""

    source_port: int
    destination_port: int
    source: Optional[bytes] = None
    destination: Optional[bytes] = None
    segments: list[TcpSegment] = field(default_factory=list)

    def insert(self, segment: TcpSegment) -> None:
        """Insert ``segment`` after every segment whose sequence is not higher.

        Segments that carry no data and no SYN flag are ignored.
        """
        if not segment.data and not segment.syn:
            return
        position = bisect.bisect_right(self.segments, segment.seq, key=lambda item: item.seq)
        self.segments.insert(position, segment)

    def complete_index(self) -> Optional[int]:
        """Index of the first segment of a message ready to reassemble, or None."""
        if not self.segments:
            return None
        found = True
        saved = 0
        for index, (current, following) in enumerate(itertools.pairwise(self.segments)):
            if current.syn:
                saved = index
                found = True
            if current.psh and found:
                return saved
            if current.next_seq != following.seq:
                found = False
        return saved if self.segments[-1].psh and found else None

    def reassemble(self, start: int) -> tuple[bytes, list[int]]:
        """Join the segments from ``start`` up to the first one carrying PSH.

        Every segment up to and including the last one used is dropped from
        the stream. Returns the joined bytes and the packet indices they came from.
        """
        if not self.segments:
            raise DataUnavailableError("no segments stored for this flow")
        if not 0 <= start < len(self.segments):
            raise DataUnavailableError(f"no segment at position {start}")

        end = start
        while end < len(self.segments) - 1 and not self.segments[end].psh:
            end += 1

        used = self.segments[start:end + 1]
        del self.segments[:end + 1]
        return b"".join(segment.data for segment in used), [segment.index for segment in used]


_FlowKey = tuple[Optional[int], Optional[bytes], Optional[bytes], int, int]


@dataclass
class TcpReassembler:
    """All TCP flows seen so far, keyed by addresses and ports."""

    streams: dict[_FlowKey, TcpStream] = field(default_factory=dict)

    def stream(self, packet: Packet, source_port: int, destination_port: int) -> TcpStream:
        """Find the flow the packet belongs to, creating it when it is new."""
        pseudo = packet.pseudo_header
        source = pseudo.source if pseudo is not None else None
        destination = pseudo.destination if pseudo is not None else None
        version = pseudo.version if pseudo is not None else None
        key = (version, source, destination, source_port, destination_port)
        found = self.streams.get(key)
        if found is None:
            found = TcpStream(source_port, destination_port, source, destination)
            self.streams[key] = found
        return found