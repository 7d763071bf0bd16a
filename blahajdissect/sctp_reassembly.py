"""Reassembly of fragmented SCTP user messages, one stream at a time."""

from __future__ import annotations

import bisect
import itertools
from dataclasses import dataclass, field
from typing import Optional

from .core import DataUnavailableError, Packet


@dataclass
class SctpFragment:
    """One DATA chunk payload waiting for reassembly."""

    tsn: int
    data: bytes
    index: int = 0
    flag_e: bool = False
    flag_b: bool = False
    flag_u: bool = False


@dataclass
class SctpStream:
    """The fragments received for one association stream, sorted by TSN."""

    source_port: int
    destination_port: int
    stream_id: int
    source: Optional[bytes] = None
    destination: Optional[bytes] = None
    fragments: list[SctpFragment] = field(default_factory=list)

    def insert(self, fragment: SctpFragment) -> None:
        """Insert ``fragment`` before the first fragment whose TSN is not lower."""
        position = bisect.bisect_left(self.fragments, fragment.tsn, key=lambda item: item.tsn)
        self.fragments.insert(position, fragment)

    def complete_index(self) -> Optional[int]:
        """Index of the first fragment of a message ready to reassemble, or None."""
        if not self.fragments:
            return None
        if self.fragments[0].flag_u:
            return 0
        found = True
        saved = 0
        for index, (current, following) in enumerate(itertools.pairwise(self.fragments)):
            if current.flag_u:
                return index
            if current.flag_b:
                saved = index
                found = True
            if current.flag_e and found:
                return saved
            if current.tsn + 1 != following.tsn:
                found = False
        last = self.fragments[-1]
        return saved if last.flag_e or last.flag_u else None

    def reassemble(self, start: int) -> tuple[bytes, list[int]]:
        """Join the fragments from ``start`` to the end of their message.

        Every fragment up to and including the last one used is dropped from
        the stream. Returns the joined bytes and the packet indices they came from.
        """
        if not self.fragments:
            raise DataUnavailableError("no fragments stored for this stream")
        if not 0 <= start < len(self.fragments):
            raise DataUnavailableError(f"no fragment at position {start}")

        end = start
        while end < len(self.fragments) - 1:
            fragment = self.fragments[end]
            if fragment.flag_e or fragment.flag_u:
                break
            end += 1

        used = self.fragments[start:end + 1]
        del self.fragments[:end + 1]
        return b"".join(fragment.data for fragment in used), [fragment.index for fragment in used]


_FlowKey = tuple[Optional[int], Optional[bytes], Optional[bytes], int, int, int]


@dataclass
class SctpReassembler:
    """All SCTP streams seen so far, keyed by addresses, ports and stream id."""

    streams: dict[_FlowKey, SctpStream] = field(default_factory=dict)

    def stream(
        self,
        packet: Packet,
        source_port: int,
        destination_port: int,
        stream_id: int,
        create: bool,
    ) -> Optional[SctpStream]:
        """Find the stream the packet belongs to, creating it if asked to."""
        pseudo = packet.pseudo_header
        source = pseudo.source if pseudo is not None else None
        destination = pseudo.destination if pseudo is not None else None
        version = pseudo.version if pseudo is not None else None
        key = (version, source, destination, source_port, destination_port, stream_id)
        found = self.streams.get(key)
        if found is None and create:
            found = SctpStream(source_port, destination_port, stream_id, source, destination)
            self.streams[key] = found
        return found