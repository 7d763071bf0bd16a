# blahajdissect

Human-readable dissection of transport-layer packets. Given the bytes of a
transport segment, and optionally the IP pseudo-header it travelled under,
each dissector prints the fields at one of three verbosity levels, checks
checksums, and reassembles TCP streams and SCTP data fragments.

The package has no dependencies outside the standard library.

## Dissectors

| Protocol     | Function                                   |
|--------------|--------------------------------------------|
| TCP          | `blahajdissect.tcp.dump_tcp(packet, reassembler)` |
| UDP          | `blahajdissect.udp.dump_udp(packet)`       |
| ICMP         | `blahajdissect.icmp.dump_icmp(packet)`     |
| ICMPv6       | `blahajdissect.icmp6.dump_icmp6(packet)`   |
| IGMP / RGMP  | `blahajdissect.igmp.dump_igmp(packet)`     |
| OSPFv2 / v3  | `blahajdissect.ospf.dump_ospf(packet)`     |
| SCTP chunks  | `blahajdissect.sctp_chunks.dump_chunks(packet, offset, source_port, destination_port, reassembler)` |

The inner structures can also be dissected on their own:

- `blahajdissect.tcp_options.dump_tcp_options(packet, offset, end)`
- `blahajdissect.sctp_params.dump_parameter(packet, offset, header)`, which
  returns the padded length of the parameter
- `blahajdissect.ospf_v2` (`dump_v2_hello`, `dump_v2_dd`, `dump_v2_lsr`,
  `dump_v2_lsu`, `dump_v2_lsack`, `dump_v2`)
- `blahajdissect.ospf_v3` (`dump_v3_lsa_header`, `dump_v3_hello`,
  `dump_v3_dd`, `dump_v3_lsr`, `dump_v3_lsu`, `dump_v3`)
- `blahajdissect.ospf_lsa` (`dump_v2_lsa_header`, `dump_router_lsa`,
  `dump_network_lsa`, `dump_summary_lsa`, `dump_as_external_lsa`)

Name lookups: `icmp.control_message`, `icmp.unreachable_message`,
`icmp6.control_message`, `icmp6.unreachable_message`,
`igmp.igmp_type_name`, `ospf.packet_type_name`, `tcp_options.option_name`,
`sctp_params.parameter_type_name` and `sctp_chunks.chunk_type_name`.
Unknown values give `"Unknown"` (ICMP gives `"Reserved / deprecated"`).

## The packet

`blahajdissect.core.Packet` carries what a dissector needs:

- `data`: the bytes of the current layer
- `verbosity`: `Verbosity.LOW`, `MEDIUM` or `HIGH` (the default)
- `pseudo_header`: an `IPv4PseudoHeader` or `IPv6PseudoHeader`, or `None`;
  it takes part in the TCP, UDP, ICMPv6 and OSPFv3 checksums and in the
  keys of the reassembly tables
- `packet_index`: the number of the packet, reported when segments are
  joined
- `out`: a text stream to write to; standard output when `None`
- `applications`: a mapping from `("tcp" | "udp", port)` to a dissector for
  the payload; `Packet.dump_payload` tries the source port, then the
  destination port, then `fallback`, and otherwise prints the payload as hex
  at high verbosity
- `application_names`: a mapping from `("tcp" | "udp", port)` to the name
  printed next to a port
- `fallback`: a dissector for payloads no application claims; ICMPv6 also
  hands it the packet embedded in a destination-unreachable message

At low verbosity a dissector prints a short tag such as `> UDP `, at medium
verbosity a one-line summary, and at high verbosity one field per line with
the label padded to 45 characters. Checksums are followed by `[Correct]`,
`[Incorrect]`, or, for a zero TCP or UDP checksum, `[Unset]`.

```python
import io

from blahajdissect.core import Packet, Verbosity
from blahajdissect.udp import dump_udp

out = io.StringIO()
segment = bytes.fromhex("0035 04d2 000c 0000") + b"ping"
dump_udp(Packet(segment, verbosity=Verbosity.MEDIUM, out=out))
out.getvalue()  # "UDP => Source port : 53, Destination port : 1234\n"
```

## Reassembly

`dump_tcp` stores each payload in a `tcp_reassembly.TcpReassembler`, keyed
by addresses and ports. A message is released, and handed on with
`dump_payload`, once contiguous segments end with one carrying PSH;
until then `[Received partial packet, saved for later]` is printed. Keep
one reassembler for the whole capture.

`dump_chunks` stores DATA chunk payloads in an
`sctp_reassembly.SctpReassembler`, keyed by addresses, ports and stream
identifier. It does not release them: look a stream up with
`SctpReassembler.stream(...)`, then call `SctpStream.complete_index()` and
`SctpStream.reassemble(start)` to get the joined bytes and the packet
indices they came from.

## Errors

Truncated or inconsistent input raises a subclass of `core.DissectError`:
`BufferOverflowError`, `InvalidValuesError` or `DataUnavailableError`.

## Helpers

`core.ones_complement_sum`, `core.checksum_status`, `core.ipv4_to_str`,
`core.ipv6_to_str` and `core.hex_bytes`.

## What it does not do

- It has no command and does not capture packets or read capture files; it
  works on bytes you pass in.
- It does not pick a dissector from an IP protocol number; call the
  function for the protocol you have.
- It does not decode the SCTP common header (ports, verification tag,
  checksum) nor hand reassembled SCTP messages on by itself; it dissects
  the chunk list that follows the header.
- OSPFv3 link state updates show only their LSA headers.