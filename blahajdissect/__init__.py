"""Dissectors for TCP, UDP, ICMP, ICMPv6, IGMP and OSPF packets and SCTP chunks, with checksum validation and reassembly."""

__version__ = "0.1.0"