[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blahajdissect"
version = "0.1.0"
description = "Dissectors for TCP, UDP, ICMP, ICMPv6, IGMP and OSPF packets and SCTP chunks, with checksum validation and reassembly"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "network",
    "packet",
    "dissector",
    "tcp",
    "udp",
    "sctp",
    "icmp",
    "icmpv6",
    "igmp",
    "ospf",
    "reassembly",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["blahajdissect"]

[tool.hatch.build.targets.sdist]
include = ["blahajdissect", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
