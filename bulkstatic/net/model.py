# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/model.py
"""
Network model for static address assignment.

This file intentionally contains only value types:
- WorkloadKind (container / VM) with its per-kind config conventions
- SubnetSpec / TargetAddress / NetworkIntent / ResolvedConfig
- ResolutionOutcome (Resolved | Unresolved) and InterfaceAddress
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

# Conventional name of the primary interface inside a guest.
PRIMARY_INTERFACE = "eth0"

# Sentinel value of `ip=` meaning "obtain address dynamically".
DHCP_SENTINEL = "dhcp"

SUPPORTED_PREFIX_LENGTHS = (8, 16, 24, 32)


class WorkloadKind(Enum):
    """Kinds of workloads managed by the hypervisor."""

    CONTAINER = "lxc"
    VM = "qemu"

    @property
    def label(self) -> str:
        return "LXC" if self is WorkloadKind.CONTAINER else "VM"

    @property
    def config_dir(self) -> str:
        """Directory (relative to the pve root) holding <vmid>.conf files."""
        return "lxc" if self is WorkloadKind.CONTAINER else "qemu-server"

    @property
    def tool(self) -> str:
        return "pct" if self is WorkloadKind.CONTAINER else "qm"

    @property
    def interface_key(self) -> str:
        """Config key of the line carrying ip=/gw= for the primary interface."""
        return "net0" if self is WorkloadKind.CONTAINER else "ipconfig0"

    @property
    def stop_flags(self) -> Tuple[str, ...]:
        return () if self is WorkloadKind.CONTAINER else ("--skiplock",)


@dataclass(frozen=True)
class SubnetSpec:
    """Octet-aligned subnet: the leading octets every member shares."""

    prefix_octets: Tuple[int, ...]
    prefix_length: int

    def __post_init__(self) -> None:
        if self.prefix_length not in SUPPORTED_PREFIX_LENGTHS:
            raise ValueError(
                f"only octet-aligned netmasks {', '.join('/%d' % n for n in SUPPORTED_PREFIX_LENGTHS)} are supported, got /{self.prefix_length}"
            )
        if len(self.prefix_octets) != self.prefix_length // 8:
            raise ValueError(f"/{self.prefix_length} needs {self.prefix_length // 8} prefix octets, got {len(self.prefix_octets)}")
        if any(not 0 <= o <= 255 for o in self.prefix_octets):
            raise ValueError(f"prefix octets out of range: {self.prefix_octets}")

    @classmethod
    def from_gateway(cls, gateway: str, prefix_length: int) -> "SubnetSpec":
        octets = parse_octets(gateway)
        if octets is None:
            raise ValueError(f"invalid IPv4 gateway: {gateway!r}")
        return cls(prefix_octets=octets[: prefix_length // 8], prefix_length=prefix_length)

    @property
    def prefix(self) -> str:
        """Dotted prefix as shown to operators, e.g. '192.168.0'."""
        return ".".join(str(o) for o in self.prefix_octets)

    def __str__(self) -> str:
        host_part = [0] * (4 - len(self.prefix_octets))
        return ".".join(str(o) for o in (*self.prefix_octets, *host_part)) + f"/{self.prefix_length}"


@dataclass(frozen=True)
class TargetAddress:
    octets: Tuple[int, int, int, int]
    prefix_length: int

    @classmethod
    def parse(cls, address: str, prefix_length: int) -> "TargetAddress":
        octets = parse_octets(address)
        if octets is None:
            raise ValueError(f"invalid IPv4 address: {address!r}")
        return cls(octets=octets, prefix_length=prefix_length)  # type: ignore[arg-type]

    @property
    def address(self) -> str:
        return ".".join(str(o) for o in self.octets)

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix_length}"

    def __str__(self) -> str:
        return self.cidr


@dataclass(frozen=True)
class NetworkIntent:
    """The single desired network state applied to every workload in a run."""

    gateway: str
    subnet: SubnetSpec

    @classmethod
    def build(cls, gateway: str, prefix_length: int) -> "NetworkIntent":
        return cls(gateway=gateway, subnet=SubnetSpec.from_gateway(gateway, prefix_length))

    @property
    def netmask(self) -> str:
        return f"/{self.subnet.prefix_length}"

    def target_for(self, address: str) -> "ResolvedConfig":
        return ResolvedConfig(
            address=TargetAddress.parse(address, self.subnet.prefix_length),
            gateway=self.gateway,
        )


@dataclass(frozen=True)
class ResolvedConfig:
    """Address/prefix plus gateway, as stored on an interface line."""

    address: TargetAddress
    gateway: Optional[str]


class ResolutionSource(Enum):
    TAG = "tag"
    LIVE = "live"


class UnresolvedReason(Enum):
    NO_TAG_MATCH = "no tag in subnet"
    WORKLOAD_NOT_RUNNING = "workload not running"
    NO_GUEST_AGENT = "guest agent unavailable"
    NO_MATCHING_INTERFACE = "no address in subnet on primary interface"


@dataclass(frozen=True)
class Resolved:
    address: str
    source: ResolutionSource = ResolutionSource.TAG


@dataclass(frozen=True)
class Unresolved:
    reason: UnresolvedReason


ResolutionOutcome = Union[Resolved, Unresolved]


@dataclass(frozen=True)
class InterfaceAddress:
    """One address of one interface, as reported by `ip addr` or the guest agent."""

    name: str
    family: str  # "ipv4" | "ipv6"
    address: str
    prefix_length: Optional[int] = None


@dataclass
class Workload:
    """
    One container or VM. raw_config_text is the only mutable copy of the
    config until the store persists it.
    """

    vmid: str
    kind: WorkloadKind
    config_path: Path
    raw_config_text: str = field(default="", repr=False)


def parse_octets(value: str) -> Optional[Tuple[int, ...]]:
    """Return the four octets of a dotted-quad IPv4 literal, or None."""
    try:
        ip = ipaddress.IPv4Address((value or "").strip())
    except ValueError:
        return None
    return tuple(ip.packed)
