# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/matcher.py
"""
Subnet membership and address extraction.

Subnets are octet-aligned, so membership is decided by comparing whole
octets rather than applying a bit mask.
"""
from __future__ import annotations

import json
import re
from typing import Any, Iterable, List, Optional, Sequence

from .model import InterfaceAddress, SubnetSpec, parse_octets

# "2: eth0@if12: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 ..."
_IP_ADDR_HEADER_RE = re.compile(r"^\d+:\s+(?P<name>[^:@\s]+)(?:@\S+)?:\s")
# "    inet 192.168.0.42/24 brd 192.168.0.255 scope global eth0"
_IP_ADDR_INET_RE = re.compile(r"^\s+(?P<fam>inet6?)\s+(?P<addr>[0-9A-Fa-f:.]+)(?:/(?P<plen>\d+))?")


class AddressMatcher:
    @staticmethod
    def matches(candidate: str, subnet: SubnetSpec) -> bool:
        octets = parse_octets(candidate)
        if octets is None:
            return False
        n = subnet.prefix_length // 8
        return tuple(octets[:n]) == tuple(subnet.prefix_octets)

    @staticmethod
    def extract_from_tag_list(tags: Sequence[str], subnet: SubnetSpec) -> Optional[str]:
        for tag in tags:
            t = (tag or "").strip()
            if t and AddressMatcher.matches(t, subnet):
                return t
        return None

    @staticmethod
    def extract_from_interface_list(
        interfaces: Iterable[InterfaceAddress],
        subnet: SubnetSpec,
        interface_name: str,
    ) -> Optional[str]:
        for ifa in interfaces:
            if ifa.name != interface_name or ifa.family != "ipv4":
                continue
            if AddressMatcher.matches(ifa.address, subnet):
                return ifa.address
        return None


def parse_ip_addr_output(text: str) -> List[InterfaceAddress]:
    """
    Parse `ip addr show` text output into interface/address pairs.

    Address lines are attributed to the most recent interface header, so
    the output of `ip -4 addr show eth0` and of a full `ip addr` both work.
    """
    out: List[InterfaceAddress] = []
    current: Optional[str] = None
    for line in (text or "").splitlines():
        h = _IP_ADDR_HEADER_RE.match(line)
        if h:
            current = h.group("name")
            continue
        m = _IP_ADDR_INET_RE.match(line)
        if not m or current is None:
            continue
        plen = m.group("plen")
        out.append(
            InterfaceAddress(
                name=current,
                family="ipv6" if m.group("fam") == "inet6" else "ipv4",
                address=m.group("addr"),
                prefix_length=int(plen) if plen is not None else None,
            )
        )
    return out


def _agent_prefix(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"malformed prefix: {value!r}")
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"malformed prefix: {value!r}") from e


def parse_guest_agent_interfaces(payload: Any) -> List[InterfaceAddress]:
    """
    Parse the guest agent's `network-get-interfaces` reply.

    Accepts the decoded JSON or its raw text. Raises ValueError when the
    payload is empty or not a list of interface objects.
    """
    if isinstance(payload, (str, bytes)):
        if not payload.strip():
            raise ValueError("empty guest agent reply")
        payload = json.loads(payload)

    # qm guest cmd prints the list; the raw QMP form wraps it in "return"
    if isinstance(payload, dict) and "return" in payload:
        payload = payload["return"]

    if not isinstance(payload, list) or not payload:
        raise ValueError("guest agent reply is not a non-empty interface list")

    out: List[InterfaceAddress] = []
    for iface in payload:
        if not isinstance(iface, dict) or "name" not in iface:
            raise ValueError(f"malformed interface entry: {iface!r}")
        addrs = iface.get("ip-addresses") or []
        if not isinstance(addrs, list):
            raise ValueError(f"malformed ip-addresses of {iface['name']!r}: {addrs!r}")
        for addr in addrs:
            if not isinstance(addr, dict):
                raise ValueError(f"malformed address entry: {addr!r}")
            family = addr.get("ip-address-type") or addr.get("family") or ""
            ip = addr.get("ip-address")
            if not ip:
                continue
            prefix = _agent_prefix(addr.get("prefix"))
            out.append(
                InterfaceAddress(
                    name=str(iface["name"]),
                    family=str(family).lower(),
                    address=str(ip),
                    prefix_length=prefix,
                )
            )
    return out
