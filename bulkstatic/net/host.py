# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/host.py
"""Detect gateway and netmask from the host's default route (--auto)."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.exceptions import Fatal
from ..core.utils import U
from .matcher import parse_ip_addr_output


@dataclass(frozen=True)
class DefaultRoute:
    gateway: str
    device: str


def parse_default_route(text: str) -> Optional[DefaultRoute]:
    """
    First `default via <gw> dev <iface> ...` line of `ip route` output.
    """
    for line in (text or "").splitlines():
        words: List[str] = line.split()
        if not words or words[0] != "default":
            continue
        gw = words[words.index("via") + 1] if "via" in words[:-1] else None
        dev = words[words.index("dev") + 1] if "dev" in words[:-1] else None
        if gw and dev:
            return DefaultRoute(gateway=gw, device=dev)
    return None


def first_ipv4_prefix_length(ip_addr_text: str, device: str) -> Optional[int]:
    for ifa in parse_ip_addr_output(ip_addr_text):
        if ifa.name == device and ifa.family == "ipv4" and ifa.prefix_length is not None:
            return ifa.prefix_length
    return None


class HostNetworkDetector:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _ip(self, *args: str) -> str:
        try:
            cp = U.run_cmd(self.logger, ["ip", *args], capture=True)
        except (subprocess.CalledProcessError, OSError) as e:
            raise Fatal(1, f"Cannot auto-detect: `ip {' '.join(args)}` failed", cause=e)
        return cp.stdout or ""

    def detect(self) -> Tuple[str, int]:
        """Return (gateway, prefix_length) or raise Fatal."""
        route = parse_default_route(self._ip("route", "show", "default"))
        if route is None:
            raise Fatal(1, "Cannot auto-detect - no default route found.")

        plen = first_ipv4_prefix_length(self._ip("-4", "addr", "show", "dev", route.device), route.device)
        if plen is None:
            raise Fatal(1, f"Auto-detection failed. Gateway: {route.gateway}, Netmask: unknown on {route.device}")

        self.logger.info("Auto-detected: gateway=%s, netmask=/%d (dev %s)", route.gateway, plen, route.device)
        return route.gateway, plen
