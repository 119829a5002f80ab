# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/cli/args/validators.py
from __future__ import annotations

import argparse
import ipaddress
from typing import Any, Dict

from ...net.model import SUPPORTED_PREFIX_LENGTHS, WorkloadKind, parse_octets


def _require(v: Any) -> bool:
    """True if v is meaningfully present (treats empty/whitespace-only strings as missing)."""
    if v is None:
        return False
    if isinstance(v, str):
        return v.strip() != ""
    return True


def parse_netmask(value: Any) -> int:
    """
    Accept `/24`, `24` or a dotted mask `255.255.255.0`; return the prefix length.
    Raises ValueError for anything else.
    """
    s = str(value).strip()
    if s.startswith("/"):
        s = s[1:]
    if s.isdigit():
        n = int(s)
        if not 0 <= n <= 32:
            raise ValueError(f"prefix length out of range: /{n}")
        return n
    try:
        return ipaddress.IPv4Network(f"0.0.0.0/{s}").prefixlen
    except ValueError:
        raise ValueError(f"netmask must be in CIDR form (e.g. /24) or a dotted mask, got {value!r}")


def _validate_network_intent(args: argparse.Namespace) -> None:
    if getattr(args, "auto", False):
        return

    if not (_require(getattr(args, "gateway", None)) and _require(getattr(args, "netmask", None))):
        raise SystemExit("Error: both --gateway and --netmask are required (or use --auto).")

    gw = str(args.gateway).strip()
    if parse_octets(gw) is None:
        raise SystemExit(f"Error: invalid gateway address: {gw!r}")
    args.gateway = gw

    try:
        plen = parse_netmask(args.netmask)
    except ValueError as e:
        raise SystemExit(f"Error: {e}")
    if plen not in SUPPORTED_PREFIX_LENGTHS:
        aligned = ", ".join(f"/{n}" for n in SUPPORTED_PREFIX_LENGTHS)
        raise SystemExit(f"Error: only octet-aligned netmasks ({aligned}) are supported.")
    args.netmask = plen


def _validate_knobs(args: argparse.Namespace) -> None:
    # YAML-supplied defaults bypass argparse `choices`/`type`, so check them here
    only = getattr(args, "only", None)
    if _require(only):
        allowed = [k.value for k in WorkloadKind]
        if str(only) not in allowed:
            raise SystemExit(f"Error: --only must be one of {', '.join(allowed)}, got {only!r}")

    timeout = getattr(args, "guest_agent_timeout", None)
    try:
        t = float(timeout)
    except (TypeError, ValueError):
        raise SystemExit(f"Error: --guest-agent-timeout must be a number, got {timeout!r}")
    if t <= 0:
        raise SystemExit("Error: --guest-agent-timeout must be positive.")
    args.guest_agent_timeout = t

    if not _require(getattr(args, "interface", None)):
        raise SystemExit("Error: --interface must not be empty.")


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    """
    Normalise and validate the final namespace in place (no side effects).
    After this, args.netmask is an int prefix length unless --auto is set.
    """
    _validate_network_intent(args)
    _validate_knobs(args)
