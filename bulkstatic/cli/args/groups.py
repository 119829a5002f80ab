# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/cli/args/groups.py
from __future__ import annotations

import argparse

from ...net.model import PRIMARY_INTERFACE, WorkloadKind
from ...net.resolver import GUEST_AGENT_TIMEOUT_S
from ...pve.store import DEFAULT_PVE_ROOT


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON log records on stderr.")


def _add_network_intent(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Desired network state (explicit or auto-detected)
    # ------------------------------------------------------------------
    g = p.add_argument_group("network")
    g.add_argument("-g", "--gateway", dest="gateway", default=None, help="Gateway IP, e.g. 192.168.0.1")
    g.add_argument(
        "-n",
        "--netmask",
        dest="netmask",
        default=None,
        help="Netmask: /24, 24 or 255.255.255.0 (octet-aligned only).",
    )
    g.add_argument(
        "-a",
        "--auto",
        dest="auto",
        action="store_true",
        help="Auto-detect gateway and netmask from the host's default route.",
    )


def _add_run_control(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------
    g = p.add_argument_group("run control")
    g.add_argument("-d", "--dry-run", dest="dry_run", action="store_true", help="Show what would be done without changing anything.")
    g.add_argument("-y", "--yes", dest="yes", action="store_true", help="Do not ask for confirmation.")
    g.add_argument(
        "--only",
        dest="only",
        default=None,
        choices=[k.value for k in WorkloadKind],
        help="Limit the run to containers (lxc) or VMs (qemu).",
    )
    g.add_argument("--pve-root", dest="pve_root", default=str(DEFAULT_PVE_ROOT), help="Proxmox config root.")


def _add_resolution_knobs(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Address resolution
    # ------------------------------------------------------------------
    g = p.add_argument_group("address resolution")
    g.add_argument(
        "--tags-only",
        dest="tags_only",
        action="store_true",
        help="Only use IPs from workload tags; never query running guests.",
    )
    g.add_argument(
        "--interface",
        dest="interface",
        default=PRIMARY_INTERFACE,
        help="Guest interface whose live address is used.",
    )
    g.add_argument(
        "--guest-agent-timeout",
        dest="guest_agent_timeout",
        type=float,
        default=GUEST_AGENT_TIMEOUT_S,
        help="Seconds to wait for the QEMU guest agent.",
    )
