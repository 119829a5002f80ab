# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/cli/help_texts.py
from __future__ import annotations

# NOTE:
# Pure help text for the argparse epilog; keep it importable without side effects.

YAML_EXAMPLE = r"""# bulkstatic configuration (YAML)
#
# Run:
# sudo bulkstatic --config site.yaml
#
# Merge multiple configs (later overrides earlier, CLI flags override both):
# sudo bulkstatic --config base.yaml --config rack2.yaml --dry-run
#
# Keys mirror the long option names (dashes or underscores both work):
gateway: 192.168.0.1
netmask: /24 # /24, 24 or 255.255.255.0; octet-aligned only
# auto: true # detect gateway/netmask from the host's default route instead
dry_run: false
yes: false # skip the confirmation prompt
tags_only: false # never query running guests
interface: eth0
pve_root: /etc/pve
# only: lxc # or qemu
guest_agent_timeout: 10
verbose: 0
# log_file: /var/log/bulkstatic.log
# json_logs: false
"""

FEATURE_SUMMARY = """ • Targets: LXC containers (net0) and QEMU VMs (cloud-init ipconfig0)\n
 • Address source: first tag inside the gateway's subnet, else the live guest address\n
 • Live lookup: `pct exec ... ip -4 addr` for containers, QEMU guest agent for VMs\n
 • Idempotent: workloads already carrying the desired ip/gw are skipped\n
 • Safety: dry-run diff, confirmation prompt, .bak.static backup before every write\n
 • Restart: running workloads are stopped and started after their config changes\n
"""

EXIT_CODES = """ 0  success, nothing to do, or aborted at the prompt\n
 1  invalid arguments or missing host prerequisites\n
 2  run finished but at least one workload failed\n
 130  interrupted (Ctrl+C)\n
"""
