# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/__init__.py
"""
bulkstatic - bulk static IP assignment for Proxmox VE

Pins every LXC container (net0) and QEMU VM (cloud-init ipconfig0) on a
node to a static address inside the gateway's subnet. The address comes
from the workload's tags when one matches, otherwise from the running
guest itself.

Usage as a library:

    from bulkstatic.net import ConfigMutator, NetworkIntent, WorkloadKind

    intent = NetworkIntent.build("192.168.0.1", 24)
    new_text = ConfigMutator.apply(text, intent.target_for("192.168.0.42"), WorkloadKind.VM)
"""

__version__ = "0.3.0"
