# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for the interface-line rewrite."""
from __future__ import annotations

import pytest

from bulkstatic.core.exceptions import ConfigMalformed
from bulkstatic.net.comparator import ComparisonResult, ConfigStateComparator
from bulkstatic.net.model import NetworkIntent, WorkloadKind
from bulkstatic.net.mutator import ConfigMutator

CT = WorkloadKind.CONTAINER
VM = WorkloadKind.VM
DESIRED = NetworkIntent.build("10.0.0.1", 24).target_for("10.0.0.5")


@pytest.mark.unit
class TestContainerRewrite:
    def test_dhcp_becomes_static_in_place(self):
        text = "net0:name=eth0,bridge=vmbr0,ip=dhcp,firewall=1"
        out = ConfigMutator.apply(text, DESIRED, CT)
        assert out == "net0:name=eth0,bridge=vmbr0,ip=10.0.0.5/24,gw=10.0.0.1,firewall=1"

    def test_existing_static_is_replaced(self):
        text = "arch: amd64\nnet0: name=eth0,bridge=vmbr0,gw=10.9.9.1,hwaddr=AA,ip=10.9.9.9/16,type=veth\nswap: 512\n"
        out = ConfigMutator.apply(text, DESIRED, CT)
        assert out == "arch: amd64\nnet0: name=eth0,bridge=vmbr0,hwaddr=AA,ip=10.0.0.5/24,gw=10.0.0.1,type=veth\nswap: 512\n"

    def test_duplicate_gateways_collapse(self):
        text = "net0: name=eth0,ip=10.0.0.5/24,gw=10.0.0.1,gw=10.0.0.254,gw=10.0.0.1\n"
        out = ConfigMutator.apply(text, DESIRED, CT)
        assert out == "net0: name=eth0,ip=10.0.0.5/24,gw=10.0.0.1\n"
        assert out.count("gw=") == 1

    def test_other_lines_and_snapshots_untouched(self):
        text = (
            "description: gw=1.1.1.1 ip=dhcp\n"
            "net0: name=eth0,ip=dhcp\n"
            "net1: name=eth1,ip=dhcp,gw=172.16.0.1\n"
            "\n"
            "[snap]\n"
            "net0: name=eth0,ip=dhcp,gw=192.168.9.1\n"
        )
        out = ConfigMutator.apply(text, DESIRED, CT)
        lines = out.splitlines()
        assert lines[0] == "description: gw=1.1.1.1 ip=dhcp"
        assert lines[1] == "net0: name=eth0,ip=10.0.0.5/24,gw=10.0.0.1"
        assert lines[2:] == text.splitlines()[2:]

    def test_ipv6_tokens_survive(self):
        text = "net0: name=eth0,ip=dhcp,ip6=auto,gw6=fe80::1\n"
        out = ConfigMutator.apply(text, DESIRED, CT)
        assert out == "net0: name=eth0,ip=10.0.0.5/24,gw=10.0.0.1,ip6=auto,gw6=fe80::1\n"

    def test_idempotent(self):
        text = "net0: name=eth0,bridge=vmbr0,ip=dhcp,type=veth\n"
        once = ConfigMutator.apply(text, DESIRED, CT)
        assert ConfigMutator.apply(once, DESIRED, CT) == once
        assert ConfigStateComparator.compare(once, DESIRED, CT) is ComparisonResult.ALREADY_CORRECT


@pytest.mark.unit
class TestVmRewrite:
    def test_ipconfig_rewrite(self):
        desired = NetworkIntent.build("192.168.0.1", 24).target_for("192.168.0.42")
        text = "net0: virtio=AA,bridge=vmbr0\nipconfig0: ip=dhcp\n"
        out = ConfigMutator.apply(text, desired, VM)
        assert out == "net0: virtio=AA,bridge=vmbr0\nipconfig0: ip=192.168.0.42/24,gw=192.168.0.1\n"

    def test_ipconfig_is_seeded_after_last_nic(self):
        text = "boot: order=scsi0\nnet0: virtio=AA,bridge=vmbr0\nnet1: virtio=BB,bridge=vmbr1\nostype: l26\n"
        out = ConfigMutator.apply(text, DESIRED, VM)
        assert out == (
            "boot: order=scsi0\n"
            "net0: virtio=AA,bridge=vmbr0\n"
            "net1: virtio=BB,bridge=vmbr1\n"
            "ipconfig0: ip=10.0.0.5/24,gw=10.0.0.1\n"
            "ostype: l26\n"
        )

    def test_vm_net0_is_never_touched(self):
        text = "net0: virtio=AA,bridge=vmbr0\nipconfig0: ip=10.1.1.1/24,gw=10.1.1.254\n"
        out = ConfigMutator.apply(text, DESIRED, VM)
        assert out.splitlines()[0] == "net0: virtio=AA,bridge=vmbr0"


@pytest.mark.unit
class TestMalformed:
    @pytest.mark.parametrize(
        "text,kind",
        [
            ("hostname: ct\n", CT),
            ("net0: name=eth0,bridge=vmbr0\n", CT),
            ("net0: name=eth0,ip=manual\n", CT),
            ("ostype: l26\n", VM),
            ("ipconfig0: gw=10.0.0.1\n", VM),
        ],
    )
    def test_raises(self, text, kind):
        with pytest.raises(ConfigMalformed):
            ConfigMutator.apply(text, DESIRED, kind)
