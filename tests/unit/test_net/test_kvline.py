# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from bulkstatic.net.kvline import ConfigDocument, InterfaceField

LXC_CONF = """\
arch: amd64
hostname: web01
net0: name=eth0,bridge=vmbr0,hwaddr=BC:24:11:AA:BB:CC,ip=dhcp,type=veth
tags: prod;192.168.0.20

[before-upgrade]
net0: name=eth0,bridge=vmbr0,ip=192.168.0.9/24,gw=192.168.0.1
snaptime: 1700000000
"""


@pytest.mark.unit
class TestInterfaceField:
    def test_round_trip(self):
        body = "net0: name=eth0,bridge=vmbr0,ip=dhcp,firewall=1"
        assert InterfaceField.parse(body).render() == body

    def test_tokens_and_lookup(self):
        f = InterfaceField.parse("ipconfig0: ip=10.0.0.5/24,gw=10.0.0.1,gw=10.0.0.254")
        assert f.key == "ipconfig0"
        assert f.index_of("ip") == 0
        assert f.get("gw") == "10.0.0.1"
        assert f.values("gw") == ["10.0.0.1", "10.0.0.254"]
        assert f.index_of("ip6") is None

    def test_edit_operations(self):
        f = InterfaceField.parse("net0:name=eth0,gw=1.2.3.4,ip=dhcp")
        assert f.remove_where("gw", lambda v: True) == 1
        f.set_at(f.index_of("ip"), "ip", "10.0.0.5/24")
        f.insert_after(f.index_of("ip"), "gw", "10.0.0.1")
        assert f.render() == "net0:name=eth0,ip=10.0.0.5/24,gw=10.0.0.1"

    def test_not_a_key_line(self):
        assert InterfaceField.parse("# just a comment") is None


@pytest.mark.unit
class TestConfigDocument:
    def test_render_is_lossless(self):
        assert ConfigDocument.parse(LXC_CONF).render() == LXC_CONF
        crlf = LXC_CONF.replace("\n", "\r\n")
        assert ConfigDocument.parse(crlf).render() == crlf

    def test_snapshot_sections_are_invisible(self):
        doc = ConfigDocument.parse(LXC_CONF)
        assert doc.main_section_end() == 5
        assert doc.find("snaptime") is None
        assert doc.find("net0") == 2
        assert doc.get_value("tags") == "prod;192.168.0.20"

    def test_replace_body_keeps_line_ending(self):
        doc = ConfigDocument.parse("a: 1\r\nnet0: ip=dhcp\r\n")
        doc.replace_body(1, "net0: ip=10.0.0.5/24")
        assert doc.render() == "a: 1\r\nnet0: ip=10.0.0.5/24\r\n"

    def test_last_netdev(self):
        doc = ConfigDocument.parse("boot: order=scsi0\nnet0: virtio=AA,bridge=vmbr0\nnet1: virtio=BB\nostype: l26\n")
        assert doc.last_netdev() == 2
        assert ConfigDocument.parse("ostype: l26\n").last_netdev() is None

    def test_insert_after_terminated_line(self):
        doc = ConfigDocument.parse("net0: virtio=AA\nostype: l26\n")
        doc.insert_line_after(0, "ipconfig0: ip=dhcp")
        assert doc.render() == "net0: virtio=AA\nipconfig0: ip=dhcp\nostype: l26\n"

    def test_insert_after_unterminated_last_line(self):
        doc = ConfigDocument.parse("ostype: l26\nnet0: virtio=AA")
        doc.insert_line_after(1, "ipconfig0: ip=dhcp")
        assert doc.render() == "ostype: l26\nnet0: virtio=AA\nipconfig0: ip=dhcp"
