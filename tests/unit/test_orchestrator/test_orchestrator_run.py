# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end runs over a temporary /etc/pve tree."""
from __future__ import annotations

import argparse
import io
from unittest.mock import patch

import pytest
from rich.console import Console

from bulkstatic.core.exceptions import Fatal
from bulkstatic.core.utils import U
from bulkstatic.orchestrator.orchestrator import EXIT_OK, EXIT_WORKLOAD_ERRORS, Orchestrator
from bulkstatic.pve.collaborators import WorkloadStatus
from bulkstatic.pve.store import ConfigStore

from fakes.fake_logger import FakeLogger
from fakes.fake_pve import FakeConfirmer, FakePve, inet

RUNNING = WorkloadStatus.RUNNING


def _args(pve_root, **kw):
    base = dict(
        gateway="192.168.0.1",
        netmask=24,
        auto=False,
        dry_run=False,
        yes=False,
        tags_only=False,
        interface="eth0",
        pve_root=str(pve_root),
        only=None,
        guest_agent_timeout=10.0,
        verbose=0,
    )
    base.update(kw)
    return argparse.Namespace(**base)


def _orch(pve_root, pve, *, answer=True, **kw):
    logger = FakeLogger()
    out = io.StringIO()
    orch = Orchestrator(
        logger,
        _args(pve_root, **kw),
        cli=pve,
        store=ConfigStore(logger, pve_root),
        confirmer=FakeConfirmer(answer),
        console=Console(file=out, width=100),
    )
    return orch, logger, out


@pytest.fixture
def tools_present():
    with patch.object(U, "which", side_effect=lambda prog: f"/usr/sbin/{prog}"):
        yield


@pytest.fixture
def node(pve_root):
    (pve_root / "lxc" / "101.conf").write_text("net0: name=eth0,bridge=vmbr0,ip=dhcp,type=veth\ntags: 192.168.0.21\n")
    (pve_root / "lxc" / "102.conf").write_text("net0: name=eth0,bridge=vmbr0,ip=192.168.0.22/24,gw=192.168.0.1\n")
    (pve_root / "lxc" / "103.conf").write_text("net0: name=eth0,bridge=vmbr0,ip=dhcp\n")
    (pve_root / "qemu-server" / "200.conf").write_text("net0: virtio=AA,bridge=vmbr0\nostype: l26\n")
    return pve_root


@pytest.mark.unit
@pytest.mark.usefixtures("tools_present")
class TestOrchestratorRun:
    def test_full_run(self, node):
        pve = FakePve(
            statuses={"101": RUNNING, "102": RUNNING, "200": RUNNING},
            live={"102": [inet("eth0", "192.168.0.22")]},
            agent={"200": [inet("eth0", "192.168.0.40")]},
        )
        orch, logger, out = _orch(node, pve)

        assert orch.run() == EXIT_OK

        assert "ip=192.168.0.21/24,gw=192.168.0.1" in (node / "lxc" / "101.conf").read_text()
        assert (node / "lxc" / "102.conf").read_text() == "net0: name=eth0,bridge=vmbr0,ip=192.168.0.22/24,gw=192.168.0.1\n"
        assert (node / "lxc" / "103.conf").read_text() == "net0: name=eth0,bridge=vmbr0,ip=dhcp\n"
        assert (node / "qemu-server" / "200.conf").read_text() == (
            "net0: virtio=AA,bridge=vmbr0\nipconfig0: ip=192.168.0.40/24,gw=192.168.0.1\nostype: l26\n"
        )
        # containers first, each kind in file-name order
        restarted = [c[1] for c in pve.calls if c[0] == "start"]
        assert restarted == ["101", "200"]
        assert "LXC: processed=1 planned=0 skipped=2 errors=0" in logger.text()
        assert "VM: processed=1 planned=0 skipped=0 errors=0" in logger.text()
        assert "bulkstatic summary" in out.getvalue()

    def test_dry_run_changes_nothing_and_skips_prompt(self, node):
        before = {p.name: p.read_text() for p in (node / "lxc").iterdir()}
        pve = FakePve(statuses={"101": RUNNING})
        orch, logger, out = _orch(node, pve, answer=False, dry_run=True)

        assert orch.run() == EXIT_OK

        assert {p.name: p.read_text() for p in (node / "lxc").iterdir()} == before
        assert orch.confirmer.questions == []
        assert pve.count("stop") == 0
        assert "planned=1" in logger.text()
        assert "dry-run" in out.getvalue()

    def test_declined_prompt_aborts(self, node):
        pve = FakePve()
        orch, logger, _ = _orch(node, pve, answer=False)

        assert orch.run() == EXIT_OK
        assert orch.confirmer.questions == ["Continue?"]
        assert "Aborted by user" in logger.text()
        assert pve.calls == []
        assert "ip=dhcp" in (node / "lxc" / "101.conf").read_text()

    def test_workload_error_sets_exit_code(self, node):
        pve = FakePve(statuses={"101": RUNNING}, fail_start={"101"})
        orch, logger, _ = _orch(node, pve, only="lxc")

        assert orch.run() == EXIT_WORKLOAD_ERRORS
        assert "errors=1" in logger.text()
        assert pve.count("network_interfaces") == 0

    def test_only_qemu(self, node):
        pve = FakePve()
        orch, logger, _ = _orch(node, pve, only="qemu", tags_only=True)

        assert orch.run() == EXIT_OK
        assert all(c[1] == "200" for c in pve.calls)
        assert "ip=dhcp" in (node / "lxc" / "101.conf").read_text()

    def test_empty_node(self, pve_root):
        orch, logger, _ = _orch(pve_root, FakePve())
        assert orch.run() == EXIT_OK
        assert "No LXC configs found" in logger.text()

    def test_undecodable_config_does_not_stop_the_run(self, node):
        (node / "lxc" / "101.conf").write_bytes(b"net0: name=eth0,\xe9,ip=dhcp\n")
        (node / "lxc" / "103.conf").write_text("net0: name=eth0,bridge=vmbr0,ip=dhcp\ntags: 192.168.0.23\n")
        pve = FakePve()
        orch, logger, _ = _orch(node, pve, only="lxc")

        assert orch.run() == EXIT_WORKLOAD_ERRORS

        assert "ip=192.168.0.23/24,gw=192.168.0.1" in (node / "lxc" / "103.conf").read_text()
        assert "LXC: processed=1 planned=0 skipped=1 errors=1" in logger.text()
        assert any("101.conf" in m for m in logger.messages("error"))

    def test_unexpected_failure_is_counted_per_workload(self, node):
        class BrokenStatus(FakePve):
            def status(self, vmid, kind):
                if vmid == "101":
                    raise TypeError("unexpected reply")
                return super().status(vmid, kind)

        (node / "lxc" / "103.conf").write_text("net0: name=eth0,bridge=vmbr0,ip=dhcp\ntags: 192.168.0.23\n")
        pve = BrokenStatus()
        orch, logger, _ = _orch(node, pve, only="lxc")

        assert orch.run() == EXIT_WORKLOAD_ERRORS

        assert "ip=192.168.0.23/24,gw=192.168.0.1" in (node / "lxc" / "103.conf").read_text()
        assert "LXC #101: TypeError: unexpected reply" in logger.messages("warning")

    def test_auto_detection(self, node):
        class Detector:
            def detect(self):
                return "192.168.0.1", 24

        pve = FakePve()
        orch, logger, _ = _orch(node, pve, auto=True, gateway=None, netmask=None, dry_run=True)
        orch.detector = Detector()
        assert orch.run() == EXIT_OK
        assert "gateway=192.168.0.1, netmask=/24" in logger.text()


@pytest.mark.unit
class TestPreconditions:
    def test_missing_tool_is_fatal(self, node):
        with patch.object(U, "which", return_value=None):
            orch, logger, _ = _orch(node, FakePve())
            with pytest.raises(Fatal) as ei:
                orch.run()
        assert "pct" in str(ei.value) and "qm" in str(ei.value)

    def test_only_tools_for_present_kinds(self, pve_root):
        (pve_root / "lxc" / "101.conf").write_text("net0: name=eth0,ip=dhcp\n")
        with patch.object(U, "which", side_effect=lambda p: None if p == "qm" else f"/usr/sbin/{p}"):
            orch, _, _ = _orch(pve_root, FakePve(), dry_run=True)
            assert orch.run() == EXIT_OK

    def test_bad_intent_is_fatal(self, pve_root):
        orch, _, _ = _orch(pve_root, FakePve(), netmask=20)
        with pytest.raises(Fatal):
            orch.run()
