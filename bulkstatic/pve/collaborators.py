# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/pve/collaborators.py
"""
External collaborators the resolution engine and the run loop depend on.

Each capability is a small Protocol so tests can pass fakes; PveCli is the
real implementation that shells out to `pct` / `qm` on a Proxmox node.
"""
from __future__ import annotations

import logging
import re
import subprocess
from enum import Enum
from typing import List, Optional, Protocol

from ..core.exceptions import CollaboratorError, LifecycleError
from ..core.utils import U
from ..net.matcher import parse_guest_agent_interfaces, parse_ip_addr_output
from ..net.model import InterfaceAddress, WorkloadKind

_STATUS_RE = re.compile(r"^status:\s*(?P<state>\S+)", re.MULTILINE)


class WorkloadStatus(Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


class StatusQuery(Protocol):
    def status(self, vmid: str, kind: WorkloadKind) -> WorkloadStatus: ...


class LiveInterfaceQuery(Protocol):
    def list_addresses(self, vmid: str, interface: str) -> List[InterfaceAddress]: ...


class GuestAgentQuery(Protocol):
    def network_interfaces(self, vmid: str, *, timeout_s: float) -> List[InterfaceAddress]: ...


class LifecycleControl(Protocol):
    def stop(self, vmid: str, kind: WorkloadKind) -> None: ...

    def start(self, vmid: str, kind: WorkloadKind) -> None: ...


def parse_status(text: str) -> WorkloadStatus:
    m = _STATUS_RE.search(text or "")
    if not m:
        return WorkloadStatus.UNKNOWN
    state = m.group("state").lower()
    if state == "running":
        return WorkloadStatus.RUNNING
    if state == "stopped":
        return WorkloadStatus.STOPPED
    return WorkloadStatus.UNKNOWN


class PveCli:
    """
    `pct` / `qm` backed implementation of every collaborator protocol.

    Only the guest-agent query has a timeout; the other calls block until
    the CLI returns.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _run(self, cmd: List[str], *, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        return U.run_cmd(self.logger, cmd, check=False, capture=True, timeout=timeout)

    # StatusQuery

    def status(self, vmid: str, kind: WorkloadKind) -> WorkloadStatus:
        try:
            cp = self._run([kind.tool, "status", vmid])
        except OSError:
            return WorkloadStatus.UNKNOWN
        if cp.returncode != 0:
            return WorkloadStatus.UNKNOWN
        return parse_status(cp.stdout)

    # LiveInterfaceQuery (containers)

    def list_addresses(self, vmid: str, interface: str) -> List[InterfaceAddress]:
        cmd = ["pct", "exec", vmid, "--", "ip", "-4", "addr", "show", interface]
        try:
            cp = self._run(cmd)
        except OSError as e:
            raise CollaboratorError(msg=f"pct exec failed for {vmid}", cause=e)
        if cp.returncode != 0:
            raise CollaboratorError(msg=f"pct exec exited {cp.returncode}").with_context(
                vmid=vmid, stderr=(cp.stderr or "").strip()
            )
        return parse_ip_addr_output(cp.stdout)

    # GuestAgentQuery (VMs)

    def network_interfaces(self, vmid: str, *, timeout_s: float) -> List[InterfaceAddress]:
        cmd = ["qm", "guest", "cmd", vmid, "network-get-interfaces"]
        try:
            cp = self._run(cmd, timeout=timeout_s)
        except subprocess.TimeoutExpired as e:
            raise CollaboratorError(msg=f"guest agent timed out after {timeout_s}s", cause=e).with_context(vmid=vmid)
        except OSError as e:
            raise CollaboratorError(msg="qm guest cmd failed", cause=e).with_context(vmid=vmid)
        if cp.returncode != 0:
            raise CollaboratorError(msg=f"qm guest cmd exited {cp.returncode}").with_context(
                vmid=vmid, stderr=(cp.stderr or "").strip()
            )
        try:
            return parse_guest_agent_interfaces(cp.stdout)
        except (TypeError, ValueError) as e:
            raise CollaboratorError(msg="malformed guest agent reply", cause=e).with_context(vmid=vmid)

    # LifecycleControl

    def _lifecycle(self, action: str, vmid: str, kind: WorkloadKind, *extra: str) -> None:
        cmd = [kind.tool, action, vmid, *extra]
        try:
            cp = self._run(cmd)
        except OSError as e:
            raise LifecycleError(msg=f"{kind.tool} {action} {vmid} failed", cause=e)
        if cp.returncode != 0:
            raise LifecycleError(msg=f"{kind.tool} {action} {vmid} exited {cp.returncode}").with_context(
                stderr=(cp.stderr or "").strip()
            )

    def stop(self, vmid: str, kind: WorkloadKind) -> None:
        self._lifecycle("stop", vmid, kind, *kind.stop_flags)

    def start(self, vmid: str, kind: WorkloadKind) -> None:
        self._lifecycle("start", vmid, kind)
