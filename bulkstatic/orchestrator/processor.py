# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/orchestrator/processor.py
"""
Per-workload pipeline:

  resolve -> compare (skip if already correct) -> mutate -> backup/write -> restart

Every failure is turned into a WorkloadResult; nothing raised here aborts
the run.
"""
from __future__ import annotations

import difflib
import logging
from typing import Any, List

from ..core.exceptions import ConfigMalformed, ConfigStoreError, LifecycleError
from ..core.logger import Log
from ..net.comparator import ComparisonResult, ConfigStateComparator
from ..net.model import NetworkIntent, Resolved, Workload
from ..net.mutator import ConfigMutator
from ..net.resolver import IPResolutionPipeline
from ..pve.collaborators import LifecycleControl, StatusQuery, WorkloadStatus
from ..pve.store import ConfigStore, has_network
from .tally import Outcome, WorkloadResult


def changed_lines(old: str, new: str) -> List[str]:
    """`-old` / `+new` lines between two config texts (no diff headers)."""
    out: List[str] = []
    for ln in difflib.unified_diff(old.splitlines(), new.splitlines(), lineterm="", n=0):
        if ln.startswith(("---", "+++", "@@")):
            continue
        out.append(ln)
    return out


class WorkloadProcessor:
    def __init__(
        self,
        logger: logging.Logger,
        intent: NetworkIntent,
        *,
        pipeline: IPResolutionPipeline,
        store: ConfigStore,
        status: StatusQuery,
        lifecycle: LifecycleControl,
        dry_run: bool = False,
    ):
        self.logger = logger
        self.intent = intent
        self.pipeline = pipeline
        self.store = store
        self.status = status
        self.lifecycle = lifecycle
        self.dry_run = dry_run

    def _result(self, log: Any, workload: Workload, outcome: Outcome, reason: str) -> WorkloadResult:
        if outcome is Outcome.ERROR:
            Log.fail(log, "ERROR: %s", reason)
        elif outcome is Outcome.SKIPPED:
            log.info("• %s - skipping", reason)
        return WorkloadResult(vmid=workload.vmid, kind=workload.kind, outcome=outcome, reason=reason)

    def process(self, workload: Workload) -> WorkloadResult:
        kind = workload.kind
        log = Log.bind(self.logger, kind=kind.value, vmid=workload.vmid)
        log.info("-- %s #%s", kind.label, workload.vmid)

        if not has_network(workload):
            return self._result(log, workload, Outcome.SKIPPED, "No network interface configured")

        subnet = self.intent.subnet
        outcome = self.pipeline.resolve(workload, subnet)
        if not isinstance(outcome, Resolved):
            return self._result(
                log,
                workload,
                Outcome.SKIPPED,
                f"Could not detect IP in {subnet.prefix}.x ({outcome.reason.value})",
            )

        desired = self.intent.target_for(outcome.address)
        log.info("• Using IP %s, gw=%s (from %s)", desired.address.cidr, desired.gateway, outcome.source.value)

        if ConfigStateComparator.compare(workload.raw_config_text, desired, kind) is ComparisonResult.ALREADY_CORRECT:
            return self._result(log, workload, Outcome.SKIPPED, f"{kind.label} already has correct static IP configuration")

        try:
            new_text = ConfigMutator.apply(workload.raw_config_text, desired, kind)
        except ConfigMalformed as e:
            return self._result(log, workload, Outcome.ERROR, f"Unsupported network config: {e}")

        was_running = self.status.status(workload.vmid, kind) is WorkloadStatus.RUNNING
        log.info("• %s is %s", kind.label, "running" if was_running else "stopped")

        if self.dry_run:
            return self._plan(log, workload, new_text, was_running)

        try:
            backup = self.store.write(workload, new_text)
        except ConfigStoreError as e:
            return self._result(log, workload, Outcome.ERROR, e.user_message(include_cause=True))
        Log.trace(log, "Backup written to %s", backup)

        if not was_running:
            log.info("• %s stopped - config updated without restart", kind.label)
            return self._result(log, workload, Outcome.PROCESSED, "updated")

        log.info("• Stopping & starting %s #%s", kind.label, workload.vmid)
        try:
            self.lifecycle.stop(workload.vmid, kind)
        except LifecycleError as e:
            return self._result(log, workload, Outcome.ERROR, f"Failed to stop {kind.label} #{workload.vmid}: {e}")

        try:
            self.lifecycle.start(workload.vmid, kind)
        except LifecycleError as e:
            # config is already written; the workload stays stopped
            return self._result(log, workload, Outcome.ERROR, f"Failed to start {kind.label} #{workload.vmid}: {e}")

        Log.ok(log, "%s #%s now at %s", kind.label, workload.vmid, desired.address.cidr)
        return self._result(log, workload, Outcome.PROCESSED, "updated and restarted")

    def _plan(self, log: Any, workload: Workload, new_text: str, was_running: bool) -> WorkloadResult:
        kind = workload.kind
        log.info("[DRY-RUN] Would backup: %s -> %s", workload.config_path, self.store.backup_path(workload))
        log.info("[DRY-RUN] Would modify network config in: %s", workload.config_path)
        for ln in changed_lines(workload.raw_config_text, new_text):
            log.info("[DRY-RUN]   %s", ln)
        if was_running:
            log.info("[DRY-RUN] Would stop %s #%s", kind.label, workload.vmid)
            log.info("[DRY-RUN] Would start %s #%s", kind.label, workload.vmid)
        else:
            log.info("[DRY-RUN] %s stopped - no restart needed", kind.label)
        return WorkloadResult(vmid=workload.vmid, kind=kind, outcome=Outcome.PLANNED, reason="dry-run")
