# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/orchestrator/orchestrator.py

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterator, List, Optional

from rich.console import Console

from ..cli.prompt import AutoConfirmer, Confirmer, StdinConfirmer
from ..core.exceptions import ConfigStoreError, wrap_fatal
from ..core.logger import Log
from ..core.utils import U
from ..net.host import HostNetworkDetector
from ..net.model import PRIMARY_INTERFACE, NetworkIntent, WorkloadKind
from ..net.resolver import GUEST_AGENT_TIMEOUT_S, IPResolutionPipeline, LiveIPResolver
from ..pve.collaborators import PveCli
from ..pve.store import DEFAULT_PVE_ROOT, ConfigStore
from .processor import WorkloadProcessor
from .summary import print_summary
from .tally import Outcome, RunTally, WorkloadResult

EXIT_OK = 0
EXIT_WORKLOAD_ERRORS = 2


class Orchestrator:
    """
    One bulk run: build the network intent, check the host, confirm, then
    walk containers and VMs sequentially and fold each result into the tally.
    """

    def __init__(
        self,
        logger: logging.Logger,
        args: argparse.Namespace,
        *,
        cli: Optional[PveCli] = None,
        store: Optional[ConfigStore] = None,
        confirmer: Optional[Confirmer] = None,
        console: Optional[Console] = None,
        detector: Optional[HostNetworkDetector] = None,
    ):
        self.logger = logger
        self.args = args
        self.cli = cli or PveCli(logger)
        self.store = store or ConfigStore(logger, Path(getattr(args, "pve_root", None) or DEFAULT_PVE_ROOT))
        if confirmer is None:
            confirmer = AutoConfirmer() if getattr(args, "yes", False) else StdinConfirmer()
        self.confirmer = confirmer
        self.console = console
        self.detector = detector or HostNetworkDetector(logger)
        self.dry_run = bool(getattr(args, "dry_run", False))

        Log.trace(self.logger, "Orchestrator init: pve_root=%s dry_run=%s", self.store.pve_root, self.dry_run)

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _kinds(self) -> List[WorkloadKind]:
        only = getattr(self.args, "only", None)
        if only:
            return [WorkloadKind(only)]
        return [WorkloadKind.CONTAINER, WorkloadKind.VM]

    def _intent(self) -> NetworkIntent:
        if getattr(self.args, "auto", False):
            Log.step(self.logger, "Auto-detecting network configuration...")
            U.require_tools(self.logger, ["ip"])
            gateway, plen = self.detector.detect()
        else:
            gateway, plen = self.args.gateway, self.args.netmask
        try:
            return NetworkIntent.build(gateway, int(plen))
        except ValueError as e:
            raise wrap_fatal(str(e), e, gateway=gateway, prefix_length=plen)

    def _check_tools(self, kinds: List[WorkloadKind]) -> None:
        needed = [k.tool for k in kinds if self.store.list_paths(k)]
        if needed:
            U.require_tools(self.logger, needed)

    def _confirm(self) -> bool:
        if self.dry_run:
            Log.step(self.logger, "DRY-RUN MODE: No changes will be made")
            return True
        Log.warn(self.logger, "This will modify configs and restart running containers/VMs!")
        return self.confirmer.confirm("Continue?")

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _processor(self, intent: NetworkIntent) -> WorkloadProcessor:
        live: Optional[LiveIPResolver] = None
        if not getattr(self.args, "tags_only", False):
            live = LiveIPResolver(
                self.logger,
                self.cli,
                self.cli,
                self.cli,
                interface_name=getattr(self.args, "interface", None) or PRIMARY_INTERFACE,
                agent_timeout_s=float(getattr(self.args, "guest_agent_timeout", None) or GUEST_AGENT_TIMEOUT_S),
            )
        return WorkloadProcessor(
            self.logger,
            intent,
            pipeline=IPResolutionPipeline(self.logger, live),
            store=self.store,
            status=self.cli,
            lifecycle=self.cli,
            dry_run=self.dry_run,
        )

    def _process_path(self, processor: WorkloadProcessor, path: Path, kind: WorkloadKind) -> WorkloadResult:
        try:
            workload = self.store.read(path, kind)
        except ConfigStoreError as e:
            Log.fail(self.logger, "ERROR: %s", e.user_message(include_cause=True))
            return WorkloadResult(vmid=path.stem, kind=kind, outcome=Outcome.ERROR, reason=str(e))
        try:
            return processor.process(workload)
        except Exception as e:
            # one workload never ends the run
            Log.fail(self.logger, "ERROR: %s #%s: unexpected %s: %s", kind.label, workload.vmid, type(e).__name__, e)
            self.logger.debug("Traceback for %s #%s", kind.label, workload.vmid, exc_info=True)
            return WorkloadResult(
                vmid=workload.vmid, kind=kind, outcome=Outcome.ERROR, reason=f"{type(e).__name__}: {e}"
            )

    def _results(self, processor: WorkloadProcessor, kinds: List[WorkloadKind]) -> Iterator[WorkloadResult]:
        for kind in kinds:
            Log.banner(self.logger, f"Processing {kind.label} workloads")
            paths = self.store.list_paths(kind)
            if not paths:
                self.logger.info("No %s configs found in %s", kind.label, self.store.config_dir(kind))
                continue
            for path in paths:
                yield self._process_path(processor, path, kind)

    def run(self) -> int:
        intent = self._intent()
        kinds = self._kinds()
        self._check_tools(kinds)

        Log.banner(self.logger, "bulkstatic")
        self.logger.info(
            "Bulk-static starting: gateway=%s, netmask=%s, subnet=%s.x",
            intent.gateway,
            intent.netmask,
            intent.subnet.prefix,
        )

        if not self._confirm():
            self.logger.info("Aborted by user")
            return EXIT_OK

        tally = RunTally.of(self._results(self._processor(intent), kinds))
        print_summary(self.logger, tally, dry_run=self.dry_run, console=self.console)
        if tally.has_errors:
            Log.fail(self.logger, "Finished with %d error(s)", tally.errors)
            return EXIT_WORKLOAD_ERRORS
        Log.ok(self.logger, "Bulk-static complete")
        return EXIT_OK
