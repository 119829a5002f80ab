# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/orchestrator/summary.py
from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.logger import Log
from ..net.model import WorkloadKind
from .tally import Outcome, RunTally


def build_table(tally: RunTally, *, dry_run: bool = False) -> Table:
    done_col = "Planned" if dry_run else "Processed"
    table = Table(expand=True)
    table.add_column("Kind", style="bold")
    table.add_column(done_col, justify="right", style="green")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Total", justify="right")
    for kind in WorkloadKind:
        t = tally.for_kind(kind)
        done = t.planned if dry_run else t.processed
        table.add_row(kind.label, str(done), str(t.skipped), str(t.errors), str(t.total))
    return table


def print_summary(
    logger: logging.Logger,
    tally: RunTally,
    *,
    dry_run: bool = False,
    console: Optional[Console] = None,
) -> None:
    """Log the per-kind counts (also as ctx for --json-logs), then render them as a table."""
    for kind_value, counts in tally.as_dict().items():
        Log.bind(logger, kind=kind_value, **counts).info(
            "%s: %s", WorkloadKind(kind_value).label, " ".join(f"{k}={v}" for k, v in counts.items())
        )
    for r in tally.results:
        if r.outcome is Outcome.ERROR:
            logger.warning("%s #%s: %s", r.kind.label, r.vmid, r.reason)

    con = console or Console(stderr=False)
    title = "bulkstatic summary (dry-run)" if dry_run else "bulkstatic summary"
    con.print(Panel(build_table(tally, dry_run=dry_run), title=title, expand=True))
