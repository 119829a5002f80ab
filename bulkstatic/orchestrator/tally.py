# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/orchestrator/tally.py
"""
Run accounting.

Each workload produces one WorkloadResult; the run loop folds them into
an immutable RunTally. Nothing here is module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Tuple

from ..net.model import WorkloadKind


class Outcome(Enum):
    PROCESSED = "processed"  # config written (and restarted if it was running)
    PLANNED = "planned"  # dry-run: would have been processed
    SKIPPED = "skipped"  # nothing to do, or address not resolvable
    ERROR = "error"


@dataclass(frozen=True)
class WorkloadResult:
    vmid: str
    kind: WorkloadKind
    outcome: Outcome
    reason: str = ""


@dataclass(frozen=True)
class KindTally:
    processed: int = 0
    planned: int = 0
    skipped: int = 0
    errors: int = 0

    def add(self, outcome: Outcome) -> "KindTally":
        if outcome is Outcome.PROCESSED:
            return replace(self, processed=self.processed + 1)
        if outcome is Outcome.PLANNED:
            return replace(self, planned=self.planned + 1)
        if outcome is Outcome.SKIPPED:
            return replace(self, skipped=self.skipped + 1)
        return replace(self, errors=self.errors + 1)

    @property
    def total(self) -> int:
        return self.processed + self.planned + self.skipped + self.errors


@dataclass(frozen=True)
class RunTally:
    by_kind: Tuple[Tuple[WorkloadKind, KindTally], ...] = field(
        default_factory=lambda: tuple((k, KindTally()) for k in WorkloadKind)
    )
    results: Tuple[WorkloadResult, ...] = ()

    def fold(self, result: WorkloadResult) -> "RunTally":
        by_kind = tuple((k, t.add(result.outcome) if k is result.kind else t) for k, t in self.by_kind)
        return RunTally(by_kind=by_kind, results=self.results + (result,))

    @classmethod
    def of(cls, results: Iterable[WorkloadResult]) -> "RunTally":
        tally = cls()
        for r in results:
            tally = tally.fold(r)
        return tally

    def for_kind(self, kind: WorkloadKind) -> KindTally:
        return dict(self.by_kind)[kind]

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            k.value: {"processed": t.processed, "planned": t.planned, "skipped": t.skipped, "errors": t.errors}
            for k, t in self.by_kind
        }

    @property
    def errors(self) -> int:
        return sum(t.errors for _, t in self.by_kind)

    @property
    def has_errors(self) -> bool:
        return self.errors > 0
