# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/orchestrator/__init__.py
from .orchestrator import Orchestrator
from .processor import WorkloadProcessor
from .tally import Outcome, RunTally, WorkloadResult

__all__ = ["Orchestrator", "WorkloadProcessor", "Outcome", "RunTally", "WorkloadResult"]
