# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/__init__.py
from .comparator import ComparisonResult, ConfigStateComparator
from .matcher import AddressMatcher
from .model import (
    NetworkIntent,
    Resolved,
    ResolvedConfig,
    SubnetSpec,
    TargetAddress,
    Unresolved,
    UnresolvedReason,
    Workload,
    WorkloadKind,
)
from .mutator import ConfigMutator

__all__ = [
    "AddressMatcher",
    "ComparisonResult",
    "ConfigMutator",
    "ConfigStateComparator",
    "NetworkIntent",
    "Resolved",
    "ResolvedConfig",
    "SubnetSpec",
    "TargetAddress",
    "Unresolved",
    "UnresolvedReason",
    "Workload",
    "WorkloadKind",
]
