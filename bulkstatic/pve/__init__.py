# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/pve/__init__.py
from .collaborators import PveCli, WorkloadStatus
from .store import BACKUP_SUFFIX, ConfigStore, has_network

__all__ = ["PveCli", "WorkloadStatus", "ConfigStore", "BACKUP_SUFFIX", "has_network"]
