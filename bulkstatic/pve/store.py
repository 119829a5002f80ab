# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/pve/store.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from ..core.exceptions import ConfigStoreError
from ..core.file_ops import backup_copy, write_text_atomic
from ..net.kvline import ConfigDocument
from ..net.model import Workload, WorkloadKind

DEFAULT_PVE_ROOT = Path("/etc/pve")
BACKUP_SUFFIX = ".bak.static"


class ConfigStore:
    """
    Workload configs under <pve_root>/lxc/<vmid>.conf and
    <pve_root>/qemu-server/<vmid>.conf.
    """

    def __init__(self, logger: logging.Logger, pve_root: Path = DEFAULT_PVE_ROOT):
        self.logger = logger
        self.pve_root = Path(pve_root)

    def config_dir(self, kind: WorkloadKind) -> Path:
        return self.pve_root / kind.config_dir

    def list_paths(self, kind: WorkloadKind) -> List[Path]:
        """Config files of one kind in lexical file-name order."""
        d = self.config_dir(kind)
        if not d.is_dir():
            return []
        return sorted((p for p in d.glob("*.conf") if p.is_file()), key=lambda p: p.name)

    def read(self, path: Path, kind: WorkloadKind) -> Workload:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigStoreError(msg=f"cannot read {path}", cause=e)
        return Workload(vmid=path.stem, kind=kind, config_path=path, raw_config_text=text)

    def write(self, workload: Workload, new_text: str) -> Path:
        """Back up the current file to <path>.bak.static, then replace it."""
        path = workload.config_path
        try:
            backup = backup_copy(path, BACKUP_SUFFIX)
            self.logger.debug("Backed up %s -> %s", path, backup)
            write_text_atomic(path, new_text)
        except OSError as e:
            raise ConfigStoreError(msg=f"cannot write {path}", cause=e)
        workload.raw_config_text = new_text
        return backup

    @staticmethod
    def backup_path(workload: Workload) -> Path:
        return workload.config_path.with_name(workload.config_path.name + BACKUP_SUFFIX)


def has_network(workload: Workload) -> bool:
    """Containers need net0; VMs need net0 or a cloud-init ipconfig0."""
    doc = ConfigDocument.parse(workload.raw_config_text)
    if doc.has("net0"):
        return True
    return workload.kind is WorkloadKind.VM and doc.has(WorkloadKind.VM.interface_key)
