# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/core/file_ops.py
"""
In-place rewrites of workload configs.

A crash halfway through must not leave a truncated config on the cluster
filesystem, so new text lands in a hidden sibling and is renamed over the
original only once it is complete.
"""

from __future__ import annotations

import contextlib
import errno
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Optional


@contextlib.contextmanager
def atomic_write(target_path: Path, *, suffix: str = ".part") -> Iterator[Path]:
    """
    Yield a temp path next to target_path; on clean exit it replaces the
    target, on error it is removed and the target is left alone.

        with atomic_write(Path("/etc/pve/lxc/101.conf")) as tmp:
            tmp.write_text(new_text, encoding="utf-8")
    """
    target_path = Path(target_path)
    fd, name = tempfile.mkstemp(suffix=suffix, prefix=f".{target_path.name}.", dir=str(target_path.parent))
    os.close(fd)
    tmp = Path(name)
    try:
        yield tmp
        os.replace(tmp, target_path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _mode_of(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mode & 0o7777
    except FileNotFoundError:
        return None


def write_text_atomic(target_path: Path, text: str) -> None:
    """Replace target_path with text. An existing file keeps its permission bits."""
    target_path = Path(target_path)
    mode = _mode_of(target_path)
    with atomic_write(target_path) as tmp:
        tmp.write_text(text, encoding="utf-8")
        if mode is None:
            return
        try:
            os.chmod(tmp, mode)
        except PermissionError as e:
            # /etc/pve (pmxcfs) owns the modes of its files
            if e.errno != errno.EPERM:
                raise


def backup_copy(path: Path, suffix: str) -> Path:
    """`cp -p path path<suffix>`; an older backup is overwritten."""
    path = Path(path)
    backup = path.with_name(path.name + suffix)
    shutil.copy2(path, backup)
    return backup
