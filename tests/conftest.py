# SPDX-License-Identifier: GPL-2.0-or-later
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no host dependencies")


@pytest.fixture
def pve_root(tmp_path):
    """Empty /etc/pve look-alike with lxc/ and qemu-server/ directories."""
    (tmp_path / "lxc").mkdir()
    (tmp_path / "qemu-server").mkdir()
    return tmp_path
