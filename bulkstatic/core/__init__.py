# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/core/__init__.py
from .exceptions import (
    BulkStaticError,
    CollaboratorError,
    ConfigMalformed,
    ConfigStoreError,
    Fatal,
    LifecycleError,
)
from .logger import Log

__all__ = [
    "BulkStaticError",
    "CollaboratorError",
    "ConfigMalformed",
    "ConfigStoreError",
    "Fatal",
    "LifecycleError",
    "Log",
]
