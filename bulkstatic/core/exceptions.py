# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/core/exceptions.py
"""
Error taxonomy.

Fatal aborts the run before any workload is touched. The other errors are
per-workload: the run loop turns them into a skip or an error count and
moves on to the next container or VM.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _exit_code(value: Any) -> int:
    try:
        code = int(value)
    except (TypeError, ValueError):
        return 1
    if code < 0:
        return 1
    return min(code, 255)


def _one_line(s: str, limit: int = 600) -> str:
    s = " ".join((s or "").split())
    return s if len(s) <= limit else s[: limit - 3] + "..."


@dataclass(eq=False)
class BulkStaticError(Exception):
    """
    code:    process exit code if this error ends the run (0..255)
    msg:     one-line, user-facing message
    cause:   underlying exception, if any
    context: key/values for logs (vmid, kind, line, stderr...)
    """

    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _exit_code(self.code)
        self.msg = _one_line(self.msg) or type(self).__name__
        self.context = dict(self.context or {})
        super().__init__(self.msg)

    def with_context(self, **ctx: Any) -> "BulkStaticError":
        assert self.context is not None
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        out = self.msg
        if include_context and self.context:
            kv = ", ".join(f"{k}={self.context[k]!r}" for k in sorted(self.context))
            out += f" [{_one_line(kv)}]"
        if include_cause and self.cause is not None:
            out += f" (cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})"
        return out

    def __str__(self) -> str:
        return self.msg

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.msg,
            "context": dict(self.context or {}),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(BulkStaticError):
    """Invalid arguments or a missing host prerequisite; main() exits with .code."""


class ConfigMalformed(BulkStaticError):
    """The interface line is missing or has an ip= value that cannot be rewritten."""


class ConfigStoreError(BulkStaticError):
    """Reading, backing up or writing a workload config failed."""


class CollaboratorError(BulkStaticError):
    """pct exec / the guest agent failed, timed out or replied with garbage."""


class LifecycleError(BulkStaticError):
    """Stopping or starting a workload failed."""


def wrap_fatal(msg: str, exc: Optional[BaseException] = None, code: int = 1, **context: Any) -> Fatal:
    return Fatal(code=code, msg=msg, cause=exc, context=context or None)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    verbose=0: message only
    verbose=1: + context
    verbose>=2: + cause
    """
    if isinstance(e, BulkStaticError):
        return e.user_message(include_context=verbose >= 1, include_cause=verbose >= 2)
    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
