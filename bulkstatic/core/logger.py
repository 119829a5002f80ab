# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/core/logger.py
"""
Logging for bulkstatic.

Human output goes to stderr as `HH:MM:SS <emoji> LEVEL message k=v ...`,
where the trailing key/values come from Log.bind() (vmid, kind). With
--json-logs every record is one JSON object instead. A TRACE level sits
below DEBUG and is enabled with -vv.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from termcolor import colored as _colored

TRACE = 5
if logging.getLevelName(TRACE) != "TRACE":
    logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]

_LEVEL_STYLE: Dict[str, Tuple[str, str]] = {
    "TRACE": ("🧬", "cyan"),
    "DEBUG": ("🔍", "blue"),
    "INFO": ("✅", "green"),
    "WARNING": ("⚠️", "yellow"),
    "ERROR": ("💥", "red"),
    "CRITICAL": ("🧨", "red"),
}


def is_tty(stream=None) -> bool:
    stream = sys.stdout if stream is None else stream
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _stderr_takes_emoji() -> bool:
    enc = getattr(sys.stderr, "encoding", None) or "utf-8"
    try:
        "💥".encode(enc)
    except (UnicodeEncodeError, LookupError):
        return False
    return True


def c(
    text: str,
    color: Optional[str] = None,
    attrs: Optional[List[str]] = None,
    *,
    enable: bool = True,
) -> str:
    """Colorize text when enabled."""
    if not enable or not color:
        return text
    return _colored(text, color=color, attrs=attrs or [])


# ---------------------------------------------------------------------------
# Per-workload context
# ---------------------------------------------------------------------------


def _ctx_suffix(ctx: Optional[Mapping[str, Any]]) -> str:
    if not ctx:
        return ""
    return " " + " ".join(f"{k}={str(v).replace(chr(10), ' ')}" for k, v in sorted(ctx.items()))


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Carries a fixed context dict into every record as `record.ctx`.

      log = Log.bind(logger, kind="lxc", vmid="101")
      log.info("Using IP %s", cidr)      # ... Using IP 10.0.0.5/24 kind=lxc vmid=101
    """

    def __init__(self, logger: Any, ctx: Optional[Mapping[str, Any]] = None):
        super().__init__(logger, {"ctx": dict(ctx or {})})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["ctx"] = {**self.extra["ctx"], **(extra.get("ctx") or {})}
        kwargs["extra"] = extra
        return msg, kwargs


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogStyle:
    color: bool = True
    show_ms: bool = False
    show_src: bool = False  # module:line
    emoji: bool = True


class EmojiFormatter(logging.Formatter):
    def __init__(self, style: LogStyle):
        super().__init__()
        self._style = style

    def format(self, record: logging.LogRecord) -> str:
        dt = _dt.datetime.fromtimestamp(record.created)
        ts = dt.strftime("%H:%M:%S.%f")[:-3] if self._style.show_ms else dt.strftime("%H:%M:%S")
        emoji, color = _LEVEL_STYLE.get(record.levelname, ("•", None))
        if not self._style.emoji:
            emoji = "·"
        use_color = self._style.color and is_tty(sys.stderr)

        level = c(f"{record.levelname:<8}", color, enable=use_color)
        msg = record.getMessage()
        if record.levelno >= logging.WARNING:
            msg = c(msg, color, ["bold"], enable=use_color)
        src = f" [{record.module}:{record.lineno}]" if self._style.show_src else ""

        line = f"{ts} {emoji} {level}{src} {msg}{_ctx_suffix(getattr(record, 'ctx', None))}"
        if record.exc_info:
            tb = "\n".join("  " + ln for ln in self.formatException(record.exc_info).splitlines())
            line += "\n" + c(tb, "red", enable=use_color)
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line (--json-logs)."""

    def format(self, record: logging.LogRecord) -> str:
        obj: Dict[str, Any] = {
            "ts": _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "lineno": record.lineno,
        }
        ctx = getattr(record, "ctx", None)
        if ctx:
            obj["ctx"] = dict(ctx)
        if record.exc_info:
            obj["traceback"] = self.formatException(record.exc_info)
        return json.dumps(obj, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class Log:
    @staticmethod
    def _level_from_verbose(verbose: int) -> int:
        """0: INFO, -v: DEBUG, -vv and more: TRACE."""
        if verbose >= 2:
            return TRACE
        if verbose == 1:
            return logging.DEBUG
        return logging.INFO

    @staticmethod
    def bind(logger: Any, **ctx: Any) -> ContextLoggerAdapter:
        return ContextLoggerAdapter(logger, ctx)

    @staticmethod
    def banner(logger: Any, title: str, *, char: str = "─") -> None:
        t = f" {title.strip()} "
        side = char * max(8, (72 - len(t)) // 2)
        logger.info((side + t + side)[:72])

    @staticmethod
    def step(logger: Any, msg: str, *args: Any) -> None:
        logger.info("➡️  " + msg, *args)

    @staticmethod
    def ok(logger: Any, msg: str, *args: Any) -> None:
        logger.info("✅ " + msg, *args)

    @staticmethod
    def warn(logger: Any, msg: str, *args: Any) -> None:
        logger.warning("⚠️  " + msg, *args)

    @staticmethod
    def fail(logger: Any, msg: str, *args: Any) -> None:
        logger.error("💥 " + msg, *args)

    @staticmethod
    def trace(logger: Any, msg: str, *args: Any) -> None:
        logger.log(TRACE, msg, *args)

    @staticmethod
    def setup(
        verbose: int = 0,
        log_file: Optional[str] = None,
        *,
        color: bool = True,
        json_logs: bool = False,
        logger_name: str = "bulkstatic",
    ) -> logging.Logger:
        """
        (Re)configure the project logger: one stderr handler, plus a file
        handler when log_file is set. Calling it again replaces both.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False
        level = Log._level_from_verbose(verbose)
        logger.setLevel(level)

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        emoji = _stderr_takes_emoji()
        sh = logging.StreamHandler(stream=sys.stderr)
        sh.setFormatter(
            JsonFormatter() if json_logs else EmojiFormatter(LogStyle(color=color, show_ms=verbose >= 2, show_src=verbose >= 2, emoji=emoji))
        )
        logger.addHandler(sh)

        if log_file:
            fp = Path(log_file).expanduser().resolve()
            fp.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(fp, encoding="utf-8")
            fh.setFormatter(
                JsonFormatter() if json_logs else EmojiFormatter(LogStyle(color=False, show_ms=True, show_src=True, emoji=emoji))
            )
            logger.addHandler(fh)

        logger.debug("Logger initialized (level=%s, pid=%s)", logging.getLevelName(level), os.getpid())
        Log.trace(logger, "TRACE enabled")
        return logger
