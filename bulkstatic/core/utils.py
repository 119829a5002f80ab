# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/core/utils.py
from __future__ import annotations

import json
import logging
import shlex
import subprocess
from shutil import which as _which
from typing import Any, List, Optional

from .exceptions import Fatal


def _tail(text: Optional[str], lines: int = 20) -> str:
    out = (text or "").strip().splitlines()
    return "\n".join(out[-lines:])


class U:
    @staticmethod
    def die(logger: logging.Logger, msg: str, code: int = 1) -> None:
        """Log and abort the run."""
        logger.error(msg)
        raise Fatal(code, msg)

    @staticmethod
    def which(prog: str) -> Optional[str]:
        return _which(prog)

    @staticmethod
    def json_dump(obj: Any) -> str:
        try:
            return json.dumps(obj, indent=2, sort_keys=True, default=str)
        except (TypeError, ValueError):
            return repr(obj)

    @staticmethod
    def _pretty_cmd(cmd: List[str]) -> str:
        return shlex.join(cmd)

    @staticmethod
    def run_cmd(
        logger: logging.Logger,
        cmd: List[str],
        *,
        check: bool = True,
        capture: bool = False,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """
        Run pct/qm/ip and return the CompletedProcess.

        Output is decoded as UTF-8 with undecodable bytes replaced (it often
        comes from inside guests). With check=True a failure is logged with
        the tail of stdout/stderr; callers passing check=False inspect the
        result themselves, so a command that cannot be started is only
        logged at DEBUG. The subprocess exception always propagates.
        """
        shown = U._pretty_cmd(cmd)
        logger.debug("Running: %s", shown)
        try:
            return subprocess.run(
                cmd,
                check=check,
                capture_output=capture,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.CalledProcessError as e:
            details = [
                f"\n{name}:\n{body}"
                for name, body in (("stdout", _tail(e.stdout or e.output)), ("stderr", _tail(e.stderr)))
                if body
            ]
            logger.error("Command failed (rc=%s): %s%s", e.returncode, shown, "".join(details) or " (no output)")
            raise
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", timeout, shown)
            raise
        except OSError as e:
            logger.log(logging.ERROR if check else logging.DEBUG, "Cannot run %s: %s", shown, e)
            raise

    @staticmethod
    def require_tools(logger: logging.Logger, tools: List[str]) -> None:
        missing = [t for t in dict.fromkeys(tools) if U.which(t) is None]
        if missing:
            U.die(logger, f"Required tool(s) not found in PATH: {', '.join(missing)}", 1)
