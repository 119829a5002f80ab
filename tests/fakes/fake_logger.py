# SPDX-License-Identifier: GPL-2.0-or-later
import logging


class FakeLogger:
    def __init__(self):
        self.records = []

    def _log(self, level, msg, *a):
        text = str(msg) % a if a else str(msg)
        self.records.append((level, text))

    def log(self, lvl, msg, *a, **k): self._log(logging.getLevelName(lvl).lower(), msg, *a)
    def info(self, msg, *a, **k): self._log("info", msg, *a)
    def warning(self, msg, *a, **k): self._log("warning", msg, *a)
    def error(self, msg, *a, **k): self._log("error", msg, *a)
    def debug(self, msg, *a, **k): self._log("debug", msg, *a)

    def isEnabledFor(self, _lvl):
        return True

    def messages(self, level=None):
        return [m for lvl, m in self.records if level is None or lvl == level]

    def text(self):
        return "\n".join(m for _, m in self.records)
