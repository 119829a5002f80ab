# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/cli/prompt.py
from __future__ import annotations

import sys
from typing import Callable, Protocol


class Confirmer(Protocol):
    def confirm(self, question: str) -> bool: ...


class StdinConfirmer:
    """`[y/N]` prompt; anything but y/yes (or EOF) means no."""

    def __init__(self, ask: Callable[[str], str] = input):
        self._ask = ask

    def confirm(self, question: str) -> bool:
        try:
            reply = self._ask(f"{question} [y/N]: ")
        except EOFError:
            print(file=sys.stderr)
            return False
        return reply.strip().lower() in ("y", "yes")


class AutoConfirmer:
    """Used for --yes."""

    def confirm(self, question: str) -> bool:
        return True
