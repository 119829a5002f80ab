# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/kvline.py
"""
Loss-free editors for Proxmox workload configs.

ConfigDocument
  - Keeps every line with its original line ending.
  - Only the main section (before the first `[snapshot]` header) is
    searched; snapshot sections are opaque.

InterfaceField
  - One `key: k=v,k=v,...` line split into an ordered token list.
  - Unknown tokens are kept verbatim, so render(parse(x)) == x.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

_LINE_KEY_RE = re.compile(r"^(?P<key>[A-Za-z0-9_-]+)(?P<sep>:[ \t]*)(?P<value>.*)$", re.DOTALL)
_SECTION_RE = re.compile(r"^\[[^\]]+\]\s*$")
_NETDEV_KEY_RE = re.compile(r"^net\d+$")


def _split_ending(line: str) -> Tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


@dataclass
class InterfaceField:
    """A single `key: token,token,...` config line."""

    key: str
    sep: str
    tokens: List[str] = field(default_factory=list)

    @staticmethod
    def parse(body: str) -> Optional["InterfaceField"]:
        m = _LINE_KEY_RE.match(body)
        if not m:
            return None
        value = m.group("value")
        tokens = value.split(",") if value else []
        return InterfaceField(key=m.group("key"), sep=m.group("sep"), tokens=tokens)

    @staticmethod
    def token_key(token: str) -> str:
        return token.split("=", 1)[0] if "=" in token else ""

    @staticmethod
    def token_value(token: str) -> str:
        return token.split("=", 1)[1] if "=" in token else token

    def index_of(self, key: str) -> Optional[int]:
        for i, tok in enumerate(self.tokens):
            if self.token_key(tok) == key:
                return i
        return None

    def values(self, key: str) -> List[str]:
        return [self.token_value(t) for t in self.tokens if self.token_key(t) == key]

    def get(self, key: str) -> Optional[str]:
        vals = self.values(key)
        return vals[0] if vals else None

    def set_at(self, idx: int, key: str, value: str) -> None:
        self.tokens[idx] = f"{key}={value}"

    def insert_after(self, idx: int, key: str, value: str) -> None:
        self.tokens.insert(idx + 1, f"{key}={value}")

    def remove_where(self, key: str, pred) -> int:
        before = len(self.tokens)
        self.tokens = [t for t in self.tokens if not (self.token_key(t) == key and pred(self.token_value(t)))]
        return before - len(self.tokens)

    def render(self) -> str:
        return f"{self.key}{self.sep}{','.join(self.tokens)}"


@dataclass
class ConfigDocument:
    lines: List[str]

    @staticmethod
    def parse(text: str) -> "ConfigDocument":
        return ConfigDocument(lines=text.splitlines(keepends=True))

    def main_section_end(self) -> int:
        for i, ln in enumerate(self.lines):
            if _SECTION_RE.match(ln.rstrip("\r\n")):
                return i
        return len(self.lines)

    def _keyed_lines(self):
        for i in range(self.main_section_end()):
            body, _ = _split_ending(self.lines[i])
            m = _LINE_KEY_RE.match(body)
            if m:
                yield i, m.group("key"), m.group("value")

    def find(self, key: str) -> Optional[int]:
        """Index of the first main-section line for key, or None."""
        for i, k, _ in self._keyed_lines():
            if k == key:
                return i
        return None

    def has(self, key: str) -> bool:
        return self.find(key) is not None

    def get_value(self, key: str) -> Optional[str]:
        for _, k, v in self._keyed_lines():
            if k == key:
                return v
        return None

    def last_netdev(self) -> Optional[int]:
        last = None
        for i, k, _ in self._keyed_lines():
            if _NETDEV_KEY_RE.match(k):
                last = i
        return last

    def field_at(self, idx: int) -> Optional[InterfaceField]:
        body, _ = _split_ending(self.lines[idx])
        return InterfaceField.parse(body)

    def replace_body(self, idx: int, body: str) -> None:
        _, ending = _split_ending(self.lines[idx])
        self.lines[idx] = body + ending

    def insert_line_after(self, idx: int, body: str) -> None:
        _, ending = _split_ending(self.lines[idx])
        if ending:
            self.lines.insert(idx + 1, body + ending)
            return
        # idx is the unterminated last line; the new line takes its place at EOF
        self.lines[idx] = self.lines[idx] + "\n"
        self.lines.insert(idx + 1, body)

    def render(self) -> str:
        return "".join(self.lines)
