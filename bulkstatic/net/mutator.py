# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/mutator.py
"""
Rewrite the primary-interface line of a workload config to a static
address and gateway.

Steps (applied to the interface field only, idempotent):
  1. drop every gw=<dotted-quad> token (stale or duplicate gateways)
  2. ip=dhcp            -> ip=<addr>/<len>
  3. ip=<addr>/<len>    -> ip=<new addr>/<new len> (same position)
  4. insert gw=<gateway> right after the ip= token

Every other token, and every other line, is left byte-identical.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import ConfigMalformed
from .comparator import CIDR_RE, DOTTED_QUAD_RE
from .kvline import ConfigDocument
from .model import DHCP_SENTINEL, ResolvedConfig, WorkloadKind

LOG = logging.getLogger("bulkstatic.net.mutator")


class ConfigMutator:
    @staticmethod
    def ensure_interface_field(doc: ConfigDocument, kind: WorkloadKind) -> bool:
        """
        Cloud-init VMs may have a NIC (`net0:`) but no `ipconfig0:` yet.
        Seed one with the DHCP sentinel right after the last NIC line so the
        regular rewrite applies. Returns True if a line was inserted.
        """
        if kind is not WorkloadKind.VM or doc.has(kind.interface_key):
            return False
        anchor = doc.last_netdev()
        if anchor is None:
            return False
        doc.insert_line_after(anchor, f"{kind.interface_key}: ip={DHCP_SENTINEL}")
        LOG.debug("Seeded %s after line %d", kind.interface_key, anchor + 1)
        return True

    @staticmethod
    def apply(raw_config_text: str, desired: ResolvedConfig, kind: WorkloadKind) -> str:
        doc = ConfigDocument.parse(raw_config_text)
        ConfigMutator.ensure_interface_field(doc, kind)

        idx: Optional[int] = doc.find(kind.interface_key)
        if idx is None:
            raise ConfigMalformed(msg=f"no `{kind.interface_key}:` line in config").with_context(kind=kind.value)

        field = doc.field_at(idx)
        if field is None:
            raise ConfigMalformed(msg=f"`{kind.interface_key}:` line cannot be parsed").with_context(kind=kind.value)

        field.remove_where("gw", lambda v: bool(DOTTED_QUAD_RE.match(v)))

        ip_idx = field.index_of("ip")
        if ip_idx is None:
            raise ConfigMalformed(msg=f"`{kind.interface_key}:` has no ip= token").with_context(
                kind=kind.value, line=field.render()
            )

        current = field.token_value(field.tokens[ip_idx])
        if current != DHCP_SENTINEL and not CIDR_RE.match(current):
            raise ConfigMalformed(msg=f"unsupported ip={current} on `{kind.interface_key}:`").with_context(
                kind=kind.value, line=field.render()
            )

        field.set_at(ip_idx, "ip", desired.address.cidr)
        if desired.gateway:
            field.insert_after(ip_idx, "gw", desired.gateway)

        doc.replace_body(idx, field.render())
        return doc.render()
