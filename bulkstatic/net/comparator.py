# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/comparator.py
from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Tuple

from .kvline import ConfigDocument, InterfaceField
from .model import ResolvedConfig, TargetAddress, WorkloadKind

DOTTED_QUAD_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
CIDR_RE = re.compile(r"^(?P<addr>\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})/(?P<plen>\d{1,2})$")


class ComparisonResult(Enum):
    ALREADY_CORRECT = "already-correct"
    NEEDS_UPDATE = "needs-update"


def interface_field(doc: ConfigDocument, kind: WorkloadKind) -> Optional[InterfaceField]:
    idx = doc.find(kind.interface_key)
    return doc.field_at(idx) if idx is not None else None


def _current_tokens(field: InterfaceField) -> Tuple[Optional[str], list]:
    ip_raw = field.get("ip")
    ip_cidr = ip_raw if ip_raw is not None and CIDR_RE.match(ip_raw) else None
    gateways = [g for g in field.values("gw") if DOTTED_QUAD_RE.match(g)]
    return ip_cidr, gateways


class ConfigStateComparator:
    """
    Decide whether a workload's persisted interface line already carries
    the desired static address and gateway.

    Equality is textual: `10.0.0.5/24` and `10.0.0.05/24` differ, and a
    line carrying the right gateway twice still needs an update.
    """

    @staticmethod
    def parse(raw_config_text: str, kind: WorkloadKind) -> Optional[ResolvedConfig]:
        field = interface_field(ConfigDocument.parse(raw_config_text), kind)
        if field is None:
            return None
        ip_cidr, gateways = _current_tokens(field)
        if ip_cidr is None:
            return None
        m = CIDR_RE.match(ip_cidr)
        assert m is not None
        try:
            address = TargetAddress.parse(m.group("addr"), int(m.group("plen")))
        except ValueError:
            return None
        return ResolvedConfig(address=address, gateway=gateways[0] if gateways else None)

    @staticmethod
    def compare(raw_config_text: str, desired: ResolvedConfig, kind: WorkloadKind) -> ComparisonResult:
        field = interface_field(ConfigDocument.parse(raw_config_text), kind)
        if field is None:
            return ComparisonResult.NEEDS_UPDATE

        ip_cidr, gateways = _current_tokens(field)
        if ip_cidr is None:
            return ComparisonResult.NEEDS_UPDATE

        if ip_cidr == desired.address.cidr and gateways == [desired.gateway]:
            return ComparisonResult.ALREADY_CORRECT
        return ComparisonResult.NEEDS_UPDATE
