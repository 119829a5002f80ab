# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/net/resolver.py
"""
Target-address resolution.

IPResolutionPipeline tries the workload's tags first; only when no tag
matches does it ask the live workload (pct exec for containers, the QEMU
guest agent for VMs). A tag match always wins over a live address.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import CollaboratorError
from ..pve.collaborators import GuestAgentQuery, LiveInterfaceQuery, StatusQuery, WorkloadStatus
from .kvline import ConfigDocument
from .matcher import AddressMatcher
from .model import (
    PRIMARY_INTERFACE,
    Resolved,
    ResolutionOutcome,
    ResolutionSource,
    SubnetSpec,
    Unresolved,
    UnresolvedReason,
    Workload,
    WorkloadKind,
)

GUEST_AGENT_TIMEOUT_S = 10.0


class TagResolver:
    @staticmethod
    def resolve(tags_field: Optional[str], subnet: SubnetSpec) -> Optional[str]:
        if not tags_field:
            return None
        return AddressMatcher.extract_from_tag_list(tags_field.split(";"), subnet)

    @staticmethod
    def tags_of(workload: Workload) -> Optional[str]:
        return ConfigDocument.parse(workload.raw_config_text).get_value("tags")


class LiveIPResolver:
    """Ask the running workload which addresses its primary interface holds."""

    def __init__(
        self,
        logger: logging.Logger,
        status: StatusQuery,
        live: LiveInterfaceQuery,
        agent: GuestAgentQuery,
        *,
        interface_name: str = PRIMARY_INTERFACE,
        agent_timeout_s: float = GUEST_AGENT_TIMEOUT_S,
    ):
        self.logger = logger
        self.status = status
        self.live = live
        self.agent = agent
        self.interface_name = interface_name
        self.agent_timeout_s = agent_timeout_s

    def resolve(self, workload: Workload, subnet: SubnetSpec) -> ResolutionOutcome:
        if self.status.status(workload.vmid, workload.kind) is not WorkloadStatus.RUNNING:
            return Unresolved(UnresolvedReason.WORKLOAD_NOT_RUNNING)

        if workload.kind is WorkloadKind.CONTAINER:
            return self._resolve_container(workload, subnet)
        return self._resolve_vm(workload, subnet)

    def _resolve_container(self, workload: Workload, subnet: SubnetSpec) -> ResolutionOutcome:
        try:
            interfaces = self.live.list_addresses(workload.vmid, self.interface_name)
        except CollaboratorError as e:
            self.logger.debug("Live query failed for %s %s: %s", workload.kind.label, workload.vmid, e)
            return Unresolved(UnresolvedReason.NO_MATCHING_INTERFACE)
        return self._pick(interfaces, subnet)

    def _resolve_vm(self, workload: Workload, subnet: SubnetSpec) -> ResolutionOutcome:
        try:
            interfaces = self.agent.network_interfaces(workload.vmid, timeout_s=self.agent_timeout_s)
        except CollaboratorError as e:
            self.logger.debug("Guest agent query failed for VM %s: %s", workload.vmid, e)
            return Unresolved(UnresolvedReason.NO_GUEST_AGENT)
        if not interfaces:
            return Unresolved(UnresolvedReason.NO_GUEST_AGENT)
        return self._pick(interfaces, subnet)

    def _pick(self, interfaces, subnet: SubnetSpec) -> ResolutionOutcome:
        found = AddressMatcher.extract_from_interface_list(interfaces, subnet, self.interface_name)
        if found is None:
            return Unresolved(UnresolvedReason.NO_MATCHING_INTERFACE)
        return Resolved(found, ResolutionSource.LIVE)


class IPResolutionPipeline:
    """live=None restricts resolution to tags (--tags-only)."""

    def __init__(self, logger: logging.Logger, live: Optional[LiveIPResolver]):
        self.logger = logger
        self.live = live

    def resolve(self, workload: Workload, subnet: SubnetSpec) -> ResolutionOutcome:
        tagged = TagResolver.resolve(TagResolver.tags_of(workload), subnet)
        if tagged is not None:
            return Resolved(tagged, ResolutionSource.TAG)

        if self.live is None:
            return Unresolved(UnresolvedReason.NO_TAG_MATCH)

        self.logger.debug("No tag in %s for %s %s, querying live IP", subnet, workload.kind.label, workload.vmid)
        return self.live.resolve(workload, subnet)
