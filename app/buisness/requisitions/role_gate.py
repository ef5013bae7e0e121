"""
Role Gate

The single policy table deciding who may move a requisition, who may see it, and who may
book stock into a location. Location authority always goes through
``LocationGraph.descendants_of``.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from app.buisness.core.actor import Actor, Role
from app.buisness.locations.location_graph import LocationGraph
from app.buisness.requisitions.requisition import Requisition, RequisitionStatus


class Scope(str, Enum):
    ANY = "ANY"
    TARGET_SUBTREE = "TARGET_SUBTREE"  # target is under the actor's location
    TARGET_OWN = "TARGET_OWN"          # target is the actor's own location


# Statuses each non-administrative role may request, with the location scope that applies.
# Every granted status has exactly one inbound edge, so a grant is an edge grant; repeating
# a request after the status moved on reaches the transition table and fails as illegal.
TRANSITION_POLICY: Dict[Role, Dict[RequisitionStatus, Scope]] = {
    Role.MANAGER: {
        RequisitionStatus.DELIVERED: Scope.TARGET_SUBTREE,
    },
    Role.WORKER: {
        RequisitionStatus.CONFIRMED: Scope.TARGET_OWN,
    },
}


class RoleGate:

    def __init__(self, graph: LocationGraph):
        self.graph = graph

    def transition_denial(self, actor: Actor, requisition: Requisition,
                          new_status: RequisitionStatus) -> Optional[str]:
        """
        Why ``actor`` may not move ``requisition`` to ``new_status``

        Returns:
            None when allowed, otherwise a human readable reason
        """
        if actor.role.is_administrative:
            return None

        scope = TRANSITION_POLICY.get(actor.role, {}).get(new_status)
        if scope is None:
            return f"Role {actor.role.value} may not set requisitions to {new_status.value}"
        if not self._in_scope(actor, requisition.target_location_id, scope):
            return (
                f"{actor} has no authority over target location "
                f"{requisition.target_location_id} of requisition {requisition.id}"
            )
        return None

    def can_transition(self, actor: Actor, requisition: Requisition, new_status: RequisitionStatus) -> bool:
        return self.transition_denial(actor, requisition, new_status) is None

    def can_view(self, actor: Actor, requisition: Requisition) -> bool:
        if actor.role.is_administrative:
            return True
        if actor.role == Role.MANAGER:
            scope = self.graph.descendants_of(actor.location_id) if actor.location_id else frozenset()
            return requisition.source_location_id in scope or requisition.target_location_id in scope
        return requisition.target_location_id == actor.location_id or requisition.requester_id == actor.id

    def can_receive_stock(self, actor: Actor, location_id: str) -> bool:
        if actor.role.is_administrative:
            return True
        if actor.role == Role.MANAGER:
            return self.graph.is_within(location_id, actor.location_id)
        return False

    def _in_scope(self, actor: Actor, location_id: str, scope: Scope) -> bool:
        if scope == Scope.ANY:
            return True
        if actor.location_id is None:
            return False
        if scope == Scope.TARGET_OWN:
            return location_id == actor.location_id
        return self.graph.is_within(location_id, actor.location_id)
