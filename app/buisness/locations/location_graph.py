"""
Location Graph

Read-only hierarchy of sites: CENTRAL warehouses at the root, BRANCH locations under a
central, FIELD teams under a branch. Built once at startup from the persisted locations and
shared by every component for the lifetime of the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


class LocationType(str, Enum):
    CENTRAL = "CENTRAL"
    BRANCH = "BRANCH"
    FIELD = "FIELD"


# Required parent tier for each location tier
_PARENT_TYPE = {
    LocationType.CENTRAL: None,
    LocationType.BRANCH: LocationType.CENTRAL,
    LocationType.FIELD: LocationType.BRANCH,
}


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    type: LocationType
    parent_id: Optional[str] = None


class LocationGraph:
    """
    Immutable location forest.

    Lookups on unknown ids return empty results instead of raising; the graph is
    trusted configuration, callers that need a hard failure check membership first.
    """

    def __init__(self, locations: Iterable[Location], default_root_id: Optional[str] = None):
        """
        Build the graph and validate the tier rules

        Args:
            locations: All locations, in any order
            default_root_id: Location that parentless locations resolve to. Defaults to
                the first CENTRAL location.

        Raises:
            ValueError: On duplicate ids, unknown parents or a parent of the wrong tier
        """
        nodes: Dict[str, Location] = {}
        for location in locations:
            if location.id in nodes:
                raise ValueError(f"Duplicate location id: {location.id}")
            nodes[location.id] = location

        children: Dict[str, List[str]] = {location_id: [] for location_id in nodes}
        for location in nodes.values():
            expected_parent_type = _PARENT_TYPE[location.type]
            if location.parent_id is None:
                if expected_parent_type is not None:
                    raise ValueError(f"{location.type.value} location {location.id} requires a parent")
                continue
            parent = nodes.get(location.parent_id)
            if parent is None:
                raise ValueError(f"Location {location.id} references unknown parent {location.parent_id}")
            if parent.type != expected_parent_type:
                raise ValueError(
                    f"{location.type.value} location {location.id} cannot sit under "
                    f"{parent.type.value} location {parent.id}"
                )
            children[parent.id].append(location.id)

        if default_root_id is not None and default_root_id not in nodes:
            raise ValueError(f"Default root {default_root_id} is not a known location")
        if default_root_id is None:
            default_root_id = next(
                (location.id for location in nodes.values() if location.type == LocationType.CENTRAL),
                None,
            )

        self._nodes = MappingProxyType(nodes)
        self._children: Dict[str, Tuple[str, ...]] = {
            location_id: tuple(child_ids) for location_id, child_ids in children.items()
        }
        self._default_root_id = default_root_id
        self._descendants_cache: Dict[str, FrozenSet[str]] = {}

    @property
    def default_root_id(self) -> Optional[str]:
        return self._default_root_id

    def __contains__(self, location_id) -> bool:
        return location_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes.values())

    def get(self, location_id: str) -> Optional[Location]:
        return self._nodes.get(location_id)

    def children_of(self, location_id: str) -> Tuple[str, ...]:
        return self._children.get(location_id, ())

    def locations_of_type(self, location_type: LocationType) -> List[Location]:
        return [location for location in self._nodes.values() if location.type == location_type]

    def resolve_source(self, location_id: str) -> Optional[str]:
        """
        Location that fulfills requests raised by ``location_id``

        The parent location when there is one. A parentless location falls back to the
        default root, and to itself when no root is configured.

        Returns:
            Location id, or None for an unknown location
        """
        location = self._nodes.get(location_id)
        if location is None:
            return None
        if location.parent_id is not None:
            return location.parent_id
        return self._default_root_id or location.id

    def descendants_of(self, location_id: str) -> FrozenSet[str]:
        """The location itself plus every location below it; empty for unknown ids"""
        if location_id not in self._nodes:
            return frozenset()
        cached = self._descendants_cache.get(location_id)
        if cached is not None:
            return cached

        found = set()
        stack = [location_id]
        while stack:
            current = stack.pop()
            if current in found:
                continue
            found.add(current)
            stack.extend(self._children.get(current, ()))

        result = frozenset(found)
        self._descendants_cache[location_id] = result
        return result

    def is_within(self, location_id: str, ancestor_id: Optional[str]) -> bool:
        if ancestor_id is None:
            return False
        return location_id in self.descendants_of(ancestor_id)
