"""Declared boundary classification of a mesh.

A boundary group is an ordered list of node-id polylines. Three groups exist:
open (ocean-forced), land and interior (island). Each group validates its
node references against the shared node store when it is built.
"""
import enum
import logging

from .errors import DanglingNodeReference
from .nodes import as_node_id

logger = logging.getLogger(__name__)

__all__ = [
    "BoundaryType",
    "OpenBoundaries",
    "LandBoundaries",
    "InteriorBoundaries",
    "Boundaries",
]


class BoundaryType(enum.Enum):
    OPEN = "open"
    LAND = "land"
    INTERIOR = "interior"


class _BoundaryGroup:
    boundary_type = None

    def __init__(self, nodes_ids, nodes):
        segments = [tuple(as_node_id(n) for n in segment) for segment in nodes_ids]
        node_id_set = nodes.id_set()
        for index, segment in enumerate(segments):
            dangling = [n for n in segment if n not in node_id_set]
            if dangling:
                raise DanglingNodeReference(
                    f"{self.boundary_type.value} boundary", index, dangling
                )
        self._nodes_ids = segments
        self._nodes = nodes

    @property
    def nodes_ids(self):
        return list(self._nodes_ids)

    @property
    def nodes(self):
        return self._nodes

    def __len__(self):
        return len(self._nodes_ids)

    def __iter__(self):
        return iter(self._nodes_ids)

    def __repr__(self):
        return f"{type(self).__name__}(segments={len(self)})"

    def rebind(self, nodes):
        return type(self)(self._nodes_ids, nodes)


class OpenBoundaries(_BoundaryGroup):
    boundary_type = BoundaryType.OPEN


class LandBoundaries(_BoundaryGroup):
    boundary_type = BoundaryType.LAND


class InteriorBoundaries(_BoundaryGroup):
    boundary_type = BoundaryType.INTERIOR


class Boundaries:
    """The three optional boundary groups of a mesh."""

    def __init__(self, open=None, land=None, interior=None):
        self._groups = {
            BoundaryType.OPEN: open,
            BoundaryType.LAND: land,
            BoundaryType.INTERIOR: interior,
        }

    @property
    def open(self):
        return self._groups[BoundaryType.OPEN]

    @property
    def land(self):
        return self._groups[BoundaryType.LAND]

    @property
    def interior(self):
        return self._groups[BoundaryType.INTERIOR]

    def __repr__(self):
        counts = ", ".join(
            f"{kind.value}={len(group) if group is not None else None}"
            for kind, group in self._groups.items()
        )
        return f"Boundaries({counts})"

    def to_boundary_type_map(self):
        """Return ``{BoundaryType: [segment, ...]}`` for the groups present."""
        return {
            kind: group.nodes_ids
            for kind, group in self._groups.items()
            if group is not None
        }

    def rebind(self, nodes):
        """Rebuild every present group against another node store."""
        return Boundaries(
            **{
                kind.value: None if group is None else group.rebind(nodes)
                for kind, group in self._groups.items()
            }
        )
