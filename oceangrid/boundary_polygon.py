"""Mesh boundary polygon extraction for point-in-mesh containment testing.

The polygon is derived from element connectivity alone, so it does not
depend on the (possibly absent or incomplete) declared boundaries. The
exterior perimeter and every island hole become rings, and the rings are
flattened into the node/edge arrays consumed by
:func:`oceangrid.inpoly.inpoly2`.
"""
import logging

import numpy as np

from . import edges
from .inpoly import inpoly2

logger = logging.getLogger(__name__)

__all__ = ["BoundaryPolygon", "extract_boundary_rings", "boundary_polygon"]


class BoundaryPolygon:
    """Flattened mesh boundary.

    Attributes
    ----------
    nodes: numpy.ndarray[`float` x 2]
        Coordinates of the distinct ring nodes, in order of first appearance.
    edges: numpy.ndarray[`int` x 2]
        Ring edges as row indices into `nodes`.
    node_ids: numpy.ndarray[`int`]
        Mesh node id of every row of `nodes`.
    """

    def __init__(self, nodes, edges, node_ids):
        self.nodes = nodes
        self.edges = edges
        self.node_ids = node_ids

    def __repr__(self):
        return f"BoundaryPolygon(nodes={len(self.nodes)}, edges={len(self.edges)})"

    @property
    def is_empty(self):
        return len(self.edges) == 0

    @classmethod
    def from_rings(cls, rings, nodes):
        """Build the flattened arrays from rings of node-id edges.

        Parameters
        ----------
        rings: list of list of tuple
            As returned by :func:`oceangrid.edges.edges_to_rings`.
        nodes: :class:`~oceangrid.nodes.Nodes`
        """
        index_of = {}
        for ring in rings:
            for a, b in ring:
                for node_id in (a, b):
                    if node_id not in index_of:
                        index_of[node_id] = len(index_of)

        node_ids = np.fromiter(index_of, dtype=np.int64, count=len(index_of))
        if len(node_ids) == 0:
            xy = np.zeros((0, 2), dtype=float)
        else:
            xy = np.array([nodes.get_node(n) for n in index_of], dtype=float)

        edge_index = [(index_of[a], index_of[b]) for ring in rings for a, b in ring]
        if edge_index:
            edge_index = np.array(edge_index, dtype=np.int64)
        else:
            edge_index = np.zeros((0, 2), dtype=np.int64)
        return cls(xy, edge_index, node_ids)

    def contains(self, points):
        """Inside/outside status of each point. Points on an edge count as inside.

        Parameters
        ----------
        points: array-like
            ``(n, 2)`` coordinates.

        Returns
        -------
        numpy.ndarray[`bool`]
        """
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        if self.is_empty or len(points) == 0:
            return np.zeros(len(points), dtype=bool)
        stat, _ = inpoly2(points, self.nodes, self.edges)
        return stat


def extract_boundary_rings(elements):
    """Boundary rings (exterior and holes) of an element store.

    Edges shared by three or more elements are not boundary edges; they are
    logged and left out.
    """
    logger.info("Extracting mesh boundary rings...")
    non_manifold = edges.get_non_manifold_edges(elements.hash_map)
    if len(non_manifold):
        logger.warning(
            f"{len(non_manifold)} edges are shared by more than two elements; "
            "boundary rings may be incomplete"
        )
    boundary_edges = edges.get_boundary_edges(elements.hash_map)
    return edges.edges_to_rings(boundary_edges)


def boundary_polygon(hgrid):
    """Flattened boundary polygon of `hgrid`, recomputed on every call."""
    rings = extract_boundary_rings(hgrid.elements)
    return BoundaryPolygon.from_rings(rings, hgrid.nodes)
