import logging
from collections import defaultdict, deque

import numpy as np

logger = logging.getLogger(__name__)

__all__ = [
    "get_edges",
    "get_boundary_edges",
    "get_non_manifold_edges",
    "edges_to_rings",
    "is_closed_ring",
]


def unique_row_view(data):
    """https://github.com/numpy/numpy/issues/11136"""
    b = np.ascontiguousarray(data).view(
        np.dtype((np.void, data.dtype.itemsize * data.shape[1]))
    )
    u, cnts = np.unique(b, return_counts=True)
    u = u.view(data.dtype).reshape(-1, data.shape[1])
    return u, cnts


def get_edges(entities):
    """Get the directed edges of every element in traversal order (NB: are repeated)

    :param entities: element connectivity, ``{element_id: node_ids}`` or an
        iterable of node-id sequences of length 3 or 4
    :type entities: mapping or iterable

    :return: edges: ``(node[i], node[i + 1 mod n])`` for every element
    :rtype: numpy.ndarray[`int` x 2]
    """
    if hasattr(entities, "values"):
        entities = entities.values()
    edges = [
        (cell[i], cell[(i + 1) % len(cell)])
        for cell in entities
        for i in range(len(cell))
    ]
    if not edges:
        return np.zeros((0, 2), dtype=np.int64)
    return np.array(edges, dtype=np.int64)


def _edge_counts(entities):
    edges = get_edges(entities)
    if len(edges) == 0:
        return edges, np.zeros(0, dtype=np.int64)
    edges = np.sort(edges, axis=1)
    return unique_row_view(edges)


def get_boundary_edges(entities):
    """Get the boundary edges of the mesh. Boundary edges appear in exactly one element.

    :param entities: element connectivity
    :type entities: mapping or iterable

    :return: boundary_edges: ``(min id, max id)`` pairs on the mesh boundary
    :rtype: numpy.ndarray[`int` x 2]
    """
    unq, cnt = _edge_counts(entities)
    return unq[cnt == 1]


def get_non_manifold_edges(entities):
    """Get edges shared by three or more elements.

    Such edges are neither boundary nor interior edges of a 2-manifold mesh
    and are excluded from boundary extraction.

    :return: edges as ``(min id, max id)`` pairs
    :rtype: numpy.ndarray[`int` x 2]
    """
    unq, cnt = _edge_counts(entities)
    return unq[cnt >= 3]


def is_closed_ring(ring):
    return len(ring) > 1 and ring[0][0] == ring[-1][1]


def edges_to_rings(edges):
    """Chain unordered boundary edges into rings.

    A ring is started from the last unassigned edge and grown at its end,
    then at its start, by any unassigned edge sharing the current end node.
    Edges are reversed as needed so that each ring reads as a continuous
    sequence of directed edges. Growth stops when the ring closes or no
    incident edge is left, in which case the open ring is still returned.
    Among several candidates the earliest edge in `edges` wins.

    Parameters
    ----------
    edges: array-like
        An iterable of ``(a, b)`` node-id pairs.

    Returns
    -------
    rings: list of list of tuple
        Each ring is a list of directed ``(a, b)`` edges.
    """
    edges = [(int(a), int(b)) for a, b in edges]
    if not edges:
        return []

    incident = defaultdict(list)
    for index, (a, b) in enumerate(edges):
        incident[a].append(index)
        if b != a:
            incident[b].append(index)
    cursor = defaultdict(int)
    assigned = [False] * len(edges)

    def take(node):
        # earliest unassigned edge touching `node`
        candidates = incident.get(node, ())
        pos = cursor[node]
        while pos < len(candidates) and assigned[candidates[pos]]:
            pos += 1
        cursor[node] = pos
        if pos == len(candidates):
            return None
        index = candidates[pos]
        assigned[index] = True
        return edges[index]

    rings = []
    last = len(edges) - 1
    while True:
        while last >= 0 and assigned[last]:
            last -= 1
        if last < 0:
            break
        assigned[last] = True
        ring = deque([edges[last]])

        while True:
            ring_start = ring[0][0]
            ring_end = ring[-1][1]
            if ring_start == ring_end and len(ring) > 1:
                break

            edge = take(ring_end)
            if edge is not None:
                a, b = edge
                ring.append((a, b) if a == ring_end else (b, a))
                continue

            edge = take(ring_start)
            if edge is not None:
                a, b = edge
                ring.appendleft((a, b) if b == ring_start else (b, a))
                continue

            break

        rings.append(list(ring))

    n_open = sum(1 for ring in rings if not is_closed_ring(ring))
    if n_open:
        logger.warning(f"{n_open} of {len(rings)} boundary rings are not closed")
    logger.debug(f"Chained {len(edges)} boundary edges into {len(rings)} rings")
    return rings
