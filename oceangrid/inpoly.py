import logging
import os

import numpy as np
from numba import jit

logger = logging.getLogger(__name__)

__all__ = ["inpoly2", "accel_enabled"]

_FALSY = ("0", "false", "False", "no", "off")


def accel_enabled():
    """Whether the numba-compiled kernel is used.

    Controlled by the ``OCEANGRID_INPOLY_ACCEL`` environment variable, read
    at call time. Unset or truthy selects the compiled kernel.
    """
    return os.environ.get("OCEANGRID_INPOLY_ACCEL", "1") not in _FALSY


def inpoly2(vert, node, edge=None, ftol=5.0e-14):
    """Compute "points-in-polygon" queries.

       Returns the "inside/outside" status for a set of vertices VERT and
       a polygon {NODE,EDGE} embedded in a two-dimensional plane. General
       non-convex and multiply-connected polygonal regions can be handled:
       points inside an interior ring (a hole) are outside.

    Parameters
    ----------
    vert: array-like
        VERT is an N-by-2 array of XY coordinates to query.

    node: array-like
        NODE is an M-by-2 array of polygon vertices.

    edge: array-like, optional
        EDGE is a P-by-2 array of edge indexing into NODE. If omitted the
        vertices in NODE are assumed to be connected in ascending order.

    ftol: float, optional
        FTOL is a floating-point tolerance for boundary comparisons.

    Returns
    -------
    STAT: array-like
        N-by-1 boolean array, True where VERT is an interior point or lies on
        the boundary.

    BNDS: array-like
        N-by-1 boolean array, True where VERT lies "on" a boundary segment.

    Notes
    -----
    Crossing-number test after Darren Engwirda's `inpoly`: query points are
    sorted by y and each edge only visits the points inside its y-range,
    found by binary search.
    """
    vert = np.asarray(vert, dtype=np.float64).reshape(-1, 2)
    node = np.asarray(node, dtype=np.float64).reshape(-1, 2)

    STAT = np.full(vert.shape[0], False, dtype=bool)
    BNDS = np.full(vert.shape[0], False, dtype=bool)

    if node.size == 0 or vert.size == 0:
        return STAT, BNDS

    if edge is None:
        nnod = node.shape[0]
        edge = np.column_stack((np.arange(nnod), np.roll(np.arange(nnod), -1)))
    edge = np.array(edge, dtype=np.int64).reshape(-1, 2)

    if edge.size == 0:
        return STAT, BNDS

    # prune points using bbox
    used = edge.ravel()
    xmin = np.nanmin(node[used, 0])
    xmax = np.nanmax(node[used, 0])
    ymin = np.nanmin(node[used, 1])
    ymax = np.nanmax(node[used, 1])

    # tolerances scale with the polygon only
    lbar = ((xmax - xmin) + (ymax - ymin)) / 2.0
    veps = lbar * ftol

    mask = (
        (vert[:, 0] >= xmin - veps)
        & (vert[:, 1] >= ymin - veps)
        & (vert[:, 0] <= xmax + veps)
        & (vert[:, 1] <= ymax + veps)
    )

    vert = vert[mask]
    if vert.size == 0:
        return STAT, BNDS

    # flip to ensure y-axis is the `long` axis of the polygon
    if (xmax - xmin) > (ymax - ymin):
        vert = vert[:, (1, 0)]
        node = node[:, (1, 0)]
    vert = np.ascontiguousarray(vert)
    node = np.ascontiguousarray(node)

    # sort points via y-value
    swap = node[edge[:, 1], 1] < node[edge[:, 0], 1]
    edge[swap, :] = edge[swap][:, (1, 0)]

    ivec = np.argsort(vert[:, 1], kind="quicksort")
    ysrt = vert[ivec, 1]
    veps = ftol * lbar
    ione = np.searchsorted(ysrt, node[edge[:, 0], 1] - veps, "left")
    itwo = np.searchsorted(ysrt, node[edge[:, 1], 1] + veps, "right")

    kernel = _inpoly_jit if accel_enabled() else _inpoly
    stat, bnds = kernel(vert, node, edge, ivec, ione, itwo, ftol, lbar)

    STAT[mask] = stat
    BNDS[mask] = bnds

    return STAT, BNDS


def _inpoly(vert, node, edge, ivec, ione, itwo, ftol, lbar):
    feps = ftol * lbar
    veps = ftol * lbar

    stat = np.zeros(vert.shape[0], dtype=np.bool_)
    bnds = np.zeros(vert.shape[0], dtype=np.bool_)

    # loop over polygon edges
    for epos in range(edge.shape[0]):
        inod = edge[epos, 0]
        jnod = edge[epos, 1]

        xone = node[inod, 0]
        xtwo = node[jnod, 0]
        yone = node[inod, 1]
        ytwo = node[jnod, 1]

        xmin = min(xone, xtwo) - veps
        xmax = max(xone, xtwo) + veps

        xdel = xtwo - xone
        ydel = ytwo - yone
        edel = abs(xdel) + ydel

        # calc. edge-intersection
        for jpos in range(ione[epos], itwo[epos]):
            jvrt = ivec[jpos]

            if bnds[jvrt]:
                continue

            xpos = vert[jvrt, 0]
            ypos = vert[jvrt, 1]

            if xpos >= xmin:
                if xpos <= xmax:
                    # compute crossing number
                    mul1 = ydel * (xpos - xone)
                    mul2 = xdel * (ypos - yone)

                    if feps * edel >= abs(mul2 - mul1):
                        # BNDS -- approx. on edge
                        bnds[jvrt] = True
                        stat[jvrt] = True
                    elif (ypos == yone) and (xpos == xone):
                        # BNDS -- match about ONE
                        bnds[jvrt] = True
                        stat[jvrt] = True
                    elif (ypos == ytwo) and (xpos == xtwo):
                        # BNDS -- match about TWO
                        bnds[jvrt] = True
                        stat[jvrt] = True
                    elif (mul1 <= mul2) and (ypos >= yone) and (ypos < ytwo):
                        # advance crossing number
                        stat[jvrt] = not stat[jvrt]

            elif (ypos >= yone) and (ypos < ytwo):
                # advance crossing number
                stat[jvrt] = not stat[jvrt]

    return stat, bnds


_inpoly_jit = jit(nopython=True)(_inpoly)
