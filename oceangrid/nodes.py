import logging
from types import MappingProxyType

import numpy as np
from pyproj import CRS

from .errors import InvalidNodeCoordinates, InvalidNodeId

logger = logging.getLogger(__name__)

__all__ = ["Nodes", "is_valid_id", "as_node_id"]


def is_valid_id(value):
    """True for a positive integral id (`3` or `3.0`, but not `3.7`, `0` or `True`)."""
    if isinstance(value, bool):
        return False
    try:
        return int(value) == value and value >= 1
    except (TypeError, ValueError):
        return False


def as_node_id(value):
    """Node reference as an int. Raises :class:`InvalidNodeId` for anything else."""
    if not is_valid_id(value):
        raise InvalidNodeId(value)
    return int(value)


class Nodes:
    """Insertion-ordered, immutable store of mesh nodes.

    Each node id maps to a pair ``(coords, values)`` where ``coords`` is an
    ``(x, y)`` tuple of floats and ``values`` is either ``None`` or a tuple of
    scalar attributes, the first of which is conventionally the depth.

    The store is shared by reference between :class:`~oceangrid.elements.Elements`,
    the boundary groups and :class:`~oceangrid.hgrid.Hgrid`. It is never
    mutated after construction; operations that change coordinates or values
    build a new store.

    Parameters
    ----------
    hash_map: mapping
        ``{node_id: (coords, values)}``. Iteration order is preserved.
    crs: pyproj.CRS | str | int, optional
        Coordinate reference system of the coordinates. Anything accepted by
        :meth:`pyproj.CRS.from_user_input`.
    """

    def __init__(self, hash_map, crs=None):
        store = {}
        for node_id, (coords, values) in hash_map.items():
            if not is_valid_id(node_id):
                raise InvalidNodeId(node_id)
            coords = tuple(float(c) for c in coords)
            if len(coords) != 2:
                raise InvalidNodeCoordinates(node_id, coords)
            if values is not None:
                values = tuple(float(v) for v in values)
            store[int(node_id)] = (coords, values)
        self._hash_map = store
        self._crs = None if crs is None else CRS.from_user_input(crs)
        self._id_set = None

    @property
    def hash_map(self):
        """Read-only view of ``{node_id: (coords, values)}``."""
        return MappingProxyType(self._hash_map)

    @property
    def crs(self):
        return self._crs

    def id_set(self):
        """Set of node ids, built once and reused by every reference check."""
        if self._id_set is None:
            self._id_set = frozenset(self._hash_map)
        return self._id_set

    def __len__(self):
        return len(self._hash_map)

    def __contains__(self, node_id):
        return node_id in self._hash_map

    def __iter__(self):
        return iter(self._hash_map)

    def __repr__(self):
        return f"Nodes(n={len(self)}, crs={self._crs.to_string() if self._crs else None})"

    def get_node(self, node_id):
        """Return ``(x, y)`` for `node_id` or ``None`` when absent."""
        entry = self._hash_map.get(node_id)
        if entry is None:
            return None
        return entry[0]

    def x(self):
        return np.array([c[0] for c, _ in self._hash_map.values()], dtype=float)

    def y(self):
        return np.array([c[1] for c, _ in self._hash_map.values()], dtype=float)

    def xy(self):
        """Coordinates as an ``(n, 2)`` array in insertion order."""
        if not self._hash_map:
            return np.zeros((0, 2), dtype=float)
        return np.array([c for c, _ in self._hash_map.values()], dtype=float)

    def first_values(self):
        """First value of every node in insertion order, NaN where absent."""
        return np.array(
            [v[0] if v else np.nan for _, v in self._hash_map.values()], dtype=float
        )

    def with_negated_values(self):
        """Return a new store whose values all have the opposite sign."""
        negated = {
            node_id: (coords, None if values is None else tuple(-v for v in values))
            for node_id, (coords, values) in self._hash_map.items()
        }
        return Nodes(negated, crs=self._crs)

    def with_xy(self, x, y, crs=None):
        """Return a new store with the same ids and values at new coordinates.

        Parameters
        ----------
        x, y: array-like
            New coordinates, one per node in insertion order.
        crs: optional
            CRS of the new coordinates.
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if x.shape != (len(self),) or y.shape != (len(self),):
            raise ValueError(
                f"Expected {len(self)} coordinates, got x{x.shape} and y{y.shape}"
            )
        logger.debug(f"Moving {len(self)} nodes to new coordinates")
        moved = {
            node_id: ((xi, yi), values)
            for (node_id, (_, values)), xi, yi in zip(
                self._hash_map.items(), x.tolist(), y.tolist()
            )
        }
        return Nodes(moved, crs=crs)
