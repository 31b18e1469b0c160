import logging
from types import MappingProxyType

from .errors import (
    DanglingNodeReference,
    InvalidElementId,
    InvalidElementSize,
)
from .nodes import as_node_id, is_valid_id

logger = logging.getLogger(__name__)

__all__ = ["Elements", "VALID_ELEMENT_SIZES"]

VALID_ELEMENT_SIZES = (3, 4)


class Elements:
    """Insertion-ordered store of triangles and quadrilaterals.

    Parameters
    ----------
    hash_map: mapping
        ``{element_id: node_ids}`` with 3 (triangle) or 4 (quad) node ids,
        listed in traversal order.
    nodes: :class:`~oceangrid.nodes.Nodes`
        The node store every element refers to. Held by reference.

    Raises
    ------
    InvalidElementId, InvalidNodeId
        An element id or node reference is not a positive integer.
    InvalidElementSize
        An element has a node count other than 3 or 4.
    DanglingNodeReference
        An element references a node id missing from `nodes`.
    """

    def __init__(self, hash_map, nodes):
        store = {}
        for element_id, node_ids in hash_map.items():
            if not is_valid_id(element_id):
                raise InvalidElementId(element_id)
            node_ids = tuple(as_node_id(n) for n in node_ids)
            if len(node_ids) not in VALID_ELEMENT_SIZES:
                raise InvalidElementSize(element_id, len(node_ids))
            store[int(element_id)] = node_ids

        node_id_set = nodes.id_set()
        for element_id, node_ids in store.items():
            dangling = [n for n in node_ids if n not in node_id_set]
            if dangling:
                raise DanglingNodeReference("element", element_id, dangling)

        self._hash_map = store
        self._nodes = nodes

    @property
    def hash_map(self):
        """Read-only view of ``{element_id: node_ids}``."""
        return MappingProxyType(self._hash_map)

    @property
    def nodes(self):
        return self._nodes

    def __len__(self):
        return len(self._hash_map)

    def __iter__(self):
        return iter(self._hash_map)

    def __repr__(self):
        return f"Elements(n={len(self)})"

    @property
    def triangles(self):
        return {k: v for k, v in self._hash_map.items() if len(v) == 3}

    @property
    def quads(self):
        return {k: v for k, v in self._hash_map.items() if len(v) == 4}

    def rebind(self, nodes):
        """Return the same connectivity attached to another node store."""
        return Elements(self._hash_map, nodes)
