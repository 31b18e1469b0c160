"""Exceptions raised by oceangrid.

Construction-time invariant violations (element shape, dangling node
references) and CRS failures are raised as subclasses of
:class:`HgridError`. Geometric and topological anomalies are never raised;
they are reported by :func:`oceangrid.validation.check_validity`.
"""

__all__ = [
    "HgridError",
    "InvalidNodeId",
    "InvalidNodeCoordinates",
    "InvalidElementId",
    "InvalidElementSize",
    "DanglingNodeReference",
    "NoCrsDefined",
    "TransformError",
    "Gr3ParseError",
]


class HgridError(ValueError):
    """Base class for all mesh construction and transformation errors."""


class InvalidNodeId(HgridError):
    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Node id must be a positive integer, got {node_id!r}")


class InvalidNodeCoordinates(HgridError):
    def __init__(self, node_id, coords):
        self.node_id = node_id
        self.coords = coords
        super().__init__(
            f"Node {node_id} must have exactly 2 coordinates (x, y), got {coords!r}"
        )


class InvalidElementId(HgridError):
    def __init__(self, element_id):
        self.element_id = element_id
        super().__init__(f"Element id must be a positive integer, got {element_id!r}")


class InvalidElementSize(HgridError):
    """An element has a node count other than 3 (triangle) or 4 (quad)."""

    def __init__(self, element_id, size):
        self.element_id = element_id
        self.size = size
        super().__init__(
            f"Element {element_id} has {size} nodes; "
            "elements must have exactly 3 or 4 nodes"
        )


class DanglingNodeReference(HgridError):
    """A component references node ids that are absent from the node store.

    Parameters
    ----------
    owner: str
        What holds the reference, e.g. ``"element"`` or ``"open boundary"``.
    owner_id: int
        Element id, or segment index for boundary groups.
    node_ids: list of int
        The dangling node ids.
    """

    def __init__(self, owner, owner_id, node_ids):
        self.owner = owner
        self.owner_id = owner_id
        self.node_ids = list(node_ids)
        super().__init__(
            f"{owner.capitalize()} {owner_id} references node ids not present "
            f"in the node store: {self.node_ids}"
        )


class NoCrsDefined(HgridError):
    def __init__(self):
        super().__init__(
            "No CRS defined for hgrid - cannot perform coordinate transformation"
        )


class TransformError(HgridError):
    pass


class Gr3ParseError(HgridError):
    """Malformed gr3 input. Carries the source name and 1-based line number."""

    def __init__(self, fname, lineno, msg):
        self.fname = fname
        self.lineno = lineno
        where = f"{fname}" if lineno is None else f"{fname}, line {lineno}"
        super().__init__(f"Error reading gr3 file {where}: {msg}")
