from oceangrid.boundaries import (
    Boundaries,
    BoundaryType,
    InteriorBoundaries,
    LandBoundaries,
    OpenBoundaries,
)
from oceangrid.boundary_polygon import BoundaryPolygon
from oceangrid.edges import edges_to_rings, get_boundary_edges, get_edges
from oceangrid.elements import Elements
from oceangrid.errors import (
    DanglingNodeReference,
    Gr3ParseError,
    HgridError,
    InvalidElementId,
    InvalidElementSize,
    InvalidNodeCoordinates,
    InvalidNodeId,
    NoCrsDefined,
    TransformError,
)
from oceangrid.geometry import quad_sub_areas, simp_vol
from oceangrid.gr3 import Gr3ParserOutput
from oceangrid.hgrid import DepthConvention, Hgrid
from oceangrid.inpoly import inpoly2
from oceangrid.nodes import Nodes
from oceangrid.validation import AREA_TOL, MeshValidation, check_validity

__version__ = "0.1.0"

__all__ = [
    "Hgrid",
    "DepthConvention",
    "Nodes",
    "Elements",
    "Boundaries",
    "BoundaryType",
    "OpenBoundaries",
    "LandBoundaries",
    "InteriorBoundaries",
    "BoundaryPolygon",
    "Gr3ParserOutput",
    "MeshValidation",
    "check_validity",
    "AREA_TOL",
    "inpoly2",
    "get_edges",
    "get_boundary_edges",
    "edges_to_rings",
    "simp_vol",
    "quad_sub_areas",
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
