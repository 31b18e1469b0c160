import enum
import logging
import os

import numpy as np

from . import boundary_polygon as _boundary_polygon
from . import gr3, hashing, region, sms2dm, validation
from .boundaries import Boundaries, InteriorBoundaries, LandBoundaries, OpenBoundaries
from .edges import get_boundary_edges
from .elements import Elements
from .errors import HgridError, NoCrsDefined
from .nodes import Nodes

logger = logging.getLogger(__name__)

__all__ = ["DepthConvention", "Hgrid"]


class DepthConvention(enum.Enum):
    """Meaning of a positive node value."""

    POSITIVE_DOWN = "positive_down"  # depth below the surface
    POSITIVE_UP = "positive_up"  # elevation above the surface

    def flipped(self):
        if self is DepthConvention.POSITIVE_DOWN:
            return DepthConvention.POSITIVE_UP
        return DepthConvention.POSITIVE_DOWN


class Hgrid:
    """Unstructured horizontal grid: nodes, elements and declared boundaries.

    The node store is shared by reference with the element store and every
    boundary group. Coordinate transformations return a new :class:`Hgrid`;
    :meth:`flip_depth_sign` is the only operation that changes an existing
    one.

    Parameters
    ----------
    nodes: :class:`~oceangrid.nodes.Nodes`
    elements: :class:`~oceangrid.elements.Elements`
        Must have been built against `nodes`.
    boundaries: :class:`~oceangrid.boundaries.Boundaries`, optional
        Every present group must have been built against `nodes`.
    description: str, optional
    depth_convention: DepthConvention, optional
        How node values are to be read. Defaults to positive-down.
    """

    def __init__(
        self,
        nodes,
        elements,
        boundaries=None,
        description=None,
        depth_convention=DepthConvention.POSITIVE_DOWN,
    ):
        if elements.nodes is not nodes:
            raise HgridError("Elements were built against a different node store")
        if boundaries is not None:
            for group in (boundaries.open, boundaries.land, boundaries.interior):
                if group is not None and group.nodes is not nodes:
                    raise HgridError(
                        f"{type(group).__name__} were built against a different node store"
                    )
        self._nodes = nodes
        self._elements = elements
        self._boundaries = boundaries
        self._description = description
        self._depth_convention = DepthConvention(depth_convention)

    def __repr__(self):
        return (
            f"Hgrid(description={self._description!r}, nodes={len(self._nodes)}, "
            f"elements={len(self._elements)}, "
            f"depth_convention={self._depth_convention.value})"
        )

    @classmethod
    def from_parser_output(
        cls, output, depth_convention=DepthConvention.POSITIVE_DOWN
    ):
        """Build a validated grid from the primitive maps of a parser.

        File values are depths, positive down. They are negated on the way in
        when `depth_convention` is positive-up.

        Raises
        ------
        InvalidElementSize, DanglingNodeReference
        """
        depth_convention = DepthConvention(depth_convention)
        nodes = Nodes(output.nodes, crs=output.crs)
        if depth_convention is DepthConvention.POSITIVE_UP:
            nodes = nodes.with_negated_values()
        elements = Elements(output.elements or {}, nodes)

        groups = {}
        for name, group_cls, segments in (
            ("open", OpenBoundaries, output.open_boundaries),
            ("land", LandBoundaries, output.land_boundaries),
            ("interior", InteriorBoundaries, output.interior_boundaries),
        ):
            if segments:
                groups[name] = group_cls(segments, nodes)
        boundaries = Boundaries(**groups) if groups else None

        return cls(
            nodes,
            elements,
            boundaries=boundaries,
            description=output.description,
            depth_convention=depth_convention,
        )

    @classmethod
    def open(cls, path, depth_convention=DepthConvention.POSITIVE_DOWN):
        """Read a gr3 file into a validated grid."""
        return cls.from_parser_output(gr3.read(path), depth_convention)

    def to_parser_output(self):
        """Primitive maps for a writer, values expressed positive-down."""
        values_sign = 1.0
        if self._depth_convention is DepthConvention.POSITIVE_UP:
            values_sign = -1.0
        nodes = {
            node_id: (coords, None if values is None else [values_sign * v for v in values])
            for node_id, (coords, values) in self._nodes.hash_map.items()
        }
        elements = {k: list(v) for k, v in self._elements.hash_map.items()} or None

        groups = {}
        if self._boundaries is not None:
            for kind, segments in self._boundaries.to_boundary_type_map().items():
                groups[kind.value] = [list(s) for s in segments]
        return gr3.Gr3ParserOutput(
            nodes=nodes,
            elements=elements,
            open_boundaries=groups.get("open"),
            land_boundaries=groups.get("land"),
            interior_boundaries=groups.get("interior"),
            description=self._description,
            crs=self.crs,
        )

    def write(self, path, overwrite=False):
        """Write the grid as gr3 with positive-down depths."""
        gr3.write(self.to_parser_output(), path, overwrite=overwrite)

    def write_2dm(self, path, overwrite=False):
        """Write the grid as an SMS 2dm file with positive-down depths."""
        sms2dm.write(self.to_parser_output(), os.fspath(path), overwrite=overwrite)

    @property
    def nodes(self):
        return self._nodes

    @property
    def elements(self):
        return self._elements

    @property
    def boundaries(self):
        return self._boundaries

    @property
    def description(self):
        return self._description

    @property
    def depth_convention(self):
        return self._depth_convention

    @property
    def crs(self):
        return self._nodes.crs

    @property
    def x(self):
        return self._nodes.x()

    @property
    def y(self):
        return self._nodes.y()

    @property
    def xy(self):
        return self._nodes.xy()

    @property
    def values(self):
        """First value of each node as stored, NaN where a node has none."""
        return self._nodes.first_values()

    @property
    def depths(self):
        """First value of each node as a positive-down depth."""
        if self._depth_convention is DepthConvention.POSITIVE_UP:
            return -self.values
        return self.values

    def get_number_of_elements_connected_to_each_node(self):
        """``{node_id: number of elements using the node}`` in node order."""
        counts = dict.fromkeys(self._nodes.hash_map, 0)
        for node_ids in self._elements.hash_map.values():
            for node_id in node_ids:
                counts[node_id] += 1
        return counts

    def _rebind(self, nodes):
        elements = self._elements.rebind(nodes)
        boundaries = None
        if self._boundaries is not None:
            boundaries = self._boundaries.rebind(nodes)
        return elements, boundaries

    def flip_depth_sign(self):
        """Negate every node value and toggle the depth convention.

        A new node store is built and the elements and boundaries are rebound
        to it before any attribute of this grid changes.
        """
        nodes = self._nodes.with_negated_values()
        elements, boundaries = self._rebind(nodes)
        convention = self._depth_convention.flipped()
        logger.info(
            f"Flipping depth sign: {self._depth_convention.value} -> {convention.value}"
        )
        self._nodes, self._elements, self._boundaries = nodes, elements, boundaries
        self._depth_convention = convention

    # ---- CRS dependent operations
    def is_geographic(self):
        """True if the CRS is geographic (lon/lat); False if projected or undefined."""
        return region.is_geographic(self.crs)

    def crs_definition(self):
        return region.get_crs_string(self.crs)

    def centroid_lonlat(self):
        """Mean node position as ``(longitude, latitude)`` in EPSG:4326.

        Raises
        ------
        NoCrsDefined
            The grid is not geographic and has no CRS to transform from.
        TransformError
        """
        mean_x = float(np.mean(self.x)) if len(self._nodes) else 0.0
        mean_y = float(np.mean(self.y)) if len(self._nodes) else 0.0
        if self.is_geographic():
            return mean_x, mean_y
        if self.crs is None:
            raise NoCrsDefined()
        transform = region.get_transformer(self.crs, "EPSG:4326")
        lon, lat = transform(mean_x, mean_y)
        return float(lon), float(lat)

    def transform_to(self, dst_crs):
        """Reproject every node, returning a new grid in `dst_crs`.

        Raises
        ------
        NoCrsDefined
        TransformError
        """
        if self.crs is None:
            raise NoCrsDefined()
        logger.info(f"Reprojecting hgrid from {self.crs_definition()} to {dst_crs}")
        transform = region.get_transformer(self.crs, dst_crs)
        x, y = transform(self.x, self.y)
        nodes = self._nodes.with_xy(x, y, crs=dst_crs)
        elements, boundaries = self._rebind(nodes)
        return Hgrid(
            nodes,
            elements,
            boundaries=boundaries,
            description=self._description,
            depth_convention=self._depth_convention,
        )

    def to_lonlat(self):
        """Grid in EPSG:4326. A geographic grid is returned unchanged."""
        if self.is_geographic():
            return self
        return self.transform_to("EPSG:4326")

    # ---- hashing
    def calculate_hash(self):
        return hashing.calculate_hash(self)

    def quick_hash(self):
        return hashing.quick_hash(self)

    # ---- derived topology
    def boundary_edges(self):
        """Edges used by exactly one element, as ``(min id, max id)`` rows."""
        return get_boundary_edges(self._elements.hash_map)

    def boundary_rings(self):
        """Closed (or, for malformed meshes, open) boundary rings."""
        return _boundary_polygon.extract_boundary_rings(self._elements)

    def boundary_polygon(self):
        return _boundary_polygon.boundary_polygon(self)

    def contains_point(self, x, y):
        """Whether ``(x, y)`` lies inside the mesh domain, island holes excluded."""
        return bool(self.contains_points([(x, y)])[0])

    def contains_points(self, points):
        """Vectorized :meth:`contains_point`.

        Parameters
        ----------
        points: array-like
            ``(n, 2)`` coordinates.

        Returns
        -------
        numpy.ndarray[`bool`]
        """
        return self.boundary_polygon().contains(points)

    def check_validity(self, area_tol=validation.AREA_TOL):
        """Run every structural and geometric check. Never raises."""
        return validation.check_validity(self, area_tol=area_tol)
