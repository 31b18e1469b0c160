"""Mesh validation.

Structural checks (node references of elements and declared boundaries)
and geometric checks (element area sign, degeneracy, quad concavity,
orientation consistency between neighbours, non-manifold edges). Every
check runs on every call and findings are collected in a
:class:`MeshValidation` report; nothing here raises for a bad mesh and the
mesh is never modified.
"""
import logging

import numpy as np

from .geometry import quad_sub_areas, simp_vol

logger = logging.getLogger(__name__)

__all__ = ["AREA_TOL", "MeshValidation", "check_validity"]

# Tolerance for zero-area detection, in squared coordinate units
AREA_TOL = 1e-10


class MeshValidation:
    """Result of mesh validation containing all detected issues.

    Use :meth:`is_ok` for a quick pass/fail check, or inspect individual
    attributes for the offending ids.

    Attributes
    ----------
    invalid_element_node_refs: list of (int, list of int)
        Element ids paired with the node ids they reference but which do not
        exist.
    invalid_open_boundary_refs, invalid_land_boundary_refs,
    invalid_interior_boundary_refs: list of int
        Indices of boundary segments referencing missing nodes.
    negative_area_elements: list of int
        Clockwise elements (signed area below ``-area_tol``).
    zero_area_elements: list of int
        Degenerate elements (``|area| <= area_tol``).
    concave_quads: list of int
    orientation_conflicts: list of (int, int)
        Neighbouring elements that traverse their shared edge in the same
        direction.
    non_manifold_edges: list of ((int, int), list of int)
        Edges shared by three or more elements, with the element ids.
    """

    _STRUCTURAL = (
        "invalid_element_node_refs",
        "invalid_open_boundary_refs",
        "invalid_land_boundary_refs",
        "invalid_interior_boundary_refs",
    )
    _GEOMETRIC = (
        "negative_area_elements",
        "zero_area_elements",
        "concave_quads",
        "orientation_conflicts",
        "non_manifold_edges",
    )
    _LABELS = {
        "invalid_element_node_refs": "elements with invalid node refs",
        "invalid_open_boundary_refs": "open boundaries with invalid node refs",
        "invalid_land_boundary_refs": "land boundaries with invalid node refs",
        "invalid_interior_boundary_refs": "interior boundaries with invalid node refs",
        "negative_area_elements": "elements with negative area",
        "zero_area_elements": "degenerate (zero-area) elements",
        "concave_quads": "concave quad elements",
        "orientation_conflicts": "orientation conflicts",
        "non_manifold_edges": "non-manifold edges",
    }

    def __init__(self):
        for name in self._STRUCTURAL + self._GEOMETRIC:
            setattr(self, name, [])

    def is_ok(self):
        """True if all validation checks passed."""
        return self.is_structurally_valid() and self.is_geometrically_valid()

    def is_structurally_valid(self):
        return not any(getattr(self, name) for name in self._STRUCTURAL)

    def is_geometrically_valid(self):
        return not any(getattr(self, name) for name in self._GEOMETRIC)

    def issue_count(self):
        return sum(len(getattr(self, name)) for name in self._STRUCTURAL + self._GEOMETRIC)

    def __repr__(self):
        return f"MeshValidation(issues={self.issue_count()})"

    def __str__(self):
        if self.is_ok():
            return "Mesh validation: OK"
        lines = [f"Mesh validation: {self.issue_count()} issues found"]
        for name in self._STRUCTURAL + self._GEOMETRIC:
            found = getattr(self, name)
            if found:
                lines.append(f"  - {len(found)} {self._LABELS[name]}")
        return "\n".join(lines)


def check_validity(hgrid, area_tol=AREA_TOL):
    """Perform comprehensive mesh validation.

    Parameters
    ----------
    hgrid: :class:`~oceangrid.hgrid.Hgrid`
        Any object exposing ``nodes``, ``elements`` and ``boundaries`` the
        way :class:`~oceangrid.hgrid.Hgrid` does.
    area_tol: float, optional
        Areas with magnitude at or below this are degenerate.

    Returns
    -------
    MeshValidation
    """
    result = MeshValidation()
    node_ids = set(hgrid.nodes.hash_map)

    _check_element_refs(hgrid, node_ids, result)
    _check_boundary_refs(hgrid, node_ids, result)
    _check_element_geometry(hgrid, node_ids, result, area_tol)
    _check_orientation_consistency(hgrid, result)

    if result.is_ok():
        logger.info("Mesh validation: OK")
    else:
        logger.info(f"Mesh validation: {result.issue_count()} issues found")
    return result


def _check_element_refs(hgrid, node_ids, result):
    for elem_id, elem_nodes in hgrid.elements.hash_map.items():
        invalid = [n for n in elem_nodes if n not in node_ids]
        if invalid:
            result.invalid_element_node_refs.append((elem_id, invalid))


def _check_boundary_refs(hgrid, node_ids, result):
    boundaries = hgrid.boundaries
    if boundaries is None:
        return
    for group, found in (
        (boundaries.open, result.invalid_open_boundary_refs),
        (boundaries.land, result.invalid_land_boundary_refs),
        (boundaries.interior, result.invalid_interior_boundary_refs),
    ):
        if group is None:
            continue
        for idx, segment in enumerate(group):
            if any(n not in node_ids for n in segment):
                found.append(idx)


def _check_element_geometry(hgrid, node_ids, result, area_tol):
    row_of = {node_id: row for row, node_id in enumerate(hgrid.nodes.hash_map)}
    p = hgrid.nodes.xy()

    tri_ids, tris, quad_ids, quads = [], [], [], []
    for elem_id, elem_nodes in hgrid.elements.hash_map.items():
        if any(n not in node_ids for n in elem_nodes):
            # missing nodes - already caught by structural check
            continue
        rows = [row_of[n] for n in elem_nodes]
        if len(rows) == 3:
            tri_ids.append(elem_id)
            tris.append(rows)
        elif len(rows) == 4:
            quad_ids.append(elem_id)
            quads.append(rows)

    tri_area = simp_vol(p, np.array(tris, dtype=np.int64).reshape(-1, 3))
    sub = quad_sub_areas(p, np.array(quads, dtype=np.int64).reshape(-1, 4))
    quad_area = sub[:, 0] + sub[:, 1]

    ids = tri_ids + quad_ids
    area = np.concatenate((tri_area, quad_area))
    is_negative = area < -area_tol
    is_zero = np.abs(area) <= area_tol
    is_concave = np.concatenate(
        (np.zeros(len(tri_ids), dtype=bool), sub.min(axis=1, initial=np.inf) <= -area_tol)
    )

    # report in element insertion order
    position = {elem_id: pos for pos, elem_id in enumerate(hgrid.elements.hash_map)}
    order = sorted(range(len(ids)), key=lambda i: position[ids[i]])
    for i in order:
        if is_negative[i]:
            result.negative_area_elements.append(ids[i])
        elif is_zero[i]:
            result.zero_area_elements.append(ids[i])
        if is_concave[i]:
            result.concave_quads.append(ids[i])


def _check_orientation_consistency(hgrid, result):
    # An edge (a, b) with a < b traversed as-is is "forward". Adjacent,
    # consistently wound elements traverse their shared edge in opposite
    # directions.
    first_claim = {}
    claimants = {}
    for elem_id, elem_nodes in hgrid.elements.hash_map.items():
        n = len(elem_nodes)
        for i in range(n):
            a = elem_nodes[i]
            b = elem_nodes[(i + 1) % n]
            canonical = (a, b) if a < b else (b, a)
            is_forward = a < b

            claimants.setdefault(canonical, []).append(elem_id)
            if canonical in first_claim:
                other_elem, other_forward = first_claim[canonical]
                if is_forward == other_forward:
                    result.orientation_conflicts.append((other_elem, elem_id))
            else:
                first_claim[canonical] = (elem_id, is_forward)

    for canonical, elem_ids in claimants.items():
        if len(elem_ids) >= 3:
            result.non_manifold_edges.append((canonical, elem_ids))
    if result.non_manifold_edges:
        logger.warning(
            f"{len(result.non_manifold_edges)} edges are shared by more than two elements"
        )
