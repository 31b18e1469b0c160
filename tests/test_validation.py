from types import SimpleNamespace

from oceangrid import AREA_TOL, MeshValidation, Nodes, check_validity


def test_clean_mesh_is_ok(unit_square, annulus):
    for hgrid in (unit_square, annulus):
        result = hgrid.check_validity()
        assert result.is_ok()
        assert result.is_structurally_valid()
        assert result.is_geometrically_valid()
        assert result.issue_count() == 0
        assert str(result) == "Mesh validation: OK"


def test_clockwise_triangle(hgrid_factory):
    hgrid = hgrid_factory(
        {1: (0.0, 0.0), 2: (1.0, 0.0), 3: (0.0, 1.0)}, {7: [1, 3, 2]}
    )
    result = hgrid.check_validity()
    assert result.negative_area_elements == [7]
    assert result.zero_area_elements == []
    assert result.concave_quads == []
    assert result.orientation_conflicts == []
    assert result.is_structurally_valid()
    assert not result.is_geometrically_valid()


def test_flipped_neighbour_conflict(hgrid_factory):
    hgrid = hgrid_factory(
        {1: (0.0, 0.0), 2: (1.0, 0.0), 3: (1.0, 1.0), 4: (0.0, 1.0)},
        {1: [1, 2, 3], 2: [1, 4, 3]},
    )
    result = hgrid.check_validity()
    assert result.negative_area_elements == [2]
    assert result.orientation_conflicts == [(1, 2)]
    assert result.issue_count() == 2


def test_degenerate_triangle(hgrid_factory):
    hgrid = hgrid_factory(
        {1: (0.0, 0.0), 2: (1.0, 0.0), 3: (2.0, 0.0)}, {1: [1, 2, 3]}
    )
    result = hgrid.check_validity()
    assert result.zero_area_elements == [1]
    assert result.negative_area_elements == []


def test_area_tolerance(hgrid_factory):
    hgrid = hgrid_factory(
        {1: (0.0, 0.0), 2: (1.0e-6, 0.0), 3: (0.0, 1.0e-6)}, {1: [1, 2, 3]}
    )
    assert hgrid.check_validity().zero_area_elements == [1]
    assert AREA_TOL == 1e-10
    assert hgrid.check_validity(area_tol=1e-14).is_ok()


def test_concave_quad(hgrid_factory):
    hgrid = hgrid_factory(
        {1: (0.0, 0.0), 2: (2.0, 0.0), 3: (2.0, 2.0), 4: (1.0, 0.5)},
        {1: [1, 2, 3, 4]},
    )
    result = hgrid.check_validity()
    assert result.concave_quads == [1]
    assert result.negative_area_elements == []
    assert result.zero_area_elements == []


def test_clockwise_quad(hgrid_factory):
    hgrid = hgrid_factory(
        {1: (0.0, 0.0), 2: (1.0, 0.0), 3: (1.0, 1.0), 4: (0.0, 1.0)},
        {1: [1, 4, 3, 2]},
    )
    result = hgrid.check_validity()
    assert result.negative_area_elements == [1]
    # every corner triangle of a clockwise quad is negative
    assert result.concave_quads == [1]


def test_issues_reported_in_element_order(hgrid_factory):
    hgrid = hgrid_factory(
        {
            1: (0.0, 0.0),
            2: (1.0, 0.0),
            3: (0.0, 1.0),
            4: (5.0, 5.0),
            5: (6.0, 5.0),
            6: (6.0, 6.0),
            7: (5.0, 6.0),
        },
        {30: [4, 7, 6, 5], 10: [1, 3, 2]},
    )
    assert hgrid.check_validity().negative_area_elements == [30, 10]


def test_non_manifold_edges(hgrid_factory):
    hgrid = hgrid_factory(
        {
            1: (0.0, 0.0),
            2: (1.0, 0.0),
            3: (0.5, 1.0),
            4: (0.5, -1.0),
            5: (0.5, 2.0),
        },
        {1: [1, 2, 3], 2: [2, 1, 4], 3: [1, 2, 5]},
    )
    result = hgrid.check_validity()
    assert result.non_manifold_edges == [((1, 2), [1, 2, 3])]
    assert result.orientation_conflicts == [(1, 3)]
    assert result.negative_area_elements == []
    assert not result.is_geometrically_valid()


def test_dangling_references_reported():
    nodes = Nodes(
        {1: ((0.0, 0.0), None), 2: ((1.0, 0.0), None), 3: ((0.0, 1.0), None)}
    )
    hgrid = SimpleNamespace(
        nodes=nodes,
        elements=SimpleNamespace(hash_map={1: (1, 99, 2), 2: (1, 2, 3)}),
        boundaries=SimpleNamespace(open=[[1, 2], [2, 42]], land=None, interior=[[3]]),
    )
    result = check_validity(hgrid)
    assert result.invalid_element_node_refs == [(1, [99])]
    assert result.invalid_open_boundary_refs == [1]
    assert result.invalid_land_boundary_refs == []
    assert result.invalid_interior_boundary_refs == []
    assert not result.is_structurally_valid()
    # element 1 is skipped by the geometric checks
    assert result.negative_area_elements == []
    assert result.zero_area_elements == []
    assert result.is_geometrically_valid()
    assert result.issue_count() == 2


def test_report_str():
    result = MeshValidation()
    result.negative_area_elements.extend([3, 4])
    result.orientation_conflicts.append((1, 2))
    text = str(result)
    assert text.splitlines() == [
        "Mesh validation: 3 issues found",
        "  - 2 elements with negative area",
        "  - 1 orientation conflicts",
    ]


def test_validation_does_not_modify(annulus):
    before = annulus.calculate_hash()
    annulus.check_validity()
    assert annulus.calculate_hash() == before
