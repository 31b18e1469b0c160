import numpy as np
import pytest

from oceangrid import (
    DepthConvention,
    Elements,
    Hgrid,
    HgridError,
    LandBoundaries,
    Boundaries,
    NoCrsDefined,
    Nodes,
    TransformError,
    gr3,
)


def _lonlat_grid():
    node_map = {
        1: ((-75.0, 40.0), [3.0]),
        2: ((-74.9, 40.0), [4.0]),
        3: ((-74.9, 40.1), [5.0]),
        4: ((-75.0, 40.1), [6.0]),
    }
    nodes = Nodes(node_map, crs="EPSG:4326")
    elements = Elements({1: [1, 2, 3], 2: [1, 3, 4]}, nodes)
    boundaries = Boundaries(land=LandBoundaries([[1, 2, 3, 4, 1]], nodes))
    return Hgrid(nodes, elements, boundaries=boundaries, description="lonlat")


def test_accessors(unit_square):
    assert unit_square.description == "unit square"
    assert unit_square.depth_convention is DepthConvention.POSITIVE_DOWN
    assert unit_square.crs is None
    assert unit_square.x.tolist() == [0.0, 1.0, 1.0, 0.0]
    assert unit_square.y.tolist() == [0.0, 0.0, 1.0, 1.0]
    assert unit_square.xy.shape == (4, 2)
    assert unit_square.values.tolist() == [1.0, 2.0, 3.0, 4.0]
    assert unit_square.depths.tolist() == [1.0, 2.0, 3.0, 4.0]
    assert unit_square.elements.nodes is unit_square.nodes


def test_mismatched_node_store():
    nodes = Nodes({1: ((0.0, 0.0), None), 2: ((1.0, 0.0), None), 3: ((0.0, 1.0), None)})
    other = nodes.with_negated_values()
    elements = Elements({1: [1, 2, 3]}, nodes)
    with pytest.raises(HgridError):
        Hgrid(other, elements)
    with pytest.raises(HgridError):
        Hgrid(nodes, elements, boundaries=Boundaries(land=LandBoundaries([[1, 2]], other)))


def test_from_parser_output_groups():
    output = gr3.Gr3ParserOutput(
        nodes={1: ((0.0, 0.0), [1.0]), 2: ((1.0, 0.0), [1.0]), 3: ((0.0, 1.0), [1.0])},
        elements={1: [1, 2, 3]},
        open_boundaries=[[1, 2]],
        land_boundaries=[],
    )
    hgrid = Hgrid.from_parser_output(output)
    assert hgrid.boundaries.open.nodes_ids == [(1, 2)]
    assert hgrid.boundaries.land is None
    assert hgrid.boundaries.interior is None
    assert hgrid.boundaries.open.nodes is hgrid.nodes


def test_number_of_elements_connected_to_each_node(hgrid_factory):
    hgrid = hgrid_factory(
        {
            1: (0.0, 0.0),
            2: (1.0, 0.0),
            3: (1.0, 1.0),
            4: (0.0, 1.0),
            5: (9.0, 9.0),
        },
        {1: [1, 2, 3], 2: [1, 3, 4]},
    )
    counts = hgrid.get_number_of_elements_connected_to_each_node()
    assert counts == {1: 2, 2: 1, 3: 2, 4: 1, 5: 0}
    assert list(counts) == [1, 2, 3, 4, 5]


def test_flip_depth_sign(annulus):
    before = annulus.calculate_hash()
    old_nodes = annulus.nodes
    annulus.flip_depth_sign()

    assert annulus.depth_convention is DepthConvention.POSITIVE_UP
    assert annulus.nodes is not old_nodes
    assert annulus.values.tolist() == [-10.0] * 4 + [-5.0] * 4
    assert annulus.depths.tolist() == [10.0] * 4 + [5.0] * 4
    assert annulus.elements.nodes is annulus.nodes
    for group in (
        annulus.boundaries.open,
        annulus.boundaries.land,
        annulus.boundaries.interior,
    ):
        assert group.nodes is annulus.nodes
    # the old store is untouched
    assert old_nodes.first_values().tolist() == [10.0] * 4 + [5.0] * 4
    assert annulus.calculate_hash() != before

    annulus.flip_depth_sign()
    assert annulus.depth_convention is DepthConvention.POSITIVE_DOWN
    assert annulus.calculate_hash() == before


def test_to_parser_output_is_positive_down(unit_square):
    unit_square.flip_depth_sign()
    output = unit_square.to_parser_output()
    assert output.nodes[4] == ((0.0, 1.0), [4.0])
    assert output.description == "unit square"


def test_is_geographic(unit_square):
    assert _lonlat_grid().is_geographic()
    assert not unit_square.is_geographic()
    assert not _lonlat_grid().transform_to("EPSG:32618").is_geographic()


def test_crs_definition(unit_square):
    assert _lonlat_grid().crs_definition() == "EPSG:4326"
    assert unit_square.crs_definition() is None


def test_centroid_lonlat():
    hgrid = _lonlat_grid()
    lon, lat = hgrid.centroid_lonlat()
    assert lon == pytest.approx(-74.95)
    assert lat == pytest.approx(40.05)

    projected = hgrid.transform_to("EPSG:32618")
    lon, lat = projected.centroid_lonlat()
    assert lon == pytest.approx(-74.95, abs=1e-3)
    assert lat == pytest.approx(40.05, abs=1e-3)


def test_centroid_without_crs(unit_square):
    with pytest.raises(NoCrsDefined):
        unit_square.centroid_lonlat()


def test_transform_to():
    hgrid = _lonlat_grid()
    utm = hgrid.transform_to("EPSG:32618")

    assert utm is not hgrid
    assert utm.crs_definition() == "EPSG:32618"
    assert hgrid.crs_definition() == "EPSG:4326"
    assert list(utm.nodes) == list(hgrid.nodes)
    assert utm.values.tolist() == hgrid.values.tolist()
    assert dict(utm.elements.hash_map) == dict(hgrid.elements.hash_map)
    assert utm.elements.nodes is utm.nodes
    assert utm.boundaries.land.nodes is utm.nodes
    assert utm.description == hgrid.description
    # UTM zone 18N eastings around -75 degrees are near the central meridian
    assert np.all(np.abs(utm.x - 500000.0) < 10000.0)

    back = utm.to_lonlat()
    assert np.allclose(back.x, hgrid.x, atol=1e-8)
    assert np.allclose(back.y, hgrid.y, atol=1e-8)


def test_to_lonlat_geographic_is_identity():
    hgrid = _lonlat_grid()
    assert hgrid.to_lonlat() is hgrid


def test_transform_errors(unit_square):
    with pytest.raises(NoCrsDefined):
        unit_square.transform_to("EPSG:4326")
    with pytest.raises(TransformError):
        _lonlat_grid().transform_to("not a crs")


def test_transform_preserves_topology():
    hgrid = _lonlat_grid()
    utm = hgrid.transform_to("EPSG:32618")
    assert utm.check_validity().is_ok()
    assert len(utm.boundary_rings()) == 1
    assert utm.contains_point(float(np.mean(utm.x)), float(np.mean(utm.y)))


def test_repr(unit_square):
    assert "nodes=4" in repr(unit_square)
    assert "elements=2" in repr(unit_square)
