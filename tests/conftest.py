import pytest

from oceangrid import (
    Boundaries,
    Elements,
    Hgrid,
    InteriorBoundaries,
    LandBoundaries,
    Nodes,
    OpenBoundaries,
)


def make_hgrid(nodes, elements, crs=None, **kwargs):
    """Build an Hgrid from ``{id: (x, y[, depth])}`` and ``{id: [node ids]}``."""
    node_map = {
        node_id: (xyz[:2], None if len(xyz) == 2 else [xyz[2]])
        for node_id, xyz in nodes.items()
    }
    _nodes = Nodes(node_map, crs=crs)
    return Hgrid(_nodes, Elements(elements, _nodes), **kwargs)


@pytest.fixture
def unit_square():
    """Two counter-clockwise triangles covering [0, 1] x [0, 1]."""
    return make_hgrid(
        {
            1: (0.0, 0.0, 1.0),
            2: (1.0, 0.0, 2.0),
            3: (1.0, 1.0, 3.0),
            4: (0.0, 1.0, 4.0),
        },
        {1: [1, 2, 3], 2: [1, 3, 4]},
        description="unit square",
    )


@pytest.fixture
def annulus():
    """Four quads filling [0, 3] x [0, 3] around a square hole [1, 2] x [1, 2].

    The outer square is declared open (bottom) and land (the rest), the hole
    is declared interior.
    """
    node_map = {
        1: ((0.0, 0.0), [10.0]),
        2: ((3.0, 0.0), [10.0]),
        3: ((3.0, 3.0), [10.0]),
        4: ((0.0, 3.0), [10.0]),
        5: ((1.0, 1.0), [5.0]),
        6: ((2.0, 1.0), [5.0]),
        7: ((2.0, 2.0), [5.0]),
        8: ((1.0, 2.0), [5.0]),
    }
    nodes = Nodes(node_map, crs="EPSG:4326")
    elements = Elements(
        {
            1: [1, 2, 6, 5],
            2: [2, 3, 7, 6],
            3: [3, 4, 8, 7],
            4: [4, 1, 5, 8],
        },
        nodes,
    )
    boundaries = Boundaries(
        open=OpenBoundaries([[1, 2]], nodes),
        land=LandBoundaries([[2, 3, 4, 1]], nodes),
        interior=InteriorBoundaries([[5, 6, 7, 8, 5]], nodes),
    )
    return Hgrid(nodes, elements, boundaries=boundaries, description="annulus")


@pytest.fixture
def hgrid_factory():
    return make_hgrid
