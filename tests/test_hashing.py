from oceangrid import Elements, Hgrid, Nodes


def _grid(depth=1.0, description="grid", crs=None):
    nodes = Nodes(
        {
            1: ((0.0, 0.0), [depth]),
            2: ((1.0, 0.0), [depth]),
            3: ((0.0, 1.0), [depth]),
        },
        crs=crs,
    )
    return Hgrid(nodes, Elements({1: [1, 2, 3]}, nodes), description=description)


def test_equal_meshes_hash_equally():
    assert _grid().calculate_hash() == _grid().calculate_hash()
    assert _grid().quick_hash() == _grid().quick_hash()


def test_hash_format():
    digest = _grid().calculate_hash()
    assert len(digest) == 64
    int(digest, 16)
    assert isinstance(_grid().quick_hash(), int)


def test_hash_covers_content():
    base = _grid()
    for other in (
        _grid(depth=2.0),
        _grid(description="other"),
        _grid(crs="EPSG:4326"),
    ):
        assert other.calculate_hash() != base.calculate_hash()
        assert other.quick_hash() != base.quick_hash()


def test_hash_covers_boundaries(annulus):
    stripped = Hgrid(annulus.nodes, annulus.elements, description=annulus.description)
    assert stripped.calculate_hash() != annulus.calculate_hash()


def test_hash_ignores_derived_data(annulus):
    before = annulus.calculate_hash()
    annulus.boundary_polygon()
    annulus.check_validity()
    assert annulus.calculate_hash() == before
