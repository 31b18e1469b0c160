"""Reader and writer for the ``.gr3`` horizontal grid format.

The format is line oriented::

    <description> [<crs>]
    NE NP
    id x y [v1 v2 ...]           NP lines
    id k n1 ... nk               NE lines, k is 3 or 4
    NOPE ! total number of open boundaries
    NETA ! total number of open boundary nodes
    count ! number of nodes for ocean_boundary_1
    node_id                      count lines
    ...
    NBOU ! total number of land boundaries
    NVEL ! total number of land boundary nodes
    count ibtype ! number of nodes for land_boundary_1
    node_id                      count lines
    ...

The boundary section is optional. ``ibtype`` 0 marks a land boundary and 1
an interior (island) boundary. Anything after ``!`` is a comment. Node values
in a file are depths, positive downwards.

The reader only produces primitive id-keyed maps (:class:`Gr3ParserOutput`);
building and validating a mesh from them is the job of
:meth:`oceangrid.hgrid.Hgrid.from_parser_output`.
"""
import logging
import os
import tempfile

from .errors import Gr3ParseError
from .region import crs_from_description, get_crs_string

logger = logging.getLogger(__name__)

__all__ = ["Gr3ParserOutput", "read", "reads", "write", "dumps"]

NODATA = -99999.0
LAND_IBTYPE = 0
INTERIOR_IBTYPE = 1


class Gr3ParserOutput:
    """Primitive content of a gr3 file.

    Attributes
    ----------
    nodes: dict
        ``{node_id: ((x, y), values or None)}`` in file order.
    elements: dict or None
        ``{element_id: [node ids]}`` in file order.
    open_boundaries, land_boundaries, interior_boundaries: list or None
        Lists of node-id lists.
    description: str or None
    crs: pyproj.CRS or None
    """

    def __init__(
        self,
        nodes,
        elements=None,
        open_boundaries=None,
        land_boundaries=None,
        interior_boundaries=None,
        description=None,
        crs=None,
    ):
        self.nodes = nodes
        self.elements = elements
        self.open_boundaries = open_boundaries
        self.land_boundaries = land_boundaries
        self.interior_boundaries = interior_boundaries
        self.description = description
        self.crs = crs

    def __repr__(self):
        return (
            f"Gr3ParserOutput(description={self.description!r}, "
            f"nodes={len(self.nodes)}, "
            f"elements={len(self.elements) if self.elements else 0})"
        )

    def has_boundaries(self):
        return any(
            group is not None
            for group in (
                self.open_boundaries,
                self.land_boundaries,
                self.interior_boundaries,
            )
        )


class _Lines:
    """Line cursor that strips ``!`` comments and tracks line numbers."""

    def __init__(self, lines, fname):
        self._lines = iter(lines)
        self.fname = fname
        self.lineno = 0

    def next_raw(self):
        line = next(self._lines, None)
        if line is None:
            return None
        self.lineno += 1
        return line.rstrip("\r\n")

    def fields(self, what):
        line = self.next_raw()
        if line is None:
            raise Gr3ParseError(
                self.fname, self.lineno, f"Unexpected end of file, expected {what}."
            )
        fields = line.split("!", 1)[0].split()
        if not fields:
            raise Gr3ParseError(
                self.fname, self.lineno, f"Expected {what} but found an empty line."
            )
        return fields

    def next_nonblank(self):
        """Fields of the next non-blank line, or None at end of file."""
        while True:
            line = self.next_raw()
            if line is None:
                return None
            fields = line.split("!", 1)[0].split()
            if fields:
                return fields

    def error(self, msg):
        return Gr3ParseError(self.fname, self.lineno, msg)

    def to_int(self, token, what):
        try:
            return int(token)
        except ValueError:
            raise self.error(f"Expected {what} to be an integer but found {token!r}.")

    def to_float(self, token, what):
        try:
            return float(token)
        except ValueError:
            raise self.error(f"Expected {what} to be a number but found {token!r}.")


def read(path):
    """Read a gr3 file.

    Parameters
    ----------
    path: str or os.PathLike

    Returns
    -------
    Gr3ParserOutput
    """
    path = os.fspath(path)
    logger.info(f"Reading gr3 file {path}")
    with open(path) as f:
        return _parse(_Lines(f, path))


def reads(text, fname="<string>"):
    """Parse gr3 content held in a string."""
    return _parse(_Lines(text.splitlines(), fname))


def _parse(lines):
    header = lines.next_raw()
    if header is None:
        raise Gr3ParseError(lines.fname, None, "File is empty.")
    description, crs = crs_from_description(header)

    fields = lines.fields("NE NP")
    if len(fields) < 2:
        raise lines.error("Expected second line to contain NE NP.")
    ne = lines.to_int(fields[0], "number of elements NE")
    np_ = lines.to_int(fields[1], "number of nodes NP")

    logger.debug(f"Reading {np_} nodes...")
    nodes = {}
    for _ in range(np_):
        fields = lines.fields("node data")
        if len(fields) < 3:
            raise lines.error("Expected node line to contain id x y.")
        node_id = lines.to_int(fields[0], "node id")
        x = lines.to_float(fields[1], "node x")
        y = lines.to_float(fields[2], "node y")
        values = [lines.to_float(v, "node value") for v in fields[3:]]
        if node_id in nodes:
            raise lines.error(f"Duplicate node id {node_id}.")
        nodes[node_id] = ((x, y), values or None)

    logger.debug(f"Reading {ne} elements...")
    elements = {}
    for _ in range(ne):
        fields = lines.fields("element data")
        if len(fields) < 2:
            raise lines.error("Expected element line to contain id and node count.")
        element_id = lines.to_int(fields[0], "element id")
        k = lines.to_int(fields[1], "element node count")
        if len(fields) < 2 + k:
            raise lines.error(
                f"Element {element_id} declares {k} nodes but lists {len(fields) - 2}."
            )
        if element_id in elements:
            raise lines.error(f"Duplicate element id {element_id}.")
        elements[element_id] = [
            lines.to_int(n, "element node id") for n in fields[2 : 2 + k]
        ]

    output = Gr3ParserOutput(
        nodes=nodes,
        elements=elements or None,
        description=description or None,
        crs=crs,
    )

    fields = lines.next_nonblank()
    if fields is None:
        logger.debug("No boundary section found")
        return output

    nope = lines.to_int(fields[0], "number of open boundaries")
    lines.fields("total number of open boundary nodes")
    open_boundaries = [
        _read_segment(lines, "open boundary", with_ibtype=False)[0]
        for _ in range(nope)
    ]

    land_boundaries = []
    interior_boundaries = []
    fields = lines.next_nonblank()
    if fields is not None:
        nbou = lines.to_int(fields[0], "number of land boundaries")
        lines.fields("total number of land boundary nodes")
        for _ in range(nbou):
            segment, ibtype = _read_segment(lines, "land boundary", with_ibtype=True)
            if ibtype == INTERIOR_IBTYPE:
                interior_boundaries.append(segment)
            else:
                land_boundaries.append(segment)

    output.open_boundaries = open_boundaries or None
    output.land_boundaries = land_boundaries or None
    output.interior_boundaries = interior_boundaries or None
    logger.debug("Done with parsing full file!")
    return output


def _read_segment(lines, what, with_ibtype):
    fields = lines.fields(f"{what} header")
    count = lines.to_int(fields[0], f"number of nodes for {what}")
    ibtype = None
    if with_ibtype:
        if len(fields) < 2:
            raise lines.error(f"Expected {what} header to contain count and ibtype.")
        ibtype = lines.to_int(fields[1], "boundary ibtype")
        if ibtype not in (LAND_IBTYPE, INTERIOR_IBTYPE):
            raise lines.error(f"Expected boundary ibtype to be 0 or 1 but found {ibtype}.")
    segment = [
        lines.to_int(lines.fields(f"{what} node id")[0], f"{what} node id")
        for _ in range(count)
    ]
    return segment, ibtype


def _current_umask():
    umask = os.umask(0)
    os.umask(umask)
    return umask


def _format_float(value):
    return repr(float(value))


def dumps(output):
    """Render a :class:`Gr3ParserOutput` as gr3 text.

    Node and element ids are renumbered from 1 in insertion order and every
    node reference is mapped through the node renumbering.
    """
    header = " ".join(
        part
        for part in (output.description, get_crs_string(output.crs))
        if part
    )
    elements = output.elements or {}
    lines = [header, f"{len(elements)} {len(output.nodes)}"]

    local_index = {}
    for index, (node_id, (coords, values)) in enumerate(output.nodes.items(), 1):
        local_index[node_id] = index
        if values:
            value_str = " ".join(_format_float(v) for v in values)
        else:
            value_str = _format_float(NODATA)
        lines.append(
            f"{index} {_format_float(coords[0])} {_format_float(coords[1])} {value_str}"
        )

    for index, node_ids in enumerate(elements.values(), 1):
        node_str = " ".join(str(local_index[n]) for n in node_ids)
        lines.append(f"{index} {len(node_ids)} {node_str}")

    if output.has_boundaries():
        open_boundaries = output.open_boundaries or []
        lines.append(f"{len(open_boundaries)} ! total number of open boundaries")
        lines.append(
            f"{sum(len(b) for b in open_boundaries)} "
            "! total number of open boundary nodes"
        )
        for index, segment in enumerate(open_boundaries, 1):
            lines.append(f"{len(segment)} ! number of nodes for ocean_boundary_{index}")
            lines.extend(str(local_index[n]) for n in segment)

        land = output.land_boundaries or []
        interior = output.interior_boundaries or []
        lines.append(f"{len(land) + len(interior)} ! total number of land boundaries")
        lines.append(
            f"{sum(len(b) for b in land) + sum(len(b) for b in interior)} "
            "! total number of land boundary nodes"
        )
        for index, segment in enumerate(land, 1):
            lines.append(
                f"{len(segment)} {LAND_IBTYPE} ! number of nodes for land_boundary_{index}"
            )
            lines.extend(str(local_index[n]) for n in segment)
        for index, segment in enumerate(interior, 1):
            lines.append(
                f"{len(segment)} {INTERIOR_IBTYPE} "
                f"! number of nodes for interior_boundary_{index}"
            )
            lines.extend(str(local_index[n]) for n in segment)

    return "\n".join(lines) + "\n"


def write(output, path, overwrite=False):
    """Write a :class:`Gr3ParserOutput` to `path`.

    The text goes to a temporary file in the destination directory which is
    then renamed over `path`, so readers never see a half-written grid.

    Raises
    ------
    FileExistsError
        `path` exists and `overwrite` is False.
    """
    path = os.fspath(path)
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(f"{path} exists and overwrite is False")
    logger.info(f"Exporting mesh to gr3 file {path}...")
    text = dumps(output)
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".gr3.tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        # mkstemp creates 0600; give the grid the mode a plain open would
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise
