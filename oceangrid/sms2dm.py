"""Writer for the SMS ``.2dm`` mesh format."""
import logging
import os

from .gr3 import NODATA

logger = logging.getLogger(__name__)

__all__ = ["dumps", "write"]


def _nodestring(segment):
    # the last node id of a nodestring is negated to terminate it
    if not segment:
        return None
    ids = [str(n) for n in segment[:-1]] + [f"-{segment[-1]}"]
    return "NS " + " ".join(ids)


def dumps(output):
    """Render a :class:`~oceangrid.gr3.Gr3ParserOutput` as 2dm text.

    Ids are written as-is. Triangles are written before quads, nodes carry
    their first value (or the no-data value), and every declared boundary
    segment becomes one nodestring.
    """
    lines = ["MESH2D"]
    elements = output.elements or {}
    for element_id, node_ids in elements.items():
        if len(node_ids) == 3:
            lines.append(f"E3T {element_id} " + " ".join(str(n) for n in node_ids))
    for element_id, node_ids in elements.items():
        if len(node_ids) == 4:
            lines.append(f"E4Q {element_id} " + " ".join(str(n) for n in node_ids))

    for node_id, (coords, values) in output.nodes.items():
        value = values[0] if values else NODATA
        lines.append(f"ND {node_id} {coords[0]:<.16E} {coords[1]:<.16E} {value:<.16E}")

    for group in (
        output.open_boundaries,
        output.land_boundaries,
        output.interior_boundaries,
    ):
        for segment in group or []:
            nodestring = _nodestring(segment)
            if nodestring is not None:
                lines.append(nodestring)

    return "\n".join(lines) + "\n"


def write(output, path, overwrite=False):
    path = os.fspath(path)
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(f"{path} exists and overwrite is False")
    logger.info(f"Exporting mesh to 2dm file {path}...")
    with open(path, "w") as f:
        f.write(dumps(output))
