"""Coordinate-system plumbing for oceangrid.

The mesh topology engine never inspects reference systems itself. This
module wraps :mod:`pyproj` to provide the three things the rest of the
package needs: whether a CRS is geographic, a coordinate transform
``(x, y) -> (x', y')`` between two reference systems, and recovery of a CRS
embedded in the free-text header line of a mesh file.
"""
import logging

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from .errors import TransformError

logger = logging.getLogger(__name__)

__all__ = [
    "is_geographic",
    "get_crs_string",
    "get_transformer",
    "crs_from_description",
]


def _parse_crs(crs):
    try:
        return CRS.from_user_input(crs)
    except CRSError as e:
        raise TransformError(f"Failed to parse CRS {crs!r}: {e}") from e


def is_geographic(crs):
    """Return True if `crs` uses angular (lon/lat) coordinates.

    Parameters
    ----------
    crs : pyproj.CRS | str | int | None
        ``None`` is treated as "not geographic".
    """
    if crs is None:
        return False
    return bool(_parse_crs(crs).is_geographic)


def get_crs_string(crs):
    """Return a compact string representation of a CRS-like object.

    Prefers the ``AUTHORITY:CODE`` form (e.g. ``EPSG:4326``) and falls back
    to the PROJ string.
    """
    if crs is None:
        return None
    _crs = _parse_crs(crs)
    authority = _crs.to_authority()
    if authority is not None:
        return ":".join(authority)
    return _crs.to_string()


def get_transformer(src_crs, dst_crs):
    """Build a coordinate transform between two reference systems.

    Parameters
    ----------
    src_crs, dst_crs : pyproj.CRS | str | int

    Returns
    -------
    transform : callable
        ``transform(x, y) -> (x', y')``. Accepts scalars or arrays; axis
        order is always (x, y) = (lon, lat) for geographic systems.

    Raises
    ------
    TransformError
        Either CRS cannot be parsed, or a coordinate cannot be transformed.
    """
    src = _parse_crs(src_crs)
    dst = _parse_crs(dst_crs)
    try:
        transformer = Transformer.from_crs(src, dst, always_xy=True)
    except ProjError as e:
        raise TransformError(f"No transformation from {src} to {dst}: {e}") from e

    def transform(x, y):
        try:
            return transformer.transform(x, y, errcheck=True)
        except ProjError as e:
            raise TransformError(f"Coordinate transformation failed: {e}") from e

    return transform


def _try_crs(text):
    try:
        return CRS.from_user_input(text)
    except CRSError:
        return None


def crs_from_description(description):
    """Split a header line into its free-text description and trailing CRS.

    The CRS, when present, is the longest trailing run of words that
    :mod:`pyproj` accepts, e.g. ``"Gulf of Maine grid EPSG:26919"``.

    Returns
    -------
    (description, crs) : tuple
        ``crs`` is a :class:`pyproj.CRS` or ``None``.
    """
    description = description.strip()
    if not description:
        return "", None
    crs = _try_crs(description)
    if crs is not None:
        return "", crs

    words = description.split()
    for i in range(1, len(words)):
        crs = _try_crs(" ".join(words[i:]))
        if crs is not None:
            logger.debug(f"Found CRS {crs.to_string()} in description")
            return " ".join(words[:i]), crs
    return description, None
