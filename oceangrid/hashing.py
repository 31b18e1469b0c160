"""Deterministic hashing of a mesh for change detection.

Both digests fold the same material in insertion order: description, nodes
(id, coordinates, values), elements (id, node ids), the declared open, land
and interior boundary segments, and the CRS string. Derived data (rings,
validation results) is never hashed.
"""
import hashlib
import struct

from .region import get_crs_string

__all__ = ["calculate_hash", "quick_hash"]


def _ids(ids):
    return struct.pack(f"<{len(ids)}q", *ids)


def _floats(values):
    return struct.pack(f"<{len(values)}d", *values)


def _material(hgrid):
    yield (hgrid.description or "").encode()

    for node_id, (coords, values) in hgrid.nodes.hash_map.items():
        yield _ids((node_id,))
        yield _floats(coords)
        if values is not None:
            yield _floats(values)

    for element_id, node_ids in hgrid.elements.hash_map.items():
        yield _ids((element_id, len(node_ids)))
        yield _ids(node_ids)

    if hgrid.boundaries is not None:
        for tag, group in (
            (b"open", hgrid.boundaries.open),
            (b"land", hgrid.boundaries.land),
            (b"interior", hgrid.boundaries.interior),
        ):
            if group is None:
                continue
            yield tag
            for segment in group:
                yield _ids((len(segment),))
                yield _ids(segment)

    if hgrid.crs is not None:
        yield get_crs_string(hgrid.crs).encode()


def calculate_hash(hgrid):
    """SHA-256 hex digest of the mesh. Suitable for storage."""
    hasher = hashlib.sha256()
    for chunk in _material(hgrid):
        hasher.update(chunk)
    return hasher.hexdigest()


def quick_hash(hgrid):
    """64-bit integer digest of the mesh. Faster, for in-memory comparison."""
    hasher = hashlib.blake2b(digest_size=8)
    for chunk in _material(hgrid):
        hasher.update(chunk)
    return int.from_bytes(hasher.digest(), "little")
