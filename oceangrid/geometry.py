import numpy as np

__all__ = ["simp_vol", "quad_sub_areas"]


def simp_vol(p, t):
    """Signed areas of the triangles in the mesh (shoelace formula).
    :param p: point coordinates of mesh
    :type p: numpy.ndarray[`float` x 2]
    :param t: triangle connectivity, rows index into `p`
    :type t: numpy.ndarray[`int` x 3]
    :return: area: signed area, positive for counter-clockwise winding.
    :rtype: numpy.ndarray[`float` x 1]
    """
    if len(t) == 0:
        return np.zeros(0, dtype=float)
    d01 = p[t[:, 1]] - p[t[:, 0]]
    d02 = p[t[:, 2]] - p[t[:, 0]]
    return (d01[:, 0] * d02[:, 1] - d01[:, 1] * d02[:, 0]) / 2


def quad_sub_areas(p, q):
    """Signed areas of the four corner triangles of each quadrilateral.
    :param p: point coordinates of mesh
    :type p: numpy.ndarray[`float` x 2]
    :param q: quad connectivity, rows index into `p`
    :type q: numpy.ndarray[`int` x 4]
    :return: areas of triangles (0,1,2), (0,2,3), (0,1,3) and (1,2,3)
    :rtype: numpy.ndarray[`float` x 4]
    """
    if len(q) == 0:
        return np.zeros((0, 4), dtype=float)
    return np.column_stack(
        (
            simp_vol(p, q[:, [0, 1, 2]]),
            simp_vol(p, q[:, [0, 2, 3]]),
            simp_vol(p, q[:, [0, 1, 3]]),
            simp_vol(p, q[:, [1, 2, 3]]),
        )
    )
