# costmap_gradient.py

import numpy as np


def _sample(costmap, mx, my):
    """Cell cost, or zero when (mx, my) lies outside the grid."""
    if 0 <= mx < costmap.size_x() and 0 <= my < costmap.size_y():
        return float(costmap.get_cost(mx, my))
    return 0.0


def _central_difference(costmap, mx, my, dx, dy):
    """
    Seven-point central difference of cost along the (dx, dy) axis,
    (45 (c1 - c-1) - 9 (c2 - c-2) + (c3 - c-3)) / 60, in cost per cell.
    """
    plus = [_sample(costmap, mx + k * dx, my + k * dy) for k in (1, 2, 3)]
    minus = [_sample(costmap, mx - k * dx, my - k * dy) for k in (1, 2, 3)]
    return (45.0 * (plus[0] - minus[0])
            - 9.0 * (plus[1] - minus[1])
            + (plus[2] - minus[2])) / 60.0


def _forward_difference(costmap, mx, my, dx, dy):
    """
    Four-point one-sided difference including the centre cell,
    (-11 c0 + 18 c1 - 9 c2 + 2 c3) / 6, in cost per cell.
    """
    c = [_sample(costmap, mx + k * dx, my + k * dy) for k in (0, 1, 2, 3)]
    return (-11.0 * c[0] + 18.0 * c[1] - 9.0 * c[2] + 2.0 * c[3]) / 6.0


def get_costmap_gradient(costmap, mx, my):
    """
    Estimate the direction of steepest cost increase at a map cell.

    The central stencil skips the centre cell, so it is blind to an isolated
    peak. When it returns zero on a non-free cell, the one-sided stencil is
    used instead.

    Parameters
    ----------
    costmap : MinimalCostmap
        Costmap to sample
    mx, my : int
        Map cell coordinates

    Returns
    -------
    np.ndarray
        Unit vector [x, y] in map axes pointing from lower toward higher cost,
        or zeros where the local cost field is flat
    """
    gradient = np.array([
        _central_difference(costmap, mx, my, 1, 0),
        _central_difference(costmap, mx, my, 0, 1),
    ])

    if not np.any(gradient) and _sample(costmap, mx, my) != 0.0:
        gradient = np.array([
            _forward_difference(costmap, mx, my, 1, 0),
            _forward_difference(costmap, mx, my, 0, 1),
        ])

    norm = np.linalg.norm(gradient)
    if norm == 0.0 or not np.isfinite(norm):
        return np.zeros(2)
    return gradient / norm
