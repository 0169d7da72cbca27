# costmap.py

import numpy as np


class MinimalCostmap:
    """
    Read-only view of an existing 2D cost grid.

    Costs are stored as a (size_y, size_x) array indexed [my, mx]. Cell (0, 0)
    covers the world square [origin, origin + resolution).
    """

    def __init__(self, costs, resolution=1.0, origin=(0.0, 0.0)):
        raw = np.asarray(costs)
        if raw.size and (np.min(raw) < 0 or np.max(raw) > 255):
            raise ValueError(
                f"Costmap values must lie in [0, 255], got [{np.min(raw)}, {np.max(raw)}]")
        self.costs = raw.astype(np.uint8)
        if self.costs.ndim != 2:
            raise ValueError(f"Costmap must be 2D, got shape {self.costs.shape}")
        if resolution <= 0:
            raise ValueError(f"Costmap resolution must be positive, got {resolution}")
        self.resolution = float(resolution)
        self.origin = np.asarray(origin, dtype=float)

    def size_x(self):
        return self.costs.shape[1]

    def size_y(self):
        return self.costs.shape[0]

    def get_cost(self, mx, my):
        return int(self.costs[int(my), int(mx)])

    def world_to_map(self, wx, wy):
        """
        Convert world coordinates to map cell coordinates.

        Returns
        -------
        tuple or None
            (mx, my) or None if the point is outside the map
        """
        if not (np.isfinite(wx) and np.isfinite(wy)):
            return None
        if wx < self.origin[0] or wy < self.origin[1]:
            return None

        mx = int((wx - self.origin[0]) / self.resolution)
        my = int((wy - self.origin[1]) / self.resolution)
        if mx < self.size_x() and my < self.size_y():
            return mx, my
        return None

    def map_to_world(self, mx, my):
        """World coordinates of the center of cell (mx, my)."""
        wx = self.origin[0] + (mx + 0.5) * self.resolution
        wy = self.origin[1] + (my + 0.5) * self.resolution
        return wx, wy
