# neighborhood.py
"""
Neighbor expansion policy for the 2D grid search.

A NeighborhoodConfig is built per search for one grid size and connectivity
mode, and handed to every get_neighbors call of that search.
"""

from enum import Enum
from typing import Callable, List, Optional

from node_module import Node2D


class Neighborhood(Enum):
    """Grid connectivity."""
    UNKNOWN = "unknown"
    VON_NEUMANN = "von_neumann"  # 4-connected
    MOORE = "moore"  # 8-connected


# (dx, dy) steps. Diagonals precede cardinals so that in open space the
# cardinal expansions are the last to set a parent.
_DIAGONAL_STEPS = [(-1, -1), (1, -1), (-1, 1), (1, 1)]
_CARDINAL_STEPS = [(-1, 0), (1, 0), (0, -1), (0, 1)]


def parse_neighborhood(name):
    """Look up a Neighborhood by name, e.g. "MOORE" or "moore"."""
    try:
        return Neighborhood[str(name).upper()]
    except KeyError:
        raise ValueError(f"Invalid neighborhood type selected: {name}") from None


class NeighborhoodConfig:
    def __init__(self, size_x, size_y, neighborhood):
        """
        Build the flat-index offset table for a grid.

        Parameters
        ----------
        size_x : int
            Grid width in cells
        size_y : int
            Grid height in cells
        neighborhood : Neighborhood or str
            VON_NEUMANN or MOORE

        Raises
        ------
        ValueError
            For UNKNOWN or an unrecognized mode
        """
        if not isinstance(neighborhood, Neighborhood):
            neighborhood = parse_neighborhood(neighborhood)

        if neighborhood == Neighborhood.UNKNOWN:
            raise ValueError("Unknown neighborhood type selected.")
        elif neighborhood == Neighborhood.VON_NEUMANN:
            steps = list(_CARDINAL_STEPS)
        elif neighborhood == Neighborhood.MOORE:
            steps = _DIAGONAL_STEPS + _CARDINAL_STEPS
        else:
            raise ValueError(f"Invalid neighborhood type selected: {neighborhood}")

        self.size_x = int(size_x)
        self.size_y = int(size_y)
        self.neighborhood = neighborhood
        self.steps = steps
        self.offsets = [dx + dy * self.size_x for dx, dy in steps]

    def matches(self, size_x, size_y, neighborhood):
        return (self.size_x == size_x and self.size_y == size_y
                and self.neighborhood == neighborhood)


def get_neighbors(node: Node2D,
                  validity_checker: Callable[[int], Optional[Node2D]],
                  neighborhood: NeighborhoodConfig) -> List[Node2D]:
    """
    Retrieve all valid neighbors of a node, in offset-table order.

    Parameters
    ----------
    node : Node2D
        Node being expanded
    validity_checker : callable
        Maps a flat index to its Node2D if that cell may be expanded into,
        otherwise None
    neighborhood : NeighborhoodConfig
        Offset table of the current search

    Returns
    -------
    List[Node2D]
        Valid neighbors
    """
    neighbors = []
    node_x = node.index % neighborhood.size_x
    node_y = node.index // neighborhood.size_x

    for (dx, dy), offset in zip(neighborhood.steps, neighborhood.offsets):
        # Reject offsets that fall off the grid or wrap onto the next row
        if not 0 <= node_x + dx < neighborhood.size_x:
            continue
        if not 0 <= node_y + dy < neighborhood.size_y:
            continue

        neighbor = validity_checker(node.index + offset)
        if neighbor is not None:
            neighbors.append(neighbor)

    return neighbors
