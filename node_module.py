# node_module.py

import math
from dataclasses import dataclass
from typing import List, Optional

from config import OCCUPIED, INSCRIBED, UNKNOWN


@dataclass(frozen=True)
class Coordinates:
    """Cell coordinates (x, y) of a node in the grid."""
    x: float
    y: float


class Node2D:
    def __init__(self, cost_in, index):
        """
        Initialize a node for a grid cell.

        Parameters
        ----------
        cost_in : int or float
            Costmap cost of the cell this node represents
        index : int
            Flat, row-major index of the cell (x + y * width)
        """
        self.reset(cost_in, index)

    def reset(self, cost_in, index):
        """Reinitialize all search state in place for a new search."""
        self.parent_index = None  # index of the parent in the owning graph
        self.cell_cost = float(cost_in)
        self.accumulated_cost = math.inf
        self.index = int(index)
        self.was_visited = False
        self.is_queued = False

    def __eq__(self, other):
        if not isinstance(other, Node2D):
            return NotImplemented
        return self.index == other.index

    def __hash__(self):
        return hash(self.index)

    def __repr__(self):
        return (f"Node2D(index={self.index}, cost={self.cell_cost}, "
                f"g={self.accumulated_cost})")

    def visited(self):
        """Mark as finalized (closed set)."""
        self.was_visited = True
        self.is_queued = False

    def queued(self):
        """Mark as tentatively reached (open set)."""
        self.is_queued = True

    def is_node_valid(self, traverse_unknown):
        """
        Check if this node may be expanded into.

        Parameters
        ----------
        traverse_unknown : bool
            Whether UNKNOWN cells are allowed

        Returns
        -------
        bool
            False for occupied/inscribed cells, and for unknown cells unless
            traverse_unknown is set; True otherwise
        """
        cost = self.cell_cost
        if cost == OCCUPIED or cost == INSCRIBED:
            return False

        if cost == UNKNOWN and not traverse_unknown:
            return False

        return True

    @staticmethod
    def get_index(x, y, width):
        """Flat row-major index of cell (x, y)."""
        return int(x) + int(y) * int(width)

    @staticmethod
    def get_coords(index, width, angles=1):
        """
        Cell coordinates of a flat index.

        Raises
        ------
        ValueError
            If angles != 1, since a 2D node carries no orientation
        """
        if angles != 1:
            raise ValueError(
                f"Node2D does not support an angle quantization of {angles}, "
                "only 1 is valid.")

        return Coordinates(float(index % width), float(index // width))

    @staticmethod
    def get_heuristic_cost(node_coords, goal_coords, neutral_cost):
        """Euclidean distance to the goal scaled by the neutral step cost."""
        return math.hypot(goal_coords.x - node_coords.x,
                          goal_coords.y - node_coords.y) * neutral_cost


class NodeGraph:
    """
    Arena of Node2D, one per costmap cell, reused across searches.

    Parents are stored as indices into this arena, so path reconstruction
    never depends on object lifetimes.
    """

    def __init__(self, size_x, size_y):
        if size_x <= 0 or size_y <= 0:
            raise ValueError(f"Invalid graph dimensions {size_x}x{size_y}")
        self.size_x = int(size_x)
        self.size_y = int(size_y)
        self.nodes: List[Node2D] = [
            Node2D(0, i) for i in range(self.size_x * self.size_y)
        ]

    def __len__(self):
        return len(self.nodes)

    def matches(self, size_x, size_y):
        return self.size_x == size_x and self.size_y == size_y

    def reset(self, costmap):
        """Reload cell costs from the costmap and clear all search state."""
        for node in self.nodes:
            mx = node.index % self.size_x
            my = node.index // self.size_x
            node.reset(costmap.get_cost(mx, my), node.index)

    def get_node(self, index) -> Optional[Node2D]:
        if 0 <= index < len(self.nodes):
            return self.nodes[index]
        return None

    def get_node_at(self, x, y) -> Optional[Node2D]:
        if not (0 <= x < self.size_x and 0 <= y < self.size_y):
            return None
        return self.nodes[Node2D.get_index(x, y, self.size_x)]

    def backtrace_path(self, goal_index) -> List[Coordinates]:
        """
        Follow parent indices from the goal back to the start.

        Returns
        -------
        List[Coordinates]
            Cell coordinates ordered start to goal
        """
        path = []
        current = goal_index
        # Bounded by the arena size in case of a cyclic parent chain
        for _ in range(len(self.nodes)):
            if current is None:
                break
            path.append(Node2D.get_coords(current, self.size_x))
            current = self.nodes[current].parent_index

        path.reverse()
        return path
