"""
A* path planner over a 2D costmap grid.
Uses Node2D for per-cell search state, a NeighborhoodConfig for expansion
and the Euclidean heuristic scaled by the neutral cost.
Supports real-time operation with time budgets and incremental planning.
"""

import heapq
import itertools
import math
import time
from enum import Enum
from typing import List, Optional, Tuple

from node_module import Node2D, NodeGraph
from neighborhood import NeighborhoodConfig, get_neighbors, parse_neighborhood
import astar_config as cfg


class PlannerStatus(Enum):
    """Status of the planner."""
    NOT_STARTED = "not_started"
    PLANNING = "planning"
    PATH_FOUND = "path_found"
    NO_PATH = "no_path"
    TIME_EXPIRED = "time_expired"


class AStar2D:
    """A* search session over a costmap with real-time capabilities."""

    def __init__(self, neighborhood=cfg.NEIGHBORHOOD,
                 neutral_cost=cfg.NEUTRAL_COST,
                 traverse_unknown=cfg.ALLOW_UNKNOWN,
                 max_iterations=cfg.MAX_ITERATIONS,
                 cost_travel_multiplier=cfg.COST_TRAVEL_MULTIPLIER):
        """Initialize A* planner."""
        self.neighborhood = parse_neighborhood(neighborhood) \
            if isinstance(neighborhood, str) else neighborhood
        self.neutral_cost = neutral_cost
        self.traverse_unknown = traverse_unknown
        self.max_iterations = max_iterations
        self.cost_travel_multiplier = cost_travel_multiplier

        self.graph: Optional[NodeGraph] = None
        self.neighborhood_config: Optional[NeighborhoodConfig] = None
        self.costmap = None

        # Planning state for incremental operation
        self.status = PlannerStatus.NOT_STARTED
        self.open_set = []
        self._counter = itertools.count()
        self.start_index = None
        self.goal_index = None
        self.goal_coords = None
        self.iterations = 0
        self.nodes_expanded = 0

    def create_graph(self, costmap):
        """
        Prepare the node graph and neighborhood for a costmap.
        Nodes are reused in place when the grid size is unchanged.
        """
        size_x, size_y = costmap.size_x(), costmap.size_y()
        if self.graph is None or not self.graph.matches(size_x, size_y):
            self.graph = NodeGraph(size_x, size_y)

        if (self.neighborhood_config is None or
                not self.neighborhood_config.matches(size_x, size_y, self.neighborhood)):
            self.neighborhood_config = NeighborhoodConfig(size_x, size_y, self.neighborhood)

        self.graph.reset(costmap)
        self.costmap = costmap
        self.status = PlannerStatus.NOT_STARTED

    def _cell_index(self, mx, my) -> int:
        if self.graph is None:
            raise ValueError("create_graph() must be called before setting start or goal")
        if self.graph.get_node_at(mx, my) is None:
            raise ValueError(
                f"Cell ({mx}, {my}) is outside the "
                f"{self.graph.size_x}x{self.graph.size_y} grid")
        return Node2D.get_index(mx, my, self.graph.size_x)

    def set_start(self, mx, my):
        self.start_index = self._cell_index(mx, my)

    def set_goal(self, mx, my):
        self.goal_index = self._cell_index(mx, my)
        self.goal_coords = Node2D.get_coords(self.goal_index, self.graph.size_x)

    def _heuristic(self, index) -> float:
        coords = Node2D.get_coords(index, self.graph.size_x)
        return Node2D.get_heuristic_cost(coords, self.goal_coords, self.neutral_cost)

    def _traversal_cost(self, current: Node2D, neighbor: Node2D) -> float:
        """Step length times the neutral cost, plus the entered cell's cost."""
        width = self.graph.size_x
        diagonal = (current.index % width != neighbor.index % width and
                    current.index // width != neighbor.index // width)
        step_length = math.sqrt(2.0) if diagonal else 1.0
        return (self.neutral_cost * step_length
                + self.cost_travel_multiplier * neighbor.cell_cost)

    def _validity_checker(self, index) -> Optional[Node2D]:
        node = self.graph.get_node(index)
        if node is None or node.was_visited:
            return None
        if not node.is_node_valid(self.traverse_unknown):
            return None
        return node

    def _push(self, node: Node2D):
        f = node.accumulated_cost + self._heuristic(node.index)
        heapq.heappush(self.open_set, (f, next(self._counter), node.index))
        node.queued()

    def initialize_planning(self):
        """Clear all node search state, reset the open set and queue the start node."""
        if self.graph is None:
            raise ValueError("create_graph() must be called before planning")

        self.graph.reset(self.costmap)
        self.open_set = []
        self._counter = itertools.count()
        self.iterations = 0
        self.nodes_expanded = 0

        start = self.graph.get_node(self.start_index)
        goal = self.graph.get_node(self.goal_index)
        if (start is None or goal is None or
                not start.is_node_valid(self.traverse_unknown) or
                not goal.is_node_valid(self.traverse_unknown)):
            self.status = PlannerStatus.NO_PATH
            print("A* start or goal is not a valid cell")
            return

        start.accumulated_cost = 0.0
        self._push(start)
        self.status = PlannerStatus.PLANNING

    def step(self, time_budget: float = None) -> PlannerStatus:
        """
        Execute planning for a time budget.

        Parameters
        ----------
        time_budget : float, optional
            Time budget in seconds. If None, uses cfg.TIME_BUDGET_PER_STEP

        Returns
        -------
        PlannerStatus
            Current status of the planner
        """
        if self.status != PlannerStatus.PLANNING:
            return self.status

        if time_budget is None:
            time_budget = cfg.TIME_BUDGET_PER_STEP

        start_time = time.time()
        iterations_this_step = 0

        while self.open_set and self.iterations < self.max_iterations:
            # Checked before the pop so stale entries count against the budget
            if iterations_this_step and iterations_this_step % cfg.ITERATIONS_PER_CHECK == 0:
                if time.time() - start_time >= time_budget:
                    # Don't change status - just return to allow continuation
                    return PlannerStatus.TIME_EXPIRED

            self.iterations += 1
            iterations_this_step += 1

            _, _, index = heapq.heappop(self.open_set)
            current = self.graph.nodes[index]

            # Skip stale entries
            if current.was_visited:
                continue

            current.visited()
            self.nodes_expanded += 1

            if index == self.goal_index:
                self.status = PlannerStatus.PATH_FOUND
                print(f"A* found path: {self.iterations} iterations, "
                      f"{self.nodes_expanded} nodes expanded")
                return self.status

            for neighbor in get_neighbors(current, self._validity_checker,
                                          self.neighborhood_config):
                tentative_g = current.accumulated_cost + \
                    self._traversal_cost(current, neighbor)
                if tentative_g < neighbor.accumulated_cost:
                    neighbor.accumulated_cost = tentative_g
                    neighbor.parent_index = current.index
                    self._push(neighbor)

        self.status = PlannerStatus.NO_PATH
        print(f"A* exhausted search after {self.iterations} iterations")
        return self.status

    def get_planning_info(self) -> dict:
        """Get current planning statistics."""
        return {
            'status': self.status,
            'iterations': self.iterations,
            'nodes_expanded': self.nodes_expanded,
            'open_set_size': len(self.open_set),
        }

    def plan(self, max_time: float = None) -> Optional[List[Tuple[int, int]]]:
        """
        Plan complete path (blocking call).

        Parameters
        ----------
        max_time : float, optional
            Maximum planning time. If None, runs until the search terminates

        Returns
        -------
        Optional[List[Tuple[int, int]]]
            Map cells from start to goal, or None if not found
        """
        self.initialize_planning()

        if max_time is None:
            while self.status == PlannerStatus.PLANNING:
                self.step(time_budget=1.0)
        else:
            start_time = time.time()
            while self.status == PlannerStatus.PLANNING:
                remaining = max_time - (time.time() - start_time)
                if remaining <= 0:
                    break
                self.step(time_budget=min(cfg.TIME_BUDGET_PER_STEP, remaining))

        if self.status == PlannerStatus.PATH_FOUND:
            return [(int(c.x), int(c.y))
                    for c in self.graph.backtrace_path(self.goal_index)]

        return None
