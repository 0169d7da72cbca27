"""
Demo of the 2D A* planner followed by path smoothing, with matplotlib.
"""

import numpy as np
import matplotlib.pyplot as plt

from astar_planner import AStar2D
from costmap import MinimalCostmap
from config import OCCUPIED, MAX_NON_OBSTACLE
from smoother import Smoother, OptimizerParams
from smoother_cost_function import SmootherParams

RESOLUTION = 0.5  # meters per cell
SIZE = 60  # cells per side


def make_demo_costs(obstacles, inflation_radius=3.0):
    """Occupied discs with a linearly decaying cost halo, in world meters."""
    ys, xs = np.mgrid[0:SIZE, 0:SIZE]
    wx = (xs + 0.5) * RESOLUTION
    wy = (ys + 0.5) * RESOLUTION
    costs = np.zeros((SIZE, SIZE))

    for center, radius in obstacles:
        dist = np.hypot(wx - center[0], wy - center[1]) - radius
        halo = MAX_NON_OBSTACLE * np.clip(1.0 - dist / inflation_radius, 0.0, 1.0)
        costs = np.maximum(costs, halo)
        costs[dist <= 0.0] = OCCUPIED

    return costs.astype(np.uint8)


def main():
    obstacles = [
        (np.array([10.0, 12.0]), 3.0),
        (np.array([20.0, 20.0]), 2.5),
        (np.array([15.0, 24.0]), 2.0),
    ]
    costmap = MinimalCostmap(make_demo_costs(obstacles), resolution=RESOLUTION)

    planner = AStar2D(neighborhood="MOORE")
    planner.create_graph(costmap)
    planner.set_start(4, 4)
    planner.set_goal(55, 52)
    cells = planner.plan()
    if cells is None:
        print("No path exists!")
        return

    info = planner.get_planning_info()
    print(f"  Iterations: {info['iterations']}, Nodes: {info['nodes_expanded']}")

    path = np.array([costmap.map_to_world(mx, my) for mx, my in cells])
    smoother = Smoother(SmootherParams(),
                        OptimizerParams(max_iterations=2000, max_time=1.0, debug=True))
    smoothed, success = smoother.smooth(path, costmap)
    smoothed = np.array(smoothed)
    print(f"Smoothing {'succeeded' if success else 'failed'}")

    fig, ax = plt.subplots(figsize=(8, 8))
    extent = [0, SIZE * RESOLUTION, 0, SIZE * RESOLUTION]
    ax.imshow(costmap.costs, origin='lower', extent=extent, cmap='Greys')
    ax.plot(path[:, 0], path[:, 1], 'r--', linewidth=1, label='A* path')
    ax.plot(smoothed[:, 0], smoothed[:, 1], 'b-', linewidth=2, label='Smoothed')
    ax.plot(path[0, 0], path[0, 1], 'go', markersize=8)
    ax.plot(path[-1, 0], path[-1, 1], 'ro', markersize=8)
    ax.set_xlabel('X [m]')
    ax.set_ylabel('Y [m]')
    ax.set_title('A* + Smoother')
    ax.legend()
    ax.set_aspect('equal')
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
