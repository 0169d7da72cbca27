"""
Objective for smoothing a planned path.

The decision variables are the flattened (x, y) pairs of every path point.
Each interior point contributes four additive terms: smoothness, maximum
curvature, distance to the original path, and costmap avoidance. Endpoints
never contribute cost or gradient.

Gradients are analytic. For every interior point i the gradient entry is the
partial derivative of point i's own terms with respect to p(i).
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from config import EPSILON, FREE_SPACE, UNKNOWN, MAX_NON_OBSTACLE
from costmap_gradient import get_costmap_gradient
import smoother_config as cfg


@dataclass
class SmootherParams:
    """Term weights and curvature limit, fixed for one smoothing run."""
    smooth_weight: float = cfg.SMOOTH_WEIGHT
    costmap_weight: float = cfg.COSTMAP_WEIGHT
    curvature_weight: float = cfg.CURVATURE_WEIGHT
    distance_weight: float = cfg.DISTANCE_WEIGHT
    max_curvature: float = cfg.MAX_CURVATURE

    def __post_init__(self):
        if self.max_curvature < 0:
            raise ValueError(
                f"max_curvature must be non-negative, got {self.max_curvature}")


@dataclass
class CurvatureComputations:
    """Values shared between the curvature cost and its gradient at one point."""
    valid: bool = True
    delta_xi: np.ndarray = field(default_factory=lambda: np.zeros(2))
    delta_xi_p: np.ndarray = field(default_factory=lambda: np.zeros(2))
    delta_xi_norm: float = 0.0
    delta_xi_p_norm: float = 0.0
    delta_phi_i: float = 0.0
    turning_rad: float = 0.0
    ki_minus_kmax: float = 0.0

    def is_valid(self):
        """True if the geometry is non-degenerate and curvature exceeds the limit."""
        return self.valid


def normalized_orthogonal_complement(a, b, a_norm, b_norm):
    """Component of a orthogonal to b, divided by |a| |b|."""
    return (a - b * np.dot(a, b) / np.dot(b, b)) / (a_norm * b_norm)


class SmootherCostFunction:
    def __init__(self, original_path, costmap, params: SmootherParams):
        """
        Parameters
        ----------
        original_path : array-like
            (N, 2) path the smoothed result is anchored to; not modified
        costmap : MinimalCostmap
            Costmap used by the avoidance term
        params : SmootherParams
            Weights and maximum curvature
        """
        self.original_path = np.asarray(original_path, dtype=float).reshape(-1, 2)
        self.costmap = costmap
        self.num_params = 2 * len(self.original_path)

        self.w_smooth = params.smooth_weight
        self.w_cost = params.costmap_weight
        self.w_curve = params.curvature_weight
        self.w_dist = params.distance_weight
        self.max_curvature = params.max_curvature

    def num_parameters(self):
        return self.num_params

    def evaluate(self, parameters, want_gradient=True
                 ) -> Tuple[float, Optional[np.ndarray], bool]:
        """
        Evaluate total cost and, optionally, its gradient.

        Parameters
        ----------
        parameters : array-like
            Flattened [x0, y0, x1, y1, ...] path points
        want_gradient : bool
            Whether to compute the gradient

        Returns
        -------
        cost : float
            Total cost over all interior points
        gradient : np.ndarray or None
            Gradient of the same length as parameters, None if not requested
            or on failure
        success : bool
            False only if the parameter buffer does not match the path length
        """
        parameters = np.asarray(parameters, dtype=float).ravel()
        if parameters.size != self.num_params:
            return 0.0, None, False

        points = parameters.reshape(-1, 2)
        num_points = len(points)
        gradient = np.zeros(self.num_params) if want_gradient else None
        cost_raw = 0.0

        for i in range(1, num_points - 1):
            xi = points[i]
            xi_p1 = points[i + 1]
            xi_m1 = points[i - 1]
            xi_original = self.original_path[i]
            curvature_params = CurvatureComputations()

            cost_raw += self.smoothing_residual(self.w_smooth, xi, xi_p1, xi_m1)
            cost_raw += self.curvature_residual(
                self.w_curve, xi, xi_p1, xi_m1, curvature_params)
            cost_raw += self.distance_residual(self.w_dist, xi, xi_original)

            cell = self.costmap.world_to_map(xi[0], xi[1])
            costmap_cost = 0.0
            if cell is not None:
                costmap_cost = self.costmap.get_cost(*cell)
                cost_raw += self.cost_residual(self.w_cost, costmap_cost)

            if gradient is not None:
                grad = self.smoothing_jacobian(self.w_smooth, xi, xi_p1, xi_m1)
                grad += self.curvature_jacobian(self.w_curve, curvature_params)
                grad += self.distance_jacobian(self.w_dist, xi, xi_original)
                if cell is not None:
                    grad += self.cost_jacobian(
                        self.w_cost, cell[0], cell[1], costmap_cost)
                gradient[2 * i:2 * i + 2] = grad

        return cost_raw, gradient, True

    # Smoothness

    @staticmethod
    def smoothing_residual(weight, pt, pt_p, pt_m):
        d = pt_p - 2.0 * pt + pt_m
        return weight * float(np.dot(d, d))

    @staticmethod
    def smoothing_jacobian(weight, pt, pt_p, pt_m):
        return weight * (-4.0 * pt_m + 8.0 * pt - 4.0 * pt_p)

    # Curvature

    def curvature_residual(self, weight, pt, pt_p, pt_m, curvature_params):
        """
        Hinge penalty on curvature above the maximum. Fills curvature_params
        for curvature_jacobian; marks it invalid when the term is inactive.
        """
        cp = curvature_params
        cp.valid = True
        cp.delta_xi = pt - pt_m
        cp.delta_xi_p = pt_p - pt
        cp.delta_xi_norm = float(np.linalg.norm(cp.delta_xi))
        cp.delta_xi_p_norm = float(np.linalg.norm(cp.delta_xi_p))

        if (not math.isfinite(cp.delta_xi_norm) or not math.isfinite(cp.delta_xi_p_norm)
                or cp.delta_xi_norm < EPSILON or cp.delta_xi_p_norm < EPSILON):
            cp.valid = False
            return 0.0

        projection = float(np.dot(cp.delta_xi, cp.delta_xi_p)) / (
            cp.delta_xi_norm * cp.delta_xi_p_norm)
        if abs(1.0 - projection) < EPSILON or abs(projection + 1.0) < EPSILON:
            projection = 1.0
        projection = min(1.0, max(-1.0, projection))

        cp.delta_phi_i = math.acos(projection)
        cp.turning_rad = cp.delta_phi_i / cp.delta_xi_norm
        cp.ki_minus_kmax = cp.turning_rad - self.max_curvature

        if not math.isfinite(cp.ki_minus_kmax) or cp.ki_minus_kmax <= 0.0:
            cp.valid = False
            return 0.0

        return weight * cp.ki_minus_kmax * cp.ki_minus_kmax

    @staticmethod
    def curvature_jacobian(weight, curvature_params):
        """
        d/dp(i) of weight * (phi / |a| - kmax)^2 with a = p(i) - p(i-1),
        b = p(i+1) - p(i) and phi = acos(a.b / (|a| |b|)).
        """
        cp = curvature_params
        if not cp.is_valid():
            return np.zeros(2)

        sin_phi = math.sin(cp.delta_phi_i)
        if sin_phi < EPSILON:
            return np.zeros(2)

        a, b = cp.delta_xi, cp.delta_xi_p
        a_norm, b_norm = cp.delta_xi_norm, cp.delta_xi_p_norm

        # d(cos phi)/da and d(cos phi)/db; a moves with p(i), b against it
        d_cos_da = normalized_orthogonal_complement(b, a, b_norm, a_norm)
        d_cos_db = normalized_orthogonal_complement(a, b, a_norm, b_norm)
        d_phi = (-1.0 / sin_phi) * (d_cos_da - d_cos_db)

        d_kappa = d_phi / a_norm - cp.delta_phi_i * a / (a_norm ** 3)
        jacobian = 2.0 * weight * cp.ki_minus_kmax * d_kappa

        if not np.all(np.isfinite(jacobian)):
            return np.zeros(2)
        return jacobian

    # Distance to original path

    @staticmethod
    def distance_residual(weight, xi, xi_original):
        d = xi - xi_original
        return weight * float(np.dot(d, d))

    @staticmethod
    def distance_jacobian(weight, xi, xi_original):
        return 2.0 * weight * (xi - xi_original)

    # Costmap avoidance

    @staticmethod
    def cost_residual(weight, value):
        if value == FREE_SPACE or value == UNKNOWN:
            return 0.0
        # Negative parabola: rises toward MAX_NON_OBSTACLE
        return -weight * (value - MAX_NON_OBSTACLE) ** 2

    def cost_jacobian(self, weight, mx, my, value):
        if value == FREE_SPACE or value == UNKNOWN:
            return np.zeros(2)

        grad = get_costmap_gradient(self.costmap, mx, my)
        common_prefix = -2.0 * weight * (value - MAX_NON_OBSTACLE)
        return common_prefix * grad

    def path_cost(self, path: List[np.ndarray]) -> float:
        """Total cost of a path given as a sequence of points."""
        cost, _, _ = self.evaluate(np.asarray(path, dtype=float).ravel(), False)
        return cost
