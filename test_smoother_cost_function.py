# test_smoother_cost_function.py
"""
Tests for the individual terms of SmootherCostFunction and for evaluate().
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from config import FREE_SPACE, UNKNOWN, MAX_NON_OBSTACLE
from costmap import MinimalCostmap
from smoother_cost_function import (CurvatureComputations, SmootherCostFunction,
                                    SmootherParams)


def free_costmap(size=20):
    return MinimalCostmap(np.zeros((size, size), dtype=np.uint8))


def only(**weights):
    params = dict(smooth_weight=0.0, costmap_weight=0.0, curvature_weight=0.0,
                  distance_weight=0.0, max_curvature=0.0)
    params.update(weights)
    return SmootherParams(**params)


def evaluate(path, params, costmap=None, original=None):
    path = np.asarray(path, dtype=float)
    original = path if original is None else original
    cost_function = SmootherCostFunction(original, costmap or free_costmap(), params)
    return cost_function.evaluate(path.ravel(), True)


def test_parameter_count_is_twice_point_count():
    cost_function = SmootherCostFunction(np.zeros((7, 2)), free_costmap(), SmootherParams())
    assert cost_function.num_parameters() == 14


def test_parameter_size_mismatch_reports_failure():
    cost_function = SmootherCostFunction(np.zeros((4, 2)), free_costmap(), SmootherParams())
    cost, gradient, success = cost_function.evaluate(np.zeros(6), True)
    assert not success
    assert gradient is None


def test_gradient_not_computed_when_not_requested():
    path = np.array([[1.0, 1.0], [2.0, 3.0], [3.0, 1.0]])
    cost_function = SmootherCostFunction(path, free_costmap(), SmootherParams())
    cost, gradient, success = cost_function.evaluate(path.ravel(), False)
    assert success
    assert gradient is None


def test_colinear_evenly_spaced_points_are_smooth():
    path = [[1.0, 5.0], [2.0, 5.0], [3.0, 5.0], [4.0, 5.0]]
    cost, gradient, success = evaluate(path, only(smooth_weight=1.0))
    assert success
    assert cost == 0.0
    assert_allclose(gradient, np.zeros(8))


def test_smoothing_term_value_and_gradient():
    path = [[5.0, 5.0], [6.0, 6.0], [7.0, 5.0]]
    cost, gradient, success = evaluate(path, only(smooth_weight=0.5))
    # second difference is (0, -2)
    assert cost == pytest.approx(0.5 * 4.0)
    assert_allclose(gradient, [0.0, 0.0, 0.0, 0.5 * 8.0, 0.0, 0.0])


def test_endpoints_never_contribute():
    path = np.array([[1.0, 1.0], [2.0, 4.0], [6.0, 2.0], [8.0, 9.0]])
    original = path + 1.5
    cost, gradient, success = evaluate(path, SmootherParams(), original=original)
    assert success
    assert_allclose(gradient[:2], [0.0, 0.0])
    assert_allclose(gradient[-2:], [0.0, 0.0])


def test_curvature_at_limit_is_zero():
    path = [[5.0, 5.0], [6.0, 5.0], [6.0, 6.0]]
    cost, gradient, success = evaluate(
        path, only(curvature_weight=1.0, max_curvature=math.pi / 2))
    assert success
    assert cost == 0.0
    assert_allclose(gradient, np.zeros(6))


def test_curvature_above_limit_grows_with_excess():
    path = [[5.0, 5.0], [6.0, 5.0], [6.0, 6.0]]
    costs = []
    for excess in (0.05, 0.1, 0.2, 0.4):
        cost, _, _ = evaluate(
            path, only(curvature_weight=2.0, max_curvature=math.pi / 2 - excess))
        assert cost > 0.0
        assert cost == pytest.approx(2.0 * excess ** 2)
        costs.append(cost)
    assert costs == sorted(costs)


def test_curvature_jacobian_matches_finite_difference():
    cost_function = SmootherCostFunction(np.zeros((3, 2)), free_costmap(), SmootherParams(
        max_curvature=0.1))
    weight = 0.7
    pt_m = np.array([0.0, 0.0])
    pt = np.array([1.0, 0.2])
    pt_p = np.array([1.3, 1.0])

    cp = CurvatureComputations()
    cost_function.curvature_residual(weight, pt, pt_p, pt_m, cp)
    assert cp.is_valid()
    analytic = cost_function.curvature_jacobian(weight, cp)

    h = 1e-6
    numeric = np.zeros(2)
    for k in range(2):
        step = np.zeros(2)
        step[k] = h
        plus = cost_function.curvature_residual(
            weight, pt + step, pt_p, pt_m, CurvatureComputations())
        minus = cost_function.curvature_residual(
            weight, pt - step, pt_p, pt_m, CurvatureComputations())
        numeric[k] = (plus - minus) / (2 * h)

    assert_allclose(analytic, numeric, rtol=1e-5, atol=1e-8)


def test_duplicate_points_suppress_curvature_only():
    path = [[5.0, 5.0], [5.0, 5.0], [6.0, 6.0]]
    cost, gradient, success = evaluate(path, only(curvature_weight=1.0))
    assert success
    assert cost == 0.0
    assert_allclose(gradient, np.zeros(6))


def test_reversal_is_treated_as_straight():
    path = [[5.0, 5.0], [6.0, 5.0], [5.0, 5.0]]
    cost, gradient, success = evaluate(path, only(curvature_weight=1.0, max_curvature=0.5))
    assert success
    assert cost == 0.0
    assert np.all(np.isfinite(gradient))


def test_negative_max_curvature_rejected():
    with pytest.raises(ValueError):
        SmootherParams(max_curvature=-1.0)


def test_distance_term():
    original = np.array([[5.0, 5.0], [6.0, 5.0], [7.0, 5.0]])
    path = original.copy()

    cost, gradient, _ = evaluate(path, only(distance_weight=2.0), original=original)
    assert cost == 0.0
    assert_allclose(gradient, np.zeros(6))

    path[1] = [6.3, 4.6]
    cost, gradient, _ = evaluate(path, only(distance_weight=2.0), original=original)
    assert cost == pytest.approx(2.0 * (0.3 ** 2 + 0.4 ** 2))
    assert_allclose(gradient[2:4], [2.0 * 2.0 * 0.3, 2.0 * 2.0 * -0.4])


@pytest.mark.parametrize("value", [FREE_SPACE, UNKNOWN])
def test_free_and_unknown_cells_have_no_costmap_cost(value):
    costs = np.full((20, 20), 120, dtype=np.uint8)
    costs[5, 6] = value
    path = [[5.5, 5.5], [6.5, 5.5], [7.5, 5.5]]
    cost, gradient, success = evaluate(path, only(costmap_weight=1000.0),
                                       MinimalCostmap(costs))
    assert success
    assert cost == 0.0
    assert_allclose(gradient, np.zeros(6))


def test_costmap_gradient_steers_toward_lower_cost():
    ys, xs = np.mgrid[0:20, 0:20]
    costmap = MinimalCostmap(10 + 5 * xs)
    weight = 0.01
    path = [[9.5, 10.5], [10.5, 10.5], [11.5, 10.5]]

    cost, gradient, _ = evaluate(path, only(costmap_weight=weight), costmap)

    value = costmap.get_cost(10, 10)
    assert cost == pytest.approx(-weight * (value - MAX_NON_OBSTACLE) ** 2)
    assert_allclose(gradient[2:4], [-2.0 * weight * (value - MAX_NON_OBSTACLE), 0.0])
    # Gradient points up-cost, so a descent step moves toward lower cost
    assert gradient[2] > 0.0


def test_costmap_cost_rises_toward_obstacles():
    low = SmootherCostFunction.cost_residual(1.0, 20)
    high = SmootherCostFunction.cost_residual(1.0, 200)
    assert low < high <= 0.0


def test_points_off_the_map_skip_costmap_term():
    costs = np.full((10, 10), 150, dtype=np.uint8)
    path = [[-5.0, -5.0], [-4.0, -5.0], [-3.0, -5.0]]
    cost, gradient, success = evaluate(path, only(costmap_weight=1.0),
                                       MinimalCostmap(costs))
    assert success
    assert cost == 0.0
    assert_allclose(gradient, np.zeros(6))


def test_path_cost_sums_terms():
    path = np.array([[5.0, 5.0], [6.0, 6.0], [7.0, 5.0]])
    cost_function = SmootherCostFunction(path, free_costmap(), only(smooth_weight=1.0))
    assert cost_function.path_cost(list(path)) == pytest.approx(4.0)
