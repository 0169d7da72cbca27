"""
Path smoother driving SmootherCostFunction with a first-order optimizer.
Endpoints are held fixed; only interior points move.
"""

import time
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from scipy.optimize import minimize

from smoother_cost_function import SmootherCostFunction, SmootherParams
import smoother_config as cfg

METHODS = ("gradient_descent", "lbfgs")


@dataclass
class OptimizerParams:
    """Termination and step settings of the optimizer."""
    max_iterations: int = cfg.MAX_ITERATIONS
    max_time: float = cfg.MAX_TIME
    step_size: float = cfg.STEP_SIZE
    fn_tol: float = cfg.FN_TOL
    param_tol: float = cfg.PARAM_TOL
    gradient_tol: float = cfg.GRADIENT_TOL
    method: str = cfg.METHOD
    debug: bool = cfg.DEBUG


class Smoother:
    """Smooths a path by minimizing SmootherCostFunction."""

    def __init__(self, params: SmootherParams = None,
                 optimizer_params: OptimizerParams = None):
        self.params = params if params is not None else SmootherParams()
        self.optimizer_params = (optimizer_params if optimizer_params is not None
                                 else OptimizerParams())
        if self.optimizer_params.method not in METHODS:
            raise ValueError(
                f"Unknown optimizer method: {self.optimizer_params.method}, "
                f"expected one of {METHODS}")

        # Statistics of the last run
        self.iterations = 0
        self.initial_cost = 0.0
        self.final_cost = 0.0
        self.termination = None

    def smooth(self, path, costmap) -> Tuple[List[np.ndarray], bool]:
        """
        Smooth a path.

        Parameters
        ----------
        path : array-like
            (N, 2) world-frame points; used as both the initial guess and the
            original path anchor
        costmap : MinimalCostmap
            Costmap for the avoidance term

        Returns
        -------
        smoothed_path : List[np.ndarray]
            Smoothed points, or the input points if smoothing failed
        success : bool
            Whether optimization ran without an evaluation failure
        """
        original = np.array(path, dtype=float).reshape(-1, 2)
        if len(original) < 3:
            return [p.copy() for p in original], True

        cost_function = SmootherCostFunction(original.copy(), costmap, self.params)
        x0 = original.ravel().copy()

        if self.optimizer_params.method == "lbfgs":
            x, success = self._run_lbfgs(cost_function, x0)
        else:
            x, success = self._run_gradient_descent(cost_function, x0)

        if not success:
            if self.optimizer_params.debug:
                print("Smoother failed, returning the input path")
            return [p.copy() for p in original], False

        if self.optimizer_params.debug:
            print(f"Smoother ({self.optimizer_params.method}): {self.iterations} iterations, "
                  f"cost {self.initial_cost:.4f} -> {self.final_cost:.4f} "
                  f"({self.termination})")

        smoothed = x.reshape(-1, 2)
        smoothed[0] = original[0]
        smoothed[-1] = original[-1]
        return [p.copy() for p in smoothed], True

    def _run_gradient_descent(self, cost_function, x0):
        """Fixed-step gradient descent with cost, step and gradient tolerances."""
        opts = self.optimizer_params
        x = x0.copy()
        cost, grad, ok = cost_function.evaluate(x, True)
        if not ok:
            return x0, False

        self.initial_cost = cost
        self.iterations = 0
        self.termination = "max_iterations"
        start_time = time.time()

        for it in range(opts.max_iterations):
            if time.time() - start_time >= opts.max_time:
                self.termination = "max_time"
                break

            if np.linalg.norm(grad) < opts.gradient_tol:
                self.termination = "gradient_tol"
                break

            step = opts.step_size * grad
            x = x - step
            new_cost, grad, ok = cost_function.evaluate(x, True)
            if not ok:
                return x0, False
            self.iterations = it + 1

            cost_change = abs(cost - new_cost)
            cost = new_cost
            if np.max(np.abs(step)) < opts.param_tol:
                self.termination = "param_tol"
                break
            if cost_change <= opts.fn_tol * max(abs(cost), 1.0):
                self.termination = "fn_tol"
                break

        self.final_cost = cost
        return x, True

    def _run_lbfgs(self, cost_function, x0):
        """scipy L-BFGS-B with the endpoints pinned through bounds."""
        opts = self.optimizer_params
        failed = []

        def fun(x):
            cost, grad, ok = cost_function.evaluate(x, True)
            if not ok:
                failed.append(True)
                return 0.0, np.zeros_like(x)
            return cost, grad

        bounds = [(None, None)] * len(x0)
        for k in (0, 1, len(x0) - 2, len(x0) - 1):
            bounds[k] = (x0[k], x0[k])

        self.initial_cost = fun(x0)[0]
        result = minimize(fun, x0, jac=True, method="L-BFGS-B", bounds=bounds,
                          options={"maxiter": opts.max_iterations,
                                   "ftol": opts.fn_tol,
                                   "gtol": opts.gradient_tol})
        if failed:
            return x0, False

        self.iterations = int(result.nit)
        self.final_cost = float(result.fun)
        self.termination = str(result.message)
        return np.asarray(result.x, dtype=float), True
