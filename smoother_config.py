"""
Configuration file for the path smoother.
"""

# Cost term weights
SMOOTH_WEIGHT = 0.3
COSTMAP_WEIGHT = 0.0001
CURVATURE_WEIGHT = 0.1
DISTANCE_WEIGHT = 0.05

# Maximum curvature (turning angle per unit length of the incoming edge)
MAX_CURVATURE = 1.0 / 0.4  # 1 / minimum turning radius (meters)

# Optimizer limits
MAX_ITERATIONS = 500
MAX_TIME = 0.1  # seconds
STEP_SIZE = 0.05  # gradient descent learning rate

# Convergence tolerances
FN_TOL = 1e-7  # relative change in cost
PARAM_TOL = 1e-8  # largest parameter update
GRADIENT_TOL = 1e-10  # gradient norm

# "gradient_descent" or "lbfgs"
METHOD = "gradient_descent"

DEBUG = False
