# config.py

# Costmap cost sentinels (8-bit costmap convention)
FREE_SPACE = 0
MAX_NON_OBSTACLE = 252   # highest cost that is still traversable
INSCRIBED = 253          # robot footprint would touch an obstacle
OCCUPIED = 254           # lethal obstacle
UNKNOWN = 255            # no information

# Near-zero / near-colinear guard shared by the cost terms
EPSILON = 1e-4
