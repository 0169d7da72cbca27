"""
Configuration file for the 2D grid A* search.
"""

# Neighborhood: "VON_NEUMANN" (4-connected) or "MOORE" (8-connected)
NEIGHBORHOOD = "MOORE"

# Cost weights
NEUTRAL_COST = 50.0            # Cost of one free-space step of unit length
COST_TRAVEL_MULTIPLIER = 1.0   # Multiplier on the cell cost of the cell entered

# Search parameters
ALLOW_UNKNOWN = True           # Expand through UNKNOWN cells
MAX_ITERATIONS = 1000000       # Hard cap on node pops per search

# Real-time planning
TIME_BUDGET_PER_STEP = 0.02  # seconds
ITERATIONS_PER_CHECK = 50  # Check time budget every N iterations
