from __future__ import annotations

# Newtonian gravitational constant in SI units (m^3 kg^-1 s^-2)
GRAVITATIONAL_CONSTANT: float = 6.674e-11

# Root solver: residual tolerance and iteration cap
SOLVER_TOLERANCE: float = 1e-6
SOLVER_MAX_ITERATIONS: int = 20

# Below this an eccentricity is treated as circular
ECCENTRICITY_EPSILON: float = 1e-6

# Below this a vector magnitude (h, node vector) is treated as zero
DEGENERATE_EPSILON: float = 1e-12

# |e - 1| below this is clamped onto the hyperbolic branch
PARABOLIC_TOLERANCE: float = 1e-9

# Demo scene defaults (simulation units)
DEFAULT_BOUNDS_RADIUS: float = 20.0
DEFAULT_SOI_RADIUS: float = 1.0

# Path preview
PREDICTION_STEPS: int = 128
PREDICTION_MAX_SEGMENTS: int = 8
