"""
Rendering constants and defaults for the Whitted renderer.
"""
import numpy as np

# Image
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768
DEFAULT_FOV = np.pi / 2.0  # radians
DEFAULT_OUTPUT = "out.png"

# Recursion
MAX_DEPTH = 4

# Offset applied along the normal to every secondary ray origin (shadow acne)
SURFACE_OFFSET = 1e-3

# Hits farther than this are treated as escaped rays
FAR_PLANE = 1000.0

# Checkerboard floor tile
FLOOR_Y = -4.0
FLOOR_X_RANGE = (-10.0, 10.0)
FLOOR_Z_RANGE = (-30.0, -10.0)
FLOOR_MIN_DIR_Y = 1e-3  # near-horizontal rays never hit the floor
FLOOR_ALBEDO = (1.0, 0.2, 0.0, 0.0)
FLOOR_SPECULAR_EXPONENT = 50.0
FLOOR_REFRACTIVE_INDEX = 1.0
FLOOR_COLORS = [
    [0.3, 0.3, 0.3], # Light tile (even parity)
    [0.1, 0.1, 0.1], # Dark tile (odd parity)
]

# Background used when no environment map is loaded
BACKGROUND_COLOR = [0.2, 0.7, 0.8]

# Batching
DEFAULT_BATCH_SIZE = 1 << 16
