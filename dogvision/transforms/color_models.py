"""
Fixed constants for the color simulation models.

DICHROMATIC:
    Vienot, Brettel & Mollon (1999), "Digital video colourmaps for checking
    the legibility of displays by dichromats", corrected for sRGB / D65.
    Applied directly to gamma-encoded values.

CANINE:
    Two dog cone classes plus rods (Neitz et al. 1989; Miller & Murphy 1995):
    - S-cone, peak ~440nm (blue-like)
    - L-cone, peak ~555nm (between human green and red)
    - rods, peak ~498nm (scotopic vision)
    Evaluated in linear light.
"""

import numpy as np


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


# === DICHROMATIC ===
DEUTERANOPIA_MATRIX = _frozen([
    [0.360278, 0.706949, -0.067227],
    [0.278603, 0.673002, 0.048395],
    [-0.012328, 0.042811, 0.969517],
])

# === CANINE ===
GAMMA = 2.2

# Rows: S-cone, L-cone, rod response from linear RGB
CANINE_RESPONSE_MATRIX = _frozen([
    [0.05, 0.22, 0.73],
    [0.68, 0.32, 0.00],
    [0.30, 0.59, 0.11],
])

# Rows: display R, G, B; columns: (S-cone, L-cone) weights.
# L dominates red and most of green, S dominates blue.
CONE_TO_DISPLAY = _frozen([
    [0.1, 0.8],
    [0.3, 0.6],
    [0.9, 0.0],
])

# ITU-R BT.709 luminance
LUMINANCE_WEIGHTS = _frozen([0.2126, 0.7152, 0.0722])

SCOTOPIC_THRESHOLD = 0.3
SCOTOPIC_GAIN = 1.3
SCOTOPIC_MAX_BLEND = 0.4
ROD_TINT_SCALE = 0.7

# Per-channel rod tint bias toward blue-green
ROD_CHANNEL_BIAS = _frozen([1.0, 1.2, 1.1])
