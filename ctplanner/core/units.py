"""Unit conversion module — single conversion point between core and display.

Core units:
    Length     : mm
    Voxel size : µm
    Data size  : byte

Display units:
    Length     : mm
    Voxel size : µm
    Data size  : GiB (binary gigabyte, 1024³ bytes)
"""

import math
from typing import NewType

# Unit aliases for annotations
Um = NewType('Um', float)
GiB = NewType('GiB', float)

BYTES_PER_GIB = 1024 ** 3


# ---------------------------------------------------------------------------
# Length conversions
# ---------------------------------------------------------------------------

def mm_to_um(mm: float) -> Um:
    """mm → µm."""
    return Um(mm * 1000.0)


# ---------------------------------------------------------------------------
# Data size conversions
# ---------------------------------------------------------------------------

def bytes_to_GiB(size_bytes: int) -> GiB:
    """Byte count → binary gigabytes (bytes / 1024³)."""
    return GiB(size_bytes / BYTES_PER_GIB)


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (2.5 → 3, -2.5 → -2).

    Pixel and projection counts use this rule instead of Python's
    round-half-to-even.
    """
    return int(math.floor(value + 0.5))
