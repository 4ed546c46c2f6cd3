"""
Configuration primitives for ZCAM.

Defines enums for surround conditions, the attribute selectors used by the
inverse model, and the computation backend.
"""

from enum import Enum


class Surround(Enum):
    """Viewing environment surround factor (F_s)."""

    DARK = 0.525     # Cinema, projected in a dark room
    DIM = 0.59       # Home TV, dimly lit room
    AVERAGE = 0.69   # Surface colors, office lighting


class LuminanceSource(Enum):
    """Attribute carrying luminance information for the inverse model."""

    BRIGHTNESS = "brightness"  # Qz
    LIGHTNESS = "lightness"    # Jz


class ChromaSource(Enum):
    """Attribute carrying chroma information for the inverse model."""

    CHROMA = "chroma"              # Cz
    COLORFULNESS = "colorfulness"  # Mz, used directly
    SATURATION = "saturation"      # Sz
    VIVIDNESS = "vividness"        # Vz
    BLACKNESS = "blackness"        # Kz
    WHITENESS = "whiteness"        # Wz


class Backend(Enum):
    """Computation backend."""

    NUMPY = "numpy"
    TORCH = "torch"
