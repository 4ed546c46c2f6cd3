"""
Basic usage examples for ZCAM.
"""

from __future__ import annotations

import numpy as np

from zcam import (
    ZCAM,
    ChromaSource,
    LuminanceSource,
    Surround,
    ZCAMAppearance,
    ZCAMViewingConditions,
    xyz_to_zcam,
    zcam_to_xyz,
)
from zcam.utils.color import ILLUMINANT_D65, ColorTransform


def example_single_color() -> ZCAMAppearance:
    """Describe one color under the default viewing conditions."""

    appearance = xyz_to_zcam(np.array([41.24, 21.26, 1.93]))
    print(
        f"sRGB red: J={float(appearance.lightness):0.2f} "
        f"C={float(appearance.chroma):0.2f} h={float(appearance.hue):0.2f}"
    )
    return appearance


def example_image_roundtrip() -> np.ndarray:
    """Forward and inverse transform of an image under a dim surround."""

    rgb = np.random.rand(256, 256, 3)
    xyz = ColorTransform().srgb_to_xyz(rgb) * 100.0

    conditions = ZCAMViewingConditions(Surround.DIM, 64.0, 20.0, ILLUMINANT_D65 * 100.0)
    cam = ZCAM(conditions)
    appearance = cam.forward(xyz)
    xyz_back = cam.inverse(appearance, LuminanceSource.LIGHTNESS, ChromaSource.CHROMA)
    print(f"Round-trip max error: {np.nanmax(np.abs(xyz_back - xyz)):0.3e}")
    return xyz_back


def example_desaturate() -> np.ndarray:
    """Halve the chroma of a color while keeping its lightness and hue."""

    appearance = xyz_to_zcam(np.array([30.0, 40.0, 60.0]))
    edited = ZCAMAppearance(
        hue=appearance.hue,
        lightness=appearance.lightness,
        chroma=appearance.chroma * 0.5,
        viewing_conditions=appearance.viewing_conditions,
    )
    xyz = zcam_to_xyz(edited)
    print(f"Desaturated XYZ: {np.round(xyz, 3)}")
    return xyz


if __name__ == "__main__":
    print("Running ZCAM basic examples...")
    example_single_color()
    example_image_roundtrip()
    example_desaturate()
