"""
Color space transformations and chromatic adaptation utilities.
"""

from __future__ import annotations

import numpy as np


def xy_to_xyz(x: float, y: float, Y: float = 1.0) -> np.ndarray:
    """Convert CIE xy chromaticity (plus luminance) to XYZ."""

    return np.array([x * Y / y, Y, (1.0 - x - y) * Y / y], dtype=np.float64)


# CIE standard illuminant D65, 2 degree observer, Y = 1
ILLUMINANT_D65 = xy_to_xyz(0.3127, 0.3290)
ILLUMINANT_D65.setflags(write=False)


class ColorTransform:
    """Color space transformation utilities."""

    def __init__(self) -> None:
        """Initialize color transform matrices."""

        # sRGB to XYZ (D65)
        self.srgb_to_xyz_matrix = np.array(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ]
        )

        # XYZ to sRGB
        self.xyz_to_srgb_matrix = np.linalg.inv(self.srgb_to_xyz_matrix)

        # Cone response matrices for von Kries-type adaptation
        self.cat_matrices = {
            "cat02": np.array(
                [
                    [0.7328, 0.4296, -0.1624],
                    [-0.7036, 1.6975, 0.0061],
                    [0.0030, 0.0136, 0.9834],
                ]
            ),
            "bradford": np.array(
                [
                    [0.8951, 0.2664, -0.1614],
                    [-0.7502, 1.7135, 0.0367],
                    [0.0389, -0.0685, 1.0296],
                ]
            ),
            # Hunt-Pointer-Estevez
            "von_kries": np.array(
                [
                    [0.38971, 0.68898, -0.07868],
                    [-0.22981, 1.18340, 0.04641],
                    [0.00000, 0.00000, 1.00000],
                ]
            ),
        }

    def srgb_to_xyz(self, rgb: np.ndarray) -> np.ndarray:
        """
        Convert linear sRGB to XYZ.

        Parameters
        ----------
        rgb : np.ndarray
            Linear sRGB, shape (..., 3)
        """

        return np.tensordot(np.asarray(rgb, dtype=np.float64), self.srgb_to_xyz_matrix.T, axes=([-1], [0]))

    def xyz_to_srgb(self, xyz: np.ndarray) -> np.ndarray:
        """Convert XYZ to linear sRGB."""

        return np.tensordot(np.asarray(xyz, dtype=np.float64), self.xyz_to_srgb_matrix.T, axes=([-1], [0]))

    def cat_matrix(self, cat: str) -> np.ndarray:
        """Look up a chromatic adaptation matrix by name."""

        try:
            return self.cat_matrices[cat.lower()]
        except KeyError:
            raise ValueError(f"Unknown chromatic adaptation matrix: {cat}") from None

    def adaptation_matrix(
        self,
        source_white: np.ndarray,
        destination_white: np.ndarray,
        cat: str = "cat02",
    ) -> np.ndarray:
        """
        Build the 3x3 XYZ -> XYZ matrix mapping ``source_white`` onto
        ``destination_white`` with complete adaptation.

        Both whites must share the scale of the colors being adapted.
        """

        matrix = self.cat_matrix(cat)
        source_lms = matrix @ np.asarray(source_white, dtype=np.float64)
        destination_lms = matrix @ np.asarray(destination_white, dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            gain = np.diag(destination_lms / source_lms)
        return np.linalg.inv(matrix) @ gain @ matrix

    def chromatic_adapt(
        self,
        xyz: np.ndarray,
        source_white: np.ndarray,
        destination_white: np.ndarray,
        cat: str = "cat02",
    ) -> np.ndarray:
        """
        Apply von Kries-type chromatic adaptation.

        Parameters
        ----------
        xyz : np.ndarray
            XYZ values, shape (..., 3)
        source_white : np.ndarray
            White point the colors were observed under, shape (3,)
        destination_white : np.ndarray
            White point to adapt to, shape (3,)
        cat : str
            Cone response matrix: ``cat02``, ``bradford`` or ``von_kries``
        """

        adapt = self.adaptation_matrix(source_white, destination_white, cat)
        return np.tensordot(np.asarray(xyz, dtype=np.float64), adapt.T, axes=([-1], [0]))
