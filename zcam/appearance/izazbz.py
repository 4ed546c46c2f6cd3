"""
Izazbz intermediate space shared by the forward and inverse ZCAM models.

All functions operate element-wise on numpy arrays (or scalars) and let
out-of-domain values propagate as NaN instead of raising: the PQ curve and
the fractional powers are only defined for non-negative operands.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

# Compression toward neutral
B = 1.15
G = 0.66

# Perceptual quantizer, with the ZCAM rho in place of ST 2084 m2
C1 = 3424.0 / 4096.0
C2 = 2413.0 / 128.0
C3 = 2392.0 / 128.0
ETA = 2610.0 / 16384.0
RHO = 1.7 * 2523.0 / 32.0

# pq(0): removes the black-level offset from Iz
EPSILON = 3.7035226210190005e-11

XYZ_TO_LMS = np.array(
    [
        [0.41478972, 0.579999, 0.0146480],
        [-0.2015100, 1.120649, 0.0531008],
        [-0.0166008, 0.264800, 0.6684799],
    ]
)
LMS_TO_XYZ = np.linalg.inv(XYZ_TO_LMS)

LMS_TO_IZAZBZ = np.array(
    [
        [0.000000, 1.000000, 0.000000],
        [3.524000, -4.066708, 0.542708],
        [0.199076, 1.096799, -1.295875],
    ]
)
IZAZBZ_TO_LMS = np.linalg.inv(LMS_TO_IZAZBZ)


def _apply(matrix: np.ndarray, values: np.ndarray) -> np.ndarray:
    return np.tensordot(values, matrix.T, axes=([-1], [0]))


def pq(x):
    """Encode absolute luminance (cd/m^2) with the perceptual quantizer."""

    with np.errstate(invalid="ignore"):
        x_eta = np.power(np.asarray(x, dtype=np.float64) / 10000.0, ETA)
        return np.power((C1 + C2 * x_eta) / (1.0 + C3 * x_eta), RHO)


def pq_inverse(x):
    """Exact inverse of :func:`pq`."""

    with np.errstate(invalid="ignore", divide="ignore"):
        x_rho = np.power(np.asarray(x, dtype=np.float64), 1.0 / RHO)
        return 10000.0 * np.power((C1 - x_rho) / (C3 * x_rho - C2), 1.0 / ETA)


def xyz_to_izazbz(xyz: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert absolute XYZ to the achromatic and opponent responses.

    Parameters
    ----------
    xyz : np.ndarray
        XYZ values, shape (..., 3)

    Returns
    -------
    tuple
        ``(Iz, az, bz)``, each of shape (...)
    """

    xyz = np.asarray(xyz, dtype=np.float64)
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]

    xp = B * x - (B - 1.0) * z
    yp = G * y - (G - 1.0) * x

    lms = _apply(XYZ_TO_LMS, np.stack((xp, yp, z), axis=-1))
    lms_p = pq(lms)

    izazbz = _apply(LMS_TO_IZAZBZ, lms_p)
    Iz = izazbz[..., 0] - EPSILON
    return Iz, izazbz[..., 1], izazbz[..., 2]


def izazbz_to_xyz(Iz, az, bz) -> np.ndarray:
    """Inverse of :func:`xyz_to_izazbz`, returning XYZ of shape (..., 3)."""

    Iz, az, bz = np.broadcast_arrays(
        np.asarray(Iz, dtype=np.float64) + EPSILON,
        np.asarray(az, dtype=np.float64),
        np.asarray(bz, dtype=np.float64),
    )

    lms_p = _apply(IZAZBZ_TO_LMS, np.stack((Iz, az, bz), axis=-1))
    lms = pq_inverse(lms_p)

    xyz_p = _apply(LMS_TO_XYZ, lms)
    xp, yp, z = xyz_p[..., 0], xyz_p[..., 1], xyz_p[..., 2]

    x = (xp + (B - 1.0) * z) / B
    y = (yp + (G - 1.0) * x) / G
    return np.stack((x, y, z), axis=-1)


def hue_to_eccentricity(hz):
    """Eccentricity factor ez for a hue angle in degrees."""

    return 1.015 + np.cos(np.deg2rad(89.038 + np.asarray(hz, dtype=np.float64)))


def iz_to_qz(Iz, F_s: float, F_b: float, F_l: float):
    """Brightness Qz from the achromatic response."""

    with np.errstate(invalid="ignore", divide="ignore"):
        return (
            2700.0
            * np.power(np.asarray(Iz, dtype=np.float64), (1.6 * F_s) / F_b**0.12)
            * (F_s**2.2 * F_b**0.5 * F_l**0.2)
        )


def qz_to_iz(Qz, F_s: float, F_b: float, F_l: float):
    """Inverse of :func:`iz_to_qz`."""

    with np.errstate(invalid="ignore", divide="ignore"):
        denominator = 2700.0 * F_s**2.2 * F_b**0.5 * F_l**0.2
        return np.power(np.asarray(Qz, dtype=np.float64) / denominator, F_b**0.12 / (1.6 * F_s))
