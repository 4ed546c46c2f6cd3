"""
Tests for color transforms and chromatic adaptation.
"""

from __future__ import annotations

import numpy as np
import pytest

from zcam.utils.color import ILLUMINANT_D65, ColorTransform, xy_to_xyz

D50 = np.array([96.422, 100.0, 82.521])


def test_d65_white_point() -> None:
    assert ILLUMINANT_D65[1] == 1.0
    assert np.allclose(ILLUMINANT_D65, [0.95047, 1.0, 1.08883], atol=5e-4)
    assert np.allclose(xy_to_xyz(0.3127, 0.3290, 100.0), ILLUMINANT_D65 * 100.0)


def test_srgb_roundtrip() -> None:
    transform = ColorTransform()
    rgb = np.random.rand(4, 4, 3)
    assert np.allclose(transform.xyz_to_srgb(transform.srgb_to_xyz(rgb)), rgb)


@pytest.mark.parametrize("cat", ["cat02", "bradford", "von_kries"])
def test_adaptation_maps_white_to_white(cat) -> None:
    transform = ColorTransform()
    d65 = ILLUMINANT_D65 * 100.0
    assert np.allclose(transform.chromatic_adapt(D50, D50, d65, cat), d65)


def test_adaptation_is_invertible() -> None:
    transform = ColorTransform()
    d65 = ILLUMINANT_D65 * 100.0
    xyz = np.random.rand(5, 3) * 100.0
    adapted = transform.chromatic_adapt(xyz, D50, d65)
    assert np.allclose(transform.chromatic_adapt(adapted, d65, D50), xyz)


def test_unknown_adaptation_matrix() -> None:
    with pytest.raises(ValueError):
        ColorTransform().chromatic_adapt(D50, D50, D50, "cat97")
