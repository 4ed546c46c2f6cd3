"""
Tests for the ZCAM forward and inverse models.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

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

D65 = ILLUMINANT_D65 * 100.0
D50 = np.array([96.422, 100.0, 82.521])


def _test_colors() -> np.ndarray:
    primaries = ColorTransform().srgb_to_xyz(np.eye(3)) * 100.0
    return np.vstack(
        [
            D65 * 0.01,  # near black
            D65 * 0.98,  # near white
            primaries,
            [59.29, 28.48, 96.98],  # magenta
            [20.0, 15.0, 5.0],
            [30.0, 40.0, 60.0],
        ]
    )


@pytest.mark.parametrize("chroma_source", list(ChromaSource))
@pytest.mark.parametrize("luminance_source", list(LuminanceSource))
def test_forward_inverse_roundtrip(luminance_source, chroma_source) -> None:
    cam = ZCAM(ZCAMViewingConditions(Surround.AVERAGE, 264.0, 100.0, D65))
    xyz = _test_colors()

    appearance = cam.forward(xyz)
    xyz_back = cam.inverse(appearance, luminance_source, chroma_source)

    assert xyz_back.shape == xyz.shape
    assert np.allclose(xyz_back, xyz, rtol=0.0, atol=1e-6)


def test_roundtrip_on_image() -> None:
    rng = np.random.default_rng(0)
    rgb = rng.uniform(0.01, 1.0, size=(8, 8, 3))
    xyz = ColorTransform().srgb_to_xyz(rgb) * 100.0

    appearance = xyz_to_zcam(xyz)
    assert appearance.lightness.shape == (8, 8)

    xyz_back = zcam_to_xyz(appearance)
    assert np.allclose(xyz_back, xyz, rtol=0.0, atol=1e-6)


def test_chroma_sources_agree() -> None:
    cam = ZCAM()
    appearance = cam.forward(np.array([30.0, 40.0, 60.0]))

    results = [
        cam.inverse(appearance, LuminanceSource.BRIGHTNESS, source)
        for source in ChromaSource
        if source is not ChromaSource.COLORFULNESS
    ]
    for xyz in results[1:]:
        assert np.allclose(xyz, results[0], rtol=0.0, atol=1e-6)


def test_inverse_from_partial_attributes() -> None:
    cond = ZCAMViewingConditions()
    full = xyz_to_zcam(np.array([20.0, 15.0, 5.0]), cond)

    partial = ZCAMAppearance(hue=full.hue, lightness=full.lightness, vividness=full.vividness)
    xyz = zcam_to_xyz(partial, LuminanceSource.LIGHTNESS, ChromaSource.VIVIDNESS, conditions=cond)
    assert np.allclose(xyz, [20.0, 15.0, 5.0], rtol=0.0, atol=1e-6)


@pytest.mark.parametrize("surround", list(Surround))
@pytest.mark.parametrize("white", [D65, D50, np.array([109.85, 100.0, 35.585])])
def test_reference_white_is_achromatic(surround, white) -> None:
    cond = ZCAMViewingConditions(surround, 100.0, 20.0, white)
    appearance = xyz_to_zcam(white, cond)

    assert np.isclose(appearance.lightness, 100.0, rtol=0.0, atol=1e-9)
    assert 0.0 <= appearance.chroma < 1.0


def test_surround_changes_brightness_not_white_lightness() -> None:
    xyz = np.array([30.0, 40.0, 60.0])
    brightness = []
    for surround in Surround:
        cond = ZCAMViewingConditions(surround, 64.0, 20.0, D65)
        brightness.append(float(xyz_to_zcam(xyz, cond).brightness))
        assert np.isclose(xyz_to_zcam(D65, cond).lightness, 100.0)

    assert len(set(brightness)) == len(brightness)


def test_black_has_zero_achromatic_response() -> None:
    appearance = xyz_to_zcam(np.zeros(3))
    # Uncorrected, Iz would equal pq(0) ~ 3.7e-11
    assert abs(float(appearance.Iz)) < 1e-15


def test_hue_is_normalized() -> None:
    cam = ZCAM()
    appearance = cam.forward(_test_colors())
    assert np.all(appearance.hue >= 0.0)
    assert np.all(appearance.hue < 360.0)

    magenta = cam.forward(np.array([59.29, 28.48, 96.98]))
    assert magenta.az > 0.0 and magenta.bz < 0.0
    assert 270.0 < magenta.hue < 360.0

    assert np.isclose(cam._hue(np.array(1.0), np.array(-1.0)), 315.0)
    assert cam._hue(np.array(1.0), np.array(-1e-300)) < 360.0


def test_brightness_increases_with_luminance() -> None:
    base = np.array([30.0, 40.0, 60.0])
    xyz = base[np.newaxis, :] * np.array([0.1, 0.5, 1.0, 2.0, 5.0])[:, np.newaxis]
    appearance = xyz_to_zcam(xyz)

    assert np.all(np.diff(appearance.brightness) > 0.0)
    assert np.all(np.diff(appearance.lightness) > 0.0)


def test_adaptation_roundtrip_under_d50() -> None:
    cond = ZCAMViewingConditions(Surround.DIM, 64.0, 20.0, D50)
    assert cond.needs_adaptation

    xyz = _test_colors()
    cam = ZCAM(cond)
    appearance = cam.forward(xyz, return_intermediate=True)
    assert not np.allclose(appearance.intermediate["xyz_adapted"], xyz)

    xyz_back = cam.inverse(appearance, LuminanceSource.LIGHTNESS, ChromaSource.SATURATION)
    assert np.allclose(xyz_back, xyz, rtol=0.0, atol=1e-6)


def test_attribute_aliases() -> None:
    appearance = xyz_to_zcam(np.array([20.0, 15.0, 5.0]))
    assert appearance.Jz is appearance.lightness
    assert appearance.Qz is appearance.brightness
    assert appearance.hz is appearance.hue
    assert set(appearance.to_dict()) == {
        "brightness",
        "lightness",
        "colorfulness",
        "chroma",
        "hue",
        "saturation",
        "vividness",
        "blackness",
        "whiteness",
    }


def test_unsupported_selectors_give_nan(caplog) -> None:
    cam = ZCAM()
    appearance = cam.forward(np.array([20.0, 15.0, 5.0]))

    with caplog.at_level(logging.WARNING):
        assert np.isnan(cam.inverse(appearance, "luminance", ChromaSource.CHROMA)).all()
        assert np.isnan(cam.inverse(appearance, LuminanceSource.LIGHTNESS, "hue")).all()
    assert "unsupported" in caplog.text

    partial = ZCAMAppearance(hue=appearance.hue, lightness=appearance.lightness)
    assert np.isnan(cam.inverse(partial, LuminanceSource.LIGHTNESS, ChromaSource.WHITENESS)).all()
    assert np.isnan(cam.inverse(partial, LuminanceSource.BRIGHTNESS, ChromaSource.CHROMA)).all()


def test_selectors_accept_values() -> None:
    cam = ZCAM()
    xyz = np.array([20.0, 15.0, 5.0])
    appearance = cam.forward(xyz)
    assert np.allclose(cam.inverse(appearance, "brightness", "blackness"), xyz, atol=1e-6)


def test_inverse_intermediate_matches_forward() -> None:
    cam = ZCAM()
    appearance = cam.forward(np.array([30.0, 40.0, 60.0]), return_intermediate=True)
    result = cam.inverse(appearance, return_intermediate=True)

    assert np.isclose(result["Iz"], appearance.Iz)
    assert np.isclose(result["az"], appearance.az)
    assert np.isclose(result["bz"], appearance.bz)
    assert np.isclose(result["ez"], appearance.intermediate["ez"])
    assert np.isclose(result["Mz"], appearance.colorfulness)
