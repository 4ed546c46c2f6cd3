"""
ZCAM: color appearance model for high dynamic range imaging
(Safdar et al., Optics Express 2021).

Hue composition is not supported; the inverse model takes the hue angle
directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Union

import numpy as np

from zcam.appearance.izazbz import (
    hue_to_eccentricity,
    iz_to_qz,
    izazbz_to_xyz,
    qz_to_iz,
    xyz_to_izazbz,
)
from zcam.core.config import ChromaSource, LuminanceSource, Surround
from zcam.utils.color import ILLUMINANT_D65, ColorTransform

logger = logging.getLogger(__name__)

PERCEPTUAL_FIELDS = (
    "brightness",
    "lightness",
    "colorfulness",
    "chroma",
    "hue",
    "saturation",
    "vividness",
    "blackness",
    "whiteness",
)


def _default_white() -> np.ndarray:
    return ILLUMINANT_D65 * 100.0


@dataclass(frozen=True, eq=False)
class ZCAMViewingConditions:
    """
    Viewing conditions used by ZCAM.

    The derived factors depend only on the four inputs and are computed once
    at construction. Implausible inputs (non-positive luminances, a reference
    white with Y = 0) are not rejected; they produce NaN or infinite factors.
    Call :meth:`validate` to check them explicitly.
    """

    F_s: Union[Surround, float] = Surround.AVERAGE  # surround factor
    L_a: float = 40.0  # adapting luminance (cd/m^2)
    Y_b: float = 20.0  # background luminance (cd/m^2)
    reference_white: np.ndarray = field(default_factory=_default_white)  # XYZ, 0-100

    F_b: float = field(init=False)
    F_l: float = field(init=False)
    adapted_white: np.ndarray = field(init=False, repr=False)
    needs_adaptation: bool = field(init=False)
    Iz_w: float = field(init=False)
    Qz_w: float = field(init=False)

    def __post_init__(self) -> None:
        F_s = self.F_s.value if isinstance(self.F_s, Surround) else self.F_s
        F_s = np.float64(F_s)
        L_a = np.float64(self.L_a)
        Y_b = np.float64(self.Y_b)

        white = np.array(self.reference_white, dtype=np.float64)
        white.setflags(write=False)

        with np.errstate(divide="ignore", invalid="ignore"):
            F_b = np.sqrt(Y_b / white[1])
            F_l = 0.171 * np.cbrt(L_a) * (1.0 - np.exp(-48.0 / 9.0 * L_a))

            # Compare chromaticities: D65 is stored with Y = 1, the white with Y = 100
            needs_adaptation = not np.allclose(
                white / white[1],
                ILLUMINANT_D65 / ILLUMINANT_D65[1],
                rtol=1e-3,
                atol=0.0,
            )
        if needs_adaptation:
            adapted_white = ILLUMINANT_D65 * white[1]
            adapted_white.setflags(write=False)
        else:
            adapted_white = white

        Iz_w = xyz_to_izazbz(adapted_white)[0]
        Qz_w = iz_to_qz(Iz_w, F_s, F_b, F_l)

        object.__setattr__(self, "F_s", F_s)
        object.__setattr__(self, "L_a", L_a)
        object.__setattr__(self, "Y_b", Y_b)
        object.__setattr__(self, "reference_white", white)
        object.__setattr__(self, "F_b", F_b)
        object.__setattr__(self, "F_l", F_l)
        object.__setattr__(self, "adapted_white", adapted_white)
        object.__setattr__(self, "needs_adaptation", needs_adaptation)
        object.__setattr__(self, "Iz_w", np.float64(Iz_w))
        object.__setattr__(self, "Qz_w", np.float64(Qz_w))

    # Descriptive aliases
    @property
    def surround_factor(self) -> float:
        return self.F_s

    @property
    def adapting_luminance(self) -> float:
        return self.L_a

    @property
    def background_luminance(self) -> float:
        return self.Y_b

    @property
    def background_factor(self) -> float:
        return self.F_b

    @property
    def luminance_level_factor(self) -> float:
        return self.F_l

    @property
    def reference_achromatic_response(self) -> float:
        return self.Iz_w

    @property
    def reference_brightness(self) -> float:
        return self.Qz_w

    def validate(self) -> None:
        """Validate that the conditions are physically meaningful."""

        if not self.F_s > 0:
            raise ValueError(f"Surround factor {self.F_s} must be positive")

        if not self.L_a > 0:
            raise ValueError(f"Adapting luminance {self.L_a} must be positive")

        if not self.Y_b >= 0:
            raise ValueError(f"Background luminance {self.Y_b} must be non-negative")

        if not self.reference_white[1] > 0:
            raise ValueError(f"Reference white luminance {self.reference_white[1]} must be positive")


@dataclass(frozen=True, eq=False)
class ZCAMAppearance:
    """
    Perceptual correlates of a color (or an array of colors) under ZCAM.

    :meth:`ZCAM.forward` fills in every attribute. An inverse-model input
    only needs the hue plus one luminance attribute (brightness or
    lightness) and one chroma attribute; the rest may stay ``None``.
    """

    hue: np.ndarray  # hz, degrees in [0, 360)
    brightness: Optional[np.ndarray] = None  # Qz
    lightness: Optional[np.ndarray] = None  # Jz
    colorfulness: Optional[np.ndarray] = None  # Mz
    chroma: Optional[np.ndarray] = None  # Cz
    saturation: Optional[np.ndarray] = None  # Sz
    vividness: Optional[np.ndarray] = None  # Vz
    blackness: Optional[np.ndarray] = None  # Kz
    whiteness: Optional[np.ndarray] = None  # Wz

    viewing_conditions: Optional[ZCAMViewingConditions] = None

    # Diagnostics
    Iz: Optional[np.ndarray] = None
    az: Optional[np.ndarray] = None
    bz: Optional[np.ndarray] = None
    intermediate: Optional[Dict[str, np.ndarray]] = None

    # Aliases matching the paper
    @property
    def Qz(self):
        return self.brightness

    @property
    def Jz(self):
        return self.lightness

    @property
    def Mz(self):
        return self.colorfulness

    @property
    def Cz(self):
        return self.chroma

    @property
    def hz(self):
        return self.hue

    @property
    def Sz(self):
        return self.saturation

    @property
    def Vz(self):
        return self.vividness

    @property
    def Kz(self):
        return self.blackness

    @property
    def Wz(self):
        return self.whiteness

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Return the populated perceptual attributes keyed by name."""

        return {
            name: getattr(self, name)
            for name in PERCEPTUAL_FIELDS
            if getattr(self, name) is not None
        }


# Cz from each chroma-defining attribute, given Qz and Jz
_CHROMA_RECOVERY: Dict[ChromaSource, Callable[..., np.ndarray]] = {
    ChromaSource.CHROMA: lambda Cz, Qz, Jz, cond: Cz,
    ChromaSource.SATURATION: lambda Sz, Qz, Jz, cond: (Qz * Sz**2) / (100.0 * cond.Qz_w * cond.F_l**1.2),
    ChromaSource.VIVIDNESS: lambda Vz, Qz, Jz, cond: np.sqrt((Vz**2 - (Jz - 58.0) ** 2) / 3.4),
    ChromaSource.BLACKNESS: lambda Kz, Qz, Jz, cond: np.sqrt((((100.0 - Kz) / 0.8) ** 2 - Jz**2) / 8.0),
    ChromaSource.WHITENESS: lambda Wz, Qz, Jz, cond: np.sqrt((100.0 - Wz) ** 2 - (100.0 - Jz) ** 2),
}


class ZCAM:
    """
    ZCAM forward and inverse transforms.

    Operates on absolute XYZ (Y = 100 for the reference white) of shape
    (..., 3). Negative or otherwise out-of-domain values yield NaN
    correlates rather than errors.
    """

    def __init__(self, conditions: Optional[ZCAMViewingConditions] = None) -> None:
        self.conditions = conditions if conditions is not None else ZCAMViewingConditions()
        self.color_transform = ColorTransform()
        logger.debug(
            "ZCAM: F_s=%s L_a=%s Y_b=%s adaptation=%s",
            self.conditions.F_s,
            self.conditions.L_a,
            self.conditions.Y_b,
            self.conditions.needs_adaptation,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def forward(self, xyz: np.ndarray, *, return_intermediate: bool = False) -> ZCAMAppearance:
        """Map absolute XYZ to perceptual correlates."""

        cond = self.conditions
        xyz = np.asarray(xyz, dtype=np.float64)

        xyz_adapted = self._to_model_white(xyz, cond)
        Iz, az, bz = xyz_to_izazbz(xyz_adapted)

        hue = self._hue(az, bz)
        ez = hue_to_eccentricity(hue)

        brightness = iz_to_qz(Iz, cond.F_s, cond.F_b, cond.F_l)
        with np.errstate(divide="ignore", invalid="ignore"):
            lightness = 100.0 * brightness / cond.Qz_w
            colorfulness = self._colorfulness(az, bz, ez, cond)
            chroma = 100.0 * colorfulness / cond.Qz_w
            saturation = 100.0 * cond.F_l**0.6 * np.sqrt(colorfulness / brightness)

            vividness = np.sqrt((lightness - 58.0) ** 2 + 3.4 * chroma**2)
            blackness = 100.0 - 0.8 * np.sqrt(lightness**2 + 8.0 * chroma**2)
            whiteness = 100.0 - np.sqrt((100.0 - lightness) ** 2 + chroma**2)

        logger.debug("ZCAM forward: %s colors", Iz.size)

        intermediate = None
        if return_intermediate:
            intermediate = {"xyz_adapted": xyz_adapted, "ez": ez}

        return ZCAMAppearance(
            hue=hue,
            brightness=brightness,
            lightness=lightness,
            colorfulness=colorfulness,
            chroma=chroma,
            saturation=saturation,
            vividness=vividness,
            blackness=blackness,
            whiteness=whiteness,
            viewing_conditions=cond,
            Iz=Iz,
            az=az,
            bz=bz,
            intermediate=intermediate,
        )

    def inverse(
        self,
        appearance: ZCAMAppearance,
        luminance_source: LuminanceSource = LuminanceSource.LIGHTNESS,
        chroma_source: ChromaSource = ChromaSource.CHROMA,
        *,
        return_intermediate: bool = False,
    ) -> Union[np.ndarray, Dict[str, np.ndarray]]:
        """
        Map perceptual correlates back to absolute XYZ.

        Uses the viewing conditions attached to ``appearance`` when present,
        otherwise those of this model. An unsupported selector or a missing
        selected attribute produces NaN output.
        """

        cond = appearance.viewing_conditions if appearance.viewing_conditions is not None else self.conditions
        hue = np.asarray(appearance.hue, dtype=np.float64)

        brightness = self._brightness_from_source(appearance, luminance_source, cond)
        Iz = qz_to_iz(brightness, cond.F_s, cond.F_b, cond.F_l)

        with np.errstate(divide="ignore", invalid="ignore"):
            lightness = 100.0 * brightness / cond.Qz_w

            if self._chroma_source(chroma_source) is ChromaSource.COLORFULNESS:
                colorfulness = self._attribute(appearance, "colorfulness")
                chroma = 100.0 * colorfulness / cond.Qz_w
            else:
                chroma = self._chroma_from_source(appearance, chroma_source, brightness, lightness, cond)
                colorfulness = chroma * cond.Qz_w / 100.0

            ez = hue_to_eccentricity(hue)
            Cz_p = self._inverse_colorfulness(colorfulness, ez, cond)

        hue_rad = np.deg2rad(hue)
        az = Cz_p * np.cos(hue_rad)
        bz = Cz_p * np.sin(hue_rad)

        xyz = self._from_model_white(izazbz_to_xyz(Iz, az, bz), cond)

        if return_intermediate:
            return {
                "xyz": xyz,
                "Iz": Iz,
                "Cz": chroma,
                "Mz": colorfulness,
                "ez": ez,
                "Cz_p": Cz_p,
                "az": az,
                "bz": bz,
            }
        return xyz

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _to_model_white(self, xyz: np.ndarray, cond: ZCAMViewingConditions) -> np.ndarray:
        if not cond.needs_adaptation:
            return xyz
        logger.debug("ZCAM: adapting from %s to D65", cond.reference_white)
        return self.color_transform.chromatic_adapt(xyz, cond.reference_white, cond.adapted_white, "cat02")

    def _from_model_white(self, xyz: np.ndarray, cond: ZCAMViewingConditions) -> np.ndarray:
        if not cond.needs_adaptation:
            return xyz
        return self.color_transform.chromatic_adapt(xyz, cond.adapted_white, cond.reference_white, "cat02")

    def _hue(self, az: np.ndarray, bz: np.ndarray) -> np.ndarray:
        hue = np.degrees(np.arctan2(bz, az))
        hue = np.where(hue < 0.0, hue + 360.0, hue)
        # -tiny + 360 rounds to 360
        return np.where(hue >= 360.0, hue - 360.0, hue)

    def _colorfulness(
        self,
        az: np.ndarray,
        bz: np.ndarray,
        ez: np.ndarray,
        cond: ZCAMViewingConditions,
    ) -> np.ndarray:
        return (
            100.0
            * np.power(az**2 + bz**2, 0.37)
            * (np.power(ez, 0.068) * cond.F_l**0.2)
            / (cond.F_b**0.1 * cond.Iz_w**0.78)
        )

    def _inverse_colorfulness(
        self,
        colorfulness: np.ndarray,
        ez: np.ndarray,
        cond: ZCAMViewingConditions,
    ) -> np.ndarray:
        # 1 / 0.37 / 2 rather than the rounded 1.3514, for an exact inverse
        base = (colorfulness * cond.Iz_w**0.78 * cond.F_b**0.1) / (100.0 * np.power(ez, 0.068) * cond.F_l**0.2)
        return np.power(base, 1.0 / 0.37 / 2.0)

    def _attribute(self, appearance: ZCAMAppearance, name: str) -> np.ndarray:
        value = getattr(appearance, name)
        if value is None:
            logger.warning("ZCAM inverse: %s was selected but not supplied", name)
            return np.float64(np.nan)
        return np.asarray(value, dtype=np.float64)

    def _chroma_source(self, source) -> Optional[ChromaSource]:
        try:
            return ChromaSource(source)
        except ValueError:
            return None

    def _brightness_from_source(
        self,
        appearance: ZCAMAppearance,
        source,
        cond: ZCAMViewingConditions,
    ) -> np.ndarray:
        try:
            source = LuminanceSource(source)
        except ValueError:
            logger.warning("ZCAM inverse: unsupported luminance source %r", source)
            return np.float64(np.nan)

        value = self._attribute(appearance, source.value)
        if source is LuminanceSource.LIGHTNESS:
            return value * cond.Qz_w / 100.0
        return value

    def _chroma_from_source(
        self,
        appearance: ZCAMAppearance,
        source,
        brightness: np.ndarray,
        lightness: np.ndarray,
        cond: ZCAMViewingConditions,
    ) -> np.ndarray:
        chroma_source = self._chroma_source(source)
        if chroma_source is None:
            logger.warning("ZCAM inverse: unsupported chroma source %r", source)
            return np.float64(np.nan)

        value = self._attribute(appearance, chroma_source.value)
        return _CHROMA_RECOVERY[chroma_source](value, brightness, lightness, cond)


def xyz_to_zcam(
    xyz: np.ndarray,
    conditions: Optional[ZCAMViewingConditions] = None,
    *,
    return_intermediate: bool = False,
) -> ZCAMAppearance:
    """Convenience wrapper around :meth:`ZCAM.forward`."""

    return ZCAM(conditions).forward(xyz, return_intermediate=return_intermediate)


def zcam_to_xyz(
    appearance: ZCAMAppearance,
    luminance_source: LuminanceSource = LuminanceSource.LIGHTNESS,
    chroma_source: ChromaSource = ChromaSource.CHROMA,
    conditions: Optional[ZCAMViewingConditions] = None,
) -> np.ndarray:
    """Convenience wrapper around :meth:`ZCAM.inverse`."""

    return ZCAM(conditions).inverse(appearance, luminance_source, chroma_source)
