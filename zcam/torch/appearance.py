"""
Torch ZCAM mirroring the numpy implementation.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import torch

from zcam.appearance.izazbz import (
    B,
    C1,
    C2,
    C3,
    EPSILON,
    ETA,
    G,
    IZAZBZ_TO_LMS,
    LMS_TO_IZAZBZ,
    LMS_TO_XYZ,
    RHO,
    XYZ_TO_LMS,
)
from zcam.appearance.zcam import ZCAMViewingConditions
from zcam.core.config import ChromaSource, LuminanceSource
from zcam.torch.common import ensure_tensor, nan_like
from zcam.utils.color import ColorTransform

logger = logging.getLogger(__name__)


class TorchZCAM:
    """
    ZCAM on torch tensors of shape (..., 3).

    The viewing-condition factors are folded into python floats once, so the
    per-call work is pure tensor arithmetic.
    """

    def __init__(
        self,
        conditions: Optional[ZCAMViewingConditions] = None,
        device: torch.device = torch.device("cpu"),
        dtype: torch.dtype = torch.float64,
    ) -> None:
        self.conditions = conditions if conditions is not None else ZCAMViewingConditions()
        self.device = device
        self.dtype = dtype

        self.xyz_to_lms = self._tensor(XYZ_TO_LMS)
        self.lms_to_xyz = self._tensor(LMS_TO_XYZ)
        self.lms_to_izazbz = self._tensor(LMS_TO_IZAZBZ)
        self.izazbz_to_lms = self._tensor(IZAZBZ_TO_LMS)

        cond = self.conditions
        if cond.needs_adaptation:
            transform = ColorTransform()
            self.adapt_to_model = self._tensor(
                transform.adaptation_matrix(cond.reference_white, cond.adapted_white, "cat02")
            )
            self.adapt_from_model = self._tensor(
                transform.adaptation_matrix(cond.adapted_white, cond.reference_white, "cat02")
            )
        else:
            self.adapt_to_model = None
            self.adapt_from_model = None

        with np.errstate(divide="ignore", invalid="ignore"):
            self.qz_exponent = float(1.6 * cond.F_s / cond.F_b**0.12)
            self.qz_scale = float(2700.0 * cond.F_s**2.2 * cond.F_b**0.5 * cond.F_l**0.2)
            self.mz_scale = float(100.0 * cond.F_l**0.2 / (cond.F_b**0.1 * cond.Iz_w**0.78))
            self.sz_scale = float(100.0 * cond.F_l**0.6)
            self.sz_inverse_scale = float(100.0 * cond.Qz_w * cond.F_l**1.2)
        self.Qz_w = float(cond.Qz_w)

        logger.debug("TorchZCAM on %s (%s)", self.device, self.dtype)

    def forward(self, xyz) -> Dict[str, torch.Tensor]:
        """Forward transform: XYZ to perceptual attributes."""

        xyz = ensure_tensor(xyz, self.device, self.dtype)
        if self.adapt_to_model is not None:
            xyz = self._matmul(self.adapt_to_model, xyz)

        Iz, az, bz = self._xyz_to_izazbz(xyz)

        hue = torch.rad2deg(torch.atan2(bz, az))
        hue = torch.where(hue < 0.0, hue + 360.0, hue)
        hue = torch.where(hue >= 360.0, hue - 360.0, hue)
        ez = self._eccentricity(hue)

        brightness = self.qz_scale * torch.pow(Iz, self.qz_exponent)
        lightness = 100.0 * brightness / self.Qz_w
        colorfulness = self.mz_scale * torch.pow(az**2 + bz**2, 0.37) * torch.pow(ez, 0.068)
        chroma = 100.0 * colorfulness / self.Qz_w
        saturation = self.sz_scale * torch.sqrt(colorfulness / brightness)

        return {
            "brightness": brightness,
            "lightness": lightness,
            "colorfulness": colorfulness,
            "chroma": chroma,
            "hue": hue,
            "saturation": saturation,
            "vividness": torch.sqrt((lightness - 58.0) ** 2 + 3.4 * chroma**2),
            "blackness": 100.0 - 0.8 * torch.sqrt(lightness**2 + 8.0 * chroma**2),
            "whiteness": 100.0 - torch.sqrt((100.0 - lightness) ** 2 + chroma**2),
            "Iz": Iz,
            "az": az,
            "bz": bz,
        }

    def inverse(
        self,
        appearance: Mapping[str, torch.Tensor],
        luminance_source: LuminanceSource = LuminanceSource.LIGHTNESS,
        chroma_source: ChromaSource = ChromaSource.CHROMA,
    ) -> torch.Tensor:
        """Inverse transform: perceptual attributes to XYZ."""

        hue = ensure_tensor(appearance["hue"], self.device, self.dtype)

        brightness = self._brightness_from_source(appearance, luminance_source, hue)
        Iz = torch.pow(brightness / self.qz_scale, 1.0 / self.qz_exponent)
        lightness = 100.0 * brightness / self.Qz_w

        source = self._chroma_source(chroma_source)
        if source is ChromaSource.COLORFULNESS:
            colorfulness = self._attribute(appearance, "colorfulness", hue)
        else:
            chroma = self._chroma_from_source(appearance, source, brightness, lightness, hue)
            colorfulness = chroma * self.Qz_w / 100.0

        ez = self._eccentricity(hue)
        Cz_p = torch.pow(colorfulness / (self.mz_scale * torch.pow(ez, 0.068)), 1.0 / 0.37 / 2.0)

        hue_rad = torch.deg2rad(hue)
        xyz = self._izazbz_to_xyz(Iz, Cz_p * torch.cos(hue_rad), Cz_p * torch.sin(hue_rad))
        if self.adapt_from_model is not None:
            xyz = self._matmul(self.adapt_from_model, xyz)
        return xyz

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _tensor(self, array: np.ndarray) -> torch.Tensor:
        return torch.tensor(array, dtype=self.dtype, device=self.device)

    def _matmul(self, mat: torch.Tensor, values: torch.Tensor) -> torch.Tensor:
        return torch.matmul(values, mat.T)

    def _pq(self, x: torch.Tensor) -> torch.Tensor:
        x_eta = torch.pow(x / 10000.0, ETA)
        return torch.pow((C1 + C2 * x_eta) / (1.0 + C3 * x_eta), RHO)

    def _pq_inverse(self, x: torch.Tensor) -> torch.Tensor:
        x_rho = torch.pow(x, 1.0 / RHO)
        return 10000.0 * torch.pow((C1 - x_rho) / (C3 * x_rho - C2), 1.0 / ETA)

    def _eccentricity(self, hue: torch.Tensor) -> torch.Tensor:
        return 1.015 + torch.cos(torch.deg2rad(89.038 + hue))

    def _xyz_to_izazbz(self, xyz: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]
        xp = B * x - (B - 1.0) * z
        yp = G * y - (G - 1.0) * x

        lms_p = self._pq(self._matmul(self.xyz_to_lms, torch.stack((xp, yp, z), dim=-1)))
        izazbz = self._matmul(self.lms_to_izazbz, lms_p)
        return izazbz[..., 0] - EPSILON, izazbz[..., 1], izazbz[..., 2]

    def _izazbz_to_xyz(self, Iz: torch.Tensor, az: torch.Tensor, bz: torch.Tensor) -> torch.Tensor:
        Iz, az, bz = torch.broadcast_tensors(Iz + EPSILON, az, bz)
        lms = self._pq_inverse(self._matmul(self.izazbz_to_lms, torch.stack((Iz, az, bz), dim=-1)))

        xyz_p = self._matmul(self.lms_to_xyz, lms)
        xp, yp, z = xyz_p[..., 0], xyz_p[..., 1], xyz_p[..., 2]
        x = (xp + (B - 1.0) * z) / B
        y = (yp + (G - 1.0) * x) / G
        return torch.stack((x, y, z), dim=-1)

    def _attribute(self, appearance: Mapping[str, torch.Tensor], name: str, hue: torch.Tensor) -> torch.Tensor:
        value = appearance.get(name)
        if value is None:
            logger.warning("TorchZCAM inverse: %s was selected but not supplied", name)
            return nan_like(hue)
        return ensure_tensor(value, self.device, self.dtype)

    def _chroma_source(self, source) -> Optional[ChromaSource]:
        try:
            return ChromaSource(source)
        except ValueError:
            return None

    def _brightness_from_source(
        self,
        appearance: Mapping[str, torch.Tensor],
        source,
        hue: torch.Tensor,
    ) -> torch.Tensor:
        try:
            source = LuminanceSource(source)
        except ValueError:
            logger.warning("TorchZCAM inverse: unsupported luminance source %r", source)
            return nan_like(hue)

        value = self._attribute(appearance, source.value, hue)
        if source is LuminanceSource.LIGHTNESS:
            return value * self.Qz_w / 100.0
        return value

    def _chroma_from_source(
        self,
        appearance: Mapping[str, torch.Tensor],
        source: Optional[ChromaSource],
        brightness: torch.Tensor,
        lightness: torch.Tensor,
        hue: torch.Tensor,
    ) -> torch.Tensor:
        if source is None:
            logger.warning("TorchZCAM inverse: unsupported chroma source")
            return nan_like(hue)

        value = self._attribute(appearance, source.value, hue)
        if source is ChromaSource.CHROMA:
            return value
        if source is ChromaSource.SATURATION:
            return brightness * value**2 / self.sz_inverse_scale
        if source is ChromaSource.VIVIDNESS:
            return torch.sqrt((value**2 - (lightness - 58.0) ** 2) / 3.4)
        if source is ChromaSource.BLACKNESS:
            return torch.sqrt((((100.0 - value) / 0.8) ** 2 - lightness**2) / 8.0)
        return torch.sqrt((100.0 - value) ** 2 - (100.0 - lightness) ** 2)
