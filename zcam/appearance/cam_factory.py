"""
Factory utilities for selecting a ZCAM backend.
"""

from __future__ import annotations

from typing import Optional

from zcam.appearance.zcam import ZCAMViewingConditions
from zcam.core.config import Backend


def create_cam(
    backend: Backend = Backend.NUMPY,
    *,
    conditions: Optional[ZCAMViewingConditions] = None,
    device=None,
):
    """Instantiate ZCAM on the requested backend."""

    if backend == Backend.NUMPY:
        from zcam.appearance.zcam import ZCAM

        return ZCAM(conditions)

    if backend == Backend.TORCH:
        import torch

        from zcam.torch.appearance import TorchZCAM

        return TorchZCAM(conditions, device=device if device is not None else torch.device("cpu"))

    raise ValueError(f"Unknown backend: {backend}")
