"""ZCAM color appearance model.

Forward and inverse transforms between absolute CIE XYZ and the ZCAM
perceptual correlates for high dynamic range imaging.
"""

from zcam.appearance import (
    ZCAM,
    ZCAMAppearance,
    ZCAMViewingConditions,
    create_cam,
    xyz_to_zcam,
    zcam_to_xyz,
)
from zcam.core.config import Backend, ChromaSource, LuminanceSource, Surround

__all__ = [
    "ZCAM",
    "ZCAMAppearance",
    "ZCAMViewingConditions",
    "Surround",
    "LuminanceSource",
    "ChromaSource",
    "Backend",
    "create_cam",
    "xyz_to_zcam",
    "zcam_to_xyz",
]

try:  # Optional PyTorch acceleration
    from zcam.torch.appearance import TorchZCAM  # type: ignore

    __all__.append("TorchZCAM")
except ImportError:  # pragma: no cover - torch not installed
    TorchZCAM = None  # type: ignore

__version__ = "0.1.0"
