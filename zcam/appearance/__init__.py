"""Color appearance model."""

from zcam.appearance.cam_factory import create_cam
from zcam.appearance.zcam import (
    ZCAM,
    ZCAMAppearance,
    ZCAMViewingConditions,
    xyz_to_zcam,
    zcam_to_xyz,
)

__all__ = [
    "ZCAM",
    "ZCAMAppearance",
    "ZCAMViewingConditions",
    "create_cam",
    "xyz_to_zcam",
    "zcam_to_xyz",
]
