"""
Shared helpers for the torch-based ZCAM implementation.
"""

from __future__ import annotations

from typing import Optional

import torch


def ensure_tensor(
    data,
    device: Optional[torch.device] = None,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    """
    Convert input data to a torch tensor on the requested device.
    """

    if isinstance(data, torch.Tensor):
        tensor = data.to(dtype=dtype)
        if device is not None:
            tensor = tensor.to(device)
        return tensor

    tensor = torch.as_tensor(data, dtype=dtype, device=device)
    return tensor


def nan_like(reference: torch.Tensor) -> torch.Tensor:
    """NaN tensor matching ``reference``; marks an unsupported inverse input."""

    return torch.full_like(reference, float("nan"))
