"""
GPU-accelerated ZCAM implementation backed by PyTorch.
"""

from zcam.torch.appearance import TorchZCAM

__all__ = ["TorchZCAM"]
