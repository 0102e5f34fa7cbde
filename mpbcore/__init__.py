"""Plane-wave Maxwell eigenproblem parts: symmetric tensors, k+G data, parity constraints and dielectric voxel averaging."""

__version__ = "1.12.0"
__all__ = ["symmatrix", "maxwell", "constraints", "dielectric"]