"""Upper-triangle storage of 3x3 real-symmetric or complex-Hermitian tensors.

These are used for dielectric and permeability tensors. The diagonal is real.
The off-diagonal entries may be real, or complex for Hermitian tensors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

Scalar = Union[float, complex]

_ZERO_ENTRY_FIELDS = ("m01", "m02", "m12")


def _normsqr(z: Scalar) -> float:
    return z.real * z.real + z.imag * z.imag


def _clean(z: complex) -> Scalar:
    """Return a float when the imaginary part is exactly zero."""
    z = complex(z)
    return z.real if z.imag == 0.0 else z


@dataclass
class SymmetricMatrix:
    """Upper triangle of a Hermitian 3x3 matrix; the lower triangle is implied."""

    m00: float = 0.0
    m11: float = 0.0
    m22: float = 0.0
    m01: Scalar = 0.0
    m02: Scalar = 0.0
    m12: Scalar = 0.0

    def is_diagonal(self) -> bool:
        """True if all off-diagonal entries are exactly zero."""
        return all(getattr(self, name) == 0 for name in _ZERO_ENTRY_FIELDS)

    def is_complex(self) -> bool:
        """True if any off-diagonal entry has a nonzero imaginary part."""
        return any(complex(getattr(self, name)).imag != 0.0 for name in _ZERO_ENTRY_FIELDS)

    def to_array(self) -> np.ndarray:
        """Full 3x3 matrix: float dtype if real, complex dtype if Hermitian."""
        dtype = complex if self.is_complex() else float
        a = np.zeros((3, 3), dtype=dtype)
        a[0, 0], a[1, 1], a[2, 2] = self.m00, self.m11, self.m22
        for (i, j), z in (((0, 1), self.m01), ((0, 2), self.m02), ((1, 2), self.m12)):
            zc = complex(z)
            a[i, j] = zc if dtype is complex else zc.real
            a[j, i] = zc.conjugate() if dtype is complex else zc.real
        return a

    @classmethod
    def from_array(cls, a) -> "SymmetricMatrix":
        """Build from a 3x3 array, reading the diagonal and the upper triangle."""
        arr = np.asarray(a)
        if arr.shape != (3, 3):
            raise ValueError(f"expected a 3x3 matrix, got shape {arr.shape}")
        return cls(
            m00=float(np.real(arr[0, 0])),
            m11=float(np.real(arr[1, 1])),
            m22=float(np.real(arr[2, 2])),
            m01=_clean(arr[0, 1]),
            m02=_clean(arr[0, 2]),
            m12=_clean(arr[1, 2]),
        )

    def trace(self) -> float:
        return self.m00 + self.m11 + self.m22


def sym_matrix_eigs(v: SymmetricMatrix) -> tuple[float, float, float]:
    """The three real eigenvalues of v, in ascending order."""
    eigs = np.linalg.eigvalsh(v.to_array(), UPLO="U")
    return tuple(float(e) for e in eigs)


def sym_matrix_invert(v: SymmetricMatrix) -> SymmetricMatrix:
    """Inverse of a real-symmetric or Hermitian matrix.

    Raises ValueError if the matrix is singular.
    """
    m00, m11, m22 = v.m00, v.m11, v.m22
    m01, m02, m12 = v.m01, v.m02, v.m12

    if v.is_diagonal():
        return SymmetricMatrix(1.0 / m00, 1.0 / m11, 1.0 / m22, 0.0, 0.0, 0.0)

    det = (
        m00 * m11 * m22
        - m11 * _normsqr(m02)
        - _normsqr(m01) * m22
        - _normsqr(m12) * m00
        + 2.0 * (m01 * m12 * m02.conjugate()).real
    )
    if det == 0.0:
        raise ValueError("singular 3x3 matrix")
    detinv = 1.0 / det

    return SymmetricMatrix(
        m00=detinv * (m11 * m22 - _normsqr(m12)),
        m11=detinv * (m00 * m22 - _normsqr(m02)),
        m22=detinv * (m11 * m00 - _normsqr(m01)),
        m01=_clean(detinv * (m12.conjugate() * m02 - m22 * m01)),
        m02=_clean(detinv * (m01 * m12 - m11 * m02)),
        m12=_clean(detinv * (m01.conjugate() * m02 - m00 * m12)),
    )


def sym_matrix_positive_definite(v: SymmetricMatrix) -> bool:
    """Whether v is positive-definite, by its leading principal minors."""
    m00, m11, m22 = v.m00, v.m11, v.m22
    m01, m02, m12 = v.m01, v.m02, v.m12
    det2 = m00 * m11 - _normsqr(m01)
    det3 = (
        det2 * m22
        - m11 * _normsqr(m02)
        - _normsqr(m12) * m00
        + 2.0 * (m01 * m12 * m02.conjugate()).real
    )
    return m00 > 0.0 and det2 > 0.0 and det3 > 0.0


def sym_matrix_eq(v1: SymmetricMatrix, v2: SymmetricMatrix, tol: float) -> bool:
    """Whether every real and imaginary component differs by less than tol."""
    for a, b in ((v1.m00, v2.m00), (v1.m11, v2.m11), (v1.m22, v2.m22)):
        if not abs(a - b) < tol:
            return False
    for name in _ZERO_ENTRY_FIELDS:
        a = complex(getattr(v1, name))
        b = complex(getattr(v2, name))
        if not (abs(a.real - b.real) < tol and abs(a.imag - b.imag) < tol):
            return False
    return True


def sym_matrix_rotate(a: SymmetricMatrix, rot) -> SymmetricMatrix:
    """transpose(rot) * a * rot for a real rotation matrix rot."""
    r = np.asarray(rot, dtype=float)
    if r.shape != (3, 3):
        raise ValueError(f"expected a 3x3 rotation matrix, got shape {r.shape}")
    result = r.T @ a.to_array() @ r
    return SymmetricMatrix.from_array(result)


def rotation_matrix(n0: float, n1: float, n2: float) -> np.ndarray:
    """Rotation to a frame whose first axis is the unit vector (n0, n1, n2).

    The columns of the returned matrix are the new axes.
    """
    rot = np.zeros((3, 3))
    rot[:, 0] = (n0, n1, n2)
    if abs(n0) > 1e-2 or abs(n1) > 1e-2:
        col2 = np.array([n1, -n0, 0.0])  # z x n
    else:
        col2 = np.array([0.0, -n2, n1])  # x x n, n nearly along z
    col2 /= np.sqrt(col2 @ col2)
    rot[:, 2] = col2
    rot[:, 1] = np.cross(rot[:, 2], rot[:, 0])
    return rot