"""Voxel averaging of dielectric tensors and sanity checks on eps_inv.

A dielectric function is a callable ``epsilon(r)`` that takes a point in
lattice coordinates and returns a pair ``(eps, eps_inv)`` of
:class:`~mpbcore.symmatrix.SymmetricMatrix`.
"""

from __future__ import annotations

import enum
from typing import Callable, Sequence

import numpy as np

from mpbcore.maxwell import MaxwellData, Parity
from mpbcore.symmatrix import (
    SymmetricMatrix,
    rotation_matrix,
    sym_matrix_invert,
    sym_matrix_positive_definite,
    sym_matrix_rotate,
)

DielectricFunction = Callable[[Sequence[float]], "tuple[SymmetricMatrix, SymmetricMatrix]"]

SMALL = 1.0e-6

_OFF_DIAGONAL = ("m01", "m02", "m12")

_CORNERS = {
    1: ((-0.5, 0.0, 0.0), (0.5, 0.0, 0.0)),
    2: ((-0.5, -0.5, 0.0), (0.5, 0.5, 0.0), (-0.5, 0.5, 0.0), (0.5, -0.5, 0.0)),
    3: tuple(
        (a, b, c)
        for a in (0.5, -0.5)
        for b in (0.5, -0.5)
        for c in (0.5, -0.5)
    ),
}


class DielectricStatus(enum.IntEnum):
    """Result of :func:`check_maxwell_dielectric`."""

    OK = 0
    NOT_POSITIVE_DEFINITE = 1
    NOT_2D = 2


def _as_scalar(z: complex):
    z = complex(z)
    return z.real if z.imag == 0.0 else z


def check_maxwell_dielectric(d: MaxwellData, negative_epsilon_ok: bool = False) -> DielectricStatus:
    """Check eps_inv for positive-definiteness and, where a z parity is
    imposed on a 2d grid, that it does not couple z to the xy plane."""
    require_2d = d.nz == 1 and bool(d.parity & (Parity.EVEN_Z | Parity.ODD_Z))
    for m in d.eps_inv[: d.fft_output_size]:
        if not negative_epsilon_ok and not sym_matrix_positive_definite(m):
            return DielectricStatus.NOT_POSITIVE_DEFINITE
        if require_2d and (complex(m.m02) != 0 or complex(m.m12) != 0):
            return DielectricStatus.NOT_2D
    return DielectricStatus.OK


def get_mesh(mesh_size: Sequence[int]) -> tuple[tuple[float, float, float], int]:
    """Center and number of points of a voxel averaging mesh.

    Mesh sizes below 1 count as 1. The center is in integer mesh
    coordinates, e.g. (1, 1, 1) for a 3x3x3 mesh.
    """
    sizes = [max(int(ms), 1) for ms in mesh_size]
    if len(sizes) != 3:
        raise ValueError("mesh_size must have three entries")
    center = tuple((ms - 1) * 0.5 for ms in sizes)
    return center, int(np.prod(sizes))


def detect_interface(r: Sequence[float], epsilon: DielectricFunction, rank: int,
                     s1: float, s2: float, s3: float) -> bool:
    """Whether eps at any corner of the voxel at r differs from eps at r.

    The voxel has sides s1, s2, s3; only the corners in the first ``rank``
    directions are examined.
    """
    if rank not in _CORNERS:
        raise ValueError(f"rank must be 1, 2 or 3, got {rank}")
    eps, _ = epsilon(tuple(r))
    for c0, c1, c2 in _CORNERS[rank]:
        corner = (r[0] + c0 * s1, r[1] + c1 * s2, r[2] + c2 * s3)
        eps_c, _ = epsilon(corner)
        if (abs(eps.m00 - eps_c.m00) > SMALL
                or abs(eps.m11 - eps_c.m11) > SMALL
                or abs(eps.m22 - eps_c.m22) > SMALL):
            return True
        for name in _OFF_DIAGONAL:
            a = complex(getattr(eps, name))
            b = complex(getattr(eps_c, name))
            if abs(a.real - b.real) > SMALL or abs(a.imag - b.imag) > SMALL:
                return True
    return False


def _mesh_points(r, mesh_size, mesh_center, m1, m2, m3):
    for mi in range(mesh_size[0]):
        for mj in range(mesh_size[1]):
            for mk in range(mesh_size[2]):
                yield (
                    r[0] + (mi - mesh_center[0]) * m1,
                    r[1] + (mj - mesh_center[1]) * m2,
                    r[2] + (mk - mesh_center[2]) * m3,
                )


def average_eps_inv_over_mesh(r: Sequence[float], epsilon: DielectricFunction,
                              mesh_size: Sequence[int], mesh_center: Sequence[float],
                              m1: float, m2: float, m3: float,
                              mesh_prod_inv: float) -> SymmetricMatrix:
    """Plain average of eps_inv over a rectangular mesh around r."""
    diag = np.zeros(3)
    off = np.zeros(3, dtype=complex)
    for point in _mesh_points(r, mesh_size, mesh_center, m1, m2, m3):
        _, eps_inv = epsilon(point)
        diag += (eps_inv.m00, eps_inv.m11, eps_inv.m22)
        off += tuple(complex(getattr(eps_inv, name)) for name in _OFF_DIAGONAL)
    diag *= mesh_prod_inv
    off *= mesh_prod_inv
    return SymmetricMatrix(
        float(diag[0]), float(diag[1]), float(diag[2]),
        *(_as_scalar(z) for z in off),
    )


def kottke_average(r: Sequence[float], epsilon: DielectricFunction,
                   mesh_size: Sequence[int], mesh_center: Sequence[float],
                   m1: float, m2: float, m3: float, mesh_prod_inv: float,
                   normal: Sequence[float]) -> SymmetricMatrix:
    """Kottke-averaged inverse permittivity of the voxel at r.

    ``normal`` is the Cartesian normal to the interface; it need not be
    normalized but must not be zero. The tensor is rotated into the
    interface frame, tau(eps) is averaged over the mesh, and the result is
    mapped back, rotated to Cartesian axes and inverted.
    """
    n = np.asarray(normal, dtype=float)
    length = float(np.sqrt(n @ n))
    if not length > 0.0:
        raise ValueError("interface normal must be nonzero")
    n = n / length
    rot = rotation_matrix(float(n[0]), float(n[1]), float(n[2]))

    t00 = t11 = t22 = 0.0
    t01 = t02 = t12 = 0j
    for point in _mesh_points(r, mesh_size, mesh_center, m1, m2, m3):
        eps, _ = epsilon(point)
        te = sym_matrix_rotate(eps, rot)
        e01, e02, e12 = complex(te.m01), complex(te.m02), complex(te.m12)
        t00 += -1.0 / te.m00
        t11 += te.m11 - abs(e01) ** 2 / te.m00
        t22 += te.m22 - abs(e02) ** 2 / te.m00
        t01 += e01 / te.m00
        t02 += e02 / te.m00
        t12 += e12 - e02 * e01.conjugate() / te.m00

    t00 *= mesh_prod_inv
    t11 *= mesh_prod_inv
    t22 *= mesh_prod_inv
    t01 *= mesh_prod_inv
    t02 *= mesh_prod_inv
    t12 *= mesh_prod_inv

    eps_mean = SymmetricMatrix(
        m00=-1.0 / t00,
        m11=t11 - abs(t01) ** 2 / t00,
        m22=t22 - abs(t02) ** 2 / t00,
        m01=_as_scalar(-t01 / t00),
        m02=_as_scalar(-t02 / t00),
        m12=_as_scalar(t12 - t02 * t01.conjugate() / t00),
    )
    eps_mean = sym_matrix_rotate(eps_mean, rot.T)
    return sym_matrix_invert(eps_mean)