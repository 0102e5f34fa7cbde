"""Grid and k-point data for the plane-wave Maxwell eigenproblem.

Fields in the transverse basis are numpy arrays of shape ``(local_N, 2, p)``.
``local_N`` is the number of grid points, the middle axis holds the m and n
components, and ``p`` is the number of bands.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from mpbcore.symmatrix import SymmetricMatrix


class Parity(enum.IntFlag):
    """Mirror-symmetry constraints that can be imposed on the solutions."""

    NO_PARITY = 0
    EVEN_Z = 1 << 0
    ODD_Z = 1 << 1
    EVEN_Y = 1 << 2
    ODD_Y = 1 << 3


_Z_PARITIES = Parity.EVEN_Z | Parity.ODD_Z
_Y_PARITIES = Parity.EVEN_Y | Parity.ODD_Y


@dataclass(frozen=True)
class KData:
    """Length of k+G and two orthonormal vectors m, n perpendicular to it."""

    kmag: float
    mx: float
    my: float
    mz: float
    nx: float
    ny: float
    nz: float

    @property
    def m(self) -> np.ndarray:
        return np.array([self.mx, self.my, self.mz])

    @property
    def n(self) -> np.ndarray:
        return np.array([self.nx, self.ny, self.nz])


class MaxwellData:
    """Grid dimensions, band counts, the current k point and its k+G basis."""

    def __init__(self, nx: int, ny: int, nz: int, num_bands: int, max_fft_bands: int):
        if nx < 1 or ny < 1 or nz < 1:
            raise ValueError("grid dimensions must be positive")
        self.nx, self.ny, self.nz = nx, ny, nz
        dims = (nx, ny, nz)

        self.max_fft_bands = min(num_bands, max_fft_bands)
        self.set_num_bands(num_bands)

        self.current_k = np.zeros(3)
        self.parity = Parity.NO_PARITY
        self.zero_k = True

        self.last_dim = self.last_dim_size = dims[self.rank() - 1]

        self.local_nx, self.local_ny = nx, ny
        self.local_x_start = self.local_y_start = 0
        self.N = nx * ny * nz
        self.local_N = self.alloc_N = self.N
        self.N_start = 0
        self.other_dims = self.local_N // self.last_dim
        self.fft_output_size = self.N

        self.eps_inv = [SymmetricMatrix(1.0, 1.0, 1.0) for _ in range(self.fft_output_size)]
        self.eps_inv_mean = 1.0
        self.mu_inv: list[SymmetricMatrix] | None = None
        self.mu_inv_mean = 1.0

        self.k_plus_G_kmag = np.zeros(self.local_N)
        self.k_plus_G_m = np.zeros((self.local_N, 3))
        self.k_plus_G_n = np.zeros((self.local_N, 3))
        self.k_plus_G_normsqr = np.zeros(self.local_N)

    def rank(self) -> int:
        """Dimensionality of the grid: 1, 2 or 3."""
        if self.nz == 1:
            return 1 if self.ny == 1 else 2
        return 3

    def set_num_bands(self, num_bands: int) -> None:
        self.num_bands = num_bands
        self.num_fft_bands = min(num_bands, self.max_fft_bands)

    @property
    def k_plus_G(self) -> tuple[KData, ...]:
        """The k+G data of every local grid point, in grid order."""
        return tuple(
            KData(float(kmag), *map(float, m), *map(float, n))
            for kmag, m, n in zip(self.k_plus_G_kmag, self.k_plus_G_m, self.k_plus_G_n)
        )

    def set_parity(self, parity) -> None:
        """Set the parity, dropping constraints that are contradictory or
        broken by the current k point."""
        parity = Parity(int(parity))
        if (parity & Parity.EVEN_Z) and (parity & Parity.ODD_Z):
            parity &= ~_Z_PARITIES
        if self.current_k[2] != 0.0:
            parity &= ~_Z_PARITIES
        if (parity & Parity.EVEN_Y) and (parity & Parity.ODD_Y):
            parity &= ~_Y_PARITIES
        if self.current_k[1] != 0.0:
            parity &= ~_Y_PARITIES
        self.parity = Parity(parity)

    def update_k(self, k: Sequence[float], g1: Sequence[float],
                 g2: Sequence[float], g3: Sequence[float]) -> None:
        """Set the current k point, given in the reciprocal basis g1, g2, g3."""
        k = np.asarray(k, dtype=float)
        g = np.array([g1, g2, g3], dtype=float)  # rows are reciprocal vectors
        kvec = k @ g

        self.zero_k = bool(np.all(kvec == 0.0))
        self.current_k = kvec
        self.set_parity(self.parity)

        def freqs(start: int, count: int, size: int) -> np.ndarray:
            c = max(1, size // 2)
            idx = np.arange(start, start + count)
            return np.where(idx >= c, idx - size, idx)

        kxi, kyi, kzi = np.meshgrid(
            freqs(self.local_x_start, self.local_nx, self.nx),
            freqs(0, self.ny, self.ny),
            freqs(0, self.nz, self.nz),
            indexing="ij",
        )
        ints = np.stack([kxi.ravel(), kyi.ravel(), kzi.ravel()], axis=1)
        # G enters with a minus sign because of the FFT sign convention.
        kpg = kvec - ints @ g

        a = np.einsum("ij,ij->i", kpg, kpg)
        self.k_plus_G_normsqr = a
        self.k_plus_G_kmag = np.sqrt(a)

        n = np.zeros_like(kpg)
        n[:, 1] = 1.0
        off_z = (kpg[:, 0] != 0.0) | (kpg[:, 1] != 0.0)
        if off_z.any():
            c = np.cross(np.array([0.0, 0.0, 1.0]), kpg[off_z])
            n[off_z] = c / np.linalg.norm(c, axis=1)[:, None]

        m = np.zeros_like(kpg)
        m[:, 2] = 1.0
        nonzero = a != 0.0
        if nonzero.any():
            c = np.cross(n[nonzero], kpg[nonzero])
            m[nonzero] = c / np.linalg.norm(c, axis=1)[:, None]

        self.k_plus_G_m = m
        self.k_plus_G_n = n

    def _check_field(self, h: np.ndarray, band: int) -> None:
        if h.ndim != 3 or h.shape[0] != self.local_N or h.shape[1] != 2:
            raise ValueError(
                f"field must have shape ({self.local_N}, 2, bands), got {h.shape}"
            )
        if not 1 <= band <= h.shape[2]:
            raise ValueError("band out of range")

    def dominant_planewave(self, h: np.ndarray, band: int) -> np.ndarray:
        """Cartesian k+G of the largest plane-wave component of a band (1-based)."""
        h = np.asarray(h)
        self._check_field(h, band)
        col = h[:, :, band - 1]
        amp = np.sum(np.abs(col) ** 2, axis=1)
        i = int(np.argmax(amp)) if amp.size else 0
        return self.k_plus_G_kmag[i] * np.cross(self.k_plus_G_m[i], self.k_plus_G_n[i])

    def set_planewave(self, h: np.ndarray, band: int, g: Sequence[int],
                      s: complex, p: complex, axis: Sequence[float]) -> None:
        """Fill a band (1-based) of h in place with the pure plane wave k+G.

        g gives the integer indices of G; s and p are the amplitudes of the
        two polarizations relative to the plane normal to (k+G) x axis.
        """
        self._check_field(h, band)
        if not np.iscomplexobj(h):
            raise TypeError("set_planewave requires a complex field array")
        x, y, z = (size - gi if gi > 0 else -gi
                   for gi, size in zip(g, (self.nx, self.ny, self.nz)))
        if not (0 <= x < self.nx and 0 <= y < self.ny and 0 <= z < self.nz):
            raise ValueError("invalid planewave order")

        h[:, :, band - 1] = 0.0

        if self.local_x_start <= x < self.local_x_start + self.local_nx:
            i = ((x - self.local_x_start) * self.ny + y) * self.nz + z
            m, n = self.k_plus_G_m[i], self.k_plus_G_n[i]
            khat = np.cross(m, n)
            pdir = np.cross(khat, np.asarray(axis, dtype=float))
            length = np.sqrt(pdir @ pdir)
            if not length > 0:
                raise ValueError("invalid planewave axis parallel to k+G")
            pdir = pdir / length
            sdir = np.cross(khat, pdir)
            hvec = complex(s) * sdir + complex(p) * pdir
            h[i, 0, band - 1] = hvec @ m
            h[i, 1, band - 1] = hvec @ n


@dataclass
class MaxwellTargetData:
    """Maxwell data paired with a target frequency for targeted solves."""

    d: MaxwellData
    target_frequency: float