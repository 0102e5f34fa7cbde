"""Mirror-parity projections and zero-k constraints on transverse fields.

Fields are numpy arrays of shape ``(local_N, 2, p)``, as described in
:mod:`mpbcore.maxwell`. The m and n basis vectors of each k+G point are chosen
so that a mirror flip through z=0 or y=0 only changes their signs. Each
parity projection therefore mixes a grid point only with its mirror image.
"""

from __future__ import annotations

import numpy as np

from mpbcore.maxwell import MaxwellData, Parity

_Z_PARITIES = Parity.EVEN_Z | Parity.ODD_Z
_Y_PARITIES = Parity.EVEN_Y | Parity.ODD_Y


def _check(x: np.ndarray, d: MaxwellData | None) -> None:
    if d is None:
        raise ValueError("null maxwell data")
    if not isinstance(x, np.ndarray) or x.ndim != 3 or x.shape[1] != 2:
        raise ValueError("fields don't have 2 components!")


def _check_size(x: np.ndarray, rows: int) -> None:
    if x.shape[0] != rows:
        raise ValueError(f"field has {x.shape[0]} grid points, expected {rows}")


def _sign(parity: Parity, even: Parity, odd: Parity) -> int:
    if parity & even:
        return 1
    if parity & odd:
        return -1
    return 0


def _mirror(n: int) -> np.ndarray:
    """Index of the mirror image of each position along a periodic axis."""
    return (-np.arange(n)) % n


def _half_weights(n: int) -> np.ndarray:
    """Weights that count each mirror pair once, from the lower half.

    A point that is its own mirror image gets weight 1. The lower member of
    any other pair gets weight 2, and the upper member gets 0.
    """
    j = np.arange(n)
    w = np.where(2 * j < n, 2.0, 0.0)
    w[(j == 0) | (2 * j == n)] = 1.0
    return w


def _z_layout(d: MaxwellData) -> tuple[int, int]:
    if d.nz > 1:
        return d.other_dims, d.last_dim
    return d.other_dims * d.last_dim, 1


def parity_constraint(x: np.ndarray, d: MaxwellData) -> None:
    """Apply the z and y parity projections that d's parity asks for, in place."""
    _check(x, d)
    if d.parity & _Z_PARITIES:
        zparity_constraint(x, d)
    if d.parity & _Y_PARITIES:
        yparity_constraint(x, d)


def zparity_constraint(x: np.ndarray, d: MaxwellData) -> None:
    """Project x in place onto its even or odd part under z -> -z."""
    if d is None:
        raise ValueError("null maxwell data")
    zp = _sign(d.parity, Parity.EVEN_Z, Parity.ODD_Z)
    if zp == 0:
        return
    _check(x, d)

    if d.nz <= 1:
        # 2d system: even/odd are TE/TM, so one component vanishes.
        nxy = d.other_dims * d.last_dim
        _check_size(x, nxy)
        x[:nxy, 1 if zp > 0 else 0, :] = 0
        return

    nxy, nz = _z_layout(d)
    _check_size(x, nxy * nz)
    view = x.reshape(nxy, nz, 2, x.shape[2])
    mirrored = view[:, _mirror(nz)].copy()
    view[:, :, 0, :] = 0.5 * (view[:, :, 0, :] + zp * mirrored[:, :, 0, :])
    view[:, :, 1, :] = 0.5 * (view[:, :, 1, :] - zp * mirrored[:, :, 1, :])


def yparity_constraint(x: np.ndarray, d: MaxwellData) -> None:
    """Project x in place onto its even or odd part under y -> -y."""
    if d is None:
        raise ValueError("null maxwell data")
    yp = _sign(d.parity, Parity.EVEN_Y, Parity.ODD_Y)
    if yp == 0:
        return
    _check(x, d)

    nx, ny, nz = d.local_nx, d.ny, d.nz
    _check_size(x, nx * ny * nz)
    view = x.reshape(nx, ny, nz, 2, x.shape[2])
    mirrored = view[:, _mirror(ny)].copy()
    view[..., 0, :] = 0.5 * (view[..., 0, :] - yp * mirrored[..., 0, :])
    view[..., 1, :] = 0.5 * (view[..., 1, :] + yp * mirrored[..., 1, :])


def _re_dot(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a.real * b.real + a.imag * b.imag


def zparity(x: np.ndarray, d: MaxwellData) -> np.ndarray:
    """Expectation value of the z mirror flip for each band of x.

    The result is +1 or -1 for even or odd eigenstates, and in between for
    other states.
    """
    _check(x, d)
    nxy, nz = _z_layout(d)
    _check_size(x, nxy * nz)
    view = x.reshape(nxy, nz, 2, x.shape[2])
    mirrored = view[:, _mirror(nz)]
    w = _half_weights(nz)[None, :, None]
    u, v = view[:, :, 0, :], view[:, :, 1, :]
    u2, v2 = mirrored[:, :, 0, :], mirrored[:, :, 1, :]
    num = np.sum(w * (_re_dot(u, u2) - _re_dot(v, v2)), axis=(0, 1))
    norm = np.sum(w * (_re_dot(u, u) + _re_dot(v, v)), axis=(0, 1))
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.asarray(num / norm, dtype=float)


def yparity(x: np.ndarray, d: MaxwellData) -> np.ndarray:
    """Expectation value of the y mirror flip for each band of x."""
    _check(x, d)
    nx, ny, nz = d.local_nx, d.ny, d.nz
    _check_size(x, nx * ny * nz)
    view = x.reshape(nx, ny, nz, 2, x.shape[2])
    mirrored = view[:, _mirror(ny)]
    w = _half_weights(ny)[None, :, None, None]
    u, v = view[..., 0, :], view[..., 1, :]
    u2, v2 = mirrored[..., 0, :], mirrored[..., 1, :]
    num = np.sum(w * (_re_dot(v, v2) - _re_dot(u, u2)), axis=(0, 1, 2))
    norm = np.sum(w * (_re_dot(v, v) + _re_dot(u, u)), axis=(0, 1, 2))
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.asarray(num / norm, dtype=float)


def _const_bands(parity: Parity) -> tuple[int, int]:
    m_band = 0 if parity & (Parity.ODD_Z | Parity.EVEN_Y) else 1
    n_band = 0 if parity & (Parity.ODD_Y | Parity.EVEN_Z) else 1
    return m_band, n_band


def zero_k_num_const_bands(x: np.ndarray, d: MaxwellData) -> int:
    """Number of constant (zero-frequency) bands at k = 0, at most x's band count."""
    _check(x, d)
    m_band, n_band = _const_bands(d.parity)
    return min(m_band + n_band, x.shape[2])


def zero_k_set_const_bands(x: np.ndarray, d: MaxwellData, n_start: int | None = None) -> None:
    """Fill the leading bands of x in place with the constant k = 0 solutions.

    n_start is the global index of x's first grid point (default d.N_start).
    Only the part that holds the DC component sets the constant values.
    """
    _check(x, d)
    if x.shape[2] < 1:
        return
    if n_start is None:
        n_start = d.N_start

    num_const = zero_k_num_const_bands(x, d)
    x[:, :, :num_const] = 0

    if n_start > 0:
        return  # the DC component is elsewhere

    m_band, n_band = _const_bands(d.parity)
    if m_band:
        x[0, 0, 0] = 1.0
        x[0, 1, 0] = 0.0
    if n_band and (not m_band or x.shape[2] >= 2):
        x[0, 0, m_band] = 0.0
        x[0, 1, m_band] = 1.0


def zero_k_constraint(x: np.ndarray, n_start: int = 0) -> None:
    """Zero the DC component of every band of x in place.

    Nothing happens if n_start > 0, since the DC component is not in x then.
    """
    if not isinstance(x, np.ndarray) or x.ndim != 3 or x.shape[1] != 2:
        raise ValueError("fields don't have 2 components!")
    if n_start > 0:
        return
    x[0, :, :] = 0