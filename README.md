# mpbcore

Building blocks for solving Maxwell's equations in a plane-wave basis for
periodic dielectric structures. The package covers these parts:

- the k+G basis of each grid point
- mirror-parity projections and the special handling of k = 0
- 3×3 dielectric tensor algebra
- voxel averaging of a dielectric function

Fields are NumPy arrays of shape `(local_N, 2, p)`. The first axis runs over
grid points. The middle axis holds the transverse `m` and `n` components, and
`p` is the number of bands. Invalid input raises a Python exception:
`ValueError`, or `TypeError` where a complex array is required.

## Modules

### `mpbcore.symmatrix`

`SymmetricMatrix` is a dataclass. It stores the upper triangle of a 3×3 tensor
that is either real-symmetric or complex-Hermitian:

- the diagonal `m00`, `m11` and `m22` is real;
- the off-diagonal `m01`, `m02` and `m12` may be real or complex.

Its methods are:

- `is_diagonal()`
- `is_complex()`
- `to_array()`
- `SymmetricMatrix.from_array(a)`
- `trace()`

Functions:

- `sym_matrix_eigs(v)` returns the three real eigenvalues in ascending order.
- `sym_matrix_invert(v)` returns the inverse. It raises `ValueError` for a
  singular matrix.
- `sym_matrix_positive_definite(v)` tests the leading principal minors.
- `sym_matrix_eq(v1, v2, tol)` compares the tensors component by component.
- `sym_matrix_rotate(a, rot)` returns `transpose(rot) · a · rot`.
- `rotation_matrix(n0, n1, n2)` returns a rotation whose first column is the
  given unit vector.

### `mpbcore.maxwell`

`Parity` is an `IntFlag` with the members `NO_PARITY`, `EVEN_Z`, `ODD_Z`,
`EVEN_Y` and `ODD_Y`.

`MaxwellData(nx, ny, nz, num_bands, max_fft_bands)` holds the following:

- the grid dimensions and the band counts;
- the current k point, `current_k` in Cartesian coordinates;
- the k+G data: `k_plus_G_kmag`, `k_plus_G_m`, `k_plus_G_n` and
  `k_plus_G_normsqr`;
- a list `eps_inv` of `SymmetricMatrix`, one per grid point, which starts as
  the identity.

Its methods are:

- `rank()` returns 1, 2 or 3.
- `set_num_bands(num_bands)` changes the number of bands.
- `set_parity(parity)` records the parity. It drops contradictory flags, and
  flags that the current k point breaks.
- `update_k(k, g1, g2, g3)` sets k, given in the reciprocal basis. It
  recomputes the orthonormal `m`/`n` vectors for every k+G point.
- `dominant_planewave(h, band)` returns the Cartesian k+G of the largest
  component of a band. Bands are counted from 1.
- `set_planewave(h, band, g, s, p, axis)` fills a band of a complex field, in
  place, with a single plane wave.

The `k_plus_G` property returns the same data as a tuple of frozen `KData`
records.

`MaxwellTargetData(d, target_frequency)` pairs a `MaxwellData` with a target
frequency.

### `mpbcore.constraints`

These functions all take a field `x` and a `MaxwellData` `d`:

- `parity_constraint(x, d)`, `zparity_constraint(x, d)` and
  `yparity_constraint(x, d)` project `x` in place onto the parity stored in
  `d.parity`.
- `zparity(x, d)` and `yparity(x, d)` return the mirror-flip expectation value
  of each band. It is +1 for even states and −1 for odd ones.
- `zero_k_num_const_bands(x, d)` counts the bands that are constant at k = 0.
- `zero_k_set_const_bands(x, d, n_start=None)` writes those constant bands
  into `x`.

`zero_k_constraint(x, n_start=0)` zeroes the DC component of every band.

### `mpbcore.dielectric`

A dielectric function is a callable `epsilon(r)`. It takes a point in lattice
coordinates and returns a pair `(eps, eps_inv)` of `SymmetricMatrix`.

- `get_mesh(mesh_size)` returns the center of an averaging mesh and its number
  of points.
- `detect_interface(r, epsilon, rank, s1, s2, s3)` compares eps at the voxel
  corners with eps at the voxel center.
- `average_eps_inv_over_mesh(...)` computes the plain average of `eps_inv`.
- `kottke_average(..., normal)` averages τ(ε) in the frame of the interface
  normal, maps the result back and inverts it.
- `check_maxwell_dielectric(d, negative_epsilon_ok=False)` checks `d.eps_inv`
  and returns a `DielectricStatus`: `OK`, `NOT_POSITIVE_DEFINITE` or `NOT_2D`.

## What it does not do

This is a library of parts, not a mode solver. It has no command-line program.

It does not compute FFTs, apply the Maxwell operator, precondition or run an
eigensolver. It does not read or write field files.

No single routine fills `MaxwellData.eps_inv` over the whole grid. The averaging
functions in `mpbcore.dielectric` work on one voxel at a time, so the caller
loops over the grid and stores the results.

Everything runs in a single process. The whole grid is local.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
import numpy as np
from mpbcore.maxwell import MaxwellData, Parity
from mpbcore.constraints import zparity_constraint, zparity

d = MaxwellData(8, 8, 1, num_bands=2, max_fft_bands=2)
g1, g2, g3 = np.eye(3)
d.update_k([0.1, 0.0, 0.0], g1, g2, g3)
d.set_parity(Parity.EVEN_Z)

x = np.random.default_rng(0).standard_normal((d.local_N, 2, 2)) + 0j
zparity_constraint(x, d)
print(zparity(x, d))  # [1. 1.]
```