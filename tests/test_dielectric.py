import numpy as np
import pytest

from mpbcore.dielectric import (
    DielectricStatus,
    average_eps_inv_over_mesh,
    check_maxwell_dielectric,
    detect_interface,
    get_mesh,
    kottke_average,
)
from mpbcore.maxwell import MaxwellData, Parity
from mpbcore.symmatrix import SymmetricMatrix, sym_matrix_eq, sym_matrix_invert


def constant(eps):
    inv = sym_matrix_invert(eps)
    return lambda r: (eps, inv)


def layered(r):
    value = 4.0 if r[0] % 1.0 >= 0.5 else 1.0
    eps = SymmetricMatrix(value, value, value)
    return eps, sym_matrix_invert(eps)


def y_layered(r):
    value = 4.0 if r[1] % 1.0 >= 0.5 else 1.0
    eps = SymmetricMatrix(value, value, value)
    return eps, sym_matrix_invert(eps)


def test_get_mesh_3x3x3():
    center, prod = get_mesh([3, 3, 3])
    assert center == (1.0, 1.0, 1.0)
    assert prod == 27


def test_get_mesh_small_sizes_count_as_one():
    center, prod = get_mesh([0, 2, -1])
    assert center == (0.0, 0.5, 0.0)
    assert prod == 2


def test_check_ok_for_identity():
    d = MaxwellData(4, 4, 1, 2, 2)
    assert check_maxwell_dielectric(d, False) == DielectricStatus.OK


def test_check_not_positive_definite():
    d = MaxwellData(4, 4, 1, 2, 2)
    d.eps_inv[3] = SymmetricMatrix(-1.0, 1.0, 1.0)
    assert check_maxwell_dielectric(d, False) == DielectricStatus.NOT_POSITIVE_DEFINITE
    assert check_maxwell_dielectric(d, True) == DielectricStatus.OK


def test_check_not_2d_with_z_parity():
    d = MaxwellData(4, 4, 1, 2, 2)
    d.eps_inv[0] = SymmetricMatrix(1.0, 1.0, 1.0, m02=0.1)
    assert check_maxwell_dielectric(d, False) == DielectricStatus.OK
    d.set_parity(Parity.EVEN_Z)
    assert check_maxwell_dielectric(d, False) == DielectricStatus.NOT_2D


def test_check_3d_ignores_z_coupling():
    d = MaxwellData(2, 2, 2, 1, 1)
    d.eps_inv[0] = SymmetricMatrix(1.0, 1.0, 1.0, m12=0.1)
    d.set_parity(Parity.ODD_Z)
    assert check_maxwell_dielectric(d, False) == DielectricStatus.OK


def test_detect_interface_constant_is_false():
    eps = constant(SymmetricMatrix(2.0, 2.0, 2.0))
    assert detect_interface((0.3, 0.3, 0.3), eps, 3, 0.1, 0.1, 0.1) is False


def test_detect_interface_across_step():
    assert detect_interface((0.5, 0.0, 0.0), layered, 1, 0.25, 0.25, 0.25) is True
    assert detect_interface((0.25, 0.0, 0.0), layered, 1, 0.25, 0.25, 0.25) is False


def test_detect_interface_rank_limits_directions():
    r = (0.25, 0.5, 0.0)
    assert detect_interface(r, y_layered, 1, 0.25, 0.25, 0.25) is False
    assert detect_interface(r, y_layered, 2, 0.25, 0.25, 0.25) is True


def test_detect_interface_bad_rank():
    with pytest.raises(ValueError):
        detect_interface((0, 0, 0), layered, 4, 0.1, 0.1, 0.1)


def test_average_constant_returns_eps_inv():
    eps = SymmetricMatrix(2.0, 3.0, 5.0, m01=0.5)
    center, prod = get_mesh([2, 2, 2])
    avg = average_eps_inv_over_mesh((0.1, 0.2, 0.3), constant(eps), [2, 2, 2],
                                    center, 0.05, 0.05, 0.05, 1.0 / prod)
    assert sym_matrix_eq(avg, sym_matrix_invert(eps), 1e-12)


def test_average_layered_is_mean_of_inverse():
    center, prod = get_mesh([4, 1, 1])
    avg = average_eps_inv_over_mesh((0.5, 0.0, 0.0), layered, [4, 1, 1],
                                    center, 0.25, 1.0, 1.0, 1.0 / prod)
    expected = np.mean([1.0, 1.0, 0.25, 0.25])
    assert avg.m00 == pytest.approx(expected)
    assert avg.m11 == pytest.approx(expected)
    assert avg.is_diagonal()


def test_kottke_constant_anisotropic_returns_inverse():
    eps = SymmetricMatrix(2.0, 3.0, 4.0, m01=0.3, m02=-0.2, m12=0.1)
    center, prod = get_mesh([2, 2, 2])
    result = kottke_average((0.0, 0.0, 0.0), constant(eps), [2, 2, 2], center,
                            0.1, 0.1, 0.1, 1.0 / prod, (0.3, -0.4, 0.8))
    assert sym_matrix_eq(result, sym_matrix_invert(eps), 1e-10)


def test_kottke_constant_hermitian_returns_inverse():
    eps = SymmetricMatrix(3.0, 3.0, 3.0, m01=0.4j)
    center, prod = get_mesh([2, 1, 1])
    result = kottke_average((0.0, 0.0, 0.0), constant(eps), [2, 1, 1], center,
                            0.1, 0.1, 0.1, 1.0 / prod, (0.0, 0.0, 1.0))
    assert sym_matrix_eq(result, sym_matrix_invert(eps), 1e-10)


def test_kottke_layered_uses_harmonic_and_arithmetic_means():
    samples = np.array([1.0, 1.0, 4.0, 4.0])
    center, prod = get_mesh([4, 1, 1])
    result = kottke_average((0.5, 0.0, 0.0), layered, [4, 1, 1], center,
                            0.25, 1.0, 1.0, 1.0 / prod, (2.0, 0.0, 0.0))
    # Across the layers eps is the harmonic mean; along them the arithmetic mean.
    assert result.m00 == pytest.approx(np.mean(1.0 / samples))
    assert result.m11 == pytest.approx(1.0 / np.mean(samples))
    assert result.m22 == pytest.approx(1.0 / np.mean(samples))
    assert abs(complex(result.m01)) < 1e-12


def test_kottke_zero_normal_raises():
    center, prod = get_mesh([1, 1, 1])
    with pytest.raises(ValueError):
        kottke_average((0.0, 0.0, 0.0), layered, [1, 1, 1], center,
                       0.1, 0.1, 0.1, 1.0 / prod, (0.0, 0.0, 0.0))