import numpy as np
import pytest

from imexrk.couple import Couple
from imexrk.numerics.tridiag import Tridiag, tridiag_to_dense
from imexrk.operators import (
    CoupleOperator,
    DenseOperator,
    DiagonalOperator,
    LinearOperator,
    TridiagOperator,
    as_operator,
)


def _laplacian(M: int) -> Tridiag:
    off = np.ones(M - 1)
    return Tridiag(lower=off, diag=-2.0 * np.ones(M), upper=off.copy())


def _operators(M: int):
    T = _laplacian(M)
    dense = tridiag_to_dense(T)
    return dense, [
        TridiagOperator(T),
        TridiagOperator(T, solver="scipy"),
        DenseOperator(dense),
    ]


@pytest.mark.parametrize("M", [1, 2, 7, 40])
def test_apply_matches_dense_product(M: int, rng) -> None:
    dense, ops = _operators(M)
    x = rng(M).normal(size=M)
    for op in ops:
        out = np.empty(M)
        op.mul_into(out, x)
        np.testing.assert_allclose(out, dense @ x, rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("c", [0.0, 0.05, 1.0])
@pytest.mark.parametrize("M", [1, 3, 25])
def test_shifted_solve_matches_dense_solve(M: int, c: float, rng) -> None:
    dense, ops = _operators(M)
    rhs = rng(10 * M).normal(size=M)
    expected = np.linalg.solve(np.eye(M) - c * dense, rhs)
    for op in ops:
        out = np.empty(M)
        op.solve_shifted_into(out, c, rhs)
        np.testing.assert_allclose(out, expected, rtol=1e-10, atol=1e-12)


def test_shifted_solve_in_place(rng) -> None:
    dense, ops = _operators(9)
    for op in ops:
        rhs = rng(5).normal(size=9)
        expected = np.linalg.solve(np.eye(9) - 0.3 * dense, rhs)
        op.solve_shifted_into(rhs, 0.3, rhs)
        np.testing.assert_allclose(rhs, expected, rtol=1e-10, atol=1e-12)


def test_shift_factorisations_are_cached() -> None:
    op = DenseOperator(np.array([[-1.0, 0.5], [0.0, -2.0]]))
    out = np.empty(2)
    op.solve_shifted_into(out, 0.1, np.ones(2))
    op.solve_shifted_into(out, 0.1, np.ones(2))
    op.solve_shifted_into(out, 0.2, np.ones(2))
    assert sorted(op._lu) == [0.1, 0.2]


def test_diagonal_operator() -> None:
    op = DiagonalOperator(np.array([-1.0, -4.0]))
    out = np.empty(2)
    op.mul_into(out, np.array([2.0, 3.0]))
    np.testing.assert_allclose(out, [-2.0, -12.0])
    op.solve_shifted_into(out, 0.5, np.array([3.0, 3.0]))
    np.testing.assert_allclose(out, [2.0, 1.0])


def test_diagonal_operator_singular_shift() -> None:
    op = DiagonalOperator(np.array([2.0]))
    with pytest.raises(np.linalg.LinAlgError):
        op.solve_shifted_into(np.empty(1), 0.5, np.ones(1))


def test_couple_operator_zero_part_for_quadrature() -> None:
    op = CoupleOperator(DiagonalOperator(np.array([-2.0])), None)
    x = Couple(np.array([3.0]), np.array([7.0]))
    out = Couple(np.empty(1), np.empty(1))

    op.mul_into(out, x)
    np.testing.assert_allclose(out.a, [-6.0])
    np.testing.assert_allclose(out.b, [0.0])

    op.solve_shifted_into(out, 0.5, x)
    np.testing.assert_allclose(out.a, [1.5])
    np.testing.assert_allclose(out.b, [7.0])


def test_couple_operator_acts_independently_on_both_parts() -> None:
    op = CoupleOperator(DiagonalOperator(np.array([-1.0])), DiagonalOperator(np.array([-3.0])))
    x = Couple(np.array([1.0]), np.array([1.0]))
    out = Couple(np.empty(1), np.empty(1))
    op.mul_into(out, x)
    np.testing.assert_allclose([out.a[0], out.b[0]], [-1.0, -3.0])


def test_as_operator_resolution() -> None:
    diag = DiagonalOperator(np.array([1.0]))
    assert as_operator(diag) is diag
    assert isinstance(as_operator(_laplacian(3)), TridiagOperator)
    assert isinstance(as_operator(np.array([-1.0, -2.0])), DiagonalOperator)
    assert isinstance(as_operator([[1.0, 0.0], [0.0, 1.0]]), DenseOperator)
    assert isinstance(as_operator(np.array([-1.0])), LinearOperator)
    with pytest.raises(TypeError):
        as_operator(np.zeros((2, 2, 2)))


def test_operator_construction_errors() -> None:
    with pytest.raises(ValueError):
        DenseOperator(np.zeros((2, 3)))
    with pytest.raises(ValueError):
        TridiagOperator(_laplacian(3), solver="lu")  # type: ignore[arg-type]


def test_heat_equation_with_tridiag_operator() -> None:
    """u_t = u_xx on (0, pi), Dirichlet: the sin(x) mode decays like exp(-t)."""
    from imexrk import integrator

    M = 127
    x = np.linspace(0.0, np.pi, M + 2)[1:-1]
    h = x[1] - x[0]
    off = np.full(M - 1, 1.0 / h**2)
    A = Tridiag(lower=off, diag=np.full(M, -2.0 / h**2), upper=off.copy())

    def g(t, u, udot):
        udot[...] = 0.0

    I = integrator(g, A, "imex-euler", 1e-3)
    u = I(np.sin(x), 0.5)

    np.testing.assert_allclose(u, np.exp(-0.5) * np.sin(x), atol=2e-3)


def test_shifted_solves_reject_integer_outputs() -> None:
    dense, ops = _operators(4)
    for op in ops:
        with pytest.raises(TypeError):
            op.solve_shifted_into(np.zeros(4, dtype=np.int64), 0.1, np.ones(4))
