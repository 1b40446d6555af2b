from __future__ import annotations


def main() -> None:
    """Integrate the logistic equation jointly with its tangent equation."""
    import numpy as np

    from imexrk import Couple, CoupleOperator, DiagonalOperator, forward_map, integrator

    r = np.array([-1.0])

    def g(t, z, zdot):
        x, dx = z.a, z.b
        zdot.a[...] = -x * x
        zdot.b[...] = -2.0 * x * dx

    A = CoupleOperator(DiagonalOperator(r), DiagonalOperator(r))
    phi = forward_map(integrator(g, A, "imex-euler", 1e-3))(1.0)

    z = phi(Couple(np.array([0.5]), np.array([1.0])))
    print("x(1) =", z.a[0], " dx(1)/dx(0) =", z.b[0])


if __name__ == "__main__":
    main()
