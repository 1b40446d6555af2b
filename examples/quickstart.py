from __future__ import annotations


def main() -> None:
    # [START README_QUICKSTART]
    import numpy as np

    from imexrk import Monitor, Tridiag, integrator

    # Viscous Burgers on (0, pi) with Dirichlet ends:
    #   u_t = nu u_xx - u u_x
    # Diffusion is stiff (implicit), advection is not (explicit).
    M, nu = 127, 0.05
    x = np.linspace(0.0, np.pi, M + 2)[1:-1]
    h = x[1] - x[0]
    off = np.full(M - 1, nu / h**2)
    A = Tridiag(lower=off, diag=np.full(M, -2.0 * nu / h**2), upper=off.copy())

    def g(t, u, udot):
        ux = np.gradient(u, h)
        np.multiply(-u, ux, out=udot)

    def dissipation(t, u, udot, qdot):
        qdot[...] = h * np.sum(u * u)

    I = integrator(g, A, "imex-euler", 1e-3, q=dissipation)
    mon = Monitor(lambda z: float(np.max(np.abs(z.a))))

    u = np.sin(x)
    z = I(u, 0.0, 2.0, mon)

    print("max|u| at t=2:", float(np.max(np.abs(u))))
    print("int_0^2 ||u||^2 dt:", float(z.b[0]))
    print(mon.to_frame().iloc[::500])
    # [END README_QUICKSTART]


if __name__ == "__main__":
    main()
