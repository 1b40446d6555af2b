class InvalidArgumentError(ValueError):
    """Raised when a numeric argument is outside its admissible range.

    This error is raised eagerly, before any stepping takes place, by

    - :class:`~imexrk.integrator.Integrator` construction when ``dt <= 0``;
    - :func:`~imexrk.integrator.propagate` when the target time ``T <= 0``;
    - :class:`~imexrk.schemes.IMEXTableau` when the coefficients are not a
      valid diagonally implicit / explicit pair;
    - :class:`~imexrk.config.IntegratorConfig` on invalid settings.

    The message always carries the offending value.
    """


class ContractViolationError(TypeError):
    """Raised when an integrator is called with the wrong call form.

    A plain :class:`~imexrk.integrator.Integrator` accepts ``I(x, T[, monitor])``
    and a :class:`~imexrk.integrator.QuadratureIntegrator` accepts
    ``I(x, q0, T[, monitor])``. Mixing the two is a programming error and
    fails fast instead of integrating with misplaced arguments.
    """
