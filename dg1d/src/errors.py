"""
Exceptions raised by the DG solver.

Configuration problems are detected at setup, before any time stepping.
Numerical instability is detected at the end of a Runge-Kutta stage and
halts the run.
"""


class Dg1dError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(Dg1dError, ValueError):
    """Invalid solver setup (degree, mesh, CFL, unknown names, ...)."""


class NumericalInstabilityError(Dg1dError, RuntimeError):
    """
    The state became non-finite, grew without bound, or became physically
    inadmissible.

    Attributes:
        time: Stage time at which the failure was detected
        element: Index of the first failing element
        variable: Index of the failing conserved variable (None if the
                  failure is not tied to a single variable)
    """

    def __init__(self, message: str, time: float, element: int, variable: int = None):
        super().__init__(f"{message} (t = {time:.6e}, element {element})")
        self.time = time
        self.element = element
        self.variable = variable
