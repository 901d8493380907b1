"""
Error norms against an exact solution and convergence bookkeeping.

Formatting convergence tables is left to the caller; this module only
produces the numbers.
"""

import numpy as np
from typing import Callable, List, NamedTuple

from .basis import gauss_legendre
from .solution import DGSolution, evaluate_function


class ErrorNorms(NamedTuple):
    """Discrete error norms of one variable."""
    l2: float
    linf: float
    linf_location: float


class ConvergenceRecord(NamedTuple):
    """One row of a convergence study."""
    num_cells: int
    num_dofs: int
    l2_error: float
    linf_error: float


def compute_errors(solution: DGSolution, exact: Callable, t: float, variable: int = 0,
                   n_quad: int = None, n_sample: int = None) -> ErrorNorms:
    """
    L2 and L∞ errors of one variable against exact(x, t).

    The L2 error integrates (u_h - u)² with a Gauss rule of n_quad points per
    element (default k + 3). The L∞ error is sampled on those points plus
    n_sample uniformly spaced points per element (end points included).

    Args:
        solution: DG solution
        exact: Function(x, t) -> state, same convention as the projection
        t: Time at which to evaluate the exact solution
        variable: Index of the conserved variable to measure
        n_quad: Quadrature points per element for the L2 integral
        n_sample: Additional uniform sample points per element for L∞

    Returns:
        ErrorNorms(l2, linf, linf_location)
    """
    mesh = solution.mesh
    degree = solution.basis.degree
    if n_quad is None:
        n_quad = degree + 3
    if n_sample is None:
        n_sample = 2 * degree + 3

    xi, w = gauss_legendre(n_quad)
    x = mesh.physical_points(xi)
    err = solution.evaluate(xi)[variable] - evaluate_function(exact, x, t, solution.n_vars)[variable]
    l2 = np.sqrt(np.sum((err**2 @ w) * mesh.jacobian))

    xi_all = np.concatenate([xi, np.linspace(-1.0, 1.0, n_sample)])
    x_all = mesh.physical_points(xi_all)
    err_all = np.abs(solution.evaluate(xi_all)[variable] -
                     evaluate_function(exact, x_all, t, solution.n_vars)[variable])
    imax = np.unravel_index(np.argmax(err_all), err_all.shape)

    return ErrorNorms(float(l2), float(err_all[imax]), float(x_all[imax]))


def convergence_rates(records: List[ConvergenceRecord], attribute: str = 'l2_error') -> List[float]:
    """
    Observed orders between consecutive refinements.

    rate = log(e_{i-1} / e_i) / log(N_i / N_{i-1}); equals log2 of the error
    reduction when the element count doubles.
    """
    rates = []
    for coarse, fine in zip(records[:-1], records[1:]):
        ratio = getattr(coarse, attribute) / getattr(fine, attribute)
        rates.append(float(np.log(ratio) / np.log(fine.num_cells / coarse.num_cells)))
    return rates


def cell_average_totals(solution: DGSolution) -> np.ndarray:
    """Domain integral of each conserved variable from the element averages, (n_vars,)."""
    return solution.total()
