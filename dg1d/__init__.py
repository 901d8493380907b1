"""
dg1d - 1D Discontinuous Galerkin Solver
=======================================

Re-exports all public components from dg1d.src
"""

from dg1d.src import (
    # Errors
    Dg1dError,
    ConfigurationError,
    NumericalInstabilityError,
    # Discretization
    Basis,
    Mesh1D,
    DGSolution,
    # Physics
    GasProperties,
    FlowState,
    LinearAdvection,
    Burgers,
    EulerEquations,
    # Fluxes, boundaries, limiters
    get_flux_scheme,
    BoundaryCondition,
    get_limiter,
    # Diagnostics
    ErrorNorms,
    ConvergenceRecord,
    compute_errors,
    convergence_rates,
    # Test cases
    TEST_CASES,
    get_test_case,
    exact_riemann,
    # Solver
    Solver1D,
    SolverConfig,
    run_convergence_study,
    __version__,
)

__all__ = [
    'Dg1dError',
    'ConfigurationError',
    'NumericalInstabilityError',
    'Basis',
    'Mesh1D',
    'DGSolution',
    'GasProperties',
    'FlowState',
    'LinearAdvection',
    'Burgers',
    'EulerEquations',
    'get_flux_scheme',
    'BoundaryCondition',
    'get_limiter',
    'ErrorNorms',
    'ConvergenceRecord',
    'compute_errors',
    'convergence_rates',
    'TEST_CASES',
    'get_test_case',
    'exact_riemann',
    'Solver1D',
    'SolverConfig',
    'run_convergence_study',
]
