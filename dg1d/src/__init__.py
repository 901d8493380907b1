"""
1D Discontinuous Galerkin Solver Package
========================================

A modular DG solver for scalar conservation laws (linear advection,
Burgers) and the 1D Euler equations.

Features:
- Modal Legendre or nodal Gauss / Gauss-Lobatto bases of any degree
- Upwind, central, Rusanov, Roe and HLLC interface fluxes
- TVB minmod and Zhang-Shu positivity-preserving limiters
- SSP Runge-Kutta time integration
- L2 / L∞ error norms and convergence studies

Solution representation:
    coeffs[v, j, i] - coefficient i of conserved variable v on element j

Example:
    config = SolverConfig(test_case='sine', degree=2, n_cells=20, cfl=0.1)
    solver = Solver1D(config)
    solver.set_initial_condition()
    solver.solve()
    print(solver.compute_errors())
"""

from .errors import Dg1dError, ConfigurationError, NumericalInstabilityError
from .gas import GasProperties
from .state import FlowState
from .basis import Basis, gauss_legendre, gauss_lobatto
from .mesh import Mesh1D
from .solution import DGSolution
from .physics import PhysicsModel, LinearAdvection, Burgers, EulerEquations, get_physics
from .flux import FluxScheme, UpwindFlux, CentralFlux, RusanovFlux, RoeFlux, HLLCFlux, get_flux_scheme
from .boundary import BoundaryCondition, PeriodicBC, TransmissiveBC, WallBC, DirichletBC
from .limiter import Limiter, NoLimiter, MinmodLimiter, PositivityLimiter, ChainedLimiter, get_limiter
from .timestepping import SSPRungeKutta, compute_rhs, compute_timestep, cfl_stability_bound
from .diagnostics import ErrorNorms, ConvergenceRecord, compute_errors, convergence_rates
from .test_cases import TestCase, TEST_CASES, get_test_case, exact_riemann
from .config import SolverConfig
from .solver import Solver1D, run_convergence_study

__all__ = [
    # Errors
    'Dg1dError',
    'ConfigurationError',
    'NumericalInstabilityError',

    # Gas properties and flow state
    'GasProperties',
    'FlowState',

    # Discretization
    'Basis',
    'gauss_legendre',
    'gauss_lobatto',
    'Mesh1D',
    'DGSolution',

    # Physics
    'PhysicsModel',
    'LinearAdvection',
    'Burgers',
    'EulerEquations',
    'get_physics',

    # Flux schemes
    'FluxScheme',
    'UpwindFlux',
    'CentralFlux',
    'RusanovFlux',
    'RoeFlux',
    'HLLCFlux',
    'get_flux_scheme',

    # Boundary conditions
    'BoundaryCondition',
    'PeriodicBC',
    'TransmissiveBC',
    'WallBC',
    'DirichletBC',

    # Limiters
    'Limiter',
    'NoLimiter',
    'MinmodLimiter',
    'PositivityLimiter',
    'ChainedLimiter',
    'get_limiter',

    # Time integration
    'SSPRungeKutta',
    'compute_rhs',
    'compute_timestep',
    'cfl_stability_bound',

    # Diagnostics
    'ErrorNorms',
    'ConvergenceRecord',
    'compute_errors',
    'convergence_rates',

    # Test cases
    'TestCase',
    'TEST_CASES',
    'get_test_case',
    'exact_riemann',

    # Solver
    'Solver1D',
    'SolverConfig',
    'run_convergence_study',
]

__version__ = '1.0.0'
