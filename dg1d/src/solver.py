"""
Main solver class for 1D conservation laws with the discontinuous Galerkin method.
"""

import logging
import numpy as np
import matplotlib.pyplot as plt
from typing import Callable, Dict, List, Tuple

from .basis import Basis
from .boundary import make_boundary_conditions, check_boundary_pair, exterior_states
from .config import SolverConfig
from .diagnostics import ErrorNorms, ConvergenceRecord, compute_errors
from .errors import ConfigurationError, NumericalInstabilityError
from .flux import get_flux_scheme
from .gas import GasProperties
from .limiter import get_limiter, NoLimiter
from .mesh import Mesh1D
from .physics import get_physics, EulerEquations, ScalarModel
from .solution import DGSolution
from .state import FlowState
from .test_cases import get_test_case
from .timestepping import SSPRungeKutta, compute_rhs, compute_timestep, check_state

logger = logging.getLogger(__name__)


class Solver1D:
    """
    1D discontinuous Galerkin solver for scalar conservation laws and the
    Euler equations.

    Features:
    - Modal Legendre or nodal (Gauss / Gauss-Lobatto) bases of any degree
    - Upwind, central, Rusanov, Roe and HLLC interface fluxes
    - Periodic, transmissive, wall and Dirichlet boundaries
    - TVB minmod limiter, optionally followed by a positivity-preserving limiter
    - SSP Runge-Kutta time integration (1, 2 or 3 stages)
    """

    def __init__(self, config: SolverConfig = None):
        """
        Initialize the solver. Every setting is checked here, before any
        stepping.

        Args:
            config: Solver configuration
        """
        self.config = config if config is not None else SolverConfig()
        self.config.validate()
        cfg = self.config

        self.test_case = get_test_case(cfg.test_case)
        self.gas = GasProperties(gamma=cfg.gamma)
        self.physics = get_physics(self.test_case.physics, self.gas, cfg.advection_speed)

        # Discretization
        self.mesh = Mesh1D.uniform(self.test_case.xmin, self.test_case.xmax, cfg.n_cells)
        self.basis = Basis(cfg.degree, cfg.basis, cfg.n_quad)
        self.flux_scheme = get_flux_scheme(cfg.flux)
        self.flux_scheme.check_compatible(self.physics)
        self.limiter = get_limiter(cfg.limiter, cfg.tvb_m, cfg.positivity, self.physics)

        # Boundary conditions (Dirichlet data comes from the exact solution)
        self.exact = self.test_case.exact_solution(self.physics)
        boundary = cfg.boundary if cfg.boundary is not None else self.test_case.boundary
        self.bc_left, self.bc_right = make_boundary_conditions(
            boundary, self.mesh.xmin, self.mesh.xmax, self.exact)
        check_boundary_pair(self.bc_left, self.bc_right, self.physics)

        self.final_time = cfg.final_time if cfg.final_time is not None else self.test_case.final_time

        # Solution storage
        self.solution = DGSolution.zeros(self.mesh, self.basis, self.physics.n_vars)
        self.integrator = SSPRungeKutta(cfg.time_scheme, self.solution.coeffs.shape)
        self.time = 0.0
        self.iteration = 0
        self.max_abs = None
        self._initialized = False

    def set_initial_condition(self, func: Callable = None):
        """
        Project the initial state onto the DG space and limit it.

        Args:
            func: Function(x, t) -> conserved state; defaults to the test case's
                  initial condition
        """
        if func is None:
            func = self.test_case.initial_condition(self.physics)
        projected = DGSolution.project(func, self.mesh, self.basis, self.physics.n_vars)
        np.copyto(self.solution.coeffs, projected.coeffs)
        self.time = 0.0
        self.iteration = 0

        # Scalar laws obey a maximum principle; growth far past the initial
        # maximum can only come from an unstable discretization
        self.max_abs = None
        if isinstance(self.physics, ScalarModel) and self.config.growth_limit is not None:
            left, right = projected.face_values()
            peak = max(np.abs(projected.quad_values()).max(), np.abs(left).max(), np.abs(right).max())
            if peak > 0:
                self.max_abs = self.config.growth_limit * peak

        self._post_stage(self.solution.coeffs, 0.0)
        self._initialized = True

    def _rhs(self, U: np.ndarray, t: float, out: np.ndarray) -> np.ndarray:
        return compute_rhs(U, t, self.mesh, self.basis, self.physics, self.flux_scheme,
                           self.bc_left, self.bc_right, out)

    def _post_stage(self, U: np.ndarray, t: float):
        """Limit a stage state in place and check that it is admissible."""
        stage = DGSolution(U, self.mesh, self.basis)
        if not isinstance(self.limiter, NoLimiter):
            avg = stage.cell_averages()
            ghost_left, ghost_right = exterior_states(avg[:, 0], avg[:, -1], t,
                                                      self.bc_left, self.bc_right)
            self.limiter.apply(stage, ghost_left, ghost_right)
        check_state(stage, self.physics, t, self.max_abs)

    def get_state(self) -> DGSolution:
        """Get the current DG solution."""
        return self.solution

    def get_flow_state(self, n_points: int = None) -> Tuple[np.ndarray, FlowState]:
        """
        Euler flow state at uniformly spaced sample points.

        Returns:
            x: Sample locations
            state: FlowState of the sampled conserved variables
        """
        if not isinstance(self.physics, EulerEquations):
            raise ConfigurationError("Flow state is only defined for the Euler equations")
        x, values = self.solution.sample(n_points)
        return x, FlowState.from_array(values, self.gas)

    def step(self) -> float:
        """
        Perform one time step, truncated so as not to pass the final time.

        Returns:
            dt: Time step taken
        """
        if not self._initialized:
            raise RuntimeError("Initial condition must be set before stepping")

        dt = compute_timestep(self.solution, self.physics, self.config.cfl)
        remaining = self.final_time - self.time
        last_step = dt >= remaining
        if last_step:
            dt = remaining
        if not dt > 0:
            raise NumericalInstabilityError(f"Invalid time step {dt}", self.time, 0)

        self.integrator.step(self.solution.coeffs, self.time, dt, self._rhs, self._post_stage)

        # Update time and iteration
        self.time = self.final_time if last_step else self.time + dt
        self.iteration += 1

        return dt

    def solve(self, final_time: float = None, callback: Callable = None) -> Dict:
        """
        Advance to the final time or the iteration limit.

        Args:
            final_time: Overrides the configured final time
            callback: Output sink, called as callback(solver) every
                      output_interval steps and once at the end

        Returns:
            Dictionary with run info
        """
        if not self._initialized:
            raise RuntimeError("Initial condition must be set before solving")
        if final_time is not None:
            if not final_time > self.time:
                raise ConfigurationError(f"Final time {final_time} is not after the current time {self.time}")
            self.final_time = final_time

        cfg = self.config
        logger.info(f"Starting DG solver: {self.test_case.name} ({self.test_case.physics})")
        logger.info(f"Cells: {self.mesh.n_cells}, degree: {self.basis.degree}, basis: {self.basis.kind}, "
                    f"flux: {cfg.flux}, limiter: {cfg.limiter}")
        logger.info(f"CFL: {cfg.cfl}, time scheme: {cfg.time_scheme}, final time: {self.final_time}")

        while self.time < self.final_time and self.iteration < cfg.max_iter:
            dt = self.step()

            # Print progress
            if cfg.print_interval and self.iteration % cfg.print_interval == 0:
                logger.info(f"Iter {self.iteration:6d}, t = {self.time:.4e}, dt = {dt:.4e}")
            else:
                logger.debug(f"Iter {self.iteration:6d}, t = {self.time:.4e}, dt = {dt:.4e}")

            if callback is not None and cfg.output_interval and self.iteration % cfg.output_interval == 0:
                callback(self)

        completed = self.time >= self.final_time
        if completed:
            logger.info(f"Reached final time {self.final_time:.4e} in {self.iteration} iterations")
        else:
            logger.warning(f"Stopped at iteration limit {cfg.max_iter}, t = {self.time:.4e}")

        if callback is not None:
            callback(self)

        return {
            'completed': completed,
            'iterations': self.iteration,
            'time': self.time,
        }

    def compute_errors(self, variable: int = 0) -> ErrorNorms:
        """Error norms of one variable against the test case's exact solution."""
        if self.exact is None:
            raise ConfigurationError(f"Test case '{self.test_case.name}' has no exact solution")
        return compute_errors(self.solution, self.exact, self.time, variable)

    def convergence_record(self, variable: int = 0) -> ConvergenceRecord:
        errors = self.compute_errors(variable)
        return ConvergenceRecord(self.mesh.n_cells, self.solution.n_dofs, errors.l2, errors.linf)

    def plot_solution(self, filename: str = None, n_points: int = None):
        """Plot the current solution, with the exact solution where known."""
        x, values = self.solution.sample(n_points)
        exact = None
        if self.exact is not None:
            exact = np.asarray(self.exact(x, self.time), dtype=float).reshape(self.physics.n_vars, -1)

        if isinstance(self.physics, EulerEquations):
            state = FlowState.from_array(values, self.gas)
            fields = [('Density', state.rho), ('Velocity', state.u),
                      ('Pressure', state.p), ('Internal energy', state.e)]
            exact_fields = None
            if exact is not None:
                exact_state = FlowState.from_array(exact, self.gas)
                exact_fields = [exact_state.rho, exact_state.u, exact_state.p, exact_state.e]
            fig, axes = plt.subplots(2, 2, figsize=(10, 8))
        else:
            fields = [('u', values[0])]
            exact_fields = [exact[0]] if exact is not None else None
            fig, axes = plt.subplots(1, 1, figsize=(8, 5))
            axes = np.array([axes])

        fig.suptitle(f'{self.test_case.name}: P{self.basis.degree}, {self.mesh.n_cells} cells '
                     f'(t = {self.time:.4e}, iter = {self.iteration})')

        for i, (ax, (label, y)) in enumerate(zip(axes.flat, fields)):
            ax.plot(x, y, 'b-', linewidth=1.5, label='DG')
            if exact_fields is not None:
                ax.plot(x, exact_fields[i], 'k--', linewidth=1, label='Exact')
                ax.legend()
            ax.set_xlabel('x')
            ax.set_ylabel(label)
            ax.set_title(label)
            ax.grid(True)

        fig.tight_layout()

        if filename:
            fig.savefig(filename, dpi=150, bbox_inches='tight')
            logger.info(f"Saved plot to {filename}")
            plt.close(fig)
        else:
            plt.show()


def run_convergence_study(config: SolverConfig, n_cells_list: List[int],
                          variable: int = 0) -> List[ConvergenceRecord]:
    """
    Solve the same problem on successively refined meshes.

    Args:
        config: Base configuration; n_cells is replaced for each run
        n_cells_list: Element counts, coarse to fine
        variable: Conserved variable whose error is recorded

    Returns:
        One ConvergenceRecord per mesh
    """
    records = []
    for n_cells in n_cells_list:
        solver = Solver1D(config.replace(n_cells=n_cells))
        solver.set_initial_condition()
        info = solver.solve()
        if not info['completed']:
            logger.warning(f"{n_cells} cells: stopped at t = {info['time']:.4e} before the final time")
        record = solver.convergence_record(variable)
        logger.info(f"{n_cells:6d} cells: L2 = {record.l2_error:.4e}, Linf = {record.linf_error:.4e}")
        records.append(record)
    return records
