"""
Pytest tests for Riemann problems of the Euler equations.

Tests verify:
1. The exact Riemann solver against reference star states
2. Shock capturing ability
3. Comparison with exact solution
4. Physical bounds maintained, including the blast waves with the positivity limiter
5. Conservation properties
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dg1d.src import NumericalInstabilityError, Solver1D, SolverConfig, exact_riemann
from dg1d.src.diagnostics import cell_average_totals
from dg1d.src.test_cases import star_state
from dg1d.src.test_cases.euler import SOD_LEFT, SOD_RIGHT, LAX_LEFT, LAX_RIGHT


@pytest.fixture
def solver_config():
    """Solver configuration for shock tube tests."""
    return SolverConfig(
        test_case='sod',
        degree=1,
        n_cells=200,
        cfl=0.2,
        flux='hllc',
        limiter='minmod',
        print_interval=0,
    )


def create_shock_tube_solver(config):
    """Create a shock tube solver with its initial condition set."""
    solver = Solver1D(config)
    solver.set_initial_condition()
    return solver


def l1_error(solver, field):
    x, state = solver.get_flow_state()
    exact = exact_riemann(x, solver.time, SOD_LEFT, SOD_RIGHT, 0.5, solver.gas.gamma)
    return np.mean(np.abs(getattr(state, field) - exact[field]))


class TestExactRiemann:
    """Reference values from Toro, Riemann Solvers and Numerical Methods, table 4.2."""

    def test_sod_star_state(self):
        p_star, u_star = star_state(SOD_LEFT, SOD_RIGHT, 1.4)
        assert np.isclose(p_star, 0.30313, atol=1e-5)
        assert np.isclose(u_star, 0.92745, atol=1e-5)

    def test_sod_profile(self):
        x = np.array([0.1, 0.4, 0.65, 0.8, 0.95])
        exact = exact_riemann(x, 0.2, SOD_LEFT, SOD_RIGHT)
        # Undisturbed left, fan, left star, right star, undisturbed right
        assert exact['rho'][0] == 1.0
        assert 0.42632 < exact['rho'][1] < 1.0
        assert np.isclose(exact['rho'][2], 0.42632, atol=1e-4)
        assert np.isclose(exact['rho'][3], 0.26557, atol=1e-4)
        assert exact['rho'][4] == 0.125
        assert np.allclose(exact['u'][2:4], 0.92745, atol=1e-4)

    def test_two_shocks(self):
        """Colliding streams (Toro test 5 style) produce a pressure rise on both sides."""
        left, right = (1.0, 2.0, 0.1), (1.0, -2.0, 0.1)
        p_star, u_star = star_state(left, right)
        assert p_star > 0.1
        assert np.isclose(u_star, 0.0, atol=1e-12)

    def test_initial_data(self):
        x = np.linspace(0, 1, 11)
        exact = exact_riemann(x, 0.0, LAX_LEFT, LAX_RIGHT)
        assert np.allclose(exact['p'], np.where(x < 0.5, 3.528, 0.571))

    def test_lax_pressure_continuous_at_contact(self):
        exact = exact_riemann(np.linspace(0, 1, 401), 0.13, LAX_LEFT, LAX_RIGHT)
        jumps = np.abs(np.diff(exact['p']))
        assert np.all(exact['p'] > 0)
        # Only the shock and the fan edges change the pressure
        assert np.sum(jumps > 0.2) == 1


class TestShockCapturing:

    def test_shock_moves_right(self, solver_config):
        """Shock should propagate to the right (x > 0.5)."""
        solver = create_shock_tube_solver(solver_config)
        solver.solve()
        x, state = solver.get_flow_state()

        # Find the shock location (maximum pressure gradient)
        shock_x = x[np.argmax(np.abs(np.diff(state.p)))]
        exact_x = 0.5 + 1.75216 * solver.time

        assert abs(shock_x - exact_x) < 0.02, \
            f"Shock at x = {shock_x}, expected {exact_x}"


class TestExactSolutionComparison:
    """Tests comparing numerical solution to exact solution."""

    @pytest.mark.parametrize("flux", ['hllc', 'roe', 'rusanov'])
    def test_density_accuracy(self, solver_config, flux):
        solver = create_shock_tube_solver(solver_config.replace(flux=flux))
        solver.solve()
        assert solver.time == 0.2

        # L1 error should be less than 5% of mean density
        assert l1_error(solver, 'rho') < 0.05 * 0.5625

    def test_pressure_accuracy(self, solver_config):
        solver = create_shock_tube_solver(solver_config)
        solver.solve()
        assert l1_error(solver, 'p') < 0.05 * 0.55

    def test_error_decreases_with_resolution(self, solver_config):
        errors = []
        for n_cells in [50, 100, 200]:
            solver = create_shock_tube_solver(solver_config.replace(n_cells=n_cells))
            solver.solve()
            errors.append(l1_error(solver, 'rho'))

        assert errors[2] < errors[1] < errors[0], \
            f"Error did not decrease with refinement: {errors}"

    def test_solver_error_norms(self, solver_config):
        solver = create_shock_tube_solver(solver_config)
        solver.solve()
        errors = solver.compute_errors(variable=0)
        # Largest pointwise error sits at a discontinuity
        assert errors.linf > 0.01
        assert errors.linf_location > 0.5
        assert errors.l2 < 0.1


class TestPhysicalBounds:

    def test_positive_density_and_pressure(self, solver_config):
        solver = create_shock_tube_solver(solver_config)
        solver.solve()
        _, state = solver.get_flow_state()

        assert np.all(state.rho > 0), f"Negative density detected, min = {np.min(state.rho)}"
        assert np.all(state.p > 0), f"Negative pressure detected, min = {np.min(state.p)}"

    def test_lax_runs(self, solver_config):
        solver = create_shock_tube_solver(solver_config.replace(test_case='lax'))
        info = solver.solve()
        assert info['completed']
        assert solver.compute_errors().l2 < 0.2


class TestBlastWave:
    """Woodward-Colella blast waves: a 1e5 pressure ratio between reflecting walls."""

    @pytest.fixture
    def blast_config(self, solver_config):
        return solver_config.replace(test_case='blast_wave', n_cells=100, flux='rusanov',
                                     positivity=True)

    def test_runs_to_final_time(self, blast_config):
        solver = create_shock_tube_solver(blast_config)
        initial = cell_average_totals(solver.solution)

        info = solver.solve()

        assert info['completed']
        assert solver.time == 0.038
        _, state = solver.get_flow_state()
        assert np.all(state.rho > 0), f"Negative density detected, min = {np.min(state.rho)}"
        assert np.all(state.p > 0), f"Negative pressure detected, min = {np.min(state.p)}"

        final = cell_average_totals(solver.solution)
        assert abs(final[0] - initial[0]) / initial[0] < 1e-12, "Mass not conserved"
        assert abs(final[2] - initial[2]) / initial[2] < 1e-12, "Energy not conserved"

    def test_fails_without_positivity_limiter(self, blast_config):
        solver = create_shock_tube_solver(blast_config.replace(n_cells=200, positivity=False,
                                                               max_iter=10))
        with pytest.raises(NumericalInstabilityError):
            solver.solve()


class TestConservation:
    """Closed tube: walls on both sides keep mass and energy fixed."""

    def test_mass_and_energy_conservation(self, solver_config):
        solver = create_shock_tube_solver(solver_config.replace(boundary='wall'))
        initial = cell_average_totals(solver.solution)

        solver.solve()

        final = cell_average_totals(solver.solution)
        assert abs(final[0] - initial[0]) / initial[0] < 1e-12, "Mass not conserved"
        assert abs(final[2] - initial[2]) / initial[2] < 1e-12, "Energy not conserved"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
