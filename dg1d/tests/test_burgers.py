"""
Pytest tests for the inviscid Burgers equation.

Tests verify:
1. Exact characteristic solution before shock formation
2. Accuracy and convergence against the exact solution
3. The CFL stability boundary: stable at the bound, instability detected above it
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dg1d.src import (
    Burgers, ConfigurationError, NumericalInstabilityError, Solver1D, SolverConfig,
    cfl_stability_bound, convergence_rates, get_test_case, run_convergence_study,
)


@pytest.fixture
def burgers_config():
    """Smooth sine on [-1, 1]; shock forms at t = 2/pi."""
    return SolverConfig(test_case='burgers_sine', degree=2, n_cells=100, flux='rusanov',
                        cfl=cfl_stability_bound(2, 'rk3'), print_interval=0)


@pytest.fixture
def ripple_config():
    """Uniform flow with a 1e-3 ripple at the degree-2 stability bound."""
    return SolverConfig(test_case='burgers_ripple', degree=2, n_cells=100, flux='rusanov',
                        cfl=cfl_stability_bound(2, 'rk3'), final_time=100.0, print_interval=0)


class TestExactSolution:

    def test_characteristics(self):
        case = get_test_case('burgers_sine')
        exact = case.exact_solution(Burgers())
        x = np.linspace(-1, 1, 41)
        t = 0.5
        u = exact(x, t)
        u0 = 0.25 + 0.5 * np.sin(np.pi * (x - u * t))
        assert np.allclose(u, u0, atol=1e-12)

    def test_initial_condition(self):
        case = get_test_case('burgers_sine')
        x = np.linspace(-1, 1, 11)
        u = case.initial_condition(Burgers())(x, 0.0)
        assert np.allclose(u, 0.25 + 0.5 * np.sin(np.pi * x))


class TestAccuracy:

    def test_smooth_solution(self):
        config = SolverConfig(test_case='burgers_sine', degree=2, n_cells=40, cfl=0.1,
                              final_time=0.3, print_interval=0)
        solver = Solver1D(config)
        solver.set_initial_condition()
        solver.solve()
        assert solver.compute_errors().l2 < 1e-3

    @pytest.mark.parametrize("flux", ['rusanov', 'roe'])
    def test_convergence(self, flux):
        config = SolverConfig(test_case='burgers_sine', degree=1, cfl=0.2, final_time=0.3,
                              flux=flux, print_interval=0)
        records = run_convergence_study(config, [20, 40, 80])
        assert all(rate > 1.5 for rate in convergence_rates(records))


class TestStabilityBoundary:
    """
    The ripple case has a nearly uniform wave speed, so the nominal CFL number
    is the local one in every element and the tabulated bound is sharp.
    Above it the fastest discrete modes grow by a few percent per step until
    the solution leaves its maximum-principle range.
    """

    def test_stable_at_bound(self, ripple_config):
        """100 steps at the tabulated bound stay close to the exact solution."""
        solver = Solver1D(ripple_config.replace(max_iter=100))
        solver.set_initial_condition()
        info = solver.solve()

        assert info['iterations'] == 100
        assert not info['completed']
        assert solver.compute_errors().linf < 2e-4

    @pytest.mark.parametrize("factor", [1.1, 1.2])
    def test_instability_detected_slightly_above_bound(self, ripple_config, factor):
        bound = cfl_stability_bound(2, 'rk3')
        solver = Solver1D(ripple_config.replace(cfl=factor * bound, enforce_cfl_bound=False,
                                                max_iter=5000))
        solver.set_initial_condition()

        with pytest.raises(NumericalInstabilityError) as excinfo:
            solver.solve()

        assert 0 <= excinfo.value.element < 100
        assert excinfo.value.time > 0
        assert solver.iteration < 5000

    def test_growth_limit_from_initial_maximum(self, ripple_config):
        solver = Solver1D(ripple_config)
        solver.set_initial_condition()
        assert solver.max_abs == pytest.approx(10.0 * 1.001, rel=1e-3)

        solver = Solver1D(ripple_config.replace(growth_limit=None))
        solver.set_initial_condition()
        assert solver.max_abs is None

    def test_above_bound_rejected(self, burgers_config):
        with pytest.raises(ConfigurationError):
            Solver1D(burgers_config.replace(cfl=0.25))

    def test_far_above_bound(self, burgers_config):
        solver = Solver1D(burgers_config.replace(cfl=0.5, enforce_cfl_bound=False,
                                                 final_time=100.0, max_iter=2000))
        solver.set_initial_condition()

        with pytest.raises(NumericalInstabilityError):
            solver.solve()
        assert solver.iteration < 2000

    def test_cfl_must_stay_below_one(self, burgers_config):
        with pytest.raises(ConfigurationError):
            Solver1D(burgers_config.replace(cfl=1.0, enforce_cfl_bound=False))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
