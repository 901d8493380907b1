"""
Pytest tests for the TVB minmod and positivity-preserving limiters.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dg1d.src import Basis, Burgers, ConfigurationError, DGSolution, EulerEquations, Mesh1D, get_limiter
from dg1d.src.limiter import ChainedLimiter, MinmodLimiter, NoLimiter, PositivityLimiter, minmod


@pytest.fixture
def mesh():
    return Mesh1D.uniform(0.0, 1.0, 20)


def ghost_averages(solution):
    """Periodic neighbour averages for the two end elements."""
    avg = solution.cell_averages()
    return avg[:, -1], avg[:, 0]


class TestMinmod:

    def test_same_sign(self):
        assert np.allclose(minmod(np.array([2.0, -3.0]), np.array([1.0, -1.0]),
                                  np.array([3.0, -2.0])), [1.0, -1.0])

    def test_mixed_sign(self):
        assert np.allclose(minmod(np.array([2.0, 0.0]), np.array([-1.0, 1.0]),
                                  np.array([3.0, 1.0])), [0.0, 0.0])


class TestCellAveragePreservation:
    """Limiting must never touch the zeroth mode."""

    @pytest.mark.parametrize("degree", [1, 2, 3])
    @pytest.mark.parametrize("tvb_m", [0.0, 10.0])
    def test_random_coefficients(self, mesh, degree, tvb_m):
        rng = np.random.default_rng(degree)
        coeffs = rng.standard_normal((3, mesh.n_cells, degree + 1))
        solution = DGSolution(coeffs.copy(), mesh, Basis(degree, 'legendre'))

        MinmodLimiter(tvb_m).apply(solution, *ghost_averages(solution))

        assert np.array_equal(solution.coeffs[..., 0], coeffs[..., 0])
        # Something was limited
        assert not np.array_equal(solution.coeffs, coeffs)

    @pytest.mark.parametrize("kind", ['gl', 'gll'])
    def test_nodal_averages(self, mesh, kind):
        rng = np.random.default_rng(7)
        basis = Basis(2, kind)
        solution = DGSolution(rng.standard_normal((1, mesh.n_cells, 3)), mesh, basis)
        before = solution.cell_averages()

        MinmodLimiter().apply(solution, *ghost_averages(solution))

        assert np.allclose(solution.cell_averages(), before, rtol=0, atol=1e-13)


class TestLimiting:

    def test_linear_data_untouched(self, mesh):
        basis = Basis(1, 'legendre')
        solution = DGSolution.project(lambda x, t: 3.0 * x, mesh, basis, 1)
        before = solution.coeffs.copy()
        avg = solution.cell_averages()
        dx = mesh.dx[0]

        MinmodLimiter().apply(solution, avg[:, 0] - 3.0 * dx, avg[:, -1] + 3.0 * dx)

        assert np.array_equal(solution.coeffs, before)

    def test_step_oscillation_removed(self, mesh):
        """A P2 element overshooting a jump is reduced to a limited linear."""
        basis = Basis(2, 'legendre')
        coeffs = np.zeros((1, mesh.n_cells, 3))
        coeffs[0, 10:, 0] = 1.0
        coeffs[0, 9, :] = [0.5, 0.8, 0.3]
        solution = DGSolution(coeffs, mesh, basis)

        MinmodLimiter().apply(solution, *ghost_averages(solution))

        assert solution.coeffs[0, 9, 0] == 0.5
        assert np.isclose(solution.coeffs[0, 9, 1], 0.5)
        assert solution.coeffs[0, 9, 2] == 0.0
        left, right = solution.face_values()
        assert 0.0 <= left[0, 9] <= right[0, 9] <= 1.0

    def test_smooth_extremum_kept_with_tvb(self, mesh):
        basis = Basis(2, 'legendre')
        solution = DGSolution.project(lambda x, t: np.sin(2 * np.pi * x), mesh, basis, 1)
        before = solution.coeffs.copy()

        MinmodLimiter(tvb_m=200.0).apply(solution, *ghost_averages(solution))
        assert np.array_equal(solution.coeffs, before)

        MinmodLimiter(tvb_m=0.0).apply(solution, *ghost_averages(solution))
        assert not np.array_equal(solution.coeffs, before)

    def test_piecewise_constant_is_noop(self, mesh):
        solution = DGSolution(np.arange(20.0).reshape(1, 20, 1), mesh, Basis(0))
        MinmodLimiter().apply(solution, np.array([100.0]), np.array([-100.0]))
        assert np.array_equal(solution.coeffs[0, :, 0], np.arange(20.0))


def euler_coefficients(mesh, troubled=5):
    """rho = 1, u = 0, p = 1 (Legendre modes), with steep slopes in one element."""
    coeffs = np.zeros((3, mesh.n_cells, 2))
    coeffs[0, :, 0] = 1.0
    coeffs[2, :, 0] = 2.5
    # Left face of the troubled element: rho = -0.5, rhoE = -0.5
    coeffs[0, troubled, 1] = 1.5
    coeffs[2, troubled, 1] = 3.0
    return coeffs


def point_values(solution):
    left, right = solution.face_values()
    return np.concatenate([solution.quad_values(), left[..., None], right[..., None]], axis=-1)


class TestPositivityLimiter:
    """Density and pressure become positive at every point; averages stay put."""

    def test_restores_positivity(self, mesh):
        physics = EulerEquations()
        coeffs = euler_coefficients(mesh)
        solution = DGSolution(coeffs.copy(), mesh, Basis(1, 'legendre'))
        assert not np.all(physics.admissible(point_values(solution)))

        PositivityLimiter(physics).apply(solution, *ghost_averages(solution))

        assert np.all(physics.admissible(point_values(solution)))
        assert np.array_equal(solution.coeffs[..., 0], coeffs[..., 0])
        assert np.all(np.abs(solution.coeffs[[0, 2], 5, 1]) < np.abs(coeffs[[0, 2], 5, 1]))
        # Only the troubled element changes
        assert np.array_equal(np.delete(solution.coeffs, 5, axis=1), np.delete(coeffs, 5, axis=1))

    def test_nodal_basis(self, mesh):
        physics = EulerEquations()
        basis = Basis(2, 'gll')
        modes = np.concatenate([euler_coefficients(mesh), np.zeros((3, mesh.n_cells, 1))], axis=-1)
        solution = DGSolution(basis.from_modal(modes), mesh, basis)
        before = solution.cell_averages()

        PositivityLimiter(physics).apply(solution, *ghost_averages(solution))

        assert np.all(physics.admissible(point_values(solution)))
        assert np.allclose(solution.cell_averages(), before, atol=1e-12)

    def test_admissible_state_untouched(self, mesh):
        coeffs = euler_coefficients(mesh)
        coeffs[:, :, 1] = 0.0
        solution = DGSolution(coeffs.copy(), mesh, Basis(1, 'legendre'))
        PositivityLimiter(EulerEquations()).apply(solution, *ghost_averages(solution))
        assert np.array_equal(solution.coeffs, coeffs)

    def test_requires_euler(self):
        with pytest.raises(ConfigurationError):
            PositivityLimiter(Burgers())


class TestFactory:

    def test_names(self):
        assert isinstance(get_limiter('none'), NoLimiter)
        assert isinstance(get_limiter('minmod', 5.0), MinmodLimiter)

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            get_limiter('weno')

    def test_negative_tvb(self):
        with pytest.raises(ConfigurationError):
            get_limiter('minmod', -1.0)

    def test_positivity_chained_after_slope_limiter(self):
        limiter = get_limiter('minmod', 0.0, positivity=True, physics=EulerEquations())
        assert isinstance(limiter, ChainedLimiter)
        assert [type(l) for l in limiter.limiters] == [MinmodLimiter, PositivityLimiter]
        assert isinstance(get_limiter('none', positivity=True, physics=EulerEquations()),
                          PositivityLimiter)

    def test_positivity_needs_euler(self):
        with pytest.raises(ConfigurationError):
            get_limiter('minmod', positivity=True, physics=Burgers())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
