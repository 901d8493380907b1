"""
DG state vector: per-element polynomial coefficients of every conserved
variable.

Coefficients are stored in one dense array of shape
(n_vars, n_cells, n_basis), allocated once and reused by the time
integrator.
"""

import numpy as np
from typing import Callable, Tuple

from .basis import Basis
from .errors import ConfigurationError
from .mesh import Mesh1D


def evaluate_function(func: Callable, x: np.ndarray, t: float, n_vars: int) -> np.ndarray:
    """
    Evaluate a state function f(x, t) and normalise its shape.

    Scalar problems may return an array shaped like x (or a plain number);
    systems must return (n_vars,) + x.shape.
    """
    values = np.asarray(func(x, t), dtype=float)
    if n_vars == 1 and values.shape != (1,) + x.shape:
        values = np.broadcast_to(values, x.shape)[None]
    if values.shape != (n_vars,) + x.shape:
        raise ConfigurationError(
            f"State function returned shape {values.shape}, expected {(n_vars,) + x.shape}")
    return values


class DGSolution:
    """
    Coefficients of the piecewise polynomial approximation.

    Attributes:
        coeffs: (n_vars, n_cells, n_basis) coefficient array
        mesh: Element mesh
        basis: Reference basis shared by every element
    """

    def __init__(self, coeffs: np.ndarray, mesh: Mesh1D, basis: Basis):
        if coeffs.shape[1:] != (mesh.n_cells, basis.n_basis):
            raise ConfigurationError(
                f"Coefficient array {coeffs.shape} does not match "
                f"{mesh.n_cells} elements x {basis.n_basis} basis functions")
        self.coeffs = coeffs
        self.mesh = mesh
        self.basis = basis

    @property
    def n_vars(self) -> int:
        return self.coeffs.shape[0]

    @property
    def n_dofs(self) -> int:
        """Degrees of freedom per variable."""
        return self.mesh.n_cells * self.basis.n_basis

    @classmethod
    def zeros(cls, mesh: Mesh1D, basis: Basis, n_vars: int) -> 'DGSolution':
        return cls(np.zeros((n_vars, mesh.n_cells, basis.n_basis)), mesh, basis)

    @classmethod
    def project(cls, func: Callable, mesh: Mesh1D, basis: Basis, n_vars: int,
                t: float = 0.0) -> 'DGSolution':
        """
        L2 projection of f(x, t) onto the element-wise polynomial space.

        On each element M c = ∫ f φ dx; the Jacobian cancels on both sides so
        only the reference mass matrix is needed.
        """
        x = mesh.physical_points(basis.quad_points)
        values = evaluate_function(func, x, t, n_vars)
        rhs = (values * basis.quad_weights) @ basis.val_quad
        return cls(rhs @ basis.inv_mass.T, mesh, basis)

    def copy(self) -> 'DGSolution':
        return DGSolution(self.coeffs.copy(), self.mesh, self.basis)

    # --- Evaluation ---

    def quad_values(self) -> np.ndarray:
        """Values at quadrature points, (n_vars, n_cells, n_quad)."""
        return self.coeffs @ self.basis.val_quad.T

    def face_values(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Boundary traces of every element.

        Returns:
            left: Value at each element's left end (n_vars, n_cells)
            right: Value at each element's right end (n_vars, n_cells)
        """
        return self.coeffs @ self.basis.val_left, self.coeffs @ self.basis.val_right

    def cell_averages(self) -> np.ndarray:
        """Element averages, (n_vars, n_cells)."""
        if self.basis.is_modal:
            return self.coeffs[..., 0].copy()
        return self.coeffs @ self.basis.average_weights

    def evaluate(self, xi: np.ndarray) -> np.ndarray:
        """Values at reference points xi in every element, (n_vars, n_cells, n_points)."""
        return self.coeffs @ self.basis.evaluate(xi).T

    def sample(self, n_points: int = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Point values on uniformly spaced points per element (end points included).

        Returns:
            x: Sample locations (n_cells * n_points,)
            values: Solution values (n_vars, n_cells * n_points)
        """
        if n_points is None:
            n_points = max(2, self.basis.degree + 2)
        xi = np.linspace(-1.0, 1.0, n_points)
        x = self.mesh.physical_points(xi).ravel()
        values = self.evaluate(xi).reshape(self.n_vars, -1)
        return x, values

    def total(self, variable: int = None):
        """Domain integral of one variable, or of every variable as (n_vars,) when variable is None."""
        totals = self.cell_averages() @ self.mesh.dx
        return totals if variable is None else float(totals[variable])
