"""
Polynomial bases and quadrature on the reference element [-1, 1].

Three bases span the same space of degree-k polynomials:
    legendre - orthogonal modal basis P_0 ... P_k (diagonal mass matrix)
    gl       - nodal Lagrange basis on the k+1 Gauss-Legendre points
    gll      - nodal Lagrange basis on the k+1 Gauss-Lobatto-Legendre points

Every basis is stored through its Legendre expansion, so values, derivatives
and modal conversion share one code path whatever the kind.
"""

import numpy as np
from numpy.polynomial import legendre as leg
from typing import Tuple

from .errors import ConfigurationError


BASIS_KINDS = ('legendre', 'gl', 'gll')


def gauss_legendre(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Gauss-Legendre points and weights (exact to degree 2n-1)."""
    return leg.leggauss(n)


def gauss_lobatto(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gauss-Lobatto-Legendre points and weights (exact to degree 2n-3).

    Interior points are the roots of P'_{n-1}; the end points are included.
    """
    if n < 2:
        raise ConfigurationError(f"Gauss-Lobatto rule needs at least 2 points, got {n}")
    c = np.zeros(n)
    c[-1] = 1.0
    interior = np.sort(leg.legroots(leg.legder(c))) if n > 2 else np.array([])
    x = np.concatenate(([-1.0], interior, [1.0]))
    w = 2.0 / (n * (n - 1) * leg.legval(x, c)**2)
    return x, w


class Basis:
    """
    Degree-k basis with its quadrature rule and precomputed tables.

    Attributes:
        degree: Polynomial degree k
        kind: One of BASIS_KINDS
        n_basis: Number of basis functions (k + 1)
        nodes: Interpolation nodes of a nodal basis (None for legendre)
        quad_points, quad_weights: Gauss-Legendre rule, (nq,)
        val_quad: Basis values at quadrature points, (nq, nb)
        dval_quad: Reference derivatives at quadrature points, (nq, nb)
        val_left, val_right: Basis values at xi = -1 and xi = +1, (nb,)
        mass, inv_mass: Reference mass matrix and its inverse, (nb, nb)
        average_weights: Cell average = coeffs @ average_weights, (nb,)
    """

    def __init__(self, degree: int, kind: str = 'legendre', n_quad: int = None):
        if isinstance(degree, bool) or not isinstance(degree, (int, np.integer)):
            raise ConfigurationError(f"Polynomial degree must be an integer, got {degree!r}")
        if degree < 0:
            raise ConfigurationError(f"Polynomial degree must be non-negative, got {degree}")
        if kind not in BASIS_KINDS:
            raise ConfigurationError(f"Unknown basis: {kind}. Options: {', '.join(BASIS_KINDS)}")

        self.degree = int(degree)
        self.kind = kind
        self.n_basis = self.degree + 1

        # Default over-integrates: k+2 points are exact to degree 2k+3
        if n_quad is None:
            n_quad = self.degree + 2
        if n_quad < self.degree + 1:
            raise ConfigurationError(
                f"{n_quad} quadrature points cannot integrate degree {2 * self.degree} exactly")
        self.n_quad = n_quad
        self.quad_points, self.quad_weights = gauss_legendre(n_quad)

        # Columns of _modal are the Legendre coefficients of each basis function
        if kind == 'legendre':
            self.nodes = None
            self._nodal = np.eye(self.n_basis)
            self._modal = np.eye(self.n_basis)
        else:
            if kind == 'gl':
                self.nodes = gauss_legendre(self.n_basis)[0]
            elif self.n_basis == 1:
                self.nodes = np.array([0.0])
            else:
                self.nodes = gauss_lobatto(self.n_basis)[0]
            self._nodal = leg.legvander(self.nodes, self.degree)
            self._modal = np.linalg.inv(self._nodal)

        self.val_quad = self.evaluate(self.quad_points)
        self.dval_quad = self.evaluate_derivative(self.quad_points)
        self.val_left = self.evaluate(np.array([-1.0]))[0]
        self.val_right = self.evaluate(np.array([1.0]))[0]

        if self.is_modal:
            # ∫ P_i P_j dξ = 2 / (2i + 1) δ_ij
            diag = 2.0 / (2.0 * np.arange(self.n_basis) + 1.0)
            self.mass = np.diag(diag)
            self.inv_mass = np.diag(1.0 / diag)
            self.average_weights = np.eye(self.n_basis)[0]
        else:
            self.mass = (self.val_quad * self.quad_weights[:, None]).T @ self.val_quad
            self.inv_mass = np.linalg.inv(self.mass)
            self.average_weights = 0.5 * self.quad_weights @ self.val_quad

    @property
    def is_modal(self) -> bool:
        """True when coefficients are already Legendre modes."""
        return self.kind == 'legendre'

    def evaluate(self, xi: np.ndarray) -> np.ndarray:
        """Basis values at reference points, shape xi.shape + (n_basis,)."""
        return leg.legvander(np.asarray(xi, dtype=float), self.degree) @ self._modal

    def evaluate_derivative(self, xi: np.ndarray) -> np.ndarray:
        """Reference derivatives d(phi)/d(xi), shape xi.shape + (n_basis,)."""
        xi = np.asarray(xi, dtype=float)
        if self.degree == 0:
            return np.zeros(xi.shape + (1,))
        # Column m holds the Legendre coefficients of P_m'
        d_modes = leg.legder(np.eye(self.n_basis), axis=0)
        return leg.legvander(xi, self.degree - 1) @ d_modes @ self._modal

    def to_modal(self, coeffs: np.ndarray) -> np.ndarray:
        """Convert coefficients (last axis) to Legendre modal coefficients."""
        if self.is_modal:
            return coeffs.copy()
        return coeffs @ self._modal.T

    def from_modal(self, modes: np.ndarray) -> np.ndarray:
        """Convert Legendre modal coefficients (last axis) to this basis."""
        if self.is_modal:
            return modes.copy()
        return modes @ self._nodal.T

    def __repr__(self):
        return f"Basis(degree={self.degree}, kind='{self.kind}', n_quad={self.n_quad})"
