"""
Slope limiters for shock capturing.

Limiting only rewrites polynomial modes of order >= 1, so element averages
(and therefore conservation) are untouched.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import List

from .errors import ConfigurationError
from .physics import PhysicsModel, EulerEquations
from .solution import DGSolution

# Density and pressure are kept above this fraction of their element averages
POS_TOL = 1e-8


def minmod(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """Smallest-magnitude argument when all three share a sign, else zero."""
    s = np.sign(a)
    same_sign = (s == np.sign(b)) & (s == np.sign(c))
    smallest = np.minimum(np.abs(a), np.minimum(np.abs(b), np.abs(c)))
    return np.where(same_sign, s * smallest, 0.0)


def tvb_minmod(a: np.ndarray, b: np.ndarray, c: np.ndarray, bound: np.ndarray) -> np.ndarray:
    """Modified minmod: deviations below the TVB bound M dx² pass unchanged."""
    return np.where(np.abs(a) <= bound, a, minmod(a, b, c))


class Limiter(ABC):
    """Abstract base class for limiters."""

    @abstractmethod
    def apply(self, solution: DGSolution, avg_left: np.ndarray, avg_right: np.ndarray):
        """
        Limit the solution in place.

        Args:
            solution: DG solution to modify
            avg_left: Average of the neighbour left of element 0 (n_vars,)
            avg_right: Average of the neighbour right of the last element (n_vars,)
        """
        pass


class NoLimiter(Limiter):
    """Leaves the solution untouched."""

    def apply(self, solution, avg_left, avg_right):
        pass


class MinmodLimiter(Limiter):
    """
    Cockburn-Shu TVB minmod limiter.

    Face deviations u(±1) - ū of each element are compared with the forward
    and backward differences of neighbouring averages. Where either face
    value would change, the element is reduced to a limited linear
    polynomial: a1 = minmod(a1, Δ+ū, Δ-ū) and all higher modes are zeroed.
    Deviations smaller than M dx² are accepted as smooth extrema (TVB);
    M = 0 gives the strict TVD limiter.

    Each variable is limited component-wise on the conserved variables.
    """

    def __init__(self, tvb_m: float = 0.0):
        if tvb_m < 0:
            raise ConfigurationError(f"TVB constant must be non-negative, got {tvb_m}")
        self.tvb_m = tvb_m

    def apply(self, solution, avg_left, avg_right):
        basis = solution.basis
        if basis.degree == 0:
            return

        modes = solution.coeffs if basis.is_modal else basis.to_modal(solution.coeffs)
        avg = modes[..., 0]

        prev_avg = np.concatenate([avg_left[:, None], avg[:, :-1]], axis=1)
        next_avg = np.concatenate([avg[:, 1:], avg_right[:, None]], axis=1)
        d_fwd = next_avg - avg
        d_bwd = avg - prev_avg

        # P_m(1) = 1 and P_m(-1) = (-1)^m
        high = modes[..., 1:]
        signs = (-1.0) ** np.arange(2, basis.n_basis + 1)
        dev_right = high.sum(axis=-1)
        dev_left = high @ signs

        bound = self.tvb_m * solution.mesh.dx**2
        troubled = (tvb_minmod(dev_right, d_fwd, d_bwd, bound) != dev_right) | \
                   (tvb_minmod(dev_left, d_fwd, d_bwd, bound) != dev_left)
        if not np.any(troubled):
            return

        limited = high.copy()
        limited[troubled, 0] = minmod(high[..., 0], d_fwd, d_bwd)[troubled]
        limited[troubled, 1:] = 0.0

        if basis.is_modal:
            solution.coeffs[..., 1:] = limited
        else:
            modes[..., 1:] = limited
            solution.coeffs[...] = basis.from_modal(modes)


def _contract(solution: DGSolution, theta: np.ndarray, variables=slice(None)):
    """Scale the modes >= 1 of each element by theta, U <- Ū + θ (U - Ū)."""
    basis = solution.basis
    if basis.is_modal:
        solution.coeffs[variables][..., 1:] *= theta[:, None]
    else:
        modes = basis.to_modal(solution.coeffs[variables])
        modes[..., 1:] *= theta[:, None]
        solution.coeffs[variables] = basis.from_modal(modes)


class PositivityLimiter(Limiter):
    """
    Zhang-Shu positivity-preserving limiter for the Euler equations.

    Density and pressure are checked at the quadrature points and both faces
    of every element. Where either falls below POS_TOL times its element
    average, the element is contracted towards its average: first the
    density modes with

        θ1 = (ρ̄ - ε) / (ρ̄ - min ρ)

    then all variables with θ2 = min over the points of (p̄ - ε) / (p̄ - p).
    Pressure is concave in the conserved variables, so the linear estimate
    keeps p >= ε at every point. Elements whose averages are themselves
    inadmissible are left for the state check to report.

    Zhang, Shu, J. Comput. Phys. 229 (2010) 8918-8934.
    """

    def __init__(self, physics: PhysicsModel):
        if not isinstance(physics, EulerEquations):
            raise ConfigurationError("The positivity limiter is only defined for the Euler equations")
        self.physics = physics

    def apply(self, solution, avg_left, avg_right):
        if solution.basis.degree == 0:
            return

        avg = solution.cell_averages()
        left, right = solution.face_values()
        points = np.concatenate([solution.quad_values(), left[..., None], right[..., None]], axis=-1)

        rho_bar = avg[0]
        p_bar = self.physics.state(avg).p
        valid = (rho_bar > 0) & (p_bar > 0)

        # Limit density
        eps = POS_TOL * rho_bar
        rho_min = points[0].min(axis=-1)
        limit = valid & (rho_min < eps)
        if np.any(limit):
            theta1 = np.ones_like(rho_bar)
            theta1[limit] = (rho_bar[limit] - eps[limit]) / (rho_bar[limit] - rho_min[limit])
            _contract(solution, theta1, 0)
            points[0] = rho_bar[:, None] + theta1[:, None] * (points[0] - rho_bar[:, None])

        # Limit pressure
        eps = POS_TOL * p_bar
        with np.errstate(divide='ignore', invalid='ignore'):
            p = self.physics.state(points).p
            low = valid[:, None] & (p < eps[:, None])
            theta = np.where(low, (p_bar - eps)[:, None] / (p_bar[:, None] - p), 1.0)
        theta2 = np.clip(theta.min(axis=-1), 0.0, 1.0)
        if np.any(theta2 < 1.0):
            _contract(solution, theta2)


class ChainedLimiter(Limiter):
    """Applies several limiters in order."""

    def __init__(self, limiters: List[Limiter] = None):
        self.limiters = limiters if limiters is not None else []

    def add(self, limiter: Limiter):
        """Add a limiter at the end of the chain."""
        self.limiters.append(limiter)

    def apply(self, solution, avg_left, avg_right):
        for limiter in self.limiters:
            limiter.apply(solution, avg_left, avg_right)


LIMITERS = ('none', 'minmod')


def get_limiter(name: str, tvb_m: float = 0.0, positivity: bool = False,
                physics: PhysicsModel = None) -> Limiter:
    """
    Build a limiter by name ('none' or 'minmod').

    With positivity=True the positivity limiter runs after it; this needs the
    Euler physics model.
    """
    if name == 'none':
        limiter = NoLimiter()
    elif name == 'minmod':
        limiter = MinmodLimiter(tvb_m)
    else:
        raise ConfigurationError(f"Unknown limiter: {name}. Options: {', '.join(LIMITERS)}")

    if not positivity:
        return limiter
    if isinstance(limiter, NoLimiter):
        return PositivityLimiter(physics)
    return ChainedLimiter([limiter, PositivityLimiter(physics)])
