"""
Boundary conditions for the DG solver.

A physical boundary supplies the exterior trace at the domain end; the
numerical flux then couples it with the interior trace like any other
interface. Periodic closure instead wraps the neighbour index.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Callable, Tuple

from .errors import ConfigurationError
from .physics import PhysicsModel, EulerEquations


class BoundaryCondition(ABC):
    """Abstract base class for boundary conditions."""

    periodic = False

    def check_compatible(self, physics: PhysicsModel):
        """Raise ConfigurationError if the condition does not apply to the physics."""
        pass

    @abstractmethod
    def exterior_state(self, U_in: np.ndarray, t: float, side: str) -> np.ndarray:
        """
        Exterior state at a domain boundary.

        Args:
            U_in: Interior state at the boundary (n_vars,)
            t: Time
            side: 'left' or 'right'

        Returns:
            Exterior state (n_vars,)
        """
        pass


class PeriodicBC(BoundaryCondition):
    """Wrap-around closure; the solver couples the first and last elements directly."""

    periodic = True

    def exterior_state(self, U_in, t, side):
        raise RuntimeError("Periodic boundaries have no exterior state")


class TransmissiveBC(BoundaryCondition):
    """Zero-gradient outflow: the exterior copies the interior."""

    def exterior_state(self, U_in, t, side):
        return U_in.copy()


class WallBC(BoundaryCondition):
    """
    Inviscid wall (slip): zero normal velocity.
    Reflects the momentum component.
    """

    def check_compatible(self, physics):
        if not isinstance(physics, EulerEquations):
            raise ConfigurationError("Wall boundaries are only defined for the Euler equations")

    def exterior_state(self, U_in, t, side):
        U_out = U_in.copy()
        U_out[1] = -U_in[1]  # Reflect momentum
        return U_out


class DirichletBC(BoundaryCondition):
    """Prescribed exterior state g(t)."""

    def __init__(self, state_func: Callable[[float], np.ndarray]):
        """
        Args:
            state_func: Function(t) -> exterior conserved state (n_vars,)
        """
        self.state_func = state_func

    def exterior_state(self, U_in, t, side):
        return np.asarray(self.state_func(t), dtype=float).reshape(U_in.shape)


BOUNDARY_KINDS = ('periodic', 'transmissive', 'wall', 'dirichlet')


def make_boundary_conditions(kind: str, xmin: float, xmax: float,
                             exact: Callable = None) -> Tuple[BoundaryCondition, BoundaryCondition]:
    """
    Build the (left, right) boundary pair for a named boundary kind.

    Args:
        kind: One of BOUNDARY_KINDS
        xmin, xmax: Domain bounds (Dirichlet data is sampled there)
        exact: Function(x, t) -> state (n_vars, len(x)); needed for 'dirichlet'
    """
    if kind == 'periodic':
        return PeriodicBC(), PeriodicBC()
    elif kind == 'transmissive':
        return TransmissiveBC(), TransmissiveBC()
    elif kind == 'wall':
        return WallBC(), WallBC()
    elif kind == 'dirichlet':
        if exact is None:
            raise ConfigurationError("Dirichlet boundaries need a test case with a known solution")

        def boundary_state(x):
            return lambda t: np.asarray(exact(np.array([x]), t), dtype=float).reshape(-1)

        return DirichletBC(boundary_state(xmin)), DirichletBC(boundary_state(xmax))
    raise ConfigurationError(f"Unknown boundary kind: {kind}. Options: {', '.join(BOUNDARY_KINDS)}")


def check_boundary_pair(bc_left: BoundaryCondition, bc_right: BoundaryCondition,
                        physics: PhysicsModel):
    """Validate a boundary pair at setup."""
    if bc_left.periodic != bc_right.periodic:
        raise ConfigurationError("Periodic boundaries must be applied on both sides")
    bc_left.check_compatible(physics)
    bc_right.check_compatible(physics)


def exterior_states(first: np.ndarray, last: np.ndarray, t: float,
                    bc_left: BoundaryCondition, bc_right: BoundaryCondition) -> Tuple[np.ndarray, np.ndarray]:
    """
    States beyond the two domain ends.

    Args:
        first: Interior state at the left end (n_vars,)
        last: Interior state at the right end (n_vars,)

    Returns:
        (state left of the domain, state right of the domain)
    """
    if bc_left.periodic:
        return last.copy(), first.copy()
    return bc_left.exterior_state(first, t, 'left'), bc_right.exterior_state(last, t, 'right')
