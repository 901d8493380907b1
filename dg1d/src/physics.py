"""
Physical models: conserved variables, physical flux and wave speeds.

All methods take conserved-variable arrays with the variable index on the
first axis and any trailing shape (faces, elements x quadrature points, ...).
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Tuple

from .errors import ConfigurationError
from .gas import GasProperties
from .state import FlowState


class PhysicsModel(ABC):
    """Abstract base class for a hyperbolic conservation law u_t + f(u)_x = 0."""

    n_vars: int = 1
    var_names: Tuple[str, ...] = ('u',)

    @abstractmethod
    def flux(self, U: np.ndarray) -> np.ndarray:
        """Physical flux f(U), same shape as U."""
        pass

    @abstractmethod
    def max_wave_speed(self, U: np.ndarray) -> np.ndarray:
        """Largest characteristic speed magnitude, shape U.shape[1:]."""
        pass

    def admissible(self, U: np.ndarray) -> np.ndarray:
        """Mask of physically valid states, shape U.shape[1:]."""
        return np.all(np.isfinite(U), axis=0)


class ScalarModel(PhysicsModel):
    """Scalar conservation law with a known characteristic speed f'(u)."""

    @abstractmethod
    def characteristic_speed(self, U: np.ndarray) -> np.ndarray:
        """f'(u), shape U.shape[1:]."""
        pass

    def max_wave_speed(self, U: np.ndarray) -> np.ndarray:
        return np.abs(self.characteristic_speed(U))


class LinearAdvection(ScalarModel):
    """u_t + a u_x = 0 with constant speed a."""

    def __init__(self, speed: float = 1.0):
        self.speed = float(speed)

    def flux(self, U: np.ndarray) -> np.ndarray:
        return self.speed * U

    def characteristic_speed(self, U: np.ndarray) -> np.ndarray:
        return np.full(U.shape[1:], self.speed)


class Burgers(ScalarModel):
    """Inviscid Burgers equation u_t + (u²/2)_x = 0."""

    def flux(self, U: np.ndarray) -> np.ndarray:
        return 0.5 * U**2

    def characteristic_speed(self, U: np.ndarray) -> np.ndarray:
        return U[0]


class EulerEquations(PhysicsModel):
    """
    Compressible Euler equations for a calorically perfect gas.

    Conserved variables [rho, rhoU, rhoE]; pressure closes through
    p = (gamma - 1) * (rhoE - 0.5 * rho * u²).
    """

    n_vars = 3
    var_names = ('rho', 'rhoU', 'rhoE')

    def __init__(self, gas: GasProperties = None):
        self.gas = gas if gas is not None else GasProperties()

    @property
    def gamma(self) -> float:
        return self.gas.gamma

    def state(self, U: np.ndarray) -> FlowState:
        """Primitive view of a conserved array."""
        return FlowState.from_array(U, self.gas)

    def from_primitives(self, rho, u, p) -> np.ndarray:
        """Conserved array from primitive variables."""
        return FlowState.from_primitives(rho, u, p, self.gas).to_array()

    def to_primitives(self, U: np.ndarray) -> np.ndarray:
        """Primitive array [rho, u, p]."""
        state = self.state(U)
        return np.stack([state.rho, state.u, state.p])

    def flux(self, U: np.ndarray) -> np.ndarray:
        state = self.state(U)
        u = state.u
        p = state.p
        F = np.empty_like(U)
        F[0] = state.rhoU
        F[1] = state.rhoU * u + p
        F[2] = (state.rhoE + p) * u
        return F

    def max_wave_speed(self, U: np.ndarray) -> np.ndarray:
        state = self.state(U)
        return np.abs(state.u) + state.a

    def admissible(self, U: np.ndarray) -> np.ndarray:
        valid = super().admissible(U)
        with np.errstate(divide='ignore', invalid='ignore'):
            state = self.state(U)
            valid &= (state.rho > 0)
            valid &= (state.p > 0)
        return valid


def get_physics(name: str, gas: GasProperties = None, advection_speed: float = 1.0) -> PhysicsModel:
    """Build a physics model from its name ('advection', 'burgers', 'euler')."""
    if name == 'advection':
        return LinearAdvection(advection_speed)
    elif name == 'burgers':
        return Burgers()
    elif name == 'euler':
        return EulerEquations(gas)
    raise ConfigurationError(f"Unknown physics: {name}. Options: 'advection', 'burgers', 'euler'")
