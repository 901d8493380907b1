"""
Flow state representation using conservative variables.

State is defined by:
    rho   - density
    rhoU  - momentum per volume
    rhoE  - total energy per volume

Arrays may carry any trailing shape: a single face, a row of cell averages,
or the (n_cells, n_points) values of a DG solution.
"""

import numpy as np
from dataclasses import dataclass

from .gas import GasProperties


@dataclass
class FlowState:
    """
    Represents the Euler flow state using conservative variables.

    Conservative variables (stored directly):
        rho  : Density
        rhoU : Momentum per volume
        rhoE : Total energy per volume

    Primitive variables (computed as properties):
        u, p, a, H, e, E
    """
    rho: np.ndarray
    rhoU: np.ndarray
    rhoE: np.ndarray
    gas: GasProperties

    # --- Primitive variables as properties ---

    @property
    def u(self) -> np.ndarray:
        """Velocity."""
        return self.rhoU / self.rho

    @property
    def p(self) -> np.ndarray:
        """Pressure from total energy."""
        # p = (gamma - 1) * (rhoE - 0.5 * rho * u²)
        return (self.gas.gamma - 1) * (self.rhoE - 0.5 * self.rhoU**2 / self.rho)

    @property
    def e(self) -> np.ndarray:
        """Specific internal energy."""
        return self.p / (self.rho * (self.gas.gamma - 1))

    @property
    def E(self) -> np.ndarray:
        """Total specific energy."""
        return self.rhoE / self.rho

    @property
    def H(self) -> np.ndarray:
        """Total specific enthalpy."""
        return self.E + self.p / self.rho

    @property
    def a(self) -> np.ndarray:
        """Speed of sound."""
        return np.sqrt(self.gas.gamma * self.p / self.rho)

    # --- Array conversion methods ---

    def to_array(self) -> np.ndarray:
        """
        Convert to conservative variable array.

        Returns:
            U: Array of shape (3,) + rho.shape, ordered [rho, rhoU, rhoE]
        """
        return np.stack([self.rho, self.rhoU, self.rhoE])

    @classmethod
    def from_array(cls, U: np.ndarray, gas: GasProperties) -> 'FlowState':
        """
        Create FlowState from conservative variable array.

        Args:
            U: Conservative variables [rho, rhoU, rhoE] along the first axis
            gas: Gas properties
        """
        return cls(rho=U[0], rhoU=U[1], rhoE=U[2], gas=gas)

    @classmethod
    def from_primitives(cls, rho: np.ndarray, u: np.ndarray, p: np.ndarray,
                        gas: GasProperties) -> 'FlowState':
        """
        Create FlowState from primitive variables.

        Args:
            rho: Density
            u: Velocity
            p: Pressure
            gas: Gas properties
        """
        rho, u, p = np.broadcast_arrays(np.asarray(rho, dtype=float),
                                        np.asarray(u, dtype=float),
                                        np.asarray(p, dtype=float))
        rhoU = rho * u
        # rhoE = p / (gamma - 1) + 0.5 * rho * u²
        rhoE = p / (gas.gamma - 1) + 0.5 * rho * u**2

        return cls(rho=rho, rhoU=rhoU, rhoE=rhoE, gas=gas)
