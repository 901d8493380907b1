"""
DG residual assembly, SSP Runge-Kutta time integration and timestep
computation.
"""

import numpy as np
from typing import Callable

from .basis import Basis
from .boundary import BoundaryCondition, exterior_states
from .errors import ConfigurationError, NumericalInstabilityError
from .flux import FluxScheme
from .mesh import Mesh1D
from .physics import PhysicsModel
from .solution import DGSolution


def compute_rhs(U: np.ndarray, t: float, mesh: Mesh1D, basis: Basis,
                physics: PhysicsModel, flux_scheme: FluxScheme,
                bc_left: BoundaryCondition, bc_right: BoundaryCondition,
                out: np.ndarray = None) -> np.ndarray:
    """
    Compute the right-hand side of dc/dt = RHS for the DG coefficients.

    Weak form on element j (reference coordinate xi, jacobian dx/2):
        (dx/2) M dc/dt = ∫ f(u) dφ/dξ dξ - [F̂_{j+1/2} φ(1) - F̂_{j-1/2} φ(-1)]

    Every interface flux is computed from U before anything is written to
    `out`, which must not alias U.

    Args:
        U: Coefficients (n_vars, n_cells, n_basis)
        t: Time (for time-dependent boundary data)
        mesh, basis, physics, flux_scheme: Discretization components
        bc_left, bc_right: Boundary conditions
        out: Optional output buffer, same shape as U

    Returns:
        RHS: Time derivative of the coefficients (n_vars, n_cells, n_basis)
    """
    # Volume term: quadrature of f(u) against basis derivatives
    f_quad = physics.flux(U @ basis.val_quad.T)
    volume = (f_quad * basis.quad_weights) @ basis.dval_quad

    # Boundary-extrapolated states on both sides of every face
    trace_left = U @ basis.val_left
    trace_right = U @ basis.val_right
    ext_left, ext_right = exterior_states(trace_left[:, 0], trace_right[:, -1],
                                          t, bc_left, bc_right)
    UL = np.concatenate([ext_left[:, None], trace_right], axis=1)
    UR = np.concatenate([trace_left, ext_right[:, None]], axis=1)

    # Fluxes at all faces (n_vars, n_cells + 1)
    F = flux_scheme.compute_flux_vectorized(UL, UR, physics)
    surface = F[:, 1:, None] * basis.val_right - F[:, :-1, None] * basis.val_left

    if out is None:
        out = np.empty_like(U)
    np.matmul(volume - surface, basis.inv_mass.T, out=out)
    out /= mesh.jacobian[None, :, None]
    return out


# Shu-Osher coefficients (a, b, c) of each stage:
#     u_i = a * u_0 + b * (u_{i-1} + dt * L(u_{i-1}, t + c * dt))
SSP_SCHEMES = {
    'euler': ((0.0, 1.0, 0.0),),
    'rk2': ((0.0, 1.0, 0.0),
            (0.5, 0.5, 1.0)),
    'rk3': ((0.0, 1.0, 0.0),
            (3.0 / 4.0, 1.0 / 4.0, 1.0),
            (1.0 / 3.0, 2.0 / 3.0, 0.5)),
}


class SSPRungeKutta:
    """
    Strong-stability-preserving explicit Runge-Kutta integrator.

    Stage buffers are allocated once. Each stage reads one buffer and writes
    the other, so the state being read is never overwritten during residual
    assembly.
    """

    def __init__(self, scheme: str, shape: tuple):
        """
        Args:
            scheme: 'euler' (1 stage), 'rk2' (SSP 2-stage) or 'rk3' (SSP 3-stage)
            shape: Shape of the coefficient array
        """
        if scheme not in SSP_SCHEMES:
            raise ConfigurationError(f"Unknown time scheme: {scheme}. "
                                     f"Options: {', '.join(SSP_SCHEMES)}")
        self.scheme = scheme
        self.stages = SSP_SCHEMES[scheme]

        self._u0 = np.empty(shape)
        self._buffers = (np.empty(shape), np.empty(shape))
        self._rhs = np.empty(shape)

    @property
    def n_stages(self) -> int:
        return len(self.stages)

    def step(self, U: np.ndarray, t: float, dt: float,
             rhs: Callable[[np.ndarray, float, np.ndarray], np.ndarray],
             post_stage: Callable[[np.ndarray, float], None] = None):
        """
        Advance U in place from t to t + dt.

        Args:
            U: Coefficients, overwritten with the new state
            t: Current time
            dt: Time step
            rhs: Function(U, t, out) writing the residual into out
            post_stage: Function(stage_state, stage_time) called after every
                        stage (limiting, admissibility checks); may modify
                        stage_state in place
        """
        np.copyto(self._u0, U)
        current = self._u0

        for i, (a, b, c) in enumerate(self.stages):
            target = self._buffers[i % 2]
            rhs(current, t + c * dt, self._rhs)

            np.multiply(self._rhs, dt, out=target)
            target += current
            target *= b
            if a:
                np.multiply(self._u0, a, out=self._rhs)
                target += self._rhs

            if post_stage is not None:
                next_c = self.stages[i + 1][2] if i + 1 < self.n_stages else 1.0
                post_stage(target, t + next_c * dt)
            current = target

        np.copyto(U, current)


# Linear stability limits of P^k DG with SSP Runge-Kutta
# (Cockburn & Shu, J. Sci. Comput. 16, 2001)
_CFL_TABLE = {
    'euler': {0: 1.0},
    'rk2': {0: 1.0, 1: 0.333},
    'rk3': {0: 1.256, 1: 0.409, 2: 0.209},
}


def cfl_stability_bound(degree: int, scheme: str = 'rk3') -> float:
    """
    Largest stable CFL number for degree k and the given SSP scheme.

    Outside the tabulated range the conservative estimate 1/(2k+1) is used.
    """
    if scheme not in _CFL_TABLE:
        raise ConfigurationError(f"Unknown time scheme: {scheme}. "
                                 f"Options: {', '.join(_CFL_TABLE)}")
    return _CFL_TABLE[scheme].get(degree, 1.0 / (2 * degree + 1))


def compute_timestep(solution: DGSolution, physics: PhysicsModel, cfl: float) -> float:
    """
    Compute time step based on CFL condition.

    dt = CFL * min_j (dx_j / s_j), where s_j is the largest wave speed at the
    quadrature points and faces of element j.

    Args:
        solution: Current DG solution
        physics: Physical model
        cfl: CFL number

    Returns:
        dt: Time step (inf if nothing moves)
    """
    left, right = solution.face_values()
    wave_speed = np.maximum(physics.max_wave_speed(solution.quad_values()).max(axis=-1),
                            np.maximum(physics.max_wave_speed(left),
                                       physics.max_wave_speed(right)))
    with np.errstate(divide='ignore'):
        dt_local = solution.mesh.dx / wave_speed
    return cfl * float(np.min(dt_local))


def check_state(solution: DGSolution, physics: PhysicsModel, t: float, max_abs: float = None):
    """
    Raise NumericalInstabilityError if the state is non-finite, larger than
    max_abs anywhere (when given), or inadmissible.

    Magnitude and admissibility (e.g. positive density and pressure) are
    checked at every quadrature point and at both element ends.
    """
    finite = np.isfinite(solution.coeffs)
    if not np.all(finite):
        var, elem, _ = np.argwhere(~finite)[0]
        raise NumericalInstabilityError(
            f"Non-finite coefficient in variable '{physics.var_names[var]}'",
            t, int(elem), int(var))

    left, right = solution.face_values()
    points = np.concatenate([solution.quad_values(), left[..., None], right[..., None]], axis=-1)
    if max_abs is not None:
        too_large = np.any(np.abs(points) > max_abs, axis=(0, 2))
        if np.any(too_large):
            raise NumericalInstabilityError(f"Solution magnitude exceeds {max_abs:.4e}",
                                            t, int(np.argmax(too_large)))

    valid = physics.admissible(points)
    if not np.all(valid):
        elem = int(np.argwhere(~np.all(valid, axis=-1))[0][0])
        raise NumericalInstabilityError("Inadmissible state (non-finite or non-positive "
                                        "density/pressure)", t, elem)
