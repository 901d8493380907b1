"""
Numerical flux schemes coupling neighbouring elements at interfaces.

Every scheme receives the left/right boundary-extrapolated states of all
faces at once, shaped (n_vars, n_faces).
"""

import numpy as np
from abc import ABC, abstractmethod

from .errors import ConfigurationError
from .physics import PhysicsModel, ScalarModel, LinearAdvection, EulerEquations


class FluxScheme(ABC):
    """Abstract base class for numerical flux schemes."""

    name = None

    def check_compatible(self, physics: PhysicsModel):
        """Raise ConfigurationError if this scheme cannot handle the physics."""
        pass

    @abstractmethod
    def compute_flux_vectorized(self, UL: np.ndarray, UR: np.ndarray,
                                physics: PhysicsModel) -> np.ndarray:
        """
        Compute numerical fluxes at all faces.

        Args:
            UL: Left states (n_vars, n_faces)
            UR: Right states (n_vars, n_faces)
            physics: Physical model

        Returns:
            Fluxes at all faces (n_vars, n_faces)
        """
        pass

    def compute_flux(self, UL: np.ndarray, UR: np.ndarray,
                     physics: PhysicsModel) -> np.ndarray:
        """Single-face flux computation."""
        UL_2d = np.asarray(UL, dtype=float).reshape(-1, 1)
        UR_2d = np.asarray(UR, dtype=float).reshape(-1, 1)
        F_2d = self.compute_flux_vectorized(UL_2d, UR_2d, physics)
        return F_2d[:, 0]


def _entropy_fix(lam: np.ndarray, lam_L: np.ndarray, lam_R: np.ndarray) -> np.ndarray:
    """
    Harten-Hyman modification of |lambda|.

    Inside a transonic rarefaction (lam_L < 0 < lam_R) the Roe speed can
    vanish; |lambda| is then replaced by a parabola of width delta.
    """
    delta = np.maximum(0.0, np.maximum(lam - lam_L, lam_R - lam))
    abs_lam = np.abs(lam)
    fix = abs_lam < delta
    safe_delta = np.where(fix, delta, 1.0)
    return np.where(fix, 0.5 * (lam**2 / safe_delta + safe_delta), abs_lam)


class UpwindFlux(FluxScheme):
    """Exact upwinding for linear advection: take the state the wave comes from."""

    name = 'upwind'

    def check_compatible(self, physics: PhysicsModel):
        if not isinstance(physics, LinearAdvection):
            raise ConfigurationError("Upwind flux requires linear advection; use 'rusanov' or 'roe'")

    def compute_flux_vectorized(self, UL, UR, physics):
        a = physics.speed
        return a * (UL if a >= 0 else UR)


class CentralFlux(FluxScheme):
    """Average of the physical fluxes; no numerical dissipation."""

    name = 'central'

    def compute_flux_vectorized(self, UL, UR, physics):
        return 0.5 * (physics.flux(UL) + physics.flux(UR))


class RusanovFlux(FluxScheme):
    """
    Rusanov (Local Lax-Friedrichs) flux.

    F = 0.5 * (f(UL) + f(UR)) - 0.5 * smax * (UR - UL), where smax is the
    larger of the two sides' maximum wave speeds.
    """

    name = 'rusanov'

    def compute_flux_vectorized(self, UL, UR, physics):
        # Maximum wave speed from both sides
        smax = np.maximum(physics.max_wave_speed(UL), physics.max_wave_speed(UR))

        FL = physics.flux(UL)
        FR = physics.flux(UR)
        return 0.5 * (FL + FR) - 0.5 * smax * (UR - UL)


class RoeFlux(FluxScheme):
    """
    Roe approximate Riemann solver with Harten-Hyman entropy fix.

    Euler: Roe-averaged eigen-decomposition, fix applied to the acoustic
    fields. Scalar laws: Murman-Roe speed (f(uR) - f(uL)) / (uR - uL).
    """

    name = 'roe'

    def check_compatible(self, physics: PhysicsModel):
        if not isinstance(physics, (ScalarModel, EulerEquations)):
            raise ConfigurationError(f"Roe flux does not support {type(physics).__name__}")

    def compute_flux_vectorized(self, UL, UR, physics):
        if isinstance(physics, EulerEquations):
            return self._euler_flux(UL, UR, physics)
        return self._scalar_flux(UL, UR, physics)

    def _scalar_flux(self, UL, UR, physics):
        FL = physics.flux(UL)
        FR = physics.flux(UR)
        du = UR[0] - UL[0]
        aL = physics.characteristic_speed(UL)
        aR = physics.characteristic_speed(UR)

        jump = np.abs(du) > 1e-14
        safe_du = np.where(jump, du, 1.0)
        a_roe = np.where(jump, (FR[0] - FL[0]) / safe_du, 0.5 * (aL + aR))

        abs_a = _entropy_fix(a_roe, aL, aR)
        return 0.5 * (FL + FR) - 0.5 * abs_a * (UR - UL)

    def _euler_flux(self, UL, UR, physics):
        gm1 = physics.gamma - 1
        sL = physics.state(UL)
        sR = physics.state(UR)
        uL, pL, HL, aL = sL.u, sL.p, sL.H, sL.a
        uR, pR, HR, aR = sR.u, sR.p, sR.H, sR.a

        # Roe averages
        sqrt_rhoL = np.sqrt(sL.rho)
        sqrt_rhoR = np.sqrt(sR.rho)
        denom_inv = 1.0 / (sqrt_rhoL + sqrt_rhoR)
        u = (sqrt_rhoL * uL + sqrt_rhoR * uR) * denom_inv
        H = (sqrt_rhoL * HL + sqrt_rhoR * HR) * denom_inv
        c = np.sqrt(gm1 * (H - 0.5 * u**2))
        rho = sqrt_rhoL * sqrt_rhoR

        # Wave strengths (left eigenvectors applied to the jump)
        drho = sR.rho - sL.rho
        du = uR - uL
        dp = pR - pL
        c2 = c**2
        alpha1 = (dp - rho * c * du) / (2 * c2)
        alpha2 = drho - dp / c2
        alpha3 = (dp + rho * c * du) / (2 * c2)

        lam1 = _entropy_fix(u - c, uL - aL, uR - aR)
        lam2 = np.abs(u)
        lam3 = _entropy_fix(u + c, uL + aL, uR + aR)

        # Sum of |lambda_k| alpha_k r_k
        w1 = lam1 * alpha1
        w2 = lam2 * alpha2
        w3 = lam3 * alpha3
        D = np.empty_like(UL)
        D[0] = w1 + w2 + w3
        D[1] = w1 * (u - c) + w2 * u + w3 * (u + c)
        D[2] = w1 * (H - u * c) + w2 * 0.5 * u**2 + w3 * (H + u * c)

        return 0.5 * (physics.flux(UL) + physics.flux(UR)) - 0.5 * D


class HLLCFlux(FluxScheme):
    """
    HLLC approximate Riemann solver for the Euler equations.

    A robust and accurate flux scheme that resolves contact discontinuities.
    """

    name = 'hllc'

    def check_compatible(self, physics: PhysicsModel):
        if not isinstance(physics, EulerEquations):
            raise ConfigurationError("HLLC flux is only defined for the Euler equations")

    def compute_flux_vectorized(self, UL, UR, physics):
        gamma = physics.gamma
        gm1 = gamma - 1

        # Extract primitives from left state (vectorized)
        rhoL = UL[0]
        uL = UL[1] / rhoL
        EL = UL[2] / rhoL
        pL = gm1 * (UL[2] - 0.5 * rhoL * uL**2)
        aL = np.sqrt(gamma * pL / rhoL)
        HL = EL + pL / rhoL

        # Extract primitives from right state (vectorized)
        rhoR = UR[0]
        uR = UR[1] / rhoR
        ER = UR[2] / rhoR
        pR = gm1 * (UR[2] - 0.5 * rhoR * uR**2)
        aR = np.sqrt(gamma * pR / rhoR)
        HR = ER + pR / rhoR

        # Roe averages for wave speed estimates (vectorized)
        sqrt_rhoL = np.sqrt(rhoL)
        sqrt_rhoR = np.sqrt(rhoR)
        denom_inv = 1.0 / (sqrt_rhoL + sqrt_rhoR)

        u_roe = (sqrt_rhoL * uL + sqrt_rhoR * uR) * denom_inv
        H_roe = (sqrt_rhoL * HL + sqrt_rhoR * HR) * denom_inv
        a_roe = np.sqrt(gm1 * (H_roe - 0.5 * u_roe**2))

        # Wave speed estimates (vectorized)
        SL = np.minimum(uL - aL, u_roe - a_roe)
        SR = np.maximum(uR + aR, u_roe + a_roe)

        # Contact wave speed (vectorized)
        SM = (pR - pL + rhoL * uL * (SL - uL) - rhoR * uR * (SR - uR)) / \
             (rhoL * (SL - uL) - rhoR * (SR - uR))

        # Left flux everywhere, then overwrite by region
        rhoL_uL = rhoL * uL
        F = np.empty_like(UL)
        F[0] = rhoL_uL
        F[1] = rhoL_uL * uL + pL
        F[2] = rhoL_uL * HL

        mask_right = SR <= 0
        mask_star_left = (SM >= 0) & (SL < 0) & (SR > 0)
        mask_star_right = (SM < 0) & (SL < 0) & (SR > 0)

        if np.any(mask_right):
            rhoR_uR = rhoR[mask_right] * uR[mask_right]
            F[0, mask_right] = rhoR_uR
            F[1, mask_right] = rhoR_uR * uR[mask_right] + pR[mask_right]
            F[2, mask_right] = rhoR_uR * HR[mask_right]

        # Left star state correction: F* = F_L + SL * (U* - U_L)
        if np.any(mask_star_left):
            SL_m = SL[mask_star_left]
            uL_m = uL[mask_star_left]
            rhoL_m = rhoL[mask_star_left]
            SM_m = SM[mask_star_left]

            coeffL = rhoL_m * (SL_m - uL_m) / (SL_m - SM_m)

            dU0 = coeffL - rhoL_m
            dU1 = coeffL * SM_m - rhoL_m * uL_m
            dU2 = coeffL * (EL[mask_star_left] + (SM_m - uL_m) *
                            (SM_m + pL[mask_star_left] / (rhoL_m * (SL_m - uL_m)))) - UL[2, mask_star_left]

            F[0, mask_star_left] += SL_m * dU0
            F[1, mask_star_left] += SL_m * dU1
            F[2, mask_star_left] += SL_m * dU2

        # Right star state correction: F* = F_R + SR * (U* - U_R)
        if np.any(mask_star_right):
            SR_m = SR[mask_star_right]
            uR_m = uR[mask_star_right]
            rhoR_m = rhoR[mask_star_right]
            SM_m = SM[mask_star_right]

            coeffR = rhoR_m * (SR_m - uR_m) / (SR_m - SM_m)

            rhoR_uR_m = rhoR_m * uR_m
            dU0 = coeffR - rhoR_m
            dU1 = coeffR * SM_m - rhoR_m * uR_m
            dU2 = coeffR * (ER[mask_star_right] + (SM_m - uR_m) *
                            (SM_m + pR[mask_star_right] / (rhoR_m * (SR_m - uR_m)))) - UR[2, mask_star_right]

            F[0, mask_star_right] = rhoR_uR_m + SR_m * dU0
            F[1, mask_star_right] = rhoR_uR_m * uR_m + pR[mask_star_right] + SR_m * dU1
            F[2, mask_star_right] = rhoR_uR_m * HR[mask_star_right] + SR_m * dU2

        return F


FLUX_SCHEMES = {
    'upwind': UpwindFlux,
    'central': CentralFlux,
    'rusanov': RusanovFlux,
    'roe': RoeFlux,
    'hllc': HLLCFlux,
}


def get_flux_scheme(name: str) -> FluxScheme:
    """Build a numerical flux scheme by name."""
    try:
        return FLUX_SCHEMES[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown flux scheme: {name}. Options: {', '.join(FLUX_SCHEMES)}") from None
