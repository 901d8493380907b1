"""
Euler equation test cases and the exact Riemann solution.

Riemann problems (Sod, Lax) are validated against exact_riemann; the
Shu-Osher and blast wave problems only provide initial data.
"""

import numpy as np
from typing import Tuple

from ..errors import ConfigurationError
from .base import TestCase


def _pressure_function(p: float, rho_k: float, p_k: float, a_k: float,
                       gamma: float) -> Tuple[float, float]:
    """Velocity jump across a shock or rarefaction to star pressure p, and its derivative."""
    gm1 = gamma - 1
    gp1 = gamma + 1
    if p > p_k:
        # Shock
        A = 2 / (gp1 * rho_k)
        B = gm1 / gp1 * p_k
        f = (p - p_k) * np.sqrt(A / (p + B))
        df = np.sqrt(A / (p + B)) * (1 - 0.5 * (p - p_k) / (p + B))
    else:
        # Rarefaction
        p_rat = p / p_k
        f = 2 * a_k / gm1 * (p_rat**(gm1 / (2 * gamma)) - 1)
        df = 1 / (rho_k * a_k) * p_rat**(-gp1 / (2 * gamma))
    return f, df


def star_state(left: Tuple[float, float, float], right: Tuple[float, float, float],
               gamma: float = 1.4, tol: float = 1e-12, max_iter: int = 100) -> Tuple[float, float]:
    """
    Pressure and velocity in the star region of a Riemann problem.

    Newton iteration on f_L(p) + f_R(p) + (u_R - u_L) = 0 from the
    primitive-variable (PVRS) guess.

    Args:
        left, right: Primitive states (rho, u, p)
        gamma: Specific heat ratio

    Returns:
        (p_star, u_star)
    """
    rho_L, u_L, p_L = left
    rho_R, u_R, p_R = right
    a_L = np.sqrt(gamma * p_L / rho_L)
    a_R = np.sqrt(gamma * p_R / rho_R)

    if 2 * (a_L + a_R) / (gamma - 1) <= u_R - u_L:
        raise ConfigurationError("Riemann data generates vacuum")

    p = 0.5 * (p_L + p_R) - 0.125 * (u_R - u_L) * (rho_L + rho_R) * (a_L + a_R)
    p = max(tol, p)

    for _ in range(max_iter):
        f_L, df_L = _pressure_function(p, rho_L, p_L, a_L, gamma)
        f_R, df_R = _pressure_function(p, rho_R, p_R, a_R, gamma)
        p_new = max(tol, p - (f_L + f_R + u_R - u_L) / (df_L + df_R))
        converged = abs(p_new - p) / (0.5 * (p_new + p)) < tol
        p = p_new
        if converged:
            break

    f_L, _ = _pressure_function(p, rho_L, p_L, a_L, gamma)
    f_R, _ = _pressure_function(p, rho_R, p_R, a_R, gamma)
    u = 0.5 * (u_L + u_R) + 0.5 * (f_R - f_L)
    return p, u


def exact_riemann(x: np.ndarray, t: float, left: Tuple[float, float, float],
                  right: Tuple[float, float, float], x0: float = 0.5,
                  gamma: float = 1.4) -> dict:
    """
    Exact solution of the Riemann problem for the Euler equations.

    Args:
        x: Position array
        t: Time
        left, right: Primitive states (rho, u, p) either side of x0
        x0: Position of the initial discontinuity
        gamma: Specific heat ratio

    Returns:
        Dictionary with exact solution: rho, u, p, e
    """
    x = np.asarray(x, dtype=float)
    rho_L, u_L, p_L = left
    rho_R, u_R, p_R = right
    gm1 = gamma - 1
    gp1 = gamma + 1
    g6 = gm1 / gp1

    rho = np.where(x < x0, rho_L, rho_R).astype(float)
    u = np.where(x < x0, u_L, u_R).astype(float)
    p = np.where(x < x0, p_L, p_R).astype(float)

    if t > 0:
        a_L = np.sqrt(gamma * p_L / rho_L)
        a_R = np.sqrt(gamma * p_R / rho_R)
        p_star, u_star = star_state(left, right, gamma)

        for i, xi in np.ndenumerate(x):
            # Self-similar coordinate
            s = (xi - x0) / t

            if s <= u_star:
                rho[i], u[i], p[i] = rho_L, u_L, p_L
                if p_star > p_L:
                    # Left shock
                    S_L = u_L - a_L * np.sqrt(gp1 / (2 * gamma) * p_star / p_L + gm1 / (2 * gamma))
                    if s > S_L:
                        rho[i] = rho_L * (p_star / p_L + g6) / (g6 * p_star / p_L + 1)
                        u[i] = u_star
                        p[i] = p_star
                else:
                    # Left rarefaction
                    head = u_L - a_L
                    tail = u_star - a_L * (p_star / p_L)**(gm1 / (2 * gamma))
                    if s > tail:
                        rho[i] = rho_L * (p_star / p_L)**(1 / gamma)
                        u[i] = u_star
                        p[i] = p_star
                    elif s > head:
                        c = 2 / gp1 * (a_L + 0.5 * gm1 * (u_L - s))
                        rho[i] = rho_L * (c / a_L)**(2 / gm1)
                        u[i] = 2 / gp1 * (a_L + 0.5 * gm1 * u_L + s)
                        p[i] = p_L * (c / a_L)**(2 * gamma / gm1)
            else:
                rho[i], u[i], p[i] = rho_R, u_R, p_R
                if p_star > p_R:
                    # Right shock
                    S_R = u_R + a_R * np.sqrt(gp1 / (2 * gamma) * p_star / p_R + gm1 / (2 * gamma))
                    if s < S_R:
                        rho[i] = rho_R * (p_star / p_R + g6) / (g6 * p_star / p_R + 1)
                        u[i] = u_star
                        p[i] = p_star
                else:
                    # Right rarefaction
                    head = u_R + a_R
                    tail = u_star + a_R * (p_star / p_R)**(gm1 / (2 * gamma))
                    if s < tail:
                        rho[i] = rho_R * (p_star / p_R)**(1 / gamma)
                        u[i] = u_star
                        p[i] = p_star
                    elif s < head:
                        c = 2 / gp1 * (a_R - 0.5 * gm1 * (u_R - s))
                        rho[i] = rho_R * (c / a_R)**(2 / gm1)
                        u[i] = 2 / gp1 * (-a_R + 0.5 * gm1 * u_R + s)
                        p[i] = p_R * (c / a_R)**(2 * gamma / gm1)

    # Compute internal energy
    e = p / (gm1 * rho)

    return {
        'rho': rho,
        'u': u,
        'p': p,
        'e': e
    }


def _riemann_case(left, right, x0=0.5):
    """State function of a Riemann problem, in conserved variables."""
    def solution(x, t, physics):
        exact = exact_riemann(x, t, left, right, x0, physics.gamma)
        return physics.from_primitives(exact['rho'], exact['u'], exact['p'])
    return solution


def density_wave(x, t, physics):
    """Density sine wave carried by uniform velocity and pressure."""
    rho = 1.0 + 0.2 * np.sin(2.0 * np.pi * (x - t))
    return physics.from_primitives(rho, 1.0, 1.0)


def shu_osher(x, t, physics):
    """Mach 3 shock running into a density sine wave."""
    post_shock = x < -4.0
    rho = np.where(post_shock, 3.857143, 1.0 + 0.2 * np.sin(5.0 * x))
    u = np.where(post_shock, 2.629369, 0.0)
    p = np.where(post_shock, 10.33333, 1.0)
    return physics.from_primitives(rho, u, p)


def blast_wave(x, t, physics):
    """Woodward-Colella interacting blast waves."""
    p = np.where(x < 0.1, 1000.0, np.where(x > 0.9, 100.0, 0.01))
    return physics.from_primitives(np.ones_like(x), 0.0, p)


def euler_constant(x, t, physics):
    return physics.from_primitives(np.ones_like(x), 0.5, 1.0)


SOD_LEFT = (1.0, 0.0, 1.0)
SOD_RIGHT = (0.125, 0.0, 0.1)
LAX_LEFT = (0.445, 0.698, 3.528)
LAX_RIGHT = (0.5, 0.0, 0.571)

CASES = [
    TestCase('density_wave', 'euler', 0.0, 1.0, 'periodic', 1.0, density_wave,
             description='density sine wave advected at u = 1'),
    TestCase('sod', 'euler', 0.0, 1.0, 'transmissive', 0.2,
             _riemann_case(SOD_LEFT, SOD_RIGHT),
             description="Sod's shock tube"),
    TestCase('lax', 'euler', 0.0, 1.0, 'transmissive', 0.13,
             _riemann_case(LAX_LEFT, LAX_RIGHT),
             description="Lax's shock tube"),
    TestCase('shu_osher', 'euler', -5.0, 5.0, 'transmissive', 1.8, shu_osher,
             has_exact=False, description='Shu-Osher shock/entropy wave interaction'),
    TestCase('blast_wave', 'euler', 0.0, 1.0, 'wall', 0.038, blast_wave,
             has_exact=False,
             description='Woodward-Colella blast waves between walls; degree >= 1 needs the '
                         'positivity limiter'),
    TestCase('euler_constant', 'euler', 0.0, 1.0, 'periodic', 1.0, euler_constant,
             description='uniform flow'),
]
