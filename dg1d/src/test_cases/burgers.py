"""
Burgers test cases u_t + (u²/2)_x = 0.
"""

import numpy as np

from .base import TestCase


def _characteristics(x, t, u0, du0):
    """Solve u = u0(x - u t) with Newton iterations (valid before any shock forms)."""
    u = u0(x)
    if t == 0.0:
        return u
    for _ in range(100):
        s = x - u * t
        u_new = u - (u - u0(s)) / (1.0 + t * du0(s))
        converged = np.max(np.abs(u_new - u)) < 1e-14
        u = u_new
        if converged:
            break
    return u


def burgers_sine(x, t, physics):
    """
    u0(x) = 0.25 + 0.5 sin(pi x) on [-1, 1]; exact until the shock forms at
    t = 2/pi.
    """
    return _characteristics(x, t,
                            lambda s: 0.25 + 0.5 * np.sin(np.pi * s),
                            lambda s: 0.5 * np.pi * np.cos(np.pi * s))


# Small high-frequency ripple on a uniform flow
RIPPLE_AMPLITUDE = 1e-3
RIPPLE_WAVENUMBER = 40 * np.pi


def burgers_ripple(x, t, physics):
    """
    u0(x) = 1 + 1e-3 sin(40 pi x) on [0, 1]; exact until t = 1 / (0.04 pi).

    The wave speed is nearly uniform, so the nominal CFL number is the local
    one in every element.
    """
    a, k = RIPPLE_AMPLITUDE, RIPPLE_WAVENUMBER
    return _characteristics(x, t,
                            lambda s: 1.0 + a * np.sin(k * s),
                            lambda s: a * k * np.cos(k * s))


def burgers_constant(x, t, physics):
    return np.full_like(x, 0.5)


CASES = [
    TestCase('burgers_sine', 'burgers', -1.0, 1.0, 'periodic', 0.3, burgers_sine,
             description='smooth sine, exact before shock formation (t < 2/pi)'),
    TestCase('burgers_ripple', 'burgers', 0.0, 1.0, 'periodic', 1.0, burgers_ripple,
             description='uniform flow with a small ripple; CFL stability checks'),
    TestCase('burgers_constant', 'burgers', 0.0, 1.0, 'periodic', 1.0, burgers_constant,
             description='uniform state'),
]
