"""
Linear advection test cases u_t + a u_x = 0 on [0, 1].

Exact solutions are the initial profile shifted by a*t (wrapped
periodically).
"""

import numpy as np

from .base import TestCase


def _shifted(x, t, physics):
    """Foot of the characteristic through (x, t), wrapped into [0, 1)."""
    return np.mod(x - physics.speed * t, 1.0)


def sine_wave(x, t, physics):
    return np.sin(2.0 * np.pi * _shifted(x, t, physics))


def square_wave(x, t, physics):
    xs = _shifted(x, t, physics)
    return np.where((xs > 0.25) & (xs < 0.75), 1.0, 0.0)


def constant_state(x, t, physics):
    return np.full_like(x, 1.0)


CASES = [
    TestCase('sine', 'advection', 0.0, 1.0, 'periodic', 1.0, sine_wave,
             description='sin(2 pi x), one period'),
    TestCase('sine_inflow', 'advection', 0.0, 1.0, 'dirichlet', 1.0, sine_wave,
             description='sin(2 pi x) with exact inflow/outflow boundary data'),
    TestCase('square', 'advection', 0.0, 1.0, 'periodic', 1.0, square_wave,
             description='square wave on (0.25, 0.75)'),
    TestCase('constant', 'advection', 0.0, 1.0, 'periodic', 1.0, constant_state,
             description='uniform state'),
]
