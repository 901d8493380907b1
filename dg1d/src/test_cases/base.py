"""
Named test case definition.
"""

import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional

from ..physics import PhysicsModel


@dataclass
class TestCase:
    """
    A named problem: physics, domain, boundary closure and state function.

    solution(x, t, physics) returns the conserved state; when has_exact is
    False it is only meaningful at t = 0 (initial data).
    """
    __test__ = False  # not a pytest class

    name: str
    physics: str                # 'advection', 'burgers' or 'euler'
    xmin: float
    xmax: float
    boundary: str               # 'periodic', 'transmissive', 'wall' or 'dirichlet'
    final_time: float
    solution: Callable[[np.ndarray, float, PhysicsModel], np.ndarray]
    has_exact: bool = True
    description: str = ''

    def initial_condition(self, physics: PhysicsModel) -> Callable:
        """Initial state as a function f(x, t)."""
        return lambda x, t: self.solution(x, 0.0, physics)

    def exact_solution(self, physics: PhysicsModel) -> Optional[Callable]:
        """Exact state f(x, t), or None if the case has no closed form."""
        if not self.has_exact:
            return None
        return lambda x, t: self.solution(x, t, physics)
