"""
Named test cases: linear advection, Burgers and Euler problems.
"""

from ..errors import ConfigurationError
from .base import TestCase
from . import advection, burgers, euler
from .euler import exact_riemann, star_state

TEST_CASES = {case.name: case
              for case in advection.CASES + burgers.CASES + euler.CASES}


def get_test_case(name: str) -> TestCase:
    """Look up a test case by name."""
    try:
        return TEST_CASES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown test case: {name}. Options: {', '.join(TEST_CASES)}") from None


__all__ = [
    'TestCase',
    'TEST_CASES',
    'get_test_case',
    'exact_riemann',
    'star_state',
]
