"""
Tests for the 1D discontinuous Galerkin solver.

Run tests with pytest:
    pytest dg1d/tests/ -v

Or run individual test files:
    pytest dg1d/tests/test_advection.py -v
    pytest dg1d/tests/test_shock_tube.py -v
"""
