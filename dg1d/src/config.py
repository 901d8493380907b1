"""
Solver configuration: a flat dataclass validated before any setup, with
JSON persistence.
"""

import dataclasses
import json
import numpy as np
from dataclasses import dataclass

from .basis import BASIS_KINDS
from .boundary import BOUNDARY_KINDS
from .errors import ConfigurationError
from .flux import FLUX_SCHEMES
from .limiter import LIMITERS
from .test_cases import TEST_CASES
from .timestepping import SSP_SCHEMES, cfl_stability_bound


class AdvancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that understands dataclasses and numpy values."""

    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, np.generic):
            return o.item()
        if isinstance(o, np.ndarray):
            return o.tolist()
        return super().default(o)


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass
class SolverConfig:
    """Configuration for the 1D discontinuous Galerkin solver."""
    test_case: str = 'sine'
    degree: int = 1
    n_cells: int = 50
    cfl: float = 0.2
    final_time: float = None  # None: the test case's default
    basis: str = 'legendre'  # Options: 'legendre', 'gl', 'gll'
    n_quad: int = None  # None: degree + 2 Gauss points
    flux: str = 'rusanov'  # Options: 'upwind', 'central', 'rusanov', 'roe', 'hllc'
    limiter: str = 'none'  # Options: 'none', 'minmod'
    tvb_m: float = 0.0
    positivity: bool = False  # Euler: positivity-preserving limiter after the slope limiter
    time_scheme: str = 'rk3'  # Options: 'euler', 'rk2', 'rk3'
    boundary: str = None  # None: the test case's boundary kind
    gamma: float = 1.4
    advection_speed: float = 1.0
    max_iter: int = 1_000_000
    print_interval: int = 100
    output_interval: int = 0  # 0: output callback only at the end
    enforce_cfl_bound: bool = True  # Reject CFL above the linear stability limit
    growth_limit: float = 10.0  # Scalar laws: unstable once |u| exceeds this multiple of max |u0|; None disables

    def validate(self):
        """Raise ConfigurationError on the first invalid setting."""
        if not _is_int(self.degree) or self.degree < 0:
            raise ConfigurationError(f"Polynomial degree must be a non-negative integer, got {self.degree!r}")
        if not _is_int(self.n_cells) or self.n_cells <= 0:
            raise ConfigurationError(f"Number of cells must be a positive integer, got {self.n_cells!r}")
        if self.n_quad is not None and (not _is_int(self.n_quad) or self.n_quad < self.degree + 1):
            raise ConfigurationError(f"n_quad must be an integer >= degree + 1, got {self.n_quad!r}")

        for value, options, what in [(self.test_case, TEST_CASES, 'test case'),
                                     (self.basis, BASIS_KINDS, 'basis'),
                                     (self.flux, FLUX_SCHEMES, 'flux scheme'),
                                     (self.limiter, LIMITERS, 'limiter'),
                                     (self.time_scheme, SSP_SCHEMES, 'time scheme')]:
            if value not in options:
                raise ConfigurationError(f"Unknown {what}: {value}. Options: {', '.join(options)}")
        if self.boundary is not None and self.boundary not in BOUNDARY_KINDS:
            raise ConfigurationError(f"Unknown boundary kind: {self.boundary}. "
                                     f"Options: {', '.join(BOUNDARY_KINDS)}")

        if not 0 < self.cfl < 1:
            raise ConfigurationError(f"CFL number must lie in (0, 1), got {self.cfl}")
        if self.enforce_cfl_bound:
            bound = cfl_stability_bound(self.degree, self.time_scheme)
            if self.cfl > bound:
                raise ConfigurationError(
                    f"CFL {self.cfl} exceeds the stability limit {bound} for degree "
                    f"{self.degree} with {self.time_scheme}")

        if self.final_time is not None and not self.final_time > 0:
            raise ConfigurationError(f"Final time must be positive, got {self.final_time}")
        if self.tvb_m < 0:
            raise ConfigurationError(f"TVB constant must be non-negative, got {self.tvb_m}")
        if not self.gamma > 1:
            raise ConfigurationError(f"gamma must be greater than 1, got {self.gamma}")
        if not _is_int(self.max_iter) or self.max_iter <= 0:
            raise ConfigurationError(f"max_iter must be a positive integer, got {self.max_iter!r}")
        if self.print_interval < 0 or self.output_interval < 0:
            raise ConfigurationError("Print and output intervals must be non-negative")
        if self.growth_limit is not None and not self.growth_limit > 1:
            raise ConfigurationError(f"growth_limit must be greater than 1, got {self.growth_limit}")

    def replace(self, **changes) -> 'SolverConfig':
        """Copy with some fields changed."""
        return self.from_dict({**dataclasses.asdict(self), **changes})

    @classmethod
    def from_dict(cls, data: dict) -> 'SolverConfig':
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path) -> 'SolverConfig':
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a JSON object")
        return cls.from_dict(data)

    def to_json(self, path):
        with open(path, 'w') as f:
            json.dump(self, f, cls=AdvancedJSONEncoder, indent=4)
