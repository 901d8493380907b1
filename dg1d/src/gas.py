"""
Gas properties for calorically perfect gas.
"""

from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass
class GasProperties:
    """Thermodynamic properties for a calorically perfect gas."""
    gamma: float = 1.4          # Ratio of specific heats

    def __post_init__(self):
        if self.gamma <= 1.0:
            raise ConfigurationError(f"gamma must be > 1, got {self.gamma}")
