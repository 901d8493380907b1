"""
1D mesh of non-overlapping elements covering [xmin, xmax].
"""

import numpy as np
from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass
class Mesh1D:
    """
    1D element mesh.

    Element i spans [x_faces[i], x_faces[i+1]]; its right neighbour is i+1.
    - x_faces: Face locations (n_cells + 1)
    - x_cells: Element centers (n_cells)
    - dx: Element widths (n_cells)
    - jacobian: dx/dxi = dx / 2 (n_cells)
    """
    x_faces: np.ndarray

    def __post_init__(self):
        self.x_faces = np.asarray(self.x_faces, dtype=float)
        if self.x_faces.ndim != 1 or len(self.x_faces) < 2:
            raise ConfigurationError("Mesh needs at least one element")
        if not np.all(np.diff(self.x_faces) > 0):
            raise ConfigurationError("Mesh faces must be strictly increasing")

        self.n_cells = len(self.x_faces) - 1
        self.x_cells = 0.5 * (self.x_faces[:-1] + self.x_faces[1:])
        self.dx = self.x_faces[1:] - self.x_faces[:-1]
        self.jacobian = 0.5 * self.dx

    @property
    def xmin(self) -> float:
        return self.x_faces[0]

    @property
    def xmax(self) -> float:
        return self.x_faces[-1]

    @classmethod
    def uniform(cls, x_min: float, x_max: float, n_cells: int) -> 'Mesh1D':
        """
        Create a uniform mesh.

        Args:
            x_min, x_max: Domain bounds
            n_cells: Number of elements
        """
        if isinstance(n_cells, bool) or not isinstance(n_cells, (int, np.integer)) or n_cells <= 0:
            raise ConfigurationError(f"Number of elements must be a positive integer, got {n_cells!r}")
        if not x_max > x_min:
            raise ConfigurationError(f"Empty domain [{x_min}, {x_max}]")
        x_faces = np.linspace(x_min, x_max, n_cells + 1)
        return cls(x_faces=x_faces)

    def physical_points(self, xi: np.ndarray) -> np.ndarray:
        """
        Map reference points into every element.

        Args:
            xi: Reference coordinates in [-1, 1], shape (n_points,)

        Returns:
            x: Physical coordinates, shape (n_cells, n_points)
        """
        xi = np.asarray(xi, dtype=float)
        return self.x_cells[:, None] + self.jacobian[:, None] * xi[None, :]
