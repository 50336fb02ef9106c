"""
Grid classes: ordered, finite enumerations of sample points.

"""

import numpy as np

from .maps import AffineMap, IdentityMap
from ..tools.cache import CachedAttribute


__all__ = ['EquispacedGrid',
           'PeriodicEquispacedGrid',
           'MidpointEquispacedGrid',
           'ChebyshevGrid',
           'ScatteredGrid',
           'TensorProductGrid',
           'IndexSubGrid',
           'MappedGrid',
           'mapped_grid',
           'sample']


class Grid:
    """
    Abstract base class for grids.

    Subclasses must set the `size` attribute and implement `_build_points`.
    One-dimensional grids store points as a flat array; grids of higher
    dimension store an array of shape (size, dim) in C order of `shape`.
    """

    dim = 1

    def __len__(self):
        return self.size

    @property
    def shape(self):
        return (self.size,)

    @CachedAttribute
    def points(self):
        """Sample points."""
        points = np.asarray(self._build_points(), dtype=np.float64)
        points.flags.writeable = False
        return points

    def _build_points(self):
        raise NotImplementedError("%s has not implemented '_build_points' method" %type(self))

    def __getitem__(self, i):
        if not (-self.size <= i < self.size):
            raise IndexError("Grid index %i out of range for grid of size %i." %(i, self.size))
        return self.points[i]

    def __iter__(self):
        return iter(self.points)


class IntervalGrid(Grid):
    """Base class for one-dimensional grids on an interval [left, right]."""

    def __init__(self, size, left, right):
        size = int(size)
        if size <= 0:
            raise ValueError("Grid size must be positive.")
        if not left < right:
            raise ValueError("Grid bounds must be increasing.")
        self.size = size
        self.left = left
        self.right = right

    @property
    def length(self):
        return self.right - self.left

    def __repr__(self):
        return f"{type(self).__name__}({self.size}, {self.left}, {self.right})"


class EquispacedGrid(IntervalGrid):
    """Equispaced grid including both endpoints."""

    def __init__(self, size, left=0, right=1):
        super().__init__(size, left, right)

    @property
    def step(self):
        if self.size == 1:
            return self.length
        return self.length / (self.size - 1)

    def _build_points(self):
        return self.left + self.step * np.arange(self.size)


class PeriodicEquispacedGrid(IntervalGrid):
    """Equispaced grid including the left endpoint but not the right."""

    def __init__(self, size, left=0, right=1):
        super().__init__(size, left, right)

    @property
    def step(self):
        return self.length / self.size

    def _build_points(self):
        return self.left + self.step * np.arange(self.size)


class MidpointEquispacedGrid(IntervalGrid):
    """Equispaced grid of cell midpoints."""

    def __init__(self, size, left=0, right=1):
        super().__init__(size, left, right)

    @property
    def step(self):
        return self.length / self.size

    def _build_points(self):
        return self.left + self.step * (np.arange(self.size) + 1/2)


class ChebyshevGrid(IntervalGrid):
    """Chebyshev-Gauss (root) grid on [-1, 1], in increasing order."""

    def __init__(self, size):
        super().__init__(size, -1, 1)

    def _build_points(self):
        N = self.size
        return -np.cos(np.pi * (np.arange(N) + 1/2) / N)

    def __repr__(self):
        return f"ChebyshevGrid({self.size})"


class ScatteredGrid(Grid):
    """Grid of arbitrary one-dimensional points."""

    def __init__(self, points):
        points = np.ravel(np.asarray(points, dtype=np.float64))
        if points.size == 0:
            raise ValueError("Scattered grid must contain at least one point.")
        self.size = points.size
        self._points = points

    def _build_points(self):
        return self._points.copy()

    def __repr__(self):
        return f"ScatteredGrid({self.size} points)"


class TensorProductGrid(Grid):
    """Tensor product of one-dimensional grids."""

    def __init__(self, *grids):
        if len(grids) < 2:
            raise ValueError("Tensor product grids require at least two factors.")
        self.grids = tuple(grids)
        self.dim = sum(grid.dim for grid in grids)
        self.size = int(np.prod([grid.size for grid in grids]))

    @property
    def shape(self):
        return tuple(grid.size for grid in self.grids)

    def _build_points(self):
        mesh = np.meshgrid(*[grid.points for grid in self.grids], indexing='ij')
        return np.stack([m.ravel() for m in mesh], axis=-1)

    def __getitem__(self, i):
        if isinstance(i, tuple):
            i = np.ravel_multi_index(i, self.shape)
        return super().__getitem__(i)

    def __repr__(self):
        return "TensorProductGrid(%s)" %", ".join(repr(grid) for grid in self.grids)


class IndexSubGrid(Grid):
    """
    Subset of a supergrid selected by linear indices.

    Parameters
    ----------
    supergrid : Grid
        Grid holding the sample points; referenced, not copied.
    indices : array-like of ints
        Increasing linear indices into the supergrid.
    """

    def __init__(self, supergrid, indices):
        indices = np.asarray(indices, dtype=int).ravel()
        if indices.size == 0:
            raise ValueError("Sub-grid must select at least one point.")
        if indices.min() < 0 or indices.max() >= supergrid.size:
            raise IndexError("Sub-grid indices out of range for supergrid of size %i." %supergrid.size)
        if np.any(np.diff(indices) <= 0):
            raise ValueError("Sub-grid indices must be strictly increasing.")
        self.supergrid = supergrid
        self.indices = indices
        self.dim = supergrid.dim
        self.size = indices.size

    @property
    def points(self):
        return self.supergrid.points[self.indices]

    def __repr__(self):
        return f"IndexSubGrid({self.supergrid!r}, {self.size} indices)"


class MappedGrid(Grid):
    """Grid whose points are the image of another grid under a map."""

    def __init__(self, grid, map):
        if grid.dim != 1:
            raise ValueError("Only one-dimensional grids can be mapped.")
        self.grid = grid
        self.map = map
        self.size = grid.size

    def _build_points(self):
        return self.map.forward(self.grid.points)

    def __repr__(self):
        return f"MappedGrid({self.grid!r}, {self.map!r})"


# Interval grids whose type is preserved by increasing affine maps
_similar_grid_types = (EquispacedGrid, PeriodicEquispacedGrid, MidpointEquispacedGrid)


def mapped_grid(grid, map):
    """Image of a grid under a map, keeping regular grid types where possible."""
    if isinstance(map, AffineMap) and map == IdentityMap():
        return grid
    if isinstance(grid, MappedGrid):
        return mapped_grid(grid.grid, map * grid.map)
    if isinstance(grid, IndexSubGrid):
        return IndexSubGrid(mapped_grid(grid.supergrid, map), grid.indices)
    if isinstance(map, AffineMap) and map.a > 0 and type(grid) in _similar_grid_types:
        return type(grid)(grid.size, map.forward(grid.left).item(), map.forward(grid.right).item())
    return MappedGrid(grid, map)


def sample(grid, function, dtype=None):
    """Sample a function on a grid, returning an array of the grid shape."""
    points = grid.points
    if grid.dim == 1:
        values = function(points)
    else:
        values = function(*[points[:, i] for i in range(grid.dim)])
    return np.asarray(values, dtype=dtype).reshape(grid.shape)
