"""Grid spaces: grids treated as sets of point-evaluation functionals."""

import numpy as np

from .sets import FunctionSet
from .grids import Grid


__all__ = ['GridSpace',
           'gridspace']


class GridSpace(FunctionSet):
    """
    Function set of delta-like evaluation functionals on a grid.

    Parameters
    ----------
    grid : Grid
        Sample points.
    dtype : dtype, optional
        Element type of sampled values (default: float64).
    """

    has_grid = True
    is_basis = True

    def __init__(self, grid, dtype=np.float64):
        if not isinstance(grid, Grid):
            raise ValueError("GridSpace requires a Grid, got %r." %grid)
        self._grid = grid
        self.dtype = np.dtype(dtype)
        self.size = grid.size
        self.dim = grid.dim

    @property
    def shape(self):
        return self._grid.shape

    def _native_grid(self):
        return self._grid

    def native_index(self, i):
        self.check_index(i)
        if len(self.shape) == 1:
            return i
        return tuple(int(j) for j in np.unravel_index(i, self.shape))

    def linear_index(self, idxn):
        if isinstance(idxn, tuple):
            idxn = int(np.ravel_multi_index(idxn, self.shape))
        self.check_index(idxn)
        return idxn

    def _with_dtype(self, dtype):
        return GridSpace(self._grid, dtype)

    def _evaluate(self, i, x):
        point = self._grid.points[i]
        x = np.asarray(x, dtype=np.float64)
        if self.dim > 1:
            return np.all(np.isclose(x, point), axis=-1).astype(self.dtype)
        return np.isclose(x, point).astype(self.dtype)

    def __eq__(self, other):
        if isinstance(other, GridSpace):
            return self._grid is other._grid and self.dtype == other.dtype
        return NotImplemented

    def __hash__(self):
        return hash((id(self._grid), self.dtype))

    def __repr__(self):
        return f"GridSpace({self._grid!r}, {self.dtype})"


def gridspace(grid, dtype=np.float64):
    """Wrap a grid as a GridSpace, passing grid spaces through."""
    if isinstance(grid, GridSpace):
        return grid.promote_dtype(dtype)
    return GridSpace(grid, dtype)
