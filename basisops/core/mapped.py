"""
Function sets under coordinate maps.

A MappedSet holds a set and a map, with elements f(map.inverse_map(y)).
Operator requests involving mapped sets are answered by unwrapping to the
equivalent request between unmapped sets and relabeling the result.

"""

import numpy as np

from .sets import FunctionSet
from .grids import IndexSubGrid, MappedGrid, mapped_grid
from .gridspace import GridSpace
from .maps import IdentityMap, interval_map
from .operators import ScalingOperator, WrappedOperator, compose
from ..tools.exceptions import IncompatibleMapError, NonlinearMapError


__all__ = ['MappedSet',
           'mapped_set',
           'rescale',
           'unwrap',
           'unwrap_operator']


class MappedSet(FunctionSet):
    """
    Function set composed with an inverse coordinate map.

    Parameters
    ----------
    set : FunctionSet
        Inner set. Mapped sets are collapsed, so the inner set is never mapped.
    map : Map
        Map from the domain of the inner set to the new domain.
    """

    def __init__(self, set, map):
        # Collapse nested maps
        if isinstance(set, MappedSet):
            map = map * set.map
            set = set.set
        if set.dim != 1:
            raise ValueError("Only one-dimensional sets can be mapped.")
        self.set = set
        self.map = map
        self.size = set.size
        self.dtype = set.dtype
        # Capabilities follow the inner set
        self.has_grid = set.has_grid
        self.has_extension = set.has_extension
        self.has_derivative = set.has_derivative
        self.has_antiderivative = set.has_antiderivative
        self.is_orthogonal = set.is_orthogonal
        self.is_basis = set.is_basis

    def __repr__(self):
        return f"MappedSet({self.set!r}, {self.map!r})"

    def __eq__(self, other):
        if isinstance(other, MappedSet):
            return (self.set == other.set) and (self.map == other.map)
        return NotImplemented

    def __hash__(self):
        return hash((self.set, self.map))

    @property
    def support(self):
        if self.set.support is None:
            return None
        a, b = self.map.forward(np.array(self.set.support, dtype=np.float64))
        return (min(a, b), max(a, b))

    def native_index(self, i):
        return self.set.native_index(i)

    def linear_index(self, idxn):
        return self.set.linear_index(idxn)

    def _check_linear(self):
        if not self.map.is_linear:
            raise NonlinearMapError("Derivatives of %r require a linear map." %self)

    # Capabilities

    def has_transform(self, gridspace=None):
        if gridspace is None:
            return self.set.has_transform()
        return self.set.has_transform(unmap_gridspace(gridspace, self.map))

    def compatible_grid(self, grid):
        return self.set.compatible_grid(mapped_grid(grid, self.map.inv()))

    def embed_grid(self, grid):
        subgrid = self.set.embed_grid(mapped_grid(grid, self.map.inv()))
        if subgrid is None:
            return None
        return IndexSubGrid(mapped_grid(subgrid.supergrid, self.map), subgrid.indices)

    def _native_grid(self):
        return mapped_grid(self.set.grid(), self.map)

    def _resize(self, size):
        return MappedSet(self.set.resize(size), self.map)

    def _with_dtype(self, dtype):
        return MappedSet(self.set.promote_dtype(dtype), self.map)

    def _derivative_set(self, order):
        self._check_linear()
        return MappedSet(self.set.derivative_set(order), self.map)

    def _antiderivative_set(self, order):
        self._check_linear()
        return MappedSet(self.set.antiderivative_set(order), self.map)

    def approx_length(self, n):
        return self.set.approx_length(n)

    def extension_size(self):
        return self.set.extension_size()

    def is_same_family(self, other):
        return isinstance(other, MappedSet) and self.set.is_same_family(other.set)

    def _evaluate(self, i, x):
        return self.set.evaluate(i, self.map.inverse_map(x))


def mapped_set(s, map):
    """Map a set, mapping the grid of grid spaces instead."""
    if isinstance(s, GridSpace):
        return GridSpace(mapped_grid(s.grid(), map), s.dtype)
    if map == IdentityMap():
        return s
    return MappedSet(s, map)


def rescale(s, a, b):
    """Map a set with known support affinely to the interval [a, b]."""
    if s.support is None:
        raise ValueError("Cannot rescale %r without a known support." %s)
    return mapped_set(s, interval_map(*s.support, a, b))


def unmap_gridspace(gs, map):
    """Grid space of the preimage of a grid under a map."""
    grid = gs.grid()
    if isinstance(grid, MappedGrid) and grid.map == map:
        grid = grid.grid
    else:
        grid = mapped_grid(grid, map.inv())
    return GridSpace(grid, gs.dtype)


def _unwrap_map(s):
    if isinstance(s, MappedSet):
        return s.map
    return IdentityMap()


def unwrap(src, dest):
    """
    Strip maps from a pair of sets with matching maps.

    Grid spaces carry no map: the map of the other operand is pulled back
    onto their grid instead. Any other pair of differently mapped sets
    raises IncompatibleMapError.
    """
    if isinstance(dest, GridSpace) and isinstance(src, MappedSet):
        return src.set, unmap_gridspace(dest, src.map)
    if isinstance(src, GridSpace) and isinstance(dest, MappedSet):
        return unmap_gridspace(src, dest.map), dest.set
    src_map, dest_map = _unwrap_map(src), _unwrap_map(dest)
    if not src_map == dest_map:
        raise IncompatibleMapError("Cannot build operators between %r and %r." %(src, dest))
    return getattr(src, 'set', src), getattr(dest, 'set', dest)


def unwrap_operator(request, src, dest, *args):
    """Answer an operator request on the unmapped sets, relabeled with the mapped sets."""
    src0, dest0 = unwrap(src, dest)
    return WrappedOperator(src, dest, request(src0, dest0, *args))


def _map_jacobian(src):
    if isinstance(src, MappedSet):
        src._check_linear()
        return src.map.jacobian()
    return 1


def mapped_differentiation(request, src, dest, order):
    """Differentiation under a linear map, scaled by the jacobian to the power -order."""
    jac = _map_jacobian(src)
    src0, dest0 = unwrap(src, dest)
    D = request(src0, dest0, order)
    return WrappedOperator(src, dest, compose(ScalingOperator(D.dest, jac ** (-order)), D))


def mapped_antidifferentiation(request, src, dest, order):
    """Antidifferentiation under a linear map, scaled by the jacobian to the power order."""
    jac = _map_jacobian(src)
    src0, dest0 = unwrap(src, dest)
    A = request(src0, dest0, order)
    return WrappedOperator(src, dest, compose(ScalingOperator(A.dest, jac ** order), A))
