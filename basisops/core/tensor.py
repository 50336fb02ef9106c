"""
Tensor products of function sets and of operators.

"""

import numpy as np

from .sets import FunctionSet
from .grids import TensorProductGrid
from .gridspace import GridSpace
from .operators import Operator, MatrixOperator
from . import planner
from ..tools.array import apply_along_axis, apply_matrix
from ..tools.cache import CachedClass, CachedMethod
from ..tools.exceptions import CapabilityError, OperatorSizeError


__all__ = ['TensorProductSet',
           'TensorProductOperator']


class TensorProductSet(FunctionSet, metaclass=CachedClass):
    """
    Tensor product of one-dimensional sets.

    Parameters
    ----------
    *sets : FunctionSets
        Factor sets, one per dimension.

    Notes
    -----
    Coefficients are stored as arrays of shape (len(set_1), ..., len(set_d)),
    linearized in C order. Native indices are tuples of factor native indices.
    Resizing, derivative and antiderivative orders are given per dimension.
    """

    @classmethod
    def _preprocess_cache_args(cls, *sets):
        """Preprocess arguments into canonical form for caching. Must accept and return __init__ arguments."""
        if len(sets) < 2:
            raise ValueError("Tensor product sets require at least two factors.")
        for s in sets:
            if not isinstance(s, FunctionSet) or s.dim != 1:
                raise ValueError("Tensor product factors must be one-dimensional sets, got %r." %s)
        return sets

    def __init__(self, *sets):
        self.sets = sets
        self.dim = len(sets)
        self.size = int(np.prod([len(s) for s in sets]))
        self.dtype = np.result_type(*[s.dtype for s in sets])
        # Capabilities hold when they hold for all factors
        self.has_grid = all(s.has_grid for s in sets)
        self.has_extension = all(s.has_extension for s in sets)
        self.has_derivative = all(s.has_derivative for s in sets)
        self.has_antiderivative = all(s.has_antiderivative for s in sets)
        self.is_orthogonal = all(s.is_orthogonal for s in sets)
        self.is_basis = all(s.is_basis for s in sets)

    def __repr__(self):
        return "TensorProductSet(%s)" %", ".join(repr(s) for s in self.sets)

    @property
    def shape(self):
        return tuple(len(s) for s in self.sets)

    def native_index(self, i):
        self.check_index(i)
        idx = np.unravel_index(i, self.shape)
        return tuple(s.native_index(int(j)) for s, j in zip(self.sets, idx))

    def linear_index(self, idxn):
        if len(idxn) != self.dim:
            raise IndexError("Native index %r does not match dimension %i." %(idxn, self.dim))
        idx = tuple(s.linear_index(k) for s, k in zip(self.sets, idxn))
        return int(np.ravel_multi_index(idx, self.shape))

    def _per_dimension(self, values):
        if np.isscalar(values) or len(values) != self.dim:
            raise ValueError("Expected one value per dimension, got %r." %(values,))
        return tuple(values)

    # Capabilities

    def compatible_grid(self, grid):
        if not isinstance(grid, TensorProductGrid) or len(grid.grids) != self.dim:
            return False
        return all(s.compatible_grid(g) for s, g in zip(self.sets, grid.grids))

    @CachedMethod
    def _native_grid(self):
        return TensorProductGrid(*[s.grid() for s in self.sets])

    def approx_length(self, shape):
        return tuple(s.approx_length(n) for s, n in zip(self.sets, self._per_dimension(shape)))

    def extension_size(self):
        return tuple(s.extension_size() for s in self.sets)

    def _resize(self, shape):
        shape = self._per_dimension(shape)
        return TensorProductSet(*[s if len(s) == n else s.resize(n) for s, n in zip(self.sets, shape)])

    def _with_dtype(self, dtype):
        return TensorProductSet(*[s.promote_dtype(dtype) for s in self.sets])

    def _derivative_set(self, orders):
        orders = self._per_dimension(orders)
        return TensorProductSet(*[s.derivative_set(o) if o else s for s, o in zip(self.sets, orders)])

    def _antiderivative_set(self, orders):
        orders = self._per_dimension(orders)
        return TensorProductSet(*[s.antiderivative_set(o) if o else s for s, o in zip(self.sets, orders)])

    def _evaluate(self, i, x):
        x = np.asarray(x, dtype=np.float64)
        if x.shape[-1] != self.dim:
            raise ValueError("Points of dimension %i required, got shape %s." %(self.dim, x.shape))
        idx = np.unravel_index(i, self.shape)
        result = np.ones(x.shape[:-1], dtype=self.dtype)
        for d, (s, j) in enumerate(zip(self.sets, idx)):
            result *= s.evaluate(int(j), x[..., d])
        return result

    # Operators

    def _factor_gridspaces(self, gridspace):
        return [GridSpace(g, gridspace.dtype) for g in gridspace.grid().grids]

    def transform_to_grid(self, gridspace):
        if not self.has_transform(gridspace):
            raise CapabilityError("%r has no transform to %r." %(self, gridspace))
        factors = self._factor_gridspaces(gridspace)
        ops = [planner.full_transform_operator(s, gs) for s, gs in zip(self.sets, factors)]
        return TensorProductOperator(*ops, src=self, dest=gridspace)

    def transform_from_grid(self, gridspace):
        if not self.has_transform(gridspace):
            raise CapabilityError("%r has no transform to %r." %(self, gridspace))
        factors = self._factor_gridspaces(gridspace)
        ops = [planner.grid_transform_operator(gs, s) for s, gs in zip(self.sets, factors)]
        return TensorProductOperator(*ops, src=gridspace, dest=self)

    def _check_family(self, other):
        if not isinstance(other, TensorProductSet) or other.dim != self.dim:
            raise CapabilityError("Cannot map %r to %r." %(self, other))

    def extension_to(self, dest):
        self._check_family(dest)
        ops = [planner.extension_operator(s, d) for s, d in zip(self.sets, dest.sets)]
        return TensorProductOperator(*ops, src=self, dest=dest)

    def restriction_to(self, dest):
        self._check_family(dest)
        ops = [planner.restriction_operator(s, d) for s, d in zip(self.sets, dest.sets)]
        return TensorProductOperator(*ops, src=self, dest=dest)

    def differentiation_to(self, dest, orders):
        self._check_family(dest)
        orders = self._per_dimension(orders)
        ops = []
        for s, d, o in zip(self.sets, dest.sets, orders):
            if o:
                ops.append(planner.differentiation_operator(s, d, o))
            else:
                ops.append(planner.extension_operator(s, d))
        return TensorProductOperator(*ops, src=self, dest=dest)

    def antidifferentiation_to(self, dest, orders):
        self._check_family(dest)
        orders = self._per_dimension(orders)
        ops = []
        for s, d, o in zip(self.sets, dest.sets, orders):
            if o:
                ops.append(planner.antidifferentiation_operator(s, d, o))
            else:
                ops.append(planner.extension_operator(s, d))
        return TensorProductOperator(*ops, src=self, dest=dest)


class TensorProductOperator(Operator):
    """
    Tensor product of one-dimensional operators, each acting along one axis.

    Parameters
    ----------
    *ops : Operators
        Factor operators, one per axis.
    src : FunctionSet, optional
        Source set (default: tensor product of the factor sources).
    dest : FunctionSet, optional
        Destination set (default: tensor product of the factor destinations).
    """

    def __init__(self, *ops, src=None, dest=None):
        if src is None:
            src = TensorProductSet(*[op.src for op in ops])
        if dest is None:
            dest = TensorProductSet(*[op.dest for op in ops])
        if tuple(src.shape) != tuple(len(op.src) for op in ops):
            raise OperatorSizeError("Source shape %s does not match factor operators." %(src.shape,))
        if tuple(dest.shape) != tuple(len(op.dest) for op in ops):
            raise OperatorSizeError("Destination shape %s does not match factor operators." %(dest.shape,))
        super().__init__(src, dest)
        self.ops = ops
        self.is_diagonal = all(op.is_diagonal for op in ops)

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype, *[op.dtype for op in self.ops])

    @staticmethod
    def _apply_axis(op, data, axis):
        """Apply a one-dimensional operator along one axis."""
        if isinstance(op, MatrixOperator):
            return apply_matrix(op.matrix, data, axis=axis)
        return apply_along_axis(op.apply, data, axis)

    def _apply(self, x, out):
        temp = x
        for axis, op in enumerate(self.ops):
            temp = self._apply_axis(op, temp, axis)
        np.copyto(out, temp)

    def transpose(self):
        return TensorProductOperator(*[op.transpose() for op in self.ops], src=self.dest, dest=self.src)

    def inverse(self):
        return TensorProductOperator(*[op.inverse() for op in self.ops], src=self.dest, dest=self.src)
