"""
Abstract function set interface and capability protocol.

"""

import numpy as np

from ..tools.exceptions import CapabilityError, OperatorSizeError


__all__ = ['FunctionSet',
           'promote']


class FunctionSet:
    """
    Abstract base class for finite, ordered sets of functions.

    Capability flags are plain attributes fixed at construction. A flag that
    is True obligates the corresponding primitive to succeed:

        has_grid            -> grid()
        has_extension       -> resize(), extension_to(), restriction_to()
        has_derivative      -> derivative_set(), differentiation_to()
        has_antiderivative  -> antiderivative_set(), antidifferentiation_to()
        has_transform(gs)   -> transform_to_grid(gs), transform_from_grid(gs)

    Subclasses must set `size` and `dtype` and implement `_evaluate`.
    Coefficient arrays are addressed by 0-based linear indices; native
    indices are whatever is closest to the mathematical definition.
    """

    dim = 1
    has_grid = False
    has_extension = False
    has_derivative = False
    has_antiderivative = False
    is_orthogonal = False
    is_basis = False
    support = None

    def __len__(self):
        return self.size

    @property
    def shape(self):
        """Native shape of coefficient arrays."""
        return (self.size,)

    @property
    def is_real(self):
        return not np.issubdtype(self.dtype, np.complexfloating)

    def zeros(self):
        return np.zeros(self.shape, dtype=self.dtype)

    def linearize(self, coeffs):
        """Flatten native coefficients to a linear vector."""
        coeffs = np.asarray(coeffs)
        if coeffs.size != self.size:
            raise OperatorSizeError("Expected %i coefficients, got %i." %(self.size, coeffs.size))
        return coeffs.reshape(-1)

    def delinearize(self, vector):
        """Reshape a linear vector to native coefficients."""
        vector = np.asarray(vector)
        if vector.size != self.size:
            raise OperatorSizeError("Expected %i coefficients, got %i." %(self.size, vector.size))
        return vector.reshape(self.shape)

    def check_index(self, i):
        if not (0 <= i < self.size):
            raise IndexError("Index %i out of range for %r." %(i, self))

    def native_index(self, i):
        """Native index of linear index i."""
        self.check_index(i)
        return i

    def linear_index(self, idxn):
        """Linear index of native index idxn."""
        self.check_index(idxn)
        return idxn

    # Capabilities

    def has_transform(self, gridspace=None):
        """Whether a fast transform exists to the given grid space, or to the native grid."""
        if gridspace is None:
            return self.has_grid and self.compatible_grid(self.grid())
        return self.compatible_grid(gridspace.grid())

    def compatible_grid(self, grid):
        """Whether a fast transform exists between the set and a grid."""
        return False

    def embed_grid(self, grid):
        """Express a grid as a sub-grid of a grid with a fast transform, if possible."""
        return None

    def _require(self, flag, name):
        if not getattr(self, flag):
            raise CapabilityError("%r does not support %s." %(self, name))

    def grid(self):
        """Native interpolation grid."""
        self._require('has_grid', 'grid')
        return self._native_grid()

    def resize(self, size):
        """Set of the same family with a different length."""
        self._require('has_extension', 'resizing')
        return self._resize(size)

    def derivative_set(self, order=1):
        self._require('has_derivative', 'differentiation')
        return self._derivative_set(order)

    def antiderivative_set(self, order=1):
        self._require('has_antiderivative', 'antidifferentiation')
        return self._antiderivative_set(order)

    def approx_length(self, n):
        """Smallest supported length at least n."""
        return n

    def extension_size(self):
        """Default length for extensions."""
        return 2 * self.size

    def promote_dtype(self, dtype):
        """Same-family set with coefficient type widened to include dtype."""
        dtype = np.result_type(self.dtype, dtype)
        if dtype == self.dtype:
            return self
        return self._with_dtype(dtype)

    def _with_dtype(self, dtype):
        raise NotImplementedError("%s has not implemented '_with_dtype' method" %type(self))

    def is_same_family(self, other):
        return type(self) is type(other)

    # Evaluation

    def evaluate(self, i, x):
        """Evaluate the element with linear index i at point(s) x."""
        self.check_index(i)
        return self._evaluate(i, x)

    def evaluate_native(self, idxn, x):
        """Evaluate the element with native index idxn at point(s) x."""
        return self.evaluate(self.linear_index(idxn), x)

    def _evaluate(self, i, x):
        raise NotImplementedError("%s has not implemented '_evaluate' method" %type(self))

    def evaluate_expansion(self, coeffs, x):
        """Evaluate the expansion with given coefficients at point(s) or on a grid."""
        from .grids import Grid
        from .planner import evaluation_operator
        coeffs = self.linearize(coeffs)
        if isinstance(x, Grid):
            return evaluation_operator(self, x).apply(coeffs)
        x = np.asarray(x)
        terms = [coeffs[i] * self.evaluate(i, x) for i in range(self.size)]
        return np.sum(terms, axis=0)

    def __repr__(self):
        return f"{type(self).__name__}({self.size})"


def promote(*sets):
    """Promote sets to a common coefficient type."""
    dtype = np.result_type(*[s.dtype for s in sets])
    return tuple(s.promote_dtype(dtype) for s in sets)
