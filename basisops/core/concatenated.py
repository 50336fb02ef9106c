"""
Concatenations of function sets and block-diagonal operators.

"""

import numpy as np

from .sets import FunctionSet
from .operators import Operator
from ..tools.cache import CachedClass
from ..tools.exceptions import CapabilityError, OperatorSizeError


__all__ = ['ConcatenatedSet',
           'ConcatenatedOperator']


class ConcatenatedSet(FunctionSet, metaclass=CachedClass):
    """
    Union of the elements of two sets, those of set1 first.

    Native indices are pairs (part, index) with part 1 or 2. The union is in
    general not a basis, and it has no grid of its own.
    """

    @classmethod
    def _preprocess_cache_args(cls, set1, set2):
        """Preprocess arguments into canonical form for caching. Must accept and return __init__ arguments."""
        if set1.dim != set2.dim:
            raise ValueError("Concatenated sets must have equal dimensions.")
        return (set1, set2)

    def __init__(self, set1, set2):
        self.set1 = set1
        self.set2 = set2
        self.dim = set1.dim
        self.size = len(set1) + len(set2)
        self.dtype = np.result_type(set1.dtype, set2.dtype)
        self.has_derivative = set1.has_derivative and set2.has_derivative
        self.has_antiderivative = set1.has_antiderivative and set2.has_antiderivative

    def __repr__(self):
        return f"ConcatenatedSet({self.set1!r}, {self.set2!r})"

    def native_index(self, i):
        self.check_index(i)
        n1 = len(self.set1)
        if i < n1:
            return (1, self.set1.native_index(i))
        return (2, self.set2.native_index(i - n1))

    def linear_index(self, idxn):
        part, idx = idxn
        if part == 1:
            return self.set1.linear_index(idx)
        elif part == 2:
            return len(self.set1) + self.set2.linear_index(idx)
        raise IndexError("Native index %r has no part %r." %(idxn, part))

    def _with_dtype(self, dtype):
        return ConcatenatedSet(self.set1.promote_dtype(dtype), self.set2.promote_dtype(dtype))

    def _derivative_set(self, order):
        return ConcatenatedSet(self.set1.derivative_set(order), self.set2.derivative_set(order))

    def _antiderivative_set(self, order):
        return ConcatenatedSet(self.set1.antiderivative_set(order), self.set2.antiderivative_set(order))

    def _evaluate(self, i, x):
        n1 = len(self.set1)
        if i < n1:
            values = self.set1.evaluate(i, x)
        else:
            values = self.set2.evaluate(i - n1, x)
        return np.asarray(values, dtype=self.dtype)

    def _check_parts(self, dest):
        if not isinstance(dest, ConcatenatedSet):
            raise CapabilityError("Cannot map %r to %r." %(self, dest))

    def differentiation_to(self, dest, order=1):
        self._check_parts(dest)
        op1 = self.set1.differentiation_to(dest.set1, order)
        op2 = self.set2.differentiation_to(dest.set2, order)
        return ConcatenatedOperator(op1, op2, src=self, dest=dest)

    def antidifferentiation_to(self, dest, order=1):
        self._check_parts(dest)
        op1 = self.set1.antidifferentiation_to(dest.set1, order)
        op2 = self.set2.antidifferentiation_to(dest.set2, order)
        return ConcatenatedOperator(op1, op2, src=self, dest=dest)


class ConcatenatedOperator(Operator):
    """
    Block-diagonal direct sum of two operators.

    Parameters
    ----------
    op1, op2 : Operators
        Operators acting on the first and second parts.
    src : FunctionSet, optional
        Source set (default: concatenation of the operator sources).
    dest : FunctionSet, optional
        Destination set (default: concatenation of the operator destinations).
    """

    def __init__(self, op1, op2, src=None, dest=None):
        if src is None:
            src = ConcatenatedSet(op1.src, op2.src)
        if dest is None:
            dest = ConcatenatedSet(op1.dest, op2.dest)
        if len(src) != len(op1.src) + len(op2.src):
            raise OperatorSizeError("Source length %i does not match the blocks." %len(src))
        if len(dest) != len(op1.dest) + len(op2.dest):
            raise OperatorSizeError("Destination length %i does not match the blocks." %len(dest))
        super().__init__(src, dest)
        self.op1 = op1
        self.op2 = op2
        self.is_diagonal = op1.is_diagonal and op2.is_diagonal

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype, self.op1.dtype, self.op2.dtype)

    def _apply(self, x, out):
        n1, m1 = len(self.op1.src), len(self.op1.dest)
        x = x.reshape(-1)
        out = out.reshape(-1)
        self.op1.apply(x[:n1], out=out[:m1])
        self.op2.apply(x[n1:], out=out[m1:])

    def transpose(self):
        return ConcatenatedOperator(self.op1.transpose(), self.op2.transpose(), src=self.dest, dest=self.src)

    def inverse(self):
        return ConcatenatedOperator(self.op1.inverse(), self.op2.inverse(), src=self.dest, dest=self.src)
