"""
Linear operators between function sets.

Operators map coefficient arrays of a source set to coefficient arrays of a
destination set. The action of an operator is defined by its primitives:

    _apply(x, out)                  out-of-place application
    _apply_inplace(y)               in-place application (if is_inplace)
    _apply_transpose(x, out)        conjugate-transposed application
    _apply_inverse(x, out)          inverse application

Missing primitives raise UnimplementedPrimitiveError when applied, so that
transposes and inverses can always be constructed.

"""

import numpy as np
import scipy.linalg
from scipy import sparse
from scipy.sparse import linalg as spla

from ..tools.array import apply_matrix, real_view_apply
from ..tools.cache import CachedAttribute
from ..tools.exceptions import OperatorSizeError, SingularOperatorError, UnimplementedPrimitiveError

import logging
logger = logging.getLogger(__name__.split('.')[-1])


__all__ = ['IdentityOperator',
           'ScalingOperator',
           'ZeroOperator',
           'DiagonalOperator',
           'MatrixOperator',
           'FunctionOperator',
           'IndexRestrictionOperator',
           'IndexExtensionOperator',
           'WrappedOperator',
           'CompositeOperator',
           'TripleCompositeOperator',
           'OperatorSum',
           'OperatorTranspose',
           'OperatorInverse',
           'compose',
           'matrix',
           'diagonal',
           'inv_diagonal',
           'apply_multiple']


class Operator:
    """
    Abstract base class for linear operators.

    Parameters
    ----------
    src : FunctionSet
        Source set.
    dest : FunctionSet
        Destination set.

    Notes
    -----
    The shape of an operator is (len(dest), len(src)), as for its matrix.
    The element type is the promotion of the source and destination types.
    """

    is_inplace = False
    is_diagonal = False

    def __init__(self, src, dest):
        self.src = src
        self.dest = dest

    @property
    def shape(self):
        return (len(self.dest), len(self.src))

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype)

    def __repr__(self):
        return f"{type(self).__name__}({self.src!r} -> {self.dest!r})"

    # Application

    def apply(self, x, out=None):
        """
        Apply operator to coefficients.

        Parameters
        ----------
        x : array-like
            Source coefficients with len(src) entries.
        out : ndarray, optional
            Contiguous output array with len(dest) entries.

        Returns
        -------
        Destination coefficients in the native shape of the destination set.
        """
        x = np.asarray(x)
        if x.size != len(self.src):
            raise OperatorSizeError("%r expects %i coefficients, got %i." %(self, len(self.src), x.size))
        x = x.reshape(self.src.shape)
        if out is None:
            out = np.zeros(self.dest.shape, dtype=np.result_type(self.dtype, x.dtype))
        else:
            if out.size != len(self.dest):
                raise OperatorSizeError("%r produces %i coefficients, output has %i." %(self, len(self.dest), out.size))
            out = out.reshape(self.dest.shape)
        if self.is_inplace:
            np.copyto(out, x.reshape(out.shape))
            self._apply_inplace(out)
        else:
            self._apply(x, out)
        return out

    def apply_inplace(self, y):
        """Apply operator in place, for operators with equal source and destination lengths."""
        if not self.is_inplace:
            raise UnimplementedPrimitiveError("%s has no in-place primitive." %type(self).__name__)
        if y.size != len(self.src):
            raise OperatorSizeError("%r expects %i coefficients, got %i." %(self, len(self.src), y.size))
        self._apply_inplace(y.reshape(self.dest.shape))
        return y

    def __call__(self, x, out=None):
        return self.apply(x, out=out)

    def _apply(self, x, out):
        raise UnimplementedPrimitiveError("%s has not implemented 'apply' primitive" %type(self).__name__)

    def _apply_inplace(self, y):
        raise UnimplementedPrimitiveError("%s has not implemented 'apply_inplace' primitive" %type(self).__name__)

    def _apply_transpose(self, x, out):
        raise UnimplementedPrimitiveError("%s has not implemented 'transpose' primitive" %type(self).__name__)

    def _apply_transpose_inplace(self, y):
        raise UnimplementedPrimitiveError("%s has not implemented in-place 'transpose' primitive" %type(self).__name__)

    def _apply_inverse(self, x, out):
        raise UnimplementedPrimitiveError("%s has not implemented 'inverse' primitive" %type(self).__name__)

    def _apply_inverse_inplace(self, y):
        raise UnimplementedPrimitiveError("%s has not implemented in-place 'inverse' primitive" %type(self).__name__)

    # Algebra

    def transpose(self):
        """Conjugate transpose."""
        return OperatorTranspose(self)

    @property
    def T(self):
        return self.transpose()

    def inverse(self):
        return OperatorInverse(self)

    def __matmul__(self, other):
        if isinstance(other, Operator):
            return compose(self, other)
        return NotImplemented

    def __mul__(self, other):
        if np.isscalar(other):
            return compose(ScalingOperator(self.dest, other), self)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __add__(self, other):
        if isinstance(other, Operator):
            return OperatorSum(self, other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Operator):
            return OperatorSum(self, other, 1, -1)
        return NotImplemented

    def __neg__(self):
        return self * -1

    # Element access and materialization

    def __getitem__(self, index):
        i, j = index
        if not (0 <= i < self.shape[0] and 0 <= j < self.shape[1]):
            raise IndexError("Index (%i, %i) out of range for operator of shape %s." %(i, j, self.shape))
        e = np.zeros(len(self.src), dtype=self.dtype)
        e[j] = 1
        return self.apply(e).reshape(-1)[i]

    def to_matrix(self):
        """Dense matrix, built by probing with unit vectors."""
        rows, cols = self.shape
        result = np.zeros((rows, cols), dtype=self.dtype)
        e = np.zeros(cols, dtype=self.dtype)
        column = np.zeros(self.dest.shape, dtype=self.dtype)
        for j in range(cols):
            e[j] = 1
            self.apply(e, out=column)
            result[:, j] = column.ravel()
            e[j] = 0
        return result

    def to_diagonal(self):
        """Diagonal entries as a linear vector."""
        if self.is_diagonal:
            # Diagonal operators map the all-ones array to their diagonal
            ones = np.ones(self.src.shape, dtype=self.dtype)
            return self.apply(ones).ravel()
        n = min(self.shape)
        return np.array([self[i, i] for i in range(n)], dtype=self.dtype)


def _check_same_length(src, dest, name):
    if len(src) != len(dest):
        raise OperatorSizeError("%s requires source and destination of equal length, got %i and %i." %(name, len(src), len(dest)))


class IdentityOperator(Operator):
    """Identity map between sets of equal length."""

    is_inplace = True
    is_diagonal = True

    def __init__(self, src, dest=None):
        if dest is None:
            dest = src
        _check_same_length(src, dest, "IdentityOperator")
        super().__init__(src, dest)

    def _apply_inplace(self, y):
        pass

    _apply_transpose_inplace = _apply_inplace
    _apply_inverse_inplace = _apply_inplace

    def transpose(self):
        return IdentityOperator(self.dest, self.src)

    def inverse(self):
        return IdentityOperator(self.dest, self.src)

    def to_matrix(self):
        return np.eye(len(self.src), dtype=self.dtype)


class ScalingOperator(Operator):
    """
    Multiplication of every coefficient by one scalar.

    Parameters
    ----------
    src : FunctionSet
        Source and destination set.
    scalar : number
        Scale factor.
    """

    is_inplace = True
    is_diagonal = True

    def __init__(self, src, scalar, dest=None):
        if dest is None:
            dest = src
        _check_same_length(src, dest, "ScalingOperator")
        super().__init__(src, dest)
        self.scalar = scalar

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype, np.min_scalar_type(self.scalar))

    def _apply_inplace(self, y):
        y *= self.scalar

    def _apply_inverse_inplace(self, y):
        y /= self.scalar

    def transpose(self):
        return ScalingOperator(self.dest, np.conj(self.scalar), dest=self.src)

    def inverse(self):
        if self.scalar == 0:
            raise SingularOperatorError("Cannot invert scaling by zero.")
        return ScalingOperator(self.dest, 1 / self.scalar, dest=self.src)

    def to_matrix(self):
        return self.scalar * np.eye(len(self.src), dtype=self.dtype)

    def __repr__(self):
        return f"ScalingOperator({self.src!r}, {self.scalar})"


class ZeroOperator(Operator):
    """Map of every coefficient array to zero."""

    def _apply(self, x, out):
        out.fill(0)

    def transpose(self):
        return ZeroOperator(self.dest, self.src)


class DiagonalOperator(Operator):
    """
    Multiplication by one scalar per set element.

    Parameters
    ----------
    src : FunctionSet
        Source set.
    diagonal : array-like
        Diagonal entries in linear order.
    dest : FunctionSet, optional
        Destination set of equal length (default: src).
    """

    is_inplace = True
    is_diagonal = True

    def __init__(self, src, diagonal, dest=None):
        if dest is None:
            dest = src
        _check_same_length(src, dest, "DiagonalOperator")
        super().__init__(src, dest)
        diagonal = np.asarray(diagonal)
        if diagonal.size != len(src):
            raise OperatorSizeError("Diagonal has %i entries for set of length %i." %(diagonal.size, len(src)))
        self.diagonal = diagonal.reshape(dest.shape)

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype, self.diagonal.dtype)

    def _apply_inplace(self, y):
        y *= self.diagonal.reshape(y.shape)

    def _apply_transpose_inplace(self, y):
        y *= np.conj(self.diagonal).reshape(y.shape)

    def transpose(self):
        return DiagonalOperator(self.dest, np.conj(self.diagonal), dest=self.src)

    def inverse(self):
        # Pseudo-inverse: zero entries stay zero
        d = np.array(self.diagonal, dtype=np.result_type(self.diagonal.dtype, np.float64))
        zero = (d == 0)
        inv = np.zeros_like(d)
        inv[~zero] = 1 / d[~zero]
        return DiagonalOperator(self.dest, inv, dest=self.src)

    def to_matrix(self):
        return np.diag(self.diagonal.ravel()).astype(self.dtype)

    def to_diagonal(self):
        return self.diagonal.ravel().astype(self.dtype)


class MatrixOperator(Operator):
    """
    Multiplication by a dense or sparse matrix.

    Parameters
    ----------
    src : FunctionSet
        Source set.
    dest : FunctionSet
        Destination set.
    matrix : ndarray or scipy.sparse matrix
        Matrix of shape (len(dest), len(src)).
    """

    def __init__(self, src, dest, matrix):
        super().__init__(src, dest)
        if not sparse.issparse(matrix):
            matrix = np.asarray(matrix)
        if matrix.shape != self.shape:
            raise OperatorSizeError("Matrix shape %s does not match operator shape %s." %(matrix.shape, self.shape))
        self.matrix = matrix

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype, self.matrix.dtype)

    def _apply(self, x, out):
        out.reshape(-1)[:] = apply_matrix(self.matrix, x.reshape(-1), axis=0)

    def _apply_transpose(self, x, out):
        out.reshape(-1)[:] = apply_matrix(self.matrix.conj().T, x.reshape(-1), axis=0)

    @CachedAttribute
    def _solver(self):
        """LU factorization used by the inverse primitive."""
        if self.shape[0] != self.shape[1]:
            raise UnimplementedPrimitiveError("Non-square matrix operator of shape %s has no inverse." %(self.shape,))
        logger.debug("Factorizing %s matrix of shape %s" %(type(self.matrix).__name__, self.shape))
        if sparse.issparse(self.matrix):
            return spla.splu(self.matrix.tocsc()).solve
        lu = scipy.linalg.lu_factor(self.matrix)
        return lambda b: scipy.linalg.lu_solve(lu, b)

    def _apply_inverse(self, x, out):
        x = x.reshape(-1)
        if np.iscomplexobj(self.matrix):
            x = x.astype(np.result_type(x, self.matrix), copy=False)
            out.reshape(-1)[:] = self._solver(x)
        else:
            # Real factorizations solve real and imaginary parts separately
            x = x.astype(np.result_type(x, np.float64), copy=False)
            out.reshape(-1)[:] = real_view_apply(self._solver, x)

    def transpose(self):
        return MatrixOperator(self.dest, self.src, self.matrix.conj().T)

    def to_matrix(self):
        if sparse.issparse(self.matrix):
            return self.matrix.toarray().astype(self.dtype)
        return np.array(self.matrix, dtype=self.dtype)


class FunctionOperator(Operator):
    """
    Operator defined by a callable acting on native coefficient arrays.

    Parameters
    ----------
    src : FunctionSet
        Source set.
    dest : FunctionSet
        Destination set.
    function : callable
        Function mapping source arrays to destination arrays.
    transpose : callable, optional
        Function applying the conjugate transpose.
    inverse : callable, optional
        Function applying the inverse.
    """

    def __init__(self, src, dest, function, transpose=None, inverse=None):
        super().__init__(src, dest)
        self.function = function
        self.transpose_function = transpose
        self.inverse_function = inverse

    def _apply(self, x, out):
        out[...] = np.reshape(self.function(x), out.shape)

    def _apply_transpose(self, x, out):
        if self.transpose_function is None:
            raise UnimplementedPrimitiveError("FunctionOperator was built without a transpose function.")
        out[...] = np.reshape(self.transpose_function(x), out.shape)

    def _apply_inverse(self, x, out):
        if self.inverse_function is None:
            raise UnimplementedPrimitiveError("FunctionOperator was built without an inverse function.")
        out[...] = np.reshape(self.inverse_function(x), out.shape)


class IndexRestrictionOperator(Operator):
    """Selection of the coefficients at given linear indices of the source."""

    def __init__(self, src, dest, indices):
        super().__init__(src, dest)
        indices = np.asarray(indices, dtype=int).ravel()
        if indices.size != len(dest):
            raise OperatorSizeError("Restriction selects %i indices for set of length %i." %(indices.size, len(dest)))
        if indices.size and (indices.min() < 0 or indices.max() >= len(src)):
            raise IndexError("Restriction indices out of range for set of length %i." %len(src))
        self.indices = indices

    def _apply(self, x, out):
        out.reshape(-1)[:] = x.reshape(-1)[self.indices]

    def _apply_transpose(self, x, out):
        out.fill(0)
        out.reshape(-1)[self.indices] = x.reshape(-1)

    def transpose(self):
        return IndexExtensionOperator(self.dest, self.src, self.indices)


class IndexExtensionOperator(Operator):
    """Placement of the source coefficients at given linear indices of the destination, zero elsewhere."""

    def __init__(self, src, dest, indices):
        super().__init__(src, dest)
        indices = np.asarray(indices, dtype=int).ravel()
        if indices.size != len(src):
            raise OperatorSizeError("Extension places %i indices for set of length %i." %(indices.size, len(src)))
        if indices.size and (indices.min() < 0 or indices.max() >= len(dest)):
            raise IndexError("Extension indices out of range for set of length %i." %len(dest))
        self.indices = indices

    def _apply(self, x, out):
        out.fill(0)
        out.reshape(-1)[self.indices] = x.reshape(-1)

    def _apply_transpose(self, x, out):
        out.reshape(-1)[:] = x.reshape(-1)[self.indices]

    def transpose(self):
        return IndexRestrictionOperator(self.dest, self.src, self.indices)


class WrappedOperator(Operator):
    """Operator acting as another operator, relabeled with new source and destination sets."""

    def __init__(self, src, dest, op):
        _check_same_length(src, op.src, "WrappedOperator")
        _check_same_length(dest, op.dest, "WrappedOperator")
        super().__init__(src, dest)
        self.op = op
        self.is_inplace = op.is_inplace
        self.is_diagonal = op.is_diagonal

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype, self.op.dtype)

    def _apply(self, x, out):
        self.op.apply(x, out=out)

    def _apply_inplace(self, y):
        self.op.apply_inplace(y)

    def transpose(self):
        return WrappedOperator(self.dest, self.src, self.op.transpose())

    def inverse(self):
        return WrappedOperator(self.dest, self.src, self.op.inverse())

    def to_matrix(self):
        return self.op.to_matrix().astype(self.dtype)


def _scratch(op, dtype):
    """Scratch buffer for the output of op."""
    return np.zeros(op.dest.shape, dtype=dtype)


class CompositeOperator(Operator):
    """
    Composition op2 ∘ op1, applying op1 first.

    A scratch buffer for the intermediate result is allocated once at
    construction. When op2 is in-place, op1 writes directly to the output.
    """

    def __init__(self, op1, op2):
        if len(op1.dest) != len(op2.src):
            raise OperatorSizeError("Cannot compose %r after %r." %(op2, op1))
        super().__init__(op1.src, op2.dest)
        self.op1 = op1
        self.op2 = op2
        self.is_inplace = op1.is_inplace and op2.is_inplace
        self.is_diagonal = op1.is_diagonal and op2.is_diagonal
        self.scratch = _scratch(op1, self.dtype)

    @property
    def dtype(self):
        return np.result_type(self.op1.dtype, self.op2.dtype)

    def _scratch_for(self, x):
        if np.can_cast(x.dtype, self.scratch.dtype):
            return self.scratch
        return _scratch(self.op1, np.result_type(self.scratch, x))

    def _apply(self, x, out):
        if self.op2.is_inplace:
            self.op1.apply(x, out=out)
            self.op2.apply_inplace(out)
        else:
            scratch = self._scratch_for(x)
            self.op1.apply(x, out=scratch)
            self.op2.apply(scratch, out=out)

    def _apply_inplace(self, y):
        self.op1.apply_inplace(y)
        self.op2.apply_inplace(y)

    def transpose(self):
        return compose(self.op1.transpose(), self.op2.transpose())

    def inverse(self):
        return compose(self.op1.inverse(), self.op2.inverse())


class TripleCompositeOperator(Operator):
    """
    Composition op3 ∘ op2 ∘ op1, applying op1 first.

    Two scratch buffers are allocated once at construction; in-place
    constituents reuse the buffer of their predecessor.
    """

    def __init__(self, op1, op2, op3):
        if len(op1.dest) != len(op2.src):
            raise OperatorSizeError("Cannot compose %r after %r." %(op2, op1))
        if len(op2.dest) != len(op3.src):
            raise OperatorSizeError("Cannot compose %r after %r." %(op3, op2))
        super().__init__(op1.src, op3.dest)
        self.op1 = op1
        self.op2 = op2
        self.op3 = op3
        self.is_inplace = op1.is_inplace and op2.is_inplace and op3.is_inplace
        self.is_diagonal = op1.is_diagonal and op2.is_diagonal and op3.is_diagonal
        self.scratch1 = _scratch(op1, self.dtype)
        self.scratch2 = _scratch(op2, self.dtype)

    @property
    def dtype(self):
        return np.result_type(self.op1.dtype, self.op2.dtype, self.op3.dtype)

    def _apply(self, x, out):
        op1, op2, op3 = self.op1, self.op2, self.op3
        if np.can_cast(x.dtype, self.scratch1.dtype):
            scratch1, scratch2 = self.scratch1, self.scratch2
        else:
            dtype = np.result_type(self.scratch1, x)
            scratch1, scratch2 = _scratch(op1, dtype), _scratch(op2, dtype)
        if op2.is_inplace and op3.is_inplace:
            op1.apply(x, out=out)
            op2.apply_inplace(out)
            op3.apply_inplace(out)
        elif op2.is_inplace:
            op1.apply(x, out=scratch2)
            op2.apply_inplace(scratch2)
            op3.apply(scratch2, out=out)
        elif op3.is_inplace:
            op1.apply(x, out=scratch1)
            op2.apply(scratch1, out=out)
            op3.apply_inplace(out)
        else:
            op1.apply(x, out=scratch1)
            op2.apply(scratch1, out=scratch2)
            op3.apply(scratch2, out=out)

    def _apply_inplace(self, y):
        self.op1.apply_inplace(y)
        self.op2.apply_inplace(y)
        self.op3.apply_inplace(y)

    def transpose(self):
        return compose(self.op1.transpose(), self.op2.transpose(), self.op3.transpose())

    def inverse(self):
        return compose(self.op1.inverse(), self.op2.inverse(), self.op3.inverse())


class OperatorSum(Operator):
    """
    Linear combination val1*op1 + val2*op2.

    Scaling operands are folded into the combination without a second buffer.
    """

    def __init__(self, op1, op2, val1=1, val2=1):
        if op1.shape != op2.shape:
            raise OperatorSizeError("Cannot add operators of shapes %s and %s." %(op1.shape, op2.shape))
        super().__init__(op1.src, op1.dest)
        self.op1 = op1
        self.op2 = op2
        self.val1 = val1
        self.val2 = val2
        self.is_diagonal = op1.is_diagonal and op2.is_diagonal
        self.scratch = _scratch(op1, self.dtype)

    @property
    def dtype(self):
        scalars = np.result_type(np.min_scalar_type(self.val1), np.min_scalar_type(self.val2))
        return np.result_type(self.op1.dtype, self.op2.dtype, scalars)

    def _apply(self, x, out):
        op1, op2 = self.op1, self.op2
        if isinstance(op1, ScalingOperator) and isinstance(op2, ScalingOperator):
            np.multiply(x.reshape(out.shape), self.val1 * op1.scalar + self.val2 * op2.scalar, out=out)
        elif isinstance(op1, ScalingOperator):
            op2.apply(x, out=out)
            out *= self.val2
            out += (self.val1 * op1.scalar) * x.reshape(out.shape)
        elif isinstance(op2, ScalingOperator):
            op1.apply(x, out=out)
            out *= self.val1
            out += (self.val2 * op2.scalar) * x.reshape(out.shape)
        else:
            scratch = self.scratch
            if not np.can_cast(x.dtype, scratch.dtype):
                scratch = _scratch(op1, np.result_type(scratch, x))
            op1.apply(x, out=scratch)
            op2.apply(x, out=out)
            out *= self.val2
            out += self.val1 * scratch

    def transpose(self):
        return OperatorSum(self.op1.transpose(), self.op2.transpose(), np.conj(self.val1), np.conj(self.val2))


class OperatorTranspose(Operator):
    """Conjugate transpose, routed through the transposed primitives of the wrapped operator."""

    def __init__(self, op):
        super().__init__(op.dest, op.src)
        self.op = op
        self.is_inplace = op.is_inplace
        self.is_diagonal = op.is_diagonal

    @property
    def dtype(self):
        return self.op.dtype

    def _apply(self, x, out):
        self.op._apply_transpose(x, out)

    def _apply_inplace(self, y):
        self.op._apply_transpose_inplace(y)

    def transpose(self):
        return self.op

    def __repr__(self):
        return f"OperatorTranspose({self.op!r})"


class OperatorInverse(Operator):
    """Inverse, routed through the inverse primitives of the wrapped operator."""

    def __init__(self, op):
        super().__init__(op.dest, op.src)
        self.op = op
        self.is_inplace = op.is_inplace
        self.is_diagonal = op.is_diagonal

    @property
    def dtype(self):
        return self.op.dtype

    def _apply(self, x, out):
        self.op._apply_inverse(x, out)

    def _apply_inplace(self, y):
        self.op._apply_inverse_inplace(y)

    def inverse(self):
        return self.op

    def transpose(self):
        return self.op.transpose().inverse()

    def __repr__(self):
        return f"OperatorInverse({self.op!r})"


def _simplify(ops):
    """Drop identities and merge adjacent scalings, in application order."""
    simplified = []
    for op in ops:
        if isinstance(op, IdentityOperator) and op.src == op.dest:
            continue
        if simplified:
            prev = simplified[-1]
            if isinstance(op, ScalingOperator) and isinstance(prev, ScalingOperator) and prev.dest == op.src:
                simplified[-1] = ScalingOperator(prev.src, prev.scalar * op.scalar, dest=op.dest)
                continue
        simplified.append(op)
    return simplified


def compose(*ops):
    """
    Compose operators in mathematical order: compose(op3, op2, op1) applies op1 first.
    """
    if not ops:
        raise ValueError("No operators to compose.")
    ops = ops[::-1]
    for op1, op2 in zip(ops[:-1], ops[1:]):
        if len(op1.dest) != len(op2.src):
            raise OperatorSizeError("Cannot compose %r after %r." %(op2, op1))
    simplified = _simplify(ops)
    if not simplified:
        return IdentityOperator(ops[0].src, ops[-1].dest)
    if len(simplified) == 1:
        op = simplified[0]
        if op.src is ops[0].src and op.dest is ops[-1].dest:
            return op
        return WrappedOperator(ops[0].src, ops[-1].dest, op)
    elif len(simplified) == 2:
        return CompositeOperator(*simplified)
    elif len(simplified) == 3:
        return TripleCompositeOperator(*simplified)
    else:
        return CompositeOperator(compose(*simplified[-2::-1]), simplified[-1])


def matrix(op):
    """Dense matrix of an operator."""
    return op.to_matrix()


def diagonal(op):
    """Diagonal of an operator as a linear vector."""
    return op.to_diagonal()


def inv_diagonal(op):
    """Diagonal pseudo-inverse of a diagonal operator."""
    if not op.is_diagonal:
        raise ValueError("inv_diagonal requires a diagonal operator.")
    return DiagonalOperator(op.src, op.to_diagonal(), dest=op.dest).inverse()


def apply_multiple(op, columns):
    """Apply an operator to each column of a 2D array."""
    columns = np.asarray(columns)
    if columns.shape[0] != len(op.src):
        raise OperatorSizeError("Expected %i rows, got %i." %(len(op.src), columns.shape[0]))
    result = np.zeros((len(op.dest), columns.shape[1]), dtype=np.result_type(op.dtype, columns.dtype))
    for j in range(columns.shape[1]):
        result[:, j] = op.apply(columns[:, j]).ravel()
    return result
