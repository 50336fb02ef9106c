"""
Orthogonal polynomial bases on [-1, 1].

"""

import numpy as np
from numpy.polynomial import chebyshev, legendre
import scipy.special

from .sets import FunctionSet
from .grids import ChebyshevGrid
from .operators import IndexExtensionOperator, IndexRestrictionOperator, IdentityOperator, MatrixOperator
from ..tools.cache import CachedClass, CachedMethod
from ..tools.config import config
from ..tools.exceptions import CapabilityError

import logging
logger = logging.getLogger(__name__.split('.')[-1])

GET_CHEBYSHEV_LIBRARY = lambda: config['transforms'].get('CHEBYSHEV_LIBRARY')


__all__ = ['ChebyshevBasis',
           'LegendreBasis']


class OrthogonalPolynomialBasis(FunctionSet, metaclass=CachedClass):
    """
    Base class for polynomial bases indexed by degree.

    Extension pads with zero coefficients of higher degree and restriction
    truncates them. Derivatives and antiderivatives are built as matrices
    from the `der` and `integ` functions of the numpy polynomial modules.
    """

    has_extension = True
    has_derivative = True
    has_antiderivative = True
    is_orthogonal = True
    is_basis = True
    support = (-1, 1)
    der = None
    integ = None

    @classmethod
    def _preprocess_cache_args(cls, size, dtype):
        """Preprocess arguments into canonical form for caching. Must accept and return __init__ arguments."""
        size = int(size)
        if size <= 0:
            raise ValueError("Polynomial basis size must be positive.")
        return (size, np.dtype(dtype))

    def __init__(self, size, dtype=np.float64):
        self.size = size
        self.dtype = dtype

    def __repr__(self):
        return f"{type(self).__name__}({self.size})"

    def _clone(self, size, dtype):
        return type(self)(size, dtype)

    def _resize(self, size):
        return self._clone(size, self.dtype)

    def _with_dtype(self, dtype):
        return self._clone(self.size, dtype)

    def _derivative_set(self, order):
        return self._resize(max(self.size - order, 1))

    def _antiderivative_set(self, order):
        return self._resize(self.size + order)

    def _check_family(self, other):
        if not self.is_same_family(other):
            raise CapabilityError("Cannot map %r to %r." %(self, other))

    def extension_to(self, dest):
        """Zero padding to a larger set of the same family."""
        self._check_family(dest)
        if dest.size < self.size:
            raise ValueError("Extension target %r is smaller than %r." %(dest, self))
        if dest.size == self.size:
            return IdentityOperator(self, dest)
        return IndexExtensionOperator(self, dest, np.arange(self.size))

    def restriction_to(self, dest):
        """Truncation to a smaller set of the same family."""
        self._check_family(dest)
        if dest.size > self.size:
            raise ValueError("Restriction target %r is larger than %r." %(dest, self))
        if dest.size == self.size:
            return IdentityOperator(self, dest)
        return IndexRestrictionOperator(self, dest, np.arange(dest.size))

    @staticmethod
    def _fit_rows(matrix, rows):
        """Zero-pad or truncate matrix rows."""
        out = np.zeros((rows, matrix.shape[1]), dtype=matrix.dtype)
        n = min(rows, matrix.shape[0])
        out[:n] = matrix[:n]
        return out

    @CachedMethod
    def derivative_matrix(self, order):
        """Coefficient matrix of the order-th derivative, with derivative_set(order) rows."""
        return self.der(np.eye(self.size), m=order, axis=0)

    @CachedMethod
    def antiderivative_matrix(self, order):
        """Coefficient matrix of the order-th antiderivative vanishing at zero."""
        return self.integ(np.eye(self.size), m=order, axis=0)

    def differentiation_to(self, dest, order=1):
        self._check_family(dest)
        matrix = self._fit_rows(self.derivative_matrix(order), dest.size)
        return MatrixOperator(self, dest, matrix)

    def antidifferentiation_to(self, dest, order=1):
        self._check_family(dest)
        matrix = self._fit_rows(self.antiderivative_matrix(order), dest.size)
        return MatrixOperator(self, dest, matrix)

    def _evaluate(self, i, x):
        x = np.asarray(x, dtype=np.float64)
        return self.eval_function(i, x).astype(self.dtype)


class ChebyshevBasis(OrthogonalPolynomialBasis):
    """
    Chebyshev polynomials of the first kind, T_k(x) on [-1, 1].

    Parameters
    ----------
    size : int
        Number of polynomials, of degrees 0 to size-1.
    dtype : dtype, optional
        Coefficient type (default: float64).
    library : str, optional
        Transform library (default: from config).
    """

    has_grid = True
    der = staticmethod(chebyshev.chebder)
    integ = staticmethod(chebyshev.chebint)
    eval_function = staticmethod(scipy.special.eval_chebyt)
    transforms = {}

    @classmethod
    def _preprocess_cache_args(cls, size, dtype, library):
        """Preprocess arguments into canonical form for caching. Must accept and return __init__ arguments."""
        size, dtype = super()._preprocess_cache_args(size, dtype)
        # library: pick default from config
        if library is None:
            library = GET_CHEBYSHEV_LIBRARY()
        if library not in cls.transforms:
            raise ValueError("Unknown Chebyshev transform library: %s" %library)
        return (size, dtype, library)

    def __init__(self, size, dtype=np.float64, library=None):
        super().__init__(size, dtype)
        self.library = library

    def _clone(self, size, dtype):
        return ChebyshevBasis(size, dtype, self.library)

    @CachedMethod
    def _native_grid(self):
        return ChebyshevGrid(self.size)

    def compatible_grid(self, grid):
        return isinstance(grid, ChebyshevGrid) and (grid.size == self.size)

    @CachedMethod
    def transform_plan(self, size):
        """Build transform plan."""
        # Shortcut trivial transforms
        if size == 1:
            return self.transforms['matrix'](size)
        return self.transforms[self.library](size)

    def _check_transform(self, gridspace):
        if not self.has_transform(gridspace):
            raise CapabilityError("%r has no transform to %r." %(self, gridspace))

    def transform_to_grid(self, gridspace):
        """Backward transform from coefficients to values on the Chebyshev grid."""
        self._check_transform(gridspace)
        return transforms.BackwardTransformOperator(self, gridspace, self.transform_plan(self.size))

    def transform_from_grid(self, gridspace):
        """Forward transform from values on the Chebyshev grid to coefficients."""
        self._check_transform(gridspace)
        return transforms.ForwardTransformOperator(gridspace, self, self.transform_plan(self.size))


class LegendreBasis(OrthogonalPolynomialBasis):
    """Legendre polynomials P_k(x) on [-1, 1], without a native grid."""

    der = staticmethod(legendre.legder)
    integ = staticmethod(legendre.legint)
    eval_function = staticmethod(scipy.special.eval_legendre)


from . import transforms
