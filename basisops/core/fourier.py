"""
Fourier series on the unit interval.

"""

import numpy as np
from scipy import sparse

from .sets import FunctionSet
from .grids import EquispacedGrid, PeriodicEquispacedGrid, IndexSubGrid
from .operators import DiagonalOperator, IdentityOperator, MatrixOperator, compose
from ..tools.cache import CachedClass, CachedMethod
from ..tools.config import config
from ..tools.exceptions import CapabilityError

import logging
logger = logging.getLogger(__name__.split('.')[-1])

GET_FOURIER_LIBRARY = lambda: config['transforms'].get('FOURIER_LIBRARY')
GET_GRID_RTOL = lambda: config['planning'].getfloat('GRID_RTOL')


__all__ = ['FourierBasis',
           'fft_wavenumbers']


def fft_wavenumbers(size):
    """Signed wavenumbers in FFT order, with a positive Nyquist wavenumber for even sizes."""
    k = np.arange(size)
    return np.where(k <= size // 2, k, k - size)


class FourierBasis(FunctionSet, metaclass=CachedClass):
    """
    Complex exponentials exp(2 pi i k x) on [0, 1).

    Parameters
    ----------
    size : int
        Number of elements.
    dtype : dtype, optional
        Complex coefficient type (default: complex128).
    library : str, optional
        Transform library (default: from config).

    Notes
    -----
    Coefficients are stored in FFT order: k = 0, 1, ..., then the negative
    wavenumbers ending with k = -1. For even sizes the element with the
    positive Nyquist wavenumber n/2 is the cosine cos(2 pi (n/2) x), so that
    the set spans real functions symmetrically.
    """

    has_grid = True
    has_extension = True
    has_derivative = True
    is_orthogonal = True
    is_basis = True
    support = (0, 1)
    transforms = {}

    @classmethod
    def _preprocess_cache_args(cls, size, dtype, library):
        """Preprocess arguments into canonical form for caching. Must accept and return __init__ arguments."""
        # size: positive int
        size = int(size)
        if size <= 0:
            raise ValueError("Fourier size must be positive.")
        # dtype: complex
        dtype = np.result_type(dtype, np.complex64)
        # library: pick default from config
        if library is None:
            library = GET_FOURIER_LIBRARY()
        if library not in cls.transforms:
            raise ValueError("Unknown Fourier transform library: %s" %library)
        return (size, dtype, library)

    def __init__(self, size, dtype=np.complex128, library=None):
        self.size = size
        self.dtype = dtype
        self.library = library
        self.nhalf = size // 2

    @property
    def is_even(self):
        return (self.size % 2 == 0)

    def __repr__(self):
        return f"FourierBasis({self.size}, {self.dtype})"

    # Indexing

    def native_index(self, i):
        self.check_index(i)
        return i if i <= self.nhalf else i - self.size

    def linear_index(self, k):
        i = k if k >= 0 else k + self.size
        if not (0 <= i < self.size) or self.native_index(i) != k:
            raise IndexError("Wavenumber %i out of range for %r." %(k, self))
        return i

    @property
    def wavenumbers(self):
        return fft_wavenumbers(self.size)

    def _is_nyquist(self, i):
        return self.is_even and i == self.nhalf

    # Family

    def _resize(self, size):
        return FourierBasis(size, self.dtype, self.library)

    def _with_dtype(self, dtype):
        return FourierBasis(self.size, dtype, self.library)

    def approx_length(self, n):
        # Keep the parity of the set
        if (n % 2 == 0) == self.is_even:
            return n
        return n + 1

    def extension_size(self):
        if self.is_even:
            return 2 * self.size
        return 2 * self.size + 1

    def _derivative_set(self, order):
        # Even sets differentiate into the odd set one larger
        if self.is_even:
            return self._resize(self.size + 1)
        return self

    # Grids

    @CachedMethod
    def _native_grid(self):
        return PeriodicEquispacedGrid(self.size, 0, 1)

    def compatible_grid(self, grid):
        if not isinstance(grid, PeriodicEquispacedGrid):
            return False
        rtol = GET_GRID_RTOL()
        bounds_match = np.allclose([grid.left, grid.right], [0, 1], rtol=rtol, atol=rtol)
        return bounds_match and (grid.size == self.size)

    def embed_grid(self, grid):
        """Express an equispaced grid strictly inside [0, 1) as a sub-grid of a periodic grid."""
        if type(grid) is not EquispacedGrid or grid.size < 2:
            return None
        rtol = GET_GRID_RTOL()
        if grid.left < -rtol or grid.right > 1 - rtol:
            return None
        h = grid.step
        nleft = int(round(grid.left / h))
        nright = int(round((1 - grid.right) / h))
        size = grid.size + nleft + nright - 1
        indices = np.arange(nleft, nleft + grid.size)
        # Supergrid points must reproduce the grid, checked without building the supergrid
        if not np.allclose(indices / size, grid.points, rtol=0, atol=rtol):
            return None
        return IndexSubGrid(PeriodicEquispacedGrid(size, 0, 1), indices)

    # Evaluation

    def _evaluate(self, i, x):
        x = np.asarray(x, dtype=np.float64)
        k = self.native_index(i)
        if self._is_nyquist(i):
            return np.cos(2*np.pi*k*x).astype(self.dtype)
        return np.exp(2j*np.pi*k*x).astype(self.dtype)

    # Transforms

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
        """Backward transform from coefficients to values on a compatible grid."""
        self._check_transform(gridspace)
        return transforms.BackwardTransformOperator(self, gridspace, self.transform_plan(self.size))

    def transform_from_grid(self, gridspace):
        """Forward transform from values on a compatible grid to coefficients."""
        self._check_transform(gridspace)
        return transforms.ForwardTransformOperator(gridspace, self, self.transform_plan(self.size))

    # Extension and restriction

    def _check_family(self, other):
        if not isinstance(other, FourierBasis):
            raise CapabilityError("Cannot resize %r to %r." %(self, other))

    def extension_to(self, dest):
        """Zero-padding extension to a larger Fourier set."""
        self._check_family(dest)
        if dest.size < self.size:
            raise ValueError("Extension target %r is smaller than %r." %(dest, self))
        if dest.size == self.size:
            return IdentityOperator(self, dest)
        rows, cols, data = [], [], []
        for i, k in enumerate(self.wavenumbers):
            if self._is_nyquist(i):
                # Split the Nyquist cosine into two exponentials
                rows += [dest.linear_index(k), dest.linear_index(-k)]
                cols += [i, i]
                data += [1/2, 1/2]
            else:
                rows.append(dest.linear_index(k))
                cols.append(i)
                data.append(1)
        matrix = sparse.csr_matrix((data, (rows, cols)), shape=(dest.size, self.size))
        return MatrixOperator(self, dest, matrix)

    def restriction_to(self, dest):
        """Truncation to a smaller Fourier set."""
        self._check_family(dest)
        if dest.size > self.size:
            raise ValueError("Restriction target %r is larger than %r." %(dest, self))
        if dest.size == self.size:
            return IdentityOperator(self, dest)
        rows, cols = [], []
        for j, k in enumerate(dest.wavenumbers):
            if dest._is_nyquist(j):
                # Merge both exponentials into the Nyquist cosine
                rows += [j, j]
                cols += [self.linear_index(k), self.linear_index(-k)]
            else:
                rows.append(j)
                cols.append(self.linear_index(k))
        matrix = sparse.csr_matrix((np.ones(len(rows)), (rows, cols)), shape=(dest.size, self.size))
        return MatrixOperator(self, dest, matrix)

    # Differentiation

    def differentiation_to(self, dest, order=1):
        """Diagonal differentiation, through the odd extension for even sizes."""
        self._check_family(dest)
        dset = self.derivative_set(order)
        diag = (2j*np.pi*dset.wavenumbers) ** order
        ops = [DiagonalOperator(dset, diag)]
        if dset is not self:
            ops.append(self.extension_to(dset))
        if dest is not dset:
            if dest.size >= dset.size:
                ops.insert(0, dset.extension_to(dest))
            else:
                ops.insert(0, dset.restriction_to(dest))
        return compose(*ops)


from . import transforms
