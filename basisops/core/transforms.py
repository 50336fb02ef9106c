"""Fast and matrix transform classes between sets and their native grids."""

import numpy as np
import scipy.fft

from . import fourier
from . import polynomials
from .operators import Operator
from ..tools.array import apply_matrix, axslice, reshape_vector, real_view_apply
from ..tools.cache import CachedAttribute

import logging
logger = logging.getLogger(__name__.split('.')[-1])


def register_transform(basis, name):
    """Decorator to add transform to basis class dictionary."""
    def wrapper(cls):
        basis.transforms[name] = cls
        return cls
    return wrapper


class Transform:
    """Abstract base class for all transforms."""
    pass


class SeparableTransform(Transform):
    """
    Abstract base class for transforms that act along a single axis.

    The backward transform maps coefficients to grid values and the forward
    transform maps grid values to coefficients. The transposed methods apply
    the conjugate transposes of these maps.
    """

    def forward(self, gdata, cdata, axis):
        """Apply forward transform along specified axis."""
        raise NotImplementedError("%s has not implemented 'forward' method" %type(self))

    def backward(self, cdata, gdata, axis):
        """Apply backward transform along specified axis."""
        raise NotImplementedError("%s has not implemented 'backward' method" %type(self))

    def forward_transpose(self, cdata, gdata, axis):
        """Apply conjugate transpose of forward transform along specified axis."""
        raise NotImplementedError("%s has not implemented 'forward_transpose' method" %type(self))

    def backward_transpose(self, gdata, cdata, axis):
        """Apply conjugate transpose of backward transform along specified axis."""
        raise NotImplementedError("%s has not implemented 'backward_transpose' method" %type(self))


class SeparableMatrixTransform(SeparableTransform):
    """Abstract base class for separable matrix-multiplication transforms."""

    def forward(self, gdata, cdata, axis):
        apply_matrix(self.forward_matrix, gdata, axis=axis, out=cdata)

    def backward(self, cdata, gdata, axis):
        apply_matrix(self.backward_matrix, cdata, axis=axis, out=gdata)

    def forward_transpose(self, cdata, gdata, axis):
        apply_matrix(self.forward_matrix.conj().T, cdata, axis=axis, out=gdata)

    def backward_transpose(self, gdata, cdata, axis):
        apply_matrix(self.backward_matrix.conj().T, gdata, axis=axis, out=cdata)

    @CachedAttribute
    def forward_matrix(self):
        """Build forward transform matrix."""
        raise NotImplementedError("%s has not implemented 'forward_matrix' method" %type(self))

    @CachedAttribute
    def backward_matrix(self):
        """Build backward transform matrix."""
        raise NotImplementedError("%s has not implemented 'backward_matrix' method" %type(self))


class FourierTransform(SeparableTransform):
    r"""
    Abstract base class for Fourier transforms on periodic equispaced grids.

    Parameters
    ----------
    size : int
        Grid and coefficient size (N).

    Notes
    -----
    Backward transform:
        f(x_j) = \sum_k F(k) \exp(2 \pi i k j / N)

    Forward transform:
        F(k) = (1/N) \sum_{j=0}^{N-1} f(x_j) \exp(-2 \pi i k j / N)

    Coefficient ordering:
        Wavenumbers follow FFT ordering, [0, 1, ..., KM, -KM, ..., -1] for odd N
        and [0, 1, ..., N/2, 1-N/2, ..., -1] for even N. On the native grid the
        even-size Nyquist cosine coincides with the Nyquist exponential.
    """

    def __init__(self, size):
        self.N = size

    @property
    def wavenumbers(self):
        """Wavenumbers in coefficient order."""
        return fourier.fft_wavenumbers(self.N)


@register_transform(fourier.FourierBasis, 'matrix')
class FourierMMT(FourierTransform, SeparableMatrixTransform):
    """Fourier matrix-multiplication transform."""

    @CachedAttribute
    def forward_matrix(self):
        """Build forward transform matrix."""
        K = self.wavenumbers[:, None]
        X = np.arange(self.N)[None, :]
        quadrature = np.exp(-2j*np.pi*K*X/self.N) / self.N
        return np.asarray(quadrature, order='C')

    @CachedAttribute
    def backward_matrix(self):
        """Build backward transform matrix."""
        K = self.wavenumbers[None, :]
        X = np.arange(self.N)[:, None]
        functions = np.exp(2j*np.pi*K*X/self.N)
        return np.asarray(functions, order='C')


@register_transform(fourier.FourierBasis, 'scipy')
class ScipyFFT(FourierTransform):
    """Fourier transform using scipy.fft."""

    def forward(self, gdata, cdata, axis):
        np.copyto(cdata, scipy.fft.fft(gdata, axis=axis, norm='forward'))

    def backward(self, cdata, gdata, axis):
        np.copyto(gdata, scipy.fft.ifft(cdata, axis=axis, norm='forward'))

    def forward_transpose(self, cdata, gdata, axis):
        np.copyto(gdata, scipy.fft.ifft(cdata, axis=axis, norm='backward'))

    def backward_transpose(self, gdata, cdata, axis):
        np.copyto(cdata, scipy.fft.fft(gdata, axis=axis, norm='backward'))


class ChebyshevTransform(SeparableTransform):
    r"""
    Abstract base class for Chebyshev transforms on the Chebyshev-Gauss grid.

    Parameters
    ----------
    size : int
        Grid and coefficient size (N).

    Notes
    -----
    Let x_j = -cos(theta_j) with theta_j = pi (j + 1/2) / N, so that
    T_k(x_j) = (-1)^k cos(k theta_j).

    Backward transform:
        f(x_j) = \sum_{k=0}^{N-1} c(k) T_k(x_j)

    Forward transform:
        c(0) = (1/N) \sum_j f(x_j)
        c(k) = (2/N) \sum_j f(x_j) T_k(x_j)
    """

    def __init__(self, size):
        self.N = size

    @CachedAttribute
    def signs(self):
        """Alternating signs (-1)^k."""
        return (-1.0) ** np.arange(self.N)


@register_transform(polynomials.ChebyshevBasis, 'matrix')
class ChebyshevMMT(ChebyshevTransform, SeparableMatrixTransform):
    """Chebyshev matrix-multiplication transform."""

    @CachedAttribute
    def backward_matrix(self):
        """Build backward transform matrix."""
        K = np.arange(self.N)[None, :]
        theta = np.pi * (np.arange(self.N)[:, None] + 1/2) / self.N
        functions = self.signs[None, :] * np.cos(K*theta)
        return np.asarray(functions, order='C')

    @CachedAttribute
    def forward_matrix(self):
        """Build forward transform matrix."""
        quadrature = (2 / self.N) * self.backward_matrix.T
        quadrature[0] /= 2
        return np.asarray(quadrature, order='C')


@register_transform(polynomials.ChebyshevBasis, 'scipy')
class ScipyChebyshevDCT(ChebyshevTransform):
    """Chebyshev transform using scipy.fft discrete cosine transforms."""

    def _scaling(self, ndim, axis, zero, pos):
        """Sign-alternating rescaling vector along axis."""
        scale = self.signs * pos
        scale[0] = zero
        return reshape_vector(scale, dim=ndim, axis=axis)

    def forward(self, gdata, cdata, axis):
        temp = real_view_apply(scipy.fft.dct, gdata, type=2, axis=axis)
        np.multiply(temp, self._scaling(temp.ndim, axis, 1/self.N/2, 1/self.N), out=cdata)

    def backward(self, cdata, gdata, axis):
        temp = cdata * self._scaling(cdata.ndim, axis, 1, 1/2)
        np.copyto(gdata, real_view_apply(scipy.fft.dct, temp, type=3, axis=axis))

    def forward_transpose(self, cdata, gdata, axis):
        # Transpose of the forward map is the backward map with a halved mean mode
        temp = cdata * (2 / self.N)
        temp[axslice(axis, 0, 1)] /= 2
        self.backward(temp, gdata, axis)

    def backward_transpose(self, gdata, cdata, axis):
        temp = real_view_apply(scipy.fft.dct, gdata, type=2, axis=axis)
        np.multiply(temp, self._scaling(temp.ndim, axis, 1/2, 1/2), out=cdata)


class BackwardTransformOperator(Operator):
    """
    Operator applying a backward transform, from coefficients to grid values.

    Parameters
    ----------
    src : FunctionSet
        Coefficient set.
    dest : GridSpace
        Grid space matching the transform.
    plan : SeparableTransform
        Transform plan.
    """

    def __init__(self, src, dest, plan):
        super().__init__(src, dest)
        self.plan = plan

    def _apply(self, x, out):
        self.plan.backward(x, out, axis=0)

    def _apply_transpose(self, x, out):
        self.plan.backward_transpose(x, out, axis=0)

    def _apply_inverse(self, x, out):
        self.plan.forward(x, out, axis=0)

    def inverse(self):
        return ForwardTransformOperator(self.dest, self.src, self.plan)


class ForwardTransformOperator(Operator):
    """
    Operator applying a forward transform, from grid values to coefficients.

    Parameters
    ----------
    src : GridSpace
        Grid space matching the transform.
    dest : FunctionSet
        Coefficient set.
    plan : SeparableTransform
        Transform plan.
    """

    def __init__(self, src, dest, plan):
        super().__init__(src, dest)
        self.plan = plan

    def _apply(self, x, out):
        self.plan.forward(x, out, axis=0)

    def _apply_transpose(self, x, out):
        self.plan.forward_transpose(x, out, axis=0)

    def _apply_inverse(self, x, out):
        self.plan.backward(x, out, axis=0)

    def inverse(self):
        return BackwardTransformOperator(self.dest, self.src, self.plan)
