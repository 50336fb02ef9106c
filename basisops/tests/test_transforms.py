"""
Benchmark evaluation and transform operators across planning strategies.
"""

import pytest
import numpy as np
import functools
from basisops import public as bo


def bench_wrapper(test):
    @functools.wraps(test)
    def wrapper(benchmark, *args, **kw):
        benchmark.pedantic(test, args=(None,)+args, kwargs=kw)
    return wrapper


@pytest.mark.parametrize('library', ['matrix', 'scipy'])
@pytest.mark.parametrize('N', [64, 65])
@bench_wrapper
def test_fourier_roundtrip(benchmark, N, library):
    """Test evaluation followed by interpolation on the native Fourier grid."""
    b = bo.FourierBasis(N, library=library)
    x = b.grid().points
    f = np.exp(np.sin(2*np.pi*x))
    c = bo.interpolation_operator(b).apply(f)
    assert np.allclose(bo.evaluation_operator(b).apply(c), f)


@pytest.mark.parametrize('library', ['matrix', 'scipy'])
@pytest.mark.parametrize('N', [32, 33])
@bench_wrapper
def test_chebyshev_roundtrip(benchmark, N, library):
    """Test evaluation followed by interpolation on the native Chebyshev grid."""
    b = bo.ChebyshevBasis(N, library=library)
    x = b.grid().points
    f = np.exp(x) * np.cos(3*x)
    c = bo.interpolation_operator(b).apply(f)
    assert np.allclose(bo.evaluation_operator(b).apply(c), f)


@pytest.mark.parametrize('M', [32, 64])
@bench_wrapper
def test_fourier_oversampling(benchmark, M):
    """Test evaluation of a smooth periodic function on finer grids."""
    b = bo.rescale(bo.FourierBasis(24), 0, 2*np.pi)
    c = bo.interpolation_operator(b).apply(np.exp(np.sin(b.grid().points)))
    grid = bo.PeriodicEquispacedGrid(M, 0, 2*np.pi)
    values = bo.evaluation_operator(b, grid).apply(c)
    assert np.allclose(values, np.exp(np.sin(grid.points)), atol=1e-8)


@pytest.mark.parametrize('N', [16])
@bench_wrapper
def test_chebyshev_derivative(benchmark, N):
    """Test spectral differentiation of a smooth function on a mapped interval."""
    b = bo.rescale(bo.ChebyshevBasis(N), 0, 1)
    y = b.grid().points
    c = bo.interpolation_operator(b).apply(np.sin(2*y))
    D = bo.differentiation_operator(b)
    yd = D.dest.grid().points
    assert np.allclose(bo.evaluation_operator(D.dest).apply(D.apply(c)), 2*np.cos(2*yd), atol=1e-8)
