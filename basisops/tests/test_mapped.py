"""Test function sets under coordinate maps."""

import pytest
import numpy as np
from basisops.core.fourier import FourierBasis
from basisops.core.polynomials import ChebyshevBasis, LegendreBasis
from basisops.core.grids import EquispacedGrid, PeriodicEquispacedGrid, MappedGrid, ScatteredGrid
from basisops.core.gridspace import gridspace
from basisops.core.maps import AffineMap, FunctionMap, IdentityMap
from basisops.core.mapped import MappedSet, mapped_set, rescale
from basisops.core.operators import WrappedOperator
from basisops.core.transforms import BackwardTransformOperator
from basisops.core import planner
from basisops.tools.exceptions import IncompatibleMapError, NonlinearMapError


seeds = [0, 1]


def random_coeffs(basis, seed):
    rng = np.random.default_rng(seed)
    c = rng.standard_normal(len(basis))
    if not basis.is_real:
        c = c + 1j * rng.standard_normal(len(basis))
    return c


def test_rescale():
    """Test rescaling maps the support and keeps regular grid types."""
    ms = rescale(FourierBasis(8), 0, 2)
    assert isinstance(ms, MappedSet)
    assert ms.support == (0, 2)
    grid = ms.grid()
    assert isinstance(grid, PeriodicEquispacedGrid)
    assert (grid.left, grid.right) == (0, 2)
    assert isinstance(rescale(ChebyshevBasis(8), 0, 2).grid(), MappedGrid)
    assert rescale(LegendreBasis(4), -3, 5).support == (-3, 5)
    with pytest.raises(ValueError):
        rescale(gridspace(ScatteredGrid([0, 1])), 0, 1)


def test_mapped_set_construction():
    """Test nested maps collapse and identity maps are dropped."""
    b = ChebyshevBasis(4)
    ms = mapped_set(mapped_set(b, AffineMap(2, 0)), AffineMap(1, 1))
    assert ms.set is b
    assert ms.map == AffineMap(2, 1)
    assert mapped_set(b, IdentityMap()) is b
    assert rescale(b, 0, 2) == rescale(b, 0, 2)
    assert hash(rescale(b, 0, 2)) == hash(rescale(b, 0, 2))
    assert rescale(b, 0, 2) != rescale(b, 0, 3)
    gs = mapped_set(gridspace(EquispacedGrid(5, 0, 1)), AffineMap(2, 0))
    assert isinstance(gs.grid(), EquispacedGrid)
    assert gs.grid().right == 2


def test_mapped_evaluation():
    """Test mapped elements are the inner elements at preimage points."""
    ms = rescale(ChebyshevBasis(5), 0, 4)
    y = np.linspace(0, 4, 9)
    x = (y - 2) / 2
    assert np.allclose(ms.evaluate(3, y), 4*x**3 - 3*x)
    assert ms.native_index(3) == 3


@pytest.mark.parametrize('basis', [FourierBasis(8), FourierBasis(7), ChebyshevBasis(6)])
@pytest.mark.parametrize('seed', seeds)
def test_mapped_fast_transform(basis, seed):
    """Test mapped sets keep their fast transforms on mapped grids."""
    ms = rescale(basis, 1, 3)
    c = random_coeffs(basis, seed)
    E = planner.evaluation_operator(ms)
    assert isinstance(E, WrappedOperator)
    assert isinstance(E.op, BackwardTransformOperator)
    assert E.src is ms
    grid = ms.grid()
    values = E.apply(c)
    assert np.allclose(values, ms.evaluate_expansion(c, grid.points))
    assert np.allclose(planner.interpolation_operator(ms).apply(values), c)


@pytest.mark.parametrize('seed', seeds)
def test_mapped_extension_detour(seed):
    """Test the extension detour applies on mapped grids."""
    ms = rescale(FourierBasis(8), 0, 2)
    grid = PeriodicEquispacedGrid(16, 0, 2)
    c = random_coeffs(ms, seed)
    values = planner.evaluation_operator(ms, grid).apply(c)
    assert np.allclose(values, ms.evaluate_expansion(c, grid.points))


def test_mapped_derivative_scaling():
    """Test derivatives under affine maps are scaled by the inverse jacobian."""
    ms = rescale(ChebyshevBasis(4), 0, 4)
    D = planner.differentiation_operator(ms)
    assert isinstance(D.dest, MappedSet)
    assert D.dest.set is ChebyshevBasis(3)
    d = D.apply([0, 0, 0, 1])
    y = np.linspace(0, 4, 11)
    x = (y - 2) / 2
    assert np.allclose(D.dest.evaluate_expansion(d, y), (12*x**2 - 3) / 2)


def test_mapped_fourier_derivative():
    """Test differentiation of a Fourier set on a longer period."""
    ms = rescale(FourierBasis(7), 0, 2)
    c = np.zeros(7)
    c[1] = 1
    D = planner.differentiation_operator(ms)
    y = np.linspace(0, 2, 9)
    assert np.allclose(D.dest.evaluate_expansion(D.apply(c), y), 1j*np.pi*np.exp(1j*np.pi*y))


def test_mapped_antiderivative_scaling():
    """Test antiderivatives under affine maps are scaled by the jacobian."""
    ms = rescale(ChebyshevBasis(2), 0, 4)
    A = planner.antidifferentiation_operator(ms)
    a = A.apply([0, 1])
    y = np.linspace(0, 4, 11)
    x = (y - 2) / 2
    assert np.allclose(A.dest.evaluate_expansion(a, y), x**2)


def test_nonlinear_map():
    """Test nonlinear maps support evaluation but not differentiation."""
    ms = MappedSet(ChebyshevBasis(4), FunctionMap(np.exp, np.log))
    y = np.exp(np.linspace(-0.9, 0.9, 5))
    c = np.array([1, 2, 3, 4])
    values = planner.evaluation_operator(ms, y).apply(c)
    assert np.allclose(values, np.polynomial.chebyshev.chebval(np.log(y), c))
    with pytest.raises(NonlinearMapError):
        planner.differentiation_operator(ms)
    with pytest.raises(NonlinearMapError):
        planner.antidifferentiation_operator(ms)


def test_inverted_linear_function_map():
    """Test differentiation under the inverse of a linear map given by callables."""
    f = FunctionMap(lambda x: 3*x + 1, lambda y: (y - 1) / 3, jacobian=lambda x: 3 + 0*x, linear=True)
    g = f.inv()
    assert g.is_linear
    assert np.allclose(g.jacobian(), 1/3)
    ms = MappedSet(ChebyshevBasis(4), g)
    D = planner.differentiation_operator(ms)
    d = D.apply([0, 0, 0, 1])
    y = np.array([-0.5, -0.3, -0.1])
    x = 3*y + 1
    assert np.allclose(D.dest.evaluate_expansion(d, y), 3 * (12*x**2 - 3))


@pytest.mark.parametrize('seed', seeds)
def test_mapped_resizing(seed):
    """Test extension and restriction between equally mapped sets."""
    small = rescale(ChebyshevBasis(4), 0, 2)
    large = small.resize(7)
    assert large.set is ChebyshevBasis(7)
    c = random_coeffs(small, seed)
    e = planner.extension_operator(small, large).apply(c)
    y = np.linspace(0, 2, 7)
    assert np.allclose(large.evaluate_expansion(e, y), small.evaluate_expansion(c, y))
    assert np.allclose(planner.restriction_operator(large, small).apply(e), c)


def test_incompatible_maps():
    """Test operators between differently mapped sets are rejected."""
    small = rescale(ChebyshevBasis(4), 0, 2)
    with pytest.raises(IncompatibleMapError):
        planner.extension_operator(small, rescale(ChebyshevBasis(7), 0, 4))
    with pytest.raises(IncompatibleMapError):
        planner.extension_operator(small, ChebyshevBasis(7))
