"""Test operator algebra."""

import pytest
import numpy as np
from scipy import sparse
from basisops.core.polynomials import LegendreBasis
from basisops.core.operators import (IdentityOperator, ScalingOperator, ZeroOperator, DiagonalOperator,
                                     MatrixOperator, FunctionOperator, IndexRestrictionOperator,
                                     IndexExtensionOperator, WrappedOperator, CompositeOperator,
                                     TripleCompositeOperator, OperatorSum, compose, matrix, diagonal,
                                     inv_diagonal, apply_multiple)
from basisops.tools.exceptions import OperatorSizeError, SingularOperatorError, UnimplementedPrimitiveError


N_range = [3, 6]
dtype_range = [np.float64, np.complex128]


def random_array(shape, dtype, seed=0):
    rng = np.random.default_rng(seed)
    data = rng.standard_normal(shape)
    if np.issubdtype(dtype, np.complexfloating):
        data = data + 1j * rng.standard_normal(shape)
    return data.astype(dtype)


def random_matrix_operator(n_src, n_dest, dtype, seed=0):
    src = LegendreBasis(n_src, dtype)
    dest = LegendreBasis(n_dest, dtype)
    return MatrixOperator(src, dest, random_array((n_dest, n_src), dtype, seed))


def test_scaling_composition():
    """Test scaling by 2 after scaling by 3 collapses to scaling by 6."""
    b = LegendreBasis(4)
    op = ScalingOperator(b, 2) @ ScalingOperator(b, 3)
    assert isinstance(op, ScalingOperator)
    assert op.scalar == 6
    assert np.allclose(op.apply([1, 1, 1, 1]), [6, 6, 6, 6])


@pytest.mark.parametrize('N', N_range)
def test_identity_composes_away(N):
    """Test identities are dropped from compositions."""
    A = random_matrix_operator(N, N+1, np.float64)
    op = compose(IdentityOperator(A.dest), A, IdentityOperator(A.src))
    assert op is A


@pytest.mark.parametrize('N', N_range)
@pytest.mark.parametrize('dtype', dtype_range)
def test_composition_associativity(N, dtype):
    """Test nested and flat compositions agree with sequential application."""
    A = random_matrix_operator(N, N+1, dtype, seed=1)
    B = random_matrix_operator(N+1, N+2, dtype, seed=2)
    C = random_matrix_operator(N+2, N-1, dtype, seed=3)
    x = random_array(N, dtype, seed=4)
    expected = C.apply(B.apply(A.apply(x)))
    assert np.allclose(compose(C, compose(B, A)).apply(x), expected)
    assert np.allclose(compose(compose(C, B), A).apply(x), expected)
    assert np.allclose((C @ B @ A).apply(x), expected)
    assert isinstance(compose(C, B, A), TripleCompositeOperator)


@pytest.mark.parametrize('N', N_range)
def test_long_composition(N):
    """Test compositions of more than three operators."""
    ops = [random_matrix_operator(N, N, np.float64, seed=k) for k in range(5)]
    x = random_array(N, np.float64, seed=10)
    expected = x
    for op in ops:
        expected = op.apply(expected)
    assert np.allclose(compose(*ops[::-1]).apply(x), expected)


@pytest.mark.parametrize('N', N_range)
def test_composition_inplace_middle(N):
    """Test triple composition with an in-place middle operator."""
    A = random_matrix_operator(N, N+1, np.float64, seed=1)
    B = random_matrix_operator(N+1, N, np.float64, seed=2)
    D = DiagonalOperator(A.dest, np.arange(1, N+2))
    x = random_array(N, np.float64, seed=3)
    op = compose(B, D, A)
    assert isinstance(op, TripleCompositeOperator)
    expected = B.matrix @ (np.arange(1, N+2) * (A.matrix @ x))
    assert np.allclose(op.apply(x), expected)


@pytest.mark.parametrize('N', N_range)
def test_composition_complex_input(N):
    """Test real composite operators applied to complex data."""
    A = random_matrix_operator(N, N+1, np.float64, seed=1)
    B = random_matrix_operator(N+1, N, np.float64, seed=2)
    x = random_array(N, np.complex128, seed=3)
    op = compose(B, A)
    assert isinstance(op, CompositeOperator)
    assert np.allclose(op.apply(x), B.matrix @ A.matrix @ x)


def test_composition_size_mismatch():
    """Test composing operators with mismatched sizes fails immediately."""
    A = random_matrix_operator(3, 4, np.float64)
    B = random_matrix_operator(5, 2, np.float64)
    with pytest.raises(OperatorSizeError):
        compose(B, A)


def test_apply_size_mismatch():
    """Test applying to the wrong number of coefficients fails."""
    op = ScalingOperator(LegendreBasis(4), 2)
    with pytest.raises(OperatorSizeError):
        op.apply(np.ones(3))


@pytest.mark.parametrize('N', N_range)
@pytest.mark.parametrize('dtype', dtype_range)
def test_transpose_involution(N, dtype):
    """Test transposing twice recovers the operator."""
    A = random_matrix_operator(N, N+2, dtype)
    x = random_array(N, dtype, seed=1)
    assert np.allclose(A.T.T.apply(x), A.apply(x))
    assert np.allclose(A.T.to_matrix(), A.matrix.conj().T)


@pytest.mark.parametrize('N', N_range)
@pytest.mark.parametrize('dtype', dtype_range)
def test_inverse_involution(N, dtype):
    """Test inverting twice recovers the operator."""
    A = random_matrix_operator(N, N, dtype)
    A = MatrixOperator(A.src, A.dest, A.matrix + 2 * N * np.eye(N))
    x = random_array(N, dtype, seed=1)
    assert np.allclose(A.inverse().inverse().apply(x), A.apply(x))
    assert np.allclose(A.inverse().apply(A.apply(x)), x)


@pytest.mark.parametrize('N', N_range)
def test_sparse_inverse(N):
    """Test sparse matrix operators solve by LU factorization."""
    b = LegendreBasis(N)
    M = sparse.diags([np.ones(N-1), 4*np.ones(N), np.ones(N-1)], [-1, 0, 1], format='csr')
    A = MatrixOperator(b, b, M)
    x = random_array(N, np.complex128, seed=1)
    assert np.allclose(A.inverse().apply(A.apply(x)), x)


@pytest.mark.parametrize('N', N_range)
def test_composite_transpose_inverse(N):
    """Test transposes and inverses of composites reverse the order."""
    A = random_matrix_operator(N, N, np.float64, seed=1)
    B = random_matrix_operator(N, N, np.float64, seed=2)
    A = MatrixOperator(A.src, A.dest, A.matrix + 2 * N * np.eye(N))
    B = MatrixOperator(B.src, B.dest, B.matrix + 2 * N * np.eye(N))
    op = B @ A
    assert np.allclose(op.T.to_matrix(), (B.matrix @ A.matrix).T)
    assert np.allclose(op.inverse().to_matrix(), np.linalg.inv(B.matrix @ A.matrix))


@pytest.mark.parametrize('N', N_range)
def test_lazy_transpose_failure(N):
    """Test missing transpose primitives fail at apply, not construction."""
    b = LegendreBasis(N)
    op = FunctionOperator(b, b, lambda x: 2*x)
    T = op.transpose()
    assert T.shape == (N, N)
    with pytest.raises(UnimplementedPrimitiveError):
        T.apply(np.ones(N))


@pytest.mark.parametrize('N', N_range)
def test_lazy_inverse_failure(N):
    """Test missing inverse primitives fail at apply, not construction."""
    b = LegendreBasis(N)
    op = FunctionOperator(b, b, lambda x: 2*x, transpose=lambda x: 2*x)
    I = op.inverse()
    with pytest.raises(UnimplementedPrimitiveError):
        I.apply(np.ones(N))
    assert np.allclose(op.T.apply(np.ones(N)), 2)


@pytest.mark.parametrize('N', N_range)
def test_function_operator_inverse(N):
    """Test function operators with supplied inverse primitives."""
    b = LegendreBasis(N)
    op = FunctionOperator(b, b, lambda x: 2*x, inverse=lambda x: x/2)
    x = random_array(N, np.float64)
    assert np.allclose(op.inverse().apply(op.apply(x)), x)


def test_scaling_zero_inverse():
    """Test inverting a zero scaling fails."""
    op = ScalingOperator(LegendreBasis(3), 0)
    with pytest.raises(SingularOperatorError):
        op.inverse()


def test_scaling_transpose_conjugates():
    """Test scaling transposes conjugate the scalar."""
    b = LegendreBasis(3, np.complex128)
    op = ScalingOperator(b, 1+2j)
    assert np.allclose(op.T.apply(np.ones(3)), 1-2j)


def test_diagonal_pseudo_inverse():
    """Test diagonal inverses keep zero entries at zero."""
    op = DiagonalOperator(LegendreBasis(4), [1, 2, 0, 4])
    assert np.allclose(op.inverse().apply(np.ones(4)), [1, 0.5, 0, 0.25])
    assert np.allclose(inv_diagonal(op).apply(np.ones(4)), [1, 0.5, 0, 0.25])


@pytest.mark.parametrize('N', N_range)
def test_diagonal_extraction(N):
    """Test extracted diagonals agree with unit vector probes."""
    b = LegendreBasis(N)
    op = compose(ScalingOperator(b, 3), DiagonalOperator(b, np.arange(N) - 1.5))
    assert op.is_diagonal
    d = diagonal(op)
    for i in range(N):
        e = np.zeros(N)
        e[i] = 1
        assert np.allclose(d[i], op.apply(e)[i])


@pytest.mark.parametrize('N', N_range)
def test_diagonal_of_dense(N):
    """Test diagonals of non-diagonal operators are probed element by element."""
    A = random_matrix_operator(N, N, np.float64)
    assert not A.is_diagonal
    assert np.allclose(diagonal(A), np.diag(A.matrix))
    with pytest.raises(ValueError):
        inv_diagonal(A)


@pytest.mark.parametrize('N', N_range)
@pytest.mark.parametrize('dtype', dtype_range)
def test_sum(N, dtype):
    """Test sums and differences of operators."""
    A = random_matrix_operator(N, N+1, dtype, seed=1)
    B = random_matrix_operator(N, N+1, dtype, seed=2)
    x = random_array(N, dtype, seed=3)
    assert np.allclose((A + B).apply(x), A.matrix @ x + B.matrix @ x)
    assert np.allclose((A - B).apply(x), A.matrix @ x - B.matrix @ x)
    assert np.allclose((A - B).T.to_matrix(), (A.matrix - B.matrix).conj().T)


@pytest.mark.parametrize('N', N_range)
def test_sum_with_scaling(N):
    """Test sums with scaling operands."""
    A = random_matrix_operator(N, N, np.float64, seed=1)
    S = ScalingOperator(A.src, 2)
    x = random_array(N, np.float64, seed=2)
    assert np.allclose((A + S).apply(x), A.matrix @ x + 2*x)
    assert np.allclose((S - A).apply(x), 2*x - A.matrix @ x)
    assert np.allclose((S + ScalingOperator(A.src, 3)).apply(x), 5*x)


@pytest.mark.parametrize('N', N_range)
def test_scalar_multiplication(N):
    """Test scalar multiples and negation of operators."""
    A = random_matrix_operator(N, N+1, np.float64)
    x = random_array(N, np.float64, seed=1)
    assert np.allclose((2 * A).apply(x), 2 * A.matrix @ x)
    assert np.allclose((A * 2).apply(x), 2 * A.matrix @ x)
    assert np.allclose((-A).apply(x), -A.matrix @ x)


@pytest.mark.parametrize('N', N_range)
def test_matrix_materialization(N):
    """Test dense materialization by unit vector probes."""
    A = random_matrix_operator(N, N+1, np.float64, seed=1)
    B = random_matrix_operator(N+1, N, np.float64, seed=2)
    assert np.allclose(matrix(B @ A), B.matrix @ A.matrix)
    assert np.allclose((B @ A)[1, 2], (B.matrix @ A.matrix)[1, 2])
    with pytest.raises(IndexError):
        (B @ A)[N, 0]


@pytest.mark.parametrize('N', N_range)
def test_index_operators(N):
    """Test index restriction and extension are transposes."""
    big = LegendreBasis(N+3)
    small = LegendreBasis(N)
    indices = np.arange(N) + 2
    R = IndexRestrictionOperator(big, small, indices)
    E = IndexExtensionOperator(small, big, indices)
    assert np.allclose(R.to_matrix(), E.to_matrix().T)
    assert np.allclose(R.T.to_matrix(), E.to_matrix())
    x = random_array(N, np.float64)
    assert np.allclose((R @ E).apply(x), x)


@pytest.mark.parametrize('N', N_range)
def test_wrapped_and_zero(N):
    """Test wrapped operators relabel sets and zero operators vanish."""
    A = random_matrix_operator(N, N, np.float64)
    src = LegendreBasis(N, np.complex128)
    W = WrappedOperator(src, A.dest, A)
    x = random_array(N, np.float64, seed=1)
    assert W.src is src
    assert np.allclose(W.apply(x), A.apply(x))
    Z = ZeroOperator(A.src, LegendreBasis(N+2))
    assert np.allclose(Z.apply(x), 0)
    assert Z.T.shape == (N, N+2)


@pytest.mark.parametrize('N', N_range)
def test_apply_multiple(N):
    """Test applying operators to columns of an array."""
    A = random_matrix_operator(N, N+1, np.float64)
    X = random_array((N, 4), np.float64, seed=1)
    assert np.allclose(apply_multiple(A, X), A.matrix @ X)


def test_operator_sum_shape_mismatch():
    """Test adding operators of different shapes fails."""
    A = random_matrix_operator(3, 4, np.float64)
    B = random_matrix_operator(4, 3, np.float64)
    with pytest.raises(OperatorSizeError):
        OperatorSum(A, B)
