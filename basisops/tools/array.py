"""Tools for array manipulations."""

import numpy as np
from scipy import sparse


def reshape_vector(data, dim=2, axis=-1):
    """Reshape 1-dim array as a multidimensional vector."""
    shape = [1] * dim
    shape[axis] = data.size
    return data.reshape(shape)


def axindex(axis, index):
    """Index array along specified axis."""
    if axis < 0:
        raise ValueError("`axis` must be positive")
    # Add empty slices for leading axes
    return (slice(None),)*axis + (index,)


def axslice(axis, start, stop, step=None):
    """Slice array along a specified axis."""
    return axindex(axis, slice(start, stop, step))


def move_single_axis(a, source, destination):
    """Similar to np.moveaxis but faster for just a single axis."""
    order = [n for n in range(a.ndim) if n != source]
    order.insert(destination, source)
    return a.transpose(order)


def apply_matrix(matrix, array, axis, out=None):
    """Apply dense or sparse matrix along any axis of an array."""
    dim = array.ndim
    axis = axis % dim
    # Move axis to 0 and flatten later axes
    if axis != 0:
        array = move_single_axis(array, axis, 0)
    array_shape = array.shape
    if dim > 2:
        array = array.reshape((array_shape[0], -1))
    # Sparse matrices only support the matmul operator
    if sparse.issparse(matrix):
        temp = matrix @ array
    else:
        temp = np.matmul(matrix, array)
    temp = np.asarray(temp)
    # Restore later axes and axis position
    if dim > 2:
        temp = temp.reshape((temp.shape[0],) + array_shape[1:])
    if axis != 0:
        temp = move_single_axis(temp, 0, axis)
    if out is None:
        return temp
    else:
        out[:] = temp
        return out


def apply_along_axis(function, array, axis):
    """Apply a vector function to every 1D slice of an array along an axis."""
    array = move_single_axis(array, axis, array.ndim-1)
    lead_shape = array.shape[:-1]
    flat = array.reshape((-1, array.shape[-1]))
    results = [function(vector) for vector in flat]
    temp = np.array(results).reshape(lead_shape + (-1,))
    return move_single_axis(temp, temp.ndim-1, axis)


def real_view_apply(function, data, *args, **kw):
    """Apply a real-to-real function to real and imaginary parts separately."""
    if np.iscomplexobj(data):
        return function(data.real, *args, **kw) + 1j * function(data.imag, *args, **kw)
    else:
        return function(data, *args, **kw)
