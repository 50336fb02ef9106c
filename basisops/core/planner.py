"""
Planning of evaluation, transform, and resizing operators between sets.

Evaluation of a set on a grid is planned by an ordered sequence of capability
checks, each producing a strategy tag:

    MATCHING_TRANSFORM      the set has a fast transform to the grid
    NEEDS_EXTENSION         a larger set of the same family has one
    NEEDS_SUBGRID_DETOUR    the grid is a sub-grid of a grid like the set's own
    DENSE                   evaluate every element at every point

The first applicable strategy wins. Requests involving mapped sets are first
unwrapped to the equivalent request between unmapped sets.

"""

import enum
import numpy as np

from .grids import Grid, IndexSubGrid, ScatteredGrid
from .gridspace import GridSpace, gridspace
from .mapped import MappedSet, unwrap_operator, mapped_differentiation, mapped_antidifferentiation
from .operators import Operator, MatrixOperator, IndexRestrictionOperator, OperatorTranspose, compose
from ..tools.cache import CachedAttribute
from ..tools.config import config
from ..tools.exceptions import CapabilityError

import logging
logger = logging.getLogger(__name__.split('.')[-1])

GET_EXTENSION_DETOUR = lambda: config['planning'].getboolean('EXTENSION_DETOUR')
GET_SUBGRID_DETOUR = lambda: config['planning'].getboolean('SUBGRID_DETOUR')
GET_SUBGRID_COST_FACTOR = lambda: config['planning'].getfloat('SUBGRID_COST_FACTOR')


__all__ = ['EvaluationStrategy',
           'evaluation_matrix',
           'evaluation_operator',
           'grid_evaluation_operator',
           'default_evaluation_operator',
           'plan_evaluation',
           'transform_operator',
           'grid_transform_operator',
           'plan_transform',
           'full_transform_operator',
           'interpolation_operator',
           'extension_operator',
           'restriction_operator',
           'differentiation_operator',
           'antidifferentiation_operator']


class EvaluationStrategy(enum.Enum):
    """Constructions available to the planner, in order of preference."""
    MATCHING_TRANSFORM = 1
    NEEDS_EXTENSION = 2
    NEEDS_SUBGRID_DETOUR = 3
    DENSE = 4


def _is_mapped(*sets):
    return any(isinstance(s, MappedSet) for s in sets)


def _as_gridspace(grid, dtype):
    """Wrap grids, grid spaces, and arrays of points as grid spaces."""
    if isinstance(grid, GridSpace):
        return grid
    if not isinstance(grid, Grid):
        grid = ScatteredGrid(grid)
    return gridspace(grid, dtype)


def _resized_for(s, gs):
    """Same-family set sized for a grid space, or None if it cannot grow to it."""
    if s.dim == 1:
        return s.resize(s.approx_length(len(gs)))
    if s.dim != len(gs.shape):
        return None
    shape = s.approx_length(gs.shape)
    if any(n < m for n, m in zip(shape, s.shape)):
        return None
    return s.resize(shape)


def _subgrid_for(s, grid):
    """Express a grid as a sub-grid suited to the set, or None."""
    if isinstance(grid, IndexSubGrid):
        return grid
    return s.embed_grid(grid)


def _subgrid_is_cheap(src, dgs, subgrid):
    """Compare the supergrid evaluation cost against a dense evaluation."""
    M = len(subgrid.supergrid)
    return M * np.log2(max(M, 2)) <= GET_SUBGRID_COST_FACTOR() * len(src) * len(dgs)


## Evaluation

def evaluation_matrix(s, grid):
    """
    Dense matrix of all elements of a set evaluated at all points of a grid.

    Parameters
    ----------
    s : FunctionSet
        Set to evaluate.
    grid : Grid, GridSpace, or array-like
        Evaluation points.

    Returns
    -------
    Array of shape (len(grid), len(s)).
    """
    if isinstance(grid, GridSpace):
        grid = grid.grid()
    elif not isinstance(grid, Grid):
        grid = ScatteredGrid(grid)
    points = grid.points
    matrix = np.zeros((grid.size, len(s)), dtype=s.dtype)
    for i in range(len(s)):
        matrix[:, i] = np.reshape(s.evaluate(i, points), -1)
    return matrix


class DenseEvaluationOperator(MatrixOperator):
    """
    Evaluation by a dense matrix, built on first use.

    Parameters
    ----------
    src : FunctionSet
        Set to evaluate.
    dest : GridSpace
        Evaluation grid space.
    """

    def __init__(self, src, dest):
        Operator.__init__(self, src, dest)

    @CachedAttribute
    def matrix(self):
        """Evaluation matrix."""
        logger.debug("Building %i x %i evaluation matrix of %r" %(len(self.dest), len(self.src), self.src))
        return evaluation_matrix(self.src, self.dest)

    @property
    def dtype(self):
        return np.result_type(self.src.dtype, self.dest.dtype)

    def transpose(self):
        return OperatorTranspose(self)


def plan_evaluation(src, dgs):
    """
    Choose the construction for evaluating a set on a grid space.

    Returns
    -------
    strategy : EvaluationStrategy
        Chosen strategy tag.
    detail : FunctionSet, IndexSubGrid, or None
        Resized set for extensions, sub-grid for sub-grid detours.
    """
    if src.has_transform(dgs):
        return EvaluationStrategy.MATCHING_TRANSFORM, None
    if GET_EXTENSION_DETOUR() and src.has_extension and (len(src) < len(dgs)):
        larger = _resized_for(src, dgs)
        if (larger is not None) and larger.has_transform(dgs):
            return EvaluationStrategy.NEEDS_EXTENSION, larger
    if GET_SUBGRID_DETOUR() and src.has_grid:
        subgrid = _subgrid_for(src, dgs.grid())
        if ((subgrid is not None) and (type(src.grid()) is type(subgrid.supergrid))
                and _subgrid_is_cheap(src, dgs, subgrid)):
            return EvaluationStrategy.NEEDS_SUBGRID_DETOUR, subgrid
    return EvaluationStrategy.DENSE, None


def _matching_transform(src, dgs, detail):
    return src.transform_to_grid(dgs)


def _extension_detour(src, dgs, larger):
    return compose(larger.transform_to_grid(dgs), extension_operator(src, larger))


def _subgrid_detour(src, dgs, subgrid):
    super_dgs = GridSpace(subgrid.supergrid, dgs.dtype)
    E = grid_evaluation_operator(src, super_dgs)
    R = IndexRestrictionOperator(super_dgs, dgs, subgrid.indices)
    return compose(R, E)


def _dense_evaluation(src, dgs, detail):
    return default_evaluation_operator(src, dgs)


_evaluation_builders = {EvaluationStrategy.MATCHING_TRANSFORM: _matching_transform,
                        EvaluationStrategy.NEEDS_EXTENSION: _extension_detour,
                        EvaluationStrategy.NEEDS_SUBGRID_DETOUR: _subgrid_detour,
                        EvaluationStrategy.DENSE: _dense_evaluation}


def grid_evaluation_operator(src, dgs):
    """Operator evaluating expansions in a set on a grid space, by the cheapest available construction."""
    if _is_mapped(src, dgs):
        return unwrap_operator(grid_evaluation_operator, src, dgs)
    strategy, detail = plan_evaluation(src, dgs)
    logger.debug("Evaluation of %r on %r: %s" %(src, dgs.grid(), strategy.name))
    return _evaluation_builders[strategy](src, dgs, detail)


def evaluation_operator(src, grid=None):
    """
    Operator evaluating expansions in a set at grid points.

    Parameters
    ----------
    src : FunctionSet
        Source set.
    grid : Grid, GridSpace, or array-like, optional
        Evaluation points (default: native grid of the set).
    """
    if grid is None:
        grid = src.grid()
    return grid_evaluation_operator(src, _as_gridspace(grid, src.dtype))


def default_evaluation_operator(src, grid):
    """Dense evaluation operator, without looking for fast paths."""
    return DenseEvaluationOperator(src, _as_gridspace(grid, src.dtype))


## Transforms

def plan_transform(sgs, dest):
    """
    Choose the construction for computing coefficients from grid values.

    Returns
    -------
    strategy : EvaluationStrategy
        MATCHING_TRANSFORM, NEEDS_EXTENSION, or DENSE.
    detail : FunctionSet or None
        Resized set for extensions.
    """
    if dest.has_transform(sgs):
        return EvaluationStrategy.MATCHING_TRANSFORM, None
    if GET_EXTENSION_DETOUR() and dest.has_extension and (len(dest) < len(sgs)):
        larger = _resized_for(dest, sgs)
        if (larger is not None) and larger.has_transform(sgs):
            return EvaluationStrategy.NEEDS_EXTENSION, larger
    return EvaluationStrategy.DENSE, None


def _dense_transform(sgs, dest):
    E = evaluation_matrix(dest, sgs)
    if E.shape[0] == E.shape[1]:
        return MatrixOperator(dest, sgs, E).inverse()
    # Least squares for rectangular systems
    return MatrixOperator(sgs, dest, np.linalg.pinv(E))


def grid_transform_operator(sgs, dest):
    """Operator computing coefficients in a set from values on a grid space."""
    if _is_mapped(sgs, dest):
        return unwrap_operator(grid_transform_operator, sgs, dest)
    strategy, detail = plan_transform(sgs, dest)
    logger.debug("Transform from %r to %r: %s" %(sgs.grid(), dest, strategy.name))
    if strategy is EvaluationStrategy.MATCHING_TRANSFORM:
        return dest.transform_from_grid(sgs)
    elif strategy is EvaluationStrategy.NEEDS_EXTENSION:
        return compose(restriction_operator(detail, dest), detail.transform_from_grid(sgs))
    else:
        return _dense_transform(sgs, dest)


def transform_operator(src, dest):
    """
    Transform between a set and a grid, in either direction.

    Grids and grid spaces as destination give evaluation operators; as
    source they give operators computing coefficients from grid values.
    """
    if isinstance(dest, (Grid, GridSpace)):
        return evaluation_operator(src, dest)
    if isinstance(src, (Grid, GridSpace)):
        return grid_transform_operator(_as_gridspace(src, dest.dtype), dest)
    raise ValueError("Transforms require a grid or grid space on one side, got %r and %r." %(src, dest))


def full_transform_operator(s, grid=None):
    """Fast backward transform of a set to a compatible grid (default: its native grid)."""
    if grid is None:
        grid = s.grid()
    dgs = _as_gridspace(grid, s.dtype)
    if _is_mapped(s, dgs):
        return unwrap_operator(full_transform_operator, s, dgs)
    return s.transform_to_grid(dgs)


def interpolation_operator(s, grid=None):
    """Operator computing coefficients interpolating values on a grid (default: native grid)."""
    if grid is None:
        grid = s.grid()
    return grid_transform_operator(_as_gridspace(grid, s.dtype), s)


## Resizing and calculus

def extension_operator(src, dest):
    """Extension of coefficients to a larger set of the same family."""
    if _is_mapped(src, dest):
        return unwrap_operator(extension_operator, src, dest)
    if not src.has_extension:
        raise CapabilityError("%r does not support extension." %src)
    return src.extension_to(dest)


def restriction_operator(src, dest):
    """Restriction of coefficients to a smaller set of the same family."""
    if _is_mapped(src, dest):
        return unwrap_operator(restriction_operator, src, dest)
    if not src.has_extension:
        raise CapabilityError("%r does not support restriction." %src)
    return src.restriction_to(dest)


def differentiation_operator(src, dest=None, order=1):
    """
    Differentiation of expansions in a set.

    Parameters
    ----------
    src : FunctionSet
        Source set.
    dest : FunctionSet, optional
        Destination set (default: src.derivative_set(order)).
    order : int or tuple of ints, optional
        Derivative order, per dimension for tensor products (default: 1).
    """
    dset = src.derivative_set(order)
    if dest is None:
        dest = dset
    if _is_mapped(src, dest):
        return mapped_differentiation(differentiation_operator, src, dest, order)
    return src.differentiation_to(dest, order)


def antidifferentiation_operator(src, dest=None, order=1):
    """Antidifferentiation of expansions in a set, vanishing at the origin."""
    aset = src.antiderivative_set(order)
    if dest is None:
        dest = aset
    if _is_mapped(src, dest):
        return mapped_antidifferentiation(antidifferentiation_operator, src, dest, order)
    return src.antidifferentiation_to(dest, order)
