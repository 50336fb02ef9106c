"""
Coordinate maps between intervals.

"""

import numpy as np


__all__ = ['AffineMap',
           'IdentityMap',
           'FunctionMap',
           'interval_map',
           'scaling_map',
           'translation']


class Map:
    """Abstract base class for invertible one-dimensional coordinate maps."""

    is_linear = False

    def __call__(self, x):
        return self.forward(x)

    def forward(self, x):
        raise NotImplementedError("%s has not implemented 'forward' method" %type(self))

    def inverse_map(self, y):
        raise NotImplementedError("%s has not implemented 'inverse_map' method" %type(self))

    def inv(self):
        """Inverse map."""
        return FunctionMap(self.inverse_map, self.forward,
                           jacobian=lambda y: 1 / self.jacobian(self.inverse_map(y)),
                           linear=self.is_linear)

    def jacobian(self, x=None):
        raise NotImplementedError("%s has not implemented 'jacobian' method" %type(self))

    def __mul__(self, other):
        """Composition: (self * other)(x) == self(other(x))."""
        if not isinstance(other, Map):
            return NotImplemented
        return FunctionMap(lambda x: self.forward(other.forward(x)),
                           lambda y: other.inverse_map(self.inverse_map(y)),
                           jacobian=lambda x: self.jacobian(other.forward(x)) * other.jacobian(x),
                           linear=(self.is_linear and other.is_linear))


class AffineMap(Map):
    """
    Affine map y = a*x + b.

    Parameters
    ----------
    a : float
        Scale factor (nonzero).
    b : float
        Offset.
    """

    is_linear = True

    def __init__(self, a, b=0):
        if a == 0:
            raise ValueError("Affine map scale factor must be nonzero.")
        self.a = a
        self.b = b

    def forward(self, x):
        return self.a * np.asarray(x) + self.b

    def inverse_map(self, y):
        return (np.asarray(y) - self.b) / self.a

    def inv(self):
        return AffineMap(1 / self.a, -self.b / self.a)

    def jacobian(self, x=None):
        return self.a

    def __mul__(self, other):
        if isinstance(other, AffineMap):
            return AffineMap(self.a * other.a, self.a * other.b + self.b)
        return super().__mul__(other)

    def __eq__(self, other):
        if isinstance(other, AffineMap):
            return bool(np.isclose(self.a, other.a) and np.isclose(self.b, other.b))
        return NotImplemented

    def __hash__(self):
        # Equality holds within tolerance, so only the type is hashed
        return hash(AffineMap)

    def __repr__(self):
        return f"AffineMap({self.a}, {self.b})"


class IdentityMap(AffineMap):
    """Identity map y = x."""

    def __init__(self):
        super().__init__(1, 0)

    def forward(self, x):
        return np.asarray(x)

    def inverse_map(self, y):
        return np.asarray(y)

    def inv(self):
        return self

    def __mul__(self, other):
        if isinstance(other, Map):
            return other
        return NotImplemented

    def __repr__(self):
        return "IdentityMap()"


class FunctionMap(Map):
    """
    Map defined by forward and inverse callables.

    Parameters
    ----------
    forward : callable
        Forward map, vectorized over numpy arrays.
    inverse : callable
        Inverse map, vectorized over numpy arrays.
    jacobian : callable, optional
        Derivative of the forward map.
    linear : bool, optional
        Whether the map is affine (default: False).
    """

    def __init__(self, forward, inverse, jacobian=None, linear=False):
        self._forward = forward
        self._inverse = inverse
        self._jacobian = jacobian
        self.is_linear = linear

    def forward(self, x):
        return self._forward(np.asarray(x))

    def inverse_map(self, y):
        return self._inverse(np.asarray(y))

    def jacobian(self, x=None):
        if self._jacobian is None:
            raise NotImplementedError("Map jacobian was not provided.")
        # Linear maps have a constant jacobian
        if x is None and self.is_linear:
            x = 0.0
        return self._jacobian(x)

    def __repr__(self):
        return f"FunctionMap({self._forward}, {self._inverse})"


def interval_map(a, b, c, d):
    """Affine map taking [a, b] to [c, d]."""
    scale = (d - c) / (b - a)
    return AffineMap(scale, c - scale * a)


def scaling_map(scale):
    return AffineMap(scale, 0)


def translation(offset):
    return AffineMap(1, offset)
