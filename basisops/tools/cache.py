"""
Tools for caching computations.

"""

import inspect
import types
from weakref import WeakValueDictionary


class CachedAttribute:
    """Descriptor for building attributes during first access."""

    def __init__(self, method):
        self.method = method
        self.__name__ = method.__name__
        self.__doc__ = method.__doc__

    def __get__(self, instance, owner):
        if instance is None:
            return self
        # Store result on the instance, shadowing the descriptor
        attribute = self.method(instance)
        setattr(instance, self.__name__, attribute)
        return attribute


class CachedMethod:
    """Descriptor for caching method outputs per instance."""

    def __init__(self, function):
        self.function = function
        self.__name__ = function.__name__
        self.__doc__ = function.__doc__
        self.cache = {}

    def __call__(self, *args):
        try:
            return self.cache[args]
        except KeyError:
            result = self.cache[args] = self.function(*args)
            return result

    def __get__(self, instance, owner):
        if instance is None:
            return self
        # Bind a fresh cache to the instance so it is freed along with it
        bound_method = types.MethodType(CachedMethod(self.function), instance)
        setattr(instance, self.__name__, bound_method)
        return bound_method


class CachedClass(type):
    """Metaclass for caching instantiation."""

    def __init__(cls, *args, **kw):
        super().__init__(*args, **kw)
        # Cache instances using weakrefs
        cls._instance_cache = WeakValueDictionary()
        cls._signature = inspect.signature(cls.__init__)

    def __call__(cls, *args, **kw):
        # Build full call from class signature
        call = cls._signature.bind(None, *args, **kw)
        call.apply_defaults()
        if call.kwargs:
            raise ValueError("Required keyword arguments not supported.")
        full_args = cls._preprocess_cache_args(*call.args[1:])
        if full_args not in cls._instance_cache:
            # Bind to local variable so weakref persists until return
            cls._instance_cache[full_args] = instance = super().__call__(*full_args)
        return cls._instance_cache[full_args]

    def _preprocess_cache_args(cls, *args):
        """Process call prior to checking cache."""
        return args
