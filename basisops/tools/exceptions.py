"""
Custom exception classes.

"""


class OperatorSizeError(ValueError):
    """Exceptions for coefficient arrays or operands with mismatched sizes."""
    pass

class NonlinearMapError(Exception):
    """Exceptions for derivatives requested under non-linear maps."""
    pass

class CapabilityError(Exception):
    """Exceptions for primitives requested from sets lacking the capability."""
    pass

class UnimplementedPrimitiveError(NotImplementedError):
    """Exceptions for operators applied without a transposed, inverse, or in-place primitive."""
    pass

class SingularOperatorError(ZeroDivisionError):
    """Exceptions for inverting operators that are exactly singular."""
    pass

class IncompatibleMapError(ValueError):
    """Exceptions for operator requests between sets under different maps."""
    pass
