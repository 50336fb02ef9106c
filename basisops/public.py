"""basisops public interface."""

# Import public interfaces from submodules
from .core.maps import *
from .core.grids import *
from .core.sets import *
from .core.gridspace import *
from .core.operators import *
from .core.planner import *
from .core.mapped import *
from .core.fourier import *
from .core.polynomials import *
from .core.tensor import *
from .core.concatenated import *
