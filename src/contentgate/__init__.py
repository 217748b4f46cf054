"""Content-availability gate: decide once, then keep the destination fresh."""

from .workflows import *  # noqa: F401,F403
from .workflows import __all__ as _workflow_exports

__version__ = "0.1.0"

__all__ = list(_workflow_exports) + ["__version__"]
