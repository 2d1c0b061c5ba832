__title__ = 'wayfinder'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .arguments import *
from .commands import *
from .faults import *
from .distance import *
from .resolver import *
from .parser import *
from .validator import *
from .logger import *
from .helper import *
from .engine import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the declarations
__all__ += arguments.__all__  # type: ignore[attr-defined]
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatch pipeline
__all__ += distance.__all__  # type: ignore[attr-defined]
__all__ += resolver.__all__  # type: ignore[attr-defined]
__all__ += parser.__all__  # type: ignore[attr-defined]
__all__ += validator.__all__  # type: ignore[attr-defined]
__all__ += logger.__all__  # type: ignore[attr-defined]
__all__ += helper.__all__  # type: ignore[attr-defined]
__all__ += engine.__all__  # type: ignore[attr-defined]
