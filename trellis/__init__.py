__title__ = 'trellis'
__author__ = 'Trellis contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .values import *
from .inputs import *
from .faults import *
from .output import *
from .completion import *
from .usage import *
from .graph import *
from .engine import *
from .processors import *
from .arguments import *
from .validators import *
from .flags import *
from .shell import *
from .cache import *
from .alias import *
from .files import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the values
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the inputs
__all__ += inputs.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the outputs
__all__ += output.__all__  # type: ignore[attr-defined]
# Load the exposed API of the completions
__all__ += completion.__all__  # type: ignore[attr-defined]
# Load the exposed API of the usage
__all__ += usage.__all__  # type: ignore[attr-defined]
# Load the exposed API of the graph
__all__ += graph.__all__  # type: ignore[attr-defined]
# Load the exposed API of the engines
__all__ += engine.__all__  # type: ignore[attr-defined]
# Load the exposed API of the processors
__all__ += processors.__all__  # type: ignore[attr-defined]
# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the validators
__all__ += validators.__all__  # type: ignore[attr-defined]
# Load the exposed API of the flags
__all__ += flags.__all__  # type: ignore[attr-defined]
# Load the exposed API of the shell commands
__all__ += shell.__all__  # type: ignore[attr-defined]
# Load the exposed API of the cache
__all__ += cache.__all__  # type: ignore[attr-defined]
# Load the exposed API of the aliases
__all__ += alias.__all__  # type: ignore[attr-defined]
# Load the exposed API of the file arguments
__all__ += files.__all__  # type: ignore[attr-defined]
