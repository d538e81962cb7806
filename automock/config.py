"""Central configuration for automock.

This module is the single source of truth for the constants that shape how
targets are wrapped and overridden. Never hardcode these values elsewhere.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Member classification
# ---------------------------------------------------------------------------

# Values of these types are returned unwrapped: there is nothing on them to
# intercept, and wrapping them would break comparisons in test code.
PRIMITIVE_TYPES: Final[tuple[type, ...]] = (
    str,
    bytes,
    int,
    float,
    complex,
    bool,
    type(None),
)

# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

# Name used for a wrapper whose target has no ``__name__``.
DEFAULT_NAME: Final[str] = "<automock>"

# Appended to a wrapper's name to name the proxy its calls return,
# e.g. ``blessed.form`` -> ``blessed.form()``.
RESULT_SUFFIX: Final[str] = "()"

# Attributes a proxy owns itself; they never resolve through the target.
RESERVED_MEMBERS: Final[frozenset[str]] = frozenset({"mock"})

# ---------------------------------------------------------------------------
# Module overrides
# ---------------------------------------------------------------------------

# Name of the PEP 562 hook installed on overridden module objects.
MODULE_GETATTR: Final[str] = "__getattr__"

# ---------------------------------------------------------------------------
# pytest integration
# ---------------------------------------------------------------------------

INI_MODULES_OPTION: Final[str] = "automock_modules"
MARKER_NAME: Final[str] = "override_modules"
